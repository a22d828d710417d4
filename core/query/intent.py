# Path: core/query/intent.py
# Purpose: Label free-text queries with a search intent.
# Layer: core/query.
# Details: Ordered rule list; the first rule whose phrase occurs wins.

from __future__ import annotations

import re
from typing import Iterable, List, Optional, Pattern, Sequence, Tuple

from core.models.domain import Intent

INTENT_RULES: Tuple[Tuple[Intent, Tuple[str, ...]], ...] = (
    (Intent.SEARCH_ARTIST, ("artist", "artists", "painted by", "created by", "made by", "works by", "painter")),
    (Intent.SEARCH_CATALOGUE, ("catalogue", "catalogues", "catalog", "collection", "collections", "portfolio")),
    (Intent.DISCOVER_SIMILAR, ("similar", "like this", "matching", "resembling", "reminds me of")),
    (Intent.FIND_BY_STYLE, ("style", "styles", "manner", "technique", "techniques", "in the vein of")),
    (Intent.FIND_BY_MOOD, ("mood", "feeling", "feel", "emotion", "emotional", "vibe", "atmosphere")),
)


class IntentClassifier:
    """Deterministic rule-based intent classifier."""

    def __init__(self, rules: Optional[Sequence[Tuple[Intent, Iterable[str]]]] = None) -> None:
        self._rules: List[Tuple[Intent, Pattern[str]]] = []
        for intent, phrases in rules or INTENT_RULES:
            alternatives = "|".join(re.escape(phrase) for phrase in phrases)
            self._rules.append((intent, re.compile(rf"\b(?:{alternatives})\b")))

    def classify(self, query: object) -> Intent:
        if not isinstance(query, str):
            return Intent.SEARCH_ARTWORK
        text = query.lower()
        for intent, pattern in self._rules:
            if pattern.search(text):
                return intent
        return Intent.SEARCH_ARTWORK
