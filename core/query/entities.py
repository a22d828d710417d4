# Path: core/query/entities.py
# Purpose: Turn free-text art queries into structured QueryEntities.
# Layer: core/query.
# Details: Pure and total; unmatched patterns simply leave the corresponding field empty.

from __future__ import annotations

import logging
import re
from typing import List, Optional, Pattern, Tuple

from core.models.domain import PriceRange, QueryEntities, TimePeriod

from .vocabulary import DEFAULT_VOCABULARY, Vocabulary

_LOGGER = logging.getLogger(__name__)

_NUMBER = r"(\d{1,3}(?:,\d{3})+|\d+(?:\.\d+)?)"
_AMOUNT = _NUMBER + r"\s*(k)?\b"
_DASH = r"(?:-|–|to)"

# Ordered: ranges before bounds so "between $1k and $5k" is not read as a floor.
_RANGE_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(rf"\bbetween\s+\$\s*{_AMOUNT}\s+and\s+\$?\s*{_AMOUNT}"),
    re.compile(rf"\$\s*{_AMOUNT}\s*{_DASH}\s*\$?\s*{_AMOUNT}"),
    re.compile(rf"\b{_AMOUNT}\s*{_DASH}\s*{_AMOUNT}\s*(?:dollars?|usd)\b"),
)
_UPPER_PATTERN = re.compile(
    rf"\b(?:under|below|less\s+than|at\s+most|max(?:imum)?|budget(?:\s+of)?|up\s+to)\s+\$?\s*{_AMOUNT}"
)
_LOWER_PATTERN = re.compile(rf"\b(?:over|above|more\s+than|at\s+least|from)\s+\$\s*{_AMOUNT}")
_SINGLE_PATTERN = re.compile(rf"\b{_AMOUNT}\s*(?:dollars?|usd)\b")

_YEAR = r"(1[5-9]\d{2}|20\d{2})"
_YEAR_RANGE_PATTERN = re.compile(rf"\b{_YEAR}s?\s*(?:-|–|to|and|until)\s*{_YEAR}s?\b")
_YEAR_PATTERN = re.compile(rf"\b{_YEAR}s?\b")

DEFAULT_PERIOD_SPAN = 10


def _amount(number: str, suffix: Optional[str]) -> float:
    value = float(number.replace(",", ""))
    return value * 1000.0 if suffix else value


class EntityExtractor:
    """Extract mediums, genres, subjects, colors, moods, size, price and period from a query."""

    def __init__(self, vocabulary: Optional[Vocabulary] = None) -> None:
        self.vocabulary = vocabulary or DEFAULT_VOCABULARY
        self._synonym_patterns: List[Tuple[Pattern[str], str]] = [
            (re.compile(rf"\b{re.escape(synonym)}\b"), base)
            for base, synonyms in self.vocabulary.color_synonyms.items()
            for synonym in synonyms
        ]
        self._mood_patterns: List[Tuple[Pattern[str], str]] = [
            (re.compile(rf"\b{re.escape(word)}\b"), mood)
            for mood, words in self.vocabulary.moods.items()
            for word in words
        ]
        self._size_patterns: List[Tuple[Pattern[str], str]] = [
            (re.compile(rf"\b{re.escape(word)}\b"), size)
            for size, words in self.vocabulary.sizes.items()
            for word in words
        ]
        denied = sorted(self.vocabulary.deny_list, key=len, reverse=True)
        self._deny_pattern: Optional[Pattern[str]] = (
            re.compile(r"\b(?:" + "|".join(re.escape(word.lower()) for word in denied) + r")\b") if denied else None
        )

    def extract(self, query: object) -> QueryEntities:
        entities = QueryEntities()
        if not isinstance(query, str) or not query.strip():
            return entities

        text = query.lower()
        if self._deny_pattern is not None:
            text = self._deny_pattern.sub(" ", text)
        vocab = self.vocabulary

        entities.mediums = {term for term in vocab.mediums if term in text}
        entities.genres = {term for term in vocab.genres if term in text}
        entities.subjects = {term for term in vocab.subjects if term in text}
        entities.colors = {token for name, token in vocab.colors.items() if name in text}
        for pattern, base in self._synonym_patterns:
            if base in vocab.colors and pattern.search(text):
                entities.colors.add(vocab.colors[base])
        entities.moods = {mood for pattern, mood in self._mood_patterns if pattern.search(text)}
        for pattern, size in self._size_patterns:
            if pattern.search(text):
                entities.size = size
                break

        entities.price_range, remainder = self._extract_price(text)
        entities.time_period = self._extract_period(remainder)

        _LOGGER.debug("Extracted entities for %r: %s", query, entities.to_dict())
        return entities

    def _extract_price(self, text: str) -> Tuple[Optional[PriceRange], str]:
        """Return the first price expression found and the text with every price expression removed."""

        price: Optional[PriceRange] = None

        for pattern in _RANGE_PATTERNS:
            match = pattern.search(text)
            if match and price is None:
                low = _amount(match.group(1), match.group(2))
                high = _amount(match.group(3), match.group(4))
                low, high = min(low, high), max(low, high)
                price = PriceRange(min=low, max=high)

        if price is None:
            match = _UPPER_PATTERN.search(text)
            if match:
                price = PriceRange(min=0.0, max=_amount(match.group(1), match.group(2)))

        if price is None:
            match = _LOWER_PATTERN.search(text)
            if match:
                price = PriceRange(min=_amount(match.group(1), match.group(2)), max=None)

        if price is None:
            match = _SINGLE_PATTERN.search(text)
            if match:
                value = _amount(match.group(1), match.group(2))
                price = PriceRange(min=value, max=value * 2)

        remainder = text
        for pattern in (*_RANGE_PATTERNS, _UPPER_PATTERN, _LOWER_PATTERN, _SINGLE_PATTERN):
            remainder = pattern.sub(" ", remainder)
        remainder = re.sub(r"\$\s*[\d,.]+\s*k?", " ", remainder)
        return price, remainder

    @staticmethod
    def _extract_period(text: str) -> Optional[TimePeriod]:
        match = _YEAR_RANGE_PATTERN.search(text)
        if match:
            start, end = int(match.group(1)), int(match.group(2))
            return TimePeriod(start_year=min(start, end), end_year=max(start, end))
        match = _YEAR_PATTERN.search(text)
        if match:
            start = int(match.group(1))
            return TimePeriod(start_year=start, end_year=start + DEFAULT_PERIOD_SPAN)
        return None
