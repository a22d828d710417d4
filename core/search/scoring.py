# Path: core/search/scoring.py
# Purpose: Compute explainable additive relevance scores for search candidates.
# Layer: core/search.
# Details: Each signal contributes a fixed weight band from ScoringSettings and a short human-readable reason.

from __future__ import annotations

import math
import re
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional, Set, Union

from config.settings import ScoringSettings
from core.color.similarity import hex_to_color_name, hex_to_rgb
from core.models.domain import (
    Artist,
    Artwork,
    Catalogue,
    QueryEntities,
    ScoreBreakdown,
    ScoringOptions,
    finite_or_zero,
    utc_now,
)

Candidate = Union[Artwork, Artist, Catalogue]

_TOKEN_PATTERN = re.compile(r"[a-z0-9']+")


def price_fit(price: Optional[float], max_budget: float, low_price_threshold: float = 1000.0) -> float:
    """Return how well a price fits a budget, from 0 (outside) to 1 (free).

    A zero budget accepts only prices at or below ``low_price_threshold``.
    """

    if price is None or not math.isfinite(price) or price < 0:
        return 0.0
    if max_budget <= 0:
        return 1.0 if price <= low_price_threshold else 0.0
    return max(0.0, 1.0 - price / max_budget)


def tokenize(text: str, min_length: int = 1) -> List[str]:
    """Split text into lowercase tokens, keeping first occurrences in order."""

    seen: List[str] = []
    for token in _TOKEN_PATTERN.findall(text.lower()):
        if len(token) >= min_length and token not in seen:
            seen.append(token)
    return seen


@dataclass
class _CandidateView:
    """Uniform projection of artworks, artists and catalogues for scoring."""

    title: str
    description: str
    artist_name: str = ""
    price: Optional[float] = None
    attributes: Dict[str, Optional[str]] = field(default_factory=dict)
    colors: List[str] = field(default_factory=list)
    views: float = 0.0
    likes: float = 0.0
    created_at: Optional[datetime] = None

    @classmethod
    def of(cls, candidate: Candidate) -> "_CandidateView":
        if isinstance(candidate, Artwork):
            return cls(
                title=candidate.title or "",
                description=candidate.description or "",
                artist_name=candidate.artist_name or "",
                price=candidate.price,
                attributes={
                    "medium": candidate.medium,
                    "genre": candidate.genre,
                    "subject": candidate.subject,
                },
                colors=list(candidate.dominant_colors),
                views=candidate.view_count,
                likes=candidate.like_count,
                created_at=candidate.created_at,
            )
        if isinstance(candidate, Artist):
            return cls(
                title=candidate.name or "",
                description=candidate.bio or "",
                artist_name=candidate.name or "",
                views=candidate.follower_count,
                likes=candidate.artwork_count,
                created_at=candidate.created_at,
            )
        return cls(
            title=candidate.name or "",
            description=candidate.description or "",
            artist_name=candidate.artist_name or "",
            views=candidate.artwork_count,
            created_at=candidate.created_at,
        )


class RelevanceScorer:
    """Score a candidate against extracted entities and the raw query text."""

    def __init__(self, settings: Optional[ScoringSettings] = None) -> None:
        self.settings = settings or ScoringSettings()

    def price_fit(self, price: Optional[float], sensitivity: float) -> float:
        max_budget = sensitivity * self.settings.price_upper_bound
        return price_fit(price, max_budget, self.settings.low_price_threshold)

    def score(
        self,
        candidate: Candidate,
        query: QueryEntities,
        raw_query_text: str,
        options: Optional[ScoringOptions] = None,
    ) -> ScoreBreakdown:
        options = options or ScoringOptions()
        view = _CandidateView.of(candidate)
        reasons: List[str] = []
        total = 0.0

        total += self._text_match(view, raw_query_text or "", reasons)
        total += self._attribute_match(view, query, reasons)
        total += self._artist_match(view, raw_query_text or "", reasons)

        if view.price is not None:
            fit = self.price_fit(view.price, options.price_sensitivity)
            total += fit * self.settings.price_fit_weight
            if fit > self.settings.perfect_price_fit:
                reasons.append("Perfect price fit")

        raw_popularity = max(0.0, float(view.views) + float(view.likes) * self.settings.like_multiplier)
        popularity = min(self.settings.popularity_cap, raw_popularity / self.settings.popularity_scale)
        total += popularity
        if raw_popularity > self.settings.popular_reason_threshold:
            reasons.append("Popular with collectors")

        if self._is_recent(view.created_at, options.now):
            total += self.settings.recency_bonus
            reasons.append("Recently added")

        if options.discovery_mode > self.settings.discovery_threshold:
            boost = max(0.0, 1.0 - raw_popularity / 100.0) * options.discovery_mode * self.settings.discovery_weight
            total += boost
            if boost > self.settings.hidden_gem_threshold:
                reasons.append("Hidden gem for discovery")

        return ScoreBreakdown(score=finite_or_zero(total), reasons=reasons)

    def _text_match(self, view: _CandidateView, raw_query: str, reasons: List[str]) -> float:
        needle = raw_query.strip().lower()
        if not needle:
            return 0.0
        title = view.title.lower()
        description = view.description.lower()

        points = 0.0
        if needle in title:
            points += self.settings.title_match_bonus
            reasons.append("Matches your search terms")
        elif needle in description:
            points += self.settings.description_match_bonus
            reasons.append("Matches your search terms")

        tokens = tokenize(needle, self.settings.min_keyword_length)
        if len(tokens) > 1:
            haystack: Set[str] = set(tokenize(f"{title} {description}"))
            matched = [token for token in tokens if token in haystack]
            if matched:
                points += self.settings.keyword_bonus * len(matched)
                reasons.append(f"Keywords: {', '.join(matched)}")
        return points

    def _attribute_match(self, view: _CandidateView, query: QueryEntities, reasons: List[str]) -> float:
        points = 0.0
        for label, key, wanted in (
            ("medium", "medium", query.mediums),
            ("genre", "genre", query.genres),
            ("subject", "subject", query.subjects),
        ):
            value = (view.attributes.get(key) or "").lower()
            if not value:
                continue
            matched = sorted(term for term in wanted if term in value)
            if matched:
                points += self.settings.attribute_bonus * len(matched)
                reasons.append(f"Matches {label}: {', '.join(matched)}")

        candidate_names = {hex_to_color_name(color) for color in view.colors if hex_to_rgb(color) is not None}
        color_hits = 0
        for token in query.colors:
            if hex_to_rgb(token) is not None and hex_to_color_name(token) in candidate_names:
                color_hits += 1
        if color_hits:
            points += self.settings.attribute_bonus * color_hits
            reasons.append("Matches your color preferences")
        return points

    def _artist_match(self, view: _CandidateView, raw_query: str, reasons: List[str]) -> float:
        if not view.artist_name:
            return 0.0
        name_tokens = set(tokenize(view.artist_name))
        matched = [token for token in tokenize(raw_query, self.settings.min_keyword_length) if token in name_tokens]
        if not matched:
            return 0.0
        reasons.append(f"By {view.artist_name}")
        return self.settings.artist_token_bonus * len(matched)

    def _is_recent(self, created_at: Optional[datetime], now: Optional[datetime]) -> bool:
        if created_at is None:
            return False
        age = (now or utc_now()) - created_at
        return age.total_seconds() <= self.settings.recency_window_days * 86400
