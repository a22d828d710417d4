# Path: core/learning/signals.py
# Purpose: Sub-scores combined into purchase intent and recommendation confidence.
# Layer: core/learning.
# Details: ScoreSource is a tagged variant; the heuristic source is deterministic and the model source is a stub.

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import List, Sequence

from core.color.similarity import hex_to_color_name, hex_to_rgb
from core.models.domain import Artwork
from core.models.profile import UserInteraction

NEUTRAL_MODEL_SCORE = 0.5


@dataclass
class CurrentPreferences:
    """Preferences in effect for scoring: recent activity first, then the persisted profile."""

    mediums: List[str] = field(default_factory=list)
    styles: List[str] = field(default_factory=list)
    colors: List[str] = field(default_factory=list)
    price_bands: List[str] = field(default_factory=list)
    max_budget: float = 100000.0


class ScoreSource(ABC):
    """Provider of the taste-dependent sub-scores, each in 0..1."""

    kind: str

    @abstractmethod
    def style_match(self, artwork: Artwork, preferences: CurrentPreferences) -> float:
        """How closely the artwork matches preferred mediums, styles and colors."""

    @abstractmethod
    def novelty_factor(
        self, artwork: Artwork, recent: Sequence[UserInteraction], saturation: int
    ) -> float:
        """How new the artwork is relative to recently seen attributes."""

    @abstractmethod
    def social_proof(self, artwork: Artwork, scale: float) -> float:
        """Normalized community engagement."""


class HeuristicSource(ScoreSource):
    kind = "heuristic"

    def style_match(self, artwork: Artwork, preferences: CurrentPreferences) -> float:
        score = 0.5
        if artwork.medium and artwork.medium.lower() in preferences.mediums:
            score += 0.3
        style = (artwork.style or artwork.genre or "").lower()
        if style and style in preferences.styles:
            score += 0.3
        wanted = {hex_to_color_name(color) for color in preferences.colors if hex_to_rgb(color)}
        if wanted and any(hex_to_color_name(color) in wanted for color in artwork.dominant_colors if hex_to_rgb(color)):
            score += 0.2
        return min(1.0, score)

    def novelty_factor(
        self, artwork: Artwork, recent: Sequence[UserInteraction], saturation: int
    ) -> float:
        medium = (artwork.medium or "").lower()
        style = (artwork.style or artwork.genre or "").lower()
        similar = 0
        for event in recent:
            attributes = event.attributes
            if event.target_id == artwork.id:
                similar += 1
            elif attributes is not None and (
                (medium and (attributes.medium or "").lower() == medium)
                or (style and (attributes.style or "").lower() == style)
            ):
                similar += 1
        if saturation <= 0:
            return 1.0 if similar == 0 else 0.0
        return 1.0 - min(1.0, similar / saturation)

    def social_proof(self, artwork: Artwork, scale: float) -> float:
        engagement = artwork.like_count * 3 + artwork.view_count + artwork.save_count * 2
        if scale <= 0:
            return 0.0
        return max(0.0, min(1.0, engagement / scale))


@dataclass(frozen=True)
class ModelSource(ScoreSource):
    """Placeholder for a learned model; returns the neutral constant until one is integrated."""

    model_id: str
    kind = "model"

    def style_match(self, artwork: Artwork, preferences: CurrentPreferences) -> float:
        return NEUTRAL_MODEL_SCORE

    def novelty_factor(
        self, artwork: Artwork, recent: Sequence[UserInteraction], saturation: int
    ) -> float:
        return NEUTRAL_MODEL_SCORE

    def social_proof(self, artwork: Artwork, scale: float) -> float:
        return NEUTRAL_MODEL_SCORE


def urgency_factor(artwork: Artwork) -> float:
    """Scarcity signal: unique works first, then small editions and low stock."""

    if artwork.is_unique:
        return 1.0
    if artwork.edition_size is not None and 0 < artwork.edition_size <= 10:
        return 0.8
    if (artwork.stock_level or "").lower() == "low":
        return 0.7
    return 0.3
