# Path: core/models/__init__.py
# Purpose: Package initializer for domain model definitions.
# Layer: core/models.
# Details: Exposes dataclasses used across query understanding, search, and preference learning.

from .domain import (
    Artist,
    Artwork,
    Catalogue,
    EntityType,
    ImageSearchResult,
    Intent,
    PriceRange,
    QueryEntities,
    QueryFilters,
    ScoreBreakdown,
    ScoringOptions,
    SearchOutcome,
    SearchResult,
    TimePeriod,
    VisualMatches,
)
from .profile import (
    ArtworkAttributes,
    ArtworkRecommendation,
    CollectorInsights,
    InteractionMetadata,
    InteractionType,
    RecommendationContext,
    TasteEvolutionEvent,
    TasteProfile,
    TasteShift,
    UserInteraction,
)

__all__ = [
    "Artist",
    "Artwork",
    "ArtworkAttributes",
    "ArtworkRecommendation",
    "Catalogue",
    "CollectorInsights",
    "EntityType",
    "ImageSearchResult",
    "Intent",
    "InteractionMetadata",
    "InteractionType",
    "PriceRange",
    "QueryEntities",
    "QueryFilters",
    "RecommendationContext",
    "ScoreBreakdown",
    "ScoringOptions",
    "SearchOutcome",
    "SearchResult",
    "TasteEvolutionEvent",
    "TasteProfile",
    "TasteShift",
    "TimePeriod",
    "UserInteraction",
    "VisualMatches",
]
