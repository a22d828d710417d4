# Path: core/repository/base.py
# Purpose: Define the Repository interface consumed by search and preference learning.
# Layer: core/repository.
# Details: Filtered/paginated reads plus append/upsert writes; indifferent to the storage technology.

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Iterable, List, Optional

from core.color.similarity import hex_to_color_name, palette_temperature
from core.models.domain import Artist, Artwork, Catalogue, QueryFilters
from core.models.profile import TasteEvolutionEvent, TasteProfile, UserInteraction


class Repository(ABC):
    """Abstract base class for pluggable persistence backends.

    Implementations raise ``CollaboratorError`` for storage failures.
    """

    name: str

    @abstractmethod
    def query_artworks(self, filters: QueryFilters, limit: int) -> List[Artwork]:
        """Return up to ``limit`` artworks matching every filter field."""

    @abstractmethod
    def query_artists(self, filters: QueryFilters, limit: int) -> List[Artist]:
        """Return up to ``limit`` artists whose name or bio match any filter keyword."""

    @abstractmethod
    def query_catalogues(self, filters: QueryFilters, limit: int) -> List[Catalogue]:
        """Return up to ``limit`` public catalogues matching any filter keyword."""

    @abstractmethod
    def get_artwork(self, artwork_id: str) -> Optional[Artwork]:
        """Return a single artwork or None when unknown."""

    @abstractmethod
    def get_taste_profile(self, user_id: str) -> Optional[TasteProfile]:
        """Return the stored taste profile of a user, if any."""

    @abstractmethod
    def upsert_taste_profile(self, profile: TasteProfile) -> None:
        """Insert or replace a taste profile."""

    @abstractmethod
    def append_interaction(self, event: UserInteraction) -> None:
        """Append an immutable interaction event."""

    @abstractmethod
    def get_recent_interactions(self, user_id: str, since: datetime) -> List[UserInteraction]:
        """Return a user's interactions at or after ``since``, oldest first."""

    @abstractmethod
    def append_taste_evolution_event(self, user_id: str, event: TasteEvolutionEvent) -> None:
        """Append an immutable taste evolution event."""

    def close(self) -> None:
        """Release backend resources; no-op by default."""


def _contains_any(text: str, terms: Iterable[str]) -> bool:
    lowered = text.lower()
    return any(term in lowered for term in terms)


def artwork_matches(artwork: Artwork, filters: QueryFilters) -> bool:
    """Evaluate every filter field against an artwork (fields are ANDed, set values ORed)."""

    if filters.status and artwork.status != filters.status:
        return False
    if filters.mediums and not _contains_any(artwork.medium or "", filters.mediums):
        return False
    if filters.genres and not _contains_any(f"{artwork.genre or ''} {artwork.style or ''}", filters.genres):
        return False
    if filters.subjects and not _contains_any(
        f"{artwork.subject or ''} {artwork.title} {artwork.description}", filters.subjects
    ):
        return False
    if filters.keywords and not _contains_any(
        f"{artwork.title} {artwork.description} {artwork.artist_name or ''}", filters.keywords
    ):
        return False
    if filters.colors:
        names = {hex_to_color_name(color) for color in artwork.dominant_colors}
        wanted = {hex_to_color_name(color) for color in filters.colors}
        if not names & (wanted - {None}):
            return False
    if filters.price_range is not None and not filters.price_range.contains(artwork.price):
        return False
    if filters.time_period is not None:
        year = artwork.year or (artwork.created_at.year if artwork.created_at else None)
        if not filters.time_period.contains(year):
            return False
    for value, low, high in (
        (artwork.width_cm, filters.min_width_cm, filters.max_width_cm),
        (artwork.height_cm, filters.min_height_cm, filters.max_height_cm),
    ):
        if low is None and high is None:
            continue
        if value is None:
            return False
        if (low is not None and value < low) or (high is not None and value > high):
            return False
    if (filters.require_palette or filters.palette_temperature) and not artwork.dominant_colors:
        return False
    if filters.palette_temperature and palette_temperature(artwork.dominant_colors) != filters.palette_temperature:
        return False
    return True


def artist_matches(artist: Artist, filters: QueryFilters) -> bool:
    if not filters.keywords:
        return True
    return _contains_any(f"{artist.name} {artist.bio}", filters.keywords)


def catalogue_matches(catalogue: Catalogue, filters: QueryFilters) -> bool:
    if not catalogue.is_public:
        return False
    if not filters.keywords:
        return True
    return _contains_any(
        f"{catalogue.name} {catalogue.description} {catalogue.artist_name or ''}", filters.keywords
    )
