# Path: core/repository/memory_store.py
# Purpose: In-process repository backend for tests, demos, and single-node deployments.
# Layer: core/repository.
# Details: Profiles are stored as dict snapshots so callers never share mutable state with the store.

from __future__ import annotations

import threading
from dataclasses import replace
from datetime import datetime
from typing import Dict, Iterable, List, Optional

from core.models.domain import Artist, Artwork, Catalogue, QueryFilters
from core.models.profile import TasteEvolutionEvent, TasteProfile, UserInteraction

from .base import Repository, artist_matches, artwork_matches, catalogue_matches


def _newest_first(created_at: Optional[datetime]) -> float:
    return -created_at.timestamp() if created_at else float("inf")


class InMemoryRepository(Repository):
    """Repository keeping every record in dictionaries guarded by a lock."""

    name = "memory"

    def __init__(
        self,
        artworks: Optional[Iterable[Artwork]] = None,
        artists: Optional[Iterable[Artist]] = None,
        catalogues: Optional[Iterable[Catalogue]] = None,
    ) -> None:
        self._lock = threading.RLock()
        self._artworks: Dict[str, Artwork] = {}
        self._artists: Dict[str, Artist] = {}
        self._catalogues: Dict[str, Catalogue] = {}
        self._profiles: Dict[str, dict] = {}
        self._interactions: Dict[str, List[UserInteraction]] = {}
        self._evolution: Dict[str, List[TasteEvolutionEvent]] = {}
        self.add_artworks(artworks or [])
        self.add_artists(artists or [])
        self.add_catalogues(catalogues or [])

    # Catalog seeding
    def add_artworks(self, artworks: Iterable[Artwork]) -> None:
        with self._lock:
            for artwork in artworks:
                self._artworks[artwork.id] = artwork

    def add_artists(self, artists: Iterable[Artist]) -> None:
        with self._lock:
            for artist in artists:
                self._artists[artist.id] = artist

    def add_catalogues(self, catalogues: Iterable[Catalogue]) -> None:
        with self._lock:
            for catalogue in catalogues:
                self._catalogues[catalogue.id] = catalogue

    def update_artwork_palette(self, artwork_id: str, palette: List[str]) -> bool:
        with self._lock:
            artwork = self._artworks.get(artwork_id)
            if artwork is None:
                return False
            self._artworks[artwork_id] = replace(artwork, dominant_colors=list(palette))
            return True

    # Reads
    def query_artworks(self, filters: QueryFilters, limit: int) -> List[Artwork]:
        with self._lock:
            candidates = list(self._artworks.values())
        matched = [artwork for artwork in candidates if artwork_matches(artwork, filters)]
        matched.sort(key=lambda artwork: (_newest_first(artwork.created_at), artwork.id))
        return matched[: max(0, limit)]

    def query_artists(self, filters: QueryFilters, limit: int) -> List[Artist]:
        with self._lock:
            candidates = list(self._artists.values())
        matched = [artist for artist in candidates if artist_matches(artist, filters)]
        matched.sort(key=lambda artist: (-artist.follower_count, artist.id))
        return matched[: max(0, limit)]

    def query_catalogues(self, filters: QueryFilters, limit: int) -> List[Catalogue]:
        with self._lock:
            candidates = list(self._catalogues.values())
        matched = [catalogue for catalogue in candidates if catalogue_matches(catalogue, filters)]
        matched.sort(key=lambda catalogue: (_newest_first(catalogue.created_at), catalogue.id))
        return matched[: max(0, limit)]

    def get_artwork(self, artwork_id: str) -> Optional[Artwork]:
        with self._lock:
            return self._artworks.get(artwork_id)

    # Profiles and events
    def get_taste_profile(self, user_id: str) -> Optional[TasteProfile]:
        with self._lock:
            payload = self._profiles.get(user_id)
        return TasteProfile.from_dict(payload) if payload else None

    def upsert_taste_profile(self, profile: TasteProfile) -> None:
        snapshot = profile.to_dict()
        with self._lock:
            self._profiles[profile.user_id] = snapshot

    def append_interaction(self, event: UserInteraction) -> None:
        with self._lock:
            self._interactions.setdefault(event.user_id, []).append(event)

    def get_recent_interactions(self, user_id: str, since: datetime) -> List[UserInteraction]:
        with self._lock:
            events = list(self._interactions.get(user_id, []))
        recent = [event for event in events if event.timestamp >= since]
        recent.sort(key=lambda event: event.timestamp)
        return recent

    def append_taste_evolution_event(self, user_id: str, event: TasteEvolutionEvent) -> None:
        with self._lock:
            self._evolution.setdefault(user_id, []).append(event)

    def taste_evolution(self, user_id: str) -> List[TasteEvolutionEvent]:
        with self._lock:
            return list(self._evolution.get(user_id, []))
