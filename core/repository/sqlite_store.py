# Path: core/repository/sqlite_store.py
# Purpose: SQLite-backed repository persisting catalog records, profiles, and interaction events.
# Layer: core/repository.
# Details: Records are stored as JSON documents with a few indexed columns used to pre-filter reads.

from __future__ import annotations

import json
import sqlite3
from dataclasses import fields
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple, Type, TypeVar

from core.errors import CollaboratorError
from core.models.domain import Artist, Artwork, Catalogue, QueryFilters, parse_datetime
from core.models.profile import TasteEvolutionEvent, TasteProfile, UserInteraction

from .base import Repository, artist_matches, artwork_matches, catalogue_matches

T = TypeVar("T", Artist, Catalogue)

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS artworks (
        id TEXT PRIMARY KEY,
        status TEXT NOT NULL,
        price REAL,
        created_at TEXT,
        payload TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS artists (
        id TEXT PRIMARY KEY,
        follower_count INTEGER NOT NULL DEFAULT 0,
        payload TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS catalogues (
        id TEXT PRIMARY KEY,
        is_public INTEGER NOT NULL,
        created_at TEXT,
        payload TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS taste_profiles (
        user_id TEXT PRIMARY KEY,
        payload TEXT NOT NULL,
        updated_at TEXT NOT NULL
    )
    """,
    """
    CREATE TABLE IF NOT EXISTS interactions (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id TEXT NOT NULL,
        ts REAL NOT NULL,
        payload TEXT NOT NULL
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_interactions_user_ts ON interactions (user_id, ts)",
    """
    CREATE TABLE IF NOT EXISTS taste_evolution (
        id INTEGER PRIMARY KEY AUTOINCREMENT,
        user_id TEXT NOT NULL,
        ts REAL NOT NULL,
        payload TEXT NOT NULL
    )
    """,
)


def _record_from_payload(cls: Type[T], payload: Dict[str, Any]) -> T:
    known = {item.name for item in fields(cls)}
    values = {key: value for key, value in payload.items() if key in known}
    values["created_at"] = parse_datetime(values.get("created_at"))
    return cls(**values)


class SqliteRepository(Repository):
    """Repository storing JSON documents in a single SQLite database file."""

    name = "sqlite"

    def __init__(self, database_path: Path | str) -> None:
        self.database_path = Path(database_path)
        self.database_path.parent.mkdir(parents=True, exist_ok=True)
        self._ensure_schema()

    def _connect(self) -> sqlite3.Connection:
        return sqlite3.connect(self.database_path, timeout=5.0)

    def _ensure_schema(self) -> None:
        self._execute_many([(statement, ()) for statement in _SCHEMA])

    def _execute_many(self, statements: Sequence[Tuple[str, Sequence[Any]]]) -> None:
        try:
            with self._connect() as conn:
                for statement, params in statements:
                    conn.execute(statement, params)
                conn.commit()
        except sqlite3.Error as exc:
            raise CollaboratorError(f"SQLite write failed: {exc}") from exc

    def _fetch(self, statement: str, params: Sequence[Any] = ()) -> List[Tuple[Any, ...]]:
        try:
            with self._connect() as conn:
                return conn.execute(statement, params).fetchall()
        except sqlite3.Error as exc:
            raise CollaboratorError(f"SQLite read failed: {exc}") from exc

    # Catalog seeding
    def add_artworks(self, artworks: Iterable[Artwork]) -> None:
        self._execute_many(
            [
                (
                    "INSERT OR REPLACE INTO artworks (id, status, price, created_at, payload) VALUES (?, ?, ?, ?, ?)",
                    (
                        artwork.id,
                        artwork.status,
                        artwork.price,
                        artwork.created_at.isoformat() if artwork.created_at else None,
                        json.dumps(artwork.to_dict()),
                    ),
                )
                for artwork in artworks
            ]
        )

    def add_artists(self, artists: Iterable[Artist]) -> None:
        self._execute_many(
            [
                (
                    "INSERT OR REPLACE INTO artists (id, follower_count, payload) VALUES (?, ?, ?)",
                    (artist.id, artist.follower_count, json.dumps(artist.to_dict())),
                )
                for artist in artists
            ]
        )

    def add_catalogues(self, catalogues: Iterable[Catalogue]) -> None:
        self._execute_many(
            [
                (
                    "INSERT OR REPLACE INTO catalogues (id, is_public, created_at, payload) VALUES (?, ?, ?, ?)",
                    (
                        catalogue.id,
                        int(catalogue.is_public),
                        catalogue.created_at.isoformat() if catalogue.created_at else None,
                        json.dumps(catalogue.to_dict()),
                    ),
                )
                for catalogue in catalogues
            ]
        )

    def update_artwork_palette(self, artwork_id: str, palette: List[str]) -> bool:
        """Store a freshly extracted palette on an artwork; returns False when the artwork is unknown."""

        artwork = self.get_artwork(artwork_id)
        if artwork is None:
            return False
        artwork.dominant_colors = list(palette)
        self.add_artworks([artwork])
        return True

    # Reads
    def query_artworks(self, filters: QueryFilters, limit: int) -> List[Artwork]:
        if limit <= 0:
            return []
        clauses: List[str] = []
        params: List[Any] = []
        if filters.status:
            clauses.append("status = ?")
            params.append(filters.status)
        if filters.price_range is not None:
            clauses.append("price >= ?")
            params.append(filters.price_range.min)
            if filters.price_range.max is not None:
                clauses.append("price <= ?")
                params.append(filters.price_range.max)
        where = f"WHERE {' AND '.join(clauses)}" if clauses else ""
        rows = self._fetch(f"SELECT payload FROM artworks {where} ORDER BY created_at DESC, id", params)

        results: List[Artwork] = []
        for (payload,) in rows:
            artwork = Artwork.from_dict(json.loads(payload))
            if artwork_matches(artwork, filters):
                results.append(artwork)
                if len(results) >= limit:
                    break
        return results

    def query_artists(self, filters: QueryFilters, limit: int) -> List[Artist]:
        if limit <= 0:
            return []
        rows = self._fetch("SELECT payload FROM artists ORDER BY follower_count DESC, id")
        results: List[Artist] = []
        for (payload,) in rows:
            artist = _record_from_payload(Artist, json.loads(payload))
            if artist_matches(artist, filters):
                results.append(artist)
                if len(results) >= limit:
                    break
        return results

    def query_catalogues(self, filters: QueryFilters, limit: int) -> List[Catalogue]:
        if limit <= 0:
            return []
        rows = self._fetch("SELECT payload FROM catalogues WHERE is_public = 1 ORDER BY created_at DESC, id")
        results: List[Catalogue] = []
        for (payload,) in rows:
            catalogue = _record_from_payload(Catalogue, json.loads(payload))
            if catalogue_matches(catalogue, filters):
                results.append(catalogue)
                if len(results) >= limit:
                    break
        return results

    def get_artwork(self, artwork_id: str) -> Optional[Artwork]:
        rows = self._fetch("SELECT payload FROM artworks WHERE id = ?", (artwork_id,))
        return Artwork.from_dict(json.loads(rows[0][0])) if rows else None

    # Profiles and events
    def get_taste_profile(self, user_id: str) -> Optional[TasteProfile]:
        rows = self._fetch("SELECT payload FROM taste_profiles WHERE user_id = ?", (user_id,))
        return TasteProfile.from_dict(json.loads(rows[0][0])) if rows else None

    def upsert_taste_profile(self, profile: TasteProfile) -> None:
        self._execute_many(
            [
                (
                    "INSERT OR REPLACE INTO taste_profiles (user_id, payload, updated_at) VALUES (?, ?, ?)",
                    (profile.user_id, json.dumps(profile.to_dict()), profile.updated_at.isoformat()),
                )
            ]
        )

    def append_interaction(self, event: UserInteraction) -> None:
        self._execute_many(
            [
                (
                    "INSERT INTO interactions (user_id, ts, payload) VALUES (?, ?, ?)",
                    (event.user_id, event.timestamp.timestamp(), json.dumps(event.to_dict())),
                )
            ]
        )

    def get_recent_interactions(self, user_id: str, since: datetime) -> List[UserInteraction]:
        rows = self._fetch(
            "SELECT payload FROM interactions WHERE user_id = ? AND ts >= ? ORDER BY ts, id",
            (user_id, since.timestamp()),
        )
        return [UserInteraction.from_dict(json.loads(payload)) for (payload,) in rows]

    def append_taste_evolution_event(self, user_id: str, event: TasteEvolutionEvent) -> None:
        self._execute_many(
            [
                (
                    "INSERT INTO taste_evolution (user_id, ts, payload) VALUES (?, ?, ?)",
                    (user_id, event.timestamp.timestamp(), json.dumps(event.to_dict())),
                )
            ]
        )

    def taste_evolution(self, user_id: str) -> List[TasteEvolutionEvent]:
        rows = self._fetch("SELECT payload FROM taste_evolution WHERE user_id = ? ORDER BY ts, id", (user_id,))
        return [TasteEvolutionEvent.from_dict(json.loads(payload)) for (payload,) in rows]
