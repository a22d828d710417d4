# Path: core/repository/__init__.py
# Purpose: Package initializer for persistence backends.
# Layer: core/repository.
# Details: Exposes the repository interface, its filter matchers, and the bundled backends.

from .base import Repository, artist_matches, artwork_matches, catalogue_matches
from .memory_store import InMemoryRepository
from .sqlite_store import SqliteRepository

__all__ = [
    "InMemoryRepository",
    "Repository",
    "SqliteRepository",
    "artist_matches",
    "artwork_matches",
    "catalogue_matches",
]
