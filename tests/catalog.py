# Path: tests/catalog.py
# Purpose: Small seeded art catalog shared by the test modules.
# Layer: tests.
# Details: Timestamps are relative to the real clock so recency rules behave as in production.

from __future__ import annotations

from datetime import timedelta

from core.models.domain import Artist, Artwork, Catalogue, utc_now
from core.repository.memory_store import InMemoryRepository

def make_artworks():
    now = utc_now()
    return [
        Artwork(
            id="a1",
            title="Ocean Dreams",
            description="A calm seascape in layered blues",
            price=800.0,
            medium="oil on canvas",
            genre="abstract",
            subject="ocean",
            dominant_colors=["#1E3A8A", "#60A5FA"],
            artist_id="ar1",
            artist_name="Maya Chen",
            view_count=40,
            like_count=5,
            created_at=now - timedelta(days=1),
            year=2021,
            width_cm=80.0,
            height_cm=60.0,
            is_unique=True,
        ),
        Artwork(
            id="a2",
            title="Red Horizon",
            description="Sunset over the desert",
            price=4500.0,
            medium="acrylic",
            genre="landscape",
            subject="sunset",
            dominant_colors=["#DC2626", "#F97316"],
            artist_id="ar2",
            artist_name="Luis Ortega",
            view_count=300,
            like_count=40,
            save_count=12,
            created_at=now - timedelta(days=40),
            year=2015,
            width_cm=150.0,
            height_cm=130.0,
        ),
        Artwork(
            id="a3",
            title="Quiet Forest",
            description="Morning light between the trees",
            price=1500.0,
            medium="watercolor",
            genre="impressionism",
            subject="tree",
            dominant_colors=["#166534", "#86EFAC"],
            artist_id="ar2",
            artist_name="Luis Ortega",
            view_count=5,
            created_at=now - timedelta(days=3),
            year=1998,
            width_cm=40.0,
            height_cm=30.0,
            edition_size=5,
        ),
        Artwork(
            id="a4",
            title="Sold Study",
            description="An early oil sketch",
            price=300.0,
            medium="oil",
            genre="realism",
            created_at=now - timedelta(days=2),
            status="sold",
        ),
    ]


def make_artists():
    return [
        Artist(id="ar1", name="Maya Chen", bio="Painter of oceans and abstract seascapes", follower_count=1200, artwork_count=14),
        Artist(id="ar2", name="Luis Ortega", bio="Landscape painter working in acrylic", follower_count=300, artwork_count=22),
    ]


def make_catalogues():
    now = utc_now()
    return [
        Catalogue(
            id="c1",
            name="Ocean Collection",
            description="Seascapes by Maya Chen",
            artist_name="Maya Chen",
            artwork_count=6,
            created_at=now - timedelta(days=10),
        ),
        Catalogue(id="c2", name="Ocean Drafts", description="Unpublished work", is_public=False),
    ]


def seeded(cls=InMemoryRepository):
    return cls(make_artworks(), make_artists(), make_catalogues())
