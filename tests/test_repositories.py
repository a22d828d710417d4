# Path: tests/test_repositories.py
# Purpose: Filter semantics and persistence of the in-memory and SQLite repositories.
# Layer: tests.
# Details: Both backends run the same scenarios; SQLite files live under pytest's tmp_path.

from __future__ import annotations

import warnings
from datetime import timedelta

import pytest

from core.errors import DataIntegrityWarning, InputError
from core.models.domain import PriceRange, QueryFilters, TimePeriod, utc_now
from core.models.profile import TasteEvolutionEvent, TasteProfile, UserInteraction
from core.repository.memory_store import InMemoryRepository
from core.repository.sqlite_store import SqliteRepository

from .catalog import make_artists, make_artworks, make_catalogues


@pytest.fixture(params=["memory", "sqlite"])
def backend(request, tmp_path):
    if request.param == "memory":
        repository = InMemoryRepository()
    else:
        repository = SqliteRepository(tmp_path / "db" / "artflow.sqlite3")
    repository.add_artworks(make_artworks())
    repository.add_artists(make_artists())
    repository.add_catalogues(make_catalogues())
    yield repository
    repository.close()


def ids(records):
    return [record.id for record in records]


def test_artwork_filters(backend):
    assert ids(backend.query_artworks(QueryFilters(mediums=["oil"]), 10)) == ["a1"]
    assert ids(backend.query_artworks(QueryFilters(mediums=["oil"], status=None), 10)) == ["a1", "a4"]
    assert ids(backend.query_artworks(QueryFilters(genres=["landscape", "impressionism"]), 10)) == ["a3", "a2"]
    assert ids(backend.query_artworks(QueryFilters(subjects=["ocean"]), 10)) == ["a1"]
    assert ids(backend.query_artworks(QueryFilters(price_range=PriceRange(1000, 5000)), 10)) == ["a3", "a2"]
    assert ids(backend.query_artworks(QueryFilters(time_period=TimePeriod(2010, 2020)), 10)) == ["a2"]
    assert ids(backend.query_artworks(QueryFilters(colors=["#FFA500"]), 10)) == ["a2"]
    assert ids(backend.query_artworks(QueryFilters(max_width_cm=60), 10)) == ["a3"]
    assert ids(backend.query_artworks(QueryFilters(keywords=["maya"]), 10)) == ["a1"]


def test_reads_are_newest_first_and_limited(backend):
    assert ids(backend.query_artworks(QueryFilters(), 10)) == ["a1", "a3", "a2"]
    assert ids(backend.query_artworks(QueryFilters(), 1)) == ["a1"]
    assert backend.query_artworks(QueryFilters(), 0) == []


def test_directory_reads(backend):
    assert ids(backend.query_artists(QueryFilters(status=None), 10)) == ["ar1", "ar2"]
    assert ids(backend.query_artists(QueryFilters(keywords=["landscape"], status=None), 10)) == ["ar2"]
    assert ids(backend.query_catalogues(QueryFilters(keywords=["ocean"], status=None), 10)) == ["c1"]


def test_profiles_round_trip(backend):
    assert backend.get_taste_profile("u1") is None
    profile = TasteProfile.initial("u1")
    profile.set_ranked("medium", ["oil", "acrylic"], {"oil": 12.0, "acrylic": 3.0})
    backend.upsert_taste_profile(profile)

    stored = backend.get_taste_profile("u1")
    assert stored.aesthetic_preferences.medium_preferences == ["oil", "acrylic"]
    assert stored.weights("medium") == {"oil": 12.0, "acrylic": 3.0}

    profile.aesthetic_preferences.medium_preferences.append("ink")
    assert "ink" not in backend.get_taste_profile("u1").aesthetic_preferences.medium_preferences


def test_interactions_and_evolution_are_append_only(backend):
    now = utc_now()
    for days in (20, 5, 1):
        backend.append_interaction(
            UserInteraction(
                user_id="u1",
                interaction_type="view",
                target_type="artwork",
                target_id=f"a{days}",
                timestamp=now - timedelta(days=days),
            )
        )
    recent = backend.get_recent_interactions("u1", now - timedelta(days=7))
    assert [event.target_id for event in recent] == ["a5", "a1"]

    backend.append_taste_evolution_event(
        "u1", TasteEvolutionEvent(now, "medium", "oil", "watercolor", 0.8, "like")
    )
    assert [event.new_value for event in backend.taste_evolution("u1")] == ["watercolor"]


def test_palette_updates(backend):
    assert backend.update_artwork_palette("a3", ["#00FF00"]) is True
    assert backend.get_artwork("a3").dominant_colors == ["#00FF00"]
    assert backend.update_artwork_palette("nope", ["#00FF00"]) is False


def test_sqlite_persists_across_instances(tmp_path):
    path = tmp_path / "artflow.sqlite3"
    SqliteRepository(path).add_artworks(make_artworks())

    assert SqliteRepository(path).get_artwork("a2").title == "Red Horizon"


def test_invalid_filters_are_rejected():
    with pytest.raises(InputError):
        QueryFilters(price_range=PriceRange(500, 100))
    with pytest.raises(InputError):
        QueryFilters(time_period=TimePeriod(2000, 1990))
    with pytest.raises(InputError):
        QueryFilters(palette_temperature="lukewarm")


def test_incomplete_profile_payload_gets_defaults():
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        profile = TasteProfile.from_dict({"user_id": "u9", "experience_level": "expert"})

    assert profile.experience_level == "expert"
    assert profile.budget_profile.max_budget == 100000.0
    assert any(issubclass(item.category, DataIntegrityWarning) for item in caught)


def test_partial_size_dimensions_get_defaults():
    payload = TasteProfile.initial("u8").to_dict()
    payload["aesthetic_preferences"]["size_preferences"]["min_dimensions"] = {"width": 30.0}
    payload["aesthetic_preferences"]["size_preferences"]["max_dimensions"] = {"height": "tall"}

    with pytest.warns(DataIntegrityWarning):
        profile = TasteProfile.from_dict(payload)

    sizes = profile.aesthetic_preferences.size_preferences
    assert (sizes.min_dimensions.width, sizes.min_dimensions.height) == (30.0, 10.0)
    assert (sizes.max_dimensions.width, sizes.max_dimensions.height) == (200.0, 200.0)
