# Path: tests/test_scoring.py
# Purpose: Additive relevance scoring of artworks, artists, and catalogues.
# Layer: tests.
# Details: Uses a fixed "now" so recency is deterministic.

from __future__ import annotations

from datetime import timedelta

import pytest

from core.models.domain import Artist, Artwork, Catalogue, QueryEntities, ScoringOptions, utc_now
from core.search.scoring import RelevanceScorer, price_fit, tokenize

NOW = utc_now()


def ocean_dreams(**overrides) -> Artwork:
    values = dict(
        id="a1",
        title="Ocean Dreams",
        description="",
        price=800.0,
        view_count=40,
        like_count=5,
        created_at=NOW,
    )
    values.update(overrides)
    return Artwork(**values)


def test_ocean_dreams_breakdown():
    scorer = RelevanceScorer()
    breakdown = scorer.score(ocean_dreams(), QueryEntities(), "ocean", ScoringOptions(price_sensitivity=0.5, now=NOW))

    # 50 title + 0.968 * 20 price fit + 5.5 popularity + 15 recency
    assert breakdown.score == pytest.approx(89.86)
    assert "Matches your search terms" in breakdown.reasons
    assert "Recently added" in breakdown.reasons
    assert "Perfect price fit" in breakdown.reasons
    assert "Popular with collectors" in breakdown.reasons


def test_title_match_strictly_increases_score():
    scorer = RelevanceScorer()
    options = ScoringOptions(now=NOW)
    without = scorer.score(ocean_dreams(title="Untitled"), QueryEntities(), "harbor lights", options)
    with_match = scorer.score(ocean_dreams(title="Untitled harbor lights"), QueryEntities(), "harbor lights", options)

    assert with_match.score > without.score


def test_description_match_is_worth_less_than_title():
    scorer = RelevanceScorer()
    options = ScoringOptions(now=NOW)
    in_title = scorer.score(ocean_dreams(), QueryEntities(), "ocean", options)
    in_description = scorer.score(
        ocean_dreams(title="Untitled", description="ocean study"), QueryEntities(), "ocean", options
    )

    assert in_title.score - in_description.score == pytest.approx(20.0)


def test_attribute_color_and_artist_signals():
    scorer = RelevanceScorer()
    artwork = ocean_dreams(
        medium="oil on canvas",
        genre="abstract",
        dominant_colors=["#F01010"],
        artist_name="Maya Chen",
        created_at=NOW - timedelta(days=30),
        price=None,
        view_count=0,
        like_count=0,
    )
    entities = QueryEntities(mediums={"oil"}, genres={"abstract"}, colors={"#FF0000"})
    breakdown = scorer.score(artwork, entities, "maya", ScoringOptions(now=NOW))

    # medium + genre + color bonuses, one artist token
    assert breakdown.score == pytest.approx(15 * 3 + 20)
    assert "Matches your color preferences" in breakdown.reasons
    assert "By Maya Chen" in breakdown.reasons


def test_discovery_mode_boosts_unpopular_work():
    scorer = RelevanceScorer()
    quiet = ocean_dreams(view_count=0, like_count=0, price=None, created_at=None)
    breakdown = scorer.score(quiet, QueryEntities(), "", ScoringOptions(discovery_mode=0.9, now=NOW))

    assert breakdown.score == pytest.approx(9.0)
    assert "Hidden gem for discovery" in breakdown.reasons


def test_artists_and_catalogues_are_scored():
    scorer = RelevanceScorer()
    artist = Artist(id="ar1", name="Maya Chen", bio="Painter of oceans", follower_count=1200, artwork_count=14)
    catalogue = Catalogue(id="c1", name="Ocean Collection", artwork_count=6)

    assert scorer.score(artist, QueryEntities(), "ocean", ScoringOptions(now=NOW)).score == pytest.approx(50.0)
    assert scorer.score(catalogue, QueryEntities(), "ocean", ScoringOptions(now=NOW)).score == pytest.approx(50.6)


def test_scores_are_never_negative():
    scorer = RelevanceScorer()
    odd = ocean_dreams(price=float("nan"), view_count=-500, like_count=-3, created_at=None)

    assert scorer.score(odd, QueryEntities(), "", ScoringOptions(now=NOW)).score >= 0.0


def test_price_fit_edges():
    assert price_fit(800, 25000) == pytest.approx(0.968)
    assert price_fit(30000, 25000) == 0.0
    assert price_fit(500, 0) == 1.0
    assert price_fit(1500, 0) == 0.0
    assert price_fit(None, 25000) == 0.0


def test_tokenize_keeps_order_and_drops_duplicates():
    assert tokenize("Blue blue OCEAN at dusk", 3) == ["blue", "ocean", "dusk"]
