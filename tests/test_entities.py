# Path: tests/test_entities.py
# Purpose: Entity extraction and intent classification over free-text queries.
# Layer: tests.
# Details: Covers price, period, color, mood, and size patterns.

from __future__ import annotations

import pytest

from core.color.similarity import NAMED_COLORS
from core.models.domain import Intent, PriceRange, TimePeriod
from core.query import EntityExtractor, IntentClassifier, Vocabulary


@pytest.fixture
def extractor() -> EntityExtractor:
    return EntityExtractor()


def test_abstract_oil_painting_under_budget(extractor):
    entities = extractor.extract("abstract oil painting under $2000")

    assert entities.genres == {"abstract"}
    assert entities.mediums == {"oil"}
    assert entities.price_range == PriceRange(min=0.0, max=2000.0)
    assert entities.time_period is None
    assert IntentClassifier().classify("abstract oil painting under $2000") == Intent.SEARCH_ARTWORK


@pytest.mark.parametrize(
    "query, expected",
    [
        ("prints between $500 and $1,500", PriceRange(min=500.0, max=1500.0)),
        ("sculpture $2k - $5k", PriceRange(min=2000.0, max=5000.0)),
        ("photography over $3000", PriceRange(min=3000.0, max=None)),
        ("a drawing for 400 dollars", PriceRange(min=400.0, max=800.0)),
        ("budget 10k landscape", PriceRange(min=0.0, max=10000.0)),
    ],
)
def test_price_patterns(extractor, query, expected):
    assert extractor.extract(query).price_range == expected


def test_price_amounts_are_not_read_as_years(extractor):
    entities = extractor.extract("portrait under $1990")

    assert entities.price_range == PriceRange(min=0.0, max=1990.0)
    assert entities.time_period is None


def test_time_periods(extractor):
    assert extractor.extract("paintings from 1920 to 1935").time_period == TimePeriod(1920, 1935)
    assert extractor.extract("1960s pop art").time_period == TimePeriod(1960, 1970)


def test_colors_moods_and_size(extractor):
    entities = extractor.extract("large serene crimson and navy canvas")

    assert NAMED_COLORS["red"] in entities.colors
    assert NAMED_COLORS["blue"] in entities.colors
    assert entities.moods == {"calm"}
    assert entities.size == "large"
    assert "canvas" in entities.mediums


def test_synonyms_match_whole_words_only(extractor):
    entities = extractor.extract("tangent studies")

    assert NAMED_COLORS["brown"] not in entities.colors


def test_deny_list_hides_embedded_terms(extractor):
    query = "a few hundred dollars of store credit"

    assert extractor.extract(query).colors == set()
    assert NAMED_COLORS["red"] in EntityExtractor(Vocabulary(deny_list=())).extract(query).colors
    assert extractor.extract("bored of red walls").colors == {NAMED_COLORS["red"]}


@pytest.mark.parametrize("query", ["", "   ", None, 42, "!!!", "$$$ - $"])
def test_extract_is_total(extractor, query):
    entities = extractor.extract(query)

    assert entities.price_range is None or entities.price_range.min >= 0


def test_extract_is_deterministic(extractor):
    query = "vibrant red abstract acrylic from the 1980s under $5k"

    assert extractor.extract(query) == extractor.extract(query)


@pytest.mark.parametrize(
    "query, intent",
    [
        ("paintings by the artist Maya Chen", Intent.SEARCH_ARTIST),
        ("spring collection", Intent.SEARCH_CATALOGUE),
        ("something similar to Monet", Intent.DISCOVER_SIMILAR),
        ("cubist style still life", Intent.FIND_BY_STYLE),
        ("a calm mood for the bedroom", Intent.FIND_BY_MOOD),
        ("blue seascape", Intent.SEARCH_ARTWORK),
        ("artistic collection", Intent.SEARCH_CATALOGUE),
    ],
)
def test_intent_rules(query, intent):
    assert IntentClassifier().classify(query) == intent


def test_intent_rule_order_prefers_artist():
    assert IntentClassifier().classify("artist collection") == Intent.SEARCH_ARTIST
