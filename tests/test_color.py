# Path: tests/test_color.py
# Purpose: Color conversion, distance, naming, and temperature helpers.
# Layer: tests.
# Details: Distances are normalized similarities in 0..1.

from __future__ import annotations

import pytest

from core.color import (
    color_distance,
    color_temperature,
    hex_to_color_name,
    hex_to_rgb,
    palette_similarity,
    palette_temperature,
    rgb_to_hex,
)


def test_identical_and_opposite_colors():
    assert color_distance("#FF0000", "#FF0000") == 1.0
    assert color_distance("#000000", "#FFFFFF") == pytest.approx(0.0, abs=1e-9)


@pytest.mark.parametrize("a, b", [("#FF0000", "#00FF00"), ("#123456", "#abcdef"), ("#FFF", "#808080")])
def test_distance_is_symmetric(a, b):
    assert color_distance(a, b) == color_distance(b, a)


def test_malformed_colors_score_zero():
    assert hex_to_rgb("not-a-color") is None
    assert color_distance("#GGGGGG", "#FF0000") == 0.0
    assert palette_similarity([], ["#FF0000"]) == 0.0


def test_short_hex_and_round_trip():
    assert hex_to_rgb("#0f0") == (0, 255, 0)
    assert rgb_to_hex(300, -5, 127.6) == "#FF0080"


def test_nearest_color_name():
    assert hex_to_color_name("#E01010") == "red"
    assert hex_to_color_name("#0A0AF0") == "blue"
    assert hex_to_color_name("oops") is None


def test_palette_similarity_averages_pairs():
    assert palette_similarity(["#FF0000"], ["#FF0000", "#FF0000"]) == 1.0
    mixed = palette_similarity(["#FF0000"], ["#FF0000", "#000000"])
    assert 0.5 < mixed < 1.0


def test_temperatures():
    assert color_temperature("#FF4500") == "warm"
    assert color_temperature("#1E90FF") == "cool"
    assert color_temperature("#808080") == "neutral"
    assert palette_temperature(["#FF0000", "#FFA500", "#0000FF"]) == "warm"
    assert palette_temperature(["#FF0000", "#0000FF"]) == "neutral"
    assert palette_temperature([]) is None
