# Path: core/learning/preferences.py
# Purpose: Weighted ranked-list merging and attribute normalization for the taste model.
# Layer: core/learning.
# Details: Ranked lists decay implicitly; new high-weight observations crowd out stale values.

from __future__ import annotations

from typing import Dict, Iterable, List, Optional, Tuple

from core.color.similarity import hex_to_rgb, rgb_to_hex
from core.models.profile import ArtworkAttributes

PRICE_BANDS: Tuple[Tuple[str, float], ...] = (
    ("under_1k", 1000.0),
    ("1k_5k", 5000.0),
    ("5k_20k", 20000.0),
)
TOP_PRICE_BAND = "20k_plus"


def price_band(price: Optional[float]) -> Optional[str]:
    """Bucket a price into a named band used as the ``price`` preference dimension."""

    if price is None or price < 0:
        return None
    for name, upper in PRICE_BANDS:
        if price < upper:
            return name
    return TOP_PRICE_BAND


def normalize_color(value: str) -> str:
    rgb = hex_to_rgb(value)
    return rgb_to_hex(*rgb) if rgb else value.strip().lower()


def dimension_values(attributes: Optional[ArtworkAttributes], dimension: str) -> List[str]:
    """Return the normalized values an interaction contributes to one preference dimension."""

    if attributes is None:
        return []
    if dimension == "medium":
        values: Iterable[Optional[str]] = [attributes.medium]
    elif dimension == "style":
        values = [attributes.style]
    elif dimension == "color":
        return _dedupe(normalize_color(color) for color in attributes.colors if color and color.strip())
    elif dimension == "price":
        values = [price_band(attributes.price)]
    else:
        raise KeyError(f"Unknown preference dimension: {dimension}")
    return _dedupe(value.strip().lower() for value in values if value and value.strip())


def merge_preferences(
    ranked: List[str],
    weights: Dict[str, float],
    observed: Iterable[str],
    weight: float,
    presence_weight: float = 1.0,
    cap: int = 20,
) -> Tuple[List[str], Dict[str, float]]:
    """Merge observed values into a ranked list.

    Every already-ranked value gains ``presence_weight``; each observed value gains
    ``weight``. Values whose total is not positive are dropped, the rest are
    re-sorted descending (ties keep their previous order) and truncated to ``cap``.
    """

    merged: Dict[str, float] = {}
    for value in ranked:
        merged[value] = weights.get(value, 0.0) + presence_weight
    for value in _dedupe(observed):
        merged[value] = merged.get(value, 0.0) + weight

    order = {value: index for index, value in enumerate(merged)}
    kept = sorted(
        (value for value, total in merged.items() if total > 0),
        key=lambda value: (-merged[value], order[value]),
    )[: max(0, cap)]
    return kept, {value: merged[value] for value in kept}


def _dedupe(values: Iterable[str]) -> List[str]:
    out: List[str] = []
    for value in values:
        if value not in out:
            out.append(value)
    return out
