# Path: core/color/similarity.py
# Purpose: Provide hex/RGB conversion and color-distance metrics for palettes.
# Layer: core/color.
# Details: Pure numeric helpers; malformed colors never raise and simply score as dissimilar.

from __future__ import annotations

import colorsys
import math
import re
from typing import Dict, Iterable, Optional, Sequence, Tuple

import numpy as np

RGB = Tuple[int, int, int]

MAX_RGB_DISTANCE = math.sqrt(3 * 255**2)

_HEX_PATTERN = re.compile(r"^#?([0-9a-f]{6}|[0-9a-f]{3})$", re.IGNORECASE)

NAMED_COLORS: Dict[str, str] = {
    "red": "#FF0000",
    "crimson": "#DC143C",
    "orange": "#FFA500",
    "yellow": "#FFFF00",
    "green": "#00FF00",
    "blue": "#0000FF",
    "purple": "#800080",
    "black": "#000000",
    "white": "#FFFFFF",
    "gray": "#808080",
    "pink": "#FFC0CB",
    "brown": "#A52A2A",
    "teal": "#008080",
}


def hex_to_rgb(value: str) -> Optional[RGB]:
    """Convert ``#RRGGBB`` (or ``#RGB``) into an RGB triple, returning None when malformed."""

    if not isinstance(value, str):
        return None
    match = _HEX_PATTERN.match(value.strip())
    if not match:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = "".join(ch * 2 for ch in digits)
    return int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16)


def rgb_to_hex(r: int, g: int, b: int) -> str:
    channels = [max(0, min(255, int(round(channel)))) for channel in (r, g, b)]
    return "#" + "".join(f"{channel:02X}" for channel in channels)


def color_distance(color1: str, color2: str) -> float:
    """Return similarity in 0..1 where 1 means identical colors.

    Euclidean RGB distance normalized by the largest possible distance.
    """

    rgb1 = hex_to_rgb(color1)
    rgb2 = hex_to_rgb(color2)
    if rgb1 is None or rgb2 is None:
        return 0.0
    distance = float(np.linalg.norm(np.subtract(rgb1, rgb2, dtype=np.float64)))
    return max(0.0, 1.0 - distance / MAX_RGB_DISTANCE)


def palette_similarity(palette1: Sequence[str], palette2: Sequence[str]) -> float:
    """Average pairwise color similarity across two palettes; empty input scores 0."""

    if not palette1 or not palette2:
        return 0.0
    total = 0.0
    pairs = 0
    for color1 in palette1:
        for color2 in palette2:
            total += color_distance(color1, color2)
            pairs += 1
    return total / pairs if pairs else 0.0


def hex_to_color_name(value: str) -> Optional[str]:
    """Map a hex color onto the nearest named color."""

    if hex_to_rgb(value) is None:
        return None
    return max(NAMED_COLORS, key=lambda name: color_distance(value, NAMED_COLORS[name]))


def color_temperature(value: str) -> Optional[str]:
    """Classify a color as warm, cool, or neutral by hue; greys are neutral."""

    rgb = hex_to_rgb(value)
    if rgb is None:
        return None
    hue, lightness, saturation = colorsys.rgb_to_hls(*(channel / 255.0 for channel in rgb))
    if saturation < 0.15 or lightness < 0.08 or lightness > 0.95:
        return "neutral"
    degrees = hue * 360.0
    if degrees <= 60.0 or degrees >= 300.0:
        return "warm"
    if 180.0 <= degrees <= 240.0:
        return "cool"
    return "neutral"


def palette_temperature(palette: Iterable[str]) -> Optional[str]:
    """Majority temperature of a palette; ties resolve to neutral."""

    counts = {"warm": 0, "cool": 0, "neutral": 0}
    for color in palette:
        temperature = color_temperature(color)
        if temperature is not None:
            counts[temperature] += 1
    if not any(counts.values()):
        return None
    ranked = sorted(counts.items(), key=lambda item: item[1], reverse=True)
    if len(ranked) > 1 and ranked[0][1] == ranked[1][1]:
        return "neutral"
    return ranked[0][0]
