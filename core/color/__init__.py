# Path: core/color/__init__.py
# Purpose: Package initializer for color metrics.
# Layer: core/color.
# Details: Exposes conversion, distance, and palette similarity helpers.

from .similarity import (
    MAX_RGB_DISTANCE,
    NAMED_COLORS,
    color_distance,
    color_temperature,
    hex_to_color_name,
    hex_to_rgb,
    palette_similarity,
    palette_temperature,
    rgb_to_hex,
)

__all__ = [
    "MAX_RGB_DISTANCE",
    "NAMED_COLORS",
    "color_distance",
    "color_temperature",
    "hex_to_color_name",
    "hex_to_rgb",
    "palette_similarity",
    "palette_temperature",
    "rgb_to_hex",
]
