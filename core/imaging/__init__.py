# Path: core/imaging/__init__.py
# Purpose: Package initializer for image decoding collaborators.
# Layer: core/imaging.
# Details: Exposes decoder and palette extractor interfaces alongside the Pillow implementations.

from .base import ImageDecoder, PaletteExtractor
from .pil_decoder import KMeansPaletteExtractor, PilImageDecoder

__all__ = ["ImageDecoder", "KMeansPaletteExtractor", "PaletteExtractor", "PilImageDecoder"]
