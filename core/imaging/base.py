# Path: core/imaging/base.py
# Purpose: Define image decoding and palette extraction interfaces used by image search.
# Layer: core/imaging.
# Details: Decoders return H x W x 3 uint8 arrays; extractors reduce pixels to an ordered hex palette.

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List

import numpy as np


class ImageDecoder(ABC):
    """Interface for turning raw upload bytes into an RGB pixel buffer."""

    name: str

    @abstractmethod
    def decode(self, data: bytes) -> np.ndarray:
        """Decode image bytes into an RGB array; raises InputError for unreadable images."""


class PaletteExtractor(ABC):
    """Interface for reducing a pixel buffer to a few representative colors."""

    name: str

    @abstractmethod
    def extract(self, pixels: np.ndarray) -> List[str]:
        """Return representative colors as uppercase hex strings, most dominant first."""
