# Path: core/imaging/pil_decoder.py
# Purpose: Pillow-based image decoder and scikit-learn k-means palette extractor.
# Layer: core/imaging.
# Details: Images are downsampled to a thumbnail before sampling so decoding cost stays bounded.

from __future__ import annotations

import io
import logging
from typing import List

import numpy as np
from PIL import Image, UnidentifiedImageError
from sklearn.cluster import KMeans

from core.color.similarity import rgb_to_hex
from core.errors import InputError

from .base import ImageDecoder, PaletteExtractor

_LOGGER = logging.getLogger(__name__)


class PilImageDecoder(ImageDecoder):
    """Decode uploads with Pillow and return a thumbnail-sized RGB array."""

    name = "pil"

    def __init__(self, sample_size: int = 64, max_bytes: int = 16 * 1024 * 1024) -> None:
        self.sample_size = sample_size
        self.max_bytes = max_bytes

    def decode(self, data: bytes) -> np.ndarray:
        if not data:
            raise InputError("Image payload is empty.")
        if len(data) > self.max_bytes:
            raise InputError(f"Image payload exceeds {self.max_bytes} bytes.")
        try:
            with Image.open(io.BytesIO(data)) as image:
                image = image.convert("RGB")
                image.thumbnail((self.sample_size, self.sample_size), Image.Resampling.LANCZOS)
                return np.asarray(image, dtype=np.uint8)
        except (UnidentifiedImageError, Image.DecompressionBombError, OSError, ValueError) as exc:
            raise InputError(f"Could not decode image: {exc}") from exc


class KMeansPaletteExtractor(PaletteExtractor):
    """Reduce pixels to ``palette_size`` colors with a seeded scikit-learn k-means."""

    name = "kmeans"

    def __init__(self, palette_size: int = 5, iterations: int = 10, random_state: int = 42) -> None:
        self.palette_size = palette_size
        self.iterations = iterations
        self.random_state = random_state

    def extract(self, pixels: np.ndarray) -> List[str]:
        samples = np.asarray(pixels, dtype=np.float64).reshape(-1, 3)
        if samples.size == 0:
            return []

        # more clusters than distinct colors leaves empty clusters
        k = min(self.palette_size, len(np.unique(samples, axis=0)))
        if k < 2:
            palette = [rgb_to_hex(*samples.mean(axis=0))]
            _LOGGER.debug("Extracted palette %s from %d pixels", palette, len(samples))
            return palette

        kmeans = KMeans(n_clusters=k, random_state=self.random_state, n_init=10, max_iter=max(1, self.iterations))
        labels = kmeans.fit_predict(samples)

        counts = np.bincount(labels, minlength=k)
        order = np.argsort(-counts, kind="stable")
        palette: List[str] = []
        for index in order:
            if counts[index] == 0:
                continue
            color = rgb_to_hex(*kmeans.cluster_centers_[index])
            if color not in palette:
                palette.append(color)
        _LOGGER.debug("Extracted palette %s from %d pixels", palette, len(samples))
        return palette
