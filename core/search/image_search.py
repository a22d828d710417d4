# Path: core/search/image_search.py
# Purpose: Rank artworks by palette similarity to an uploaded image.
# Layer: core/search.
# Details: Only color similarity is measured; composition, style, and subject carry a fixed neutral value.

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeoutError
from typing import List, Optional, Sequence

from config.settings import ImageSearchSettings
from core.color.similarity import palette_similarity
from core.errors import InputError
from core.imaging.base import ImageDecoder, PaletteExtractor
from core.models.domain import ImageSearchResult, QueryFilters, VisualMatches, finite_or_zero
from core.repository.base import Repository

_LOGGER = logging.getLogger(__name__)


class ImageSearchOrchestrator:
    """Extract a palette from an image and compare it against stored artwork palettes."""

    def __init__(
        self,
        repository: Repository,
        decoder: ImageDecoder,
        palette_extractor: PaletteExtractor,
        settings: Optional[ImageSearchSettings] = None,
        executor: Optional[ThreadPoolExecutor] = None,
    ) -> None:
        self.repository = repository
        self.decoder = decoder
        self.palette_extractor = palette_extractor
        self.settings = settings or ImageSearchSettings()
        self._owns_executor = executor is None
        self.executor = executor or ThreadPoolExecutor(max_workers=2, thread_name_prefix="image-decode")

    def close(self) -> None:
        if self._owns_executor:
            self.executor.shutdown(wait=False, cancel_futures=True)

    def extract_palette(self, image_bytes: bytes) -> List[str]:
        """Decode and reduce an image, bounded by the decode timeout.

        Raises InputError for unreadable images and TimeoutError when decoding overruns.
        """

        future = self.executor.submit(lambda: self.palette_extractor.extract(self.decoder.decode(image_bytes)))
        try:
            return future.result(timeout=self.settings.decode_timeout_seconds)
        except FutureTimeoutError as exc:
            future.cancel()
            raise TimeoutError(
                f"Image decoding timed out after {self.settings.decode_timeout_seconds:.1f}s."
            ) from exc

    def search_by_image(self, image_bytes: bytes) -> List[ImageSearchResult]:
        """
        Return artworks whose palettes resemble the uploaded image.

        External calls:
        - core/imaging/base.py::ImageDecoder.decode - decode upload bytes.
        - core/imaging/base.py::PaletteExtractor.extract - reduce pixels to a palette.
        - core/repository/base.py::Repository.query_artworks - artworks with stored palettes.
        """

        try:
            palette = self.extract_palette(image_bytes)
        except InputError as exc:
            _LOGGER.info("Rejected image upload: %s", exc)
            return []
        except Exception:
            _LOGGER.warning("Image decoding failed", exc_info=True)
            return []
        return self.search_by_palette(palette)

    def search_by_palette(self, palette: Sequence[str]) -> List[ImageSearchResult]:
        if not palette:
            return []
        try:
            artworks = self.repository.query_artworks(QueryFilters(require_palette=True), self.settings.corpus_limit)
        except Exception:
            _LOGGER.warning("Artwork palette lookup failed", exc_info=True)
            return []

        neutral = self.settings.neutral_visual_score
        results: List[ImageSearchResult] = []
        for artwork in artworks:
            similarity = min(1.0, finite_or_zero(palette_similarity(palette, artwork.dominant_colors)))
            score = similarity * 100.0
            if score < self.settings.min_similarity:
                continue
            results.append(
                ImageSearchResult(
                    artwork_id=artwork.id,
                    similarity_score=score,
                    visual_matches=VisualMatches(
                        color_similarity=similarity,
                        composition_similarity=neutral,
                        style_similarity=neutral,
                        subject_similarity=neutral,
                    ),
                    metadata={
                        "title": artwork.title,
                        "image_url": artwork.image_url,
                        "artist_name": artwork.artist_name,
                        "price": artwork.price,
                        "dominant_colors": list(artwork.dominant_colors),
                        "query_palette": list(palette),
                    },
                )
            )
        results.sort(key=lambda result: result.similarity_score, reverse=True)
        return results[: self.settings.max_results]
