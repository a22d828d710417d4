# Path: core/indexing/palette_indexer.py
# Purpose: Extract dominant palettes from artwork images and store them on the matching artworks.
# Layer: core/indexing.
# Details: Offline batch job; images that fail to decode are reported and skipped.

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Protocol

from tqdm import tqdm

from core.errors import InputError
from core.imaging.base import ImageDecoder, PaletteExtractor
from core.indexing.scanner import ArtworkImage

_LOGGER = logging.getLogger(__name__)


class PaletteSink(Protocol):
    def update_artwork_palette(self, artwork_id: str, palette: List[str]) -> bool:
        ...


@dataclass
class IndexReport:
    indexed: List[str] = field(default_factory=list)
    unknown: List[str] = field(default_factory=list)
    failed: List[str] = field(default_factory=list)


class PaletteIndexer:
    """Populate ``dominant_colors`` for artworks that have an image on disk."""

    def __init__(self, decoder: ImageDecoder, palette_extractor: PaletteExtractor, sink: PaletteSink) -> None:
        self.decoder = decoder
        self.palette_extractor = palette_extractor
        self.sink = sink

    def build_index(self, images: Iterable[ArtworkImage], show_progress: bool = True) -> IndexReport:
        """
        Decode every image, extract its palette and hand it to the sink.

        External calls:
        - core/imaging/pil_decoder.py::PilImageDecoder.decode - load and downsample the image file.
        - core/imaging/pil_decoder.py::KMeansPaletteExtractor.extract - reduce pixels to a hex palette.
        - core/repository/sqlite_store.py::SqliteRepository.update_artwork_palette - persist the palette.
        """

        report = IndexReport()
        for image in tqdm(list(images), desc="Indexing palettes", unit="img", disable=not show_progress):
            try:
                pixels = self.decoder.decode(image.path.read_bytes())
            except (InputError, OSError) as exc:
                _LOGGER.warning("Could not decode %s: %s", image.path, exc)
                report.failed.append(image.artwork_id)
                continue
            palette = self.palette_extractor.extract(pixels)
            if self.sink.update_artwork_palette(image.artwork_id, palette):
                report.indexed.append(image.artwork_id)
            else:
                report.unknown.append(image.artwork_id)

        _LOGGER.info(
            "Palette indexing finished: %d indexed, %d unknown, %d failed",
            len(report.indexed),
            len(report.unknown),
            len(report.failed),
        )
        return report
