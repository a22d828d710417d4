# Path: core/indexing/scanner.py
# Purpose: Scan folders for artwork image files keyed by artwork id.
# Layer: core/indexing.
# Details: The file stem is the artwork id; nested folders are searched recursively.

from __future__ import annotations

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, List

_LOGGER = logging.getLogger(__name__)

SUPPORTED_EXTENSIONS = {".png", ".jpg", ".jpeg", ".bmp", ".gif", ".webp"}


@dataclass(frozen=True)
class ArtworkImage:
    artwork_id: str
    path: Path


class ImageScanner:
    """Scan filesystem paths for supported image files."""

    def __init__(self, root: Path) -> None:
        self.root = Path(root)

    def scan(self) -> List[ArtworkImage]:
        """Return discovered images sorted by path; duplicate stems keep the first file."""

        if not self.root.is_dir():
            _LOGGER.warning("Image folder %s does not exist", self.root)
            return []

        images: List[ArtworkImage] = []
        seen = set()
        for path in sorted(self._iter_image_files()):
            if path.stem in seen:
                _LOGGER.warning("Skipping %s: artwork %s already has an image", path, path.stem)
                continue
            seen.add(path.stem)
            images.append(ArtworkImage(artwork_id=path.stem, path=path))
        return images

    def _iter_image_files(self) -> Iterable[Path]:
        for path in self.root.rglob("*"):
            if path.is_file() and path.suffix.lower() in SUPPORTED_EXTENSIONS:
                yield path
