# Path: scripts/index_palettes.py
# Purpose: CLI tool to scan artwork images and store their dominant palettes.
# Layer: scripts.
# Details: Wires scanning, PIL decoding, k-means palette extraction, and the SQLite repository together.

from __future__ import annotations

import argparse
import sys
from pathlib import Path

# Ensure project root is on sys.path when running as a script.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from config import AppSettings
from core.imaging.pil_decoder import KMeansPaletteExtractor, PilImageDecoder
from core.indexing.palette_indexer import PaletteIndexer
from core.indexing.scanner import ImageScanner
from core.repository.sqlite_store import SqliteRepository
from core.service import configure_logging


def main() -> None:
    """Run palette indexing over a folder of artwork images."""

    parser = argparse.ArgumentParser(description="Extract artwork palettes for image search")
    parser.add_argument("--folder", type=Path, default=None, help="Folder containing <artwork_id>.<ext> images")
    parser.add_argument("--db", type=Path, default=None, help="SQLite database holding the artworks")
    parser.add_argument("--palette-size", type=int, default=None, help="Colors extracted per image")
    args = parser.parse_args()

    settings = AppSettings.from_env()
    configure_logging(settings.log_level)
    folder = args.folder or settings.image_folder
    database_path = args.db or settings.repository.database_path
    image_settings = settings.image_search

    images = ImageScanner(folder).scan()
    repository = SqliteRepository(database_path)
    indexer = PaletteIndexer(
        decoder=PilImageDecoder(image_settings.sample_size, image_settings.max_image_bytes),
        palette_extractor=KMeansPaletteExtractor(
            args.palette_size or image_settings.palette_size, image_settings.kmeans_iterations
        ),
        sink=repository,
    )
    report = indexer.build_index(images)
    print(
        f"Indexed {len(report.indexed)} of {len(images)} images into {database_path} "
        f"({len(report.unknown)} unknown artworks, {len(report.failed)} unreadable)"
    )


if __name__ == "__main__":
    main()
