# Path: core/indexing/__init__.py
# Purpose: Package initializer for indexing utilities.
# Layer: core/indexing.
# Details: Exposes image scanning and palette indexing helpers.

from .scanner import ArtworkImage, ImageScanner
from .palette_indexer import IndexReport, PaletteIndexer

__all__ = ["ArtworkImage", "ImageScanner", "IndexReport", "PaletteIndexer"]
