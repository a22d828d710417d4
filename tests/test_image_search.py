# Path: tests/test_image_search.py
# Purpose: Image decoding, palette extraction, and palette-based artwork search.
# Layer: tests.
# Details: Uploads are generated in memory with Pillow.

from __future__ import annotations

import io
import threading

import numpy as np
import pytest
from PIL import Image

from config.settings import ImageSearchSettings
from core.errors import InputError
from core.imaging.base import ImageDecoder
from core.imaging.pil_decoder import KMeansPaletteExtractor, PilImageDecoder
from core.search.image_search import ImageSearchOrchestrator


def png_bytes(color, size=(32, 32)) -> bytes:
    buffer = io.BytesIO()
    Image.new("RGB", size, color).save(buffer, format="PNG")
    return buffer.getvalue()


class StalledDecoder(ImageDecoder):
    name = "stalled"

    def __init__(self) -> None:
        self.release = threading.Event()

    def decode(self, data: bytes) -> np.ndarray:
        self.release.wait(2.0)
        return np.zeros((1, 1, 3), dtype=np.uint8)


@pytest.fixture
def image_search(repository):
    orchestrator = ImageSearchOrchestrator(repository, PilImageDecoder(), KMeansPaletteExtractor())
    yield orchestrator
    orchestrator.close()


def test_decoder_downsamples_to_rgb_thumbnail():
    pixels = PilImageDecoder(sample_size=64).decode(png_bytes((10, 20, 30), size=(200, 100)))

    assert pixels.shape == (32, 64, 3)
    assert pixels.dtype == np.uint8


@pytest.mark.parametrize("payload", [b"", b"definitely not an image"])
def test_decoder_rejects_unreadable_input(payload):
    with pytest.raises(InputError):
        PilImageDecoder().decode(payload)


def test_decoder_rejects_oversized_input():
    with pytest.raises(InputError):
        PilImageDecoder(max_bytes=10).decode(png_bytes((0, 0, 0)))


def test_palette_is_ordered_by_coverage():
    pixels = np.array(
        [[[255, 0, 0], [255, 0, 0]], [[255, 0, 0], [0, 0, 255]]],
        dtype=np.uint8,
    )

    assert KMeansPaletteExtractor(palette_size=5).extract(pixels) == ["#FF0000", "#0000FF"]
    assert KMeansPaletteExtractor().extract(np.zeros((0, 3))) == []


def test_palette_clusters_are_seeded_and_capped():
    row = [[200, 30, 30]] * 6 + [[30, 160, 60]] * 3 + [[20, 40, 220]] * 1
    pixels = np.array([row], dtype=np.uint8)

    palette = KMeansPaletteExtractor(palette_size=3).extract(pixels)
    assert palette == ["#C81E1E", "#1EA03C", "#1428DC"]
    assert KMeansPaletteExtractor(palette_size=3).extract(pixels) == palette
    assert len(KMeansPaletteExtractor(palette_size=2).extract(pixels)) == 2


def test_red_upload_ranks_warm_artwork_first(image_search):
    results = image_search.search_by_image(png_bytes((255, 0, 0)))

    assert results[0].artwork_id == "a2"
    scores = [result.similarity_score for result in results]
    assert scores == sorted(scores, reverse=True)
    assert all(score >= 30.0 for score in scores)
    assert "a4" not in {result.artwork_id for result in results}
    first = results[0]
    assert first.visual_matches.composition_similarity == 0.5
    assert first.visual_matches.color_similarity == pytest.approx(first.similarity_score / 100.0)
    assert first.metadata["query_palette"] == ["#FF0000"]


def test_unreadable_upload_returns_empty(image_search):
    assert image_search.search_by_image(b"garbage") == []
    assert image_search.search_by_image(b"") == []


def test_decoding_is_bounded_by_timeout(repository):
    decoder = StalledDecoder()
    orchestrator = ImageSearchOrchestrator(
        repository, decoder, KMeansPaletteExtractor(), ImageSearchSettings(decode_timeout_seconds=0.05)
    )
    try:
        with pytest.raises(TimeoutError):
            orchestrator.extract_palette(b"anything")
        assert orchestrator.search_by_image(b"anything") == []
    finally:
        decoder.release.set()
        orchestrator.close()


def test_similarity_floor_drops_distant_palettes(image_search):
    results = image_search.search_by_palette(["#FFFFFF"])

    assert all(result.similarity_score >= 30.0 for result in results)
    assert image_search.search_by_palette([]) == []
