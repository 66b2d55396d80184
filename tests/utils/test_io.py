"""
Unit tests for file I/O helpers.
"""

import numpy as np
import pytest
import yaml

from album_vision.common.types import ChannelOrder
from album_vision.utils.io import load_image, load_json, save_image, save_json, save_yaml


@pytest.fixture
def coloured_rgba():
    image = np.zeros((40, 60, 4), dtype=np.uint8)
    image[:, :, 0] = 200  # Red
    image[:, :, 1] = 10
    image[:, :, 2] = 90
    image[:, :, 3] = 255
    image[10:20, 10:20, 3] = 128
    return image


class TestImageIO:
    """Tests for load_image and save_image."""

    def test_png_round_trip_keeps_rgba(self, tmp_path, coloured_rgba):
        path = tmp_path / "nested" / "page.png"
        save_image(coloured_rgba, path)

        assert path.exists()
        np.testing.assert_array_equal(load_image(path), coloured_rgba)

    def test_load_into_other_layouts(self, tmp_path, coloured_rgba):
        path = tmp_path / "page.png"
        save_image(coloured_rgba, path)

        bgr = load_image(path, ChannelOrder.BGR)
        assert bgr.shape == (40, 60, 3)
        assert tuple(bgr[0, 0]) == (90, 10, 200)

        gray = load_image(path, ChannelOrder.GRAY)
        assert gray.shape == (40, 60)

    def test_grayscale_round_trip(self, tmp_path):
        gray = np.tile(np.arange(50, dtype=np.uint8), (30, 1))
        path = tmp_path / "gray.png"
        save_image(gray, path, ChannelOrder.GRAY)

        np.testing.assert_array_equal(load_image(path, ChannelOrder.GRAY), gray)

    def test_missing_file(self, tmp_path):
        with pytest.raises(FileNotFoundError):
            load_image(tmp_path / "missing.png")

    def test_undecodable_file(self, tmp_path):
        path = tmp_path / "broken.png"
        path.write_bytes(b"not an image")

        with pytest.raises(ValueError, match="Could not decode"):
            load_image(path)

    def test_save_empty_image(self, tmp_path):
        with pytest.raises(ValueError, match="empty"):
            save_image(np.zeros((0, 0, 4), dtype=np.uint8), tmp_path / "empty.png")


class TestStructuredIO:
    def test_json_round_trip(self, tmp_path):
        data = {"mode": "LEFT_PAGE", "confidence": 0.3, "fold_x": None}
        path = tmp_path / "out" / "meta.json"

        save_json(data, path)
        assert load_json(path) == data

    def test_save_yaml(self, tmp_path):
        data = {"rotation": {"fallback_confidence": 0.3}}
        path = tmp_path / "config.yaml"

        save_yaml(data, path)
        assert yaml.safe_load(path.read_text()) == data
