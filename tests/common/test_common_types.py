"""
Unit tests for the shared RawImage and Quadrilateral types.
"""

import numpy as np
import pytest
from pydantic import ValidationError

from album_vision.common.types import ChannelOrder, Quadrilateral, RawImage


class TestRawImage:
    """Tests for RawImage validation and properties."""

    def test_rgba_buffer(self):
        raw = RawImage(data=np.zeros((48, 64, 4), dtype=np.uint8))

        assert raw.width == 64
        assert raw.height == 48
        assert raw.channels == 4
        assert raw.channel_order == ChannelOrder.RGBA
        assert raw.is_degenerate is False

    def test_grayscale_buffer(self):
        raw = RawImage(
            data=np.zeros((10, 20), dtype=np.uint8), channel_order=ChannelOrder.GRAY
        )
        assert raw.channels == 1

    def test_empty_buffer_is_degenerate_not_invalid(self):
        """Zero-area captures are accepted and flagged, not rejected."""
        raw = RawImage(data=np.zeros((0, 100, 4), dtype=np.uint8))
        assert raw.is_degenerate is True

    def test_wrong_dtype_rejected(self):
        with pytest.raises(ValidationError, match="uint8"):
            RawImage(data=np.zeros((10, 10, 4), dtype=np.float32))

    def test_channel_mismatch_rejected(self):
        with pytest.raises(ValidationError, match="expects 4 channel"):
            RawImage(data=np.zeros((10, 10, 3), dtype=np.uint8))

    def test_one_dimensional_rejected(self):
        with pytest.raises(ValidationError, match="2D"):
            RawImage(data=np.zeros(10, dtype=np.uint8))


class TestQuadrilateral:
    """Tests for Quadrilateral geometry helpers."""

    def test_area_of_rectangle(self):
        quad = Quadrilateral.from_list([[0, 0], [100, 0], [100, 50], [0, 50]])
        assert quad.area == pytest.approx(5000.0)

    def test_corner_accessors(self):
        quad = Quadrilateral.from_list([[1, 2], [3, 4], [5, 6], [7, 8]])

        np.testing.assert_array_equal(quad.top_left, [1, 2])
        np.testing.assert_array_equal(quad.top_right, [3, 4])
        np.testing.assert_array_equal(quad.bottom_right, [5, 6])
        np.testing.assert_array_equal(quad.bottom_left, [7, 8])

    def test_accepts_opencv_contour_layout(self):
        contour = np.array([[[0, 0]], [[10, 0]], [[10, 10]], [[0, 10]]], dtype=np.int32)
        quad = Quadrilateral(points=contour)
        assert quad.points.shape == (4, 2)
        assert quad.points.dtype == np.float32

    def test_scaled(self):
        quad = Quadrilateral.from_list([[0, 0], [100, 0], [100, 50], [0, 50]])
        bigger = quad.scaled(2.5)

        assert bigger.area == pytest.approx(quad.area * 2.5**2)
        np.testing.assert_allclose(bigger.bottom_right, [250, 125])

    def test_scaled_rejects_non_positive(self):
        quad = Quadrilateral.from_list([[0, 0], [1, 0], [1, 1], [0, 1]])
        with pytest.raises(ValueError, match="positive"):
            quad.scaled(0)

    def test_wrong_point_count(self):
        with pytest.raises(ValidationError, match="Expected exactly 4 points"):
            Quadrilateral.from_list([[0, 0], [1, 0], [1, 1]])

    def test_non_finite_rejected(self):
        with pytest.raises(ValidationError, match="finite"):
            Quadrilateral.from_list([[0, 0], [np.nan, 0], [1, 1], [0, 1]])

    def test_to_list_is_json_friendly(self):
        quad = Quadrilateral.from_list([[0.5, 1], [2, 3], [4, 5], [6, 7]])
        as_list = quad.to_list()

        assert as_list[0] == [0.5, 1.0]
        assert all(isinstance(v, float) for point in as_list for v in point)

    def test_equality(self):
        a = Quadrilateral.from_list([[0, 0], [1, 0], [1, 1], [0, 1]])
        b = Quadrilateral.from_list([[0, 0], [1, 0], [1, 1], [0, 1]])
        c = a.scaled(2)

        assert a == b
        assert a != c
