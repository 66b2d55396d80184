"""
Common type definitions for the album vision package.

This module provides Pydantic-based type definitions for the core data
structures shared by the image-processing modules: raw pixel buffers and
page-boundary quadrilaterals.

Buffers are validated once at the library boundary (uint8, 1/3/4 channels
matching the declared layout) so the OpenCV stages can trust their input.
"""

from enum import Enum
from typing import List, Tuple, Union

import numpy as np
from pydantic import BaseModel, Field, field_validator, model_validator


class ChannelOrder(Enum):
    """Per-pixel channel layout of an image buffer."""

    RGBA = "RGBA"
    RGB = "RGB"
    BGRA = "BGRA"
    BGR = "BGR"
    GRAY = "GRAY"

    @property
    def channels(self) -> int:
        """Number of samples per pixel for this layout."""
        return {"RGBA": 4, "BGRA": 4, "RGB": 3, "BGR": 3, "GRAY": 1}[self.value]


class RawImage(BaseModel):
    """
    Type-safe wrapper for a captured photograph (numpy.ndarray).

    Unlike most image wrappers, an empty buffer is accepted here: a zero-area
    capture is a valid (degenerate) input that the rectifier answers with an
    empty result instead of an exception.

    Attributes:
        data: The underlying numpy array containing pixel data.
            Shape: (H, W, C) for color images, (H, W) for grayscale.
            Dtype: uint8 (0-255).
        channel_order: Layout of the samples in each pixel (default RGBA).

    Example:
        >>> frame = np.zeros((480, 640, 4), dtype=np.uint8)
        >>> raw = RawImage(data=frame)
        >>> print(raw.height, raw.width, raw.channel_order)
        480 640 ChannelOrder.RGBA
    """

    data: np.ndarray = Field(..., description="Pixel data as numpy array")
    channel_order: ChannelOrder = Field(
        default=ChannelOrder.RGBA, description="Channel layout of each pixel"
    )

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    @field_validator("data")
    @classmethod
    def _validate_image(cls, v: np.ndarray) -> np.ndarray:
        """
        Validate that the numpy array is a usable pixel buffer.

        Raises:
            ValueError: If array is not a valid image format.
        """
        if not isinstance(v, np.ndarray):
            raise ValueError(f"Expected numpy.ndarray, got {type(v)}")

        if v.ndim not in (2, 3):
            raise ValueError(
                f"Expected 2D (grayscale) or 3D (color) image, got shape {v.shape}"
            )

        if v.ndim == 3 and v.shape[2] not in (1, 3, 4):
            raise ValueError(
                f"Expected 1, 3, or 4 channels for color image, got {v.shape[2]}"
            )

        if v.dtype != np.uint8:
            raise ValueError(
                f"Expected uint8 dtype for image, got {v.dtype}. "
                "Images should be in range [0, 255]"
            )

        return v

    @model_validator(mode="after")
    def _validate_channel_order(self) -> "RawImage":
        """Check that the declared channel order matches the buffer."""
        if self.data.size > 0 and self.channels != self.channel_order.channels:
            raise ValueError(
                f"Channel order {self.channel_order.value} expects "
                f"{self.channel_order.channels} channel(s), buffer has {self.channels}"
            )
        return self

    @property
    def shape(self) -> Tuple[int, ...]:
        """Get image shape (H, W) or (H, W, C)."""
        return self.data.shape

    @property
    def height(self) -> int:
        """Get image height in pixels."""
        return int(self.data.shape[0])

    @property
    def width(self) -> int:
        """Get image width in pixels."""
        return int(self.data.shape[1])

    @property
    def channels(self) -> int:
        """Get number of channels (1 for grayscale, 3 or 4 for color)."""
        if self.data.ndim == 2:
            return 1
        return int(self.data.shape[2])

    @property
    def is_degenerate(self) -> bool:
        """True when the buffer has zero width or zero height."""
        return self.data.size == 0 or self.width == 0 or self.height == 0

    def to_numpy(self) -> np.ndarray:
        """Get underlying numpy array."""
        return self.data

    def __repr__(self) -> str:
        return (
            f"RawImage(shape={self.shape}, dtype={self.data.dtype}, "
            f"channel_order={self.channel_order.value})"
        )


class Quadrilateral(BaseModel):
    """
    Four corner points of a detected page boundary.

    Points are stored as float32 in the order they were given. Callers that
    need the canonical Top-Left, Top-Right, Bottom-Right, Bottom-Left order
    should build the quadrilateral from ``order_points`` output.

    Attributes:
        points: Array of shape (4, 2) with [x, y] coordinates.

    Example:
        >>> quad = Quadrilateral.from_list([[0, 0], [100, 0], [100, 50], [0, 50]])
        >>> quad.area
        5000.0
    """

    points: np.ndarray = Field(..., description="Corner points, shape (4, 2)")

    model_config = {"arbitrary_types_allowed": True, "frozen": True}

    @field_validator("points", mode="before")
    @classmethod
    def _convert_points(cls, v: Union[np.ndarray, list]) -> np.ndarray:
        pts = np.asarray(v, dtype=np.float32)
        # OpenCV contour layout
        if pts.shape == (4, 1, 2):
            pts = pts.reshape(4, 2)
        if pts.shape != (4, 2):
            raise ValueError(
                f"Expected exactly 4 points with shape (4, 2), got shape {pts.shape}"
            )
        if not np.all(np.isfinite(pts)):
            raise ValueError("Quadrilateral points must be finite")
        return pts

    @classmethod
    def from_list(cls, coords: List[List[float]]) -> "Quadrilateral":
        """Create a Quadrilateral from a list of four [x, y] pairs."""
        return cls(points=coords)

    @property
    def top_left(self) -> np.ndarray:
        return self.points[0]

    @property
    def top_right(self) -> np.ndarray:
        return self.points[1]

    @property
    def bottom_right(self) -> np.ndarray:
        return self.points[2]

    @property
    def bottom_left(self) -> np.ndarray:
        return self.points[3]

    @property
    def area(self) -> float:
        """Polygon area via the shoelace formula (points taken in stored order)."""
        x = self.points[:, 0].astype(np.float64)
        y = self.points[:, 1].astype(np.float64)
        return float(0.5 * abs(np.dot(x, np.roll(y, -1)) - np.dot(y, np.roll(x, -1))))

    @property
    def centroid(self) -> Tuple[float, float]:
        """Mean of the four vertices."""
        cx, cy = self.points.mean(axis=0)
        return float(cx), float(cy)

    def scaled(self, factor: float) -> "Quadrilateral":
        """
        Return a copy with every coordinate multiplied by ``factor``.

        Raises:
            ValueError: If factor is not strictly positive.
        """
        if factor <= 0:
            raise ValueError(f"Scale factor must be positive, got {factor}")
        return Quadrilateral(points=self.points * np.float32(factor))

    def to_numpy(self, dtype: type = np.float32) -> np.ndarray:
        """Copy of the points as an array of shape (4, 2)."""
        return self.points.astype(dtype)

    def to_list(self) -> List[List[float]]:
        """Points as plain Python floats, e.g. for JSON output."""
        return [[float(x), float(y)] for x, y in self.points]

    def __repr__(self) -> str:
        return f"Quadrilateral(points={self.to_list()})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Quadrilateral):
            return False
        return bool(np.array_equal(self.points, other.points))
