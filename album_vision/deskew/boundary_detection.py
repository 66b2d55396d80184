"""
Page boundary detection for the Deskew module.

Finds the photographed page outline on a downscaled working copy:
1. Downscale so the longest side fits ``max_dimension``
2. Grayscale -> Gaussian blur -> Canny edge map
3. External contours -> polygon approximation -> largest 4-vertex candidate
"""

import logging
from typing import Optional

import cv2
import numpy as np

from album_vision.common.types import ChannelOrder
from album_vision.deskew.types import BoundaryCandidate

logger = logging.getLogger(__name__)

_GRAY_CONVERSIONS = {
    ChannelOrder.RGBA: cv2.COLOR_RGBA2GRAY,
    ChannelOrder.BGRA: cv2.COLOR_BGRA2GRAY,
    ChannelOrder.RGB: cv2.COLOR_RGB2GRAY,
    ChannelOrder.BGR: cv2.COLOR_BGR2GRAY,
}


def compute_working_scale(width: int, height: int, max_dimension: int) -> float:
    """
    Scale factor that fits the longest side into ``max_dimension``.

    Never upscales: the result is in (0, 1].

    Example:
        >>> compute_working_scale(2560, 1920, 1280)
        0.5
    """
    longest = max(width, height)
    if longest <= 0:
        raise ValueError(f"Image has no area: {width}x{height}")
    return min(1.0, max_dimension / float(longest))


def downscale(image: np.ndarray, scale: float) -> np.ndarray:
    """
    Resize the image by ``scale`` for detection.

    Each side is truncated to an integer and kept at least 1 px.
    Returns a copy even when ``scale`` is 1.
    """
    if scale >= 1.0:
        return image.copy()

    height, width = image.shape[:2]
    new_size = (max(1, int(width * scale)), max(1, int(height * scale)))
    logger.debug(f"Downscaling {width}x{height} -> {new_size[0]}x{new_size[1]}")
    return cv2.resize(image, new_size, interpolation=cv2.INTER_LINEAR)


def to_grayscale(image: np.ndarray, channel_order: ChannelOrder) -> np.ndarray:
    """
    Convert a buffer to single-channel intensity according to its layout.

    Raises:
        ValueError: If the buffer's channel count does not match the layout.
    """
    if image.ndim == 2:
        return image
    if image.shape[2] == 1:
        return image[:, :, 0]

    if channel_order == ChannelOrder.GRAY or image.shape[2] != channel_order.channels:
        raise ValueError(
            f"Channel order {channel_order.value} does not match "
            f"buffer with {image.shape[2]} channels"
        )
    return cv2.cvtColor(image, _GRAY_CONVERSIONS[channel_order])


def build_edge_map(
    image: np.ndarray,
    channel_order: ChannelOrder,
    threshold_low: float,
    threshold_high: float,
    blur_kernel_size: int = 5,
) -> np.ndarray:
    """
    Produce a binary Canny edge map of the image.

    Args:
        image: Working copy (any supported channel layout).
        channel_order: Layout of ``image``.
        threshold_low: Lower hysteresis threshold.
        threshold_high: Upper hysteresis threshold.
        blur_kernel_size: Odd Gaussian kernel size used to suppress noise.

    Returns:
        uint8 array of the same height and width, values 0 or 255.
    """
    gray = to_grayscale(image, channel_order)
    blurred = cv2.GaussianBlur(gray, (blur_kernel_size, blur_kernel_size), 0)
    return cv2.Canny(blurred, threshold_low, threshold_high)


def find_boundary_candidate(
    edges: np.ndarray,
    min_area_fraction: float,
    approx_epsilon_ratio: float = 0.02,
) -> Optional[BoundaryCandidate]:
    """
    Find the largest external contour that approximates to four vertices.

    Contours enclosing less than ``min_area_fraction`` of the edge map are
    skipped. Among the rest, the one with the largest contour area whose
    polygon approximation has exactly four vertices wins; on equal area the
    first contour found is kept.

    Args:
        edges: Binary edge map of the working image.
        min_area_fraction: Minimum contour area as a share of the image.
        approx_epsilon_ratio: approxPolyDP tolerance as a share of perimeter.

    Returns:
        BoundaryCandidate with unordered vertices, or None if nothing qualifies.
    """
    height, width = edges.shape[:2]
    working_area = float(width * height)
    min_area = working_area * min_area_fraction

    contours, _ = cv2.findContours(edges, cv2.RETR_EXTERNAL, cv2.CHAIN_APPROX_SIMPLE)

    best: Optional[BoundaryCandidate] = None
    for contour in contours:
        area = cv2.contourArea(contour)
        if area < min_area:
            continue

        perimeter = cv2.arcLength(contour, True)
        approx = cv2.approxPolyDP(contour, approx_epsilon_ratio * perimeter, True)

        if len(approx) == 4 and (best is None or area > best.area):
            best = BoundaryCandidate(
                points=approx.reshape(4, 2).astype(np.float32),
                area=float(area),
                working_area=working_area,
            )

    if best is None:
        logger.debug(f"Boundary search: {len(contours)} contours, no 4-vertex candidate")
    else:
        logger.debug(
            f"Boundary search: {len(contours)} contours, "
            f"best coverage {best.coverage:.3f}"
        )
    return best
