"""
Image Rectification Utilities

Provides the two corrections the deskew pipeline can apply to a
full-resolution photograph:
- Perspective warp of a detected page quadrilateral to a rectangle
- Rotation-only deskew estimated from the edge map (fallback)
"""

import logging
import math
from typing import Optional, Tuple, Union

import cv2
import numpy as np

from album_vision.deskew.geometric_validator import (
    calculate_destination_size,
    is_convex_quadrilateral,
    validate_homography,
)

logger = logging.getLogger(__name__)

INTERPOLATION_FLAGS = {
    "linear": cv2.INTER_LINEAR,
    "cubic": cv2.INTER_CUBIC,
    "nearest": cv2.INTER_NEAREST,
    "area": cv2.INTER_AREA,
    "lanczos": cv2.INTER_LANCZOS4,
}

# Smaller rotations move no pixel measurably and are skipped
MIN_ROTATION_DEG = 1e-3


def order_points(pts: Union[np.ndarray, list]) -> np.ndarray:
    """
    Order 4 points as Top-Left, Top-Right, Bottom-Right, Bottom-Left.

    The vertices are sorted by their angle around the centroid, which (with
    the image y-axis pointing down) walks them clockwise on screen. The
    sequence is then rotated so it starts at the vertex with the smallest
    ``(x - cx) + (y - cy)``, i.e. the one furthest towards the top-left.

    Ties are broken deterministically: vertices with equal angle sort by y
    then x, and when two vertices are equally top-left the one with the
    smaller y (then smaller x) starts. A square rotated by exactly 45
    degrees therefore starts at its topmost vertex.

    Args:
        pts: Array of 4 points with shape (4, 2) or list of [x, y] coordinates.

    Returns:
        Ordered float32 array of shape (4, 2): [TL, TR, BR, BL].

    Raises:
        ValueError: If input does not contain exactly 4 points.

    Example:
        >>> pts = np.array([[300, 150], [100, 200], [320, 400], [80, 380]])
        >>> order_points(pts)[0]
        array([100., 200.], dtype=float32)
    """
    pts = np.array(pts, dtype=np.float32)
    if pts.shape == (4, 1, 2):
        pts = pts.reshape(4, 2)

    if pts.shape != (4, 2):
        raise ValueError(
            f"Expected exactly 4 points with shape (4, 2), got shape {pts.shape}"
        )

    cx, cy = (float(v) for v in pts.astype(np.float64).mean(axis=0))

    clockwise = sorted(
        (tuple(float(c) for c in p) for p in pts),
        key=lambda p: (math.atan2(p[1] - cy, p[0] - cx), p[1], p[0]),
    )

    start = min(
        range(4),
        key=lambda i: (
            (clockwise[i][0] - cx) + (clockwise[i][1] - cy),
            clockwise[i][1],
            clockwise[i][0],
        ),
    )
    rect = np.array(clockwise[start:] + clockwise[:start], dtype=np.float32)

    logger.debug(
        f"Ordered points: TL={rect[0]}, TR={rect[1]}, BR={rect[2]}, BL={rect[3]}"
    )
    return rect


def warp_to_rectangle(
    image: np.ndarray,
    quad: Union[np.ndarray, list],
    interpolation: str = "linear",
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Warp a quadrilateral region of the image to a fronto-parallel rectangle.

    The destination size is the longer of each pair of opposite edges.

    Args:
        image: Full-resolution image (H, W, C) or (H, W).
        quad: 4 corner points in image coordinates, any order.
        interpolation: Key of INTERPOLATION_FLAGS.

    Returns:
        Tuple of (warped image, 3x3 float64 homography).

    Raises:
        ValueError: If the quadrilateral is non-convex, collapses to a zero-size
                   rectangle, or yields a singular homography.
    """
    if image is None or image.size == 0:
        raise ValueError("Invalid input image: image is None or empty")

    rect = order_points(quad)

    if not is_convex_quadrilateral(rect):
        raise ValueError(
            "Ordered points do not form a convex quadrilateral. "
            "The detected boundary may be self-intersecting or degenerate."
        )

    max_width, max_height = calculate_destination_size(rect)

    dst = np.array(
        [
            [0, 0],
            [max_width - 1, 0],
            [max_width - 1, max_height - 1],
            [0, max_height - 1],
        ],
        dtype=np.float32,
    )

    matrix = cv2.getPerspectiveTransform(rect, dst)
    validate_homography(matrix)

    warped = cv2.warpPerspective(
        image,
        matrix,
        (max_width, max_height),
        flags=INTERPOLATION_FLAGS[interpolation],
    )

    logger.info(f"Warped page quadrilateral to {max_width}x{max_height} rectangle")
    return warped, np.asarray(matrix, dtype=np.float64)


def normalize_angle(angle: float) -> float:
    """
    Bring a minAreaRect angle into (-45, 45] degrees.

    Handles both OpenCV conventions ([-90, 0) before 4.5.1, (0, 90] after).

    Example:
        >>> normalize_angle(-80.0)
        10.0
        >>> normalize_angle(90.0)
        0.0
    """
    angle = float(angle)
    while angle <= -45.0:
        angle += 90.0
    while angle > 45.0:
        angle -= 90.0
    return angle


def estimate_skew_angle(edges: np.ndarray) -> float:
    """
    Estimate page skew from the minimum-area rectangle around all edge pixels.

    Positive angles mean the content appears rotated clockwise on screen.

    Args:
        edges: Binary edge map.

    Returns:
        Skew in degrees within (-45, 45]; 0.0 when there are no edge pixels.
    """
    points: Optional[np.ndarray] = cv2.findNonZero(edges)
    if points is None or len(points) < 3:
        logger.debug("No edge pixels for skew estimation, assuming 0 deg")
        return 0.0

    (_, _), (_, _), raw_angle = cv2.minAreaRect(points)
    angle = normalize_angle(raw_angle)
    logger.debug(f"minAreaRect angle {raw_angle:.2f} -> skew {angle:.2f} deg")
    return angle


def rotate_image(
    image: np.ndarray,
    skew_angle: float,
    interpolation: str = "linear",
) -> Tuple[np.ndarray, np.ndarray]:
    """
    Undo a skew by rotating the image about its centre.

    The content is turned back by ``skew_angle`` (counter-clockwise on screen
    for a positive skew). The output keeps the input size; uncovered corners
    are filled with zeros.

    Args:
        image: Full-resolution image.
        skew_angle: Skew in degrees, as returned by estimate_skew_angle.
        interpolation: Key of INTERPOLATION_FLAGS.

    Returns:
        Tuple of (rotated image, 2x3 affine matrix).
    """
    height, width = image.shape[:2]

    if abs(skew_angle) < MIN_ROTATION_DEG:
        return image.copy(), np.array([[1.0, 0.0, 0.0], [0.0, 1.0, 0.0]])

    center = (width / 2.0, height / 2.0)
    # getRotationMatrix2D treats positive angles as counter-clockwise
    matrix = cv2.getRotationMatrix2D(center, skew_angle, 1.0)
    rotated = cv2.warpAffine(
        image, matrix, (width, height), flags=INTERPOLATION_FLAGS[interpolation]
    )

    logger.info(f"Rotated image by {-skew_angle:.2f} deg (clockwise-positive)")
    return rotated, matrix
