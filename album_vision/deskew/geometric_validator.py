"""
Geometric validation functions for the Deskew module.

Checks that a detected page boundary can be warped into a usable image
before the perspective transformation is attempted.
"""

import logging
from typing import Tuple, Union

import numpy as np

logger = logging.getLogger(__name__)

# Below this |det| a homography is treated as singular
SINGULAR_DETERMINANT_EPS = 1e-12


def calculate_edge_lengths(
    keypoints: Union[np.ndarray, list],
) -> Tuple[float, float, float, float]:
    """
    Calculate the length of all 4 edges of a quadrilateral.

    Args:
        keypoints: 4 corner points in order [TL, TR, BR, BL].
                  Shape (4, 2) where each point is [x, y].

    Returns:
        Tuple of (top_edge, right_edge, bottom_edge, left_edge) lengths.

    Example:
        >>> points = np.array([[0, 0], [600, 0], [600, 400], [0, 400]])
        >>> top, right, bottom, left = calculate_edge_lengths(points)
        >>> print(f"Width: {top:.0f}, Height: {right:.0f}")
        Width: 600, Height: 400
    """
    keypoints = np.array(keypoints, dtype=np.float64)

    if keypoints.shape != (4, 2):
        raise ValueError(
            f"Expected 4 keypoints with shape (4, 2), got {keypoints.shape}"
        )

    tl, tr, br, bl = keypoints

    top_edge = float(np.linalg.norm(tr - tl))
    right_edge = float(np.linalg.norm(br - tr))
    bottom_edge = float(np.linalg.norm(bl - br))
    left_edge = float(np.linalg.norm(tl - bl))

    logger.debug(
        f"Edge lengths - Top: {top_edge:.1f}, Right: {right_edge:.1f}, "
        f"Bottom: {bottom_edge:.1f}, Left: {left_edge:.1f}"
    )

    return top_edge, right_edge, bottom_edge, left_edge


def calculate_destination_size(
    keypoints: Union[np.ndarray, list],
) -> Tuple[int, int]:
    """
    Calculate the pixel size of the rectified page.

    Uses the longer of each pair of opposite edges so no content is lost,
    truncated to whole pixels.

    Args:
        keypoints: 4 corner points in order [TL, TR, BR, BL].

    Returns:
        Tuple of (width, height) in pixels.

    Raises:
        ValueError: If either side truncates to zero pixels.
    """
    top, right, bottom, left = calculate_edge_lengths(keypoints)

    width = int(max(top, bottom))
    height = int(max(left, right))

    if width < 1 or height < 1:
        raise ValueError(
            f"Destination rectangle has no area: width={width}, height={height}"
        )

    logger.debug(f"Destination size: {width} x {height}")
    return width, height


def is_convex_quadrilateral(rect: np.ndarray) -> bool:
    """
    Check if 4 ordered points form a convex quadrilateral.

    For each consecutive edge pair (P1->P2, P2->P3) the 2D cross product
    (P2 - P1) x (P3 - P2) is computed; the shape is convex when all four
    share the same sign. Collinear corners (cross product ~0) count as
    non-convex because they collapse the warp.

    Args:
        rect: Ordered points [TL, TR, BR, BL] with shape (4, 2).
    """
    rect = np.asarray(rect, dtype=np.float64)
    cross_products = []

    for i in range(4):
        p1 = rect[i]
        p2 = rect[(i + 1) % 4]
        p3 = rect[(i + 2) % 4]

        v1 = p2 - p1
        v2 = p3 - p2
        cross_products.append(v1[0] * v2[1] - v1[1] * v2[0])

    positive = [cp > 1e-6 for cp in cross_products]
    negative = [cp < -1e-6 for cp in cross_products]
    is_convex = all(positive) or all(negative)

    if not is_convex:
        logger.warning(
            f"Non-convex quadrilateral detected. Cross products: {cross_products}"
        )

    return is_convex


def validate_homography(matrix: np.ndarray) -> None:
    """
    Reject homographies that cannot produce a usable warp.

    Raises:
        ValueError: If the matrix is not 3x3, has non-finite entries,
                   or is singular.
    """
    matrix = np.asarray(matrix, dtype=np.float64)
    if matrix.shape != (3, 3):
        raise ValueError(f"Expected 3x3 homography, got shape {matrix.shape}")

    if not np.all(np.isfinite(matrix)):
        raise ValueError("Homography contains non-finite values")

    det = float(np.linalg.det(matrix))
    if abs(det) < SINGULAR_DETERMINANT_EPS:
        raise ValueError(f"Homography is singular (det={det:.3e})")
