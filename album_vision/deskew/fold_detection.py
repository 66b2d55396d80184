"""
Spine (book fold) detection and page selection.

On a corrected two-page spread the binding shows up as a long, near-vertical
line close to the horizontal centre. The probabilistic Hough transform is run
on the Canny edge map of the corrected image and the longest qualifying
segment is taken as the fold.
"""

import logging
import math
from typing import Optional

import cv2
import numpy as np

from album_vision.common.types import ChannelOrder
from album_vision.deskew.boundary_detection import to_grayscale
from album_vision.deskew.config_loader import FoldConfig
from album_vision.deskew.types import FoldLine, RectificationMode

logger = logging.getLogger(__name__)


def detect_fold(
    image: np.ndarray,
    channel_order: ChannelOrder,
    config: FoldConfig,
    edge_threshold_low: float = 50.0,
    edge_threshold_high: float = 150.0,
) -> Optional[FoldLine]:
    """
    Find the spine of a corrected spread.

    A segment qualifies when its endpoints differ by less than
    ``max_horizontal_delta_px`` in x and its midpoint lies within
    ``center_tolerance_ratio * width`` of the horizontal centre. The longest
    qualifying segment wins; on equal length the first one found is kept.

    Args:
        image: Corrected image.
        channel_order: Layout of ``image``.
        config: Fold detection tunables.
        edge_threshold_low: Lower Canny threshold.
        edge_threshold_high: Upper Canny threshold.

    Returns:
        FoldLine for the spine, or None if no segment qualifies.
    """
    height, width = image.shape[:2]
    if height == 0 or width == 0:
        return None

    gray = to_grayscale(image, channel_order)
    edges = cv2.Canny(gray, edge_threshold_low, edge_threshold_high)

    min_length = height * config.min_length_ratio
    lines = cv2.HoughLinesP(
        edges,
        rho=1,
        theta=np.pi / 180,  # 1 degree resolution
        threshold=config.hough_threshold,
        minLineLength=min_length,
        maxLineGap=config.max_line_gap,
    )

    if lines is None:
        logger.debug("No Hough segments found, no fold")
        return None

    center_x = width / 2.0
    tolerance = width * config.center_tolerance_ratio

    # OpenCV 4.x returns (N, 1, 4), 5.x returns (N, 4)
    segments = np.asarray(lines).reshape(-1, 4)

    best: Optional[FoldLine] = None
    for segment in segments:
        x1, y1, x2, y2 = (int(v) for v in segment)

        avg_x = (x1 + x2) / 2.0
        length = math.hypot(x2 - x1, y2 - y1)

        is_vertical = abs(x2 - x1) < config.max_horizontal_delta_px
        is_near_center = abs(avg_x - center_x) < tolerance

        if is_vertical and is_near_center and (best is None or length > best.length):
            best = FoldLine(x=avg_x, length=length, endpoints=(x1, y1, x2, y2))

    if best is None:
        logger.debug(f"{len(segments)} Hough segments, none qualifies as a fold")
    else:
        logger.debug(f"Fold at x={best.x:.1f} (length {best.length:.0f}px)")
    return best


def crop_to_region(
    image: np.ndarray, mode: RectificationMode, fold_x: Optional[float]
) -> np.ndarray:
    """
    Keep the half of the image selected by ``mode``.

    LEFT_PAGE keeps columns [0, floor(fold_x)), RIGHT_PAGE keeps
    [floor(fold_x), width). SPREAD, a missing fold, or a split that would
    leave an empty half returns the image unchanged.
    """
    if mode == RectificationMode.SPREAD or fold_x is None:
        return image

    width = image.shape[1]
    split = int(math.floor(fold_x))
    if split <= 0 or split >= width:
        logger.warning(
            f"Fold at x={fold_x:.1f} leaves an empty half of a {width}px image, not cropping"
        )
        return image

    if mode == RectificationMode.LEFT_PAGE:
        return np.ascontiguousarray(image[:, :split])
    return np.ascontiguousarray(image[:, split:])
