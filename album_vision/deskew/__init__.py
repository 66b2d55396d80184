"""
Deskew: Album Page Rectification

Turns a photographed (possibly skewed, possibly two-page) sticker album
page into a fronto-parallel image of the requested page.

Pipeline stages:
1. Downscale to a working copy for detection
2. Edge map (grayscale, Gaussian blur, Canny)
3. Page boundary search (largest 4-vertex contour)
4. Perspective warp at full resolution, or rotation-only fallback
5. Spine (fold) detection for single-page modes
6. Region selection (left page, right page or full spread)

Example:
    >>> from album_vision.deskew import rectify, RectificationOptions
    >>> result = rectify(photo_rgba, RectificationOptions(mode="RIGHT_PAGE"))
    >>> result.confidence, result.fold_x
"""

from album_vision.deskew.config_loader import DeskewConfig, get_default_config, load_config
from album_vision.deskew.fold_detection import crop_to_region, detect_fold
from album_vision.deskew.image_rectification import order_points, warp_to_rectangle
from album_vision.deskew.processor import DeskewProcessor, rectify
from album_vision.deskew.types import (
    CorrectionPath,
    FallbackReason,
    RectificationMode,
    RectificationOptions,
    RectificationResult,
)

__all__ = [
    # Main API
    "DeskewProcessor",
    "rectify",
    # Options and results
    "RectificationMode",
    "RectificationOptions",
    "RectificationResult",
    "CorrectionPath",
    "FallbackReason",
    # Config
    "DeskewConfig",
    "load_config",
    "get_default_config",
    # Building blocks
    "order_points",
    "warp_to_rectangle",
    "detect_fold",
    "crop_to_region",
]
