"""
Vision backend capability check.

The deskew pipeline delegates edge detection, contour search, homography
estimation and warping to OpenCV. Some OpenCV builds (minimal or custom
wheels) ship without parts of the imgproc module, so the processor probes
for every primitive it needs before running and degrades to a passthrough
result when any is missing.

The check covers partial builds only. cv2 itself is a hard dependency and is
imported at package import time, so an environment without OpenCV fails with
ImportError before any passthrough can be returned.
"""

import logging
from types import ModuleType
from typing import List, Optional

import cv2

logger = logging.getLogger(__name__)

# Every cv2 attribute the pipeline touches
REQUIRED_PRIMITIVES = (
    "resize",
    "cvtColor",
    "GaussianBlur",
    "Canny",
    "findContours",
    "contourArea",
    "arcLength",
    "approxPolyDP",
    "getPerspectiveTransform",
    "warpPerspective",
    "findNonZero",
    "minAreaRect",
    "getRotationMatrix2D",
    "warpAffine",
    "HoughLinesP",
)


def missing_primitives(module: Optional[ModuleType] = None) -> List[str]:
    """
    List the required primitives absent from a vision module.

    Args:
        module: Module to inspect (default: the imported cv2).

    Returns:
        Names of missing attributes, empty when the backend is complete.
    """
    backend = cv2 if module is None else module
    return [name for name in REQUIRED_PRIMITIVES if not callable(getattr(backend, name, None))]


def check_opencv_backend() -> bool:
    """
    Check whether the loaded OpenCV build provides the full pipeline.

    Returns:
        True if every required primitive is available.
    """
    missing = missing_primitives()
    if missing:
        logger.error(
            f"OpenCV {getattr(cv2, '__version__', '?')} is missing required "
            f"primitives: {missing}"
        )
        return False

    logger.debug(f"OpenCV {cv2.__version__} backend available")
    return True
