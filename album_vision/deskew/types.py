"""
Data types and structures for the Deskew module.

Provides type-safe containers for per-call options and results.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from album_vision.common.types import ChannelOrder, Quadrilateral


class RectificationMode(Enum):
    """Which region of a two-page layout to keep after correction."""

    LEFT_PAGE = "LEFT_PAGE"
    RIGHT_PAGE = "RIGHT_PAGE"
    SPREAD = "SPREAD"  # Keep everything, never split

    @classmethod
    def parse(cls, value: Union[str, "RectificationMode"]) -> "RectificationMode":
        """
        Parse a mode name, accepting the capture UI's short aliases.

        Example:
            >>> RectificationMode.parse("left")
            <RectificationMode.LEFT_PAGE: 'LEFT_PAGE'>
        """
        if isinstance(value, cls):
            return value
        key = str(value).strip().upper()
        aliases = {"LEFT": cls.LEFT_PAGE, "RIGHT": cls.RIGHT_PAGE}
        if key in aliases:
            return aliases[key]
        try:
            return cls(key)
        except ValueError as e:
            valid = [m.value for m in cls] + list(aliases)
            raise ValueError(
                f"Unknown rectification mode {value!r}, expected one of {valid}"
            ) from e


class CorrectionPath(Enum):
    """Which correction the pipeline applied."""

    PERSPECTIVE = "PERSPECTIVE"  # Full homography warp
    ROTATION = "ROTATION"  # Rotation-only fallback
    PASSTHROUGH = "PASSTHROUGH"  # No correction (degenerate input or no backend)


class FallbackReason(Enum):
    """Why the perspective path was not taken."""

    NONE = "None"
    NO_BOUNDARY = "No Boundary"  # No four-vertex candidate found
    LOW_COVERAGE = "Low Coverage"  # Candidate covers too little of the frame
    NUMERICAL_DEGENERACY = "Numerical Degeneracy"  # Zero-size target or singular homography
    DEGENERATE_INPUT = "Degenerate Input"  # Zero-area or missing image
    UNAVAILABLE_BACKEND = "Unavailable Backend"  # Vision primitives missing
    BACKEND_ERROR = "Backend Error"  # Vision backend raised mid-pipeline


class RectificationOptions(BaseModel):
    """
    Per-call options for the rectifier.

    Attributes:
        mode: Region to keep after correction.
        max_dimension: Longest side (px) of the working copy used for detection.
        edge_threshold_low: Lower Canny hysteresis threshold.
        edge_threshold_high: Upper Canny hysteresis threshold.
        min_boundary_area_fraction: Minimum share of the working image a
            boundary contour must enclose to be considered.
        channel_order: Channel layout of the input buffer.
    """

    model_config = ConfigDict(frozen=True)

    mode: RectificationMode
    max_dimension: int = Field(default=1280, gt=0)
    edge_threshold_low: float = Field(default=50.0, ge=0.0)
    edge_threshold_high: float = Field(default=150.0, ge=0.0)
    min_boundary_area_fraction: float = Field(default=0.1, ge=0.0, le=1.0)
    channel_order: ChannelOrder = ChannelOrder.RGBA

    @field_validator("mode", mode="before")
    @classmethod
    def _parse_mode(cls, v):
        return RectificationMode.parse(v)

    @model_validator(mode="after")
    def _check_thresholds(self) -> "RectificationOptions":
        if self.edge_threshold_low > self.edge_threshold_high:
            raise ValueError(
                f"edge_threshold_low ({self.edge_threshold_low}) must not exceed "
                f"edge_threshold_high ({self.edge_threshold_high})"
            )
        return self


@dataclass
class BoundaryCandidate:
    """Best four-vertex contour found in the working image."""

    points: np.ndarray  # (4, 2) float32, working-image coordinates, unordered
    area: float  # Contour area in working-image pixels
    working_area: float  # Width * height of the working image

    @property
    def coverage(self) -> float:
        """Fraction of the working image enclosed by the contour."""
        if self.working_area <= 0:
            return 0.0
        return self.area / self.working_area


@dataclass
class FoldLine:
    """A detected spine segment on the corrected image."""

    x: float  # Mean x of the segment endpoints
    length: float
    endpoints: tuple  # (x1, y1, x2, y2)


@dataclass
class RectificationResult:
    """
    Output from the deskew pipeline.

    Attributes:
        image: Corrected pixel buffer (never aliases the input).
        mode: Mode the pipeline ran with.
        confidence: Trust in the correction, in [0, 1].
        path: Which correction was applied.
        fallback_reason: Why the perspective path was skipped, NONE if taken.
        fold_x: Spine x-coordinate on the corrected image (non-SPREAD only).
        transform: 3x3 homography (perspective path only).
        quadrilateral: Canonical page boundary in original-image coordinates.
        rotation_angle: Detected skew in degrees (rotation path only).
        scale: Working-copy scale factor used for detection.
        review_threshold: Confidence below which the caller should review.
    """

    image: np.ndarray
    mode: RectificationMode
    confidence: float
    path: CorrectionPath
    fallback_reason: FallbackReason = FallbackReason.NONE
    fold_x: Optional[float] = None
    transform: Optional[np.ndarray] = None
    quadrilateral: Optional[Quadrilateral] = None
    rotation_angle: Optional[float] = None
    scale: float = 1.0
    review_threshold: float = 0.5

    def is_perspective(self) -> bool:
        """Check if the full perspective correction was applied."""
        return self.path == CorrectionPath.PERSPECTIVE

    def homography_as_list(self) -> Optional[List[float]]:
        """Flatten the transform to 9 floats in row-major order."""
        if self.transform is None:
            return None
        return [float(v) for v in np.asarray(self.transform).reshape(-1)]

    def needs_review(self, threshold: Optional[float] = None) -> bool:
        """
        Check whether the caller should ask for re-capture or manual adjustment.

        Args:
            threshold: Override for the configured review threshold.
        """
        limit = self.review_threshold if threshold is None else threshold
        return self.confidence < limit

    def get_summary(self) -> str:
        """Get human-readable description of what was done."""
        height, width = self.image.shape[:2]
        if self.path == CorrectionPath.PERSPECTIVE:
            text = f"Perspective corrected to {width}x{height}"
        elif self.path == CorrectionPath.ROTATION:
            text = (
                f"Rotation-only correction ({self.rotation_angle or 0.0:.1f} deg), "
                f"reason: {self.fallback_reason.value}"
            )
        else:
            text = f"No correction applied, reason: {self.fallback_reason.value}"

        if self.fold_x is not None:
            text += f", fold at x={self.fold_x:.1f}"
        return f"{text} (confidence {self.confidence:.2f})"

    def to_dict(self) -> Dict[str, Any]:
        """JSON-ready metadata (everything except the pixels)."""
        height, width = self.image.shape[:2]
        return {
            "mode": self.mode.value,
            "path": self.path.value,
            "fallback_reason": self.fallback_reason.value,
            "confidence": float(self.confidence),
            "fold_x": None if self.fold_x is None else float(self.fold_x),
            "homography": self.homography_as_list(),
            "quadrilateral": (
                self.quadrilateral.to_list() if self.quadrilateral is not None else None
            ),
            "rotation_angle": (
                None if self.rotation_angle is None else float(self.rotation_angle)
            ),
            "scale": float(self.scale),
            "width": int(width),
            "height": int(height),
            "needs_review": self.needs_review(),
        }
