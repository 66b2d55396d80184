"""
Configuration loader for the Deskew module.

Loads tunables from config.yaml and validates them with Pydantic models.
"""

import logging
from pathlib import Path
from typing import Literal

import yaml
from pydantic import BaseModel, Field, ValidationError, field_validator

logger = logging.getLogger(__name__)

# Default configuration path (relative to this file)
DEFAULT_CONFIG_PATH = Path(__file__).parent / "config.yaml"


class DetectionConfig(BaseModel):
    """Boundary detection tunables.

    Attributes:
        blur_kernel_size: Odd Gaussian kernel size applied before Canny
        approx_epsilon_ratio: Polygon approximation tolerance vs perimeter
    """

    blur_kernel_size: int = Field(default=5, ge=1)
    approx_epsilon_ratio: float = Field(default=0.02, gt=0.0, lt=1.0)

    @field_validator("blur_kernel_size")
    @classmethod
    def _must_be_odd(cls, v: int) -> int:
        if v % 2 == 0:
            raise ValueError(f"blur_kernel_size must be odd, got {v}")
        return v


class PerspectiveConfig(BaseModel):
    """Perspective path tunables.

    Attributes:
        min_quad_area_fraction: Coverage a candidate needs for the perspective path
        full_confidence_area_fraction: Coverage that maps to confidence 1.0
        warp_interpolation: Interpolation used by warpPerspective
    """

    min_quad_area_fraction: float = Field(default=0.3, ge=0.0, le=1.0)
    full_confidence_area_fraction: float = Field(default=0.8, gt=0.0, le=1.0)
    warp_interpolation: Literal["linear", "cubic", "nearest", "area", "lanczos"] = (
        "linear"
    )


class RotationConfig(BaseModel):
    """Rotation fallback tunables.

    Attributes:
        fallback_confidence: Confidence reported by the rotation-only path
    """

    fallback_confidence: float = Field(default=0.3, ge=0.0, le=1.0)


class FoldConfig(BaseModel):
    """Spine detection tunables.

    Attributes:
        hough_threshold: Accumulator votes for HoughLinesP
        min_length_ratio: Minimum segment length vs image height
        max_line_gap: Largest gap bridged inside one segment (px)
        max_horizontal_delta_px: Endpoint x-difference limit for "vertical"
        center_tolerance_ratio: Allowed midpoint offset from centre vs width
    """

    hough_threshold: int = Field(default=100, ge=1)
    min_length_ratio: float = Field(default=0.5, gt=0.0, le=1.0)
    max_line_gap: int = Field(default=30, ge=0)
    max_horizontal_delta_px: float = Field(default=30.0, gt=0.0)
    center_tolerance_ratio: float = Field(default=0.2, ge=0.0, le=0.5)


class ReviewConfig(BaseModel):
    """Caller guidance.

    Attributes:
        confidence_threshold: Results below this should be reviewed
    """

    confidence_threshold: float = Field(default=0.5, ge=0.0, le=1.0)


class DeskewConfig(BaseModel):
    """Complete deskew module configuration."""

    detection: DetectionConfig = Field(default_factory=DetectionConfig)
    perspective: PerspectiveConfig = Field(default_factory=PerspectiveConfig)
    rotation: RotationConfig = Field(default_factory=RotationConfig)
    fold: FoldConfig = Field(default_factory=FoldConfig)
    review: ReviewConfig = Field(default_factory=ReviewConfig)


def load_config(config_path: Path = DEFAULT_CONFIG_PATH) -> DeskewConfig:
    """
    Load deskew configuration from YAML file.

    Args:
        config_path: Path to the configuration YAML file.

    Returns:
        Validated DeskewConfig object.

    Raises:
        FileNotFoundError: If config file doesn't exist.
        ValueError: If config is invalid.

    Example:
        >>> config = load_config()
        >>> print(config.perspective.min_quad_area_fraction)
        0.3
    """
    config_path = Path(config_path)
    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    logger.debug(f"Loading deskew config from {config_path}")

    with open(config_path, "r", encoding="utf-8") as f:
        raw_config = yaml.safe_load(f) or {}

    if not isinstance(raw_config, dict):
        raise ValueError(
            f"Invalid configuration file: expected a mapping, got {type(raw_config).__name__}"
        )

    try:
        config = DeskewConfig(**raw_config)
    except ValidationError as e:
        raise ValueError(f"Invalid configuration file: {e}") from e

    logger.info("Successfully loaded deskew configuration")
    return config


def get_default_config() -> DeskewConfig:
    """
    Get default configuration from the bundled config.yaml file.

    Falls back to the model defaults if the bundled file is missing.
    """
    if DEFAULT_CONFIG_PATH.exists():
        return load_config(DEFAULT_CONFIG_PATH)
    logger.warning(
        f"Bundled config not found at {DEFAULT_CONFIG_PATH}, using built-in defaults"
    )
    return DeskewConfig()
