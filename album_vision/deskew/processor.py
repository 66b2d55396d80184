"""
Main processor for the Deskew module.

Orchestrates the complete pipeline:
1. Downscale to a working copy
2. Edge map
3. Page boundary search
4. Perspective warp, or rotation-only fallback
5. Spine (fold) detection
6. Region selection (left page, right page or full spread)

The processor never raises for image conditions: degenerate input, a missing
vision backend and numerical degeneracies all produce a usable result
annotated with a confidence score.
"""

import logging
from pathlib import Path
from typing import Callable, Optional, Union

import cv2
import numpy as np

from album_vision.common.types import ChannelOrder, Quadrilateral, RawImage
from album_vision.deskew.backend import check_opencv_backend
from album_vision.deskew.boundary_detection import (
    build_edge_map,
    compute_working_scale,
    downscale,
    find_boundary_candidate,
)
from album_vision.deskew.config_loader import DeskewConfig, get_default_config, load_config
from album_vision.deskew.fold_detection import crop_to_region, detect_fold
from album_vision.deskew.image_rectification import (
    estimate_skew_angle,
    order_points,
    rotate_image,
    warp_to_rectangle,
)
from album_vision.deskew.types import (
    CorrectionPath,
    FallbackReason,
    RectificationMode,
    RectificationOptions,
    RectificationResult,
)

logger = logging.getLogger(__name__)

ImageInput = Union[np.ndarray, RawImage, None]
OptionsInput = Union[RectificationOptions, RectificationMode, str]


class DeskewProcessor:
    """
    Rectifies photographed album pages.

    The processor holds only its immutable configuration, so one instance can
    serve concurrent calls from several threads.

    Example:
        >>> processor = DeskewProcessor()
        >>> photo = cv2.cvtColor(cv2.imread("spread.jpg"), cv2.COLOR_BGR2RGBA)
        >>> result = processor.process(photo, RectificationOptions(mode="LEFT_PAGE"))
        >>> if result.needs_review():
        ...     print("Please retake the photo")
    """

    def __init__(
        self,
        config: Optional[DeskewConfig] = None,
        config_path: Optional[Path] = None,
        backend_check: Optional[Callable[[], bool]] = None,
    ):
        """
        Initialize the deskew processor.

        Args:
            config: Pre-loaded configuration object. If None, will load from file.
            config_path: Path to config file. If None, uses the bundled config.
            backend_check: Callable reporting whether the vision backend can run
                          the pipeline. Defaults to probing OpenCV.
        """
        if config is not None:
            self.config = config
            logger.info("Using provided configuration")
        elif config_path is not None:
            self.config = load_config(config_path)
            logger.info(f"Loaded configuration from {config_path}")
        else:
            self.config = get_default_config()
            logger.info("Loaded default configuration")

        self.backend_check = backend_check or check_opencv_backend

    def process(self, image: ImageInput, options: OptionsInput) -> RectificationResult:
        """
        Execute the complete deskew pipeline.

        Args:
            image: Captured photo as uint8 array (H, W, C) / (H, W), or a RawImage.
                  A RawImage's channel order takes precedence over the options.
            options: RectificationOptions, or just a mode.

        Returns:
            RectificationResult with the corrected image and diagnostics.

        Raises:
            ValueError: If the options are invalid or the buffer is not a
                       uint8 image matching its channel order.
        """
        if not isinstance(options, RectificationOptions):
            options = RectificationOptions(mode=options)

        logger.info("=" * 60)
        logger.info(f"Starting Deskew Pipeline (mode={options.mode.value})")
        logger.info("=" * 60)

        channel_order = options.channel_order
        if isinstance(image, RawImage):
            channel_order = image.channel_order
            image = image.data

        if image is None or np.asarray(image).size == 0:
            logger.warning("Degenerate input (empty image), returning empty result")
            return self._passthrough(
                _empty_like(channel_order), options, FallbackReason.DEGENERATE_INPUT
            )

        original = RawImage(data=np.asarray(image), channel_order=channel_order).data

        if not self.backend_check():
            logger.error("Vision backend unavailable, returning original image")
            return self._passthrough(
                original.copy(), options, FallbackReason.UNAVAILABLE_BACKEND
            )

        try:
            return self._run_pipeline(original, options, channel_order)
        except cv2.error as e:
            logger.error(f"Vision backend failed mid-pipeline: {e}")
            return self._passthrough(original.copy(), options, FallbackReason.BACKEND_ERROR)

    def _run_pipeline(
        self,
        original: np.ndarray,
        options: RectificationOptions,
        channel_order: ChannelOrder,
    ) -> RectificationResult:
        detection = self.config.detection
        perspective = self.config.perspective

        # Stage 1: Downscale
        logger.info("[Stage 1/6] Downscale")
        height, width = original.shape[:2]
        scale = compute_working_scale(width, height, options.max_dimension)
        working = downscale(original, scale)
        working_area = float(working.shape[0] * working.shape[1])
        logger.debug(f"Working copy {working.shape[1]}x{working.shape[0]} (scale {scale:.4f})")

        # Stage 2: Edge map
        logger.info("[Stage 2/6] Edge Map")
        edges = build_edge_map(
            working,
            channel_order,
            options.edge_threshold_low,
            options.edge_threshold_high,
            detection.blur_kernel_size,
        )

        # Stage 3: Boundary search
        logger.info("[Stage 3/6] Boundary Search")
        candidate = find_boundary_candidate(
            edges, options.min_boundary_area_fraction, detection.approx_epsilon_ratio
        )

        # Stage 4: Correction
        logger.info("[Stage 4/6] Correction")
        corrected: Optional[np.ndarray] = None
        transform: Optional[np.ndarray] = None
        quadrilateral: Optional[Quadrilateral] = None
        rotation_angle: Optional[float] = None
        reason = FallbackReason.NONE

        if candidate is None:
            reason = FallbackReason.NO_BOUNDARY
        elif candidate.coverage <= perspective.min_quad_area_fraction:
            reason = FallbackReason.LOW_COVERAGE
            logger.debug(
                f"Candidate coverage {candidate.coverage:.3f} <= "
                f"{perspective.min_quad_area_fraction}"
            )
        else:
            try:
                ordered = order_points(candidate.points / np.float32(scale))
                corrected, transform = warp_to_rectangle(
                    original, ordered, perspective.warp_interpolation
                )
                quadrilateral = Quadrilateral(points=ordered)
            except ValueError as e:
                logger.warning(f"Perspective correction degenerate: {e}")
                reason = FallbackReason.NUMERICAL_DEGENERACY

        if corrected is not None:
            path = CorrectionPath.PERSPECTIVE
            confidence = min(
                1.0,
                candidate.area / (working_area * perspective.full_confidence_area_fraction),
            )
        else:
            logger.warning(f"Falling back to rotation-only correction ({reason.value})")
            path = CorrectionPath.ROTATION
            rotation_angle = estimate_skew_angle(edges)
            corrected, _ = rotate_image(
                original, rotation_angle, perspective.warp_interpolation
            )
            confidence = self.config.rotation.fallback_confidence

        # Stage 5: Fold detection
        fold_x: Optional[float] = None
        if options.mode != RectificationMode.SPREAD:
            logger.info("[Stage 5/6] Fold Detection")
            fold = detect_fold(
                corrected,
                channel_order,
                self.config.fold,
                options.edge_threshold_low,
                options.edge_threshold_high,
            )
            if fold is not None:
                fold_x = fold.x
        else:
            logger.info("[Stage 5/6] Fold Detection skipped (SPREAD)")

        # Stage 6: Region selection
        logger.info("[Stage 6/6] Region Selection")
        final = crop_to_region(corrected, options.mode, fold_x)

        result = RectificationResult(
            image=final,
            mode=options.mode,
            confidence=float(max(0.0, min(1.0, confidence))),
            path=path,
            fallback_reason=reason,
            fold_x=fold_x,
            transform=transform,
            quadrilateral=quadrilateral,
            rotation_angle=rotation_angle,
            scale=scale,
            review_threshold=self.config.review.confidence_threshold,
        )

        logger.info("=" * 60)
        logger.info(f"Pipeline DONE - {result.get_summary()}")
        logger.info("=" * 60)
        return result

    def _passthrough(
        self,
        image: np.ndarray,
        options: RectificationOptions,
        reason: FallbackReason,
    ) -> RectificationResult:
        return RectificationResult(
            image=image,
            mode=options.mode,
            confidence=0.0,
            path=CorrectionPath.PASSTHROUGH,
            fallback_reason=reason,
            review_threshold=self.config.review.confidence_threshold,
        )


def _empty_like(channel_order: ChannelOrder) -> np.ndarray:
    if channel_order == ChannelOrder.GRAY:
        return np.zeros((0, 0), dtype=np.uint8)
    return np.zeros((0, 0, channel_order.channels), dtype=np.uint8)


def rectify(
    image: ImageInput,
    options: OptionsInput,
    config: Optional[DeskewConfig] = None,
) -> RectificationResult:
    """
    Convenience function for one-shot rectification.

    Args:
        image: Captured photo (uint8 array or RawImage).
        options: RectificationOptions, or just a mode.
        config: Optional custom configuration. Uses default if None.

    Returns:
        RectificationResult object.

    Raises:
        ValueError: If the options are invalid, or the buffer is not uint8 or
                   its channel count contradicts the channel order (e.g. an
                   RGB array with the default RGBA options). Empty or None
                   images do not raise.

    Example:
        >>> result = rectify(photo, RectificationOptions(mode=RectificationMode.SPREAD))
        >>> print(result.get_summary())
    """
    processor = DeskewProcessor(config=config)
    return processor.process(image, options)
