"""
Common types shared across all modules.

This module provides standardized data types for the album vision package,
keeping pixel buffers and page-boundary geometry consistent between the
deskew pipeline and the developer tooling.
"""

from album_vision.common.types import ChannelOrder, Quadrilateral, RawImage

__all__ = ["RawImage", "ChannelOrder", "Quadrilateral"]
