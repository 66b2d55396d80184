"""
I/O Utilities

File input/output operations used by scripts and debugging tools.
The deskew core itself never touches the filesystem.
"""

import json
from pathlib import Path
from typing import Any, Dict

import cv2
import numpy as np
import yaml

from album_vision.common.types import ChannelOrder

# cv2.imread returns BGR(A); conversions into each supported layout
_FROM_BGR = {
    ChannelOrder.RGBA: cv2.COLOR_BGR2RGBA,
    ChannelOrder.BGRA: cv2.COLOR_BGR2BGRA,
    ChannelOrder.RGB: cv2.COLOR_BGR2RGB,
    ChannelOrder.GRAY: cv2.COLOR_BGR2GRAY,
}
_FROM_BGRA = {
    ChannelOrder.RGBA: cv2.COLOR_BGRA2RGBA,
    ChannelOrder.BGR: cv2.COLOR_BGRA2BGR,
    ChannelOrder.RGB: cv2.COLOR_BGRA2RGB,
    ChannelOrder.GRAY: cv2.COLOR_BGRA2GRAY,
}
_FROM_GRAY = {
    ChannelOrder.RGBA: cv2.COLOR_GRAY2RGBA,
    ChannelOrder.BGRA: cv2.COLOR_GRAY2BGRA,
    ChannelOrder.RGB: cv2.COLOR_GRAY2RGB,
    ChannelOrder.BGR: cv2.COLOR_GRAY2BGR,
}
_TO_BGR = {
    ChannelOrder.RGBA: cv2.COLOR_RGBA2BGRA,
    ChannelOrder.RGB: cv2.COLOR_RGB2BGR,
}


def load_image(file_path: Path, channel_order: ChannelOrder = ChannelOrder.RGBA) -> np.ndarray:
    """
    Load an image file into the requested channel layout.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If OpenCV cannot decode the file.
    """
    file_path = Path(file_path)
    if not file_path.exists():
        raise FileNotFoundError(f"Image not found: {file_path}")

    image = cv2.imread(str(file_path), cv2.IMREAD_UNCHANGED)
    if image is None:
        raise ValueError(f"Could not decode image: {file_path}")

    if image.dtype == np.uint16:
        image = (image >> 8).astype(np.uint8)
    elif image.dtype != np.uint8:
        raise ValueError(f"Unsupported image dtype {image.dtype}: {file_path}")

    if image.ndim == 2:
        table, native = _FROM_GRAY, ChannelOrder.GRAY
    elif image.shape[2] == 4:
        table, native = _FROM_BGRA, ChannelOrder.BGRA
    else:
        table, native = _FROM_BGR, ChannelOrder.BGR

    if channel_order == native:
        return image
    return cv2.cvtColor(image, table[channel_order])


def save_image(
    image: np.ndarray,
    file_path: Path,
    channel_order: ChannelOrder = ChannelOrder.RGBA,
) -> None:
    """
    Save an image buffer, converting to OpenCV's BGR(A) layout first.

    Raises:
        ValueError: If the buffer is empty or OpenCV fails to encode it.
    """
    if image.size == 0:
        raise ValueError("Cannot save an empty image")

    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)

    if channel_order in _TO_BGR:
        image = cv2.cvtColor(image, _TO_BGR[channel_order])

    if not cv2.imwrite(str(file_path), image):
        raise ValueError(f"OpenCV failed to write image: {file_path}")


def load_json(file_path: Path) -> Dict[str, Any]:
    """Load JSON file."""
    with open(file_path, "r", encoding="utf-8") as f:
        return json.load(f)


def save_json(data: Dict[str, Any], file_path: Path, indent: int = 2):
    """Save data to JSON file."""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=indent)


def save_yaml(data: Dict[str, Any], file_path: Path):
    """Save data to YAML file."""
    file_path = Path(file_path)
    file_path.parent.mkdir(parents=True, exist_ok=True)
    with open(file_path, "w", encoding="utf-8") as f:
        yaml.dump(data, f, default_flow_style=False, sort_keys=False)
