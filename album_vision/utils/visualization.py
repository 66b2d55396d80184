"""
Visualization Utilities

Debug plots for the deskew pipeline.
"""

from pathlib import Path
from typing import Optional

import cv2
import matplotlib.pyplot as plt
import numpy as np

from album_vision.common.types import ChannelOrder
from album_vision.deskew.types import RectificationResult

CORNER_LABELS = ["TL", "TR", "BR", "BL"]


def _to_display(image: np.ndarray, channel_order: ChannelOrder) -> np.ndarray:
    """Convert a buffer to something imshow renders with correct colors."""
    if channel_order == ChannelOrder.BGR:
        return cv2.cvtColor(image, cv2.COLOR_BGR2RGB)
    if channel_order == ChannelOrder.BGRA:
        return cv2.cvtColor(image, cv2.COLOR_BGRA2RGBA)
    return image


def plot_rectification(
    original: np.ndarray,
    result: RectificationResult,
    channel_order: ChannelOrder = ChannelOrder.RGBA,
    save_path: Optional[Path] = None,
):
    """
    Plot the input with the detected boundary next to the corrected output.

    Args:
        original: The image passed to the rectifier.
        result: What the rectifier returned.
        channel_order: Layout of both images.
        save_path: Save the figure here instead of showing it.

    Returns:
        The matplotlib Figure.
    """
    fig, (ax_in, ax_out) = plt.subplots(1, 2, figsize=(14, 7))
    cmap = "gray" if channel_order == ChannelOrder.GRAY else None

    ax_in.imshow(_to_display(original, channel_order), cmap=cmap)
    ax_in.set_title("Captured")

    if result.quadrilateral is not None:
        pts = result.quadrilateral.to_numpy()
        closed = np.vstack([pts, pts[:1]])
        ax_in.plot(closed[:, 0], closed[:, 1], "y-", linewidth=2)
        for label, (x, y) in zip(CORNER_LABELS, pts):
            ax_in.plot(x, y, "ro", markersize=8)
            ax_in.text(x + 5, y + 5, label, color="red", fontsize=12, weight="bold")

    if result.image.size > 0:
        ax_out.imshow(_to_display(result.image, channel_order), cmap=cmap)
    ax_out.set_title(result.get_summary(), fontsize=9)

    for ax in (ax_in, ax_out):
        ax.axis("off")

    if save_path:
        save_path = Path(save_path)
        save_path.parent.mkdir(parents=True, exist_ok=True)
        fig.savefig(save_path, bbox_inches="tight", dpi=150)
        plt.close(fig)
    else:
        plt.show()

    return fig
