"""
Smoke tests for the debug plot.
"""

import matplotlib

matplotlib.use("Agg")

import matplotlib.pyplot as plt  # noqa: E402

from album_vision.deskew.processor import DeskewProcessor  # noqa: E402
from album_vision.utils.visualization import plot_rectification  # noqa: E402


class TestPlotRectification:
    def test_saves_perspective_plot(self, tmp_path, flat_page_photo):
        result = DeskewProcessor().process(flat_page_photo, "spread")
        save_path = tmp_path / "plots" / "debug.png"

        fig = plot_rectification(flat_page_photo, result, save_path=save_path)

        assert save_path.exists()
        assert len(fig.axes) == 2
        assert fig.axes[1].get_title() == result.get_summary()

    def test_plot_without_quadrilateral(self, tmp_path, marked_blank_page):
        result = DeskewProcessor().process(marked_blank_page, "spread")
        save_path = tmp_path / "rotation.png"

        plot_rectification(marked_blank_page, result, save_path=save_path)

        assert save_path.exists()
        plt.close("all")
