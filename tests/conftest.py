"""
Pytest Configuration and Shared Fixtures

Synthetic album photos drawn with OpenCV. All images are RGBA uint8, the
layout the capture pipeline delivers.
"""

import cv2
import numpy as np
import pytest

DARK = 30  # Table / background intensity
PAPER = 235  # Page intensity
INK = 40  # Printed marks
SPINE = 120  # Fold shadow on a spread


def blank_rgba(width: int, height: int, value: int) -> np.ndarray:
    """Opaque RGBA image filled with one gray level."""
    image = np.full((height, width, 4), value, dtype=np.uint8)
    image[:, :, 3] = 255
    return image


def draw_page(image: np.ndarray, corners, value: int = PAPER) -> np.ndarray:
    """Fill a page polygon into an RGBA image (in place) and return it."""
    pts = np.array(corners, dtype=np.int32)
    cv2.fillPoly(image, [pts], (value, value, value, 255))
    return image


@pytest.fixture
def sample_quadrilateral_points():
    """Fixture providing sample 4-corner points in shuffled order."""
    return np.array(
        [
            [300, 150],  # Top-right area
            [100, 200],  # Top-left area
            [320, 400],  # Bottom-right area
            [80, 380],  # Bottom-left area
        ],
        dtype=np.float32,
    )


@pytest.fixture
def page_factory():
    """Factory drawing a page with the given corners on a dark table."""

    def _make(corners, width: int = 800, height: int = 600) -> np.ndarray:
        return draw_page(blank_rgba(width, height, DARK), corners)

    return _make


@pytest.fixture
def flat_page_photo():
    """An unskewed page filling ~90% of an 800x600 frame."""
    image = blank_rgba(800, 600, DARK)
    draw_page(image, [[20, 15], [780, 15], [780, 585], [20, 585]])
    return image


@pytest.fixture
def skewed_page_photo():
    """A perspective-distorted page on a 1600x1200 photo."""
    image = blank_rgba(1600, 1200, DARK)
    corners = [[220, 160], [1380, 110], [1440, 1080], [170, 1040]]
    draw_page(image, corners)
    return image, np.array(corners, dtype=np.float32)


def draw_spread(left_tint=None) -> np.ndarray:
    """
    800x600 photo of an open album on a dark table.

    The fold is a shadow band at the page centre that stops short of the top
    and bottom edges, so the outline of the spread stays one closed contour.
    ``left_tint`` recolours the left page (RGBA) to tell the halves apart.
    """
    image = blank_rgba(800, 600, DARK)
    draw_page(image, [[20, 15], [780, 15], [780, 585], [20, 585]])
    if left_tint is not None:
        image[15:586, 20:398] = left_tint
    image[40:561, 398:402] = (SPINE, SPINE, SPINE, 255)
    return image


@pytest.fixture
def spread_page_photo():
    """A two-page spread on a dark table with a spine at the page centre."""
    return draw_spread()


@pytest.fixture
def tinted_spread_photo():
    """Spread whose left page is reddish, right page plain paper."""
    return draw_spread(left_tint=(PAPER, 200, 200, 255))


@pytest.fixture
def spine_only_image():
    """White 800x600 frame with a solid vertical spine at x = W/2."""
    image = blank_rgba(800, 600, 255)
    image[:, 398:402] = (0, 0, 0, 255)
    return image


@pytest.fixture
def marked_blank_page():
    """Borderless page (no boundary visible) with four small axis-aligned marks."""
    image = blank_rgba(800, 600, 255)
    for x, y in [(100, 100), (670, 100), (100, 470), (670, 470)]:
        image[y : y + 30, x : x + 30] = (INK, INK, INK, 255)
    return image


@pytest.fixture
def tilted_card_photo():
    """White 640x480 frame with a small dark card rotated by 10 degrees."""
    image = blank_rgba(640, 480, 255)
    box = cv2.boxPoints(((320.0, 240.0), (200.0, 100.0), 10.0))
    draw_page(image, box, value=INK)
    return image
