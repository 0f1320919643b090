"""
Test fixtures and utilities for pixel_marker tests.

Provides reusable fixtures for images, sessions and encoded uploads.
"""

import cv2
import numpy as np
import pytest

from pixel_marker.config import get_default_config


@pytest.fixture
def cfg():
    """Default configuration (fresh copy per test)."""
    return get_default_config()


@pytest.fixture
def test_image():
    """Create a 100x80 (width x height) gray RGB image."""
    return np.full((80, 100, 3), 128, dtype=np.uint8)


@pytest.fixture
def wide_image():
    """Create a 100x50 RGB image with a red top-left pixel."""
    image = np.full((50, 100, 3), 128, dtype=np.uint8)
    image[0, 0] = (255, 0, 0)
    return image


@pytest.fixture
def session(cfg, test_image):
    """
    Session whose canvas matches the image size.

    Canvas and image space coincide, so pointer coordinates can be
    read as image pixels.
    """
    from pixel_marker.core.annotation import MarkerSession

    session = MarkerSession(cfg, canvas_size=(100, 80))
    session.load_image(test_image, "scan.png")
    return session


@pytest.fixture
def letterboxed_session(cfg, wide_image):
    """
    Session drawing a 100x50 image on a 200x200 canvas.

    The image is scaled by 2 and offset 50px down:
    canvas (x, y) -> image (x / 2, (y - 50) / 2).
    """
    from pixel_marker.core.annotation import MarkerSession

    session = MarkerSession(cfg, canvas_size=(200, 200))
    session.load_image(wide_image, "wide.png")
    return session


@pytest.fixture
def png_bytes(wide_image):
    """The wide image encoded as PNG bytes."""
    ok, buffer = cv2.imencode(".png", cv2.cvtColor(wide_image, cv2.COLOR_RGB2BGR))
    assert ok
    return buffer.tobytes()


@pytest.fixture
def sample_session(session):
    """Session with two markers, a line, a circle and a freehand stroke."""
    from pixel_marker.core.annotation import Tool

    session.pointer_down(5, 5)
    session.pointer_down(20, 30)

    session.set_tool(Tool.LINE)
    session.pointer_down(10, 10)
    session.pointer_move(30, 30)
    session.pointer_up(50, 60)

    session.set_tool(Tool.CIRCLE)
    session.set_stroke_color("#DC2626")
    session.pointer_down(40, 40)
    session.pointer_up(50, 40)

    session.set_tool(Tool.FREEHAND)
    session.set_stroke_width(4)
    session.pointer_down(60, 10)
    session.pointer_move(62, 12)
    session.pointer_move(65, 16)
    session.pointer_up(70, 20)
    return session
