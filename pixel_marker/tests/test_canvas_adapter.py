"""
Tests for CanvasAdapter.

Mouse events are fed directly; no window is opened.
"""

import cv2
import numpy as np
import pytest

from pixel_marker.core.annotation import LineAnnotation, MarkerSession, Tool
from pixel_marker.interfaces import CanvasAdapter


@pytest.fixture
def frames():
    return []


@pytest.fixture
def adapter(session, frames):
    return CanvasAdapter(session, update_image_callback=frames.append)


def test_redraws_on_change(adapter, frames):
    adapter.press(10, 10)

    assert len(frames) >= 1
    assert frames[-1].shape == (80, 100, 3)


def test_no_redraw_without_image(cfg):
    frames = []
    CanvasAdapter(MarkerSession(cfg), update_image_callback=frames.append)

    assert frames == []


def test_drag_commits_annotation(adapter, session):
    session.set_tool(Tool.LINE)

    adapter.press(10, 10)
    adapter.move(30, 30)
    annotation = adapter.release(50, 60)

    assert isinstance(annotation, LineAnnotation)
    assert (annotation.end_x, annotation.end_y) == (50, 60)


def test_moving_off_canvas_discards(adapter, session):
    session.set_tool(Tool.FREEHAND)

    adapter.press(10, 10)
    adapter.move(20, 20)
    assert adapter.move(150, 20)

    assert not session.drawing.is_drawing
    assert adapter.release(30, 30) is None
    assert session.state.annotations == []


def test_cv2_mouse_events(adapter, session):
    session.set_tool(Tool.LINE)

    adapter.handle_cv2_mouse(cv2.EVENT_LBUTTONDOWN, 10, 10, cv2.EVENT_FLAG_LBUTTON)
    adapter.handle_cv2_mouse(cv2.EVENT_MOUSEMOVE, 20, 25, cv2.EVENT_FLAG_LBUTTON)
    assert session.drawing.current_path[-1].x == 20
    adapter.handle_cv2_mouse(cv2.EVENT_LBUTTONUP, 30, 35, 0)

    assert len(session.state.annotations) == 1


def test_cv2_release_outside_window(adapter, session):
    session.set_tool(Tool.CIRCLE)

    adapter.handle_cv2_mouse(cv2.EVENT_LBUTTONDOWN, 10, 10, cv2.EVENT_FLAG_LBUTTON)
    # motion reported without the button held: it was released elsewhere
    adapter.handle_cv2_mouse(cv2.EVENT_MOUSEMOVE, 40, 40, 0)

    assert not session.drawing.is_drawing
    assert session.state.annotations == []


def test_get_visualization(adapter, session):
    session.pointer_down(50, 40)

    rgb = adapter.get_visualization()
    bgr = adapter.get_visualization(bgr=True)

    np.testing.assert_array_equal(rgb[..., ::-1], bgr)


def test_resize(adapter, session):
    adapter.resize(200, 160)

    assert adapter.canvas_size == (200, 160)
    assert adapter.get_visualization().shape == (160, 200, 3)
