"""
Tests for canvas <-> image coordinate mapping.
"""

import itertools

import pytest

from pixel_marker.core.annotation.geometry import compute_viewport, round_half_up


class TestViewport:
    def test_width_constrained(self):
        viewport = compute_viewport((200, 200), (100, 50))

        assert viewport.draw_width == 200
        assert viewport.draw_height == 100
        assert viewport.offset_x == 0
        assert viewport.offset_y == 50

    def test_height_constrained(self):
        viewport = compute_viewport((200, 200), (50, 100))

        assert viewport.draw_width == 100
        assert viewport.draw_height == 200
        assert viewport.offset_x == 50
        assert viewport.offset_y == 0

    def test_same_aspect_is_identity(self):
        viewport = compute_viewport((100, 80), (100, 80))

        assert viewport.canvas_to_image(37, 12) == (37, 12)
        assert viewport.image_to_canvas(37, 12) == pytest.approx((37, 12))

    def test_canvas_to_image_letterboxed(self):
        viewport = compute_viewport((200, 200), (100, 50))

        assert viewport.canvas_to_image(0, 50) == (0, 0)
        assert viewport.canvas_to_image(100, 100) == (50, 25)
        # inside the top bar
        x, y = viewport.canvas_to_image(100, 40)
        assert y < 0
        assert not viewport.contains(x, y)

    def test_contains(self):
        viewport = compute_viewport((100, 80), (100, 80))

        assert viewport.contains(0, 0)
        assert viewport.contains(99, 79)
        assert not viewport.contains(100, 0)
        assert not viewport.contains(0, 80)
        assert not viewport.contains(-1, 5)

    @pytest.mark.parametrize(
        "canvas_size, image_size",
        [
            ((640, 480), (1920, 1080)),
            ((300, 900), (400, 300)),
            ((123, 77), (64, 64)),
            ((800, 600), (37, 411)),
        ],
    )
    def test_round_trip_within_one_pixel(self, canvas_size, image_size):
        viewport = compute_viewport(canvas_size, image_size)
        width, height = image_size

        xs = sorted({0, 1, width // 3, width // 2, width - 2, width - 1})
        ys = sorted({0, 1, height // 3, height // 2, height - 2, height - 1})
        for x, y in itertools.product(xs, ys):
            cx, cy = viewport.image_to_canvas(x, y)
            back_x, back_y = viewport.canvas_to_image(cx, cy)
            assert abs(back_x - x) <= 1
            assert abs(back_y - y) <= 1

    def test_invalid_sizes(self):
        with pytest.raises(ValueError):
            compute_viewport((0, 100), (10, 10))
        with pytest.raises(ValueError):
            compute_viewport((100, 100), (10, -1))


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(2.4999) == 2
    assert round_half_up(-0.5) == 0
    assert round_half_up(-1.5) == -1
    assert round_half_up(-1.6) == -2
