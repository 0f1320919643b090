"""
Coordinate mapping between canvas space and image space.

The image is letterboxed into the canvas: scaled to fit while keeping its
aspect ratio and centred along the unconstrained axis.
"""

import math
from dataclasses import dataclass
from typing import Tuple


def round_half_up(value: float) -> int:
    """Round like JavaScript's Math.round (halves go towards +inf)."""
    return int(math.floor(value + 0.5))


@dataclass(frozen=True)
class Viewport:
    """Placement of the image inside the canvas."""

    offset_x: float
    offset_y: float
    draw_width: float
    draw_height: float
    image_width: int
    image_height: int

    def canvas_to_image(self, x: float, y: float) -> Tuple[int, int]:
        """Map a canvas position to the nearest image pixel."""
        image_x = (x - self.offset_x) / self.draw_width * self.image_width
        image_y = (y - self.offset_y) / self.draw_height * self.image_height
        return round_half_up(image_x), round_half_up(image_y)

    def image_to_canvas(self, x: float, y: float) -> Tuple[float, float]:
        """Map an image position to its (sub-pixel) canvas position."""
        canvas_x = self.offset_x + x / self.image_width * self.draw_width
        canvas_y = self.offset_y + y / self.image_height * self.draw_height
        return canvas_x, canvas_y

    def contains(self, x: int, y: int) -> bool:
        """Check whether an image-space position lies on the image."""
        return 0 <= x < self.image_width and 0 <= y < self.image_height


def compute_viewport(
    canvas_size: Tuple[int, int], image_size: Tuple[int, int]
) -> Viewport:
    """
    Compute where the image is drawn on the canvas.

    Args:
        canvas_size: (width, height) of the canvas
        image_size: (width, height) of the image in native pixels

    Returns:
        Viewport with offsets and drawn size

    Raises:
        ValueError: If any dimension is not positive
    """
    canvas_width, canvas_height = canvas_size
    image_width, image_height = image_size
    if canvas_width <= 0 or canvas_height <= 0:
        raise ValueError(f"Canvas size must be positive, got {canvas_size}")
    if image_width <= 0 or image_height <= 0:
        raise ValueError(f"Image size must be positive, got {image_size}")

    canvas_aspect = canvas_width / canvas_height
    image_aspect = image_width / image_height

    if image_aspect > canvas_aspect:
        # width-constrained, bars above and below
        draw_width = float(canvas_width)
        draw_height = canvas_width / image_aspect
        offset_x = 0.0
        offset_y = (canvas_height - draw_height) / 2
    else:
        draw_height = float(canvas_height)
        draw_width = canvas_height * image_aspect
        offset_x = (canvas_width - draw_width) / 2
        offset_y = 0.0

    return Viewport(
        offset_x=offset_x,
        offset_y=offset_y,
        draw_width=draw_width,
        draw_height=draw_height,
        image_width=int(image_width),
        image_height=int(image_height),
    )
