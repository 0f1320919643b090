"""
Pure rendering and helper functions for marking logic.

These functions have no side effects on session state and can be tested
in isolation. Every render builds a fresh canvas; nothing is diffed.
"""

import math
from typing import Dict, List, Optional, Sequence, Tuple

import cv2
import numpy as np
from matplotlib import colors as mcolors

from .geometry import Viewport, compute_viewport, round_half_up
from .state import (
    Annotation,
    CircleAnnotation,
    FreehandAnnotation,
    LineAnnotation,
    Point,
    PointAnnotation,
    ANNOTATION_TYPES,
)

Color = Tuple[int, int, int]


def color_to_rgb(color: str) -> Color:
    """
    Convert a color spec (``#2563EB``, ``red``...) to an RGB tuple.

    Raises:
        ValueError: If matplotlib doesn't recognize the color
    """
    r, g, b = mcolors.to_rgb(color)
    return (int(round(r * 255)), int(round(g * 255)), int(round(b * 255)))


def validate_image(image: np.ndarray) -> None:
    """
    Validate that image has correct format.

    Raises:
        ValueError: If image is invalid
    """
    if image is None:
        raise ValueError("Image is None")

    if not isinstance(image, np.ndarray):
        raise ValueError(f"Image must be numpy array, got {type(image)}")

    if image.ndim != 3:
        raise ValueError(f"Image must be 3D (H, W, C), got shape {image.shape}")

    if image.shape[2] != 3:
        raise ValueError(f"Image must have 3 channels, got {image.shape[2]}")

    if image.dtype != np.uint8:
        raise ValueError(f"Invalid image dtype: {image.dtype}")

    if image.shape[0] == 0 or image.shape[1] == 0:
        raise ValueError(f"Image must not be empty, got shape {image.shape}")


def _to_px(viewport: Viewport, x: float, y: float) -> Tuple[int, int]:
    cx, cy = viewport.image_to_canvas(x, y)
    return round_half_up(cx), round_half_up(cy)


def letterbox_image(
    image: np.ndarray,
    canvas_size: Tuple[int, int],
    viewport: Viewport,
    background: Color = (255, 255, 255),
) -> np.ndarray:
    """
    Draw the image into a new canvas at the viewport position.

    Args:
        image: RGB image
        canvas_size: (width, height) of the canvas
        viewport: Placement computed by compute_viewport
        background: Fill color for the letterbox bars

    Returns:
        RGB canvas
    """
    canvas_width, canvas_height = canvas_size
    canvas = np.empty((canvas_height, canvas_width, 3), dtype=np.uint8)
    canvas[:] = background

    x0 = round_half_up(viewport.offset_x)
    y0 = round_half_up(viewport.offset_y)
    draw_w = min(max(1, round_half_up(viewport.draw_width)), canvas_width - x0)
    draw_h = min(max(1, round_half_up(viewport.draw_height)), canvas_height - y0)

    shrinking = draw_w < image.shape[1]
    resized = cv2.resize(
        image,
        (draw_w, draw_h),
        interpolation=cv2.INTER_AREA if shrinking else cv2.INTER_LINEAR,
    )
    canvas[y0 : y0 + draw_h, x0 : x0 + draw_w] = resized
    return canvas


def draw_dashed_polyline(
    canvas: np.ndarray,
    points: Sequence[Tuple[float, float]],
    color: Color,
    thickness: int = 1,
    dash_length: float = 5,
    gap_length: float = 5,
    closed: bool = False,
) -> np.ndarray:
    """
    Draw a polyline with a dash pattern that continues across vertices.

    Args:
        canvas: RGB canvas, modified in place
        points: Canvas-space vertices
        color: RGB color
        thickness: Stroke width in pixels
        dash_length: Length of each drawn dash
        gap_length: Length of each gap
        closed: Connect the last vertex back to the first

    Returns:
        The same canvas
    """
    points = list(points)
    if closed and len(points) > 1:
        points.append(points[0])
    if len(points) < 2:
        return canvas

    if dash_length <= 0 or gap_length <= 0:
        pts = np.array([[round_half_up(x), round_half_up(y)] for x, y in points])
        cv2.polylines(
            canvas, [pts.astype(np.int32).reshape(-1, 1, 2)], False, color,
            thickness, cv2.LINE_AA,
        )
        return canvas

    period = dash_length + gap_length
    travelled = 0.0
    for (x1, y1), (x2, y2) in zip(points, points[1:]):
        seg = math.hypot(x2 - x1, y2 - y1)
        if seg == 0:
            continue
        t = 0.0
        while t < seg:
            phase = travelled % period
            if phase < dash_length:
                step = min(dash_length - phase, seg - t)
                a = (x1 + (x2 - x1) * t / seg, y1 + (y2 - y1) * t / seg)
                b = (
                    x1 + (x2 - x1) * (t + step) / seg,
                    y1 + (y2 - y1) * (t + step) / seg,
                )
                cv2.line(
                    canvas,
                    (round_half_up(a[0]), round_half_up(a[1])),
                    (round_half_up(b[0]), round_half_up(b[1])),
                    color,
                    thickness,
                    cv2.LINE_AA,
                )
            else:
                step = min(period - phase, seg - t)
            t += step
            travelled += step
    return canvas


def draw_marker(
    canvas: np.ndarray,
    center: Tuple[int, int],
    number: int,
    marker_cfg,
) -> np.ndarray:
    """Draw a numbered marker disc centred on a canvas position."""
    fill = color_to_rgb(marker_cfg.color)
    border = color_to_rgb(marker_cfg.border_color)
    radius = int(marker_cfg.radius)

    cv2.circle(canvas, center, radius, fill, -1, cv2.LINE_AA)
    cv2.circle(canvas, center, radius, border, int(marker_cfg.border_width), cv2.LINE_AA)

    label = str(number)
    font = cv2.FONT_HERSHEY_SIMPLEX
    (text_w, text_h), _ = cv2.getTextSize(label, font, marker_cfg.font_scale, 1)
    origin = (center[0] - text_w // 2, center[1] + text_h // 2)
    cv2.putText(
        canvas, label, origin, font, marker_cfg.font_scale, border, 1, cv2.LINE_AA
    )
    return canvas


def draw_annotation(
    canvas: np.ndarray,
    annotation: Annotation,
    viewport: Viewport,
    drawing_cfg,
    dashed: bool = False,
) -> np.ndarray:
    """
    Draw one annotation on the canvas.

    Args:
        canvas: RGB canvas, modified in place
        annotation: Annotation with image-space coordinates
        viewport: Mapping from image to canvas space
        drawing_cfg: ``cfg.drawing`` section
        dashed: Draw the outline dashed (used for the live preview)

    Returns:
        The same canvas

    Raises:
        TypeError: For an unknown annotation variant
    """
    color = color_to_rgb(annotation.stroke_color)
    thickness = max(1, int(annotation.stroke_width))
    dash = drawing_cfg.dash_length
    gap = drawing_cfg.gap_length

    if isinstance(annotation, PointAnnotation):
        center = _to_px(viewport, annotation.x, annotation.y)
        cv2.circle(canvas, center, int(drawing_cfg.point_radius), color, -1, cv2.LINE_AA)

    elif isinstance(annotation, CircleAnnotation):
        cx, cy = viewport.image_to_canvas(annotation.x, annotation.y)
        ex, ey = viewport.image_to_canvas(annotation.end_x, annotation.end_y)
        radius = math.hypot(ex - cx, ey - cy)
        center = (round_half_up(cx), round_half_up(cy))
        if dashed:
            outline = cv2.ellipse2Poly(
                center, (max(1, round_half_up(radius)),) * 2, 0, 0, 360, 2
            )
            draw_dashed_polyline(
                canvas, outline.tolist(), color, thickness, dash, gap, closed=True
            )
        else:
            cv2.circle(canvas, center, round_half_up(radius), color, thickness, cv2.LINE_AA)

    elif isinstance(annotation, LineAnnotation):
        start = viewport.image_to_canvas(annotation.x, annotation.y)
        end = viewport.image_to_canvas(annotation.end_x, annotation.end_y)
        if dashed:
            draw_dashed_polyline(canvas, [start, end], color, thickness, dash, gap)
        else:
            cv2.line(
                canvas,
                (round_half_up(start[0]), round_half_up(start[1])),
                (round_half_up(end[0]), round_half_up(end[1])),
                color,
                thickness,
                cv2.LINE_AA,
            )

    elif isinstance(annotation, FreehandAnnotation):
        if len(annotation.path) > 1:
            pts = [viewport.image_to_canvas(p.x, p.y) for p in annotation.path]
            if dashed:
                draw_dashed_polyline(canvas, pts, color, thickness, dash, gap)
            else:
                poly = np.array(
                    [[round_half_up(x), round_half_up(y)] for x, y in pts],
                    dtype=np.int32,
                ).reshape(-1, 1, 2)
                cv2.polylines(canvas, [poly], False, color, thickness, cv2.LINE_AA)

    else:
        raise TypeError(f"Unsupported annotation: {type(annotation).__name__}")

    return canvas


def render_canvas(
    image: np.ndarray,
    canvas_size: Tuple[int, int],
    markers: List[Point],
    annotations: List[Annotation],
    preview: Optional[Annotation] = None,
    cfg=None,
) -> np.ndarray:
    """
    Render the full canvas from scratch.

    Draw order: background, image, numbered markers, committed
    annotations, then the dashed preview of the gesture in progress.

    Args:
        image: RGB image in native resolution
        canvas_size: (width, height) of the canvas
        markers: Committed markers, numbered by position
        annotations: Committed annotations
        preview: Annotation being drawn, if any
        cfg: Configuration (defaults to get_default_config())

    Returns:
        RGB canvas of shape (height, width, 3)
    """
    if cfg is None:
        from pixel_marker.config import get_default_config

        cfg = get_default_config()

    validate_image(image)
    viewport = compute_viewport(canvas_size, (image.shape[1], image.shape[0]))

    canvas = letterbox_image(
        image, canvas_size, viewport, color_to_rgb(cfg.canvas.background)
    )

    for index, marker in enumerate(markers):
        draw_marker(canvas, _to_px(viewport, marker.x, marker.y), index + 1, cfg.marker)

    for annotation in annotations:
        draw_annotation(canvas, annotation, viewport, cfg.drawing)

    if preview is not None:
        draw_annotation(canvas, preview, viewport, cfg.drawing, dashed=True)

    return canvas


def compute_annotation_statistics(
    markers: List[Point], annotations: List[Annotation]
) -> Dict[str, int]:
    """
    Count markers and annotations per type.

    Returns:
        Dictionary with ``markers``, ``annotations`` and one entry per type
    """
    stats = {"markers": len(markers), "annotations": len(annotations)}
    for kind in ANNOTATION_TYPES:
        stats[kind] = 0
    for annotation in annotations:
        stats[annotation.type] += 1
    return stats


def annotations_in_bounds(
    markers: List[Point], annotations: List[Annotation], image_size: Tuple[int, int]
) -> bool:
    """Check every coordinate lies inside an image of the given size."""
    width, height = image_size
    coords = [(m.x, m.y) for m in markers]
    for annotation in annotations:
        coords.extend(annotation.coords())
    return all(0 <= x < width and 0 <= y < height for x, y in coords)
