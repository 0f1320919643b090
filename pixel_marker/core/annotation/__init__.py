"""
Core marking module - UI-agnostic marker and annotation logic.

This module provides the base abstractions for pixel marking
that can be used with any UI framework (OpenCV window, Web, CLI, etc).
"""

from .session import MarkerSession
from .events import AnnotationEvent, EventType, EventEmitter
from .geometry import Viewport, compute_viewport
from .state import (
    Annotation,
    CircleAnnotation,
    DrawingState,
    FreehandAnnotation,
    ImageInfo,
    LineAnnotation,
    MarkerState,
    Point,
    PointAnnotation,
    Tool,
)

__all__ = [
    "MarkerSession",
    "AnnotationEvent",
    "EventType",
    "EventEmitter",
    "Viewport",
    "compute_viewport",
    "Annotation",
    "CircleAnnotation",
    "DrawingState",
    "FreehandAnnotation",
    "ImageInfo",
    "LineAnnotation",
    "MarkerState",
    "Point",
    "PointAnnotation",
    "Tool",
]
