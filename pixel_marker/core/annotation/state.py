"""
State management for pixel marking sessions.

Contains data classes for markers, the annotation variants and the
in-progress drawing state. All coordinates are stored in image space.
"""

import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import ClassVar, Dict, List, Optional, Tuple, Type

import numpy as np
from matplotlib import colors as mcolors


def new_id(prefix: str) -> str:
    """Generate an identifier like ``marker-1a2b3c4d``."""
    return f"{prefix}-{uuid.uuid4().hex[:12]}"


class Tool(Enum):
    """Drawing tools available on the canvas."""

    POINT = "point"
    LINE = "line"
    CIRCLE = "circle"
    FREEHAND = "freehand"


@dataclass
class Point:
    """A single pixel position in image space."""

    x: int
    y: int
    id: str = field(default_factory=lambda: new_id("point"))

    def to_dict(self):
        """Convert to dictionary for serialization."""
        return {"x": self.x, "y": self.y, "id": self.id}

    @classmethod
    def from_dict(cls, data: dict):
        """Create from dictionary."""
        return cls(
            x=int(data["x"]),
            y=int(data["y"]),
            id=data.get("id") or new_id("point"),
        )


@dataclass
class Annotation:
    """
    Base class of the committed drawing shapes.

    Subclasses set ``type`` and add their own coordinates. The wire form
    uses the camelCase keys of the exported JSON document.
    """

    type: ClassVar[str] = ""

    id: str
    stroke_color: str
    stroke_width: int

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "type": self.type,
            "strokeColor": self.stroke_color,
            "strokeWidth": self.stroke_width,
        }

    def coords(self) -> List[Tuple[int, int]]:
        """All image-space coordinates referenced by this annotation."""
        raise NotImplementedError


@dataclass
class PointAnnotation(Annotation):
    type: ClassVar[str] = Tool.POINT.value

    x: int = 0
    y: int = 0

    def to_dict(self):
        data = super().to_dict()
        data.update(x=self.x, y=self.y)
        return data

    def coords(self):
        return [(self.x, self.y)]


@dataclass
class LineAnnotation(Annotation):
    type: ClassVar[str] = Tool.LINE.value

    x: int = 0
    y: int = 0
    end_x: int = 0
    end_y: int = 0

    def to_dict(self):
        data = super().to_dict()
        data.update(x=self.x, y=self.y, endX=self.end_x, endY=self.end_y)
        return data

    def coords(self):
        return [(self.x, self.y), (self.end_x, self.end_y)]


@dataclass
class CircleAnnotation(LineAnnotation):
    """Circle centred on (x, y) passing through (end_x, end_y)."""

    type: ClassVar[str] = Tool.CIRCLE.value


@dataclass
class FreehandAnnotation(Annotation):
    type: ClassVar[str] = Tool.FREEHAND.value

    path: List[Point] = field(default_factory=list)

    def to_dict(self):
        data = super().to_dict()
        data["path"] = [p.to_dict() for p in self.path]
        return data

    def coords(self):
        return [(p.x, p.y) for p in self.path]


ANNOTATION_TYPES: Dict[str, Type[Annotation]] = {
    cls.type: cls
    for cls in (PointAnnotation, LineAnnotation, CircleAnnotation, FreehandAnnotation)
}


def annotation_from_dict(
    data: dict, min_stroke_width: int = 1, max_stroke_width: int = 10
) -> Annotation:
    """
    Rebuild an annotation from its exported dictionary.

    Raises:
        ValueError: If the entry is malformed, the type is unknown, or the
            stroke color or width is invalid
    """
    if not isinstance(data, dict):
        raise ValueError(f"Annotation entry must be an object, got {data!r}")

    kind = data.get("type")
    cls = ANNOTATION_TYPES.get(kind)
    if cls is None:
        raise ValueError(f"Unknown annotation type: {kind!r}")

    stroke_color = data.get("strokeColor", "#2563EB")
    if not isinstance(stroke_color, str) or not mcolors.is_color_like(stroke_color):
        raise ValueError(f"Invalid stroke color: {stroke_color!r}")

    try:
        stroke_width = data.get("strokeWidth", 2)
        if isinstance(stroke_width, bool) or int(stroke_width) != stroke_width:
            raise ValueError(f"Stroke width must be an integer, got {stroke_width!r}")
        stroke_width = int(stroke_width)
        if not min_stroke_width <= stroke_width <= max_stroke_width:
            raise ValueError(
                f"Stroke width must be in [{min_stroke_width}, {max_stroke_width}],"
                f" got {stroke_width}"
            )

        common = dict(
            id=data.get("id") or new_id("annotation"),
            stroke_color=stroke_color,
            stroke_width=stroke_width,
        )
        if cls is PointAnnotation:
            return cls(x=int(data["x"]), y=int(data["y"]), **common)
        if cls is FreehandAnnotation:
            path = [Point.from_dict(p) for p in data["path"]]
            if len(path) < 2:
                raise ValueError("Freehand annotation needs at least two points")
            return cls(path=path, **common)
        return cls(
            x=int(data["x"]),
            y=int(data["y"]),
            end_x=int(data["endX"]),
            end_y=int(data["endY"]),
            **common,
        )
    except KeyError as e:
        raise ValueError(f"Annotation of type {kind!r} is missing {e}") from e
    except TypeError as e:
        raise ValueError(f"Invalid {kind!r} annotation: {e}") from e


@dataclass(eq=False)
class ImageInfo:
    """The currently loaded image and its native size."""

    name: str
    image: np.ndarray

    @property
    def width(self) -> int:
        return int(self.image.shape[1])

    @property
    def height(self) -> int:
        return int(self.image.shape[0])

    @property
    def size(self) -> Tuple[int, int]:
        return (self.width, self.height)

    def to_dict(self):
        return {
            "name": self.name,
            "size": {"width": self.width, "height": self.height},
        }


@dataclass
class DrawingState:
    """In-progress gesture of a multi-point tool."""

    tool: Tool = Tool.POINT
    stroke_color: str = "#2563EB"
    stroke_width: int = 2
    is_drawing: bool = False
    start: Optional[Point] = None
    current_path: List[Point] = field(default_factory=list)

    def begin(self, start: Point):
        self.is_drawing = True
        self.start = start
        # freehand keeps every sample, line/circle only the live endpoint
        self.current_path = [start] if self.tool is Tool.FREEHAND else []

    def reset(self):
        self.is_drawing = False
        self.start = None
        self.current_path = []

    def preview(self) -> Optional[Annotation]:
        """
        Build the annotation currently being drawn, if any.

        Returns None when there is nothing drawable yet, e.g. a line
        without a live endpoint or a freehand path with one sample.
        """
        if not self.is_drawing or self.start is None:
            return None

        common = dict(
            id="preview",
            stroke_color=self.stroke_color,
            stroke_width=self.stroke_width,
        )
        if self.tool in (Tool.LINE, Tool.CIRCLE):
            if not self.current_path:
                return None
            end = self.current_path[-1]
            cls = LineAnnotation if self.tool is Tool.LINE else CircleAnnotation
            return cls(
                x=self.start.x, y=self.start.y, end_x=end.x, end_y=end.y, **common
            )
        if self.tool is Tool.FREEHAND:
            if len(self.current_path) < 2:
                return None
            return FreehandAnnotation(path=list(self.current_path), **common)
        return None


@dataclass
class MarkerState:
    """
    Complete marking state for a single image.

    Markers are numbered by their position in ``markers`` (1-based).
    """

    image: Optional[ImageInfo] = None
    markers: List[Point] = field(default_factory=list)
    annotations: List[Annotation] = field(default_factory=list)

    def find_annotation(self, annotation_id: str) -> Optional[Annotation]:
        for annotation in self.annotations:
            if annotation.id == annotation_id:
                return annotation
        return None

    def to_dict(self):
        return {
            "image": self.image.to_dict() if self.image is not None else None,
            "markers": [m.to_dict() for m in self.markers],
            "annotations": [a.to_dict() for a in self.annotations],
        }
