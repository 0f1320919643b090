"""
Marking session management.

Core logic for placing markers and drawing annotations on an image.
UI-agnostic - can be used with any interface (OpenCV window, Web, CLI).
"""

import copy
import logging
import threading
from typing import Any, Dict, Optional, Tuple, Union

import numpy as np

from pixel_marker.config import get_default_config
from pixel_marker.exceptions import PixelMarkerError, UploadInProgressError

from .events import AnnotationEvent, EventEmitter, EventType
from .export import build_export_document, parse_export_document
from .geometry import Viewport, compute_viewport
from .loading import decode_image, validate_upload
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
    new_id,
)
from .utils import annotations_in_bounds, color_to_rgb, render_canvas, validate_image

logger = logging.getLogger(__name__)


class MarkerSession:
    """
    Manages the state and logic of a pixel marking session.

    This class handles:
    - Image loading (uploads are validated and decoded first)
    - Mapping pointer positions from canvas space to image space
    - The drawing state machine (idle -> drawing -> commit/discard)
    - Marker and annotation lists, with undo history
    - Export/import of the marking data
    - Event emission for UI updates

    Pointer coordinates are canvas coordinates for ``canvas_size``;
    everything stored is in image space so it survives canvas resizes.
    """

    def __init__(self, cfg=None, canvas_size: Optional[Tuple[int, int]] = None):
        """
        Initialize marking session.

        Args:
            cfg: Configuration, defaults to get_default_config()
            canvas_size: (width, height) of the display canvas
        """
        self.cfg = cfg if cfg is not None else get_default_config()

        self.state = MarkerState()
        self.drawing = DrawingState(
            stroke_color=self.cfg.drawing.stroke_color,
            stroke_width=int(self.cfg.drawing.stroke_width),
        )

        if canvas_size is None:
            canvas_size = (self.cfg.canvas.width, self.cfg.canvas.height)
        self.canvas_size = (int(canvas_size[0]), int(canvas_size[1]))

        # held while an upload is being validated, decoded and loaded
        self._load_lock = threading.Lock()

        # History for undo functionality
        self._state_history: list = []

        # Event emitter for UI notifications
        self.events = EventEmitter()

    # Image

    @property
    def is_loading(self) -> bool:
        return self._load_lock.locked()

    @property
    def image(self) -> Optional[np.ndarray]:
        if self.state.image is None:
            return None
        return self.state.image.image

    def load_image(self, image: np.ndarray, name: str = "image"):
        """
        Load a new image, dropping all markers and annotations.

        Args:
            image: RGB image as numpy array
            name: Name reported in exports
        """
        validate_image(image)

        self.state = MarkerState(image=ImageInfo(name=name, image=image))
        self.drawing.reset()
        self._state_history.clear()

        logger.debug("Loaded %s (%dx%d)", name, image.shape[1], image.shape[0])
        self.events.emit(
            AnnotationEvent(
                EventType.IMAGE_LOADED,
                {"name": name, "size": self.state.image.size},
            )
        )

    def load_upload(
        self, filename: str, data: bytes, content_type: Optional[str] = None
    ) -> ImageInfo:
        """
        Validate, decode and load an uploaded file.

        On failure the previous image and annotations are kept.

        Raises:
            UploadInProgressError: If another upload is being decoded
            InvalidUploadError: If the file type or size is rejected
            ImageDecodeError: If the bytes can't be decoded
        """
        if not self._load_lock.acquire(blocking=False):
            raise UploadInProgressError("An upload is already in progress")

        try:
            image = self._decode_upload(filename, data, content_type)
            self.load_image(image, filename)
        finally:
            self._load_lock.release()
        return self.state.image

    def _decode_upload(
        self, filename: str, data: bytes, content_type: Optional[str]
    ) -> np.ndarray:
        try:
            validate_upload(
                filename, len(data), content_type, self.cfg.upload.max_bytes
            )
            return decode_image(data)
        except PixelMarkerError as e:
            logger.info("Upload of %s rejected: %s", filename, e)
            self.events.emit(
                AnnotationEvent(
                    EventType.IMAGE_LOAD_FAILED,
                    {"filename": filename, "error": str(e)},
                )
            )
            raise

    # Canvas and tools

    def set_canvas_size(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Canvas size must be positive, got {(width, height)}")
        self.canvas_size = (int(width), int(height))
        self._emit_state_changed()

    def viewport(self) -> Viewport:
        if self.state.image is None:
            raise ValueError("No image loaded")
        return compute_viewport(self.canvas_size, self.state.image.size)

    def set_tool(self, tool: Union[Tool, str]):
        tool = Tool(tool)
        if self.drawing.is_drawing:
            self._discard_drawing()
        self.drawing.tool = tool
        self.events.emit(AnnotationEvent(EventType.TOOL_CHANGED, {"tool": tool.value}))

    def set_stroke_color(self, color: str):
        """Set the color of new annotations (raises ValueError if invalid)."""
        color_to_rgb(color)
        self.drawing.stroke_color = color

    def set_stroke_width(self, width: int):
        self.drawing.stroke_width = self._check_stroke_width(width)

    def _check_stroke_width(self, width) -> int:
        low = self.cfg.drawing.min_stroke_width
        high = self.cfg.drawing.max_stroke_width
        if int(width) != width or not low <= width <= high:
            raise ValueError(f"Stroke width must be an integer in [{low}, {high}]")
        return int(width)

    def configure_drawing(
        self,
        tool: Optional[Union[Tool, str]] = None,
        stroke_color: Optional[str] = None,
        stroke_width: Optional[int] = None,
    ):
        """
        Change tool and stroke style together.

        Every given value is checked before any is applied, so a
        ValueError leaves the drawing settings untouched.
        """
        if tool is not None:
            tool = Tool(tool)
        if stroke_color is not None:
            color_to_rgb(stroke_color)
        if stroke_width is not None:
            stroke_width = self._check_stroke_width(stroke_width)

        if tool is not None:
            self.set_tool(tool)
        if stroke_color is not None:
            self.drawing.stroke_color = stroke_color
        if stroke_width is not None:
            self.drawing.stroke_width = stroke_width

    # Pointer events

    def _to_image(self, x: float, y: float) -> Optional[Tuple[int, int]]:
        """Map to image space, or None when outside the image."""
        if self.state.image is None:
            return None
        viewport = self.viewport()
        image_x, image_y = viewport.canvas_to_image(x, y)
        if not viewport.contains(image_x, image_y):
            return None
        return image_x, image_y

    def pointer_down(self, x: float, y: float) -> Optional[Point]:
        """
        Handle a pointer press at canvas coordinates.

        Returns:
            The new marker (point tool) or the gesture start point,
            None if the press was outside the image
        """
        mapped = self._to_image(x, y)
        if mapped is None:
            return None

        if self.drawing.tool is Tool.POINT:
            self._save_state()
            marker = Point(x=mapped[0], y=mapped[1], id=new_id("marker"))
            self.state.markers.append(marker)
            self.events.emit(
                AnnotationEvent(
                    EventType.MARKER_ADDED,
                    {"marker": marker.to_dict(), "number": len(self.state.markers)},
                )
            )
            self._emit_state_changed()
            return marker

        if self.drawing.is_drawing:
            # a missed release; start fresh
            self._discard_drawing()

        start = Point(x=mapped[0], y=mapped[1])
        self.drawing.begin(start)
        self.events.emit(
            AnnotationEvent(
                EventType.DRAWING_STARTED,
                {"tool": self.drawing.tool.value, "start": start.to_dict()},
            )
        )
        self._emit_state_changed()
        return start

    def pointer_move(self, x: float, y: float, pressed: bool = True) -> bool:
        """
        Handle pointer motion while drawing.

        Returns:
            True if the in-progress gesture was updated
        """
        if not self.drawing.is_drawing or not pressed:
            return False

        mapped = self._to_image(x, y)
        if mapped is None:
            return False

        sample = Point(x=mapped[0], y=mapped[1])
        if self.drawing.tool is Tool.FREEHAND:
            self.drawing.current_path.append(sample)
        else:
            self.drawing.current_path = [sample]

        self.events.emit(
            AnnotationEvent(
                EventType.DRAWING_UPDATED,
                {"num_samples": len(self.drawing.current_path)},
            )
        )
        self._emit_state_changed()
        return True

    def pointer_up(self, x: float, y: float) -> Optional[Annotation]:
        """
        Handle a pointer release, committing the gesture in progress.

        Returns:
            The committed annotation, or None if nothing was being drawn
        """
        if not self.drawing.is_drawing or self.drawing.start is None:
            return None

        start = self.drawing.start
        mapped = self._to_image(x, y)
        if mapped is not None:
            end = Point(x=mapped[0], y=mapped[1])
        elif self.drawing.current_path:
            end = self.drawing.current_path[-1]
        else:
            end = start

        annotation = self._build_annotation(
            start, end, released_on_image=mapped is not None
        )

        self._save_state()
        self.state.annotations.append(annotation)
        self.drawing.reset()

        self.events.emit(
            AnnotationEvent(
                EventType.ANNOTATION_ADDED, {"annotation": annotation.to_dict()}
            )
        )
        self._emit_state_changed()
        return annotation

    def pointer_leave(self) -> bool:
        """
        Handle the pointer leaving the canvas.

        Returns:
            True if an in-progress gesture was discarded
        """
        if not self.drawing.is_drawing:
            return False
        self._discard_drawing()
        self._emit_state_changed()
        return True

    def _build_annotation(
        self, start: Point, end: Point, released_on_image: bool = True
    ) -> Annotation:
        tool = self.drawing.tool
        common = dict(
            id=new_id("annotation"),
            stroke_color=self.drawing.stroke_color,
            stroke_width=self.drawing.stroke_width,
        )

        if tool is Tool.LINE:
            return LineAnnotation(x=start.x, y=start.y, end_x=end.x, end_y=end.y, **common)
        if tool is Tool.CIRCLE:
            return CircleAnnotation(
                x=start.x, y=start.y, end_x=end.x, end_y=end.y, **common
            )
        if tool is Tool.FREEHAND:
            path = self.drawing.current_path
            if len(path) > 1:
                if not released_on_image:
                    # end is already the last sample
                    return FreehandAnnotation(path=list(path), **common)
                final = Point(x=end.x, y=end.y)
                return FreehandAnnotation(path=[*path, final], **common)
            # a single sample is a click, not a stroke
            return PointAnnotation(x=start.x, y=start.y, **common)
        raise TypeError(f"Tool {tool} does not draw annotations")

    def _discard_drawing(self):
        tool = self.drawing.tool.value
        self.drawing.reset()
        self.events.emit(AnnotationEvent(EventType.ANNOTATION_DISCARDED, {"tool": tool}))

    # Editing

    def remove_marker(self, index: int) -> Point:
        """
        Remove the marker at ``index`` (0-based); later markers renumber.

        Raises:
            IndexError: If there is no such marker
        """
        if not 0 <= index < len(self.state.markers):
            raise IndexError(f"No marker at index {index}")

        self._save_state()
        marker = self.state.markers.pop(index)
        self.events.emit(
            AnnotationEvent(
                EventType.MARKER_REMOVED, {"index": index, "marker": marker.to_dict()}
            )
        )
        self._emit_state_changed()
        return marker

    def remove_annotation(self, annotation_id: str) -> bool:
        annotation = self.state.find_annotation(annotation_id)
        if annotation is None:
            return False

        self._save_state()
        self.state.annotations.remove(annotation)
        self.events.emit(
            AnnotationEvent(EventType.ANNOTATION_REMOVED, {"id": annotation_id})
        )
        self._emit_state_changed()
        return True

    def clear_all(self):
        """Remove every marker and annotation."""
        self._save_state()
        self.state.markers.clear()
        self.state.annotations.clear()
        self.drawing.reset()
        self.events.emit(AnnotationEvent(EventType.ALL_CLEARED))
        self._emit_state_changed()

    def undo(self) -> bool:
        """
        Undo the last change to markers or annotations.

        Returns:
            True if undo was successful, False if no history
        """
        if not self._state_history:
            return False

        prev_state = self._state_history.pop()
        self.state.markers = prev_state["markers"]
        self.state.annotations = prev_state["annotations"]
        self.drawing.reset()

        self.events.emit(AnnotationEvent(EventType.UNDONE))
        self._emit_state_changed()
        return True

    # Export / import

    def export_data(self, now=None) -> Dict[str, Any]:
        """Build the export document (see export.build_export_document)."""
        return build_export_document(self.state, now)

    def import_data(self, document: dict):
        """
        Replace markers and annotations with those of an export document.

        Raises:
            ValueError: If no image is loaded, the document is malformed or
                was made for an image of another size, or a coordinate is
                off-image
        """
        if self.state.image is None:
            raise ValueError("No image loaded")

        parsed = parse_export_document(
            document,
            min_stroke_width=self.cfg.drawing.min_stroke_width,
            max_stroke_width=self.cfg.drawing.max_stroke_width,
        )
        size = self.state.image.size
        if parsed.image_size is not None and parsed.image_size != size:
            raise ValueError(
                f"Document is for a {parsed.image_size} image, loaded image is {size}"
            )
        if not annotations_in_bounds(parsed.markers, parsed.annotations, size):
            raise ValueError("Document has coordinates outside the image")

        self._save_state()
        self.state.markers = parsed.markers
        self.state.annotations = parsed.annotations
        self.drawing.reset()

        self.events.emit(
            AnnotationEvent(
                EventType.DATA_IMPORTED,
                {
                    "num_markers": len(parsed.markers),
                    "num_annotations": len(parsed.annotations),
                },
            )
        )
        self._emit_state_changed()

    # Rendering

    def get_render_data(self) -> Dict[str, Any]:
        """
        Get data needed for rendering.

        Returns:
            Dictionary with render data
        """
        return {
            "image": self.image,
            "canvas_size": self.canvas_size,
            "markers": list(self.state.markers),
            "annotations": list(self.state.annotations),
            "preview": self.drawing.preview(),
            "tool": self.drawing.tool,
            "is_drawing": self.drawing.is_drawing,
        }

    def render(self, canvas_size: Optional[Tuple[int, int]] = None) -> np.ndarray:
        """
        Render the canvas from scratch.

        Raises:
            ValueError: If no image is loaded
        """
        if self.state.image is None:
            raise ValueError("No image loaded")
        data = self.get_render_data()
        return render_canvas(
            data["image"],
            canvas_size or data["canvas_size"],
            data["markers"],
            data["annotations"],
            data["preview"],
            self.cfg,
        )

    def _emit_state_changed(self):
        self.events.emit(AnnotationEvent(EventType.STATE_CHANGED))

    def _save_state(self):
        """Save current markers and annotations to history for undo."""
        self._state_history.append(
            {
                "markers": copy.deepcopy(self.state.markers),
                "annotations": copy.deepcopy(self.state.annotations),
            }
        )

        # Limit history size
        max_history = self.cfg.history.max_size
        if len(self._state_history) > max_history:
            self._state_history.pop(0)
