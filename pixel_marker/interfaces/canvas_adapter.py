"""
Canvas adapter for marking sessions.

Bridges the MarkerSession with a display surface that reports raw mouse
events (OpenCV HighGUI windows, browser canvases forwarded over HTTP).
"""

from typing import Callable, Optional, Tuple

import cv2
import numpy as np

from ..core.annotation import AnnotationEvent, EventType, MarkerSession


class CanvasAdapter:
    """
    Adapter connecting MarkerSession to a canvas.

    Provides a compatibility layer that:
    - Translates mouse events into session pointer calls
    - Detects the pointer leaving the canvas
    - Redraws through a callback whenever the session changes
    """

    def __init__(
        self,
        session: MarkerSession,
        update_image_callback: Optional[Callable[[np.ndarray], None]] = None,
    ):
        """
        Initialize adapter.

        Args:
            session: Core marking session
            update_image_callback: Called with the freshly rendered
                RGB canvas after every change
        """
        self.session = session
        self.update_image_callback = update_image_callback
        self._button_down = False

        # Subscribe to session events
        self._setup_event_handlers()

    def _setup_event_handlers(self):
        """Setup event handlers for session events."""
        self.session.events.on(EventType.STATE_CHANGED, self._on_state_changed)
        self.session.events.on(EventType.IMAGE_LOADED, self._on_state_changed)

    def _on_state_changed(self, event: AnnotationEvent):
        """Redraw after any change."""
        if self.update_image_callback and self.session.image is not None:
            self.update_image_callback(self.session.render())

    @property
    def canvas_size(self) -> Tuple[int, int]:
        return self.session.canvas_size

    def resize(self, width: int, height: int):
        self.session.set_canvas_size(width, height)

    def is_inside(self, x: float, y: float) -> bool:
        width, height = self.canvas_size
        return 0 <= x < width and 0 <= y < height

    def press(self, x: float, y: float):
        self._button_down = True
        return self.session.pointer_down(x, y)

    def move(self, x: float, y: float):
        if not self.is_inside(x, y):
            return self.leave()
        return self.session.pointer_move(x, y, pressed=self._button_down)

    def release(self, x: float, y: float):
        self._button_down = False
        if not self.is_inside(x, y):
            # released off-canvas: the gesture already counts as left
            return self.session.pointer_leave()
        return self.session.pointer_up(x, y)

    def leave(self):
        self._button_down = False
        return self.session.pointer_leave()

    def handle_cv2_mouse(self, event: int, x: int, y: int, flags: int, param=None):
        """Callback for ``cv2.setMouseCallback``."""
        if event == cv2.EVENT_LBUTTONDOWN:
            self.press(x, y)
        elif event == cv2.EVENT_MOUSEMOVE:
            if self._button_down and not flags & cv2.EVENT_FLAG_LBUTTON:
                # button released outside the window
                self.leave()
            else:
                self.move(x, y)
        elif event == cv2.EVENT_LBUTTONUP:
            self.release(x, y)

    def get_visualization(self, bgr: bool = False) -> Optional[np.ndarray]:
        """
        Get the rendered canvas for display.

        Args:
            bgr: Convert to BGR channel order (for cv2.imshow)

        Returns:
            Rendered canvas, or None when no image is loaded
        """
        if self.session.image is None:
            return None
        vis = self.session.render()
        if bgr:
            vis = cv2.cvtColor(vis, cv2.COLOR_RGB2BGR)
        return vis
