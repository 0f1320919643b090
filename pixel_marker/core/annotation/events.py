"""
Event system for the marking workflow.

Provides a decoupled way for the session to notify UI components
about state changes without depending on specific UI frameworks.
"""

import logging
from enum import Enum
from typing import Any, Callable, Dict, List, Optional
from dataclasses import dataclass

logger = logging.getLogger(__name__)


class EventType(Enum):
    """Types of events that can occur while marking an image."""

    # Image events
    IMAGE_LOADED = "image_loaded"
    IMAGE_LOAD_FAILED = "image_load_failed"

    # Marker events
    MARKER_ADDED = "marker_added"
    MARKER_REMOVED = "marker_removed"

    # Drawing events
    DRAWING_STARTED = "drawing_started"
    DRAWING_UPDATED = "drawing_updated"
    ANNOTATION_ADDED = "annotation_added"
    ANNOTATION_DISCARDED = "annotation_discarded"
    ANNOTATION_REMOVED = "annotation_removed"

    # Session events
    TOOL_CHANGED = "tool_changed"
    ALL_CLEARED = "all_cleared"
    UNDONE = "undone"
    DATA_IMPORTED = "data_imported"
    STATE_CHANGED = "state_changed"


@dataclass
class AnnotationEvent:
    """Event that occurs during marking."""

    event_type: EventType
    data: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        if self.data is None:
            self.data = {}


class EventEmitter:
    """
    Simple event emitter for pub/sub pattern.

    Allows components to subscribe to events without tight coupling.
    """

    def __init__(self):
        self._listeners: Dict[EventType, List[Callable]] = {}

    def on(self, event_type: EventType, callback: Callable[[AnnotationEvent], None]):
        """Subscribe to an event type."""
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        self._listeners[event_type].append(callback)

    def off(self, event_type: EventType, callback: Callable[[AnnotationEvent], None]):
        """Unsubscribe from an event type."""
        if event_type in self._listeners:
            self._listeners[event_type].remove(callback)

    def on_any(self, callback: Callable[[AnnotationEvent], None]):
        """Subscribe to every event type."""
        for event_type in EventType:
            self.on(event_type, callback)

    def emit(self, event: AnnotationEvent):
        """Emit an event to all subscribers."""
        for callback in list(self._listeners.get(event.event_type, [])):
            try:
                callback(event)
            except Exception:
                # one broken listener must not starve the others
                logger.exception(
                    "Error in listener for %s", event.event_type.value
                )

    def clear(self):
        """Clear all event listeners."""
        self._listeners.clear()
