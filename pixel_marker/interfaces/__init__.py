"""
Interfaces module - UI adapters for the marking core.

Provides adapters to connect the core marking logic
with different UI frameworks (OpenCV windows, Web, etc).
"""

from .canvas_adapter import CanvasAdapter

__all__ = ['CanvasAdapter']
