"""
Exceptions raised for user-facing failures.

Programming errors keep using the builtin types (ValueError, TypeError,
IndexError); these classes mark failures a UI should show to the user.
"""


class PixelMarkerError(Exception):
    """Base class for pixel_marker errors."""


class InvalidUploadError(PixelMarkerError, ValueError):
    """Uploaded file has the wrong type or is too large."""


class ImageDecodeError(PixelMarkerError, ValueError):
    """Uploaded bytes could not be decoded into an image."""


class UploadInProgressError(PixelMarkerError, RuntimeError):
    """Another upload is still being decoded for this session."""
