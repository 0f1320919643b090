"""
Export and import of marking data as JSON documents.

Document layout::

    {
      "image": {"name": ..., "size": {"width": ..., "height": ...}},
      "markers": [{"x": ..., "y": ..., "id": ...}, ...],
      "annotations": [{"id": ..., "type": ..., ...}, ...],
      "exportDate": "2024-01-31T12:00:00.000Z"
    }
"""

import json
from dataclasses import dataclass
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Tuple

from .state import Annotation, MarkerState, Point, annotation_from_dict


def iso_timestamp(now: Optional[datetime] = None) -> str:
    """UTC timestamp with millisecond precision and a ``Z`` suffix."""
    if now is None:
        now = datetime.now(timezone.utc)
    now = now.astimezone(timezone.utc)
    return now.isoformat(timespec="milliseconds").replace("+00:00", "Z")


def export_filename(now: Optional[datetime] = None) -> str:
    if now is None:
        now = datetime.now(timezone.utc)
    return f"pixel-marker-data-{now.astimezone(timezone.utc).date().isoformat()}.json"


def build_export_document(state: MarkerState, now: Optional[datetime] = None) -> dict:
    """
    Build the export document for the current state.

    Raises:
        ValueError: If no image is loaded
    """
    if state.image is None:
        raise ValueError("No image loaded")

    return {
        "image": state.image.to_dict(),
        "markers": [m.to_dict() for m in state.markers],
        "annotations": [a.to_dict() for a in state.annotations],
        "exportDate": iso_timestamp(now),
    }


def dumps_export(document: dict) -> str:
    return json.dumps(document, indent=2)


@dataclass
class ExportDocument:
    """Parsed export document."""

    image_name: Optional[str]
    image_size: Optional[Tuple[int, int]]
    markers: List[Point]
    annotations: List[Annotation]
    export_date: Optional[str] = None


def parse_export_document(
    document: dict, min_stroke_width: int = 1, max_stroke_width: int = 10
) -> ExportDocument:
    """
    Parse and validate the structure of an export document.

    Stroke widths outside ``[min_stroke_width, max_stroke_width]`` are
    rejected, as are colors matplotlib can't parse.

    Raises:
        ValueError: If the document is malformed
    """
    if not isinstance(document, dict):
        raise ValueError("Export document must be a JSON object")

    image = document.get("image") or {}
    if not isinstance(image, dict):
        raise ValueError(f"Invalid image entry: {image!r}")
    size = image.get("size")
    image_size = None
    if size is not None:
        try:
            image_size = (int(size["width"]), int(size["height"]))
        except (KeyError, TypeError) as e:
            raise ValueError(f"Invalid image size: {size!r}") from e

    markers = document.get("markers", [])
    annotations = document.get("annotations", [])
    for key, value in (("markers", markers), ("annotations", annotations)):
        if not isinstance(value, list):
            raise ValueError(f"{key!r} must be a list, got {type(value).__name__}")

    try:
        markers = [Point.from_dict(m) for m in markers]
    except (KeyError, TypeError) as e:
        raise ValueError(f"Invalid marker entry: {e}") from e

    annotations = [
        annotation_from_dict(a, min_stroke_width, max_stroke_width)
        for a in annotations
    ]

    return ExportDocument(
        image_name=image.get("name"),
        image_size=image_size,
        markers=markers,
        annotations=annotations,
        export_date=document.get("exportDate"),
    )


def save_export(document: dict, path: Path) -> Path:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(dumps_export(document))
    return path


def load_export(path: Path, **kwargs) -> ExportDocument:
    """Read and parse an export file (kwargs go to parse_export_document)."""
    with Path(path).open("r") as f:
        return parse_export_document(json.load(f), **kwargs)
