"""
Example Web API for pixel marking.

This demonstrates how the modular architecture allows
creating a web interface using the same core logic: the browser only
forwards pointer events and shows the rendered canvas.

Requirements:
    pip install -e .[web]

Usage:
    python examples/web_api_example.py

Then visit http://localhost:8000/docs for API documentation.
"""

import base64
import logging
import uuid
from typing import Optional

import cv2
from fastapi import FastAPI, File, HTTPException, UploadFile
from fastapi.concurrency import run_in_threadpool
from pydantic import BaseModel

from pixel_marker.config import load_config
from pixel_marker.core.annotation import MarkerSession, Tool
from pixel_marker.exceptions import PixelMarkerError, UploadInProgressError

logger = logging.getLogger(__name__)


class PointerEvent(BaseModel):
    """Pointer event in canvas coordinates."""

    event: str  # down | move | up | leave
    x: float = 0
    y: float = 0
    pressed: bool = True


class ToolRequest(BaseModel):
    tool: Tool
    stroke_color: Optional[str] = None
    stroke_width: Optional[int] = None


# Global session storage (in production, use Redis or database)
sessions = {}

cfg = load_config()

app = FastAPI(
    title="Pixel Marker API",
    description="Web API for marking pixels and drawing annotations on images",
    version="1.0.0",
)


def get_session(session_id: str) -> MarkerSession:
    if session_id not in sessions:
        raise HTTPException(status_code=404, detail="Session not found")
    return sessions[session_id]


def session_summary(session_id: str, session: MarkerSession):
    return {
        "session_id": session_id,
        "num_markers": len(session.state.markers),
        "num_annotations": len(session.state.annotations),
        "is_drawing": session.drawing.is_drawing,
    }


@app.post("/session/create")
async def create_session(
    image: UploadFile = File(...),
    canvas_width: int = cfg.canvas.width,
    canvas_height: int = cfg.canvas.height,
):
    """
    Create a new marking session from an uploaded image.

    Args:
        image: Image file to mark (max 10MB)
        canvas_width: Width of the client's canvas
        canvas_height: Height of the client's canvas

    Returns:
        Session ID and image size
    """
    if canvas_width <= 0 or canvas_height <= 0:
        raise HTTPException(status_code=400, detail="Canvas size must be positive")

    session = MarkerSession(cfg, (canvas_width, canvas_height))
    session_id = str(uuid.uuid4())
    sessions[session_id] = session

    try:
        return await _upload(session_id, session, image)
    except HTTPException:
        del sessions[session_id]
        raise


@app.post("/session/{session_id}/image")
async def replace_image(session_id: str, image: UploadFile = File(...)):
    """Replace the session image; clears markers and annotations."""
    return await _upload(session_id, get_session(session_id), image)


async def _upload(session_id: str, session: MarkerSession, image: UploadFile):
    contents = await image.read()
    try:
        # decoding runs off the event loop; the session refuses overlaps
        info = await run_in_threadpool(
            session.load_upload, image.filename, contents, image.content_type
        )
    except UploadInProgressError as e:
        raise HTTPException(status_code=409, detail=str(e))
    except PixelMarkerError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"session_id": session_id, "image": info.to_dict()}


@app.post("/session/{session_id}/pointer")
async def pointer(session_id: str, event: PointerEvent):
    """
    Forward a pointer event to the session.

    Args:
        session_id: Session identifier
        event: Pointer event type and canvas coordinates
    """
    session = get_session(session_id)
    if session.image is None:
        raise HTTPException(status_code=409, detail="No image loaded")

    result = None
    if event.event == "down":
        point = session.pointer_down(event.x, event.y)
        result = point.to_dict() if point is not None else None
    elif event.event == "move":
        result = session.pointer_move(event.x, event.y, pressed=event.pressed)
    elif event.event == "up":
        annotation = session.pointer_up(event.x, event.y)
        result = annotation.to_dict() if annotation is not None else None
    elif event.event == "leave":
        result = session.pointer_leave()
    else:
        raise HTTPException(status_code=422, detail=f"Unknown event {event.event!r}")

    return {**session_summary(session_id, session), "result": result}


@app.post("/session/{session_id}/tool")
async def set_tool(session_id: str, request: ToolRequest):
    """Select the drawing tool and optionally the stroke style."""
    session = get_session(session_id)
    try:
        session.configure_drawing(
            tool=request.tool,
            stroke_color=request.stroke_color,
            stroke_width=request.stroke_width,
        )
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))

    return {
        "tool": session.drawing.tool.value,
        "stroke_color": session.drawing.stroke_color,
        "stroke_width": session.drawing.stroke_width,
    }


@app.post("/session/{session_id}/undo")
async def undo(session_id: str):
    """Undo last change."""
    session = get_session(session_id)
    return {"success": session.undo()}


@app.post("/session/{session_id}/clear")
async def clear_all(session_id: str):
    """Remove all markers and annotations."""
    session = get_session(session_id)
    session.clear_all()
    return {"success": True}


@app.delete("/session/{session_id}/markers/{index}")
async def remove_marker(session_id: str, index: int):
    session = get_session(session_id)
    try:
        marker = session.remove_marker(index)
    except IndexError as e:
        raise HTTPException(status_code=404, detail=str(e))
    return {"removed": marker.to_dict()}


@app.delete("/session/{session_id}/annotations/{annotation_id}")
async def remove_annotation(session_id: str, annotation_id: str):
    session = get_session(session_id)
    if not session.remove_annotation(annotation_id):
        raise HTTPException(status_code=404, detail="Annotation not found")
    return {"success": True}


@app.get("/session/{session_id}/export")
async def export_data(session_id: str):
    """Get the export document."""
    session = get_session(session_id)
    try:
        return session.export_data()
    except ValueError as e:
        raise HTTPException(status_code=409, detail=str(e))


@app.get("/session/{session_id}/render")
async def render(session_id: str):
    """Get the rendered canvas as a base64 PNG."""
    session = get_session(session_id)
    if session.image is None:
        raise HTTPException(status_code=409, detail="No image loaded")

    vis = cv2.cvtColor(session.render(), cv2.COLOR_RGB2BGR)
    _, buffer = cv2.imencode(".png", vis)
    return {
        "canvas_size": session.canvas_size,
        "png_base64": base64.b64encode(buffer).decode("utf-8"),
    }


@app.delete("/session/{session_id}")
async def delete_session(session_id: str):
    """Delete marking session."""
    get_session(session_id)
    del sessions[session_id]
    return {"success": True}


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {
        "status": "healthy",
        "active_sessions": len(sessions),
    }


if __name__ == "__main__":
    import uvicorn

    logging.basicConfig(level=logging.INFO)
    logger.info("Visit http://localhost:8000/docs for API documentation")

    uvicorn.run(app, host="0.0.0.0", port=8000)
