import json
import logging
from gettext import gettext as _
from pathlib import Path

import cv2

from pixel_marker.config import load_config
from pixel_marker.core.annotation import MarkerSession, Tool
from pixel_marker.core.annotation.export import export_filename, save_export
from pixel_marker.core.annotation.loading import read_image
from pixel_marker.interfaces import CanvasAdapter
from pixel_marker.utils.misc import parse_size

logger = logging.getLogger(__name__)

WINDOW_NAME = "pixel_marker"

TOOL_KEYS = {
    ord("p"): Tool.POINT,
    ord("l"): Tool.LINE,
    ord("c"): Tool.CIRCLE,
    ord("f"): Tool.FREEHAND,
}
PALETTE_KEYS = [ord(str(i)) for i in (1, 2, 3, 4, 5, 6, 7, 8, 9, 0)]
QUIT_KEYS = (ord("q"), 27)


def handle_key(session: MarkerSession, key: int, output: Path) -> bool:
    """
    Apply a keyboard shortcut to the session.

    Returns:
        False when the user asked to quit
    """
    if key in QUIT_KEYS:
        return False

    if key in TOOL_KEYS:
        session.set_tool(TOOL_KEYS[key])
        logger.info(_("Tool: {tool}").format(tool=TOOL_KEYS[key].value))
    elif key in PALETTE_KEYS:
        palette = session.cfg.palette
        index = PALETTE_KEYS.index(key)
        if index < len(palette):
            session.set_stroke_color(palette[index])
            logger.info(_("Color: {color}").format(color=palette[index]))
    elif key in (ord("+"), ord("=")):
        _change_width(session, 1)
    elif key in (ord("-"), ord("_")):
        _change_width(session, -1)
    elif key == ord("u"):
        if not session.undo():
            logger.info(_("Nothing to undo"))
    elif key == ord("x"):
        session.clear_all()
        logger.info(_("All markers and annotations cleared"))
    elif key == ord("e"):
        save_export(session.export_data(), output)
        logger.info(_("Data exported to {output}").format(output=output))
    return True


def _change_width(session: MarkerSession, delta: int):
    cfg = session.cfg.drawing
    width = session.drawing.stroke_width + delta
    width = max(cfg.min_stroke_width, min(cfg.max_stroke_width, width))
    session.set_stroke_width(width)
    logger.info(_("Stroke width: {width}").format(width=width))


def handle(args):  # pragma: no cover
    cfg = load_config()
    if args.canvas:
        canvas_size = parse_size(args.canvas)
    else:
        canvas_size = (cfg.canvas.width, cfg.canvas.height)

    output = args.output or args.image.parent / export_filename()

    image = read_image(args.image, cfg.upload.max_bytes)
    session = MarkerSession(cfg, canvas_size)
    session.load_image(image, args.image.name)
    logger.info(
        _("{name} has been loaded successfully").format(name=args.image.name)
    )

    if args.import_path is not None:
        session.import_data(json.loads(args.import_path.read_text()))

    def show(vis):
        cv2.imshow(WINDOW_NAME, cv2.cvtColor(vis, cv2.COLOR_RGB2BGR))

    cv2.namedWindow(WINDOW_NAME, cv2.WINDOW_AUTOSIZE)
    adapter = CanvasAdapter(session, update_image_callback=show)
    cv2.setMouseCallback(WINDOW_NAME, adapter.handle_cv2_mouse)
    show(session.render())

    try:
        while True:
            key = cv2.waitKey(20) & 0xFF
            if cv2.getWindowProperty(WINDOW_NAME, cv2.WND_PROP_VISIBLE) < 1:
                break
            if key == 0xFF:
                continue
            if not handle_key(session, key, output):
                break
    finally:
        cv2.destroyWindow(WINDOW_NAME)
