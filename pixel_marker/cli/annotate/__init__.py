# flake8: noqa E501

from gettext import gettext as _
from pathlib import Path

COMMAND_DESCRIPTION = _("Interactively mark pixels and draw annotations on an image")


def command(subparser):
    subparser.add_argument("image", type=Path)
    subparser.add_argument(
        "-o",
        "--output",
        dest="output",
        type=Path,
        help=_("Where to save the exported JSON (defaults to pixel-marker-data-DATE.json beside the image)"),
    )
    subparser.add_argument(
        "-i",
        "--import",
        dest="import_path",
        type=Path,
        help=_("Exported JSON whose markers and annotations are loaded first"),
    )
    subparser.add_argument(
        "--canvas",
        dest="canvas",
        type=str,
        help=_("Canvas size as WIDTHxHEIGHT"),
    )

    def handle(args):
        from .annotator import handle as annotator_handle

        annotator_handle(args)

    return handle
