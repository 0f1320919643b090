from gettext import gettext as _
from pathlib import Path

COMMAND_DESCRIPTION = _("Render exported marking data onto its images")


def command(subparser):
    subparser.add_argument(
        "exports", type=Path, nargs="+", help=_("Exported JSON documents")
    )
    subparser.add_argument(
        "--images-dir",
        dest="images_dir",
        type=Path,
        default=Path("."),
        help=_("Folder containing the images named in the documents"),
    )
    subparser.add_argument(
        "-o",
        "--output",
        dest="output",
        type=Path,
        required=True,
        help=_("Folder where the PNG renders are written"),
    )
    subparser.add_argument(
        "--canvas",
        dest="canvas",
        type=str,
        help=_("Canvas size as WIDTHxHEIGHT (defaults to the image size)"),
    )
    subparser.add_argument(
        "--overwrite",
        action="store_true",
        help=_("Overwrite renders that already exist"),
    )

    def handle(args):
        from .render import handle as render_handle

        render_handle(args)

    return handle
