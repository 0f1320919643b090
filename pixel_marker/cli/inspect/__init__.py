from pathlib import Path
from gettext import gettext as _

COMMAND_DESCRIPTION = _("Summarize an exported marking document")


def command(subparser):
    subparser.add_argument("export", type=Path)

    def handle(args):
        from .summary import handle as inspect_handle

        inspect_handle(args)

    return handle
