from gettext import gettext as _

from pixel_marker.core.annotation.export import load_export
from pixel_marker.core.annotation.utils import compute_annotation_statistics


def summarize(document) -> str:
    stats = compute_annotation_statistics(document.markers, document.annotations)
    if document.image_size is not None:
        size = "{}x{}".format(*document.image_size)
    else:
        size = _("unknown size")
    lines = [
        _("Image: {name} ({size})").format(name=document.image_name, size=size),
        _("Exported: {date}").format(date=document.export_date or "-"),
        _("Markers: {count}").format(count=stats.pop("markers")),
        _("Annotations: {count}").format(count=stats.pop("annotations")),
    ]
    for kind, count in stats.items():
        lines.append(f"  {kind}: {count}")
    return "\n".join(lines)


def handle(args):
    print(summarize(load_export(args.export)))
