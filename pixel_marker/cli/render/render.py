import logging
from gettext import gettext as _

import cv2

from pixel_marker.config import load_config
from pixel_marker.core.annotation.export import load_export
from pixel_marker.core.annotation.loading import read_image
from pixel_marker.core.annotation.utils import annotations_in_bounds, render_canvas
from pixel_marker.utils.misc import parse_size, try_tqdm

logger = logging.getLogger(__name__)


def handle(args):
    cfg = load_config()
    canvas_size = parse_size(args.canvas) if args.canvas else None

    assert args.images_dir.is_dir(), _("Images folder must exist and be a folder")
    args.output.mkdir(exist_ok=True, parents=True)

    written = []
    for export_path in try_tqdm(args.exports, desc=_("Rendering...")):
        try:
            document = load_export(
                export_path,
                min_stroke_width=cfg.drawing.min_stroke_width,
                max_stroke_width=cfg.drawing.max_stroke_width,
            )
        except ValueError as e:
            logger.warning(
                _("{path}: invalid document ({error}), skipping").format(
                    path=export_path, error=e
                )
            )
            continue
        if not document.image_name:
            logger.warning(
                _("{path}: document names no image, skipping").format(path=export_path)
            )
            continue

        out_path = args.output / f"{export_path.stem}.png"
        if out_path.exists() and not args.overwrite:
            logger.warning(
                _("{path} exists, use --overwrite to replace it").format(path=out_path)
            )
            continue

        image_path = args.images_dir / document.image_name
        if not image_path.exists():
            logger.warning(
                _("{path}: image not found, skipping").format(path=image_path)
            )
            continue

        image = read_image(image_path, cfg.upload.max_bytes)
        size = (image.shape[1], image.shape[0])
        if document.image_size is not None and document.image_size != size:
            logger.warning(
                _("{path}: document is for a {expected} image, found {found}").format(
                    path=export_path, expected=document.image_size, found=size
                )
            )
            continue
        if not annotations_in_bounds(document.markers, document.annotations, size):
            logger.warning(
                _("{path}: coordinates outside the image, skipping").format(
                    path=export_path
                )
            )
            continue

        canvas = render_canvas(
            image,
            canvas_size or size,
            document.markers,
            document.annotations,
            cfg=cfg,
        )
        cv2.imwrite(str(out_path), cv2.cvtColor(canvas, cv2.COLOR_RGB2BGR))
        logger.debug(_("Rendered {path}").format(path=out_path))
        written.append(out_path)

    return written
