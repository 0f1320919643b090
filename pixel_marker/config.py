import os
from typing import Mapping, Optional

from easydict import EasyDict as edict

from pixel_marker.utils.env import load_cfg_from_env

PALETTE = [
    "#2563EB",
    "#DC2626",
    "#16A34A",
    "#CA8A04",
    "#9333EA",
    "#EA580C",
    "#0891B2",
    "#BE185D",
    "#000000",
    "#6B7280",
]


def get_default_config() -> edict:
    cfg = edict()

    cfg.upload = edict()
    cfg.upload.max_bytes = 10 * 1024 * 1024

    cfg.canvas = edict()
    cfg.canvas.width = 960
    cfg.canvas.height = 640
    cfg.canvas.background = "#FFFFFF"

    cfg.marker = edict()
    cfg.marker.radius = 6
    cfg.marker.color = "#2563EB"
    cfg.marker.border_color = "#FFFFFF"
    cfg.marker.border_width = 2
    cfg.marker.font_scale = 0.4

    cfg.drawing = edict()
    cfg.drawing.stroke_color = PALETTE[0]
    cfg.drawing.stroke_width = 2
    cfg.drawing.min_stroke_width = 1
    cfg.drawing.max_stroke_width = 10
    cfg.drawing.point_radius = 4
    cfg.drawing.dash_length = 5
    cfg.drawing.gap_length = 5

    cfg.palette = list(PALETTE)

    cfg.history = edict()
    cfg.history.max_size = 100

    return cfg


def load_config(env: Optional[Mapping[str, str]] = None) -> edict:
    """Default configuration with ``PIXEL_MARKER_*`` overrides applied."""
    if env is None:
        env = os.environ
    return load_cfg_from_env(get_default_config(), env)
