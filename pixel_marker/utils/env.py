import logging
from gettext import gettext as _
from typing import Mapping

from easydict import EasyDict as edict

logger = logging.getLogger(__name__)

ENV_PREFIX = "PIXEL_MARKER_"


def _cast_like(current, value):
    if isinstance(value, str) and current is not None:
        if isinstance(current, bool):
            return value.strip().lower() in ("1", "true", "yes", "on")
        if isinstance(current, (int, float)):
            return type(current)(value)
    return value


def load_cfg_from_env(cfg: edict, env: Mapping[str, str]):
    for k, v in env.items():
        if k.startswith(ENV_PREFIX):
            cfgkey = k[len(ENV_PREFIX):].lower().replace("__", ".")
            logger.warning(
                _(
                    "Changing configuration entry from environment variable: {k}={v}"
                ).format(
                    k=cfgkey, v=v
                )  # noqa:E501
            )  # noqa: E501
            *parts, last = cfgkey.split(".")
            this_cfg = cfg
            for part in parts:
                if this_cfg.get(part) is None:
                    this_cfg[part] = edict()
                this_cfg = this_cfg[part]
            this_cfg[last] = _cast_like(this_cfg.get(last), v)
    return cfg
