import importlib.util
import logging
import sys
from pathlib import Path
from typing import Iterable, Optional, Tuple

from tqdm import tqdm

logger = logging.getLogger(__name__)


def load_module(script_path, module_name: Optional[str] = None):
    script_path = Path(script_path)
    if module_name is None:
        module_name = script_path.stem
    search_locations = None
    if script_path.name == "__init__.py":
        # load as a package so relative imports inside it resolve
        search_locations = [str(script_path.parent)]
    spec = importlib.util.spec_from_file_location(
        module_name, str(script_path), submodule_search_locations=search_locations
    )
    module = importlib.util.module_from_spec(spec)
    sys.modules[module_name] = module
    spec.loader.exec_module(module)
    return module


def try_tqdm(iterable: Iterable, **kwargs):
    return tqdm(iterable, **kwargs)


def parse_size(value: str) -> Tuple[int, int]:
    """Parse a ``WIDTHxHEIGHT`` string as used by the CLI."""
    try:
        width, height = (int(part) for part in value.lower().split("x"))
    except ValueError:
        raise ValueError(f"Expected WIDTHxHEIGHT, got {value!r}")
    if width <= 0 or height <= 0:
        raise ValueError(f"Size must be positive, got {value!r}")
    return width, height
