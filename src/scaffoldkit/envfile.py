"""Per-package ``.env`` file helpers."""

from __future__ import annotations

import logging
import shutil
from collections.abc import Mapping
from pathlib import Path

from dotenv import dotenv_values, set_key

logger = logging.getLogger(__name__)


def copy_example(package_dir: str | Path) -> Path:
    """Create ``.env`` from ``.env.example`` in a package directory."""
    package_dir = Path(package_dir)
    target = package_dir / ".env"
    shutil.copyfile(package_dir / ".env.example", target)
    return target


def read_dotenv(path: str | Path) -> dict[str, str | None]:
    return dict(dotenv_values(path))


def extend_dotenv(path: str | Path, values: Mapping[str, str]) -> None:
    """Merge ``values`` into an existing ``.env`` file.

    Existing keys not in ``values`` are kept; keys in ``values`` are
    overwritten or appended.
    """
    path = Path(path)
    if not path.is_file():
        raise FileNotFoundError(f"Env file not found: {path}")

    for key, value in values.items():
        set_key(path, key, value, quote_mode="auto")
    logger.debug(f"Extended {path} with {sorted(values)}")
