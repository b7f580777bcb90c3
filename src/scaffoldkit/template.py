"""Project template operations.

Copies the starter template, renders mustache variables in place across
every text file, and prefixes package directories with the project hid.
"""

from __future__ import annotations

import logging
import shutil
from collections.abc import Iterable, Mapping
from importlib import resources
from pathlib import Path
from typing import Any

import chevron

logger = logging.getLogger(__name__)

# Bytes inspected when deciding whether a file is binary
BINARY_SNIFF_BYTES = 8192


def default_template_dir() -> Path:
    """Path of the starter template shipped with the package."""
    return Path(str(resources.files("scaffoldkit") / "resources" / "template"))


def read_resource(name: str) -> str:
    """Read a text resource shipped with the package."""
    return (resources.files("scaffoldkit") / "resources" / name).read_text(encoding="utf-8")


def copy_tree(src: str | Path, dest: str | Path) -> None:
    """Copy a template tree to ``dest`` (which may already exist)."""
    src = Path(src)
    if not src.is_dir():
        raise FileNotFoundError(f"Template directory not found: {src}")
    shutil.copytree(src, dest, dirs_exist_ok=True)


def is_binary(path: Path) -> bool:
    """Heuristic: a NUL byte, or bytes that aren't UTF-8, mark a binary file."""
    with open(path, "rb") as f:
        chunk = f.read(BINARY_SNIFF_BYTES)
    if b"\x00" in chunk:
        return True
    try:
        chunk.decode("utf-8")
    except UnicodeDecodeError as e:
        # A multi-byte character cut at the sniff boundary is still text
        return len(chunk) < BINARY_SNIFF_BYTES or e.start < len(chunk) - 3
    return False


def render_string(template: str, variables: Mapping[str, Any]) -> str:
    return chevron.render(template, dict(variables))


def render_directory(directory: str | Path, variables: Mapping[str, Any]) -> list[Path]:
    """Render mustache variables into every non-binary file, in place.

    Returns:
        The files that were rewritten.
    """
    rendered: list[Path] = []
    for path in sorted(Path(directory).rglob("*")):
        if not path.is_file() or is_binary(path):
            continue
        try:
            content = path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            # Undecodable past the sniffed head
            logger.debug(f"Skipping binary file {path}")
            continue
        path.write_text(render_string(content, variables), encoding="utf-8")
        rendered.append(path)

    logger.debug(f"Rendered {len(rendered)} template file(s) in {directory}")
    return rendered


def move_packages(dest: str | Path, packages: Iterable[str], prefix: str) -> None:
    """Rename ``packages/<name>`` to ``packages/<prefix>-<name>``."""
    packages_dir = Path(dest) / "packages"
    for name in packages:
        shutil.move(packages_dir / name, packages_dir / f"{prefix}-{name}")
