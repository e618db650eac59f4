# assetdir/files.py
"""
Directory enumeration and file writes.

Ordering contract: ``list_files`` returns paths sorted by their position
relative to the root (POSIX form, case-sensitive). Duplicate resolution
during reload is "last file in this order wins", so the same tree always
loads the same way.
"""

import logging
import os
from pathlib import Path
from typing import List

logger = logging.getLogger(__name__)


def normalize_suffix(suffix: str) -> str:
    """Return ``suffix`` with a leading dot (``yml`` -> ``.yml``)."""
    suffix = suffix.strip()
    if not suffix:
        raise ValueError("suffix cannot be empty")
    return suffix if suffix.startswith(".") else f".{suffix}"


def list_files(root: Path | str, suffix: str) -> List[Path]:
    """
    List regular files under ``root`` whose name ends with ``suffix``.

    Recurses into subdirectories. A missing root is created and yields an
    empty list.

    Args:
        root: Directory to scan
        suffix: File suffix including the dot, e.g. ".yml"

    Returns:
        Paths in deterministic order (see module docstring)
    """
    root = Path(root)
    if not root.exists():
        root.mkdir(parents=True, exist_ok=True)
        logger.debug(f"Created missing directory {root}")
        return []

    files = [
        path for path in root.rglob(f"*{suffix}")
        if path.is_file() and path.name.endswith(suffix)
    ]
    files.sort(key=lambda p: p.relative_to(root).as_posix())
    return files


def identifier_from_path(path: Path, suffix: str) -> str:
    """File name with ``suffix`` stripped (``npc1.yml`` -> ``npc1``)."""
    name = Path(path).name
    if suffix and name.endswith(suffix):
        return name[: -len(suffix)]
    return name


def write_file(path: Path, data: bytes) -> None:
    """
    Write ``data`` to ``path``, replacing any existing file.

    Goes through a sibling temp file; a failed write leaves any existing
    file untouched.
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    tmp_path = path.with_name(f".{path.name}.tmp")
    try:
        with open(tmp_path, "wb") as f:
            f.write(data)
        os.replace(tmp_path, path)
    finally:
        if tmp_path.exists():
            tmp_path.unlink()
