"""File I/O operations for rendering."""

from __future__ import annotations

import logging
import os
import tempfile
from pathlib import Path

from ..core.models import BuildProject

logger = logging.getLogger(__name__)

GENERATED_SOURCES_DIR = "generated-sources"


def ensure_parent(path: Path) -> None:
    """Ensure parent directories exist for the given path.

    Args:
        path: Path whose parent directories should be created
    """
    path.parent.mkdir(parents=True, exist_ok=True)


def atomic_write_text(path: Path, text: str, mode: int = 0o644) -> None:
    """Write text to a file atomically using a temporary file.

    Args:
        path: Destination file path
        text: Text content to write
        mode: File permissions (octal)
    """
    ensure_parent(path)

    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", dir=str(path.parent))
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as tmp:
            tmp.write(text)
            tmp.flush()
            os.fsync(tmp.fileno())
        os.replace(tmp_name, path)
        os.chmod(path, mode)
    finally:
        if os.path.exists(tmp_name):
            os.remove(tmp_name)


def register_compile_source_root(path: Path, project: BuildProject) -> Path | None:
    """Register the generated-sources root holding a generated Python module.

    ``.../generated-sources/<name>/pkg/mod.py`` registers
    ``.../generated-sources/<name>``.

    Returns:
        The registered root, or None when ``path`` is not a generated module
    """
    if path.suffix != ".py" or GENERATED_SOURCES_DIR not in path.parts[:-1]:
        return None

    index = path.parts.index(GENERATED_SOURCES_DIR)
    if index + 1 >= len(path.parts) - 1:
        return None
    source_root = Path(*path.parts[: index + 2])

    if source_root not in project.compile_source_roots:
        logger.info(f"Adding compile source root: {source_root}")
        project.compile_source_roots.append(source_root)
    return source_root
