"""
aggregate-planner - filesystem utilities

File: src/aggregate_planner/utils/fs.py

Purpose
- Write hand-off files so a reader never observes a partially written batch.

Functional requirements
- Atomic writes use temp files in the destination directory and replace in a single step.
"""

from __future__ import annotations

import contextlib
import os
import tempfile
from pathlib import Path

PathLike = str | os.PathLike[str]

__all__ = ["atomic_write"]


def atomic_write(path: PathLike, data: str, *, encoding: str = "utf-8") -> None:
    """
    Atomically write ``data`` to ``path``.

    The temp file lives next to the target, is flushed and fsynced, then
    moved over the target with ``os.replace``.
    """

    target = Path(path)
    target_parent = target.parent.resolve(strict=True)
    if not target_parent.is_dir():
        raise NotADirectoryError(f"{target_parent!s} is not a directory")

    fd, temp_name = tempfile.mkstemp(
        prefix=f".{target.name}.",
        suffix=".tmp",
        dir=str(target_parent),
    )
    temp_path = Path(temp_name)

    try:
        with os.fdopen(fd, "w", encoding=encoding) as file_handle:
            file_handle.write(data)
            file_handle.flush()
            os.fsync(file_handle.fileno())
        os.replace(temp_path, target)
    except Exception:
        with contextlib.suppress(OSError):
            temp_path.unlink(missing_ok=True)
        raise
