"""Crash-safe file writes: write to a sibling temp file, then replace."""

from __future__ import annotations

import json
import os
import tempfile
from pathlib import Path
from typing import Any

from .settings import SettingsIOError


def atomic_write_text(path: Path, text: str) -> None:
    """Replace ``path`` with ``text`` in a single rename.

    Readers observe either the previous content or the new content, never a
    partially written file.
    """

    path = Path(path)
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    except OSError as exc:
        raise SettingsIOError(f"Cannot write {path}: {exc}") from exc

    temp_path = Path(temp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8", newline="\n") as handle:
            handle.write(text)
            handle.flush()
            os.fsync(handle.fileno())
        os.replace(temp_path, path)
    except OSError as exc:
        temp_path.unlink(missing_ok=True)
        raise SettingsIOError(f"Cannot write {path}: {exc}") from exc


def atomic_write_json(path: Path, data: Any) -> None:
    """Pretty-print ``data`` as JSON and write it atomically."""

    atomic_write_text(path, json.dumps(data, indent=2, ensure_ascii=False) + "\n")


__all__ = ["atomic_write_json", "atomic_write_text"]
