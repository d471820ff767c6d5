"""Import and export settings documents to arbitrary files."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict

from loguru import logger

from .atomic import atomic_write_json
from .settings import (
    GuiSettings,
    NotFoundError,
    ParseError,
    SettingsIOError,
    settings_schema,
)
from .store import SettingsStore


def read_settings_file(path: Path) -> GuiSettings:
    """Parse and validate a settings file without touching any other state."""

    path = Path(path)
    if not path.is_file():
        raise NotFoundError(f"Settings file not found: {path}")
    try:
        text = path.read_text(encoding="utf-8")
    except OSError as exc:
        raise SettingsIOError(f"Cannot read settings file {path}: {exc}") from exc
    except UnicodeDecodeError as exc:
        raise ParseError(f"Settings file {path} is not UTF-8 text: {exc}") from exc
    try:
        data = json.loads(text)
    except ValueError as exc:
        raise ParseError(f"Invalid JSON in {path}: {exc}") from exc
    return GuiSettings.from_document(data)


class SettingsGateway:
    """Validated one-shot transfer between a document and a file."""

    def __init__(self, store: SettingsStore) -> None:
        self._store = store

    def import_from(self, path: Path) -> GuiSettings:
        """Return the validated document stored at ``path``.

        The active location only has its bookkeeping refreshed when ``path`` is
        the active location; importing never moves the location.
        """

        path = Path(path)
        settings = read_settings_file(path)
        active = self._store.locate()
        if _same_file(path, active):
            self._store.set_location(active)
        logger.info("Imported settings from {}", path)
        return settings

    def export_to(self, settings: GuiSettings, path: Path) -> Path:
        """Write a full snapshot of ``settings`` to ``path``."""

        path = Path(path)
        atomic_write_json(path, settings.to_document())
        logger.info("Exported settings to {}", path)
        return path

    def schema(self) -> Dict[str, Any]:
        return settings_schema()


def _same_file(left: Path, right: Path) -> bool:
    try:
        return left.resolve() == right.resolve()
    except OSError:
        return False


__all__ = ["SettingsGateway", "read_settings_file"]
