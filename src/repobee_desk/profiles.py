"""Named settings snapshots with an active-profile pointer."""

from __future__ import annotations

import hashlib
import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from loguru import logger

from .atomic import atomic_write_json
from .location import default_config_dir
from .settings import GuiSettings, InvalidNameError, NotFoundError, ParseError, SettingsIOError

ACTIVE_FILE_NAME = "active.json"


def _file_stem(name: str) -> str:
    # Hashing keeps names that differ only in case apart on case-insensitive filesystems.
    return hashlib.sha256(name.encode("utf-8")).hexdigest()[:16]


class ProfileStore:
    """Profiles live in ``<config dir>/profiles`` as one JSON file each.

    Each file holds ``{"name": ..., "settings": {...}}``. The active profile is
    recorded in ``active.json``; it is either empty or names a stored profile.
    """

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        base = Path(config_dir) if config_dir else default_config_dir()
        self._directory = base / "profiles"
        self._active_path = self._directory / ACTIVE_FILE_NAME

    @property
    def directory(self) -> Path:
        return self._directory

    def _path_for(self, name: str) -> Path:
        return self._directory / f"{_file_stem(name)}.json"

    def _read(self, path: Path) -> Dict[str, Any]:
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise SettingsIOError(f"Cannot read profile file {path}: {exc}") from exc
        except ValueError as exc:
            raise ParseError(f"Invalid JSON in profile file {path}: {exc}") from exc
        if not isinstance(data, dict) or not isinstance(data.get("name"), str):
            raise ParseError(f"Profile file {path} is missing its name")
        return data

    def _names(self) -> Dict[str, Path]:
        names: Dict[str, Path] = {}
        if not self._directory.is_dir():
            return names
        for path in sorted(self._directory.glob("*.json")):
            if path.name == ACTIVE_FILE_NAME:
                continue
            try:
                names[self._read(path)["name"]] = path
            except (ParseError, SettingsIOError) as exc:
                logger.warning("Skipping unreadable profile: {}", exc)
        return names

    def list(self) -> List[str]:
        return sorted(self._names())

    def get_active(self) -> Optional[str]:
        if not self._active_path.exists():
            return None
        try:
            data = json.loads(self._active_path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            logger.warning("Ignoring unreadable active profile pointer: {}", exc)
            return None
        name = data.get("active") if isinstance(data, dict) else None
        if not isinstance(name, str) or not name:
            return None
        if not self._path_for(name).exists():
            logger.warning("Active profile '{}' no longer exists; clearing", name)
            self._set_active(None)
            return None
        return name

    def _set_active(self, name: Optional[str]) -> None:
        atomic_write_json(self._active_path, {"active": name})

    def load(self, name: str) -> GuiSettings:
        """Return the stored document and mark ``name`` active."""

        name = (name or "").strip()
        path = self._path_for(name)
        if not path.exists():
            raise NotFoundError(f"Profile not found: {name}")
        data = self._read(path)
        if data["name"] != name:
            raise NotFoundError(f"Profile not found: {name}")
        settings = GuiSettings.from_document(data.get("settings") or {})
        self._set_active(name)
        logger.info("Loaded profile '{}'", name)
        return settings

    def save(self, name: str, settings: GuiSettings) -> str:
        """Insert or overwrite a profile; the active profile is left unchanged."""

        cleaned = (name or "").strip()
        if not cleaned:
            raise InvalidNameError("Profile name must not be empty")
        atomic_write_json(self._path_for(cleaned), {"name": cleaned, "settings": settings.to_document()})
        logger.info("Saved profile '{}'", cleaned)
        return cleaned

    def delete(self, name: str) -> None:
        name = (name or "").strip()
        path = self._path_for(name)
        if not path.exists():
            raise NotFoundError(f"Profile not found: {name}")
        was_active = self.get_active() == name
        try:
            path.unlink()
        except OSError as exc:
            raise SettingsIOError(f"Cannot delete profile {name}: {exc}") from exc
        if was_active:
            self._set_active(None)
        logger.info("Deleted profile '{}'", name)


__all__ = ["ProfileStore"]
