"""Where the active settings document lives on disk."""

from __future__ import annotations

import json
import os
from pathlib import Path

from loguru import logger
from platformdirs import user_config_dir

from .atomic import atomic_write_json

APP_NAME = "repobee-desk"
SETTINGS_FILE_NAME = "repobee.json"
LOCATION_FILE_NAME = "location.json"
CONFIG_DIR_ENV = "REPOBEE_DESK_CONFIG_DIR"


def default_config_dir() -> Path:
    """Per-user configuration directory, overridable through the environment."""

    override = os.environ.get(CONFIG_DIR_ENV)
    if override:
        return Path(override).expanduser()
    return Path(user_config_dir(APP_NAME, appauthor=False))


class LocationManager:
    """Persist the pointer to the active settings file.

    The pointer is a small JSON document (``location.json``) in the config
    directory. It is independent of the profile store.
    """

    def __init__(self, config_dir: Path) -> None:
        self._config_dir = Path(config_dir)
        self._pointer = self._config_dir / LOCATION_FILE_NAME

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    @property
    def default_settings_path(self) -> Path:
        return self._config_dir / SETTINGS_FILE_NAME

    def load(self) -> Path:
        """Return the current settings path, persisting the default on first use."""

        if self._pointer.exists():
            try:
                data = json.loads(self._pointer.read_text(encoding="utf-8"))
                value = data.get("settings_path") if isinstance(data, dict) else None
            except (OSError, ValueError) as exc:
                logger.warning("Ignoring unreadable location file {}: {}", self._pointer, exc)
                value = None
            if isinstance(value, str) and value.strip():
                return Path(value)
        return self.reset()

    def save(self, path: Path) -> None:
        atomic_write_json(self._pointer, {"settings_path": str(Path(path))})
        logger.debug("Settings location set to {}", path)

    def reset(self) -> Path:
        """Point back at the platform default and return it."""

        path = self.default_settings_path
        self.save(path)
        return path


__all__ = [
    "APP_NAME",
    "CONFIG_DIR_ENV",
    "LOCATION_FILE_NAME",
    "LocationManager",
    "SETTINGS_FILE_NAME",
    "default_config_dir",
]
