"""Load, save and reset the active settings document."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional

from loguru import logger

from .atomic import atomic_write_json
from .location import LocationManager, default_config_dir
from .settings import GuiSettings, SettingsError, parse_lenient


@dataclass(slots=True)
class LoadResult:
    """Outcome of loading the active document."""

    settings: GuiSettings
    path: Path
    from_disk: bool = False
    diagnostics: List[str] = field(default_factory=list)


class SettingsStore:
    """Single authoritative reader/writer of the active settings file.

    Concurrent ``save`` calls are not serialized: the last successful write wins.
    """

    def __init__(self, config_dir: Optional[Path] = None) -> None:
        self._config_dir = Path(config_dir) if config_dir else default_config_dir()
        self._locations = LocationManager(self._config_dir)

    @property
    def config_dir(self) -> Path:
        return self._config_dir

    def locate(self) -> Path:
        return self._locations.load()

    def exists(self) -> bool:
        return self.locate().is_file()

    def load(self) -> GuiSettings:
        return self.load_with_diagnostics().settings

    def load_with_diagnostics(self) -> LoadResult:
        """Read the active document without ever failing.

        Missing file: defaults. Unreadable or malformed file: defaults plus a
        diagnostic. Invalid individual fields: those fields default.
        """

        diagnostics: List[str] = []
        try:
            path = self.locate()
        except SettingsError as exc:
            path = self._locations.default_settings_path
            message = f"Cannot record settings location: {exc}"
            logger.warning(message)
            diagnostics.append(message)

        if not path.exists():
            logger.debug("No settings at {}; using defaults", path)
            return LoadResult(GuiSettings(), path, diagnostics=diagnostics)

        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            message = f"Cannot read settings file {path}: {exc}"
            logger.warning(message)
            return LoadResult(GuiSettings(), path, diagnostics=diagnostics + [message])
        except ValueError as exc:
            message = f"Invalid JSON in settings file {path}: {exc}; using defaults"
            logger.warning(message)
            return LoadResult(GuiSettings(), path, diagnostics=diagnostics + [message])

        if not isinstance(data, dict):
            message = f"Settings file {path} must contain a JSON object; using defaults"
            logger.warning(message)
            return LoadResult(GuiSettings(), path, diagnostics=diagnostics + [message])

        settings, problems = parse_lenient(data)
        for problem in problems:
            message = f"{path.name}: {problem}"
            logger.warning(message)
            diagnostics.append(message)
        logger.info("Loaded settings from {}", path)
        return LoadResult(settings, path, from_disk=True, diagnostics=diagnostics)

    def save(self, settings: GuiSettings) -> Path:
        path = self.locate()
        atomic_write_json(path, settings.to_document())
        logger.info("Saved settings to {}", path)
        return path

    def reset_to_defaults(self) -> GuiSettings:
        settings = GuiSettings()
        self.save(settings)
        return settings

    def reset_location(self) -> Path:
        """Point at the platform default location; content elsewhere is untouched."""

        path = self._locations.reset()
        logger.info("Settings location reset to {}", path)
        return path

    def set_location(self, path: Path) -> None:
        self._locations.save(path)


__all__ = ["LoadResult", "SettingsStore"]
