"""The in-memory settings document and the actions that replace it.

A :class:`SettingsSession` is created once at startup and is the only owner of
the live document. Every action catches the settings error taxonomy, reports
the outcome as a transcript line and leaves the previous document untouched
when it fails. Replacements are whole-document swaps, so observers never see a
document mixing fields from two sources.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

from .commands import CommandSurface, ProgressCallback
from .models import HostConfig, LmsFilesRequest, OperationResult, resolve_lms_url
from .progress import ProgressCoalescer
from .settings import GuiSettings, SettingsError

SettingsObserver = Callable[[GuiSettings], None]

VERIFY_COURSE = "verify-course"
GENERATE_FILES = "generate-files"
VERIFY_HOST = "verify-host"
SETUP_REPOS = "setup-repos"
CLONE_REPOS = "clone-repos"


@dataclass(slots=True)
class Operation:
    """A long-running command bound to the settings it was started with."""

    title: str
    call: Callable[[ProgressCallback], OperationResult]


class SettingsSession:
    """Authoritative owner of the live settings document."""

    def __init__(
        self,
        backend: CommandSurface,
        *,
        transcript: ProgressCoalescer | None = None,
        initial: GuiSettings | None = None,
    ) -> None:
        self._backend = backend
        self.transcript = transcript or ProgressCoalescer()
        self._observers: List[SettingsObserver] = []
        self._settings = initial if initial is not None else self._initial_settings()
        self._active_profile: Optional[str] = self._safe(backend.get_active_profile, None)

    def _initial_settings(self) -> GuiSettings:
        try:
            result = self._backend.load_with_diagnostics()
        except SettingsError as exc:
            logger.warning("Settings backend error: {}", exc)
            self._say(f"⚠ {exc}")
            return GuiSettings()
        for diagnostic in result.diagnostics:
            self._say(f"⚠ {diagnostic}")
        return result.settings

    @property
    def settings(self) -> GuiSettings:
        return self._settings

    @property
    def active_profile(self) -> Optional[str]:
        return self._active_profile

    def subscribe(self, observer: SettingsObserver) -> None:
        self._observers.append(observer)

    def _replace(self, settings: GuiSettings) -> None:
        self._settings = settings
        for observer in list(self._observers):
            observer(settings)

    def _say(self, message: str) -> None:
        self.transcript.push(message)

    def _fail(self, action: str, exc: Exception) -> bool:
        logger.info("Failed to {}: {}", action, exc)
        self._say(f"✗ Failed to {action}: {exc}")
        return False

    def _safe(self, func: Callable[[], Any], default: Any) -> Any:
        try:
            return func()
        except SettingsError as exc:
            logger.warning("Settings backend error: {}", exc)
            return default

    # ------------------------------------------------------------------
    # Document actions
    # ------------------------------------------------------------------
    def update(self, **changes: Any) -> bool:
        """Apply field edits as one validated replacement."""

        try:
            updated = self._settings.replace(**changes)
        except SettingsError as exc:
            return self._fail("update settings", exc)
        self._replace(updated)
        return True

    def save(self) -> bool:
        try:
            self._backend.save(self._settings)
        except SettingsError as exc:
            return self._fail("save settings", exc)
        self._say(f"✓ Settings saved to: {self._backend.locate_path()}")
        return True

    def settings_path(self) -> Optional[Path]:
        return self._safe(self._backend.locate_path, None)

    def profiles(self) -> List[str]:
        names = self._safe(self._backend.list_profiles, [])
        self._active_profile = self._safe(self._backend.get_active_profile, None)
        return names

    def load_profile(self, name: str) -> bool:
        try:
            settings = self._backend.load_profile(name)
        except SettingsError as exc:
            return self._fail("load profile", exc)
        self._replace(settings)
        self._active_profile = name.strip()
        self._say(f"✓ Loaded profile: {name}")
        return True

    def save_profile(self, name: str) -> bool:
        try:
            self._backend.save_profile(name, self._settings)
        except SettingsError as exc:
            return self._fail("save profile", exc)
        self._say(f"✓ Saved profile: {name.strip()}")
        return True

    def delete_profile(self, name: str) -> bool:
        try:
            self._backend.delete_profile(name)
        except SettingsError as exc:
            return self._fail("delete profile", exc)
        self._active_profile = self._safe(self._backend.get_active_profile, None)
        self._say(f"✓ Deleted profile: {name}")
        return True

    def import_settings(self, path: Path) -> bool:
        try:
            settings = self._backend.import_settings(Path(path))
        except SettingsError as exc:
            return self._fail("import settings", exc)
        self._replace(settings)
        self._say(f"✓ Settings imported from: {path}")
        return True

    def export_settings(self, path: Path) -> bool:
        try:
            self._backend.export_settings(self._settings, Path(path))
        except SettingsError as exc:
            return self._fail("export settings", exc)
        self._say(f"✓ Settings exported to: {path}")
        return True

    def reset_settings(self) -> bool:
        try:
            settings = self._backend.reset_settings()
        except SettingsError as exc:
            return self._fail("reset settings", exc)
        self._replace(settings)
        self._say("✓ Settings reset to defaults")
        return True

    def reset_location(self) -> Optional[Path]:
        try:
            path = self._backend.reset_settings_location()
        except SettingsError as exc:
            self._fail("reset location", exc)
            return None
        self._say(f"✓ Settings location reset to: {path}")
        return path

    def schema(self) -> Optional[Dict[str, Any]]:
        try:
            return self._backend.get_schema()
        except SettingsError as exc:
            self._fail("load schema", exc)
            return None

    # ------------------------------------------------------------------
    # Long-running operations
    # ------------------------------------------------------------------
    def host_config(self) -> HostConfig:
        return HostConfig.from_settings(self._settings.common)

    def lms_files_request(self) -> LmsFilesRequest:
        return LmsFilesRequest.from_settings(self._settings.common)

    def operation(self, kind: str) -> Operation:
        """Bind operation ``kind`` to a snapshot of the current document.

        The returned callable touches only the backend, so it may run on a
        worker thread while the document keeps changing.
        """

        common = self._settings.common
        host = self.host_config()
        backend = self._backend
        if kind == VERIFY_COURSE:
            url, token, course_id, lms_type = (
                resolve_lms_url(common),
                common.lms_access_token,
                common.lms_course_id,
                common.lms_type,
            )
            return Operation(
                "Verifying course...", lambda _progress: backend.verify_lms_course(url, token, course_id, lms_type)
            )
        if kind == GENERATE_FILES:
            request = self.lms_files_request()
            return Operation(
                "Generating student files...", lambda progress: backend.generate_lms_files(request, progress)
            )
        if kind == VERIFY_HOST:
            return Operation("Verifying configuration...", lambda _progress: backend.verify_host_config(host))
        roster, assignments = Path(common.yaml_file), common.assignments
        if kind == SETUP_REPOS:
            return Operation(
                "Creating student repositories...",
                lambda _progress: backend.setup_repos(host, roster, assignments),
            )
        if kind == CLONE_REPOS:
            target = Path(common.target_folder) if common.target_folder.strip() else None
            layout = common.directory_layout
            return Operation(
                "Cloning repositories...",
                lambda _progress: backend.clone_repos(host, roster, assignments, target, layout),
            )
        raise ValueError(f"Unknown operation: {kind}")

    def begin_operation(self, title: str) -> None:
        self._say(title)

    def push_progress(self, message: str) -> None:
        self.transcript.push(message)

    def finish_operation(self, result: OperationResult) -> None:
        self.transcript.finish(result)

    def run_operation(self, title: str, call: Callable[[ProgressCallback], OperationResult]) -> OperationResult:
        """Run ``call`` synchronously, streaming its messages to the transcript."""

        self.begin_operation(title)
        try:
            result = call(self.push_progress)
        except Exception as exc:
            logger.exception("{} failed", title)
            result = OperationResult.failure(f"✗ Error: {exc}")
        self.finish_operation(result)
        return result

    def execute(self, kind: str) -> OperationResult:
        operation = self.operation(kind)
        return self.run_operation(operation.title, operation.call)

    def verify_lms_course(self) -> OperationResult:
        return self.execute(VERIFY_COURSE)

    def generate_lms_files(self) -> OperationResult:
        return self.execute(GENERATE_FILES)

    def verify_host_config(self) -> OperationResult:
        return self.execute(VERIFY_HOST)

    def setup_repos(self) -> OperationResult:
        return self.execute(SETUP_REPOS)

    def clone_repos(self) -> OperationResult:
        return self.execute(CLONE_REPOS)

    def clear_transcript(self) -> None:
        self.transcript.clear()


__all__ = [
    "CLONE_REPOS",
    "GENERATE_FILES",
    "Operation",
    "SETUP_REPOS",
    "SettingsObserver",
    "SettingsSession",
    "VERIFY_COURSE",
    "VERIFY_HOST",
]
