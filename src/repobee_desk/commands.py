"""The command surface between the UI and the settings/provisioning backend.

Every operation the UI may invoke is a method on :class:`CommandSurface`.
:class:`LocalBackend` implements it over the settings stores and two pluggable
collaborators: an :class:`LmsClient` and a :class:`HostingClient`. Network
clients are not part of this package; without them the backend answers with
unsuccessful results instead of failing.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional, Protocol

import yaml
from loguru import logger

from .models import HostConfig, LmsFilesRequest, OperationResult, StudentTeam
from .profiles import ProfileStore
from .settings import DirectoryLayout, GuiSettings, LmsType
from .store import LoadResult, SettingsStore
from .transfer import SettingsGateway

ProgressCallback = Callable[[str], None]


class ExternalOperationFailure(Exception):
    """Raised by callers that want an unsuccessful result as an exception."""

    def __init__(self, result: OperationResult) -> None:
        super().__init__(result.message)
        self.result = result


def require_success(result: OperationResult) -> OperationResult:
    """Return ``result`` or raise :class:`ExternalOperationFailure` if it failed."""

    if not result.success:
        raise ExternalOperationFailure(result)
    return result


class CommandSurface(Protocol):
    """Closed set of operations the UI layer consumes."""

    def locate_path(self) -> Path: ...

    def exists(self) -> bool: ...

    def load(self) -> GuiSettings: ...

    def load_with_diagnostics(self) -> LoadResult: ...

    def save(self, settings: GuiSettings) -> None: ...

    def list_profiles(self) -> List[str]: ...

    def get_active_profile(self) -> Optional[str]: ...

    def load_profile(self, name: str) -> GuiSettings: ...

    def save_profile(self, name: str, settings: GuiSettings) -> None: ...

    def delete_profile(self, name: str) -> None: ...

    def import_settings(self, path: Path) -> GuiSettings: ...

    def export_settings(self, settings: GuiSettings, path: Path) -> None: ...

    def reset_settings(self) -> GuiSettings: ...

    def reset_settings_location(self) -> Path: ...

    def get_schema(self) -> Dict[str, Any]: ...

    def verify_host_config(self, host: HostConfig) -> OperationResult: ...

    def verify_lms_course(self, url: str, token: str, course_id: str, lms_type: LmsType) -> OperationResult: ...

    def generate_lms_files(
        self, request: LmsFilesRequest, progress: Optional[ProgressCallback] = None
    ) -> OperationResult: ...

    def setup_repos(self, host: HostConfig, roster_path: Path, assignments: str) -> OperationResult: ...

    def clone_repos(
        self,
        host: HostConfig,
        roster_path: Path,
        assignments: str,
        target_folder: Optional[Path],
        layout: DirectoryLayout,
    ) -> OperationResult: ...


class LmsClient(Protocol):
    """Network client for an LMS course."""

    def verify_course(self, lms_type: LmsType, base_url: str, token: str, course_id: str) -> OperationResult: ...

    def generate_files(self, request: LmsFilesRequest, progress: ProgressCallback) -> OperationResult: ...


class HostingClient(Protocol):
    """Network client for a Git hosting platform."""

    def verify(self, host: HostConfig, platform: str) -> OperationResult: ...

    def create_repos(
        self, host: HostConfig, platform: str, teams: List[StudentTeam], template_urls: List[str]
    ) -> OperationResult: ...

    def clone_repos(
        self,
        host: HostConfig,
        platform: str,
        teams: List[StudentTeam],
        assignments: List[str],
        target_folder: Path,
        layout: DirectoryLayout,
    ) -> OperationResult: ...


class UnconfiguredLmsClient:
    """Placeholder used when no LMS client has been installed."""

    def verify_course(self, lms_type: LmsType, base_url: str, token: str, course_id: str) -> OperationResult:
        return OperationResult.failure(f"No {lms_type.value} client is configured")

    def generate_files(self, request: LmsFilesRequest, progress: ProgressCallback) -> OperationResult:
        return OperationResult.failure(f"No {request.lms_type.value} client is configured")


class UnconfiguredHostingClient:
    """Placeholder used when no hosting client has been installed."""

    def verify(self, host: HostConfig, platform: str) -> OperationResult:
        return OperationResult.failure(f"No {platform} hosting client is configured")

    def create_repos(
        self, host: HostConfig, platform: str, teams: List[StudentTeam], template_urls: List[str]
    ) -> OperationResult:
        return OperationResult.failure(f"No {platform} hosting client is configured")

    def clone_repos(
        self,
        host: HostConfig,
        platform: str,
        teams: List[StudentTeam],
        assignments: List[str],
        target_folder: Path,
        layout: DirectoryLayout,
    ) -> OperationResult:
        return OperationResult.failure(f"No {platform} hosting client is configured")


def parse_assignments(text: str) -> List[str]:
    return [item.strip() for item in (text or "").split(",") if item.strip()]


def detect_platform(base_url: str) -> Optional[str]:
    """Guess the hosting platform from its base URL."""

    if base_url.startswith("/") or "local" in base_url:
        return "local"
    for name in ("github", "gitlab", "gitea"):
        if name in base_url:
            return name
    return None


def template_urls(host: HostConfig, assignments: List[str]) -> List[str]:
    """Locations of the template repository for each assignment."""

    urls = []
    for assignment in assignments:
        if not host.template_group:
            urls.append(f"{host.base_url}/{host.student_repos_group}/{assignment}")
        elif host.template_group.startswith("/"):
            urls.append(f"{host.template_group}/{assignment}")
        else:
            urls.append(f"{host.base_url}/{host.template_group}/{assignment}")
    return urls


class RosterError(Exception):
    """Raised when a roster file cannot be used."""


def load_roster(path: Path) -> List[StudentTeam]:
    """Read student teams from a roster YAML file.

    The file holds a list of teams, each either a mapping with ``members`` (and
    an optional ``name``) or a plain list of member identifiers.
    """

    path = Path(path)
    try:
        data = yaml.safe_load(path.read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise RosterError(f"Roster file not found: {path}") from exc
    except OSError as exc:
        raise RosterError(f"Cannot read roster file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise RosterError(f"Failed to parse roster YAML: {exc}") from exc

    if not isinstance(data, list):
        raise RosterError(f"Roster file {path} must contain a list of teams")

    teams: List[StudentTeam] = []
    for index, entry in enumerate(data, start=1):
        if isinstance(entry, dict):
            members = entry.get("members")
            name = entry.get("name")
        else:
            members, name = entry, None
        if not isinstance(members, list) or not members:
            raise RosterError(f"Team #{index} in {path} has no members")
        teams.append(StudentTeam(members=[str(member) for member in members], name=str(name) if name else None))
    return teams


class LocalBackend:
    """In-process implementation of :class:`CommandSurface`."""

    def __init__(
        self,
        store: SettingsStore | None = None,
        profiles: ProfileStore | None = None,
        *,
        lms_client: LmsClient | None = None,
        hosting_client: HostingClient | None = None,
    ) -> None:
        self.store = store or SettingsStore()
        self.profiles = profiles or ProfileStore(self.store.config_dir)
        self.gateway = SettingsGateway(self.store)
        self._lms = lms_client or UnconfiguredLmsClient()
        self._hosting = hosting_client or UnconfiguredHostingClient()

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------
    def locate_path(self) -> Path:
        return self.store.locate()

    def exists(self) -> bool:
        return self.store.exists()

    def load(self) -> GuiSettings:
        return self.store.load()

    def load_with_diagnostics(self) -> LoadResult:
        return self.store.load_with_diagnostics()

    def save(self, settings: GuiSettings) -> None:
        self.store.save(settings)

    def list_profiles(self) -> List[str]:
        return self.profiles.list()

    def get_active_profile(self) -> Optional[str]:
        return self.profiles.get_active()

    def load_profile(self, name: str) -> GuiSettings:
        return self.profiles.load(name)

    def save_profile(self, name: str, settings: GuiSettings) -> None:
        self.profiles.save(name, settings)

    def delete_profile(self, name: str) -> None:
        self.profiles.delete(name)

    def import_settings(self, path: Path) -> GuiSettings:
        return self.gateway.import_from(path)

    def export_settings(self, settings: GuiSettings, path: Path) -> None:
        self.gateway.export_to(settings, path)

    def reset_settings(self) -> GuiSettings:
        return self.store.reset_to_defaults()

    def reset_settings_location(self) -> Path:
        return self.store.reset_location()

    def get_schema(self) -> Dict[str, Any]:
        return self.gateway.schema()

    # ------------------------------------------------------------------
    # External operations
    # ------------------------------------------------------------------
    def verify_host_config(self, host: HostConfig) -> OperationResult:
        platform = detect_platform(host.base_url)
        if platform is None:
            return OperationResult.failure(
                "Unknown platform. URL must contain 'github', 'gitlab', 'gitea', or be a filesystem path"
            )
        return self._call("Verification", self._hosting.verify, host, platform)

    def verify_lms_course(self, url: str, token: str, course_id: str, lms_type: LmsType) -> OperationResult:
        try:
            lms_type = LmsType(lms_type)
        except ValueError:
            supported = ", ".join(item.value for item in LmsType)
            return OperationResult.failure(f"Unknown LMS type: {lms_type}. Supported: {supported}")
        if not str(course_id).strip().isdigit():
            return OperationResult.failure(f"Invalid course ID: {course_id!r}")
        if not url:
            return OperationResult.failure("No LMS URL configured")
        return self._call("Course verification", self._lms.verify_course, lms_type, url, token, str(course_id).strip())

    def generate_lms_files(
        self, request: LmsFilesRequest, progress: Optional[ProgressCallback] = None
    ) -> OperationResult:
        if not request.outputs:
            return OperationResult.failure("No output format selected")
        if not str(request.course_id).strip().isdigit():
            return OperationResult.failure(f"Invalid course ID: {request.course_id!r}")
        emit = progress or (lambda message: logger.debug(message))
        return self._call("File generation", self._lms.generate_files, request, emit)

    def setup_repos(self, host: HostConfig, roster_path: Path, assignments: str) -> OperationResult:
        prepared = self._prepare_repo_operation(host, roster_path, assignments)
        if isinstance(prepared, OperationResult):
            return prepared
        platform, teams, names = prepared
        urls = template_urls(host, names)
        logger.info("Creating repositories for {} team(s) from {} template(s)", len(teams), len(urls))
        return self._call("Setup", self._hosting.create_repos, host, platform, teams, urls)

    def clone_repos(
        self,
        host: HostConfig,
        roster_path: Path,
        assignments: str,
        target_folder: Optional[Path],
        layout: DirectoryLayout,
    ) -> OperationResult:
        if target_folder is None or not str(target_folder).strip():
            return OperationResult.failure("No target folder specified")
        try:
            layout = DirectoryLayout(layout)
        except ValueError:
            return OperationResult.failure(f"Unknown directory layout: {layout}")
        prepared = self._prepare_repo_operation(host, roster_path, assignments)
        if isinstance(prepared, OperationResult):
            return prepared
        platform, teams, names = prepared
        return self._call(
            "Clone", self._hosting.clone_repos, host, platform, teams, names, Path(target_folder), layout
        )

    def _prepare_repo_operation(self, host: HostConfig, roster_path: Path, assignments: str):
        platform = detect_platform(host.base_url)
        if platform is None:
            return OperationResult.failure(
                "Unknown platform. URL must contain 'github', 'gitlab', 'gitea', or be a filesystem path"
            )
        names = parse_assignments(assignments)
        if not names:
            return OperationResult.failure("No assignments specified")
        try:
            teams = load_roster(Path(roster_path))
        except RosterError as exc:
            return OperationResult.failure(str(exc))
        return platform, teams, names

    @staticmethod
    def _call(label: str, func, *args) -> OperationResult:
        try:
            result = func(*args)
        except Exception as exc:  # collaborator failures surface as results
            logger.exception("{} failed", label)
            return OperationResult.failure(f"{label} failed: {exc}")
        if not result.success:
            logger.info("{} unsuccessful: {}", label, result.message)
        return result


__all__ = [
    "CommandSurface",
    "ExternalOperationFailure",
    "HostingClient",
    "LmsClient",
    "LocalBackend",
    "RosterError",
    "UnconfiguredHostingClient",
    "UnconfiguredLmsClient",
    "detect_platform",
    "load_roster",
    "parse_assignments",
    "require_success",
    "template_urls",
]
