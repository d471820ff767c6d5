from __future__ import annotations

from pathlib import Path
from typing import List

import pytest
import yaml

from repobee_desk.commands import LocalBackend
from repobee_desk.location import CONFIG_DIR_ENV
from repobee_desk.models import HostConfig, LmsFilesRequest, OperationResult, StudentTeam
from repobee_desk.profiles import ProfileStore
from repobee_desk.store import SettingsStore


class FakeLmsClient:
    """Records calls and replays scripted progress messages."""

    def __init__(self) -> None:
        self.calls: List[tuple] = []
        self.progress_messages: List[str] = []
        self.result = OperationResult(True, "✓ Files generated", "students.yaml")
        self.error: Exception | None = None

    def verify_course(self, lms_type, base_url: str, token: str, course_id: str) -> OperationResult:
        self.calls.append(("verify_course", lms_type, base_url, token, course_id))
        return OperationResult(True, "✓ Course verified: Intro to Programming")

    def generate_files(self, request: LmsFilesRequest, progress) -> OperationResult:
        self.calls.append(("generate_files", request))
        if self.error is not None:
            raise self.error
        for message in self.progress_messages:
            progress(message)
        return self.result


class FakeHostingClient:
    def __init__(self) -> None:
        self.calls: List[tuple] = []

    def verify(self, host: HostConfig, platform: str) -> OperationResult:
        self.calls.append(("verify", host, platform))
        return OperationResult(True, f"✓ Connected to {platform}")

    def create_repos(self, host, platform, teams: List[StudentTeam], template_urls: List[str]) -> OperationResult:
        self.calls.append(("create_repos", platform, teams, template_urls))
        return OperationResult(True, f"✓ Created {len(teams)} repositories")

    def clone_repos(self, host, platform, teams, assignments, target_folder, layout) -> OperationResult:
        self.calls.append(("clone_repos", platform, teams, assignments, target_folder, layout))
        return OperationResult(True, "✓ Cloned repositories")


@pytest.fixture()
def config_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    path = tmp_path / "config"
    monkeypatch.setenv(CONFIG_DIR_ENV, str(path))
    return path


@pytest.fixture()
def store(config_dir: Path) -> SettingsStore:
    return SettingsStore(config_dir)


@pytest.fixture()
def profiles(config_dir: Path) -> ProfileStore:
    return ProfileStore(config_dir)


@pytest.fixture()
def lms_client() -> FakeLmsClient:
    return FakeLmsClient()


@pytest.fixture()
def hosting_client() -> FakeHostingClient:
    return FakeHostingClient()


@pytest.fixture()
def backend(store, profiles, lms_client, hosting_client) -> LocalBackend:
    return LocalBackend(store, profiles, lms_client=lms_client, hosting_client=hosting_client)


@pytest.fixture()
def roster_file(tmp_path: Path) -> Path:
    path = tmp_path / "students.yaml"
    teams = [
        {"name": "team-1", "members": ["alice", "bob"]},
        ["carol"],
    ]
    path.write_text(yaml.safe_dump(teams), encoding="utf-8")
    return path
