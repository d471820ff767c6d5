import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from repobee_desk.cli import app
from repobee_desk.location import SETTINGS_FILE_NAME
from repobee_desk.settings import GuiSettings
from repobee_desk.store import SettingsStore


@pytest.fixture()
def runner() -> CliRunner:
    return CliRunner()


def _invoke(runner: CliRunner, config_dir: Path, *args: str):
    return runner.invoke(app, ["--config-dir", str(config_dir), *args])


def test_path(runner: CliRunner, config_dir: Path) -> None:
    result = _invoke(runner, config_dir, "path")

    assert result.exit_code == 0
    assert result.stdout.strip() == str(config_dir / SETTINGS_FILE_NAME)


def test_set_and_show(runner: CliRunner, config_dir: Path) -> None:
    assert _invoke(runner, config_dir, "set", "git_user", "alice").exit_code == 0
    assert _invoke(runner, config_dir, "set", "lms_output_csv", "true").exit_code == 0

    result = _invoke(runner, config_dir, "show")

    assert result.exit_code == 0
    document = json.loads(result.stdout)
    assert document["git_user"] == "alice"
    assert document["lms_output_csv"] is True


def test_set_rejects_bad_input(runner: CliRunner, config_dir: Path) -> None:
    unknown = _invoke(runner, config_dir, "set", "colour", "blue")
    invalid = _invoke(runner, config_dir, "set", "window_width", "wide")

    assert unknown.exit_code == 1
    assert "Unknown setting" in unknown.stdout
    assert invalid.exit_code == 1
    assert "window_width" in invalid.stdout
    assert not SettingsStore(config_dir).exists()


def test_reset(runner: CliRunner, config_dir: Path) -> None:
    _invoke(runner, config_dir, "set", "git_user", "alice")

    result = _invoke(runner, config_dir, "reset")

    assert result.exit_code == 0
    assert SettingsStore(config_dir).load() == GuiSettings()


def test_schema(runner: CliRunner, config_dir: Path, tmp_path: Path) -> None:
    printed = _invoke(runner, config_dir, "schema")
    assert "lms_base_url" in json.loads(printed.stdout)["properties"]

    out = tmp_path / "schema.json"
    written = _invoke(runner, config_dir, "schema", "--out", str(out))
    assert written.exit_code == 0
    assert json.loads(out.read_text(encoding="utf-8")) == json.loads(printed.stdout)


def test_import_and_export(runner: CliRunner, config_dir: Path, tmp_path: Path) -> None:
    source = tmp_path / "course.json"
    source.write_text(json.dumps({"lms_course_id": "808"}), encoding="utf-8")
    target = tmp_path / "backup" / "course.json"

    assert _invoke(runner, config_dir, "import", str(source)).exit_code == 0
    assert SettingsStore(config_dir).load().common.lms_course_id == "808"

    assert _invoke(runner, config_dir, "export", str(target)).exit_code == 0
    assert json.loads(target.read_text(encoding="utf-8"))["lms_course_id"] == "808"


def test_import_invalid_file(runner: CliRunner, config_dir: Path, tmp_path: Path) -> None:
    source = tmp_path / "bad.json"
    source.write_text(json.dumps({"lms_type": "Blackboard"}), encoding="utf-8")

    result = _invoke(runner, config_dir, "import", str(source))

    assert result.exit_code == 1
    assert "lms_type" in result.stdout
    assert not SettingsStore(config_dir).exists()


def test_profile_commands(runner: CliRunner, config_dir: Path) -> None:
    _invoke(runner, config_dir, "set", "lms_course_id", "1")
    assert _invoke(runner, config_dir, "profile", "save", "Course A").exit_code == 0
    _invoke(runner, config_dir, "set", "lms_course_id", "2")

    assert _invoke(runner, config_dir, "profile", "load", "Course A").exit_code == 0
    assert SettingsStore(config_dir).load().common.lms_course_id == "1"
    assert _invoke(runner, config_dir, "profile", "active").stdout.strip() == "Course A"
    assert _invoke(runner, config_dir, "profile", "list").stdout.splitlines() == ["* Course A"]

    assert _invoke(runner, config_dir, "profile", "delete", "Course A").exit_code == 0
    assert "No active profile" in _invoke(runner, config_dir, "profile", "active").stdout


def test_profile_errors(runner: CliRunner, config_dir: Path) -> None:
    assert _invoke(runner, config_dir, "profile", "save", "   ").exit_code == 1
    missing = _invoke(runner, config_dir, "profile", "load", "ghost")
    assert missing.exit_code == 1
    assert "Profile not found: ghost" in missing.stdout


def test_operations_without_clients_exit_with_two(runner: CliRunner, config_dir: Path) -> None:
    result = _invoke(runner, config_dir, "verify-host")

    assert result.exit_code == 2
    assert "No gitlab hosting client is configured" in result.stdout
