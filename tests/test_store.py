import json
from pathlib import Path

from repobee_desk.location import LOCATION_FILE_NAME, SETTINGS_FILE_NAME
from repobee_desk.settings import GuiSettings
from repobee_desk.store import SettingsStore


def test_default_location_is_persisted(store: SettingsStore, config_dir: Path) -> None:
    path = store.locate()

    assert path == config_dir / SETTINGS_FILE_NAME
    pointer = json.loads((config_dir / LOCATION_FILE_NAME).read_text(encoding="utf-8"))
    assert pointer == {"settings_path": str(path)}


def test_environment_selects_config_dir(config_dir: Path) -> None:
    assert SettingsStore().config_dir == config_dir


def test_missing_file_loads_defaults(store: SettingsStore) -> None:
    result = store.load_with_diagnostics()

    assert not store.exists()
    assert result.settings == GuiSettings()
    assert result.from_disk is False
    assert result.diagnostics == []


def test_round_trip(store: SettingsStore, config_dir: Path) -> None:
    settings = GuiSettings().replace(
        lms_course_id="4711",
        lms_type="Moodle",
        lms_custom_url="https://moodle.example.edu",
        assignments="task-1, task-2",
        window_width=1024,
        window_height=700,
        active_tab="repo",
    )

    store.save(settings)

    assert store.exists()
    assert SettingsStore(config_dir).load() == settings


def test_saved_file_is_flat_and_complete(store: SettingsStore) -> None:
    path = store.save(GuiSettings())

    data = json.loads(path.read_text(encoding="utf-8"))
    assert "common" not in data
    assert sorted(data) == sorted(GuiSettings().to_document())
    assert [item.name for item in path.parent.iterdir() if item.suffix == ".tmp"] == []


def test_malformed_json_falls_back_to_defaults(store: SettingsStore) -> None:
    path = store.locate()
    path.write_text("{not json", encoding="utf-8")

    result = store.load_with_diagnostics()

    assert result.settings == GuiSettings()
    assert len(result.diagnostics) == 1
    assert "Invalid JSON" in result.diagnostics[0]
    assert path.read_text(encoding="utf-8") == "{not json"


def test_non_object_json_falls_back_to_defaults(store: SettingsStore) -> None:
    store.locate().write_text("[1, 2, 3]", encoding="utf-8")

    result = store.load_with_diagnostics()

    assert result.settings == GuiSettings()
    assert result.diagnostics


def test_invalid_field_defaults_and_keeps_the_rest(store: SettingsStore) -> None:
    store.locate().write_text(
        json.dumps({"lms_type": "Blackboard", "lms_course_id": "99", "git_user": "teacher"}),
        encoding="utf-8",
    )

    result = store.load_with_diagnostics()

    assert result.from_disk is True
    assert result.settings.common.lms_type.value == "Canvas"
    assert result.settings.common.lms_course_id == "99"
    assert result.settings.common.git_user == "teacher"
    assert len(result.diagnostics) == 1
    assert result.diagnostics[0].startswith(f"{SETTINGS_FILE_NAME}: lms_type")


def test_legacy_file_loads(store: SettingsStore) -> None:
    store.locate().write_text(
        json.dumps({"common": {"canvas_course_id": "12", "lms_url_option": "TUE"}, "active_tab": "canvas"}),
        encoding="utf-8",
    )

    settings = store.load()

    assert settings.common.lms_course_id == "12"
    assert settings.common.lms_url_option.value == "preset"


def test_reset_to_defaults_overwrites_file(store: SettingsStore) -> None:
    store.save(GuiSettings().replace(git_user="someone"))

    settings = store.reset_to_defaults()

    assert settings == GuiSettings()
    assert store.load() == GuiSettings()


def test_reset_location_leaves_other_file_alone(store: SettingsStore, tmp_path: Path) -> None:
    elsewhere = tmp_path / "elsewhere" / "course.json"
    store.set_location(elsewhere)
    store.save(GuiSettings().replace(git_user="elsewhere"))
    assert store.locate() == elsewhere

    default = store.reset_location()

    assert store.locate() == default
    assert default == store.config_dir / SETTINGS_FILE_NAME
    assert json.loads(elsewhere.read_text(encoding="utf-8"))["git_user"] == "elsewhere"


def test_corrupt_location_pointer_resets(store: SettingsStore, config_dir: Path) -> None:
    config_dir.mkdir(parents=True, exist_ok=True)
    (config_dir / LOCATION_FILE_NAME).write_text("garbage", encoding="utf-8")

    assert store.locate() == config_dir / SETTINGS_FILE_NAME


def test_unwritable_config_dir_still_loads(tmp_path: Path) -> None:
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")
    store = SettingsStore(blocker / "cfg")

    result = store.load_with_diagnostics()

    assert result.settings == GuiSettings()
    assert result.path == blocker / "cfg" / SETTINGS_FILE_NAME
    assert result.diagnostics[0].startswith("Cannot record settings location")
