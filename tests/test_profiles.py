import json
from pathlib import Path

import pytest

from repobee_desk.profiles import ProfileStore
from repobee_desk.settings import GuiSettings, InvalidNameError, NotFoundError


@pytest.fixture()
def course_a() -> GuiSettings:
    return GuiSettings().replace(lms_course_id="100", git_student_repos_group="course-a/students")


@pytest.fixture()
def course_b() -> GuiSettings:
    return GuiSettings().replace(lms_course_id="200", lms_type="Moodle")


def test_save_and_load(profiles: ProfileStore, course_a: GuiSettings) -> None:
    profiles.save("Course A", course_a)

    assert profiles.list() == ["Course A"]
    assert profiles.get_active() is None
    assert profiles.load("Course A") == course_a
    assert profiles.get_active() == "Course A"


def test_names_are_trimmed(profiles: ProfileStore) -> None:
    assert profiles.save("  Spring 2024  ", GuiSettings()) == "Spring 2024"
    assert profiles.list() == ["Spring 2024"]


def test_names_are_case_sensitive(profiles: ProfileStore) -> None:
    profiles.save("intro", GuiSettings())
    profiles.save("Intro", GuiSettings())

    assert profiles.list() == ["Intro", "intro"]


def test_overwrite_keeps_active(profiles: ProfileStore, course_a: GuiSettings, course_b: GuiSettings) -> None:
    profiles.save("A", course_a)
    profiles.save("B", course_b)
    profiles.load("B")

    profiles.save("A", course_b)

    assert profiles.get_active() == "B"
    assert profiles.list() == ["A", "B"]
    assert profiles.load("A") == course_b


def test_deleting_active_profile_clears_active(profiles: ProfileStore, course_a, course_b) -> None:
    profiles.save("A", course_a)
    profiles.save("B", course_b)
    profiles.load("A")

    profiles.delete("A")

    assert profiles.list() == ["B"]
    assert profiles.get_active() is None


def test_deleting_other_profile_keeps_active(profiles: ProfileStore, course_a, course_b) -> None:
    profiles.save("A", course_a)
    profiles.save("B", course_b)
    profiles.load("A")

    profiles.delete("B")

    assert profiles.get_active() == "A"


@pytest.mark.parametrize("name", ["", "   ", "\t"])
def test_empty_names_are_rejected(profiles: ProfileStore, name: str) -> None:
    profiles.save("keep", GuiSettings())

    with pytest.raises(InvalidNameError):
        profiles.save(name, GuiSettings())

    assert profiles.list() == ["keep"]


def test_missing_profiles_raise(profiles: ProfileStore) -> None:
    with pytest.raises(NotFoundError):
        profiles.load("ghost")
    with pytest.raises(NotFoundError):
        profiles.delete("ghost")
    assert profiles.get_active() is None


def test_dangling_active_pointer_is_cleared(profiles: ProfileStore) -> None:
    profiles.directory.mkdir(parents=True)
    (profiles.directory / "active.json").write_text(json.dumps({"active": "ghost"}), encoding="utf-8")

    assert profiles.get_active() is None
    assert json.loads((profiles.directory / "active.json").read_text(encoding="utf-8")) == {"active": None}


def test_unreadable_profile_is_skipped(profiles: ProfileStore) -> None:
    profiles.save("good", GuiSettings())
    (profiles.directory / "broken.json").write_text("{", encoding="utf-8")

    assert profiles.list() == ["good"]


def test_profiles_live_under_config_dir(profiles: ProfileStore, config_dir: Path) -> None:
    profiles.save("A", GuiSettings())

    assert profiles.directory == config_dir / "profiles"
    stored = [json.loads(path.read_text(encoding="utf-8")) for path in profiles.directory.glob("*.json")]
    assert [entry["name"] for entry in stored] == ["A"]
    assert stored[0]["settings"]["lms_course_id"] == ""


def test_load_and_delete_trim_names(profiles: ProfileStore, course_a: GuiSettings) -> None:
    profiles.save(" Course ", course_a)

    assert profiles.load(" Course ") == course_a
    assert profiles.get_active() == "Course"

    profiles.delete("Course ")
    assert profiles.list() == []
    assert profiles.get_active() is None
