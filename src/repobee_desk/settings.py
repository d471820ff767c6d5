"""Settings document model, validation and schema for RepoBee Desk."""

from __future__ import annotations

import copy
from enum import Enum
from functools import lru_cache
from typing import Any, Dict, List, Tuple

from pydantic import BaseModel, ConfigDict, Field, ValidationError, create_model, model_validator


class SettingsError(Exception):
    """Base class for settings persistence failures."""


class NotFoundError(SettingsError):
    """Raised when a settings file or profile does not exist."""


class ParseError(SettingsError):
    """Raised when stored or imported content is not valid JSON."""


class SchemaValidationError(SettingsError):
    """Raised when a document does not match the settings schema."""

    def __init__(self, message: str, errors: List[str] | None = None) -> None:
        super().__init__(message)
        self.errors = list(errors or [])


class InvalidNameError(SettingsError):
    """Raised when a profile name is empty after trimming."""


class SettingsIOError(SettingsError):
    """Raised when a settings file cannot be read or written."""


class LmsType(str, Enum):
    CANVAS = "Canvas"
    MOODLE = "Moodle"


class UrlOption(str, Enum):
    """Whether the LMS URL comes from the preset or the custom field."""

    PRESET = "preset"
    CUSTOM = "custom"


class MemberOption(str, Enum):
    """Identifier format used for team members in the roster."""

    EMAIL_AND_GIT_ID = "(email, gitid)"
    EMAIL = "email"
    GIT_ID = "git_id"


class DirectoryLayout(str, Enum):
    BY_TEAM = "by-team"
    FLAT = "flat"
    BY_TASK = "by-task"


class ActiveTab(str, Enum):
    LMS = "lms"
    REPO = "repo"


class CommonSettings(BaseModel):
    """Settings shared between the GUI and the CLI."""

    model_config = ConfigDict(extra="ignore")

    # LMS
    lms_type: LmsType = Field(default=LmsType.CANVAS, description="LMS provider.")
    lms_url_option: UrlOption = Field(
        default=UrlOption.PRESET, description="Use the preset base URL or the custom URL."
    )
    lms_base_url: str = Field(default="https://canvas.tue.nl", description="Preset LMS base URL.")
    lms_custom_url: str = Field(default="", description="Custom LMS base URL.")
    lms_access_token: str = ""
    lms_course_id: str = ""
    lms_course_name: str = Field(default="", description="Course name resolved during verification.")
    lms_yaml_file: str = Field(default="students.yaml", description="Roster YAML output file.")
    lms_info_folder: str = Field(default="", description="Folder for the CSV/XLSX student info files.")
    lms_csv_file: str = "student-info.csv"
    lms_xlsx_file: str = "student-info.xlsx"
    lms_member_option: MemberOption = MemberOption.EMAIL_AND_GIT_ID
    lms_include_group: bool = True
    lms_include_member: bool = True
    lms_include_initials: bool = False
    lms_full_groups: bool = Field(default=True, description="Only export groups that are full.")
    lms_output_yaml: bool = True
    lms_output_csv: bool = False
    lms_output_xlsx: bool = False

    # Git hosting
    git_base_url: str = "https://gitlab.tue.nl"
    git_access_token: str = ""
    git_user: str = ""
    git_student_repos_group: str = ""
    git_template_group: str = ""

    # Repository setup
    yaml_file: str = Field(default="students.yaml", description="Roster file used for repository setup.")
    target_folder: str = Field(default="", description="Folder that receives cloned repositories.")
    assignments: str = Field(default="", description="Comma separated assignment names.")
    directory_layout: DirectoryLayout = DirectoryLayout.FLAT

    # Logging
    log_info: bool = True
    log_debug: bool = False
    log_warning: bool = True
    log_error: bool = True


_LEGACY_VALUES: Dict[str, Dict[str, str]] = {
    "lms_url_option": {"TUE": UrlOption.PRESET.value, "Custom": UrlOption.CUSTOM.value},
    "active_tab": {"canvas": ActiveTab.LMS.value},
}


def flatten_document(data: Dict[str, Any]) -> Dict[str, Any]:
    """Return a flat, current-shape copy of a stored settings mapping.

    Accepts the nested ``{"common": {...}}`` layout and ``canvas_*`` keys written
    by earlier releases. Flat keys win over nested ones.
    """

    flat: Dict[str, Any] = {}
    nested = data.get("common")
    if isinstance(nested, dict):
        flat.update(nested)
    flat.update({key: value for key, value in data.items() if key != "common"})

    for key in [key for key in flat if key.startswith("canvas_")]:
        value = flat.pop(key)
        flat.setdefault("lms_" + key[len("canvas_"):], value)

    for key, mapping in _LEGACY_VALUES.items():
        value = flat.get(key)
        if isinstance(value, str) and value in mapping:
            flat[key] = mapping[value]
    return flat


class GuiSettings(BaseModel):
    """The complete settings document: common settings plus window chrome."""

    model_config = ConfigDict(extra="ignore")

    common: CommonSettings = Field(default_factory=CommonSettings)

    active_tab: ActiveTab = ActiveTab.LMS
    config_locked: bool = True
    options_locked: bool = True
    window_width: int = Field(default=0, ge=0)
    window_height: int = Field(default=0, ge=0)
    window_x: int = 0
    window_y: int = 0

    @model_validator(mode="before")
    @classmethod
    def _split_flat_document(cls, values: Any) -> Any:
        if not isinstance(values, dict):
            return values
        if isinstance(values.get("common"), CommonSettings):
            return values
        flat = flatten_document(values)
        common = {key: flat.pop(key) for key in list(flat) if key in CommonSettings.model_fields}
        flat["common"] = common
        return flat

    @classmethod
    def from_document(cls, data: Dict[str, Any]) -> "GuiSettings":
        """Validate a flat document, raising :class:`SchemaValidationError`."""

        if not isinstance(data, dict):
            raise SchemaValidationError(
                "Settings must be a JSON object", [f"expected object, got {type(data).__name__}"]
            )
        try:
            return cls.model_validate(data)
        except ValidationError as exc:
            errors = [_describe_error(error) for error in exc.errors()]
            raise SchemaValidationError(
                f"Invalid settings ({len(errors)} error(s)): " + "; ".join(errors), errors
            ) from exc

    def to_document(self) -> Dict[str, Any]:
        """Serialize to the flat on-disk shape."""

        document = self.common.model_dump(mode="json")
        document.update(self.model_dump(mode="json", exclude={"common"}))
        return document

    def replace(self, **changes: Any) -> "GuiSettings":
        """Return a validated copy with ``changes`` applied to the flat document."""

        unknown = sorted(set(changes) - set(document_fields()))
        if unknown:
            raise SchemaValidationError(
                f"Unknown setting(s): {', '.join(unknown)}", [f"{name}: unknown field" for name in unknown]
            )
        document = self.to_document()
        document.update(changes)
        return GuiSettings.from_document(document)


def _field_name(loc: Tuple[Any, ...]) -> str:
    names = [str(part) for part in loc if isinstance(part, str) and part != "common"]
    return names[0] if names else "<root>"


def _describe_error(error: Dict[str, Any]) -> str:
    return f"{_field_name(tuple(error.get('loc', ())))}: {error.get('msg', 'invalid value')}"


def parse_lenient(data: Dict[str, Any]) -> Tuple[GuiSettings, List[str]]:
    """Validate ``data`` field by field.

    Fields that fail validation fall back to their defaults; the returned list
    describes each dropped field. Used when loading the active document so one
    bad value never discards the rest.
    """

    flat = flatten_document(data)
    diagnostics: List[str] = []
    while True:
        try:
            return GuiSettings.model_validate(flat), diagnostics
        except ValidationError as exc:
            dropped = False
            for error in exc.errors():
                name = _field_name(tuple(error.get("loc", ())))
                if name in flat:
                    flat.pop(name)
                    diagnostics.append(f"{_describe_error(error)} (using default)")
                    dropped = True
            if not dropped:
                raise


def document_fields() -> List[str]:
    """Names of every field in the flat document, in serialization order."""

    return list(_flat_model().model_fields)


@lru_cache(maxsize=None)
def _flat_model() -> type[BaseModel]:
    fields: Dict[str, Any] = {}
    for name, info in CommonSettings.model_fields.items():
        fields[name] = (info.annotation, info)
    for name, info in GuiSettings.model_fields.items():
        if name != "common":
            fields[name] = (info.annotation, info)
    return create_model("RepobeeSettings", **fields)


@lru_cache(maxsize=1)
def _cached_schema() -> Dict[str, Any]:
    schema = _flat_model().model_json_schema()
    schema["description"] = "RepoBee Desk settings document."
    return schema


def settings_schema() -> Dict[str, Any]:
    """JSON Schema of the flat settings document.

    The schema is computed once per process; callers get their own copy.
    """

    return copy.deepcopy(_cached_schema())


__all__ = [
    "ActiveTab",
    "CommonSettings",
    "DirectoryLayout",
    "GuiSettings",
    "InvalidNameError",
    "LmsType",
    "MemberOption",
    "NotFoundError",
    "ParseError",
    "SchemaValidationError",
    "SettingsError",
    "SettingsIOError",
    "UrlOption",
    "document_fields",
    "flatten_document",
    "parse_lenient",
    "settings_schema",
]
