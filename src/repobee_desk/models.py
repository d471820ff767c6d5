"""Plain request and result values exchanged with the command surface."""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from .settings import CommonSettings, LmsType, MemberOption, UrlOption


@dataclass(slots=True)
class OperationResult:
    """Outcome of a command: success flag, summary line and optional details."""

    success: bool
    message: str
    details: Optional[str] = None

    @classmethod
    def failure(cls, message: str, details: Optional[str] = None) -> "OperationResult":
        return cls(False, message, details)


@dataclass(slots=True)
class HostConfig:
    """Git hosting fields needed to verify, create or clone repositories."""

    base_url: str
    access_token: str = ""
    user: str = ""
    student_repos_group: str = ""
    template_group: str = ""

    @classmethod
    def from_settings(cls, common: CommonSettings) -> "HostConfig":
        return cls(
            base_url=common.git_base_url,
            access_token=common.git_access_token,
            user=common.git_user,
            student_repos_group=common.git_student_repos_group,
            template_group=common.git_template_group,
        )


@dataclass(slots=True)
class StudentTeam:
    """One team from the roster file."""

    members: List[str]
    name: Optional[str] = None

    @property
    def display_name(self) -> str:
        return self.name or "-".join(self.members)


def resolve_lms_url(common: CommonSettings) -> str:
    """The LMS URL the user selected: preset for Canvas, custom otherwise."""

    if common.lms_type is LmsType.CANVAS and common.lms_url_option is UrlOption.PRESET:
        return common.lms_base_url
    return common.lms_custom_url


@dataclass(slots=True)
class LmsFilesRequest:
    """Parameters for generating roster/info files from an LMS course."""

    lms_type: LmsType
    base_url: str
    access_token: str
    course_id: str
    yaml_file: str
    info_folder: str
    csv_file: str
    xlsx_file: str
    member_option: MemberOption = MemberOption.EMAIL_AND_GIT_ID
    include_group: bool = True
    include_member: bool = True
    include_initials: bool = False
    full_groups: bool = True
    yaml: bool = True
    csv: bool = False
    xlsx: bool = False

    @property
    def outputs(self) -> List[str]:
        return [name for name, enabled in (("yaml", self.yaml), ("csv", self.csv), ("xlsx", self.xlsx)) if enabled]

    @classmethod
    def from_settings(cls, common: CommonSettings) -> "LmsFilesRequest":
        return cls(
            lms_type=common.lms_type,
            base_url=resolve_lms_url(common),
            access_token=common.lms_access_token,
            course_id=common.lms_course_id,
            yaml_file=common.lms_yaml_file,
            info_folder=common.lms_info_folder,
            csv_file=common.lms_csv_file,
            xlsx_file=common.lms_xlsx_file,
            member_option=common.lms_member_option,
            include_group=common.lms_include_group,
            include_member=common.lms_include_member,
            include_initials=common.lms_include_initials,
            full_groups=common.lms_full_groups,
            yaml=common.lms_output_yaml,
            csv=common.lms_output_csv,
            xlsx=common.lms_output_xlsx,
        )


__all__ = [
    "HostConfig",
    "LmsFilesRequest",
    "OperationResult",
    "StudentTeam",
    "resolve_lms_url",
]
