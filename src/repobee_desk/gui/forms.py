"""Settings forms for the LMS and repository tabs."""

from __future__ import annotations

from enum import Enum
from typing import Any, Callable, Dict, List, Type

from PySide6.QtCore import Signal
from PySide6.QtWidgets import (
    QCheckBox,
    QComboBox,
    QFormLayout,
    QGroupBox,
    QHBoxLayout,
    QLineEdit,
    QPushButton,
    QVBoxLayout,
    QWidget,
)

from ..session import CLONE_REPOS, GENERATE_FILES, SETUP_REPOS, VERIFY_COURSE, VERIFY_HOST
from ..settings import DirectoryLayout, GuiSettings, LmsType, MemberOption, UrlOption
from .widgets import PathPicker


class SettingsForm(QWidget):
    """Widgets bound to fields of the flat settings document.

    Only user edits are reported through ``field_edited``; :meth:`set_settings`
    refreshes every widget without echoing the values back.
    """

    field_edited = Signal(str, object)
    operation_requested = Signal(str)

    def __init__(self, *, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        self._setters: Dict[str, Callable[[Any], None]] = {}
        self._config_groups: List[QWidget] = []
        self._option_groups: List[QWidget] = []
        self._operation_buttons: List[QPushButton] = []

    # ------------------------------------------------------------------
    # Binding helpers
    # ------------------------------------------------------------------
    def _line(self, field: str, *, secret: bool = False, read_only: bool = False) -> QLineEdit:
        edit = QLineEdit(self)
        if secret:
            edit.setEchoMode(QLineEdit.Password)
        edit.setReadOnly(read_only)
        edit.editingFinished.connect(lambda: self.field_edited.emit(field, edit.text().strip()))

        def _set(value: Any) -> None:
            if edit.text() != str(value):
                edit.setText(str(value))

        self._setters[field] = _set
        return edit

    def _check(self, field: str, label: str) -> QCheckBox:
        box = QCheckBox(label, self)
        box.clicked.connect(lambda checked: self.field_edited.emit(field, checked))
        self._setters[field] = lambda value: box.setChecked(bool(value))
        return box

    def _combo(self, field: str, choices: Type[Enum]) -> QComboBox:
        combo = QComboBox(self)
        for choice in choices:
            combo.addItem(choice.value, choice.value)
        combo.activated.connect(lambda index: self.field_edited.emit(field, combo.itemData(index)))
        self._setters[field] = lambda value: combo.setCurrentIndex(max(combo.findData(value), 0))
        return combo

    def _path(self, field: str, caption: str, *, mode: str = "file") -> PathPicker:
        picker = PathPicker(caption, mode=mode, parent=self)
        picker.path_committed.connect(lambda text: self.field_edited.emit(field, text))
        self._setters[field] = lambda value: picker.set_text(str(value))
        return picker

    def _button(self, label: str, kind: str) -> QPushButton:
        button = QPushButton(label, self)
        button.clicked.connect(lambda: self.operation_requested.emit(kind))
        self._operation_buttons.append(button)
        return button

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def set_settings(self, settings: GuiSettings) -> None:
        document = settings.to_document()
        for field, setter in self._setters.items():
            setter(document[field])
        for group in self._config_groups:
            group.setEnabled(not settings.config_locked)
        for group in self._option_groups:
            group.setEnabled(not settings.options_locked)

    def set_busy(self, busy: bool) -> None:
        for button in self._operation_buttons:
            button.setEnabled(not busy)


class LmsForm(SettingsForm):
    """Course connection and student file generation."""

    def __init__(self, *, parent: QWidget | None = None) -> None:
        super().__init__(parent=parent)
        layout = QVBoxLayout(self)

        locks = QHBoxLayout()
        locks.addWidget(self._check("config_locked", "Lock configuration"))
        locks.addWidget(self._check("options_locked", "Lock options"))
        locks.addStretch(1)
        layout.addLayout(locks)

        course_group = QGroupBox("Course", self)
        course_form = QFormLayout(course_group)
        course_form.addRow("LMS", self._combo("lms_type", LmsType))
        course_form.addRow("URL", self._combo("lms_url_option", UrlOption))
        course_form.addRow("Preset URL", self._line("lms_base_url"))
        course_form.addRow("Custom URL", self._line("lms_custom_url"))
        course_form.addRow("Access token", self._line("lms_access_token", secret=True))
        course_form.addRow("Course ID", self._line("lms_course_id"))
        course_form.addRow("Course name", self._line("lms_course_name", read_only=True))
        self._config_groups.append(course_group)
        layout.addWidget(course_group)

        output_group = QGroupBox("Student files", self)
        output_form = QFormLayout(output_group)
        output_form.addRow("Roster YAML", self._path("lms_yaml_file", "Roster file", mode="save"))
        output_form.addRow("Info folder", self._path("lms_info_folder", "Info folder", mode="directory"))
        output_form.addRow("CSV file", self._line("lms_csv_file"))
        output_form.addRow("XLSX file", self._line("lms_xlsx_file"))
        output_form.addRow("Member format", self._combo("lms_member_option", MemberOption))

        columns = QHBoxLayout()
        columns.addWidget(self._check("lms_include_group", "Group"))
        columns.addWidget(self._check("lms_include_member", "Member"))
        columns.addWidget(self._check("lms_include_initials", "Initials"))
        columns.addWidget(self._check("lms_full_groups", "Full groups only"))
        output_form.addRow("Include", columns)

        formats = QHBoxLayout()
        formats.addWidget(self._check("lms_output_yaml", "YAML"))
        formats.addWidget(self._check("lms_output_csv", "CSV"))
        formats.addWidget(self._check("lms_output_xlsx", "XLSX"))
        output_form.addRow("Outputs", formats)
        self._option_groups.append(output_group)
        layout.addWidget(output_group)

        buttons = QHBoxLayout()
        buttons.addWidget(self._button("Verify course", VERIFY_COURSE))
        buttons.addWidget(self._button("Generate files", GENERATE_FILES))
        layout.addLayout(buttons)
        layout.addStretch(1)


class RepoForm(SettingsForm):
    """Git hosting configuration and repository setup."""

    def __init__(self, *, parent: QWidget | None = None) -> None:
        super().__init__(parent=parent)
        layout = QVBoxLayout(self)

        host_group = QGroupBox("Git hosting", self)
        host_form = QFormLayout(host_group)
        host_form.addRow("Base URL", self._line("git_base_url"))
        host_form.addRow("Access token", self._line("git_access_token", secret=True))
        host_form.addRow("User", self._line("git_user"))
        host_form.addRow("Student repos group", self._line("git_student_repos_group"))
        host_form.addRow("Template group", self._line("git_template_group"))
        self._config_groups.append(host_group)
        layout.addWidget(host_group)

        setup_group = QGroupBox("Repositories", self)
        setup_form = QFormLayout(setup_group)
        setup_form.addRow("Roster YAML", self._path("yaml_file", "Roster file"))
        setup_form.addRow("Target folder", self._path("target_folder", "Target folder", mode="directory"))
        setup_form.addRow("Assignments", self._line("assignments"))
        setup_form.addRow("Layout", self._combo("directory_layout", DirectoryLayout))
        layout.addWidget(setup_group)

        log_group = QGroupBox("Log levels", self)
        toggles = QHBoxLayout(log_group)
        toggles.addWidget(self._check("log_info", "Info"))
        toggles.addWidget(self._check("log_debug", "Debug"))
        toggles.addWidget(self._check("log_warning", "Warning"))
        toggles.addWidget(self._check("log_error", "Error"))
        layout.addWidget(log_group)

        buttons = QHBoxLayout()
        buttons.addWidget(self._button("Verify config", VERIFY_HOST))
        buttons.addWidget(self._button("Create repos", SETUP_REPOS))
        buttons.addWidget(self._button("Clone repos", CLONE_REPOS))
        layout.addLayout(buttons)
        layout.addStretch(1)


__all__ = ["LmsForm", "RepoForm", "SettingsForm"]
