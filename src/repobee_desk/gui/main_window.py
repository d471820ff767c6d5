"""Main window: settings tabs, profile bar and the operation transcript."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any, List, Optional

from PySide6.QtCore import QThread, Qt
from PySide6.QtGui import QAction, QKeySequence
from PySide6.QtWidgets import (
    QComboBox,
    QDialog,
    QFileDialog,
    QInputDialog,
    QLabel,
    QMainWindow,
    QMessageBox,
    QPlainTextEdit,
    QPushButton,
    QSplitter,
    QTabWidget,
    QToolBar,
    QVBoxLayout,
    QWidget,
)

from ..commands import CommandSurface, LocalBackend
from ..logs import LEVEL_TOGGLES, configure_logging
from ..models import OperationResult
from ..session import SettingsSession
from ..settings import ActiveTab, GuiSettings
from .forms import LmsForm, RepoForm
from .logging_bridge import LogBridge
from .views import TranscriptView
from .workers import OperationWorker

_TABS = [ActiveTab.LMS, ActiveTab.REPO]


class MainWindow(QMainWindow):
    """Application shell around one :class:`SettingsSession`."""

    def __init__(self, backend: CommandSurface | None = None, *, log_file: Optional[Path] = None) -> None:
        super().__init__()
        self.setWindowTitle("RepoBee Desk")
        self.resize(980, 760)

        self._threads: List[QThread] = []
        self._closing = False
        self._log_file = log_file
        self._log_bridge = LogBridge()
        self._log_toggles: Optional[tuple] = None
        self._session = SettingsSession(backend or LocalBackend())

        splitter = QSplitter(Qt.Vertical, self)
        self._tabs = QTabWidget(splitter)
        self._lms_form = LmsForm(parent=self._tabs)
        self._repo_form = RepoForm(parent=self._tabs)
        self._tabs.addTab(self._lms_form, "LMS Import")
        self._tabs.addTab(self._repo_form, "Repository Setup")
        self._transcript = TranscriptView(parent=splitter)
        splitter.addWidget(self._tabs)
        splitter.addWidget(self._transcript)
        splitter.setStretchFactor(0, 3)
        splitter.setStretchFactor(1, 2)
        self.setCentralWidget(splitter)

        self._build_profile_bar()
        self._build_menu()

        for form in (self._lms_form, self._repo_form):
            form.field_edited.connect(self._on_field_edited)
            form.operation_requested.connect(self._start_operation)
        self._log_bridge.message_emitted.connect(self._on_log_message)
        self._session.subscribe(self._on_settings_replaced)

        self._on_settings_replaced(self._session.settings)
        self._restore_window(self._session.settings)
        self._refresh_profiles()
        self._refresh_transcript()

    # ------------------------------------------------------------------
    # Construction helpers
    # ------------------------------------------------------------------
    def _build_profile_bar(self) -> None:
        bar = QToolBar("Profiles", self)
        bar.setMovable(False)
        bar.addWidget(QLabel("Profile: ", bar))
        self._profile_combo = QComboBox(bar)
        self._profile_combo.setMinimumWidth(200)
        bar.addWidget(self._profile_combo)
        for label, handler in (
            ("Load", self._load_profile),
            ("Save As…", self._save_profile),
            ("Delete", self._delete_profile),
        ):
            button = QPushButton(label, bar)
            button.clicked.connect(handler)
            bar.addWidget(button)
        self.addToolBar(bar)

    def _build_menu(self) -> None:
        menu = self.menuBar().addMenu("&Settings")
        actions = [
            ("&Save", QKeySequence.Save, self._save_settings),
            ("&Import…", None, self._import_settings),
            ("&Export…", None, self._export_settings),
            (None, None, None),
            ("Reset to &defaults", None, self._reset_settings),
            ("Reset &location", None, self._reset_location),
            ("Show settings &path", None, self._show_path),
            ("Show s&chema", None, self._show_schema),
            (None, None, None),
            ("&Clear output", None, self._clear_transcript),
            ("&Quit", QKeySequence.Quit, self.close),
        ]
        for label, shortcut, handler in actions:
            if label is None:
                menu.addSeparator()
                continue
            action = QAction(label, self)
            if shortcut is not None:
                action.setShortcut(shortcut)
            action.triggered.connect(handler)
            menu.addAction(action)

    # ------------------------------------------------------------------
    # Settings plumbing
    # ------------------------------------------------------------------
    def _on_settings_replaced(self, settings: GuiSettings) -> None:
        self._lms_form.set_settings(settings)
        self._repo_form.set_settings(settings)
        self._tabs.setCurrentIndex(_TABS.index(settings.active_tab))
        self._configure_logging(settings)

    def _configure_logging(self, settings: GuiSettings) -> None:
        toggles = tuple(getattr(settings.common, name) for name in sorted(set(LEVEL_TOGGLES.values())))
        if toggles == self._log_toggles:
            return
        self._log_toggles = toggles
        configure_logging(settings.common, log_file=self._log_file, sink=self._log_bridge.write)

    def _on_field_edited(self, field: str, value: Any) -> None:
        previous = self._session.settings
        self._session.update(**{field: value})
        if self._session.settings is previous:
            # Rejected edit: put the widgets back in sync with the document.
            self._on_settings_replaced(previous)
        self._refresh_transcript()

    def _restore_window(self, settings: GuiSettings) -> None:
        if settings.window_width > 0 and settings.window_height > 0:
            self.resize(settings.window_width, settings.window_height)
            self.move(settings.window_x, settings.window_y)

    def _refresh_profiles(self) -> None:
        names = self._session.profiles()
        self._profile_combo.clear()
        self._profile_combo.addItems(names)
        active = self._session.active_profile
        if active in names:
            self._profile_combo.setCurrentIndex(names.index(active))

    def _refresh_transcript(self) -> None:
        self._transcript.show_lines(self._session.transcript.lines)

    def _on_log_message(self, message: str) -> None:
        self._session.push_progress(message)
        self._refresh_transcript()

    # ------------------------------------------------------------------
    # Menu and profile actions
    # ------------------------------------------------------------------
    def _save_settings(self) -> None:
        self._session.save()
        self._refresh_transcript()

    def _import_settings(self) -> None:
        path, _ = QFileDialog.getOpenFileName(self, "Import settings", str(Path.home()), "JSON files (*.json)")
        if path:
            self._session.import_settings(Path(path))
            self._refresh_transcript()

    def _export_settings(self) -> None:
        path, _ = QFileDialog.getSaveFileName(self, "Export settings", str(Path.home()), "JSON files (*.json)")
        if path:
            self._session.export_settings(Path(path))
            self._refresh_transcript()

    def _reset_settings(self) -> None:
        answer = QMessageBox.question(self, "Reset settings", "Replace all settings with their defaults?")
        if answer == QMessageBox.Yes:
            self._session.reset_settings()
            self._refresh_transcript()

    def _reset_location(self) -> None:
        self._session.reset_location()
        self._refresh_transcript()

    def _show_path(self) -> None:
        location = self._session.settings_path()
        QMessageBox.information(self, "Settings file", str(location) if location else "Unknown")

    def _show_schema(self) -> None:
        schema = self._session.schema()
        self._refresh_transcript()
        if schema is None:
            return
        dialog = QDialog(self)
        dialog.setWindowTitle("Settings schema")
        dialog.resize(640, 560)
        layout = QVBoxLayout(dialog)
        text = QPlainTextEdit(dialog)
        text.setReadOnly(True)
        text.setPlainText(json.dumps(schema, indent=2))
        layout.addWidget(text)
        dialog.exec()

    def _clear_transcript(self) -> None:
        self._session.clear_transcript()
        self._transcript.clear()

    def _load_profile(self) -> None:
        name = self._profile_combo.currentText()
        if name:
            self._session.load_profile(name)
            self._refresh_profiles()
            self._refresh_transcript()

    def _save_profile(self) -> None:
        name, accepted = QInputDialog.getText(
            self, "Save profile", "Profile name:", text=self._session.active_profile or ""
        )
        if accepted:
            self._session.save_profile(name)
            self._refresh_profiles()
            self._refresh_transcript()

    def _delete_profile(self) -> None:
        name = self._profile_combo.currentText()
        if not name:
            return
        answer = QMessageBox.question(self, "Delete profile", f"Delete profile '{name}'?")
        if answer == QMessageBox.Yes:
            self._session.delete_profile(name)
            self._refresh_profiles()
            self._refresh_transcript()

    # ------------------------------------------------------------------
    # Worker orchestration
    # ------------------------------------------------------------------
    def _set_busy(self, busy: bool) -> None:
        self._lms_form.set_busy(busy)
        self._repo_form.set_busy(busy)

    def _start_operation(self, kind: str) -> None:
        operation = self._session.operation(kind)
        self._session.begin_operation(operation.title)
        self._transcript.set_status(operation.title)
        self._refresh_transcript()
        self._set_busy(True)

        worker = OperationWorker(operation)
        thread = QThread(self)
        worker.moveToThread(thread)
        thread.started.connect(worker.run)
        worker.progress.connect(self._on_progress)
        worker.finished.connect(self._on_operation_finished)
        worker.finished.connect(thread.quit)
        worker.finished.connect(worker.deleteLater)
        thread.finished.connect(thread.deleteLater)
        self._threads.append(thread)
        thread.finished.connect(lambda: self._threads.remove(thread))
        thread.start()

    def _on_progress(self, message: str) -> None:
        if self._closing:
            return
        self._session.push_progress(message)
        self._refresh_transcript()

    def _on_operation_finished(self, result: OperationResult) -> None:
        if self._closing:
            return
        self._set_busy(False)
        self._session.finish_operation(result)
        self._transcript.set_status(result.message)
        self._refresh_transcript()

    def closeEvent(self, event) -> None:  # pragma: no cover - UI only
        self._closing = True
        geometry = self.geometry()
        self._session.update(
            window_width=geometry.width(),
            window_height=geometry.height(),
            window_x=geometry.x(),
            window_y=geometry.y(),
            active_tab=_TABS[max(self._tabs.currentIndex(), 0)],
        )
        self._session.save()
        self._log_bridge.close()
        for thread in list(self._threads):
            thread.quit()
            thread.wait(2000)
        super().closeEvent(event)


__all__ = ["MainWindow"]
