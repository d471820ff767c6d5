"""Reusable Qt widgets for the RepoBee Desk GUI."""

from __future__ import annotations

from pathlib import Path

from PySide6.QtCore import Signal
from PySide6.QtWidgets import QFileDialog, QHBoxLayout, QLineEdit, QPushButton, QWidget


class PathPicker(QWidget):
    """Line edit with a browse button; emits the text once editing is done."""

    path_committed = Signal(str)

    def __init__(
        self,
        caption: str,
        *,
        mode: str = "file",
        placeholder: str | None = None,
        parent: QWidget | None = None,
    ) -> None:
        super().__init__(parent)
        self._caption = caption
        self._mode = mode
        layout = QHBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self._edit = QLineEdit(self)
        if placeholder:
            self._edit.setPlaceholderText(placeholder)
        layout.addWidget(self._edit, stretch=1)
        button = QPushButton("Browse…", self)
        button.clicked.connect(self._choose_path)
        layout.addWidget(button)
        self._edit.editingFinished.connect(lambda: self.path_committed.emit(self.text()))

    def text(self) -> str:
        return self._edit.text().strip()

    def set_text(self, value: str) -> None:
        if self._edit.text() != value:
            self._edit.setText(value)

    def _choose_path(self) -> None:
        start = self.text() or str(Path.home())
        if self._mode == "directory":
            chosen = QFileDialog.getExistingDirectory(self, self._caption, start)
        elif self._mode == "save":
            chosen, _ = QFileDialog.getSaveFileName(self, self._caption, start)
        else:
            chosen, _ = QFileDialog.getOpenFileName(self, self._caption, start)
        if chosen:
            self._edit.setText(chosen)
            self.path_committed.emit(chosen)


__all__ = ["PathPicker"]
