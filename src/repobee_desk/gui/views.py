"""Transcript view that renders the coalesced operation output."""

from __future__ import annotations

from typing import Iterable

from PySide6.QtWidgets import QLabel, QPlainTextEdit, QVBoxLayout, QWidget


class TranscriptView(QWidget):
    """Read-only transcript with a one-line status header."""

    def __init__(self, *, parent: QWidget | None = None) -> None:
        super().__init__(parent)
        layout = QVBoxLayout(self)
        layout.setContentsMargins(0, 0, 0, 0)
        self._status = QLabel("Ready.", self)
        self._status.setWordWrap(True)
        layout.addWidget(self._status)

        self._log = QPlainTextEdit(self)
        self._log.setReadOnly(True)
        self._log.setMaximumBlockCount(5000)
        layout.addWidget(self._log, stretch=1)

    def show_lines(self, lines: Iterable[str]) -> None:
        """Replace the whole text; the last transient line may have changed."""

        self._log.setPlainText("\n".join(lines))
        bar = self._log.verticalScrollBar()
        bar.setValue(bar.maximum())

    def set_status(self, message: str) -> None:
        self._status.setText(message)

    def clear(self) -> None:
        self._log.clear()
        self._status.setText("Ready.")


__all__ = ["TranscriptView"]
