"""Bridge loguru messages into Qt signals."""

from __future__ import annotations

from loguru import logger
from PySide6.QtCore import QObject, Signal


class LogBridge(QObject):
    """Forward loguru records at or above ``level`` to the GUI.

    Pass :meth:`write` as a loguru sink; :meth:`close` stops forwarding.
    """

    message_emitted = Signal(str)

    def __init__(self, level: str = "WARNING") -> None:
        super().__init__()
        self._minimum = logger.level(level).no
        self._closed = False

    def write(self, message) -> None:  # pragma: no cover - integrates with loguru internals
        record = message.record
        if self._closed or record["level"].no < self._minimum:
            return
        text = record.get("message", "").rstrip("\n")
        self.message_emitted.emit(f"{record['level'].name}: {text}")

    def close(self) -> None:
        self._closed = True


__all__ = ["LogBridge"]
