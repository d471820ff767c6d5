"""Background worker that runs long operations without freezing the UI."""

from __future__ import annotations

from loguru import logger
from PySide6.QtCore import QObject, Signal

from ..models import OperationResult
from ..session import Operation


class OperationWorker(QObject):
    """Run one bound operation in a background thread.

    ``progress`` carries every message the operation emits, in order;
    ``finished`` carries the final :class:`OperationResult`.
    """

    finished = Signal(object)
    progress = Signal(str)

    def __init__(self, operation: Operation) -> None:
        super().__init__()
        self._operation = operation

    @property
    def title(self) -> str:
        return self._operation.title

    def run(self) -> None:
        try:
            result = self._operation.call(self.progress.emit)
        except Exception as exc:  # pragma: no cover - runtime error surface to GUI
            logger.exception("{} failed", self._operation.title)
            result = OperationResult.failure(f"✗ Error: {exc}")
        self.finished.emit(result)


__all__ = ["OperationWorker"]
