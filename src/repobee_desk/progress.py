"""Coalesce an ordered progress stream into a compact display transcript."""

from __future__ import annotations

from enum import Enum
from typing import Iterable, List, Optional

from .models import OperationResult

PROGRESS_PREFIX = "[PROGRESS]"
DISPLAY_PREFIX = "(progress) "


class StreamState(str, Enum):
    NO_TRANSIENT = "no-transient"
    TRANSIENT = "transient"


def progress_payload(message: str) -> Optional[str]:
    """Return the payload of a transient message, or ``None`` for a permanent one."""

    if not message.startswith(PROGRESS_PREFIX):
        return None
    return message[len(PROGRESS_PREFIX):].lstrip()


def progress_message(payload: str) -> str:
    """Build a wire message that a coalescer will treat as transient."""

    return f"{PROGRESS_PREFIX} {payload}"


class ProgressCoalescer:
    """Two-state reducer over transcript lines.

    Permanent lines are never rewritten. A run of consecutive progress messages
    occupies a single line that each new message replaces.
    """

    def __init__(self) -> None:
        self._lines: List[str] = []
        self._state = StreamState.NO_TRANSIENT

    @property
    def lines(self) -> List[str]:
        return list(self._lines)

    @property
    def state(self) -> StreamState:
        return self._state

    @property
    def text(self) -> str:
        return "\n".join(self._lines)

    def push(self, message: str) -> None:
        payload = progress_payload(message)
        if payload is None:
            self._lines.append(message)
            self._state = StreamState.NO_TRANSIENT
            return

        rendered = DISPLAY_PREFIX + payload
        if self._state is StreamState.TRANSIENT:
            while self._lines and not self._lines[-1].strip():
                self._lines.pop()
            if self._lines:
                self._lines[-1] = rendered
                return
        self._lines.append(rendered)
        self._state = StreamState.TRANSIENT

    def extend(self, messages: Iterable[str]) -> None:
        for message in messages:
            self.push(message)

    def finish(self, result: OperationResult) -> None:
        """Append the terminal summary and details as permanent lines."""

        self._lines.append(result.message)
        if result.details:
            self._lines.append(result.details)
        self._state = StreamState.NO_TRANSIENT

    def clear(self) -> None:
        self._lines.clear()
        self._state = StreamState.NO_TRANSIENT


__all__ = [
    "DISPLAY_PREFIX",
    "PROGRESS_PREFIX",
    "ProgressCoalescer",
    "StreamState",
    "progress_message",
    "progress_payload",
]
