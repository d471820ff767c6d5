"""Loguru configuration driven by the four logging toggles."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from loguru import logger

from .settings import CommonSettings

LEVEL_TOGGLES: Dict[str, str] = {
    "TRACE": "log_debug",
    "DEBUG": "log_debug",
    "INFO": "log_info",
    "SUCCESS": "log_info",
    "WARNING": "log_warning",
    "ERROR": "log_error",
    "CRITICAL": "log_error",
}


def level_filter(common: CommonSettings) -> Callable[[Dict[str, Any]], bool]:
    """Build a loguru filter that passes only the enabled severities."""

    enabled = {level: bool(getattr(common, toggle)) for level, toggle in LEVEL_TOGGLES.items()}

    def _filter(record: Dict[str, Any]) -> bool:
        return enabled.get(record["level"].name, True)

    return _filter


def configure_logging(
    common: CommonSettings,
    *,
    log_file: Optional[Path] = None,
    sink: Any = None,
    level: str = "TRACE",
) -> List[int]:
    """Replace all sinks with ones filtered by ``common``'s toggles.

    ``level`` is an additional floor applied to every sink.
    """

    logger.remove()
    record_filter = level_filter(common)
    sink_ids: List[int] = []
    if sink is not None:
        sink_ids.append(logger.add(sink, level=level, filter=record_filter, format="{message}"))
    if log_file:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink_ids.append(
            logger.add(log_file, level=level, filter=record_filter, rotation="1 week", retention=5)
        )
    return sink_ids


__all__ = ["LEVEL_TOGGLES", "configure_logging", "level_filter"]
