"""Application bootstrap for the RepoBee Desk GUI."""

from __future__ import annotations

import sys
from pathlib import Path

from loguru import logger
from PySide6.QtCore import Qt
from PySide6.QtWidgets import QApplication, QStyle

from .main_window import MainWindow

LOG_FILE = Path.home() / ".repobee_desk" / "gui.log"


def _init_logging() -> None:
    """Log to a file until the settings toggles are known."""

    # Remove default stderr handler so log messages flow through custom sinks.
    logger.remove()
    LOG_FILE.parent.mkdir(parents=True, exist_ok=True)
    logger.add(LOG_FILE, rotation="1 week", retention=5, level="INFO")


def main() -> int:
    """Entry point used by setuptools and PyInstaller."""

    _init_logging()
    policy = getattr(Qt.HighDpiScaleFactorRoundingPolicy, "PassThrough", None)
    if policy is not None and hasattr(QApplication, "setHighDpiScaleFactorRoundingPolicy"):
        QApplication.setHighDpiScaleFactorRoundingPolicy(policy)
    app = QApplication(sys.argv)
    app.setOrganizationName("RepoBee")
    app.setApplicationName("RepoBee Desk")
    window = MainWindow(log_file=LOG_FILE)
    window.setWindowIcon(window.style().standardIcon(QStyle.SP_DirIcon))
    window.show()
    return app.exec()


if __name__ == "__main__":
    raise SystemExit(main())
