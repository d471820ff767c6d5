import sys
from pathlib import Path

import pytest
from loguru import logger

from repobee_desk.logs import configure_logging
from repobee_desk.settings import CommonSettings


@pytest.fixture(autouse=True)
def restore_logger():
    yield
    logger.remove()
    logger.add(sys.stderr)


def test_toggles_filter_levels() -> None:
    received = []
    configure_logging(CommonSettings(log_info=False), sink=received.append)

    logger.debug("hidden debug")
    logger.info("hidden info")
    logger.warning("shown warning")
    logger.error("shown error")

    assert [message.strip() for message in received] == ["shown warning", "shown error"]


def test_level_floor_applies_on_top_of_toggles() -> None:
    received = []
    configure_logging(CommonSettings(log_debug=True), sink=received.append, level="INFO")

    logger.debug("below floor")
    logger.info("kept")

    assert [message.strip() for message in received] == ["kept"]


def test_log_file_is_created(tmp_path: Path) -> None:
    log_file = tmp_path / "logs" / "gui.log"
    configure_logging(CommonSettings(), log_file=log_file)

    logger.info("written to file")
    logger.remove()

    assert "written to file" in log_file.read_text(encoding="utf-8")
