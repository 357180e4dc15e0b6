"""Tests for CLI logging setup."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Iterator

import pytest

from outfitpicker.cli_support import LOG_FILENAME, configure_logging
from outfitpicker.config import LoggingSettings


@pytest.fixture(autouse=True)
def _restore_logger() -> Iterator[None]:
    logger = logging.getLogger("outfitpicker")
    saved = list(logger.handlers)
    yield
    for handler in list(logger.handlers):
        if handler not in saved:
            logger.removeHandler(handler)
            handler.close()


def _file_handlers() -> list[RotatingFileHandler]:
    logger = logging.getLogger("outfitpicker")
    return [handler for handler in logger.handlers if isinstance(handler, RotatingFileHandler)]


def test_configure_logging_creates_log_file(tmp_path: Path) -> None:
    log_path = configure_logging(LoggingSettings(level="DEBUG"), tmp_path / "state")

    assert log_path == tmp_path / "state" / LOG_FILENAME
    assert log_path.exists()
    assert logging.getLogger("outfitpicker").level == logging.DEBUG


def test_configure_logging_keeps_one_handler_per_directory(tmp_path: Path) -> None:
    configure_logging(LoggingSettings(), tmp_path / "one")
    configure_logging(LoggingSettings(), tmp_path / "one")
    assert len(_file_handlers()) == 1

    configure_logging(LoggingSettings(), tmp_path / "two")
    handlers = _file_handlers()
    assert len(handlers) == 1
    assert Path(handlers[0].baseFilename) == (tmp_path / "two" / LOG_FILENAME).absolute()


def test_configure_logging_raises_when_directory_is_a_file(tmp_path: Path) -> None:
    blocker = tmp_path / "state"
    blocker.write_text("", encoding="utf-8")

    with pytest.raises(OSError):
        configure_logging(LoggingSettings(), blocker)
