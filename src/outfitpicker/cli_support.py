"""Helpers shared by CLI commands: wiring, logging, and JSON payloads."""

from __future__ import annotations

import logging
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Any, Iterable

from outfitpicker.catalog.discovery import CategoryScanner
from outfitpicker.catalog.models import CategoryInfo, Item
from outfitpicker.config import ConfigError, ConfigManager, LoggingSettings
from outfitpicker.rotation import OutfitPicker, RotationProgress
from outfitpicker.state import DEFAULT_STATE_DIR, RotationRepository

LOG_FILENAME = "outfitpicker.log"
_LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(settings: LoggingSettings, log_dir: Path | None = None) -> Path:
    """Attach a rotating file handler to the ``outfitpicker`` logger.

    Calling this repeatedly with the same directory does not add handlers; a
    handler for a different directory is replaced.

    Args:
        settings: Logging configuration (level and rotation limits).
        log_dir: Directory that receives the log file.

    Returns:
        Path: Location of the log file.

    Raises:
        OSError: If the log directory or file cannot be opened.
    """

    directory = (log_dir or DEFAULT_STATE_DIR).expanduser()
    log_path = directory / LOG_FILENAME
    logger = logging.getLogger("outfitpicker")
    level = logging.getLevelName(settings.level.upper())
    logger.setLevel(level if isinstance(level, int) else logging.WARNING)

    for existing in list(logger.handlers):
        if not isinstance(existing, RotatingFileHandler):
            continue
        if Path(existing.baseFilename) == log_path.absolute():
            return log_path
        logger.removeHandler(existing)
        existing.close()

    directory.mkdir(parents=True, exist_ok=True)
    handler = RotatingFileHandler(
        log_path,
        maxBytes=max(1, settings.max_size_mb) * 1024 * 1024,
        backupCount=max(0, settings.backup_count),
        encoding="utf-8",
    )
    handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    logger.addHandler(handler)
    return log_path


def build_picker(state_dir: Path | None = None, *, with_logging: bool = True) -> OutfitPicker:
    """Return an engine wired to the default configuration and state locations.

    Args:
        state_dir: Directory holding the rotation cache and log file.
        with_logging: Attach the rotating log file before returning.

    Returns:
        OutfitPicker: Engine ready for CLI use.

    Raises:
        OSError: If logging is requested and the log file cannot be opened.
    """

    directory = (state_dir or DEFAULT_STATE_DIR).expanduser()
    manager = ConfigManager()
    if with_logging:
        try:
            settings = manager.load().logging
        except ConfigError:
            settings = LoggingSettings()
        configure_logging(settings, directory)
    return OutfitPicker(
        config_manager=manager,
        repository=RotationRepository(directory),
        scanner=CategoryScanner(),
    )


def item_payload(item: Item) -> dict[str, str]:
    """Return a JSON-ready mapping describing an outfit."""

    return {
        "category": item.category.name,
        "file_name": item.file_name,
        "path": str(item.path),
    }


def category_info_payload(infos: Iterable[CategoryInfo]) -> list[dict[str, Any]]:
    """Return JSON-ready category scan information."""

    return [
        {
            "name": info.category.name,
            "path": info.category.path,
            "state": info.state.value,
            "outfit_count": info.outfit_count,
        }
        for info in infos
    ]


def progress_payload(progress: dict[str, RotationProgress]) -> dict[str, dict[str, Any]]:
    """Return JSON-ready rotation progress keyed by category name."""

    return {
        name: {
            "worn": entry.worn_count,
            "total": entry.total_count,
            "available": entry.available_count,
            "progress": round(entry.progress, 4),
            "complete": entry.is_complete,
        }
        for name, entry in sorted(progress.items())
    }


__all__ = [
    "LOG_FILENAME",
    "configure_logging",
    "build_picker",
    "item_payload",
    "category_info_payload",
    "progress_payload",
]
