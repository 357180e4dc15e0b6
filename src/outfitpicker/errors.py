"""Error taxonomy surfaced by the rotation engine.

Lower-level failures (raw ``OSError`` values, state decoding problems, and
configuration validation errors) are translated exactly once by
:func:`map_errors` at the public boundary of the engine. Code above that
boundary only ever sees the classes defined here.
"""

from __future__ import annotations

from contextlib import contextmanager
from enum import Enum
from typing import Iterator

from outfitpicker.config.exceptions import ConfigError
from outfitpicker.state.errors import StateError


class OutfitPickerError(Exception):
    """Base class for every error raised by the outfit picker core."""


class InvalidInputError(OutfitPickerError):
    """Raised when a caller supplies a blank category or file name."""


class CategoryNotFoundError(OutfitPickerError):
    """Raised when a named category is not part of the current scan."""


class NoOutfitsAvailableError(OutfitPickerError):
    """Raised when an outfit is not among the category's current files."""


class FileSystemError(OutfitPickerError):
    """Raised when scanning the outfit directories fails."""


class PersistenceError(OutfitPickerError):
    """Raised when the rotation cache or configuration cannot be loaded or saved."""


class ConfigurationNotFoundError(PersistenceError):
    """Raised when no outfit root has been configured yet."""


class WearOutcome(str, Enum):
    """Result of recording an outfit as worn.

    ``ROTATION_COMPLETED`` is a successful outcome: the outfit was recorded and
    the category was immediately reset because every outfit had been worn.
    """

    RECORDED = "recorded"
    ALREADY_WORN = "already_worn"
    ROTATION_COMPLETED = "rotation_completed"

    @property
    def rotation_completed(self) -> bool:
        """Return True when the wear finished a full rotation."""
        return self is WearOutcome.ROTATION_COMPLETED


@contextmanager
def map_errors() -> Iterator[None]:
    """Translate low-level exceptions into the outfit picker taxonomy.

    Raises:
        OutfitPickerError: Taxonomy errors pass through unchanged.
        FileSystemError: When an ``OSError`` escapes the wrapped block.
        PersistenceError: When state or configuration handling fails.
    """

    try:
        yield
    except OutfitPickerError:
        raise
    except (StateError, ConfigError) as exc:
        raise PersistenceError(str(exc)) from exc
    except OSError as exc:
        raise FileSystemError(f"File system error: {exc}") from exc


__all__ = [
    "OutfitPickerError",
    "InvalidInputError",
    "CategoryNotFoundError",
    "NoOutfitsAvailableError",
    "FileSystemError",
    "PersistenceError",
    "ConfigurationNotFoundError",
    "WearOutcome",
    "map_errors",
]
