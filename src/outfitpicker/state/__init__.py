"""Rotation cache persistence for the outfit picker."""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from .errors import MissingStateError, StateError
from .models import CACHE_VERSION, CategoryWornState, RotationCache

LOGGER = logging.getLogger(__name__)

DEFAULT_STATE_DIR = Path("~/.outfitpicker")
STATE_FILENAME = "rotation.json"


class RotationRepository:
    """Load and persist the rotation cache as a single JSON document."""

    def __init__(self, state_dir: Path | None = None) -> None:
        """Initialize the repository with an optional state directory.

        Args:
            state_dir: Directory that stores the rotation cache file.
        """
        self._state_dir = (state_dir or DEFAULT_STATE_DIR).expanduser()

    @property
    def state_path(self) -> Path:
        """Return the path of the rotation cache file.

        Returns:
            Path: Location of ``rotation.json``.
        """
        return self._state_dir / STATE_FILENAME

    def load(self) -> RotationCache:
        """Load the persisted rotation cache.

        Returns:
            RotationCache: Deserialized cache model.

        Raises:
            MissingStateError: If no cache file is present.
            StateError: If stored data cannot be read or parsed.
        """
        state_path = self.state_path
        if not state_path.exists():
            raise MissingStateError(f"No rotation cache found at {state_path}")

        try:
            data = json.loads(state_path.read_text(encoding="utf-8"))
        except json.JSONDecodeError as exc:
            raise StateError(f"Invalid rotation cache data: {exc}") from exc
        except OSError as exc:
            raise StateError(f"Unable to read rotation cache: {exc}") from exc

        try:
            return RotationCache.model_validate(data)
        except ValidationError as exc:
            raise StateError(f"Invalid rotation cache data: {exc}") from exc

    def load_or_new(self) -> RotationCache:
        """Load the rotation cache, returning an empty one when none exists.

        Returns:
            RotationCache: Persisted cache or a fresh aggregate.
        """
        try:
            return self.load()
        except MissingStateError:
            return RotationCache()

    def save(self, cache: RotationCache) -> None:
        """Persist the rotation cache, replacing the previous file atomically.

        Args:
            cache: Cache model to serialize to disk.

        Raises:
            StateError: If the file cannot be written.
        """
        payload = json.dumps(cache.model_dump(mode="json"), indent=2, sort_keys=False)
        try:
            self._state_dir.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                dir=self._state_dir, prefix=".rotation-", suffix=".tmp"
            )
            try:
                with os.fdopen(fd, "w", encoding="utf-8") as handle:
                    handle.write(payload)
                os.replace(tmp_name, self.state_path)
            except BaseException:
                Path(tmp_name).unlink(missing_ok=True)
                raise
        except OSError as exc:
            raise StateError(f"Unable to write rotation cache: {exc}") from exc
        LOGGER.debug("Saved rotation cache with %d categories.", len(cache.categories))

    def delete(self) -> None:
        """Remove the rotation cache file if present.

        Raises:
            StateError: If the file exists but cannot be removed.
        """
        try:
            self.state_path.unlink(missing_ok=True)
        except OSError as exc:
            raise StateError(f"Unable to delete rotation cache: {exc}") from exc


__all__ = [
    "RotationRepository",
    "DEFAULT_STATE_DIR",
    "STATE_FILENAME",
    "CACHE_VERSION",
    "CategoryWornState",
    "RotationCache",
    "StateError",
    "MissingStateError",
]
