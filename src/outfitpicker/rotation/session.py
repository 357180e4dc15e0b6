"""Per-run tracking of outfits already shown.

The session layer sits on top of :class:`OutfitPicker` and never writes the
rotation cache. It only remembers what was shown during the current process
so repeated draws do not show the same outfit until the pool is exhausted.
"""

from __future__ import annotations

import logging
import random
import threading
from typing import Optional

from outfitpicker.catalog.models import Item
from outfitpicker.errors import WearOutcome

from .engine import OutfitPicker

LOGGER = logging.getLogger(__name__)


class OutfitSession:
    """Draw outfits without repeats for the lifetime of one run."""

    def __init__(self, picker: OutfitPicker, *, rng: random.Random | None = None) -> None:
        self._picker = picker
        self._random = rng or random.Random()
        self._lock = threading.Lock()
        self._global_shown: set[tuple[str, str]] = set()
        self._category_shown: dict[str, set[str]] = {}

    @property
    def picker(self) -> OutfitPicker:
        return self._picker

    def next_unique(self, category_name: Optional[str] = None) -> Optional[Item]:
        """Return an outfit not yet shown in this run.

        Without ``category_name`` the draw spans every selectable category.
        When every candidate has already been shown, the scope's shown set is
        cleared and the full pool is used again.

        Args:
            category_name: Restrict the draw to one category.

        Returns:
            Optional[Item]: Drawn outfit, or None when nothing is available.
        """
        if category_name is None:
            pool = [item for items in self._picker.available_pools().values() for item in items]
        else:
            pool = self._picker.available_pool(category_name)
        if not pool:
            return None

        with self._lock:
            if category_name is None:
                shown_keys = self._global_shown
                fresh = [item for item in pool if item.key not in shown_keys]
            else:
                shown_names = self._category_shown.setdefault(category_name, set())
                fresh = [item for item in pool if item.file_name not in shown_names]

            if not fresh:
                LOGGER.debug("Session exhausted for %s; starting over.", category_name or "all")
                if category_name is None:
                    self._global_shown.clear()
                else:
                    self._category_shown[category_name].clear()
                fresh = pool

            item = self._random.choice(fresh)
            if category_name is None:
                self._global_shown.add(item.key)
            else:
                self._category_shown[category_name].add(item.file_name)
        return item

    def mark_worn(self, item: Item) -> WearOutcome:
        """Record ``item`` as worn and clear the shown sets it affects."""
        outcome = self._picker.mark_worn(item)
        with self._lock:
            self._global_shown.clear()
            self._category_shown.pop(item.category.name, None)
        return outcome

    def reset_global_session(self) -> None:
        with self._lock:
            self._global_shown.clear()

    def reset_category_session(self, category_name: str) -> None:
        with self._lock:
            self._category_shown.pop(category_name, None)

    def shown_count(self, category_name: Optional[str] = None) -> int:
        """Return how many outfits were shown in the given scope."""
        with self._lock:
            if category_name is None:
                return len(self._global_shown)
            return len(self._category_shown.get(category_name, ()))


__all__ = ["OutfitSession"]
