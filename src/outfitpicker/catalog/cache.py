"""In-memory memoization of scan results."""

from __future__ import annotations

import threading
from typing import Optional

from .models import CategoryInfo


class ScanCache:
    """Remember scan output per root path and per category path.

    Entries live until :meth:`invalidate` is called. All access goes through a
    single lock because scan worker threads read and write concurrently.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._categories: dict[str, list[CategoryInfo]] = {}
        self._items: dict[str, list[str]] = {}

    def get_categories(self, root: str) -> Optional[list[CategoryInfo]]:
        with self._lock:
            cached = self._categories.get(root)
            return list(cached) if cached is not None else None

    def set_categories(self, root: str, infos: list[CategoryInfo]) -> None:
        with self._lock:
            self._categories[root] = list(infos)

    def get_items(self, category_path: str) -> Optional[list[str]]:
        with self._lock:
            cached = self._items.get(category_path)
            return list(cached) if cached is not None else None

    def set_items(self, category_path: str, file_names: list[str]) -> None:
        with self._lock:
            self._items[category_path] = list(file_names)

    def invalidate(self) -> None:
        """Drop every cached category list and item list."""
        with self._lock:
            self._categories.clear()
            self._items.clear()


__all__ = ["ScanCache"]
