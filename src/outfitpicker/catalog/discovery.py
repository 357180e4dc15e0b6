"""Category and outfit discovery."""

from __future__ import annotations

import logging
import os
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import AbstractSet

from outfitpicker import rules
from outfitpicker.errors import map_errors

from .cache import ScanCache
from .models import Category, CategoryInfo, CategoryState

LOGGER = logging.getLogger(__name__)


class CategoryScanner:
    """Discover category directories and the outfit files inside them.

    Category directories are inspected in parallel, one task per directory, on
    a thread pool. Results are memoized in a :class:`ScanCache` until it is
    invalidated.
    """

    def __init__(self, cache: ScanCache | None = None, *, max_workers: int | None = None) -> None:
        """Initialize the scanner.

        Args:
            cache: Shared scan cache; a private one is created when omitted.
            max_workers: Upper bound on concurrent directory listings.
        """
        self.cache = cache if cache is not None else ScanCache()
        self.max_workers = max_workers

    def scan_categories(
        self,
        root: str | Path,
        excluded: AbstractSet[str] = frozenset(),
    ) -> list[CategoryInfo]:
        """Return one :class:`CategoryInfo` per immediate subdirectory of ``root``.

        Args:
            root: Directory whose subdirectories are categories.
            excluded: Category names to report as user excluded without scanning.

        Returns:
            list[CategoryInfo]: Category information sorted by category name.

        Raises:
            FileSystemError: If the root or any category cannot be listed. No
                partial category list is returned or cached in that case.
        """
        root_key = str(root)
        cached = self.cache.get_categories(root_key)
        if cached is not None:
            LOGGER.debug("Using cached category scan for %s.", root_key)
            return cached

        with map_errors():
            directories = self._list_directories(Path(root))
            if directories:
                workers = self.max_workers or min(32, len(directories))
                with ThreadPoolExecutor(max_workers=workers) as pool:
                    infos = list(
                        pool.map(lambda path: self._inspect_category(path, excluded), directories)
                    )
            else:
                infos = []

        infos.sort(key=lambda info: info.category.name)
        self.cache.set_categories(root_key, infos)
        LOGGER.debug("Scanned %d categories under %s.", len(infos), root_key)
        return infos

    def get_items(self, category_path: str | Path) -> list[str]:
        """Return the sorted outfit file names inside ``category_path``.

        Raises:
            FileSystemError: If the directory cannot be listed.
        """
        path_key = str(category_path)
        cached = self.cache.get_items(path_key)
        if cached is not None:
            return cached

        with map_errors():
            outfits, _ = self._list_files(Path(category_path))

        self.cache.set_items(path_key, outfits)
        return outfits

    # Internal helpers -------------------------------------------------

    def _list_directories(self, root: Path) -> list[Path]:
        with os.scandir(root) as entries:
            return [Path(entry.path) for entry in entries if entry.is_dir()]

    def _list_files(self, directory: Path) -> tuple[list[str], int]:
        """Return sorted outfit names and the count of all non-directory entries."""
        outfits: list[str] = []
        other_files = 0
        with os.scandir(directory) as entries:
            for entry in entries:
                if entry.is_dir():
                    continue
                other_files += 1
                if rules.is_outfit_file(entry.name):
                    outfits.append(entry.name)
        outfits.sort()
        return outfits, other_files

    def _inspect_category(self, directory: Path, excluded: AbstractSet[str]) -> CategoryInfo:
        category = Category(name=directory.name, path=str(directory))
        if category.name in excluded:
            return CategoryInfo(category=category, state=CategoryState.USER_EXCLUDED, outfit_count=0)

        outfits, other_files = self._list_files(directory)
        self.cache.set_items(category.path, outfits)
        return CategoryInfo(
            category=category,
            state=rules.classify_directory(len(outfits), other_files),
            outfit_count=len(outfits),
        )


__all__ = ["CategoryScanner"]
