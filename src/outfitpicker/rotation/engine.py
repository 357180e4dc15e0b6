"""Outfit selection engine.

The engine combines scan results with the persisted rotation cache. Every
public operation loads configuration and the cache once, works on immutable
copies, and writes the whole cache back. There is no lock across calls:
callers keep at most one mutating operation in flight per rotation cache.
"""

from __future__ import annotations

import logging
import random
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path
from typing import Iterable, Optional

from outfitpicker import rules
from outfitpicker.catalog.discovery import CategoryScanner
from outfitpicker.catalog.models import Category, CategoryInfo, Item
from outfitpicker.config import (
    ConfigManager,
    InvalidConfigValueError,
    OutfitPickerConfig,
    validate_config,
)
from outfitpicker.errors import (
    CategoryNotFoundError,
    ConfigurationNotFoundError,
    InvalidInputError,
    NoOutfitsAvailableError,
    WearOutcome,
    map_errors,
)
from outfitpicker.state import CategoryWornState, RotationCache, RotationRepository

from .models import RotationProgress

LOGGER = logging.getLogger(__name__)


class OutfitPicker:
    """Pick unworn outfits and track rotations across categories."""

    def __init__(
        self,
        config_manager: ConfigManager | None = None,
        repository: RotationRepository | None = None,
        scanner: CategoryScanner | None = None,
        *,
        rng: random.Random | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            config_manager: Source of the outfit root and excluded categories.
            repository: Persistence service for the rotation cache.
            scanner: Category scanner, usually backed by a shared scan cache.
            rng: Random generator used for every draw.
        """
        self._config_manager = config_manager or ConfigManager()
        self._repository = repository or RotationRepository()
        self._scanner = scanner or CategoryScanner()
        self._random = rng or random.Random()

    # ------------------------------------------------------------------ #
    # Factories                                                          #
    # ------------------------------------------------------------------ #

    @classmethod
    def create(
        cls,
        root: str | Path,
        *,
        excluded: Iterable[str] = (),
        language: str = "en",
        config_manager: ConfigManager | None = None,
        repository: RotationRepository | None = None,
        scanner: CategoryScanner | None = None,
        rng: random.Random | None = None,
    ) -> "OutfitPicker":
        """Save a configuration for ``root`` and return a picker using it.

        Raises:
            InvalidInputError: If the root or language is invalid.
            PersistenceError: If the configuration cannot be written.
        """
        try:
            config = validate_config(
                {"root": str(root), "language": language, "excluded_categories": list(excluded)}
            )
        except InvalidConfigValueError as exc:
            raise InvalidInputError(str(exc)) from exc

        manager = config_manager or ConfigManager()
        with map_errors():
            manager.save(config)
        return cls(manager, repository, scanner, rng=rng)

    @classmethod
    def from_existing_config(
        cls,
        config_manager: ConfigManager | None = None,
        repository: RotationRepository | None = None,
        scanner: CategoryScanner | None = None,
        *,
        rng: random.Random | None = None,
    ) -> "OutfitPicker":
        """Return a picker for an already configured root.

        Raises:
            ConfigurationNotFoundError: If no root has been configured.
        """
        picker = cls(config_manager, repository, scanner, rng=rng)
        with map_errors():
            picker._load_config()
        return picker

    # ------------------------------------------------------------------ #
    # Selection                                                          #
    # ------------------------------------------------------------------ #

    def pick_from_category(self, category_name: str) -> Optional[Item]:
        """Return a random unworn outfit from one category.

        A category whose rotation is already complete, or whose unworn pool has
        drifted empty, is reset first and drawn from in full.

        Args:
            category_name: Name of the category directory.

        Returns:
            Optional[Item]: Drawn outfit, or None when the category has no outfits.

        Raises:
            InvalidInputError: If ``category_name`` is blank.
            CategoryNotFoundError: If the category directory does not exist.
        """
        pool = self.available_pool(category_name)
        if not pool:
            return None
        return self._random.choice(pool)

    def pick_across_categories(self) -> Optional[Item]:
        """Return a random unworn outfit from any selectable category.

        A category is drawn first with equal weight, then an outfit within it.
        Nothing is reset by this operation.

        Returns:
            Optional[Item]: Drawn outfit, or None when every pool is empty.
        """
        pools = self.available_pools()
        if not pools:
            return None
        category = self._random.choice(sorted(pools, key=lambda entry: entry.name))
        return self._random.choice(pools[category])

    def available_pool(self, category_name: str) -> list[Item]:
        """Return the drawable outfits of one category, applying drift recovery.

        Raises:
            InvalidInputError: If ``category_name`` is blank.
            CategoryNotFoundError: If the category directory does not exist.
        """
        rules.validate_category_name(category_name)
        with map_errors():
            config = self._load_config()
            cache = self._repository.load_or_new()
            category = self._require_category(config, category_name)
            files = self._scanner.get_items(category.path)
            if not files:
                return []
            names = self._recover_pool(category, files, cache)
        return [Item(file_name=name, category=category) for name in names]

    def available_pools(self) -> dict[Category, list[Item]]:
        """Return the unworn outfits of every selectable category.

        The rotation cache is read once and pools are computed concurrently.
        Categories whose pool is empty are omitted.
        """
        with map_errors():
            config = self._load_config()
            cache = self._repository.load_or_new()
            infos = self._scan(config)
            categories = [info.category for info in infos if info.has_outfits]
            if not categories:
                return {}

            def _pool(category: Category) -> tuple[Category, list[str]]:
                files = self._scanner.get_items(category.path)
                return category, rules.available_pool(files, cache.worn_names(category.path))

            workers = self._scanner.max_workers or min(32, len(categories))
            with ThreadPoolExecutor(max_workers=workers) as executor:
                results = list(executor.map(_pool, categories))

        return {
            category: [Item(file_name=name, category=category) for name in names]
            for category, names in results
            if names
        }

    # ------------------------------------------------------------------ #
    # Mutations                                                          #
    # ------------------------------------------------------------------ #

    def mark_worn(self, item: Item) -> WearOutcome:
        """Record ``item`` as worn.

        When the wear completes the category's rotation, a second write resets
        the category and :attr:`WearOutcome.ROTATION_COMPLETED` is returned.
        The wear itself is still a success in that case.

        Raises:
            InvalidInputError: If the file or category name is blank.
            CategoryNotFoundError: If the category directory does not exist.
            NoOutfitsAvailableError: If the file is not among the category's outfits.
        """
        rules.validate_item(item)
        with map_errors():
            config = self._load_config()
            cache = self._repository.load_or_new()
            category = self._require_category(config, item.category.name)
            files = self._scanner.get_items(category.path)
            if item.file_name not in files:
                raise NoOutfitsAvailableError(f"{item} is not available.")

            state = cache.get(category.path) or CategoryWornState(total_count=len(files))
            if state.is_worn(item.file_name):
                return WearOutcome.ALREADY_WORN

            state = state.with_total(len(files)).adding(item.file_name)
            self._repository.save(cache.updating(category.path, state))
            LOGGER.info("Marked %s as worn.", item)

            if rules.should_reset(state.worn_count, len(files)):
                self._repository.save(cache.updating(category.path, state.reset()))
                LOGGER.info("Rotation completed for %s; category reset.", category.name)
                return WearOutcome.ROTATION_COMPLETED
        return WearOutcome.RECORDED

    def reset_category(self, category_name: str) -> None:
        """Drop the persisted rotation entry of one category."""
        rules.validate_category_name(category_name)
        with map_errors():
            config = self._load_config()
            cache = self._repository.load_or_new()
            category = self._category(config, category_name)
            self._repository.save(cache.removing(category.path))
        LOGGER.info("Reset rotation for %s.", category_name)

    def reset_all(self) -> None:
        """Replace the persisted rotation cache with an empty one."""
        with map_errors():
            self._load_config()
            self._repository.save(RotationCache())
        LOGGER.info("Reset rotation for all categories.")

    # ------------------------------------------------------------------ #
    # Queries                                                            #
    # ------------------------------------------------------------------ #

    def get_category_info(self) -> list[CategoryInfo]:
        """Return scan information for every category, excluded ones included."""
        with map_errors():
            return self._scan(self._load_config())

    def get_categories(self) -> list[Category]:
        """Return the categories that currently contain outfits."""
        return [info.category for info in self.get_category_info() if info.has_outfits]

    def list_items(self, category_name: str) -> list[Item]:
        """Return every outfit in a category, sorted by file name."""
        rules.validate_category_name(category_name)
        with map_errors():
            category = self._require_category(self._load_config(), category_name)
            files = self._scanner.get_items(category.path)
        return [Item(file_name=name, category=category) for name in files]

    def available_items(self, category_name: str) -> list[Item]:
        """Return the unworn outfits of a category without resetting anything."""
        with map_errors():
            cache = self._repository.load_or_new()
        items = self.list_items(category_name)
        if not items:
            return []
        return rules.available_pool(items, cache.worn_names(items[0].category.path))

    def worn_items(self, category_name: str) -> list[Item]:
        """Return the worn outfits of a category that still exist on disk."""
        with map_errors():
            cache = self._repository.load_or_new()
        items = self.list_items(category_name)
        if not items:
            return []
        worn_names = cache.worn_names(items[0].category.path)
        return [item for item in items if item.file_name in worn_names]

    def is_worn(self, item: Item) -> bool:
        rules.validate_item(item)
        with map_errors():
            category = self._category(self._load_config(), item.category.name)
            return item.file_name in self._repository.load_or_new().worn_names(category.path)

    def worn_by_category(self) -> dict[str, list[str]]:
        """Return worn file names per category name, omitting empty rotations."""
        with map_errors():
            cache = self._repository.load_or_new()
        return {
            Path(path).name: sorted(state.worn_file_names)
            for path, state in sorted(cache.categories.items())
            if state.worn_file_names
        }

    def progress(self, category_name: str) -> RotationProgress:
        """Return rotation progress for a category that contains outfits.

        Raises:
            CategoryNotFoundError: If the category has no outfits or does not exist.
        """
        rules.validate_category_name(category_name)
        for category in self.get_categories():
            if category.name == category_name:
                with map_errors():
                    return self._progress(category, self._repository.load_or_new())
        raise CategoryNotFoundError(f"Category '{category_name}' not found.")

    def all_progress(self) -> dict[str, RotationProgress]:
        """Return rotation progress for every category that contains outfits."""
        categories = self.get_categories()
        with map_errors():
            cache = self._repository.load_or_new()
            return {category.name: self._progress(category, cache) for category in categories}

    # ------------------------------------------------------------------ #
    # Configuration                                                      #
    # ------------------------------------------------------------------ #

    def root_directory(self) -> Path:
        with map_errors():
            return self._root(self._load_config())

    def configuration(self) -> OutfitPickerConfig:
        with map_errors():
            return self._load_config()

    def update_configuration(self, config: OutfitPickerConfig) -> None:
        """Persist ``config`` and drop cached scan results."""
        with map_errors():
            self._config_manager.save(config)
        self._scanner.cache.invalidate()

    def factory_reset(self) -> None:
        """Delete configuration and rotation cache, then drop cached scans."""
        with map_errors():
            self._config_manager.delete()
            self._repository.delete()
        self._scanner.cache.invalidate()
        LOGGER.info("Factory reset completed.")

    # ------------------------------------------------------------------ #
    # Internal helpers                                                   #
    # ------------------------------------------------------------------ #

    def _load_config(self) -> OutfitPickerConfig:
        config = self._config_manager.load()
        if config.root is None:
            raise ConfigurationNotFoundError(
                "No outfit directory configured. Run `outfitpicker init ROOT` first."
            )
        return config

    def _root(self, config: OutfitPickerConfig) -> Path:
        return Path(config.root or "").expanduser()

    def _scan(self, config: OutfitPickerConfig) -> list[CategoryInfo]:
        return self._scanner.scan_categories(str(self._root(config)), config.excluded)

    def _category(self, config: OutfitPickerConfig, category_name: str) -> Category:
        """Return the category named ``category_name`` directly beneath the root.

        The directory need not exist, so entries for deleted categories can
        still be reset.

        Raises:
            CategoryNotFoundError: If the name could point outside the root.
        """
        if category_name in (".", "..") or any(sep in category_name for sep in ("/", "\\")):
            raise CategoryNotFoundError(f"Category '{category_name}' not found.")
        return Category(name=category_name, path=str(self._root(config) / category_name))

    def _require_category(self, config: OutfitPickerConfig, category_name: str) -> Category:
        """Return the scanned category named ``category_name``.

        Raises:
            CategoryNotFoundError: If the current scan has no such category.
        """
        for info in self._scan(config):
            if info.category.name == category_name:
                return info.category
        raise CategoryNotFoundError(f"Category '{category_name}' not found.")

    def _recover_pool(
        self,
        category: Category,
        files: list[str],
        cache: RotationCache,
    ) -> list[str]:
        """Return the drawable file names, resetting a drifted or finished rotation."""
        worn = cache.worn_names(category.path)
        pool = rules.available_pool(files, worn)
        if pool and not rules.should_reset(len(worn), len(files)):
            return pool

        state = cache.get(category.path) or CategoryWornState(total_count=len(files))
        self._repository.save(cache.updating(category.path, state.with_total(len(files)).reset()))
        LOGGER.info("Rotation for %s was exhausted; starting a new cycle.", category.name)
        return list(files)

    def _progress(self, category: Category, cache: RotationCache) -> RotationProgress:
        files = self._scanner.get_items(category.path)
        worn = cache.worn_names(category.path)
        return RotationProgress(
            category=category,
            worn_count=sum(1 for name in files if name in worn),
            total_count=len(files),
        )


__all__ = ["OutfitPicker"]
