"""Rotation rules shared by the scanner, the engine, and the session layer.

Everything here is a pure function over counts, names, and item lists.
"""

from __future__ import annotations

from typing import AbstractSet, Iterable, TypeVar

from outfitpicker.catalog.models import CategoryState, Item
from outfitpicker.errors import InvalidInputError

OUTFIT_FILE_EXTENSION = "avatar"

_T = TypeVar("_T", Item, str)


def is_outfit_file(file_name: str) -> bool:
    """Return True when ``file_name`` carries the outfit extension (any case)."""
    return file_name.lower().endswith(f".{OUTFIT_FILE_EXTENSION}")


def progress(worn: int, total: int) -> float:
    """Return the worn share of a rotation.

    An empty category reports ``1.0`` so it never blocks an "is anything left"
    check across categories.
    """
    if total <= 0:
        return 1.0
    return worn / total


def is_complete(worn: int, total: int) -> bool:
    """Return True once ``worn`` reaches ``total``; extra worn names count too."""
    return worn >= total


def should_reset(worn: int, total: int) -> bool:
    """Return True when a rotation must restart.

    Evaluated after a new wear has been recorded so the outfit that completes
    the cycle belongs to that cycle.
    """
    return is_complete(worn, total)


def status_text(worn: int, total: int) -> str:
    return f"{worn} of {total} outfits worn"


def available_pool(items: Iterable[_T], worn_names: AbstractSet[str]) -> list[_T]:
    """Return ``items`` whose file name has not been worn.

    Accepts either :class:`Item` instances or bare file names and keeps the
    input order.
    """
    pool: list[_T] = []
    for item in items:
        name = item.file_name if isinstance(item, Item) else item
        if name not in worn_names:
            pool.append(item)
    return pool


def classify_directory(outfit_count: int, other_file_count: int) -> CategoryState:
    """Return the category state for a scanned directory.

    Args:
        outfit_count: Number of qualifying outfit files.
        other_file_count: Number of non-directory entries of any kind.

    Returns:
        CategoryState: ``HAS_OUTFITS``, ``NO_AVATAR_FILES``, or ``EMPTY``.
    """
    if outfit_count > 0:
        return CategoryState.HAS_OUTFITS
    if other_file_count > 0:
        return CategoryState.NO_AVATAR_FILES
    return CategoryState.EMPTY


def validate_category_name(name: str) -> None:
    """Raise :class:`InvalidInputError` for a blank category name."""
    if not name or not name.strip():
        raise InvalidInputError("Category name cannot be empty")


def validate_item(item: Item) -> None:
    """Raise :class:`InvalidInputError` for a blank file or category name."""
    if not item.file_name or not item.file_name.strip():
        raise InvalidInputError("Outfit filename cannot be empty")
    validate_category_name(item.category.name)


__all__ = [
    "OUTFIT_FILE_EXTENSION",
    "is_outfit_file",
    "progress",
    "is_complete",
    "should_reset",
    "status_text",
    "available_pool",
    "classify_directory",
    "validate_category_name",
    "validate_item",
]
