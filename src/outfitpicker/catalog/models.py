"""Value types describing categories and outfits discovered on disk."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path


@dataclass(frozen=True, slots=True)
class Category:
    """A category directory beneath the configured root.

    Attributes:
        name: Directory name; identifies the category within one root.
        path: Full filesystem path to the directory.
    """

    name: str
    path: str

    def __str__(self) -> str:
        return self.name


@dataclass(frozen=True, slots=True)
class Item:
    """A single outfit file within a category.

    Attributes:
        file_name: Name of the outfit file.
        category: Category that contains the file.
    """

    file_name: str
    category: Category

    @property
    def key(self) -> tuple[str, str]:
        """Return the identity of the outfit as ``(category name, file name)``."""
        return (self.category.name, self.file_name)

    @property
    def path(self) -> Path:
        """Return the full filesystem path to the outfit file."""
        return Path(self.category.path) / self.file_name

    def __str__(self) -> str:
        return f"{self.file_name} in {self.category.name}"


class CategoryState(str, Enum):
    """Classification of a category directory produced by a scan."""

    HAS_OUTFITS = "has_outfits"
    EMPTY = "empty"
    NO_AVATAR_FILES = "no_avatar_files"
    USER_EXCLUDED = "user_excluded"


@dataclass(frozen=True, slots=True)
class CategoryInfo:
    """Scan result for one category directory.

    Attributes:
        category: Category the information describes.
        state: Classification of the directory contents.
        outfit_count: Number of qualifying outfit files (0 when excluded).
    """

    category: Category
    state: CategoryState
    outfit_count: int

    @property
    def has_outfits(self) -> bool:
        return self.state is CategoryState.HAS_OUTFITS


__all__ = ["Category", "Item", "CategoryState", "CategoryInfo"]
