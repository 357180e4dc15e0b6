"""Persisted worn-state models.

Both models are frozen; every mutation helper returns a new instance so a
loaded cache can be shared freely while a caller builds the next version.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Dict, FrozenSet, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_serializer

CACHE_VERSION = 1


def _now() -> datetime:
    return datetime.now(timezone.utc)


class CategoryWornState(BaseModel):
    """Worn outfits recorded for a single category.

    Attributes:
        worn_file_names: File names worn during the current rotation.
        total_count: Last known number of outfits in the category. This value is
            authoritative for completion math even if files drift on disk.
        last_updated: Timestamp of the last mutation.
    """

    model_config = ConfigDict(frozen=True)

    worn_file_names: FrozenSet[str] = Field(default_factory=frozenset)
    total_count: int = 0
    last_updated: datetime = Field(default_factory=_now)

    @field_serializer("worn_file_names")
    def _serialize_worn(self, value: FrozenSet[str]) -> List[str]:
        return sorted(value)

    @property
    def worn_count(self) -> int:
        """Return the number of worn outfits."""
        return len(self.worn_file_names)

    @property
    def remaining(self) -> int:
        """Return the number of unworn outfits, never below zero."""
        return max(0, self.total_count - self.worn_count)

    @property
    def progress(self) -> float:
        """Return the share of the rotation already worn."""
        if self.total_count <= 0:
            return 1.0
        return self.worn_count / self.total_count

    @property
    def is_complete(self) -> bool:
        """Return True once every known outfit has been worn."""
        return self.worn_count >= self.total_count

    def is_worn(self, file_name: str) -> bool:
        return file_name in self.worn_file_names

    def adding(self, file_name: str) -> "CategoryWornState":
        """Return a state with ``file_name`` marked worn.

        Adding a name that is already worn returns ``self`` unchanged.
        """

        if file_name in self.worn_file_names:
            return self
        return self.model_copy(
            update={
                "worn_file_names": self.worn_file_names | {file_name},
                "last_updated": _now(),
            }
        )

    def reset(self) -> "CategoryWornState":
        """Return an empty rotation that keeps the known total."""
        return CategoryWornState(total_count=self.total_count)

    def with_total(self, total_count: int) -> "CategoryWornState":
        """Return a state whose known total is ``total_count``."""
        if total_count == self.total_count:
            return self
        return self.model_copy(update={"total_count": total_count})


class RotationCache(BaseModel):
    """Aggregate worn-state for every category under a root.

    Attributes:
        categories: Mapping of category path to its worn state.
        version: Schema version of the persisted payload.
        created_at: Creation timestamp of the aggregate.
    """

    model_config = ConfigDict(frozen=True)

    categories: Dict[str, CategoryWornState] = Field(default_factory=dict)
    version: int = CACHE_VERSION
    created_at: datetime = Field(default_factory=_now)

    def get(self, category_path: str) -> Optional[CategoryWornState]:
        return self.categories.get(category_path)

    def worn_names(self, category_path: str) -> FrozenSet[str]:
        """Return the worn file names recorded for ``category_path``."""
        state = self.categories.get(category_path)
        return state.worn_file_names if state is not None else frozenset()

    def updating(self, category_path: str, state: CategoryWornState) -> "RotationCache":
        """Return a cache with ``category_path`` replaced by ``state``."""
        categories = dict(self.categories)
        categories[category_path] = state
        return self.model_copy(update={"categories": categories})

    def removing(self, category_path: str) -> "RotationCache":
        """Return a cache without an entry for ``category_path``."""
        if category_path not in self.categories:
            return self
        categories = {
            path: state for path, state in self.categories.items() if path != category_path
        }
        return self.model_copy(update={"categories": categories})

    def resetting(self, category_path: str) -> Optional["RotationCache"]:
        """Return a cache with one category reset, or None if it is unknown."""
        state = self.categories.get(category_path)
        if state is None:
            return None
        return self.updating(category_path, state.reset())

    def reset_all(self) -> "RotationCache":
        """Return a cache with every category reset but still tracked."""
        categories = {path: state.reset() for path, state in self.categories.items()}
        return self.model_copy(update={"categories": categories})


__all__ = ["CACHE_VERSION", "CategoryWornState", "RotationCache"]
