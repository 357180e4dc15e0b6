"""Read-only rotation views."""

from __future__ import annotations

from dataclasses import dataclass

from outfitpicker import rules
from outfitpicker.catalog.models import Category


@dataclass(frozen=True, slots=True)
class RotationProgress:
    """Rotation progress for one category.

    Attributes:
        category: Category being tracked.
        worn_count: Outfits worn in the current rotation that still exist on disk.
        total_count: Outfits currently present in the category.
    """

    category: Category
    worn_count: int
    total_count: int

    @property
    def progress(self) -> float:
        return rules.progress(self.worn_count, self.total_count)

    @property
    def is_complete(self) -> bool:
        return rules.is_complete(self.worn_count, self.total_count)

    @property
    def available_count(self) -> int:
        """Return how many outfits can still be drawn."""
        if self.is_complete:
            return self.total_count
        return max(0, self.total_count - self.worn_count)

    @property
    def status_text(self) -> str:
        return rules.status_text(self.worn_count, self.total_count)


__all__ = ["RotationProgress"]
