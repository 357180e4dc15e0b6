"""Category catalog: scan models and memoization."""

from .cache import ScanCache
from .models import Category, CategoryInfo, CategoryState, Item

__all__ = ["ScanCache", "Category", "CategoryInfo", "CategoryState", "Item"]
