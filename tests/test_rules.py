"""Tests for the pure rotation rules."""

from __future__ import annotations

import pytest

from outfitpicker import rules
from outfitpicker.catalog.models import Category, CategoryState, Item
from outfitpicker.errors import InvalidInputError


@pytest.mark.parametrize(
    ("file_name", "expected"),
    [
        ("look.avatar", True),
        ("LOOK.AVATAR", True),
        ("look.Avatar", True),
        ("look.png", False),
        ("avatar", False),
        ("look.avatar.bak", False),
    ],
)
def test_is_outfit_file(file_name: str, expected: bool) -> None:
    assert rules.is_outfit_file(file_name) is expected


def test_progress_of_empty_category_is_complete() -> None:
    assert rules.progress(0, 0) == 1.0
    assert rules.is_complete(0, 0)
    assert rules.should_reset(0, 0)


def test_progress_counts_worn_share() -> None:
    assert rules.progress(1, 4) == pytest.approx(0.25)
    assert not rules.is_complete(3, 4)
    assert rules.is_complete(5, 4)
    assert rules.status_text(1, 4) == "1 of 4 outfits worn"


def test_available_pool_keeps_order_for_names_and_items() -> None:
    category = Category(name="casual", path="/outfits/casual")
    names = ["a.avatar", "b.avatar", "c.avatar"]
    items = [Item(file_name=name, category=category) for name in names]
    worn = frozenset({"b.avatar", "gone.avatar"})

    assert rules.available_pool(names, worn) == ["a.avatar", "c.avatar"]
    assert [item.file_name for item in rules.available_pool(items, worn)] == [
        "a.avatar",
        "c.avatar",
    ]
    assert rules.available_pool(names, frozenset(names)) == []


@pytest.mark.parametrize(
    ("outfits", "others", "state"),
    [
        (2, 3, CategoryState.HAS_OUTFITS),
        (0, 1, CategoryState.NO_AVATAR_FILES),
        (0, 0, CategoryState.EMPTY),
    ],
)
def test_classify_directory(outfits: int, others: int, state: CategoryState) -> None:
    assert rules.classify_directory(outfits, others) is state


@pytest.mark.parametrize("name", ["", "   "])
def test_blank_category_name_is_rejected(name: str) -> None:
    with pytest.raises(InvalidInputError):
        rules.validate_category_name(name)


def test_blank_item_names_are_rejected() -> None:
    category = Category(name="casual", path="/outfits/casual")

    with pytest.raises(InvalidInputError):
        rules.validate_item(Item(file_name=" ", category=category))
    with pytest.raises(InvalidInputError):
        rules.validate_item(Item(file_name="a.avatar", category=Category(name="", path="/x")))

    rules.validate_item(Item(file_name="a.avatar", category=category))
