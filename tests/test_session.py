"""Session-level unique draw tests."""

from __future__ import annotations

import random
from pathlib import Path

from outfitpicker.catalog.models import Category, Item
from outfitpicker.config import ConfigManager
from outfitpicker.errors import WearOutcome
from outfitpicker.rotation import OutfitPicker, OutfitSession
from outfitpicker.state import RotationRepository


def _session(tmp_path: Path, layout: dict[str, list[str]], *, seed: int = 0) -> OutfitSession:
    """Return a session over a freshly created outfit tree.

    Args:
        tmp_path: Temporary directory provided by pytest.
        layout: Mapping of category name to outfit file names.
        seed: Seed shared by the picker and session generators.

    Returns:
        OutfitSession: Session wrapping a configured picker.
    """
    root = tmp_path / "outfits"
    for category, files in layout.items():
        (root / category).mkdir(parents=True)
        for file_name in files:
            (root / category / file_name).write_text(file_name)
    picker = OutfitPicker.create(
        root,
        config_manager=ConfigManager(tmp_path / "config.yaml", env={}),
        repository=RotationRepository(tmp_path / "state"),
        rng=random.Random(seed),
    )
    return OutfitSession(picker, rng=random.Random(seed))


def test_draws_are_unique_until_pool_is_exhausted(tmp_path: Path) -> None:
    session = _session(
        tmp_path,
        {"casual": ["a.avatar", "b.avatar", "c.avatar"], "formal": ["d.avatar", "e.avatar"]},
    )

    keys = []
    for _ in range(5):
        item = session.next_unique()
        assert item is not None
        keys.append(item.key)

    assert len(set(keys)) == 5
    assert session.shown_count() == 5


def test_exhausted_session_starts_over(tmp_path: Path) -> None:
    """With two outfits, the third draw repeats one of the first two.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    session = _session(tmp_path, {"casual": ["a.avatar", "b.avatar"]}, seed=11)

    first = session.next_unique("casual")
    second = session.next_unique("casual")
    third = session.next_unique("casual")

    assert first is not None and second is not None and third is not None
    assert first.file_name != second.file_name
    assert third.file_name in {first.file_name, second.file_name}
    assert session.shown_count("casual") == 1


def test_category_scope_is_independent_of_global_scope(tmp_path: Path) -> None:
    session = _session(tmp_path, {"casual": ["a.avatar", "b.avatar"], "formal": ["c.avatar"]})

    item = session.next_unique("formal")

    assert item is not None
    assert item.file_name == "c.avatar"
    assert session.shown_count("formal") == 1
    assert session.shown_count() == 0


def test_mark_worn_clears_shown_sets(tmp_path: Path) -> None:
    session = _session(tmp_path, {"casual": ["a.avatar", "b.avatar", "c.avatar"]})
    session.next_unique()
    session.next_unique("casual")
    category = Category(name="casual", path=str(tmp_path / "outfits" / "casual"))

    outcome = session.mark_worn(Item(file_name="a.avatar", category=category))

    assert outcome is WearOutcome.RECORDED
    assert session.shown_count() == 0
    assert session.shown_count("casual") == 0
    for _ in range(4):
        item = session.next_unique("casual")
        assert item is not None
        assert item.file_name != "a.avatar"


def test_manual_session_resets(tmp_path: Path) -> None:
    session = _session(tmp_path, {"casual": ["a.avatar", "b.avatar"]})
    session.next_unique()
    session.next_unique("casual")

    session.reset_global_session()
    assert session.shown_count() == 0
    assert session.shown_count("casual") == 1

    session.reset_category_session("casual")
    assert session.shown_count("casual") == 0


def test_empty_root_yields_nothing(tmp_path: Path) -> None:
    session = _session(tmp_path, {"empty": []})

    assert session.next_unique() is None
    assert session.next_unique("empty") is None


def test_global_session_starts_over_after_two_outfits(tmp_path: Path) -> None:
    """Across categories, the third draw over two outfits repeats one of them.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    session = _session(tmp_path, {"casual": ["a.avatar"], "formal": ["b.avatar"]}, seed=5)

    first = session.next_unique()
    second = session.next_unique()
    assert session.shown_count() == 2
    third = session.next_unique()

    assert first is not None and second is not None and third is not None
    assert first.key != second.key
    assert third.key in {first.key, second.key}
    assert session.shown_count() == 1
