"""Category scanner and scan cache tests."""

from __future__ import annotations

import threading
from pathlib import Path

import pytest

from outfitpicker.catalog import ScanCache
from outfitpicker.catalog.discovery import CategoryScanner
from outfitpicker.catalog.models import Category, CategoryInfo, CategoryState
from outfitpicker.errors import FileSystemError


def _build_root(tmp_path: Path) -> Path:
    """Create a small outfit tree covering every category state.

    Args:
        tmp_path: Temporary directory provided by pytest.

    Returns:
        Path: Root directory of the tree.
    """
    root = tmp_path / "outfits"
    (root / "casual").mkdir(parents=True)
    (root / "casual" / "b.avatar").write_text("b")
    (root / "casual" / "A.AVATAR").write_text("a")
    (root / "casual" / "notes.txt").write_text("n")
    (root / "casual" / "nested").mkdir()
    (root / "empty").mkdir()
    (root / "empty" / "sub").mkdir()
    (root / "docs").mkdir()
    (root / "docs" / "readme.md").write_text("r")
    (root / "work").mkdir()
    (root / "work" / "suit.avatar").write_text("s")
    (root / "stray.avatar").write_text("ignored")
    return root


def test_scan_classifies_and_sorts_categories(tmp_path: Path) -> None:
    root = _build_root(tmp_path)
    scanner = CategoryScanner()

    infos = scanner.scan_categories(root)

    assert [info.category.name for info in infos] == ["casual", "docs", "empty", "work"]
    states = {info.category.name: info.state for info in infos}
    assert states == {
        "casual": CategoryState.HAS_OUTFITS,
        "docs": CategoryState.NO_AVATAR_FILES,
        "empty": CategoryState.EMPTY,
        "work": CategoryState.HAS_OUTFITS,
    }
    counts = {info.category.name: info.outfit_count for info in infos}
    assert counts["casual"] == 2
    assert infos[0].category.path == str(root / "casual")


def test_get_items_is_sorted_and_case_insensitive(tmp_path: Path) -> None:
    root = _build_root(tmp_path)
    scanner = CategoryScanner()

    assert scanner.get_items(root / "casual") == ["A.AVATAR", "b.avatar"]
    assert scanner.get_items(root / "docs") == []


def test_excluded_category_is_not_listed(tmp_path: Path) -> None:
    """Ensure excluded categories are reported without reading their contents.

    Args:
        tmp_path: Temporary directory provided by pytest.
    """
    root = _build_root(tmp_path)
    listed: list[str] = []

    class RecordingScanner(CategoryScanner):
        def _list_files(self, directory: Path) -> tuple[list[str], int]:
            listed.append(directory.name)
            return super()._list_files(directory)

    infos = RecordingScanner().scan_categories(root, frozenset({"work"}))

    work = next(info for info in infos if info.category.name == "work")
    assert work.state is CategoryState.USER_EXCLUDED
    assert work.outfit_count == 0
    assert not work.has_outfits
    assert "work" not in listed


def test_missing_root_raises_file_system_error(tmp_path: Path) -> None:
    with pytest.raises(FileSystemError):
        CategoryScanner().scan_categories(tmp_path / "missing")


def test_failing_category_aborts_scan_without_caching(tmp_path: Path) -> None:
    root = _build_root(tmp_path)

    class FailingScanner(CategoryScanner):
        def _list_files(self, directory: Path) -> tuple[list[str], int]:
            if directory.name == "docs":
                raise PermissionError("denied")
            return super()._list_files(directory)

    scanner = FailingScanner()

    with pytest.raises(FileSystemError):
        scanner.scan_categories(root)
    assert scanner.cache.get_categories(str(root)) is None


def test_scan_results_are_cached_until_invalidated(tmp_path: Path) -> None:
    root = _build_root(tmp_path)
    scanner = CategoryScanner()

    first = scanner.scan_categories(root)
    (root / "casual" / "c.avatar").write_text("c")
    (root / "formal").mkdir()
    (root / "formal" / "gown.avatar").write_text("g")

    assert scanner.scan_categories(root) == first
    assert scanner.get_items(root / "casual") == ["A.AVATAR", "b.avatar"]

    scanner.cache.invalidate()

    assert [info.category.name for info in scanner.scan_categories(root)] == [
        "casual",
        "docs",
        "empty",
        "formal",
        "work",
    ]
    assert scanner.get_items(root / "casual") == ["A.AVATAR", "b.avatar", "c.avatar"]


def test_scan_cache_returns_copies() -> None:
    cache = ScanCache()
    category = Category(name="casual", path="/outfits/casual")
    cache.set_items(category.path, ["a.avatar"])
    cache.set_categories("/outfits", [CategoryInfo(category, CategoryState.HAS_OUTFITS, 1)])

    items = cache.get_items(category.path)
    assert items is not None
    items.append("b.avatar")

    assert cache.get_items(category.path) == ["a.avatar"]
    assert cache.get_items("/outfits/other") is None
    assert len(cache.get_categories("/outfits") or []) == 1


def test_scan_cache_tolerates_concurrent_writers() -> None:
    cache = ScanCache()

    def _writer(index: int) -> None:
        for step in range(200):
            cache.set_items(f"/outfits/{index}", [f"{step}.avatar"])
            cache.get_items(f"/outfits/{index}")

    threads = [threading.Thread(target=_writer, args=(index,)) for index in range(8)]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    assert all(cache.get_items(f"/outfits/{index}") == ["199.avatar"] for index in range(8))
    cache.invalidate()
    assert cache.get_items("/outfits/0") is None
