"""Tests for press.content.deps — data-to-page reverse index."""

from __future__ import annotations

from pathlib import Path

from press.content.deps import DependencyTracker
from press.content.page import Page, PageStore, dest_for


def _page(source: str) -> Page:
    path = Path(source)
    page = Page(source_path=path, dest_path=dest_for(path), is_markdown=True)
    page.dirty = False
    page.metadata["dirty"] = False
    return page


class TestDependencyTracker:
    def _setup(self) -> tuple[PageStore, DependencyTracker, Page, Page]:
        index, guide = _page("index.md"), _page("docs/guide.md")
        store = PageStore([index, guide])
        tracker = DependencyTracker(store)
        tracker.record(index, {"site"})
        tracker.record(guide, {"site", "nav"})
        return store, tracker, index, guide

    def test_record_sets_page_dependencies(self) -> None:
        _, _, index, guide = self._setup()
        assert index.data_dependencies == {"site"}
        assert guide.data_dependencies == {"site", "nav"}

    def test_dependents_sorted(self) -> None:
        _, tracker, index, guide = self._setup()
        assert tracker.dependents("site") == [guide, index]
        assert tracker.dependents("nav") == [guide]
        assert tracker.dependents("unknown") == []

    def test_record_replaces_previous_set(self) -> None:
        _, tracker, _, guide = self._setup()
        tracker.record(guide, {"authors"})
        assert tracker.dependents("nav") == []
        assert tracker.dependents("authors") == [guide]

    def test_invalidate_marks_only_dependents(self) -> None:
        _, tracker, index, guide = self._setup()
        dirtied = tracker.invalidate("nav")
        assert dirtied == [guide]
        assert guide.dirty
        assert guide.metadata["dirty"] is True
        assert not index.dirty
        assert index.metadata["dirty"] is False

    def test_forget(self) -> None:
        store, tracker, index, _ = self._setup()
        store.remove(index.source_path)
        tracker.forget(index)
        assert index not in tracker.dependents("site")

    def test_removed_page_not_returned(self) -> None:
        """A page dropped from the store is skipped even before forget()."""
        store, tracker, index, guide = self._setup()
        store.remove(index.source_path)
        assert tracker.dependents("site") == [guide]

    def test_replaced_page_uses_its_own_dependencies(self) -> None:
        """A reloaded page starts with no recorded reads."""
        store, tracker, index, _ = self._setup()
        store.add(_page("index.md"))
        assert [p.source_path for p in tracker.dependents("site")] == [Path("docs/guide.md")]

    def test_clear(self) -> None:
        _, tracker, _, _ = self._setup()
        tracker.clear()
        assert tracker.dependents("site") == []
