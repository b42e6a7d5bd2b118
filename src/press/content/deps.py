"""Dependency tracker — which pages read which data sources.

Links are derived implicitly: the renderer records every data name a page
reads, and the tracker keeps a reverse index from data name to pages. When a
data source changes or disappears, the pages found in that index (as captured
by their previous render) are marked dirty.
"""

from __future__ import annotations

from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from press.content.page import Page, PageStore


class DependencyTracker:
    """Reverse index from data name to dependent page source paths.

    Args:
        pages: The page store the recorded source paths refer to.

    """

    __slots__ = ("_dependents", "_pages")

    def __init__(self, pages: PageStore) -> None:
        self._pages = pages
        self._dependents: dict[str, set[Path]] = {}

    def record(self, page: Page, names: Iterable[str]) -> None:
        """Replace the recorded dependencies of ``page`` with ``names``."""
        self._unlink(page)
        page.data_dependencies = set(names)
        for name in page.data_dependencies:
            self._dependents.setdefault(name, set()).add(page.source_path)

    def forget(self, page: Page) -> None:
        """Drop a removed page from the index."""
        self._unlink(page)

    def dependents(self, name: str) -> list[Page]:
        """Pages currently in the store whose last render read ``name``."""
        result = []
        for source_path in sorted(self._dependents.get(name, ())):
            page = self._pages.get(source_path)
            if page is not None and name in page.data_dependencies:
                result.append(page)
        return result

    def invalidate(self, name: str) -> list[Page]:
        """Mark every dependent of ``name`` dirty and return them."""
        pages = self.dependents(name)
        for page in pages:
            page.dirty = True
            page.metadata["dirty"] = True
        return pages

    def clear(self) -> None:
        self._dependents.clear()

    def _unlink(self, page: Page) -> None:
        for name in page.data_dependencies:
            linked = self._dependents.get(name)
            if linked is None:
                continue
            linked.discard(page.source_path)
            if not linked:
                del self._dependents[name]
