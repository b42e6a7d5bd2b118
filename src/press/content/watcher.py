"""File watcher — turns filesystem changes into raw events.

Watches the page and data roots with watchfiles. watchfiles reports adds,
modifications and deletions only, so each debounced batch is folded into
press raw events:

- a path both deleted and added in one batch is a change (atomic saves);
- exactly one deletion plus exactly one addition in a batch is a rename;
- everything else maps one to one.
"""

from __future__ import annotations

import asyncio
from collections.abc import Iterable
from pathlib import Path
from typing import TYPE_CHECKING

from watchfiles import Change, awatch

from press.content.classifier import RawEvent

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from press.config import PressConfig


def fold_changes(raw_changes: Iterable[tuple[Change, str]]) -> list[RawEvent]:
    """Fold one watchfiles batch into raw events, pairing renames."""
    added: set[Path] = set()
    deleted: set[Path] = set()
    modified: set[Path] = set()
    for change, path_str in raw_changes:
        path = Path(path_str)
        if change == Change.added:
            added.add(path)
        elif change == Change.deleted:
            deleted.add(path)
        else:
            modified.add(path)

    # Delete + add of the same path is an editor's atomic save
    resaved = added & deleted
    added -= resaved
    deleted -= resaved
    modified |= resaved

    events: list[RawEvent] = []
    if len(added) == 1 and len(deleted) == 1:
        events.append(RawEvent(kind="renamed", path=added.pop(), old_path=deleted.pop()))

    events.extend(RawEvent(kind="deleted", path=p) for p in sorted(deleted))
    events.extend(RawEvent(kind="added", path=p) for p in sorted(added))
    events.extend(RawEvent(kind="changed", path=p) for p in sorted(modified))
    return events


class SiteWatcher:
    """Watches the page and data roots and yields raw events.

    Runs ``watchfiles.awatch`` on the current event loop; ``stop()`` ends the
    iteration from any coroutine.

    """

    def __init__(self, config: PressConfig) -> None:
        self._config = config
        self._stop_event = asyncio.Event()
        self._running = False

    @property
    def is_running(self) -> bool:
        """Whether ``changes()`` is currently being iterated."""
        return self._running

    def watch_paths(self) -> list[Path]:
        """Existing roots to watch; awatch rejects missing paths."""
        roots = (self._config.src_path, self._config.data_path)
        return [p for p in dict.fromkeys(roots) if p.is_dir()]

    def stop(self) -> None:
        """Signal the watcher to stop after the current batch."""
        self._stop_event.set()

    async def changes(self) -> AsyncIterator[RawEvent]:
        """Async iterator of raw events until ``stop()`` is called."""
        paths = self.watch_paths()
        if not paths:
            return

        self._running = True
        try:
            async for raw_changes in awatch(
                *paths,
                stop_event=self._stop_event,
                debounce=self._config.watch_debounce,
                step=50,
            ):
                for event in fold_changes(raw_changes):
                    yield event
        finally:
            self._running = False
