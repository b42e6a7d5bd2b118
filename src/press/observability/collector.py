"""Build collector — typed recording methods over the event log."""

from __future__ import annotations

from press.observability.events import (
    BuildCompleted,
    DataLoaded,
    PageLoaded,
    PageRendered,
    PagesInvalidated,
    StepCompleted,
    now_ns,
)
from press.observability.log import EventLog


class BuildCollector:
    """Records load, invalidation and build events into an EventLog.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    # ----- Load events -----

    def record_page_loaded(self, path: str, *, trigger: str = "load") -> None:
        self._log.append(PageLoaded(path=path, trigger=trigger, timestamp_ns=now_ns()))

    def record_data_loaded(self, name: str, path: str, *, ok: bool = True) -> None:
        self._log.append(DataLoaded(name=name, path=path, ok=ok, timestamp_ns=now_ns()))

    def record_invalidation(self, name: str, pages: tuple[str, ...]) -> None:
        self._log.append(PagesInvalidated(name=name, pages=pages, timestamp_ns=now_ns()))

    # ----- Build events -----

    def record_step(self, step: str, *, duration_ms: float = 0.0) -> None:
        self._log.append(StepCompleted(step=step, duration_ms=duration_ms, timestamp_ns=now_ns()))

    def record_render(
        self,
        path: str,
        target: str,
        *,
        size_bytes: int = 0,
        duration_ms: float = 0.0,
    ) -> None:
        self._log.append(
            PageRendered(
                path=path,
                target=target,
                size_bytes=size_bytes,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_build(
        self,
        *,
        pages: int = 0,
        ok: bool = True,
        error: str = "",
        duration_ms: float = 0.0,
    ) -> None:
        self._log.append(
            BuildCompleted(
                pages=pages,
                ok=ok,
                error=error,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )
