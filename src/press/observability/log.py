"""Build event log.

A bounded ring buffer of the events one Press records while loading,
invalidating and building. Loaders, pipeline steps, the renderer and the
watch handlers all record from the Press event loop, so the log is a plain
deque with no locking.

Queries filter on the fields press events carry: ``path`` (also matched
against the pages of a ``PagesInvalidated``), ``name`` for data events,
``step`` for pipeline steps and ``ok`` for loads and builds that can fail.
"""

from collections import deque
from typing import Any

from press.observability.events import BuildLogEvent, PagesInvalidated


def _paths(event: BuildLogEvent) -> tuple[str, ...]:
    if isinstance(event, PagesInvalidated):
        return event.pages
    path = getattr(event, "path", None)
    return () if path is None else (path,)


def _matches(
    event: BuildLogEvent,
    *,
    name: str | None,
    step: str | None,
    path: str | None,
    ok: bool | None,
) -> bool:
    if name is not None and getattr(event, "name", None) != name:
        return False
    if step is not None and getattr(event, "step", None) != step:
        return False
    if ok is not None and getattr(event, "ok", None) is not ok:
        return False
    return path is None or any(path in p for p in _paths(event))


class EventLog:
    """Bounded event store; the oldest events drop off when it is full.

    Args:
        max_events: Maximum number of events to retain.

    """

    __slots__ = ("_events", "_max_events")

    def __init__(self, max_events: int = 10_000) -> None:
        self._max_events = max_events
        self._events: deque[BuildLogEvent] = deque(maxlen=max_events)

    def append(self, event: BuildLogEvent) -> None:
        self._events.append(event)

    def query(
        self,
        *,
        event_type: type | None = None,
        since_ns: int = 0,
        name: str | None = None,
        step: str | None = None,
        path: str | None = None,
        ok: bool | None = None,
        limit: int = 100,
    ) -> list[BuildLogEvent]:
        """Return matching events, most recent first.

        Args:
            event_type: Only events of this type.
            since_ns: Only events at or after this timestamp.
            name: Only data events for this data name.
            step: Only ``StepCompleted`` events for this step name.
            path: Only events whose source path contains this substring.
            ok: Only events whose ``ok`` flag has this value.
            limit: Maximum number of events to return.

        """
        results: list[BuildLogEvent] = []
        for event in reversed(self._events):
            if len(results) >= limit:
                break
            if event_type is not None and not isinstance(event, event_type):
                continue
            if event.timestamp_ns < since_ns:
                continue
            if _matches(event, name=name, step=step, path=path, ok=ok):
                results.append(event)
        return results

    def recent(self, n: int = 20) -> list[BuildLogEvent]:
        """Return the N most recent events, oldest first."""
        return list(self._events)[-n:]

    def clear(self) -> int:
        """Drop every event; returns how many were dropped."""
        count = len(self._events)
        self._events.clear()
        return count

    def __len__(self) -> int:
        return len(self._events)

    def stats(self) -> dict[str, Any]:
        """Counts by event type, plus how many loads or builds failed."""
        by_type: dict[str, int] = {}
        failures = 0
        for event in self._events:
            kind = type(event).__name__
            by_type[kind] = by_type.get(kind, 0) + 1
            if getattr(event, "ok", True) is False:
                failures += 1
        return {
            "total": len(self._events),
            "max_events": self._max_events,
            "by_type": by_type,
            "failures": failures,
        }
