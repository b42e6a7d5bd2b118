"""Build event model.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Events are frozen; a query result stays valid after the log moves on.

"""

import time
from dataclasses import dataclass


# ---------------------------------------------------------------------------
# Load events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class PageLoaded:
    """A page source was read into the page store.

    Attributes:
        path: Page-root-relative source path.
        trigger: ``"load"`` for the initial pass, otherwise the event kind.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    trigger: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class DataLoaded:
    """A data source was resolved.

    Attributes:
        name: Data name.
        path: Source file path.
        ok: False when parsing soft-failed to an empty value.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    name: str
    path: str
    ok: bool
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class PagesInvalidated:
    """Pages were marked dirty because a data source changed.

    Attributes:
        name: The data name that changed.
        pages: Source paths of the pages marked dirty.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    name: str
    pages: tuple[str, ...]
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Build events
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class StepCompleted:
    """An extension pipeline step finished."""

    step: str
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class PageRendered:
    """A page was rendered and written.

    Attributes:
        path: Page-root-relative source path.
        target: Absolute output path.
        size_bytes: Bytes written.
        duration_ms: Time to render and write.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    target: str
    size_bytes: int
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class BuildCompleted:
    """A build pass finished, successfully or not.

    Attributes:
        pages: Number of pages rendered.
        ok: False when a step or render failed.
        error: Error message when ``ok`` is False.
        duration_ms: Wall-clock time of the pass.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    pages: int
    ok: bool
    error: str
    duration_ms: float
    timestamp_ns: int


# ---------------------------------------------------------------------------
# Union type
# ---------------------------------------------------------------------------

type BuildLogEvent = (
    PageLoaded
    | DataLoaded
    | PagesInvalidated
    | StepCompleted
    | PageRendered
    | BuildCompleted
)


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
