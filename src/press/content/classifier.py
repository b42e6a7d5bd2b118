"""Event classifier — raw filesystem events to page/data domain events.

Raw events carry the watcher's view (absolute or root-relative paths and one
of added/changed/deleted/renamed). Classification normalizes every path to
the project root, then decides per namespace:

- the page namespace is the page root with ``.md``/``.markdown``/``.html``;
- the data namespace is the data root with ``.py``/``.json``/``.yaml``/``.yml``.

Renames are decided independently per namespace, so a rename that leaves a
namespace becomes a delete there, and one that enters a namespace becomes an
add there.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Literal

from press._types import RawKind
from press.config import DATA_SUFFIXES, PAGE_SUFFIXES, PressConfig

type EventKind = Literal["added", "changed", "deleted", "renamed"]


@dataclass(frozen=True, slots=True)
class RawEvent:
    """A filesystem change as reported by the watcher.

    Attributes:
        kind: Type of filesystem change.
        path: Changed path; the new path for renames.
        old_path: Previous path for renames, otherwise None.

    """

    kind: RawKind
    path: Path
    old_path: Path | None = None


@dataclass(frozen=True, slots=True)
class PageEvent:
    """A change in the page namespace.

    Paths are relative to the project root.
    """

    kind: EventKind
    path: Path
    old_path: Path | None = None


@dataclass(frozen=True, slots=True)
class DataEvent:
    """A change in the data namespace.

    Paths are relative to the project root.
    """

    kind: EventKind
    path: Path
    old_path: Path | None = None


@dataclass(frozen=True, slots=True)
class Ignored:
    """A change outside both namespaces."""

    path: Path


type DomainEvent = PageEvent | DataEvent | Ignored


def normalize_path(path: Path | str, root: Path) -> Path | None:
    """Make ``path`` relative to the project root.

    Relative paths are taken as already root-relative. Returns None for
    absolute paths outside the root.

    """
    path = Path(path)
    if not path.is_absolute():
        return path
    try:
        return path.relative_to(root)
    except ValueError:
        return None


def _under(path: Path, directory: str) -> bool:
    prefix = Path(directory).parts
    return len(path.parts) > len(prefix) and path.parts[: len(prefix)] == prefix


def in_page_namespace(path: Path | None, config: PressConfig) -> bool:
    """Whether a root-relative path matches the page pattern."""
    return path is not None and _under(path, config.src) and path.suffix in PAGE_SUFFIXES


def in_data_namespace(path: Path | None, config: PressConfig) -> bool:
    """Whether a root-relative path matches the data pattern."""
    return path is not None and _under(path, config.data) and path.suffix in DATA_SUFFIXES


def classify(raw: RawEvent, config: PressConfig) -> tuple[DomainEvent, ...]:
    """Classify one raw event into page and data events.

    Returns ``(Ignored(path),)`` when nothing matches. A rename may yield one
    event per namespace.

    """
    path = normalize_path(raw.path, config.root)
    old = normalize_path(raw.old_path, config.root) if raw.old_path is not None else None

    events: list[DomainEvent] = []
    for matches, event_type in (
        (in_page_namespace, PageEvent),
        (in_data_namespace, DataEvent),
    ):
        new_in = matches(path, config)
        if raw.kind != "renamed":
            if new_in:
                events.append(event_type(kind=raw.kind, path=path))
            continue

        old_in = matches(old, config)
        if new_in and old_in:
            events.append(event_type(kind="renamed", path=path, old_path=old))
        elif old_in:
            events.append(event_type(kind="deleted", path=old))
        elif new_in:
            events.append(event_type(kind="added", path=path))

    if not events:
        return (Ignored(path=path if path is not None else Path(raw.path)),)
    return tuple(events)
