"""Build observability — structured events for loads, invalidations and builds.

Quick Start:
    >>> from press.observability import BuildCollector, EventLog, BuildCompleted
    >>> collector = BuildCollector(EventLog())
    >>> collector.record_build(pages=3)
    >>> collector.log.query(event_type=BuildCompleted)[0].pages
    3

"""

from press.observability.collector import BuildCollector
from press.observability.events import (
    BuildCompleted,
    BuildLogEvent,
    DataLoaded,
    PageLoaded,
    PageRendered,
    PagesInvalidated,
    StepCompleted,
    now_ns,
)
from press.observability.log import EventLog

__all__ = [
    "BuildCollector",
    "BuildCompleted",
    "BuildLogEvent",
    "DataLoaded",
    "EventLog",
    "PageLoaded",
    "PageRendered",
    "PagesInvalidated",
    "StepCompleted",
    "now_ns",
]
