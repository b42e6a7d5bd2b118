"""Content layer — pages, data sources and the changes that touch them.

Loads page and data sources into indexed stores, tracks which pages read
which data, and classifies filesystem changes for the build orchestrator.
"""

from press.content.classifier import DataEvent, Ignored, PageEvent, RawEvent, classify
from press.content.data import DataEntry, DataProviders, DataStore
from press.content.deps import DependencyTracker
from press.content.page import Page, PageStore
from press.content.watcher import SiteWatcher

__all__ = [
    "DataEntry",
    "DataEvent",
    "DataProviders",
    "DataStore",
    "DependencyTracker",
    "Ignored",
    "Page",
    "PageEvent",
    "PageStore",
    "RawEvent",
    "SiteWatcher",
    "classify",
]
