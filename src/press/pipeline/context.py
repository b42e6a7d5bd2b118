"""Build context — the shared state every step and handler works on."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from press.config import PressConfig
from press.content.data import DataStore
from press.content.deps import DependencyTracker
from press.content.page import Page, PageStore


@dataclass(slots=True)
class BuildContext:
    """Mutable build state passed explicitly to steps and event handlers.

    Attributes:
        config: Frozen configuration.
        pages: Page store.
        data: Data store.
        dependencies: Data-name to page reverse index.
        globals: Values exposed to every template.
        collections: Named page groups, rebuilt by collection steps each pass.

    """

    config: PressConfig
    pages: PageStore
    data: DataStore
    dependencies: DependencyTracker
    globals: dict[str, Any] = field(default_factory=dict)
    collections: dict[str, list[Page]] = field(default_factory=dict)

    @classmethod
    def create(cls, config: PressConfig) -> BuildContext:
        """Empty context for ``config``."""
        pages = PageStore()
        return cls(
            config=config,
            pages=pages,
            data=DataStore(),
            dependencies=DependencyTracker(pages),
        )
