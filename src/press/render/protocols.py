"""Narrow interfaces to the rendering collaborators."""

from collections.abc import Mapping
from typing import Any, Protocol


class TemplateEngine(Protocol):
    """Expands named templates."""

    def render(self, name: str, context: Mapping[str, Any]) -> str:
        """Render the template ``name`` with ``context``."""
        ...

    def forget(self, name: str) -> None:
        """Drop any compiled form of ``name`` so the next render re-reads it."""
        ...


class MarkdownConverter(Protocol):
    """Converts markdown text to HTML."""

    def __call__(self, text: str) -> str: ...
