"""Template cache — resolves template names against the page tree.

Templates live beside the pages: the name ``docs/intro`` resolves to the first
of ``docs/intro.html``, ``docs/intro.md`` or ``docs/intro.markdown`` under the
page root, with any front matter stripped. Layouts are ordinary excluded
pages (``_base.html`` is the template ``_base``).

Resolved sources are cached until ``invalidate(name)`` is called, which also
notifies listeners (the template engine) so compiled templates are dropped too.
"""

from __future__ import annotations

import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from press._errors import TemplateError
from press.config import PAGE_SUFFIXES, PressConfig
from press.content.frontmatter import parse_body

_RESOLUTION_ORDER = (".html", ".md", ".markdown")


@dataclass(frozen=True, slots=True)
class TemplateSource:
    """A resolved template: body text and the file it came from."""

    source: str
    path: Path


def template_name_for(path: Path, config: PressConfig) -> str | None:
    """Template name of a page path, or None when it is outside the page root.

    Args:
        path: Absolute, or relative to the project root.
        config: Active configuration.

    """
    full_path = path if path.is_absolute() else config.root / path
    try:
        relative = full_path.relative_to(config.src_path)
    except ValueError:
        return None
    return relative.with_suffix("").as_posix()


class TemplateCache:
    """Name-to-source cache over the page root.

    Also satisfies the template loader interface (``get_source`` and
    ``list_templates``) so it can back a kida Environment directly.

    Args:
        root: Absolute page root.
        metadata_buffer: Front matter scan window, as for pages.

    """

    def __init__(self, root: Path, *, metadata_buffer: int = 1024) -> None:
        self._root = root
        self._metadata_buffer = metadata_buffer
        self._cache: dict[str, TemplateSource] = {}
        self._listeners: list[Callable[[str], None]] = []

    def resolve(self, name: str) -> TemplateSource:
        """Return the source for ``name``, reading it on first use.

        Raises:
            TemplateError: If no page-tree file matches the name.

        """
        cached = self._cache.get(name)
        if cached is not None:
            return cached

        for suffix in _RESOLUTION_ORDER:
            candidate = self._root / f"{name}{suffix}"
            if candidate.is_file():
                break
        else:
            msg = f"Template {name!r} not found under {self._root}"
            raise TemplateError(msg)

        try:
            raw = candidate.read_text(encoding="utf-8")
        except (OSError, UnicodeDecodeError) as exc:
            msg = f"Cannot read template {name!r}: {exc}"
            raise TemplateError(msg) from exc

        resolved = TemplateSource(
            source=parse_body(raw, limit=self._metadata_buffer),
            path=candidate,
        )
        self._cache[name] = resolved
        return resolved

    def invalidate(self, name: str) -> None:
        """Forget ``name`` and tell listeners to forget it too."""
        print(f"  Invalidate template: {name}", file=sys.stderr)
        self._cache.pop(name, None)
        for listener in self._listeners:
            listener(name)

    def on_invalidate(self, listener: Callable[[str], None]) -> None:
        """Register a callback invoked with each invalidated name."""
        self._listeners.append(listener)

    def is_cached(self, name: str) -> bool:
        return name in self._cache

    # ----- Loader interface -----

    def get_source(self, name: str) -> tuple[str, str]:
        resolved = self.resolve(name)
        return resolved.source, str(resolved.path)

    def list_templates(self) -> list[str]:
        if not self._root.is_dir():
            return []
        return sorted(
            p.relative_to(self._root).with_suffix("").as_posix()
            for p in self._root.rglob("*")
            if p.is_file() and p.suffix in PAGE_SUFFIXES
        )
