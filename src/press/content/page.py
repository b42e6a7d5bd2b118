"""Pages and the page store.

A Page is one renderable source document under the page root. The PageStore
indexes pages by their page-root-relative source path so that watcher events
can replace or remove a single page without scanning the collection.
"""

from __future__ import annotations

import asyncio
import sys
from collections.abc import Iterator
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from press._errors import ContentError
from press.config import EXCLUSION_MARKER, MARKDOWN_SUFFIXES, OUTPUT_SUFFIX, PAGE_SUFFIXES, PressConfig
from press.content.frontmatter import parse_metadata


@dataclass(slots=True, eq=False)
class Page:
    """One renderable page source.

    Attributes:
        source_path: Path relative to the page root; the store key.
        dest_path: Output path relative to the output root.
        is_markdown: Whether the body is converted from markdown.
        metadata: Defaults, then front matter, then step injections.
        body: Source text after the front matter block.
        data_dependencies: Data names read during the last render.
        dirty: True until the page has been rendered since its last change.

    """

    source_path: Path
    dest_path: Path
    is_markdown: bool
    metadata: dict[str, Any] = field(default_factory=dict)
    body: str = ""
    data_dependencies: set[str] = field(default_factory=set)
    dirty: bool = True

    @property
    def ignored(self) -> bool:
        """Pages tagged with ``ignore`` stay loaded but are never rendered."""
        return bool(self.metadata.get("ignore"))

    @property
    def template_name(self) -> str:
        """Name under which the template cache resolves this page."""
        return self.source_path.with_suffix("").as_posix()

    def __repr__(self) -> str:
        return f"Page({self.source_path.as_posix()!r} -> {self.dest_path.as_posix()!r})"


def is_excluded(path: Path) -> bool:
    """Whether the filename carries the exclusion marker."""
    return path.name.startswith(EXCLUSION_MARKER)


def dest_for(source_path: Path) -> Path:
    """Derive the output path: markdown suffixes become ``.html``."""
    if source_path.suffix in MARKDOWN_SUFFIXES:
        return source_path.with_suffix(OUTPUT_SUFFIX)
    return source_path


async def load_page(path: Path, config: PressConfig) -> Page:
    """Read one page source and build a dirty Page.

    Args:
        path: Page path, either absolute or relative to the page root.
        config: Active configuration.

    Raises:
        ContentError: If the file cannot be read or its front matter is invalid.

    """
    full_path = path if path.is_absolute() else config.src_path / path
    relative = full_path.relative_to(config.src_path)

    try:
        source = full_path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        msg = f"Cannot read page {relative.as_posix()}: {exc}"
        raise ContentError(msg) from exc

    front, body = parse_metadata(
        source, limit=config.metadata_buffer, origin=relative.as_posix(),
    )
    is_markdown = relative.suffix in MARKDOWN_SUFFIXES
    metadata: dict[str, Any] = {
        "src": relative.as_posix(),
        "template": full_path.as_posix(),
        "dest": dest_for(relative).as_posix(),
        "markdown": is_markdown,
        "dirty": True,
    }
    metadata.update(front)

    return Page(
        source_path=relative,
        dest_path=Path(str(metadata["dest"])),
        is_markdown=is_markdown,
        metadata=metadata,
        body=body,
    )


def discover_pages(config: PressConfig) -> list[Path]:
    """List page sources under the page root, excluded files removed."""
    root = config.src_path
    if not root.is_dir():
        return []
    return sorted(
        p.relative_to(root)
        for p in root.rglob("*")
        if p.is_file() and p.suffix in PAGE_SUFFIXES and not is_excluded(p)
    )


async def load_pages(config: PressConfig) -> list[Page]:
    """Load every page concurrently; completes only when all have loaded."""
    paths = discover_pages(config)
    pages = await asyncio.gather(*(load_page(p, config) for p in paths))
    print(f"  Loaded {len(pages)} page{'s' if len(pages) != 1 else ''}", file=sys.stderr)
    return list(pages)


class PageStore:
    """Pages keyed by source path, in insertion order."""

    __slots__ = ("_pages",)

    def __init__(self, pages: list[Page] | None = None) -> None:
        self._pages: dict[Path, Page] = {}
        for page in pages or ():
            self.add(page)

    def add(self, page: Page) -> None:
        """Add a page, replacing any page with the same source path.

        Raises:
            ContentError: If the page carries the exclusion marker.

        """
        if is_excluded(page.source_path):
            msg = f"Excluded page cannot enter the store: {page.source_path.as_posix()}"
            raise ContentError(msg)
        self._pages[page.source_path] = page

    def remove(self, source_path: Path) -> Page | None:
        """Remove and return the page at ``source_path``, if any."""
        return self._pages.pop(source_path, None)

    def get(self, source_path: Path) -> Page | None:
        return self._pages.get(source_path)

    def replace_all(self, pages: list[Page]) -> None:
        self._pages.clear()
        for page in pages:
            self.add(page)

    def __iter__(self) -> Iterator[Page]:
        return iter(list(self._pages.values()))

    def __len__(self) -> int:
        return len(self._pages)

    def __contains__(self, source_path: object) -> bool:
        return source_path in self._pages
