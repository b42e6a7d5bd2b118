"""Built-in extension steps.

Early (main segment, before user steps):
    markdown_helpers, code_highlighting

Public API sugar (main segment, registration order):
    metadata_injector (``metadata``, ``ignore``, ``layout``), collection

Late (tail segment, after everything else):
    pretty_urls, data_injection, stats_injection, relative_urls

Page patterns are fnmatch-style globs over the page-root-relative POSIX path;
``*`` also matches ``/``, so ``blog/*`` selects everything under ``blog``.
"""

from __future__ import annotations

import re
from collections.abc import Mapping
from fnmatch import fnmatchcase
from pathlib import Path
from typing import TYPE_CHECKING, Any

from press.render.renderer import declared_data

if TYPE_CHECKING:
    from press._types import Step
    from press.app import Press
    from press.content.page import Page
    from press.pipeline.context import BuildContext

# Metadata keys computed at load time; data injection never overwrites them
_RESERVED_KEYS = frozenset({"src", "template", "dest", "markdown", "dirty", "data", "layout", "ignore"})

_FENCE = re.compile(r"^[ \t]*(?:`{3,}|~{3,})[ \t]*([\w+#.-]+)", re.MULTILINE)


def matches(page: Page, pattern: str) -> bool:
    """Whether a page's source path matches a page pattern."""
    return fnmatchcase(page.source_path.as_posix(), pattern)


# ---------------------------------------------------------------------------
# Public API sugar
# ---------------------------------------------------------------------------


def metadata_injector(pattern: str, data: Mapping[str, Any]) -> Step:
    """Step merging ``data`` into the metadata of pages matching ``pattern``."""
    values = dict(data)

    def inject_metadata(context: BuildContext) -> None:
        for page in context.pages:
            if matches(page, pattern):
                page.metadata.update(values)

    inject_metadata.__name__ = f"metadata({pattern})"
    return inject_metadata


def collection(name: str, pattern: str) -> Step:
    """Step grouping non-ignored pages matching ``pattern`` under ``name``."""

    def collect(context: BuildContext) -> None:
        context.collections[name] = sorted(
            (page for page in context.pages if not page.ignored and matches(page, pattern)),
            key=lambda page: page.source_path,
        )

    collect.__name__ = f"collection({name})"
    return collect


# ---------------------------------------------------------------------------
# Early built-ins
# ---------------------------------------------------------------------------


class MarkdownHelpers:
    """Installs a ``markdown(text)`` template global."""

    def register(self, press: Press) -> None:
        press.global_("markdown", press.render_markdown)


markdown_helpers = MarkdownHelpers()


def code_highlighting(context: BuildContext) -> None:
    """Tag markdown pages with the languages of their fenced code blocks.

    Layouts use ``languages`` to pull in highlighting assets; the highlighting
    itself is configured on the markdown converter.
    """
    for page in context.pages:
        if page.is_markdown:
            found = {m.group(1).lower() for m in _FENCE.finditer(page.body)}
            page.metadata["languages"] = sorted(found)


# ---------------------------------------------------------------------------
# Late built-ins
# ---------------------------------------------------------------------------


def pretty_urls(context: BuildContext) -> None:
    """Write ``about.html`` as ``about/index.html`` and set ``url``."""
    for page in context.pages:
        dest = page.dest_path
        if dest.suffix != ".html":
            continue
        if dest.name != "index.html":
            dest = dest.with_suffix("") / "index.html"
            page.dest_path = dest
            page.metadata["dest"] = dest.as_posix()
        parent = dest.parent.as_posix()
        page.metadata["url"] = "/" if parent == "." else f"/{parent}/"


def data_injection(context: BuildContext) -> None:
    """Copy declared data values into page metadata under their names.

    A page declares data with ``data: site`` or ``data: [site, nav]`` in its
    front matter. Declared names count as dependencies even when the template
    never reads them.
    """
    for page in context.pages:
        for name in sorted(declared_data(page.metadata)):
            if name in _RESERVED_KEYS:
                continue
            page.metadata[name] = context.data.value(name, {})


def stats_injection(context: BuildContext) -> None:
    """Add source file ``stats`` to each page and ``site_stats`` globally."""
    src_root = context.config.src_path
    for page in context.pages:
        source = src_root / page.source_path
        if not source.is_file():
            continue
        stat = source.stat()
        page.metadata["stats"] = {"size": stat.st_size, "mtime": stat.st_mtime}

    context.globals["site_stats"] = {
        "pages": sum(1 for page in context.pages if not page.ignored),
        "data": len(context.data),
    }


def relative_urls(context: BuildContext) -> None:
    """Set ``root``: the relative path from a page's output dir to the output root."""
    for page in context.pages:
        depth = len(Path(page.dest_path).parent.parts)
        page.metadata["root"] = "/".join([".."] * depth) or "."


LATE_STEPS: tuple[Step, ...] = (pretty_urls, data_injection, stats_injection, relative_urls)
