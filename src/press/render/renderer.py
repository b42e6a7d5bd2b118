"""Page rendering — template expansion, markdown, layout, write.

Every non-ignored page is rendered on every build pass. While a page renders,
its ``data`` variable is a DataRecorder: each data name the template reads is
recorded, and after the write the recorded names replace the page's entry in
the dependency tracker. That set is what the next data change invalidates
against.
"""

from __future__ import annotations

import time
from collections.abc import Iterator, Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Any

from press._errors import BuildError, PressError

if TYPE_CHECKING:
    from press.content.page import Page
    from press.observability.collector import BuildCollector
    from press.pipeline.context import BuildContext
    from press.render.protocols import MarkdownConverter, TemplateEngine


class DataRecorder(Mapping[str, Any]):
    """Read-only view of the data store that records every name read.

    Supports item access (``data["site"]``) and attribute access
    (``data.site``) so templates can use either style. Names are recorded
    even when missing, so a page waiting for a data source is invalidated
    once it appears.

    """

    __slots__ = ("_values", "accessed")

    def __init__(self, values: Mapping[str, Any]) -> None:
        self._values = values
        self.accessed: set[str] = set()

    def __getitem__(self, name: str) -> Any:
        self.accessed.add(name)
        return self._values[name]

    def __getattr__(self, name: str) -> Any:
        if name.startswith("_"):
            raise AttributeError(name)
        try:
            return self[name]
        except KeyError:
            raise AttributeError(name) from None

    def __contains__(self, name: object) -> bool:
        if isinstance(name, str):
            self.accessed.add(name)
        return name in self._values

    def __iter__(self) -> Iterator[str]:
        # Enumerating the data makes the page depend on all of it
        names = list(self._values)
        self.accessed.update(names)
        return iter(names)

    def __len__(self) -> int:
        return len(self._values)


def declared_data(metadata: Mapping[str, Any]) -> set[str]:
    """Data names a page declares through its ``data`` metadata key."""
    declared = metadata.get("data")
    if declared is None:
        return set()
    if isinstance(declared, str):
        return {declared}
    return {str(name) for name in declared}


@dataclass(frozen=True, slots=True)
class RenderedFile:
    """Record of a single page written during a build.

    Attributes:
        source_path: Page-root-relative source path.
        output_path: Absolute path of the written file.
        size_bytes: Size of the written file.
        duration_ms: Time to render and write.

    """

    source_path: Path
    output_path: Path
    size_bytes: int
    duration_ms: float


@dataclass(frozen=True, slots=True)
class BuildResult:
    """Aggregate result of one build pass."""

    files: tuple[RenderedFile, ...]
    duration_ms: float
    output_dir: Path

    @property
    def total_pages(self) -> int:
        return len(self.files)


class PageRenderer:
    """Renders pages through the template engine and markdown converter.

    Args:
        engine: Template engine; pages and layouts are resolved by name.
        markdown: Markdown converter applied to markdown pages.

    """

    def __init__(self, engine: TemplateEngine, markdown: MarkdownConverter) -> None:
        self._engine = engine
        self._markdown = markdown

    def render(self, page: Page, context: BuildContext) -> tuple[str, set[str]]:
        """Render one page.

        Returns:
            ``(html, data_names_read)``.

        Raises:
            BuildError: If the template engine or converter fails.

        """
        recorder = DataRecorder(context.data.as_dict())
        variables: dict[str, Any] = {
            **context.globals,
            **page.metadata,
            "page": page.metadata,
            "data": recorder,
            "collections": context.collections,
        }
        try:
            html = self._engine.render(page.template_name, variables)
            if page.is_markdown:
                html = self._markdown(html)
            layout = page.metadata.get("layout")
            if layout:
                html = self._engine.render(str(layout), {**variables, "content": html})
        except PressError:
            raise
        except Exception as exc:
            msg = f"Failed to render {page.source_path.as_posix()}: {exc}"
            raise BuildError(msg) from exc

        return html, recorder.accessed | declared_data(page.metadata)


def _check_unique_destinations(pages: list[Page]) -> None:
    seen: dict[Path, Page] = {}
    for page in pages:
        other = seen.get(page.dest_path)
        if other is not None:
            msg = (
                f"Pages {other.source_path.as_posix()} and {page.source_path.as_posix()} "
                f"both write {page.dest_path.as_posix()}"
            )
            raise BuildError(msg)
        seen[page.dest_path] = page


def _write_html(filepath: Path, html: str) -> int:
    """Write HTML, creating parent dirs as needed. Returns bytes written."""
    filepath.parent.mkdir(parents=True, exist_ok=True)
    data = html.encode("utf-8")
    filepath.write_bytes(data)
    return len(data)


async def render_pages(
    context: BuildContext,
    renderer: PageRenderer,
    collector: BuildCollector | None = None,
) -> BuildResult:
    """Render every non-ignored page in the store and write it out.

    Raises:
        BuildError: On a destination clash, render failure or write failure.
            Pages written before the failure stay written.

    """
    start = time.perf_counter()
    output_dir = context.config.dest_path
    pages = [page for page in context.pages if not page.ignored]
    _check_unique_destinations(pages)

    files: list[RenderedFile] = []
    for page in pages:
        t0 = time.perf_counter()
        html, names = renderer.render(page, context)
        target = output_dir / page.dest_path
        try:
            size = _write_html(target, html)
        except OSError as exc:
            msg = f"Cannot write {target}: {exc}"
            raise BuildError(msg) from exc

        context.dependencies.record(page, names)
        page.dirty = False
        page.metadata["dirty"] = False
        elapsed = (time.perf_counter() - t0) * 1000

        files.append(RenderedFile(
            source_path=page.source_path,
            output_path=target,
            size_bytes=size,
            duration_ms=elapsed,
        ))
        if collector is not None:
            collector.record_render(
                page.source_path.as_posix(), str(target),
                size_bytes=size, duration_ms=elapsed,
            )

    return BuildResult(
        files=tuple(files),
        duration_ms=(time.perf_counter() - start) * 1000,
        output_dir=output_dir,
    )
