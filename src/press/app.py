"""Press application — the incremental build orchestrator.

Press owns the build context (pages, data, dependency index, globals), the
extension pipeline and the template cache, and reacts to filesystem changes:

    raw event -> classify -> store mutation + invalidation -> build request
    build -> extension pipeline (sequential) -> render every page

``create_press()`` is the primary entry point.
"""

from __future__ import annotations

import asyncio
import inspect
import sys
from collections.abc import Awaitable, Callable, Mapping
from pathlib import Path
from typing import Any

from press._errors import ContentError, PressError
from press.config import PressConfig
from press.config_loader import load_config
from press.content.classifier import DataEvent, DomainEvent, Ignored, PageEvent, RawEvent, classify
from press.content.data import DataEntry, DataProviders, data_name, load_data, load_data_entry
from press.content.page import is_excluded, load_page, load_pages
from press.content.watcher import SiteWatcher
from press.observability.collector import BuildCollector
from press.pipeline import builtins
from press.pipeline.context import BuildContext
from press.pipeline.extensions import ExtensionPipeline
from press.pipeline.queue import BuildQueue
from press.render.protocols import MarkdownConverter, TemplateEngine
from press.render.renderer import BuildResult, PageRenderer, render_pages
from press.render.templates import TemplateCache, template_name_for


class Press:
    """Incremental static-site builder.

    Args:
        config: Frozen configuration.
        engine: Template engine; defaults to kida over the template cache.
        markdown: Markdown converter; defaults to patitas.
        providers: Data provider registry; defaults to module/JSON/YAML.
        collector: Build event collector.

    """

    def __init__(
        self,
        config: PressConfig,
        *,
        engine: TemplateEngine | None = None,
        markdown: MarkdownConverter | None = None,
        providers: DataProviders | None = None,
        collector: BuildCollector | None = None,
    ) -> None:
        self.config = config
        self.context = BuildContext.create(config)
        self.templates = TemplateCache(config.src_path, metadata_buffer=config.metadata_buffer)
        self.providers = providers if providers is not None else DataProviders()
        self.collector = collector if collector is not None else BuildCollector()
        self.pipeline = ExtensionPipeline(self.collector)

        self._engine = engine
        if engine is not None:
            self.templates.on_invalidate(engine.forget)
        self._markdown = markdown
        self._renderer: PageRenderer | None = None

        self._build_lock = asyncio.Lock()
        self._queue = BuildQueue(lambda: self.build())
        self._ready = False
        self._watcher: SiteWatcher | None = None
        self._watch_task: asyncio.Task[None] | None = None

    # ------------------------------------------------------------------
    # Public registration API
    # ------------------------------------------------------------------

    def metadata(self, pattern: str, data: Mapping[str, Any]) -> None:
        """Merge ``data`` into the metadata of pages matching ``pattern``."""
        self.pipeline.add(builtins.metadata_injector(pattern, data))

    def ignore(self, pattern: str) -> None:
        """Keep pages matching ``pattern`` out of the output."""
        self.pipeline.add(builtins.metadata_injector(pattern, {"ignore": True}))

    def layout(self, pattern: str, layout: str) -> None:
        """Render pages matching ``pattern`` inside the template ``layout``."""
        self.pipeline.add(builtins.metadata_injector(pattern, {"layout": layout}))

    def collection(self, name: str, pattern: str) -> None:
        """Expose pages matching ``pattern`` as ``collections[name]``."""
        self.pipeline.add(builtins.collection(name, pattern))

    def global_(self, key: str, value: Any) -> None:
        """Expose ``value`` to every template as ``key``."""
        self.context.globals[key] = value

    def use(self, extension: Any) -> None:
        """Register an extension.

        Objects with a ``register(press)`` hook have it called once now;
        callables are appended to the pipeline. An object may be both.

        """
        register = getattr(extension, "register", None)
        if callable(register):
            register(self)
        if callable(extension):
            self.pipeline.add(extension)

    def ready(self) -> None:
        """Install the late built-in steps. Only the first call has an effect."""
        if self._ready:
            return
        self._ready = True
        for step in builtins.LATE_STEPS:
            self.pipeline.add_late(step)

    # ------------------------------------------------------------------
    # Collaborators
    # ------------------------------------------------------------------

    @property
    def engine(self) -> TemplateEngine:
        if self._engine is None:
            from press.render.engines import KidaTemplateEngine

            self._engine = KidaTemplateEngine(self.templates, self.config.templating)
        return self._engine

    @property
    def markdown(self) -> MarkdownConverter:
        if self._markdown is None:
            from press.render.engines import PatitasMarkdown

            self._markdown = PatitasMarkdown(self.config.markdown)
        return self._markdown

    def render_markdown(self, text: str) -> str:
        """Convert a markdown string; installed as the ``markdown`` global."""
        return self.markdown(text)

    def _get_renderer(self) -> PageRenderer:
        if self._renderer is None:
            self._renderer = PageRenderer(self.engine, self.markdown)
        return self._renderer

    # ------------------------------------------------------------------
    # Loading
    # ------------------------------------------------------------------

    async def load(self) -> None:
        """Load every page and data source, replacing the stores.

        Pages and data load concurrently; the stores are replaced only after
        both have finished.

        Raises:
            ContentError: If any page or data file cannot be read.

        """
        pages, entries = await asyncio.gather(
            load_pages(self.config),
            load_data(self.config, self.providers, self.collector),
        )
        self.context.dependencies.clear()
        self.context.pages.replace_all(pages)
        self.context.data.replace_all(entries)
        for page in pages:
            self.collector.record_page_loaded(page.source_path.as_posix())

    # ------------------------------------------------------------------
    # Building
    # ------------------------------------------------------------------

    async def build(self) -> BuildResult:
        """Run the extension pipeline, then render every non-ignored page.

        Builds are serialized: a call made while another build runs waits
        for it to finish.

        Raises:
            PipelineError: If an extension step fails.
            BuildError: If rendering or writing fails.

        """
        async with self._build_lock:
            print("  Build", file=sys.stderr)
            loop = asyncio.get_running_loop()
            t0 = loop.time()
            try:
                await self.pipeline.run(self.context)
                result = await render_pages(self.context, self._get_renderer(), self.collector)
            except PressError as exc:
                self.collector.record_build(
                    ok=False, error=str(exc), duration_ms=(loop.time() - t0) * 1000,
                )
                raise
            self.collector.record_build(pages=result.total_pages, duration_ms=result.duration_ms)
            _print_build_summary(result)
            return result

    def request_build(self) -> asyncio.Task[None]:
        """Schedule a build; requests made during a build coalesce."""
        return self._queue.request()

    async def wait_idle(self) -> None:
        """Wait until requested builds have finished."""
        await self._queue.wait_idle()

    # ------------------------------------------------------------------
    # Event handling
    # ------------------------------------------------------------------

    async def handle_raw_event(self, raw: RawEvent) -> None:
        """Classify a raw filesystem event and handle each domain event."""
        for event in classify(raw, self.config):
            await self.dispatch(event)

    async def dispatch(self, event: DomainEvent) -> None:
        """Route one classified event to its handler."""
        if isinstance(event, Ignored):
            return
        if isinstance(event, PageEvent):
            if event.kind == "added":
                await self.handle_page_added(event.path)
            elif event.kind == "changed":
                await self.handle_page_changed(event.path)
            elif event.kind == "deleted":
                await self.handle_page_deleted(event.path)
            elif event.kind == "renamed" and event.old_path is not None:
                await self.handle_page_renamed(event.path, event.old_path)
        elif isinstance(event, DataEvent):
            if event.kind in ("added", "changed"):
                await self.handle_data_changed(event.path)
            elif event.kind == "deleted":
                await self.handle_data_deleted(event.path)
            elif event.kind == "renamed" and event.old_path is not None:
                await self.handle_data_renamed(event.path, event.old_path)

    # ----- Pages -----
    # Handler paths are relative to the project root (as classified).

    async def handle_page_added(self, path: Path) -> None:
        print(f"  Page added: {path}", file=sys.stderr)
        self._invalidate_template(path)
        await self._load_new_page(path, trigger="added")
        self.request_build()

    async def handle_page_changed(self, path: Path) -> None:
        print(f"  Page changed: {path}", file=sys.stderr)
        self._invalidate_template(path)
        self._remove_old_page(path)
        await self._load_new_page(path, trigger="changed")
        self.request_build()

    async def handle_page_deleted(self, path: Path) -> None:
        print(f"  Page deleted: {path}", file=sys.stderr)
        self._invalidate_template(path)
        self._remove_old_page(path)
        self.request_build()

    async def handle_page_renamed(self, path: Path, old_path: Path) -> None:
        print(f"  Page renamed: {old_path} -> {path}", file=sys.stderr)
        self._invalidate_template(old_path)
        self._invalidate_template(path)
        self._remove_old_page(old_path)
        await self._load_new_page(path, trigger="renamed")
        self.request_build()

    def _page_key(self, path: Path) -> Path:
        return (self.config.root / path).relative_to(self.config.src_path)

    def _invalidate_template(self, path: Path) -> None:
        name = template_name_for(path, self.config)
        if name is not None:
            self.templates.invalidate(name)

    def _remove_old_page(self, path: Path) -> None:
        """Drop a page and delete the output its last build wrote."""
        page = self.context.pages.remove(self._page_key(path))
        if page is None:
            return
        self.context.dependencies.forget(page)
        target = self.config.dest_path / page.dest_path
        if target.is_file():
            try:
                target.unlink(missing_ok=True)
            except OSError as exc:
                msg = f"Cannot remove output {page.dest_path.as_posix()}: {exc}"
                raise ContentError(msg) from exc
            print(f"  Removed output: {page.dest_path.as_posix()}", file=sys.stderr)

    async def _load_new_page(self, path: Path, *, trigger: str) -> None:
        key = self._page_key(path)
        if is_excluded(key):
            return
        page = await load_page(key, self.config)
        self.context.pages.add(page)
        self.collector.record_page_loaded(key.as_posix(), trigger=trigger)

    # ----- Data -----

    async def handle_data_changed(self, path: Path) -> None:
        """Handle an added or changed data source."""
        print(f"  Data changed: {path}", file=sys.stderr)
        entry = await load_data_entry(self.config.root / path, self.providers, self.collector)
        self._store_data(entry)
        self.request_build()

    handle_data_added = handle_data_changed

    async def handle_data_deleted(self, path: Path) -> None:
        print(f"  Data deleted: {path}", file=sys.stderr)
        self._remove_data(path)
        self.request_build()

    async def handle_data_renamed(self, path: Path, old_path: Path) -> None:
        print(f"  Data renamed: {old_path} -> {path}", file=sys.stderr)
        self._remove_data(old_path)
        await self.handle_data_changed(path)

    def _store_data(self, entry: DataEntry) -> None:
        current = self.context.data.get(entry.name)
        if current is not None and current.path != entry.path and current.path.is_file():
            msg = (
                f"Data sources {current.path.name} and {entry.path.name} "
                f"are both named {entry.name!r}"
            )
            raise ContentError(msg)
        self.context.data.set(entry)
        self._invalidate_dependents(entry.name)

    def _remove_data(self, path: Path) -> None:
        """Drop the entry loaded from ``path``; a same-named entry from another file stays."""
        name = data_name(path)
        current = self.context.data.get(name)
        if current is None or current.path != self.config.root / path:
            return
        self.context.data.remove(name)
        self._invalidate_dependents(name)

    def _invalidate_dependents(self, name: str) -> None:
        pages = self.context.dependencies.invalidate(name)
        self.collector.record_invalidation(
            name, tuple(page.source_path.as_posix() for page in pages),
        )

    # ------------------------------------------------------------------
    # Watching
    # ------------------------------------------------------------------

    @property
    def is_watching(self) -> bool:
        return self._watch_task is not None and not self._watch_task.done()

    def start_watcher(self) -> None:
        """Start reacting to filesystem changes on the running event loop."""
        if self.is_watching:
            return
        self._watcher = SiteWatcher(self.config)
        self._watch_task = asyncio.get_running_loop().create_task(
            self._consume_events(self._watcher)
        )

    async def stop_watcher(self) -> None:
        """Stop watching. A build already requested still completes."""
        if self._watcher is not None:
            self._watcher.stop()
        task = self._watch_task
        self._watch_task = None
        if task is not None and not task.done():
            task.cancel()
            await asyncio.gather(task, return_exceptions=True)

    async def _consume_events(self, watcher: SiteWatcher) -> None:
        async for raw in watcher.changes():
            try:
                await self.handle_raw_event(raw)
            except PressError as exc:
                print(f"  Event error ({raw.path.name}): {exc}", file=sys.stderr)


def _print_build_summary(result: BuildResult) -> None:
    """Print build completion summary to stderr."""
    lines = [
        f"  Rendered {result.total_pages} page{'s' if result.total_pages != 1 else ''}",
        f"  Output: {result.output_dir}",
        f"  Done in {result.duration_ms:.0f}ms",
    ]
    print("\n".join(lines), file=sys.stderr)


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


async def create_press(
    root: str | Path = ".",
    *,
    setup: Callable[[Press], Awaitable[None] | None] | None = None,
    engine: TemplateEngine | None = None,
    markdown: MarkdownConverter | None = None,
    providers: DataProviders | None = None,
    **overrides: Any,
) -> Press:
    """Load a project and install the built-in extensions.

    Order: load pages and data, register the early built-ins, call ``setup``
    (the place to register ``metadata``/``layout``/... steps), then install
    the late built-ins.

    Args:
        root: Project root.
        setup: Called with the loaded Press before the late built-ins.
        engine: Template engine override.
        markdown: Markdown converter override.
        providers: Data provider registry override.
        **overrides: PressConfig fields, taking precedence over press.yaml.

    """
    config = load_config(Path(root), **overrides)
    press = Press(config, engine=engine, markdown=markdown, providers=providers)
    await press.load()

    press.use(builtins.markdown_helpers)
    press.use(builtins.code_highlighting)
    if setup is not None:
        result = setup(press)
        if inspect.isawaitable(result):
            await result
    press.ready()
    return press
