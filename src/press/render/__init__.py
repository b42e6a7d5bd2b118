"""Render layer — template resolution, page rendering and output writing."""

from press.render.protocols import MarkdownConverter, TemplateEngine
from press.render.renderer import BuildResult, DataRecorder, PageRenderer, RenderedFile, render_pages
from press.render.templates import TemplateCache, template_name_for

__all__ = [
    "BuildResult",
    "DataRecorder",
    "MarkdownConverter",
    "PageRenderer",
    "RenderedFile",
    "TemplateCache",
    "TemplateEngine",
    "render_pages",
    "template_name_for",
]
