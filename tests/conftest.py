"""Shared test fixtures for press."""

from __future__ import annotations

import re
from collections.abc import Mapping
from pathlib import Path
from typing import Any

import pytest

from press.app import Press
from press.config import PressConfig
from press.render.templates import TemplateCache


@pytest.fixture
def tmp_site(tmp_path: Path) -> Path:
    """Create a minimal project for testing.

    Returns the project root with src/ and data/ populated:

    - ``src/index.md`` reads ``data.site.title``
    - ``src/about.html`` reads only its own front matter
    - ``src/docs/guide.md`` reads ``data.nav``
    - ``src/_base.html`` is a layout (excluded from the page store)
    - ``data/site.yaml`` and ``data/nav.json``
    """
    src = tmp_path / "src"
    src.mkdir()
    (src / "index.md").write_text(
        "---\ntitle: Home\n---\n# {{ data.site.title }}\n"
    )
    (src / "about.html").write_text(
        "---\ntitle: About\n---\n<p>{{ title }}</p>\n"
    )
    docs = src / "docs"
    docs.mkdir()
    (docs / "guide.md").write_text(
        "---\ntitle: Guide\n---\nNav: {{ data.nav }}\n\n```python\nprint('hi')\n```\n"
    )
    (src / "_base.html").write_text("<html>{{ content }}</html>")

    data = tmp_path / "data"
    data.mkdir()
    (data / "site.yaml").write_text("title: Hi\n")
    (data / "nav.json").write_text('["home", "about"]')

    return tmp_path


@pytest.fixture
def config(tmp_site: Path) -> PressConfig:
    """A PressConfig rooted at the temp project."""
    return PressConfig(root=tmp_site)


class FakeEngine:
    """Template engine for tests: ``{{ dotted.path }}`` substitution.

    Resolves names from its own TemplateCache over the page root so it never
    shares state with the Press under test. Missing values render as ``""``.
    """

    _EXPR = re.compile(r"\{\{\s*([\w.]+)\s*\}\}")

    def __init__(self, src_path: Path) -> None:
        self._templates = TemplateCache(src_path)
        self.rendered: list[str] = []
        self.forgotten: list[str] = []

    def render(self, name: str, context: Mapping[str, Any]) -> str:
        source = self._templates.resolve(name).source
        self.rendered.append(name)
        return self._EXPR.sub(lambda m: str(_lookup(context, m.group(1))), source)

    def forget(self, name: str) -> None:
        self.forgotten.append(name)
        self._templates.invalidate(name)


def _lookup(context: Mapping[str, Any], dotted: str) -> Any:
    value: Any = context
    for part in dotted.split("."):
        try:
            value = value[part] if isinstance(value, Mapping) else getattr(value, part)
        except (KeyError, AttributeError):
            return ""
    return value


class FakeMarkdown:
    """Markdown converter for tests: wraps text in a marker element."""

    def __init__(self) -> None:
        self.calls = 0

    def __call__(self, text: str) -> str:
        self.calls += 1
        return f"<md>{text.strip()}</md>"


def make_press(config: PressConfig) -> Press:
    """Press wired to the fake collaborators."""
    return Press(config, engine=FakeEngine(config.src_path), markdown=FakeMarkdown())
