"""Default rendering collaborators — kida templates and patitas markdown.

Both libraries are imported when the collaborator is first constructed, so
projects that supply their own engine and converter never import them.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from press.render.templates import TemplateCache


class KidaTemplateEngine:
    """Template engine backed by a kida Environment.

    The TemplateCache is the environment's loader, and invalidations on the
    cache evict the compiled template from the environment.

    Args:
        templates: Page-tree template cache used as the loader.
        options: Passed through to ``kida.Environment``.

    """

    def __init__(self, templates: TemplateCache, options: Mapping[str, Any] | None = None) -> None:
        from kida import Environment

        settings = {"autoescape": False, **(options or {})}
        self._env = Environment(loader=templates, **settings)
        templates.on_invalidate(self.forget)

    @property
    def environment(self) -> Any:
        return self._env

    def render(self, name: str, context: Mapping[str, Any]) -> str:
        return self._env.get_template(name).render(**context)

    def forget(self, name: str) -> None:
        cache = getattr(self._env, "_cache", None)
        if cache is not None and hasattr(cache, "pop"):
            cache.pop(name, None)


class PatitasMarkdown:
    """Markdown converter backed by patitas.

    Args:
        options: Passed through to ``patitas.Markdown``; the table plugin is
            enabled unless ``plugins`` is given.

    """

    def __init__(self, options: Mapping[str, Any] | None = None) -> None:
        from patitas import Markdown

        settings = {"plugins": ["table"], **(options or {})}
        self._md = Markdown(**settings)

    def __call__(self, text: str) -> str:
        return self._md(text)
