"""Shared type definitions for press."""

from collections.abc import Awaitable, Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any, Literal

if TYPE_CHECKING:
    from press.pipeline.context import BuildContext

# Raw filesystem change kinds, as reported by the watcher
type RawKind = Literal["added", "changed", "deleted", "renamed"]

# Page path relative to the page root (e.g. ``docs/intro.md``)
type SourcePath = Path

# Addressing key of a data source (filename stem)
type DataName = str

# Template name: page-root-relative path without extension
type TemplateName = str

# An extension pipeline step; may be sync or async
type Step = Callable[[BuildContext], Awaitable[None] | None]

# Front matter and injected page metadata
type Metadata = dict[str, Any]
