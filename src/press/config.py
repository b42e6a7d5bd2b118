"""Press configuration.

PressConfig is the central configuration object, frozen after creation.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

PAGE_SUFFIXES = frozenset({".md", ".markdown", ".html"})
MARKDOWN_SUFFIXES = frozenset({".md", ".markdown"})
DATA_SUFFIXES = frozenset({".py", ".json", ".yaml", ".yml"})

# Filename prefix that keeps a page source out of the page store
EXCLUSION_MARKER = "_"

OUTPUT_SUFFIX = ".html"


@dataclass(frozen=True, slots=True)
class PressConfig:
    """Configuration for a Press build.

    Attributes:
        root: Project root that all other paths resolve against.
              Always resolved to an absolute path on construction.
        src: Page root, relative to ``root``.
        data: Data root, relative to ``root``.
        dest: Output root; relative values are joined to ``root``.
        metadata_buffer: Number of UTF-8 bytes scanned for the closing
            front-matter delimiter.
        templating: Options passed through to the template engine.
        markdown: Options passed through to the markdown converter.
        watch_debounce: Watcher debounce window in milliseconds.

    """

    root: Path = field(default_factory=Path.cwd)
    src: str = "src"
    data: str = "data"
    dest: Path = field(default_factory=lambda: Path("build"))
    metadata_buffer: int = 1024
    templating: Mapping[str, Any] = field(default_factory=dict)
    markdown: Mapping[str, Any] = field(default_factory=dict)
    watch_debounce: int = 300

    def __post_init__(self) -> None:
        # watchfiles reports absolute paths; relative_to() needs an absolute root.
        if not self.root.is_absolute():
            object.__setattr__(self, "root", self.root.resolve())
        if not isinstance(self.dest, Path):
            object.__setattr__(self, "dest", Path(self.dest))

    @property
    def src_path(self) -> Path:
        """Absolute path to the page root."""
        return self.root / self.src

    @property
    def data_path(self) -> Path:
        """Absolute path to the data root."""
        return self.root / self.data

    @property
    def dest_path(self) -> Path:
        """Absolute path to the output root."""
        if self.dest.is_absolute():
            return self.dest
        return self.root / self.dest
