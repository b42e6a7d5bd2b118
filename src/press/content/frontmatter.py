"""Front matter extraction for page sources.

A page source may open with a YAML mapping delimited by ``---`` lines::

    ---
    title: About
    layout: _base
    ---
    # About us

The closing line must be exactly ``---`` (trailing spaces allowed) and must
end within the first ``metadata_buffer`` bytes of the UTF-8 encoded source;
a source whose block does not close inside that window is treated as all body.
"""

from __future__ import annotations

import re
from typing import Any

import yaml

from press._errors import ContentError

_DELIMITER = "---"
_CLOSING_LINE = re.compile(r"^---[ \t]*\r?$", re.MULTILINE)


def _split_block(source: str, limit: int) -> tuple[str, str] | None:
    """Return ``(block, body)`` for a closed front matter block, or None."""
    first_newline = source.find("\n")
    if first_newline == -1 or source[:first_newline].rstrip() != _DELIMITER:
        return None
    closing = _CLOSING_LINE.search(source, first_newline + 1)
    if closing is None:
        return None
    if len(source[:closing.end()].encode("utf-8")) > limit:
        return None
    return source[first_newline + 1:closing.start()], source[closing.end() + 1:]


def parse_metadata(source: str, *, limit: int = 1024, origin: str = "<page>") -> tuple[dict[str, Any], str]:
    """Split a page source into its metadata mapping and body.

    Args:
        source: Full page source text.
        limit: Number of UTF-8 bytes scanned for the closing delimiter.
        origin: Name used in error messages.

    Returns:
        ``(metadata, body)``; metadata is empty when there is no block.

    Raises:
        ContentError: If the block is not valid YAML or not a mapping.

    """
    split = _split_block(source, limit)
    if split is None:
        return {}, source
    block, body = split

    try:
        metadata = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        msg = f"Invalid front matter in {origin}: {exc}"
        raise ContentError(msg) from exc

    if metadata is None:
        return {}, body
    if not isinstance(metadata, dict):
        msg = f"Front matter in {origin} must be a mapping, got {type(metadata).__name__}"
        raise ContentError(msg)
    return metadata, body


def parse_body(source: str, *, limit: int = 1024) -> str:
    """Return the source with any front matter block removed."""
    split = _split_block(source, limit)
    return source if split is None else split[1]
