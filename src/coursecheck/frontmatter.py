"""Split a Markdown page into its YAML front-matter and body."""

from __future__ import annotations

from typing import Any

import yaml

OPENING_FENCE = "---"
CLOSING_FENCES = {"---", "..."}


class FrontMatterError(ValueError):
    """Raised when a page has no usable front-matter block."""


def split_front_matter(text: str) -> tuple[dict[str, Any], str]:
    """Return the parsed front-matter mapping and the remaining body text."""
    text = text.removeprefix("\ufeff")
    lines = text.splitlines(keepends=True)
    if not lines or lines[0].rstrip() != OPENING_FENCE:
        raise FrontMatterError("missing front-matter block")

    for index in range(1, len(lines)):
        if lines[index].rstrip() in CLOSING_FENCES:
            block = "".join(lines[1:index])
            body = "".join(lines[index + 1 :])
            return _parse_block(block), body

    raise FrontMatterError("front-matter block is not terminated")


def _parse_block(block: str) -> dict[str, Any]:
    try:
        data = yaml.safe_load(block)
    except yaml.YAMLError as exc:
        mark = getattr(exc, "problem_mark", None)
        problem = getattr(exc, "problem", None) or str(exc)
        if mark is not None:
            # +2 accounts for the opening fence and the 0-based mark.
            raise FrontMatterError(f"invalid YAML on line {mark.line + 2}: {problem}") from exc
        raise FrontMatterError(f"invalid YAML: {problem}") from exc

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise FrontMatterError(f"front-matter must be a mapping, got {type(data).__name__}")
    return {str(key): value for key, value in data.items()}
