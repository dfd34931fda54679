from __future__ import annotations

import re
from pathlib import Path
from typing import TYPE_CHECKING

from ..core.fs import read_text, write_text
from ..core.logging import log_event

if TYPE_CHECKING:
    from ..core.context import RunOptions

NAMESPACE_MARKER = re.compile(r"<namespacePrefix>[-_A-Za-z0-9]+</namespacePrefix>")


def _lines(text: str) -> list[str]:
    return text.splitlines(keepends=True)


def find_marker_lines(text: str) -> list[int]:
    """Return the 1-based numbers of lines containing a namespacePrefix element."""
    return [number for number, line in enumerate(_lines(text), start=1) if NAMESPACE_MARKER.search(line)]


def strip_namespace_marker(text: str) -> str:
    matches = find_marker_lines(text)
    if len(matches) != 1:
        return text
    lines = _lines(text)
    del lines[matches[0] - 1]
    return "".join(lines)


def strip_namespace_marker_file(path: Path, ctx: RunOptions | None = None) -> int | None:
    text = read_text(path)
    matches = find_marker_lines(text)
    if len(matches) != 1:
        if ctx and matches:
            log_event(ctx, "verbose", "manifest", "marker-ambiguous", path=str(path), lines=matches)
        return None
    write_text(path, strip_namespace_marker(text))
    if ctx:
        log_event(ctx, "verbose", "manifest", "marker-removed", path=str(path), line=matches[0])
    return matches[0]
