"""Trimmed, line oriented diff of two manifest texts.

Lines are compared after stripping surrounding whitespace so indentation-only
changes do not count. The edit script is a shortest one (Myers); within every
change block removed lines are reported before added lines, which keeps the
output stable for identical inputs.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Literal, Sequence

Tag = Literal["added", "removed", "unchanged"]
Op = Literal["equal", "delete", "insert"]


@dataclass(frozen=True)
class DiffSegment:
    tag: Tag
    lines: tuple[str, ...]

    @property
    def added(self) -> bool:
        return self.tag == "added"

    @property
    def removed(self) -> bool:
        return self.tag == "removed"

    @property
    def value(self) -> str:
        return "\n".join(self.lines)

    @property
    def display(self) -> str:
        return "\n".join(line.strip() for line in self.lines)

    def to_dict(self) -> dict[str, object]:
        return {"tag": self.tag, "lines": [line.strip() for line in self.lines]}


def _edit_script(a: Sequence[str], b: Sequence[str]) -> list[Op]:
    n, m = len(a), len(b)
    max_d = n + m
    offset = max_d + 1
    v = [0] * (2 * max_d + 3)
    trace: list[list[int]] = []
    final_d = 0
    for d in range(max_d + 1):
        # v[k] for k in [-d-1, d+1], stored at index k + d + 1
        trace.append(v[offset - d - 1 : offset + d + 2])
        done = False
        for k in range(-d, d + 1, 2):
            if k == -d or (k != d and v[offset + k - 1] < v[offset + k + 1]):
                x = v[offset + k + 1]
            else:
                x = v[offset + k - 1] + 1
            y = x - k
            while x < n and y < m and a[x] == b[y]:
                x += 1
                y += 1
            v[offset + k] = x
            if x >= n and y >= m:
                done = True
                break
        if done:
            final_d = d
            break

    ops: list[Op] = []
    x, y = n, m
    for d in range(final_d, -1, -1):
        snap = trace[d]
        k = x - y
        if k == -d or (k != d and snap[k - 1 + d + 1] < snap[k + 1 + d + 1]):
            prev_k = k + 1
        else:
            prev_k = k - 1
        prev_x = snap[prev_k + d + 1]
        prev_y = prev_x - prev_k
        while x > prev_x and y > prev_y:
            ops.append("equal")
            x -= 1
            y -= 1
        if d > 0:
            ops.append("insert" if x == prev_x else "delete")
        x, y = prev_x, prev_y
    ops.reverse()
    return ops


def _append(segments: list[DiffSegment], tag: Tag, lines: list[str]) -> None:
    if not lines:
        return
    if segments and segments[-1].tag == tag:
        segments[-1] = DiffSegment(tag, segments[-1].lines + tuple(lines))
        return
    segments.append(DiffSegment(tag, tuple(lines)))


def diff_trimmed_lines(a: str, b: str) -> list[DiffSegment]:
    lines_a = a.splitlines()
    lines_b = b.splitlines()
    keys_a = [line.strip() for line in lines_a]
    keys_b = [line.strip() for line in lines_b]

    prefix = 0
    while prefix < len(keys_a) and prefix < len(keys_b) and keys_a[prefix] == keys_b[prefix]:
        prefix += 1
    suffix = 0
    while (
        suffix < len(keys_a) - prefix
        and suffix < len(keys_b) - prefix
        and keys_a[len(keys_a) - 1 - suffix] == keys_b[len(keys_b) - 1 - suffix]
    ):
        suffix += 1

    mid_a = keys_a[prefix : len(keys_a) - suffix]
    mid_b = keys_b[prefix : len(keys_b) - suffix]
    segments: list[DiffSegment] = []
    _append(segments, "unchanged", lines_a[:prefix])

    i, j = prefix, prefix
    removed: list[str] = []
    added: list[str] = []
    for op in _edit_script(mid_a, mid_b):
        if op == "equal":
            _append(segments, "removed", removed)
            _append(segments, "added", added)
            removed, added = [], []
            _append(segments, "unchanged", [lines_a[i]])
            i += 1
            j += 1
        elif op == "delete":
            removed.append(lines_a[i])
            i += 1
        else:
            added.append(lines_b[j])
            j += 1
    _append(segments, "removed", removed)
    _append(segments, "added", added)
    _append(segments, "unchanged", lines_a[len(lines_a) - suffix :] if suffix else [])
    return segments


def changed_segments(segments: Sequence[DiffSegment]) -> list[DiffSegment]:
    return [segment for segment in segments if segment.tag != "unchanged"]
