"""Locate top-level brace-balanced regions in free text."""

from __future__ import annotations

from typing import Iterator


def iter_balanced_objects(text: str) -> Iterator[tuple[int, int]]:
    """Yield ``(start, end)`` half-open ranges of top-level ``{...}`` regions.

    Single left-to-right pass. Braces inside double-quoted strings are
    ignored, and a backslash escapes the next character while inside a
    string. A closing brace with no open region (stray prose brace) is
    skipped so it cannot desynchronize the depth count. Nested regions are
    never yielded separately.
    """
    in_string = False
    escaped = False
    depth = 0
    start = -1

    for i, ch in enumerate(text):
        if in_string:
            if escaped:
                escaped = False
            elif ch == "\\":
                escaped = True
            elif ch == '"':
                in_string = False
            continue

        if ch == '"':
            in_string = True
        elif ch == "{":
            if depth == 0:
                start = i
            depth += 1
        elif ch == "}":
            if depth == 0:
                continue
            depth -= 1
            if depth == 0:
                yield start, i + 1
                start = -1
