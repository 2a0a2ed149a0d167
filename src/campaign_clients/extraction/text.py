"""Flatten streamed message content into plain text."""

from __future__ import annotations

import json
import reprlib
from collections.abc import Mapping
from typing import Any


def textify(value: Any) -> str:
    """Convert any content shape the agent stream produces into one string.

    Handles plain strings, content-part lists of any depth
    (``[{"type": "text", "text": "..."}, ...]``), ``{"text": ...}`` and
    ``{"content": ...}`` wrappers, and SDK objects exposing the same fields
    as attributes. Anything else is JSON-serialized, or ``str()``-ed when
    serialization fails. Nesting is walked with an explicit stack, so deep
    input never raises.
    """
    parts: list[str] = []
    stack = [value]
    while stack:
        item = stack.pop()
        if item is None:
            continue
        if isinstance(item, str):
            parts.append(item)
            continue
        if isinstance(item, (list, tuple)):
            stack.extend(reversed(item))
            continue

        text = _field(item, "text")
        if isinstance(text, str):
            parts.append(text)
            continue
        content = _field(item, "content")
        if isinstance(content, str):
            parts.append(content)
        elif isinstance(content, (list, tuple)):
            stack.extend(reversed(content))
        else:
            parts.append(_serialize(item))
    return "".join(parts)


def _field(value: Any, name: str) -> Any:
    if isinstance(value, Mapping):
        return value.get(name)
    if isinstance(value, (int, float, bool, bytes)):
        return None
    return getattr(value, name, None)


def _serialize(value: Any) -> str:
    try:
        return json.dumps(value, ensure_ascii=False)
    except (TypeError, ValueError, RecursionError):
        pass
    try:
        return str(value)
    except RecursionError:
        # reprlib caps nesting depth
        return reprlib.repr(value)
