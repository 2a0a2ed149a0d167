"""Merge streamed fragments into running per-message text buffers."""

from __future__ import annotations

import logging

from campaign_clients.extraction.models import FINAL_ANSWER, REASONING, StreamEvent
from campaign_clients.extraction.text import textify

logger = logging.getLogger(__name__)

ACCUMULATED_KINDS = (REASONING, FINAL_ANSWER)


def reconcile(previous: str, fragment: str) -> str:
    """Fold one stream fragment into the text seen so far.

    The stream does not say whether an event carries the full text so far or
    only the next increment. A fragment that starts with the current buffer
    is taken as a cumulative restatement and replaces it; anything else is
    appended as a delta. An upstream that resends a *shorter* cumulative text
    (for example after a correction) is therefore misread as a delta and
    duplicated. Empty fragments leave the buffer unchanged.
    """
    if not fragment:
        return previous
    if fragment.startswith(previous):
        return fragment
    return previous + fragment


class StreamAccumulator:
    """Running text buffers for one generation session.

    One buffer is kept per ``(kind, message_id)``. Only reasoning and
    final-answer events are accumulated; a new message id for a kind starts
    a fresh buffer instead of reconciling against the previous message.
    """

    def __init__(self):
        self._buffers: dict[tuple[str, str], str] = {}
        self._latest: dict[str, tuple[str, str]] = {}

    def feed(self, event: StreamEvent) -> str | None:
        """Apply one event; returns the updated buffer, or None if ignored."""
        if event.kind not in ACCUMULATED_KINDS:
            return None
        fragment = textify(event.content)
        if not fragment:
            return None

        key = (event.kind, event.message_id)
        if self._latest.get(event.kind) != key:
            if key in self._buffers:
                logger.debug(f"Resuming {event.kind} message {event.message_id!r}")
            self._latest[event.kind] = key
        buffer = reconcile(self._buffers.get(key, ""), fragment)
        self._buffers[key] = buffer
        return buffer

    def current(self, kind: str) -> str:
        """Buffer of the most recent message of ``kind``."""
        key = self._latest.get(kind)
        return self._buffers.get(key, "") if key else ""

    def text(self, kind: str) -> str:
        """All buffers of ``kind`` in discovery order, newline-joined."""
        return "\n".join(
            buffer for (k, _), buffer in self._buffers.items() if k == kind and buffer
        )

    def message_ids(self, kind: str) -> list[str]:
        return [message_id for (k, message_id) in self._buffers if k == kind]

    def reset(self) -> None:
        self._buffers.clear()
        self._latest.clear()
