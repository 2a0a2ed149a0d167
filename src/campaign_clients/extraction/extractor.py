"""Recover a campaign JSON object from unreliable agent output.

Agent output is free text: the campaign may sit in a ```json fence, be
embedded in prose, or be cut off mid-stream. Strategies are tried in order
and the first object carrying a campaign marker field wins:

1. fenced ```json blocks,
2. top-level balanced ``{...}`` regions,
3. progressive right-truncation from the last marker-led object.
"""

from __future__ import annotations

import json
import logging
import re

from campaign_clients.extraction.scanner import iter_balanced_objects

logger = logging.getLogger(__name__)

MARKER_FIELDS = ("campaign", "campaign_emails", "emails", "email_sequence")

TRUNCATION_STEP = 50
MIN_TRUNCATED_LENGTH = 20

_FENCED_JSON_RE = re.compile(r"```json\s*(.*?)```", re.IGNORECASE | re.DOTALL)
_MARKER_OPENING_RE = re.compile(
    r"\{\s*\"(?:" + "|".join(re.escape(f) for f in MARKER_FIELDS) + r")\""
)
_QUOTED_MARKERS = tuple(f'"{f}"' for f in MARKER_FIELDS)


def parse_json_object(text: str) -> dict | None:
    """Parse ``text`` as a JSON object; None when it is not one."""
    try:
        value = json.loads(text)
    except (ValueError, RecursionError):
        return None
    return value if isinstance(value, dict) else None


def has_campaign_marker(obj: object) -> bool:
    """True when ``obj`` carries a non-empty campaign marker field.

    Truthiness is loose: any list or dict counts, and so does any truthy
    scalar, so ``{"emails": "see below"}`` is accepted as a campaign.
    """
    if not isinstance(obj, dict):
        return False
    for name in MARKER_FIELDS:
        value = obj.get(name)
        if isinstance(value, (dict, list)) or (value not in (None, "", False, 0)):
            return True
    return False


def _mentions_marker(text: str) -> bool:
    return any(marker in text for marker in _QUOTED_MARKERS)


def _from_fenced_blocks(text: str) -> dict | None:
    for match in _FENCED_JSON_RE.finditer(text):
        obj = parse_json_object(match.group(1).strip())
        if has_campaign_marker(obj):
            return obj
    return None


def _from_balanced_scan(text: str) -> dict | None:
    for start, end in iter_balanced_objects(text):
        candidate = text[start:end]
        if not _mentions_marker(candidate):
            continue
        obj = parse_json_object(candidate)
        if has_campaign_marker(obj):
            return obj
    return None


def _from_truncation(text: str) -> dict | None:
    openings = list(_MARKER_OPENING_RE.finditer(text))
    if not openings:
        return None
    start = openings[-1].start()
    logger.debug(f"Attempting progressive truncation from position {start}")

    end = len(text)
    while end > start + MIN_TRUNCATED_LENGTH:
        obj = parse_json_object(text[start:end])
        if has_campaign_marker(obj):
            logger.debug(f"Progressive truncation succeeded at length {end - start}")
            return obj
        end -= TRUNCATION_STEP
    return None


_STRATEGIES = (
    ("fenced block", _from_fenced_blocks),
    ("balanced scan", _from_balanced_scan),
    ("truncation", _from_truncation),
)


def extract_campaign_json(text: str) -> dict | None:
    """Recover the campaign object from agent text, or None."""
    if not text or not isinstance(text, str):
        return None

    for name, strategy in _STRATEGIES:
        obj = strategy(text)
        if obj is not None:
            logger.debug(f"Extracted campaign JSON via {name}")
            return obj

    logger.warning(f"Could not extract campaign JSON from {len(text)} characters")
    return None


def extract_campaign_from_transcript(answer: str, reasoning: str = "") -> dict | None:
    """Try the combined transcript first, then answer text, then reasoning."""
    transcript = "\n".join(part for part in (answer, reasoning) if part)
    tried: set[str] = set()
    for source in (transcript, answer, reasoning):
        if not source or source in tried:
            continue
        tried.add(source)
        obj = extract_campaign_json(source)
        if obj is not None:
            return obj
    return None
