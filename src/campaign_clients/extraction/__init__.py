"""Tolerant extraction of structured email campaigns from agent streams."""

from campaign_clients.extraction.accumulator import StreamAccumulator, reconcile
from campaign_clients.extraction.extractor import (
    MARKER_FIELDS,
    extract_campaign_from_transcript,
    extract_campaign_json,
    has_campaign_marker,
    parse_json_object,
)
from campaign_clients.extraction.mapper import MAX_EMAILS, map_campaign_to_emails
from campaign_clients.extraction.models import (
    FINAL_ANSWER,
    KEEPALIVE,
    OTHER,
    REASONING,
    EmailRecord,
    GenerationResult,
    StreamEvent,
)
from campaign_clients.extraction.scanner import iter_balanced_objects
from campaign_clients.extraction.session import GenerationSession
from campaign_clients.extraction.text import textify

__all__ = [
    "textify",
    "reconcile",
    "StreamAccumulator",
    "iter_balanced_objects",
    "MARKER_FIELDS",
    "parse_json_object",
    "has_campaign_marker",
    "extract_campaign_json",
    "extract_campaign_from_transcript",
    "MAX_EMAILS",
    "map_campaign_to_emails",
    "GenerationSession",
    "StreamEvent",
    "EmailRecord",
    "GenerationResult",
    "REASONING",
    "FINAL_ANSWER",
    "KEEPALIVE",
    "OTHER",
]
