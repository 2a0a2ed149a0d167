"""Normalize recovered campaign JSON into a short list of emails."""

from __future__ import annotations

import json
import logging
import re
import reprlib
from collections.abc import Mapping
from typing import Any

from campaign_clients.extraction.models import EmailRecord
from campaign_clients.extraction.text import textify

logger = logging.getLogger(__name__)

MAX_EMAILS = 3
DEDUP_BODY_PREFIX = 80
FLAT_PAIR_LIMIT = 3

ROOT_ARRAY_FIELDS = ("campaign_emails", "emails", "email_sequence", "emails_de", "sequenz")
CONTAINER_FIELDS = ("campaign", "kampagne", "sequence")
THREAD_ARRAY_FIELDS = ("emails", "email_sequence")

SUBJECT_FIELDS = ("subject", "subject_line", "titel", "betreff", "title")
BODY_FIELDS = ("body", "körper", "inhalt", "text", "content")
CTA_FIELDS = ("cta_type", "call_to_action", "cta", "handlungsaufforderung")

FLAT_SUBJECT_PREFIXES = ("subject", "betreff", "titel")
FLAT_BODY_PREFIXES = ("body", "körper", "inhalt", "text")

_THREAD_KEY_RE = re.compile(r"^(thread|faden)_\d+$", re.IGNORECASE)
_EMAIL_KEY_RE = re.compile(r"^(email|mail)_\d+$", re.IGNORECASE)


def map_campaign_to_emails(campaign: Any) -> list[EmailRecord]:
    """Collect, normalize, dedupe and cap the emails in a campaign object.

    Discovery order: root arrays, then thread/email entries of nested
    ``campaign``/``kampagne``/``sequence`` containers, then root
    ``email_N``/``mail_N`` entries, then flat ``subject_N``/``body_N`` pairs.
    Returns at most ``MAX_EMAILS`` records; never raises.
    """
    if not isinstance(campaign, Mapping):
        return []

    nodes = [
        *_root_arrays(campaign),
        *_container_entries(campaign),
        *_numbered_entries(campaign),
        *_flat_pairs(campaign),
    ]

    emails: list[EmailRecord] = []
    seen: set[str] = set()
    for node in nodes:
        record = _normalize(node)
        if record is None:
            continue
        key = f"{record.subject}:::{record.body[:DEDUP_BODY_PREFIX]}"
        if key in seen:
            continue
        seen.add(key)
        emails.append(record)

    if not emails:
        logger.warning(f"No emails found in campaign: {_preview(campaign)}")
    else:
        logger.info(f"Extracted {len(emails)} unique emails")
    return emails[:MAX_EMAILS]


def _root_arrays(campaign: Mapping) -> list:
    nodes: list = []
    for name in ROOT_ARRAY_FIELDS:
        value = campaign.get(name)
        if isinstance(value, list):
            nodes.extend(value)
    return nodes


def _container_entries(campaign: Mapping) -> list:
    nodes: list = []
    for name in CONTAINER_FIELDS:
        container = campaign.get(name)
        if not isinstance(container, Mapping):
            continue
        for key, thread in container.items():
            if not _THREAD_KEY_RE.match(str(key)):
                continue
            if isinstance(thread, list):
                nodes.extend(thread)
            elif isinstance(thread, Mapping):
                for field in THREAD_ARRAY_FIELDS:
                    if isinstance(thread.get(field), list):
                        nodes.extend(thread[field])
                nodes.extend(_numbered_entries(thread))
        if isinstance(container.get("emails"), list):
            nodes.extend(container["emails"])
        nodes.extend(_numbered_entries(container))
    return nodes


def _numbered_entries(obj: Mapping) -> list:
    return [value for key, value in obj.items() if _EMAIL_KEY_RE.match(str(key)) and value]


def _flat_pairs(campaign: Mapping) -> list[dict]:
    nodes = []
    for i in range(1, FLAT_PAIR_LIMIT + 1):
        subject = _first_text(campaign, [f"{p}_{i}" for p in FLAT_SUBJECT_PREFIXES])
        body = _first_text(campaign, [f"{p}_{i}" for p in FLAT_BODY_PREFIXES])
        if subject or body:
            cta = _first_text(campaign, [f"cta_{i}"])
            nodes.append({"subject": subject, "body": body, "cta_type": cta})
    return nodes


def _first_text(obj: Mapping, keys: list[str]) -> str:
    for key in keys:
        value = obj.get(key)
        if isinstance(value, str) and value:
            return value
    return ""


def _first_present(node: Mapping, fields: tuple[str, ...]) -> str:
    for field in fields:
        value = node.get(field)
        if value is not None:
            return textify(value)
    return ""


def _normalize(node: Any) -> EmailRecord | None:
    if not isinstance(node, Mapping):
        return None
    subject = _first_present(node, SUBJECT_FIELDS)
    body = _first_present(node, BODY_FIELDS)
    if not subject and not body:
        return None
    return EmailRecord(subject=subject, body=body, cta_type=_first_present(node, CTA_FIELDS))


def _preview(obj: Any) -> str:
    try:
        return json.dumps(obj, ensure_ascii=False, default=str)[:200]
    except (TypeError, ValueError, RecursionError):
        pass
    try:
        return str(obj)[:200]
    except RecursionError:
        return reprlib.repr(obj)[:200]
