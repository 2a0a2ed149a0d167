"""Tests for campaign JSON recovery."""

import json

import pytest

from campaign_clients.extraction.extractor import (
    extract_campaign_from_transcript,
    extract_campaign_json,
    has_campaign_marker,
    parse_json_object,
)


def test_parse_json_object():
    assert parse_json_object('{"a": 1}') == {"a": 1}
    assert parse_json_object("[1, 2]") is None
    assert parse_json_object("{broken") is None
    assert parse_json_object("") is None


def test_has_campaign_marker():
    assert has_campaign_marker({"emails": []})
    assert has_campaign_marker({"campaign": {"thread_1": {}}})
    assert not has_campaign_marker({"emails": None})
    assert not has_campaign_marker({"email_sequence": ""})
    assert not has_campaign_marker({"subject_1": "x"})
    assert not has_campaign_marker(["emails"])
    assert has_campaign_marker({"emails": "see below"})


@pytest.mark.parametrize("text", ["", "no json here", None])
def test_null_safety(text):
    assert extract_campaign_json(text) is None


def test_fenced_block():
    text = 'Sure!\n```json\n{"campaign_emails":[{"subject":"Hi","body":"World"}]}\n```\nBye'
    assert extract_campaign_json(text) == {
        "campaign_emails": [{"subject": "Hi", "body": "World"}]
    }


def test_fenced_block_skips_non_campaign_blocks():
    text = (
        '```json\n{"lead": "x"}\n```\n'
        '```JSON\n{"emails": [{"subject": "second"}]}\n```'
    )
    assert extract_campaign_json(text) == {"emails": [{"subject": "second"}]}


def test_fenced_block_invalid_falls_through_to_scan():
    text = '```json\n{"emails": [oops]}\n```\nRetry: {"emails": [{"subject": "ok"}]}'
    assert extract_campaign_json(text) == {"emails": [{"subject": "ok"}]}


def test_balanced_scan_in_prose():
    text = (
        'My reasoning {with stray braces}. Result: '
        '{"campaign":{"thread_1":{"email_1":{"subject":"A","body":"B"}}}} thanks'
    )
    result = extract_campaign_json(text)
    assert result["campaign"]["thread_1"]["email_1"] == {"subject": "A", "body": "B"}


def test_balanced_scan_skips_objects_without_marker():
    text = '{"note": "first"} {"email_sequence": [{"subject": "S"}]}'
    assert extract_campaign_json(text) == {"email_sequence": [{"subject": "S"}]}


def test_marker_only_inside_string_value_is_rejected():
    text = '{"note": "the \\"emails\\" key is missing"}'
    assert extract_campaign_json(text) is None


def test_truncation_recovers_inside_unclosed_prose_brace():
    campaign = {"emails": [{"subject": "X", "body": "Y"}]}
    # The unclosed brace before the object keeps the scanner from ever
    # returning to depth 0; truncation trims the 50-char tail instead.
    text = "Note {: " + json.dumps(campaign) + "z" * 50
    assert extract_campaign_json(text) == campaign


def test_truncated_stream_does_not_raise():
    text = 'Blah blah {"emails":[{"subject":"X","body":"Y"'
    result = extract_campaign_json(text)
    assert result is None or isinstance(result, dict)


def test_truncation_tolerates_whitespace_after_brace():
    text = 'Draft { {\n  "emails": [{"subject": "X"}]\n}' + "z" * 50
    assert extract_campaign_json(text) == {"emails": [{"subject": "X"}]}


def test_deterministic():
    text = 'a {"emails": [{"subject": "1"}]} b {"emails": [{"subject": "2"}]}'
    assert extract_campaign_json(text) == extract_campaign_json(text)
    assert extract_campaign_json(text)["emails"][0]["subject"] == "1"


def test_flat_pairs_have_no_marker():
    text = '{"subject_1":"S1","body_1":"B1","subject_2":"S2","body_2":"B2"}'
    assert extract_campaign_json(text) is None


def test_transcript_prefers_combined_then_answer_then_reasoning():
    reasoning = 'Draft: {"emails": [{"subject": "from reasoning"}]}'
    assert extract_campaign_from_transcript("no json", reasoning) == {
        "emails": [{"subject": "from reasoning"}]
    }
    answer = '{"emails": [{"subject": "from answer"}]}'
    assert extract_campaign_from_transcript(answer, reasoning)["emails"][0]["subject"] == (
        "from answer"
    )
    assert extract_campaign_from_transcript("", "") is None
