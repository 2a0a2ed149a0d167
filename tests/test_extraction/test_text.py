"""Tests for content flattening."""

from types import SimpleNamespace

from campaign_clients.extraction.text import textify


def test_none_is_empty():
    assert textify(None) == ""


def test_string_is_identity():
    for s in ["", "hello", "  spaced  ", "Grüße {json}"]:
        assert textify(s) == s


def test_nested_content_parts():
    value = [
        {"type": "text", "text": "Hello "},
        [{"type": "text", "text": "nested "}, "plain "],
        {"content": [{"text": "deep"}]},
    ]
    assert textify(value) == "Hello nested plain deep"


def test_text_field_wins_over_content():
    assert textify({"text": "a", "content": "b"}) == "a"


def test_content_string():
    assert textify({"content": "wrapped"}) == "wrapped"


def test_sdk_object_attributes():
    part = SimpleNamespace(type="text", text="from sdk")
    assert textify([part, SimpleNamespace(content="!")]) == "from sdk!"


def test_other_mapping_is_serialized():
    assert textify({"subject": "Hi"}) == '{"subject": "Hi"}'


def test_scalars():
    assert textify(5) == "5"
    assert textify(True) == "true"


def test_unserializable_falls_back_to_str():
    class Opaque:
        def __str__(self):
            return "opaque"

    assert textify(Opaque()) == "opaque"
    assert textify({"key": {1, 2}}).startswith("{")


def _nest_lists(leaf, depth):
    value = leaf
    for _ in range(depth):
        value = [value]
    return value


def test_deeply_nested_lists():
    assert textify(_nest_lists("leaf", 3000)) == "leaf"


def test_deeply_nested_content_wrappers():
    value = {"text": "core"}
    for _ in range(3000):
        value = {"content": [value]}
    assert textify(value) == "core"


def test_deeply_nested_mapping_does_not_raise():
    value = {"k": "v"}
    for _ in range(3000):
        value = {"wrap": value}
    result = textify(value)
    assert isinstance(result, str)
    assert result
