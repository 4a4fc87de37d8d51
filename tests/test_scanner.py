"""Tests for splitting text into literal and expression spans."""

import pytest

from tessera.engine.scanner import match_braces, parse_text
from tessera.errors import TemplateLexicalError
from tessera.expressions.nodes import LiteralExpression, PathExpression


def scan(data):
    events = []
    parse_text(
        data,
        lambda text: events.append(("literal", text)),
        lambda expression: events.append(("expression", expression)),
    )
    return events


@pytest.mark.parametrize("data", ["hello world", "a } b", "single { brace", "  "])
def test_literal_only_text_is_one_span(data):
    assert scan(data) == [("literal", data)]


def test_spans_are_reported_in_order():
    events = scan("a {{x}} b {{y.z}}")
    assert events == [
        ("literal", "a "),
        ("expression", PathExpression(["x"])),
        ("literal", " b "),
        ("expression", PathExpression(["y", "z"])),
    ]


def test_nested_braces_are_captured_whole():
    events = scan("{{ {a: {b: 1}} }}")
    assert len(events) == 1
    kind, expression = events[0]
    assert kind == "expression"
    assert expression == LiteralExpression({"a": {"b": 1}})
    assert expression.meta.source == "{a: {b: 1}}"


def test_empty_delimiters_emit_nothing():
    assert scan("{{}}") == []
    assert scan("a{{}}b") == [("literal", "a"), ("literal", "b")]


@pytest.mark.parametrize("data", ["{{if x", "text {{a", "{{ {a: 1} }"])
def test_unbalanced_braces_fail(data):
    with pytest.raises(TemplateLexicalError, match="Mismatched braces"):
        scan(data)


def test_match_braces():
    assert match_braces("{{a}}", 2, 0, "{", "}") == 5
    assert match_braces("x{{ {} }}y", 2, 1, "{", "}") == 9
    assert match_braces("{{a}", 2, 0, "{", "}") == -1
