"""Tests for the expression grammar."""

import pytest

from tessera.errors import ExpressionSyntaxError
from tessera.expressions.grammar import create_path_expression, object_from_expression
from tessera.expressions.nodes import (
    AliasPathExpression,
    AttributePathExpression,
    BracketsExpression,
    FnExpression,
    LiteralExpression,
    OperatorExpression,
    PathExpression,
    RelativePathExpression,
    SequenceExpression,
)


@pytest.mark.parametrize(
    "source, value",
    [
        ("3", 3),
        ("2.5", 2.5),
        ("'text'", "text"),
        ('"a\\nb"', "a\nb"),
        ("true", True),
        ("false", False),
        ("null", None),
        ("undefined", None),
        ("-1", -1),
        ("!true", False),
        ("[1, 'a']", [1, "a"]),
        ("{a: 1, 'b': [true], c: {d: null}}", {"a": 1, "b": [True], "c": {"d": None}}),
    ],
)
def test_literals(source, value):
    expression = create_path_expression(source)
    assert expression.is_literal
    assert expression.get() == value


def test_paths():
    assert create_path_expression("user.profile.name") == PathExpression(["user", "profile", "name"])
    assert create_path_expression("this") == RelativePathExpression([])
    assert create_path_expression("this.title") == RelativePathExpression(["title"])
    assert create_path_expression("#item.title") == AliasPathExpression("#item", ["title"])
    assert create_path_expression("@content") == AttributePathExpression("content")


def test_brackets():
    expression = create_path_expression("items[index].title")
    assert expression == BracketsExpression(
        PathExpression(["items"]), PathExpression(["index"]), ["title"]
    )


def test_function_calls():
    assert create_path_expression("$preventDefault()") == FnExpression(["$preventDefault"])
    assert create_path_expression("format(date, 'short').length") == FnExpression(
        ["format"],
        [PathExpression(["date"]), LiteralExpression("short")],
        ["length"],
    )


def test_operator_precedence():
    expression = create_path_expression("a + b * c > 2 && !done")
    assert expression == OperatorExpression("&&", [
        OperatorExpression(">", [
            OperatorExpression("+", [
                PathExpression(["a"]),
                OperatorExpression("*", [PathExpression(["b"]), PathExpression(["c"])]),
            ]),
            LiteralExpression(2),
        ]),
        OperatorExpression("!", [PathExpression(["done"])]),
    ])


def test_strict_equality_and_ternary():
    expression = create_path_expression("a === 1 ? 'one' : other")
    assert expression == OperatorExpression("?", [
        OperatorExpression("===", [PathExpression(["a"]), LiteralExpression(1)]),
        LiteralExpression("one"),
        PathExpression(["other"]),
    ])


def test_non_literal_object_and_array():
    assert create_path_expression("{a: x, b: 2}") == OperatorExpression("{}", [
        LiteralExpression("a"), PathExpression(["x"]),
        LiteralExpression("b"), LiteralExpression(2),
    ])
    assert create_path_expression("[1, x]") == OperatorExpression(
        "[]", [LiteralExpression(1), PathExpression(["x"])]
    )


def test_sequence():
    expression = create_path_expression("'card', {title: name}")
    assert isinstance(expression, SequenceExpression)
    assert expression.args[0] == LiteralExpression("card")
    assert expression.args[1].name == "{}"


@pytest.mark.parametrize(
    "source, message",
    [
        ("'abc", "Unterminated string"),
        ("a b", "Unexpected token"),
        ("1()", "Only named functions can be called"),
        ("a.", "Expected IDENT"),
        ("{a 1}", "Expected :"),
        ("a ~ b", "Unexpected character"),
        ("-'x'", "Cannot apply"),
    ],
)
def test_syntax_errors(source, message):
    with pytest.raises(ExpressionSyntaxError, match=message):
        create_path_expression(source)


def test_object_from_expression():
    assert object_from_expression(create_path_expression("{a: 1}")) == {"a": 1}
    events = object_from_expression(create_path_expression("{submit: save(), reset: 'x'}"))
    assert events == {"submit": FnExpression(["save"]), "reset": LiteralExpression("x")}


def test_object_from_expression_rejects_non_objects():
    with pytest.raises(ExpressionSyntaxError, match="Expected an object"):
        object_from_expression(create_path_expression("name"))
    with pytest.raises(ExpressionSyntaxError, match="Expected an object"):
        object_from_expression(create_path_expression("[1]"))


def test_to_dict_includes_meta():
    from tessera.engine.classifier import create_expression

    data = create_expression("each items as #item").to_dict()
    assert data["type"] == "PathExpression"
    assert data["segments"] == ["items"]
    assert data["meta"] == {"source": "each items as #item", "block_type": "each", "as_name": "#item"}
