"""Tests for expression keyword classification."""

import pytest

from tessera.engine.classifier import create_expression
from tessera.errors import ExpressionSyntaxError
from tessera.expressions.nodes import (
    Expression,
    LiteralExpression,
    PathExpression,
    SequenceExpression,
)


@pytest.mark.parametrize(
    "source, block_type, path",
    [
        ("if user.admin", "if", ["user", "admin"]),
        ("unless done", "unless", ["done"]),
        ("else if other", "else if", ["other"]),
        ("each items", "each", ["items"]),
        ("with page.user", "with", ["page", "user"]),
    ],
)
def test_block_keywords(source, block_type, path):
    expression = create_expression(source)
    assert expression.meta.block_type == block_type
    assert not expression.meta.is_end
    assert expression == PathExpression(path)


def test_block_alias():
    expression = create_expression("each items as #item")
    assert expression.meta.block_type == "each"
    assert expression.meta.as_name == "#item"
    assert expression == PathExpression(["items"])


@pytest.mark.parametrize("source", ["else", "unbound", "bound"])
def test_bare_keywords_have_no_path(source):
    expression = create_expression(source)
    assert expression.meta.block_type == source
    assert type(expression) is Expression


@pytest.mark.parametrize("source, block_type", [("/if", "if"), ("/ each ", "each"), ("/", "end")])
def test_end_markers(source, block_type):
    expression = create_expression(source)
    assert expression.meta.is_end
    assert expression.meta.block_type == block_type


def test_value_prefixes():
    expression = create_expression("unescaped html")
    assert expression.meta.unescaped
    assert expression.meta.block_type is None
    assert expression == PathExpression(["html"])


def test_last_bind_keyword_wins():
    expression = create_expression("bound unbound x")
    assert expression.meta.bind_type == "unbound"
    assert expression == PathExpression(["x"])


def test_view_expression():
    expression = create_expression("view 'card', {size: 1}")
    assert expression.meta.value_type == "view"
    assert expression == SequenceExpression(
        [LiteralExpression("card"), LiteralExpression({"size": 1})]
    )


def test_blank_body_is_empty_expression():
    expression = create_expression("   ")
    assert type(expression) is Expression
    assert expression.meta.source == ""
    assert expression.meta.block_type is None


def test_source_is_trimmed():
    assert create_expression("  name  ").meta.source == "name"


def test_grammar_errors_carry_expression_source():
    with pytest.raises(ExpressionSyntaxError, match="Within expression: a \\+"):
        create_expression(" a + ")
