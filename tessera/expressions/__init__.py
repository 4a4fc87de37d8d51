"""
Tessera Expressions
===================

The expression language embedded in templates:
- Nodes: expression objects and their template metadata
- Grammar: tokenizer and parser turning expression text into nodes
"""

from tessera.expressions.nodes import (
    AliasPathExpression,
    AttributePathExpression,
    BracketsExpression,
    Expression,
    ExpressionMeta,
    FnExpression,
    LiteralExpression,
    OperatorExpression,
    PathExpression,
    RelativePathExpression,
    SequenceExpression,
)
from tessera.expressions.grammar import (
    ExpressionParser,
    create_path_expression,
    object_from_expression,
)

__all__ = [
    "AliasPathExpression",
    "AttributePathExpression",
    "BracketsExpression",
    "Expression",
    "ExpressionMeta",
    "FnExpression",
    "LiteralExpression",
    "OperatorExpression",
    "PathExpression",
    "RelativePathExpression",
    "SequenceExpression",
    "ExpressionParser",
    "create_path_expression",
    "object_from_expression",
]
