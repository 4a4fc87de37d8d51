"""
Tessera Expression Grammar
==========================

Hand-written tokenizer and recursive-descent parser for the expression
language embedded in ``{{ ... }}``.

Supported syntax:
    - Literals: 1, 2.5, 'text', "text", true, false, null, undefined
    - Paths: user.name, this, this.title, #item.title, @content
    - Brackets: items[index].title
    - Calls: format(date), $preventDefault()
    - Unary: !x, -x, +x
    - Binary: * / % + - < > <= >= == != === !== && ||
    - Ternary: a ? b : c
    - Object/array literals: {a: 1, b: x}, [1, x]
    - Sequences: 'card', {title: x}

Object and array literals whose members are all literal fold into a single
LiteralExpression, so ``{a: {b: 1}}`` becomes a constant dict.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from tessera.errors import ExpressionSyntaxError
from tessera.expressions.nodes import (
    AliasPathExpression,
    AttributePathExpression,
    BracketsExpression,
    Expression,
    FnExpression,
    LiteralExpression,
    OperatorExpression,
    PathExpression,
    RelativePathExpression,
    SequenceExpression,
)


@dataclass
class Token:
    """Single lexical token."""

    kind: str
    value: Any
    position: int

    def __repr__(self) -> str:
        return f"Token({self.kind}, {self.value!r}, {self.position})"


CONSTANTS = {
    "true": True,
    "false": False,
    "null": None,
    "undefined": None,
}

# Longest operators first so that "===" wins over "==" and "=".
OPERATORS = (
    "===", "!==", "==", "!=", "<=", ">=", "&&", "||",
    "<", ">", "+", "-", "*", "/", "%", "!",
)

PUNCTUATION = set(".,:?()[]{}")

BINARY_PRECEDENCE = (
    ("||",),
    ("&&",),
    ("==", "!=", "===", "!=="),
    ("<", ">", "<=", ">="),
    ("+", "-"),
    ("*", "/", "%"),
)

ESCAPES = {"n": "\n", "t": "\t", "r": "\r", "b": "\b", "f": "\f", "v": "\v", "0": "\0"}


class ExpressionTokenizer:
    """
    Tokenizer for expression bodies.

    Converts source into NUMBER, STRING, IDENT, ALIAS, ATTR, OP, PUNCT and EOF
    tokens.
    """

    PATTERNS = {
        "whitespace": re.compile(r"\s+"),
        "number": re.compile(r"(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?"),
        "ident": re.compile(r"[A-Za-z_$][A-Za-z0-9_$]*"),
        "alias": re.compile(r"#([A-Za-z_$][A-Za-z0-9_$]*)"),
        "attr": re.compile(r"@([A-Za-z_$][A-Za-z0-9_$]*)"),
    }

    def __init__(self, source: str) -> None:
        self.source = source
        self.pos = 0
        self.tokens: List[Token] = []

    def tokenize(self) -> List[Token]:
        """Tokenize the entire source."""
        while True:
            self._consume("whitespace")
            if self.pos >= len(self.source):
                break
            self._next_token()
        self.tokens.append(Token("EOF", None, self.pos))
        return self.tokens

    def _consume(self, name: str) -> Optional["re.Match[str]"]:
        match = self.PATTERNS[name].match(self.source, self.pos)
        if match:
            self.pos = match.end()
        return match

    def _next_token(self) -> None:
        start = self.pos
        char = self.source[start]

        if char.isdigit() or (char == "." and self.source[start + 1:start + 2].isdigit()):
            text = self._consume("number").group()
            value = float(text) if any(c in text for c in ".eE") else int(text)
            self.tokens.append(Token("NUMBER", value, start))
            return

        if char in ("'", '"'):
            self.tokens.append(Token("STRING", self._read_string(char), start))
            return

        for kind in ("alias", "attr"):
            match = self._consume(kind)
            if match:
                self.tokens.append(Token(kind.upper(), match.group(1), start))
                return

        match = self._consume("ident")
        if match:
            self.tokens.append(Token("IDENT", match.group(), start))
            return

        for op in OPERATORS:
            if self.source.startswith(op, start):
                self.pos += len(op)
                self.tokens.append(Token("OP", op, start))
                return

        if char in PUNCTUATION:
            self.pos += 1
            self.tokens.append(Token("PUNCT", char, start))
            return

        raise ExpressionSyntaxError(
            f"Unexpected character {char!r} at position {start}", start
        )

    def _read_string(self, quote: str) -> str:
        start = self.pos
        self.pos += 1
        chars: List[str] = []
        while self.pos < len(self.source):
            char = self.source[self.pos]
            self.pos += 1
            if char == quote:
                return "".join(chars)
            if char == "\\" and self.pos < len(self.source):
                escaped = self.source[self.pos]
                self.pos += 1
                chars.append(ESCAPES.get(escaped, escaped))
            else:
                chars.append(char)
        raise ExpressionSyntaxError(
            f"Unterminated string literal at position {start}", start
        )


class ExpressionParser:
    """
    Parser for expression bodies.

    Example:
        parser = ExpressionParser("items[0].title")
        expression = parser.parse()
    """

    def __init__(self, source: str) -> None:
        self.source = source
        self.tokens = ExpressionTokenizer(source).tokenize()
        self.pos = 0

    def parse(self) -> Expression:
        expression = self._parse_sequence()
        if self._current().kind != "EOF":
            self._error("Unexpected token")
        return expression

    # Token helpers

    def _current(self) -> Token:
        return self.tokens[self.pos]

    def _advance(self) -> Token:
        token = self.tokens[self.pos]
        if token.kind != "EOF":
            self.pos += 1
        return token

    def _check(self, kind: str, value: Any = None) -> bool:
        token = self._current()
        return token.kind == kind and (value is None or token.value == value)

    def _match(self, kind: str, value: Any = None) -> bool:
        if self._check(kind, value):
            self._advance()
            return True
        return False

    def _expect(self, kind: str, value: Any = None) -> Token:
        if not self._check(kind, value):
            self._error(f"Expected {value or kind}")
        return self._advance()

    def _error(self, message: str) -> None:
        token = self._current()
        found = "end of expression" if token.kind == "EOF" else repr(token.value)
        raise ExpressionSyntaxError(
            f"{message}, found {found} at position {token.position}",
            token.position,
        )

    # Grammar

    def _parse_sequence(self) -> Expression:
        first = self._parse_conditional()
        if not self._check("PUNCT", ","):
            return first
        args = [first]
        while self._match("PUNCT", ","):
            args.append(self._parse_conditional())
        return SequenceExpression(args)

    def _parse_conditional(self) -> Expression:
        test = self._parse_binary(0)
        if not self._match("PUNCT", "?"):
            return test
        consequent = self._parse_conditional()
        self._expect("PUNCT", ":")
        alternate = self._parse_conditional()
        return OperatorExpression("?", [test, consequent, alternate])

    def _parse_binary(self, level: int) -> Expression:
        if level == len(BINARY_PRECEDENCE):
            return self._parse_unary()
        left = self._parse_binary(level + 1)
        while self._current().kind == "OP" and self._current().value in BINARY_PRECEDENCE[level]:
            operator = self._advance().value
            right = self._parse_binary(level + 1)
            left = OperatorExpression(operator, [left, right])
        return left

    def _parse_unary(self) -> Expression:
        token = self._current()
        if token.kind == "OP" and token.value in ("!", "-", "+"):
            self._advance()
            operand = self._parse_unary()
            if isinstance(operand, LiteralExpression):
                return LiteralExpression(_fold_unary(token.value, operand.value))
            return OperatorExpression(token.value, [operand])
        return self._parse_postfix(self._parse_primary())

    def _parse_postfix(self, expression: Expression) -> Expression:
        while True:
            if self._match("PUNCT", "."):
                name = self._expect("IDENT").value
                expression = _append_segment(expression, name, self)
            elif self._match("PUNCT", "["):
                inside = self._parse_sequence()
                self._expect("PUNCT", "]")
                if not isinstance(expression, (
                    PathExpression, RelativePathExpression, AliasPathExpression,
                    AttributePathExpression, BracketsExpression, FnExpression,
                )):
                    self._error("Brackets must follow a path")
                expression = BracketsExpression(expression, inside)
            elif self._match("PUNCT", "("):
                if not isinstance(expression, PathExpression):
                    self._error("Only named functions can be called")
                args = self._parse_arguments(")")
                expression = FnExpression(list(expression.segments), args)
            else:
                return expression

    def _parse_arguments(self, closing: str) -> List[Expression]:
        args: List[Expression] = []
        while not self._match("PUNCT", closing):
            args.append(self._parse_conditional())
            if not self._check("PUNCT", closing):
                self._expect("PUNCT", ",")
        return args

    def _parse_primary(self) -> Expression:
        token = self._current()

        if token.kind in ("NUMBER", "STRING"):
            self._advance()
            return LiteralExpression(token.value)

        if token.kind == "IDENT":
            self._advance()
            if token.value in CONSTANTS:
                return LiteralExpression(CONSTANTS[token.value])
            if token.value == "this":
                return RelativePathExpression([])
            return PathExpression([token.value])

        if token.kind == "ALIAS":
            self._advance()
            return AliasPathExpression("#" + token.value)

        if token.kind == "ATTR":
            self._advance()
            return AttributePathExpression(token.value)

        if self._match("PUNCT", "("):
            expression = self._parse_sequence()
            self._expect("PUNCT", ")")
            return expression

        if self._match("PUNCT", "["):
            return _fold_array(self._parse_arguments("]"))

        if self._match("PUNCT", "{"):
            return self._parse_object()

        self._error("Unexpected token")
        return Expression()

    def _parse_object(self) -> Expression:
        keys: List[str] = []
        values: List[Expression] = []
        while not self._match("PUNCT", "}"):
            token = self._current()
            if token.kind in ("IDENT", "STRING"):
                key = str(token.value)
            elif token.kind == "NUMBER":
                key = str(token.value)
            else:
                self._error("Expected object key")
            self._advance()
            self._expect("PUNCT", ":")
            keys.append(key)
            values.append(self._parse_conditional())
            if not self._check("PUNCT", "}"):
                self._expect("PUNCT", ",")
        return _fold_object(keys, values)


def _fold_unary(operator: str, value: Any) -> Any:
    if operator == "!":
        return not value
    if not isinstance(value, (int, float)) or isinstance(value, bool):
        raise ExpressionSyntaxError(f"Cannot apply {operator!r} to {value!r}")
    return -value if operator == "-" else +value


def _fold_array(items: List[Expression]) -> Expression:
    if all(isinstance(item, LiteralExpression) for item in items):
        return LiteralExpression([item.value for item in items])
    return OperatorExpression("[]", items)


def _fold_object(keys: List[str], values: List[Expression]) -> Expression:
    if all(isinstance(value, LiteralExpression) for value in values):
        return LiteralExpression({key: value.value for key, value in zip(keys, values)})
    args: List[Expression] = []
    for key, value in zip(keys, values):
        args.append(LiteralExpression(key))
        args.append(value)
    return OperatorExpression("{}", args)


def _append_segment(expression: Expression, name: str, parser: ExpressionParser) -> Expression:
    if isinstance(expression, PathExpression):
        return PathExpression(expression.segments + [name])
    if isinstance(expression, RelativePathExpression):
        return RelativePathExpression(expression.segments + [name])
    if isinstance(expression, AliasPathExpression):
        return AliasPathExpression(expression.alias, expression.segments + [name])
    if isinstance(expression, AttributePathExpression):
        return AttributePathExpression(expression.attribute, expression.segments + [name])
    if isinstance(expression, BracketsExpression):
        return BracketsExpression(
            expression.before, expression.inside, expression.after_segments + [name]
        )
    if isinstance(expression, FnExpression):
        return FnExpression(
            expression.segments, expression.args, expression.after_segments + [name]
        )
    parser._error("Member access must follow a path")
    return expression


def create_path_expression(source: str) -> Expression:
    """
    Parse an expression body into an Expression.

    Args:
        source: Expression text without template delimiters or keywords

    Returns:
        Parsed expression

    Raises:
        ExpressionSyntaxError: If the text is not a valid expression
    """
    return ExpressionParser(source).parse()


def object_from_expression(expression: Expression) -> Dict[str, Any]:
    """
    Extract a key -> value mapping from an object expression.

    A literal object yields its plain values; an ``{}`` operator yields the
    value expressions keyed by their literal keys.
    """
    if isinstance(expression, LiteralExpression):
        if not isinstance(expression.value, dict):
            raise ExpressionSyntaxError(f"Expected an object, got {expression.value!r}")
        return dict(expression.value)
    if isinstance(expression, OperatorExpression) and expression.name == "{}":
        args = expression.args
        return {args[i].get(): args[i + 1] for i in range(0, len(args), 2)}
    raise ExpressionSyntaxError(f"Expected an object, got {type(expression).__name__}")
