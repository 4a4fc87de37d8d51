"""
Tessera Text Scanner
====================

Splits text into literal spans and ``{{ ... }}`` expression spans.

Expression bodies may contain balanced braces of their own, e.g.
``{{ {a: {b: 1}} }}``, so the closing delimiter is found by counting depth
rather than by searching for the first ``}}``.
"""

from __future__ import annotations

from typing import Callable

from tessera.engine.classifier import create_expression
from tessera.errors import TemplateLexicalError
from tessera.expressions.nodes import Expression


def match_braces(text: str, num: int, i: int, open_char: str, close_char: str) -> int:
    """
    Find the end of a brace-delimited region.

    Args:
        text: Text to scan
        num: Number of opening characters at ``i`` (2 for ``{{``)
        i: Index of the first opening character
        open_char: Character that increases depth
        close_char: Character that decreases depth

    Returns:
        Index just past the balancing close, or -1 if unbalanced
    """
    i += num
    while num:
        close = text.find(close_char, i)
        open_ = text.find(open_char, i)
        if close != -1 and (open_ == -1 or close < open_):
            i = close + 1
            num -= 1
        elif open_ != -1:
            i = open_ + 1
            num += 1
        else:
            return -1
    return i


def parse_text(
    data: str,
    on_literal: Callable[[str], None],
    on_expression: Callable[[Expression], None],
) -> None:
    """
    Scan text, reporting literal and expression spans in order.

    Raises:
        TemplateLexicalError: On unbalanced braces or if the scan stalls
    """
    current = data
    last = None
    while current:
        if current == last:
            raise TemplateLexicalError(f"Error parsing template text: {data}")
        last = current

        start = current.find("{{")
        if start == -1:
            on_literal(current)
            return

        end = match_braces(current, 2, start, "{", "}")
        if end == -1:
            raise TemplateLexicalError(f"Mismatched braces in: {data}")

        if start > 0:
            on_literal(current[:start])

        inside = current[start + 2:end - 2]
        if inside:
            on_expression(create_expression(inside))

        current = current[end:]
