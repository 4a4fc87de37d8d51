"""
Tessera Expression Classifier
=============================

Reads the keywords at the front of an expression body and records them as
``ExpressionMeta`` before handing the remaining path to the expression
grammar.

    {{if user.admin}}        block start, block_type="if"
    {{each items as #item}}  block start, block_type="each", as_name="#item"
    {{else if other}}        continuation, block_type="else if"
    {{else}}                 continuation, no path
    {{/if}} {{/}}            block end, block_type="if" / "end"
    {{unescaped html}}       value, unescaped=True
    {{view 'card', {a: 1}}}  view reference, value_type="view"
"""

from __future__ import annotations

import re
from typing import Optional

from tessera.errors import append_error_message
from tessera.expressions.grammar import create_path_expression
from tessera.expressions.nodes import Expression, ExpressionMeta

BLOCK_PATTERN = re.compile(r"^(if|unless|else if|each|with)\s+([\s\S]+?)(?:\s+as\s+(\S+))?$")
VALUE_PATTERN = re.compile(r"^(?:(view|unbound|bound|unescaped)\s+)?([\s\S]*)")

BARE_KEYWORDS = ("else", "unbound", "bound")


def create_expression(source: str) -> Expression:
    """
    Classify an expression body and parse its path.

    Args:
        source: Text between ``{{`` and ``}}``

    Returns:
        Expression with ``meta`` describing its template role

    Raises:
        ExpressionSyntaxError: If the path fails the expression grammar; the
            message ends with the offending expression source
    """
    source = source.strip()
    meta = ExpressionMeta(source)
    path: Optional[str] = None

    match = BLOCK_PATTERN.match(source)
    if match:
        meta.block_type = match.group(1)
        path = match.group(2)
        meta.as_name = match.group(3)

    elif source in BARE_KEYWORDS:
        meta.block_type = source

    elif source.startswith("/"):
        meta.is_end = True
        meta.block_type = source[1:].strip() or "end"

    else:
        # Any number of keywords may precede a value path; later bind
        # keywords override earlier ones.
        path = source
        while True:
            match = VALUE_PATTERN.match(path)
            keyword, path = match.group(1), match.group(2)
            if not keyword:
                break
            if keyword == "unescaped":
                meta.unescaped = True
            elif keyword in ("unbound", "bound"):
                meta.bind_type = keyword
            else:
                meta.value_type = keyword

    try:
        expression = create_path_expression(path) if path else Expression()
    except Exception as err:
        wrapped = append_error_message(err, f"\n\nWithin expression: {source}")
        if wrapped is err:
            raise
        raise wrapped from err

    expression.meta = meta
    return expression
