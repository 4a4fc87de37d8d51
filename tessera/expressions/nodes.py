"""
Tessera Expression Nodes
========================

Expression objects produced by the expression grammar and annotated by the
template classifier. The parser never evaluates them; it only inspects their
kind (literal, path, operator, sequence) to decide which AST node to build.

Every expression may carry an ``ExpressionMeta`` describing how it appeared
in the template (block keyword, alias, bind type, ...).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ExpressionMeta:
    """
    Template-level metadata for an expression.

    Attributes:
        source: Trimmed expression body as written in the template
        block_type: if, unless, else if, else, each, with, unbound, bound,
            the end marker type, or None for value expressions
        is_end: True for ``{{/...}}`` markers
        as_name: Alias declared with ``as`` (e.g. ``#item``)
        bind_type: "bound" or "unbound" when given as a prefix
        value_type: "view" for view expressions
        unescaped: True when prefixed with ``unescaped``
    """

    source: str
    block_type: Optional[str] = None
    is_end: bool = False
    as_name: Optional[str] = None
    bind_type: Optional[str] = None
    value_type: Optional[str] = None
    unescaped: bool = False

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"source": self.source}
        for key in ("block_type", "as_name", "bind_type", "value_type"):
            value = getattr(self, key)
            if value is not None:
                data[key] = value
        if self.is_end:
            data["is_end"] = True
        if self.unescaped:
            data["unescaped"] = True
        return data


class Expression:
    """
    Empty expression.

    Used for blocks and values without a path, such as ``{{else}}`` or
    ``{{unbound}}``. Subclasses add the actual payload.
    """

    meta: Optional[ExpressionMeta] = None

    @property
    def is_literal(self) -> bool:
        return False

    def get(self) -> Any:
        return None

    def _fields(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {"type": type(self).__name__}
        data.update(self._fields())
        if self.meta is not None:
            data["meta"] = self.meta.to_dict()
        return data

    def __repr__(self) -> str:
        return "Expression()"


def _dump(value: Any) -> Any:
    if isinstance(value, Expression):
        return value.to_dict()
    if isinstance(value, list):
        return [_dump(item) for item in value]
    return value


@dataclass(eq=True)
class LiteralExpression(Expression):
    """Compile-time constant (number, string, bool, null, folded object/array)."""

    value: Any

    @property
    def is_literal(self) -> bool:
        return True

    def get(self) -> Any:
        return self.value

    def _fields(self) -> Dict[str, Any]:
        return {"value": self.value}


@dataclass(eq=True)
class PathExpression(Expression):
    """Model path such as ``user.name``."""

    segments: List[str]

    def _fields(self) -> Dict[str, Any]:
        return {"segments": list(self.segments)}


@dataclass(eq=True)
class RelativePathExpression(Expression):
    """Path relative to the current context, written ``this`` or ``this.x``."""

    segments: List[str] = field(default_factory=list)

    def _fields(self) -> Dict[str, Any]:
        return {"segments": list(self.segments)}


@dataclass(eq=True)
class AliasPathExpression(Expression):
    """Path rooted at a block alias, e.g. ``#item.title``."""

    alias: str
    segments: List[str] = field(default_factory=list)

    def _fields(self) -> Dict[str, Any]:
        return {"alias": self.alias, "segments": list(self.segments)}


@dataclass(eq=True)
class AttributePathExpression(Expression):
    """Path rooted at a view attribute, e.g. ``@content``."""

    attribute: str
    segments: List[str] = field(default_factory=list)

    def _fields(self) -> Dict[str, Any]:
        return {"attribute": self.attribute, "segments": list(self.segments)}


@dataclass(eq=True)
class BracketsExpression(Expression):
    """Computed member access: ``before[inside].after``."""

    before: Expression
    inside: Expression
    after_segments: List[str] = field(default_factory=list)

    def _fields(self) -> Dict[str, Any]:
        return {
            "before": self.before.to_dict(),
            "inside": self.inside.to_dict(),
            "after_segments": list(self.after_segments),
        }


@dataclass(eq=True)
class FnExpression(Expression):
    """Function call on a path: ``fn.name(args).after``."""

    segments: List[str]
    args: List[Expression] = field(default_factory=list)
    after_segments: List[str] = field(default_factory=list)

    def _fields(self) -> Dict[str, Any]:
        return {
            "segments": list(self.segments),
            "args": _dump(self.args),
            "after_segments": list(self.after_segments),
        }


@dataclass(eq=True)
class OperatorExpression(Expression):
    """
    Operator applied to arguments.

    Besides unary/binary/ternary operators (named by their symbol, the ternary
    is ``?``), object and array literals that contain non-literal members are
    represented as ``{}`` (alternating key literal / value arguments) and
    ``[]`` (items).
    """

    name: str
    args: List[Expression] = field(default_factory=list)

    def _fields(self) -> Dict[str, Any]:
        return {"name": self.name, "args": _dump(self.args)}


@dataclass(eq=True)
class SequenceExpression(Expression):
    """Comma separated expressions, e.g. ``'card', {title: x}``."""

    args: List[Expression] = field(default_factory=list)

    def _fields(self) -> Dict[str, Any]:
        return {"args": _dump(self.args)}
