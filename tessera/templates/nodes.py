"""
Tessera Template Nodes
======================

AST node classes produced by the template parser. The set of node kinds is
closed: every node carries a ``node_type`` tag from ``NodeType`` so that
consumers can dispatch on it instead of probing classes.

Node tree example for ``<p>{{if x}}Hi {{name}}{{/if}}</p>``:

    Template
    └── Element(p)
        └── ConditionalBlock
            └── [Text("Hi "), DynamicText(name)]
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any, ClassVar, Dict, List, Optional, Tuple, Union

from tessera.expressions.nodes import Expression


VOID_ELEMENTS = frozenset({
    "area", "base", "br", "col", "embed", "hr", "img", "input",
    "keygen", "link", "meta", "param", "source", "track", "wbr",
})


class NodeType(Enum):
    """AST node types."""
    TEMPLATE = auto()
    ELEMENT = auto()
    TEXT = auto()
    DYNAMIC_TEXT = auto()
    COMMENT = auto()
    DOCTYPE = auto()
    CONDITIONAL_BLOCK = auto()
    EACH_BLOCK = auto()
    BLOCK = auto()
    VIEW_POINTER = auto()
    DYNAMIC_VIEW_POINTER = auto()
    ATTRIBUTE = auto()
    DYNAMIC_ATTRIBUTE = auto()
    PARENT_WRAPPER = auto()
    MARKUP_AS = auto()
    ELEMENT_ON = auto()
    COMPONENT_ON = auto()


BLOCK_TYPES = (NodeType.CONDITIONAL_BLOCK, NodeType.EACH_BLOCK, NodeType.BLOCK)


def dump(value: Any) -> Any:
    """Convert nodes, expressions and containers into plain data."""
    if isinstance(value, (TemplateNode, Expression)):
        return value.to_dict()
    if isinstance(value, dict):
        return {key: dump(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [dump(item) for item in value]
    return value


class TemplateNode:
    """Base class for all AST nodes."""

    node_type: ClassVar[NodeType]

    def _fields(self) -> Dict[str, Any]:
        return {}

    def to_dict(self) -> Dict[str, Any]:
        """Convert node to dictionary representation."""
        data: Dict[str, Any] = {"type": self.node_type.name}
        for key, value in self._fields().items():
            if value is not None:
                data[key] = dump(value)
        return data


@dataclass(frozen=True)
class Template(TemplateNode):
    """
    Immutable parse result.

    The content is stored as a tuple so the top-level sequence cannot be
    changed after parsing.
    """

    node_type: ClassVar[NodeType] = NodeType.TEMPLATE
    content: Tuple[Any, ...] = ()

    def __post_init__(self) -> None:
        object.__setattr__(self, "content", tuple(self.content))

    def __len__(self) -> int:
        return len(self.content)

    def __iter__(self):
        return iter(self.content)

    def __getitem__(self, index: int) -> Any:
        return self.content[index]

    def _fields(self) -> Dict[str, Any]:
        return {"content": self.content}


@dataclass
class Text(TemplateNode):
    node_type: ClassVar[NodeType] = NodeType.TEXT
    data: str = ""

    def _fields(self) -> Dict[str, Any]:
        return {"data": self.data}


@dataclass
class DynamicText(TemplateNode):
    """Value expression rendered as text."""

    node_type: ClassVar[NodeType] = NodeType.DYNAMIC_TEXT
    expression: Expression = field(default_factory=Expression)

    def _fields(self) -> Dict[str, Any]:
        return {"expression": self.expression}


@dataclass
class Comment(TemplateNode):
    node_type: ClassVar[NodeType] = NodeType.COMMENT
    data: str = ""

    def _fields(self) -> Dict[str, Any]:
        return {"data": self.data}


@dataclass
class Doctype(TemplateNode):
    node_type: ClassVar[NodeType] = NodeType.DOCTYPE
    name: str = "html"
    public_id: Optional[str] = None
    system_id: Optional[str] = None

    def _fields(self) -> Dict[str, Any]:
        return {"name": self.name, "public_id": self.public_id, "system_id": self.system_id}


@dataclass
class Attribute(TemplateNode):
    """Literal attribute value."""

    node_type: ClassVar[NodeType] = NodeType.ATTRIBUTE
    data: Any = None

    def _fields(self) -> Dict[str, Any]:
        return {"data": self.data}


@dataclass
class DynamicAttribute(TemplateNode):
    """Attribute whose value is an expression or a sub-template."""

    node_type: ClassVar[NodeType] = NodeType.DYNAMIC_ATTRIBUTE
    template: Union[Expression, Template, None] = None

    def _fields(self) -> Dict[str, Any]:
        return {"template": self.template}


class AttributesMap(dict):
    """Element attributes, name -> Attribute | DynamicAttribute, in source order."""


class ViewAttributes(dict):
    """View attributes, camelCased name -> literal | ParentWrapper | list of ViewAttributes."""


@dataclass
class ParentWrapper(TemplateNode):
    """Marks a view attribute to be evaluated against the enclosing scope."""

    node_type: ClassVar[NodeType] = NodeType.PARENT_WRAPPER
    template: Any = None
    expression: Optional[Expression] = None

    def _fields(self) -> Dict[str, Any]:
        return {"template": self.template, "expression": self.expression}


@dataclass
class MarkupAs(TemplateNode):
    """Alias binding declared with ``as="path.to.alias"``."""

    node_type: ClassVar[NodeType] = NodeType.MARKUP_AS
    segments: List[str] = field(default_factory=list)

    def _fields(self) -> Dict[str, Any]:
        return {"segments": self.segments}


@dataclass
class ElementOn(TemplateNode):
    """DOM event binding on an element."""

    node_type: ClassVar[NodeType] = NodeType.ELEMENT_ON
    name: str = ""
    expression: Optional[Expression] = None

    def _fields(self) -> Dict[str, Any]:
        return {"name": self.name, "expression": self.expression}


@dataclass
class ComponentOn(TemplateNode):
    """Component event binding on a view pointer."""

    node_type: ClassVar[NodeType] = NodeType.COMPONENT_ON
    name: str = ""
    expression: Optional[Expression] = None

    def _fields(self) -> Dict[str, Any]:
        return {"name": self.name, "expression": self.expression}


Hook = Union[MarkupAs, ElementOn, ComponentOn]

HOOK_TYPES = {
    "Element": ElementOn,
    "Component": ComponentOn,
}


@dataclass
class Element(TemplateNode):
    """
    HTML element.

    ``content`` is None for void and self-closing elements, otherwise the
    list of child nodes in source order.
    """

    node_type: ClassVar[NodeType] = NodeType.ELEMENT
    tag_name: str = ""
    attributes: AttributesMap = field(default_factory=AttributesMap)
    content: Optional[List[Any]] = None
    self_closing: bool = False
    hooks: Optional[List[Hook]] = None

    def _fields(self) -> Dict[str, Any]:
        return {
            "tag_name": self.tag_name,
            "attributes": self.attributes or None,
            "content": self.content,
            "self_closing": self.self_closing or None,
            "hooks": self.hooks,
        }


@dataclass
class ConditionalBlock(TemplateNode):
    """
    if / unless block with its else-if and else branches.

    ``expressions`` and ``contents`` are parallel: one entry per branch.
    """

    node_type: ClassVar[NodeType] = NodeType.CONDITIONAL_BLOCK
    expressions: List[Expression] = field(default_factory=list)
    contents: List[List[Any]] = field(default_factory=list)

    def _fields(self) -> Dict[str, Any]:
        return {"expressions": self.expressions, "contents": self.contents}


@dataclass
class EachBlock(TemplateNode):
    node_type: ClassVar[NodeType] = NodeType.EACH_BLOCK
    expression: Optional[Expression] = None
    content: List[Any] = field(default_factory=list)
    else_content: Optional[List[Any]] = None

    def _fields(self) -> Dict[str, Any]:
        return {
            "expression": self.expression,
            "content": self.content,
            "else_content": self.else_content,
        }


@dataclass
class Block(TemplateNode):
    """Generic block: with, unbound, bound."""

    node_type: ClassVar[NodeType] = NodeType.BLOCK
    expression: Optional[Expression] = None
    content: List[Any] = field(default_factory=list)

    def _fields(self) -> Dict[str, Any]:
        return {"expression": self.expression, "content": self.content}


@dataclass
class ViewPointer(TemplateNode):
    """Reference to a view resolved while parsing."""

    node_type: ClassVar[NodeType] = NodeType.VIEW_POINTER
    name: str = ""
    view_attributes: Optional[ViewAttributes] = None
    hooks: Optional[List[Hook]] = None
    view: Any = field(default=None, compare=False, repr=False)

    def _fields(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "view_attributes": self.view_attributes,
            "hooks": self.hooks,
        }


@dataclass
class DynamicViewPointer(TemplateNode):
    """Reference to a view whose name is only known at render time."""

    node_type: ClassVar[NodeType] = NodeType.DYNAMIC_VIEW_POINTER
    name_expression: Any = None
    view_attributes: Optional[ViewAttributes] = None
    hooks: Optional[List[Hook]] = None

    def _fields(self) -> Dict[str, Any]:
        return {
            "name_expression": self.name_expression,
            "view_attributes": self.view_attributes,
            "hooks": self.hooks,
        }


def block_expression(node: Any) -> Optional[Expression]:
    """Return the opening expression of a block node, or None for other nodes."""
    node_type = getattr(node, "node_type", None)
    if node_type == NodeType.CONDITIONAL_BLOCK:
        return node.expressions[0] if node.expressions else None
    if node_type in (NodeType.EACH_BLOCK, NodeType.BLOCK):
        return node.expression
    return None
