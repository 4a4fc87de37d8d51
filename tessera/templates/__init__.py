"""
Tessera Templates
=================

The parser's output vocabulary and the view registry:
- Nodes: Template, Element, blocks, view pointers, attributes and hooks
- Views: named templates resolved while parsing
"""

from tessera.templates.nodes import (
    VOID_ELEMENTS,
    Attribute,
    AttributesMap,
    Block,
    Comment,
    ComponentOn,
    ConditionalBlock,
    Doctype,
    DynamicAttribute,
    DynamicText,
    DynamicViewPointer,
    EachBlock,
    Element,
    ElementOn,
    MarkupAs,
    NodeType,
    ParentWrapper,
    Template,
    TemplateNode,
    Text,
    ViewAttributes,
    ViewPointer,
)
from tessera.templates.views import View, ViewRegistry

__all__ = [
    "VOID_ELEMENTS",
    "Attribute",
    "AttributesMap",
    "Block",
    "Comment",
    "ComponentOn",
    "ConditionalBlock",
    "Doctype",
    "DynamicAttribute",
    "DynamicText",
    "DynamicViewPointer",
    "EachBlock",
    "Element",
    "ElementOn",
    "MarkupAs",
    "NodeType",
    "ParentWrapper",
    "Template",
    "TemplateNode",
    "Text",
    "ViewAttributes",
    "ViewPointer",
    "View",
    "ViewRegistry",
]
