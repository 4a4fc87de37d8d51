"""
Tessera Template Parser
=======================

Recursive-descent parser turning template source into a Template AST.

Template syntax:
    HTML markup with embedded expressions:

    - {{ path }}, {{unescaped path}}, {{unbound path}}: Value output
    - {{if x}}...{{else if y}}...{{else}}...{{/if}}: Conditionals (also unless)
    - {{each items as #item}}...{{else}}...{{/each}}: Loops
    - {{with x as #alias}}...{{/with}}, {{unbound}}...{{/}}: Generic blocks
    - {{view 'name', {attr: value}}}: View reference
    - <view name="card" title="{{x}}">...</view>: View reference element
    - <card>...</card>: Custom element registered by a view
    - as="page.form": Alias hook
    - on="submit: save(), reset: clear()": Event hooks

Parser Architecture:
    1. HtmlTokenizer emits start/end/text/comment/other events
    2. Text and attribute values are split into literal/expression spans
    3. Expression bodies are classified (block, view, value)
    4. Handlers build nodes on a stack of ParseNode frames
    5. View elements and expressions are resolved against the view registry

Each call to create_template() or create_string_template() owns its
TemplateParser and frame stack, so parses may run concurrently on
different threads.
"""

from __future__ import annotations

import re
from typing import Any, Dict, List, Optional

from tessera.core.config import get_config
from tessera.engine.markup import MarkupHooks, get_markup
from tessera.engine.scanner import parse_text
from tessera.engine.tokenizer import HtmlHandlers, HtmlTokenizer, is_conditional_comment
from tessera.errors import TemplateStructureError, ViewResolutionError
from tessera.expressions.grammar import create_path_expression, object_from_expression
from tessera.expressions.nodes import (
    Expression,
    LiteralExpression,
    SequenceExpression,
)
from tessera.templates.nodes import (
    HOOK_TYPES,
    VOID_ELEMENTS,
    Attribute,
    AttributesMap,
    Block,
    Comment,
    ConditionalBlock,
    Doctype,
    DynamicAttribute,
    DynamicText,
    DynamicViewPointer,
    EachBlock,
    Element,
    MarkupAs,
    NodeType,
    ParentWrapper,
    Template,
    Text,
    ViewAttributes,
    ViewPointer,
    block_expression,
)
from tessera.utils.logger import get_logger

logger = get_logger("tessera.parser")

DOCTYPE_PATTERN = re.compile(
    r'^<!DOCTYPE\s+([^\s]+)(?:\s+(PUBLIC|SYSTEM)\s+"([^"]+)"(?:\s+"([^"]+)")?)?\s*>',
    re.IGNORECASE,
)


def dash_to_camel_case(name: str) -> str:
    """Convert ``data-item-id`` to ``dataItemId``."""
    return re.sub(r"-.", lambda match: match.group()[1].upper(), name)


class ParseNode:
    """
    One frame of the parse stack.

    The content list is shared with the node that opened the frame
    (Element.content, a block branch, ...), so appending here fills that
    node directly.
    """

    def __init__(self, view: Any = None, parent: Optional["ParseNode"] = None) -> None:
        self.view = view
        self.parent = parent
        self.content: List[Any] = []

    def child(self) -> "ParseNode":
        return ParseNode(self.view, self)

    def last(self) -> Any:
        return self.content[-1] if self.content else None


class TemplateParser:
    """
    Parser for a single template.

    Example:
        parser = TemplateParser(view)
        template = parser.parse_html("<p>{{name}}</p>")
    """

    def __init__(
        self,
        view: Any = None,
        markup: Optional[MarkupHooks] = None,
        strict_close: Optional[bool] = None,
    ) -> None:
        self.view = view
        self.markup = get_markup(markup)
        if strict_close is None:
            strict_close = get_config().get_bool("parser.strict_close", True)
        self.strict_close = strict_close
        self.root = ParseNode(view)
        self.node = self.root

    @property
    def name(self) -> str:
        return getattr(self.view, "name", None) or "<template>"

    def parse_html(self, source: str) -> Template:
        """Parse markup with embedded expressions."""
        logger.debug("Parsing template", template=self.name, mode="html")
        handlers = HtmlHandlers(
            start=self.on_start,
            end=self.on_end,
            text=self.on_text,
            comment=self.on_comment,
            other=self.on_other,
        )
        HtmlTokenizer(handlers).parse(source)
        return self._finish()

    def parse_string(self, source: str) -> Template:
        """Parse plain text with embedded expressions and no HTML."""
        logger.debug("Parsing template", template=self.name, mode="string")
        parse_text(source, self.on_text_literal, self.on_text_expression)
        return self._finish()

    def _finish(self) -> Template:
        if self.node is not self.root:
            if self.strict_close:
                opened = self.node.parent.last()
                raise TemplateStructureError(f"Unclosed {_describe(opened)} at end of template")
            self.node = self.root
        template = Template(self.root.content)
        logger.debug("Parsed template", template=self.name, nodes=len(template))
        return template

    # HTML events

    def on_start(
        self,
        tag: str,
        tag_name: str,
        attributes: Dict[str, Any],
        self_closing: bool,
    ) -> None:
        attributes_map = self.parse_attributes(attributes)
        # View elements turn as/on into component hooks once resolved
        if tag_name == "view" or self._element_view(tag_name) is not None:
            hooks = None
        else:
            hooks = self.hooks_from_attributes(attributes_map, "Element")

        if self_closing or tag_name in VOID_ELEMENTS:
            element = Element(tag_name, attributes_map, None, self_closing, hooks)
            self.node.content.append(element)
            self._close_element(tag_name)
        else:
            self.node = self.node.child()
            element = Element(tag_name, attributes_map, self.node.content, False, hooks)
            self.node.parent.content.append(element)

    def on_end(self, tag: str, tag_name: str) -> None:
        if self.node.parent is None:
            raise TemplateStructureError(f"Unexpected closing HTML tag: {tag}")
        self.node = self.node.parent
        last = self.node.last()
        if not (_is(last, NodeType.ELEMENT) and last.tag_name == tag_name):
            raise TemplateStructureError(f"Mismatched closing HTML tag: {tag}")
        self._close_element(tag_name)

    def on_text(self, data: str) -> None:
        parse_text(data, self.on_text_literal, self.on_text_expression)

    def on_comment(self, tag: str, data: str) -> None:
        # Only conditional comments, <!--[ ... ]-->, are kept
        if not is_conditional_comment(tag):
            return
        self.node.content.append(Comment(data))

    def on_other(self, tag: str) -> None:
        match = DOCTYPE_PATTERN.match(tag)
        if not match:
            raise TemplateStructureError(f"Error parsing template: {tag}")
        name, id_type = match.group(1), (match.group(2) or "").lower()
        public_id = system_id = None
        if id_type == "public":
            public_id, system_id = match.group(3), match.group(4)
        elif id_type == "system":
            system_id = match.group(3)
        self.node.content.append(Doctype(name, public_id, system_id))

    def _close_element(self, tag_name: str) -> None:
        if tag_name == "view":
            self.parse_view_element(self.node.content.pop())
            return
        view = self._element_view(tag_name)
        if view is not None:
            self.parse_named_view_element(self.node.content.pop(), view)
            return
        self.markup.emit(f"element:{tag_name}", self.node.last())

    # Attributes

    def parse_attributes(self, attributes: Dict[str, Any]) -> AttributesMap:
        """
        Parse raw attribute values.

        A single literal span gives an Attribute, a single expression gives
        an Attribute when it is a constant and a DynamicAttribute otherwise;
        several spans give a DynamicAttribute wrapping a sub-template.
        """
        attributes_map = AttributesMap()
        for key, value in (attributes or {}).items():
            if value == "" or not isinstance(value, str):
                attributes_map[key] = Attribute(value)
                continue

            frame = self.node = self.node.child()
            parse_text(value, self.on_text_literal, self.on_text_expression)
            if self.node is not frame:
                raise TemplateStructureError(f"Unbalanced block in {key} attribute: {value}")
            content = frame.content

            if len(content) == 1:
                attributes_map[key] = _attribute_from_item(content[0])
            elif len(content) > 1:
                attributes_map[key] = DynamicAttribute(Template(content))
            else:
                raise TemplateStructureError(f"Error parsing {key} attribute: {value}")

            self.node = frame.parent
        return attributes_map

    def hooks_from_attributes(self, attributes: Optional[Dict[str, Any]], kind: str) -> Optional[List[Any]]:
        """Move the ``as`` and ``on`` attributes into a hook list."""
        if not attributes:
            return None
        hooks: List[Any] = []

        if "as" in attributes:
            data = _literal_data(attributes.pop("as"), "as")
            hooks.append(MarkupAs(data.split(".")))

        if "on" in attributes:
            data = _literal_data(attributes.pop("on"), "on")
            events = object_from_expression(create_path_expression("{" + data + "}"))
            hook_class = HOOK_TYPES[kind]
            for name, value in events.items():
                if not isinstance(value, Expression):
                    value = LiteralExpression(value)
                hooks.append(hook_class(name, value))

        return hooks or None

    # Expressions

    def on_text_literal(self, data: str) -> None:
        self.node.content.append(Text(data))

    def on_text_expression(self, expression: Expression) -> None:
        meta = expression.meta
        if meta.block_type:
            self._parse_block_expression(expression)
        elif meta.value_type == "view":
            self.parse_view_expression(expression)
        else:
            self.node.content.append(DynamicText(expression))

    def _parse_block_expression(self, expression: Expression) -> None:
        meta = expression.meta
        block_type = meta.block_type

        if meta.is_end:
            self._ascend(meta.source)
            opened = block_expression(self.node.last())
            opened_type = opened.meta.block_type if opened is not None and opened.meta else None
            if not opened_type or not (block_type == "end" or block_type == opened_type):
                raise TemplateStructureError(f"Mismatched closing template tag: {meta.source}")

        elif block_type in ("else", "else if"):
            self._ascend(meta.source)
            last = self.node.last()
            self.node = self.node.child()
            if _is(last, NodeType.CONDITIONAL_BLOCK):
                last.expressions.append(expression)
                last.contents.append(self.node.content)
            elif _is(last, NodeType.EACH_BLOCK) and block_type == "else" and last.else_content is None:
                last.else_content = self.node.content
            else:
                raise TemplateStructureError(f"Error parsing template: {meta.source}")

        else:
            next_node = self.node.child()
            if block_type in ("if", "unless"):
                block: Any = ConditionalBlock([expression], [next_node.content])
            elif block_type == "each":
                block = EachBlock(expression, next_node.content)
            else:
                block = Block(expression, next_node.content)
            self.node.content.append(block)
            self.node = next_node

    def _ascend(self, source: str) -> None:
        if self.node.parent is None:
            raise TemplateStructureError(f"Unexpected closing template tag: {source}")
        self.node = self.node.parent

    # Views

    def _element_view(self, tag_name: str) -> Any:
        registry = getattr(self.view, "registry", None)
        if registry is None:
            return None
        return registry.element_map.get(tag_name)

    def find_view(self, name: str) -> Any:
        """Resolve a view name relative to the view being parsed."""
        registry = getattr(self.view, "registry", None)
        view = registry.find(name, getattr(self.view, "at", None)) if registry else None
        if view is None:
            logger.warning("View not found", view=name, template=self.name)
            raise ViewResolutionError(f'No view found for "{name}"', name)
        return view

    def parse_view_element(self, element: Element) -> None:
        name_attribute = element.attributes.pop("name", None)
        if name_attribute is None:
            raise TemplateStructureError("The <view> element requires a name attribute")

        if isinstance(name_attribute, DynamicAttribute):
            view_attributes = self.view_attributes_from_element(element)
            hooks = self.hooks_from_attributes(view_attributes, "Component")
            pointer = DynamicViewPointer(name_attribute.template, view_attributes, hooks)
            self._finish_view_element(view_attributes, element.content or [], pointer)
            return

        name = name_attribute.data
        if not isinstance(name, str) or not name:
            raise TemplateStructureError("The <view> element requires a name attribute")
        self.parse_named_view_element(element, self.find_view(name))

    def parse_named_view_element(self, element: Element, view: Any) -> None:
        view_attributes = self.view_attributes_from_element(element)
        hooks = self.hooks_from_attributes(view_attributes, "Component")
        remaining = self.parse_content_attributes(element.content, view, view_attributes)
        pointer = ViewPointer(view.name, view_attributes, hooks, view)
        self._finish_view_element(view_attributes, remaining, pointer)

    def _finish_view_element(
        self,
        view_attributes: ViewAttributes,
        remaining: List[Any],
        pointer: Any,
    ) -> None:
        if "content" not in view_attributes and remaining:
            view_attributes["content"] = ParentWrapper(Template(remaining))
        self.node.content.append(pointer)

    def view_attributes_from_element(self, element: Element) -> ViewAttributes:
        view_attributes = ViewAttributes()
        for key, attribute in (element.attributes or {}).items():
            if isinstance(attribute, DynamicAttribute):
                template = attribute.template
                if isinstance(template, Template):
                    value: Any = ParentWrapper(template)
                else:
                    value = ParentWrapper(DynamicText(template), template)
            else:
                value = attribute.data
            view_attributes[dash_to_camel_case(key)] = value
        return view_attributes

    def parse_content_attributes(
        self,
        content: Optional[List[Any]],
        view: Any,
        view_attributes: ViewAttributes,
    ) -> List[Any]:
        """
        Split a view element's children into attributes, arrays and body.

        Returns the children that remain as body content.
        """
        attributes_map = getattr(view, "attributes_map", None) or {}
        arrays_map = getattr(view, "arrays_map", None) or {}
        remaining: List[Any] = []

        for item in content or ():
            tag_name = item.tag_name if _is(item, NodeType.ELEMENT) else None

            if tag_name == "attribute":
                name = self._parse_name_attribute(item)
                self._parse_attribute_element(item, name, view_attributes)
            elif tag_name and tag_name in attributes_map:
                self._parse_attribute_element(item, tag_name, view_attributes)
            elif tag_name == "array":
                name = self._parse_name_attribute(item)
                self._parse_array_element(item, name, view_attributes)
            elif tag_name and tag_name in arrays_map:
                self._parse_array_element(item, arrays_map[tag_name], view_attributes)
            else:
                remaining.append(item)

        return remaining

    def _parse_name_attribute(self, element: Element) -> str:
        attribute = element.attributes.pop("name", None)
        name = attribute.data if isinstance(attribute, Attribute) else None
        if not isinstance(name, str) or not name:
            raise TemplateStructureError(
                f"The <{element.tag_name}> element requires a literal name attribute"
            )
        return name

    def _parse_attribute_element(
        self,
        element: Element,
        name: str,
        view_attributes: ViewAttributes,
    ) -> None:
        view_attributes[name] = ParentWrapper(Template(element.content or []))

    def _parse_array_element(
        self,
        element: Element,
        name: str,
        view_attributes: ViewAttributes,
    ) -> None:
        item = self.view_attributes_from_element(element)
        if "content" not in item and element.content:
            item["content"] = ParentWrapper(Template(element.content))
        entries = view_attributes.setdefault(name, [])
        if not isinstance(entries, list):
            raise TemplateStructureError(f"The {name} attribute is not an array")
        entries.append(item)

    def parse_view_expression(self, expression: Expression) -> None:
        # {{view 'name', {attrs}}} arrives as a SequenceExpression
        if isinstance(expression, SequenceExpression):
            name_expression = expression.args[0]
            attributes_expression = expression.args[1] if len(expression.args) > 1 else None
        else:
            name_expression = expression
            attributes_expression = None

        view_attributes = self.attributes_from_expression(attributes_expression)
        hooks = self.hooks_from_attributes(view_attributes, "Component")

        if name_expression.is_literal:
            name = name_expression.get()
            if not isinstance(name, str):
                raise TemplateStructureError(f"Invalid view name: {expression.meta.source}")
            view = self.find_view(name)
            pointer: Any = ViewPointer(view.name, view_attributes, hooks, view)
        else:
            pointer = DynamicViewPointer(name_expression, view_attributes, hooks)
        self.node.content.append(pointer)

    def attributes_from_expression(self, expression: Optional[Expression]) -> Optional[ViewAttributes]:
        if expression is None:
            return None
        view_attributes = ViewAttributes()
        for key, value in object_from_expression(expression).items():
            if isinstance(value, LiteralExpression):
                value = value.value
            elif isinstance(value, Expression):
                value = ParentWrapper(DynamicText(value), value)
            view_attributes[key] = value
        return view_attributes


def _is(node: Any, node_type: NodeType) -> bool:
    return getattr(node, "node_type", None) == node_type


def _attribute_from_item(item: Any) -> Any:
    if _is(item, NodeType.TEXT):
        return Attribute(item.data)
    if _is(item, NodeType.DYNAMIC_TEXT):
        if item.expression.is_literal:
            return Attribute(item.expression.get())
        return DynamicAttribute(item.expression)
    # A lone block or view pointer still needs a sub-template to render
    return DynamicAttribute(Template([item]))


def _literal_data(value: Any, name: str) -> str:
    data = value.data if isinstance(value, Attribute) else value
    if not isinstance(data, str):
        raise TemplateStructureError(f"The {name} attribute must be a literal string")
    return data


def _describe(node: Any) -> str:
    if _is(node, NodeType.ELEMENT):
        return f"<{node.tag_name}>"
    expression = block_expression(node)
    if expression is not None and expression.meta is not None:
        return "{{" + expression.meta.source + "}}"
    return "block"


def create_template(
    source: str,
    view: Any = None,
    markup: Optional[MarkupHooks] = None,
) -> Template:
    """
    Parse HTML template source.

    Args:
        source: Template source (already minified if desired)
        view: View being parsed; supplies the registry for view lookups
        markup: Element observers, defaults to the built-in set

    Returns:
        Immutable Template
    """
    return TemplateParser(view, markup).parse_html(source)


def create_string_template(
    source: str,
    view: Any = None,
    markup: Optional[MarkupHooks] = None,
) -> Template:
    """Parse a plain string template (expressions only, no HTML)."""
    return TemplateParser(view, markup).parse_string(source)
