"""Tests for element, text, comment and attribute handling."""

import pytest

from tessera.engine.parser import TemplateParser, create_template
from tessera.errors import TemplateStructureError
from tessera.expressions.nodes import LiteralExpression, OperatorExpression, PathExpression
from tessera.templates.nodes import (
    Attribute,
    Comment,
    ConditionalBlock,
    Doctype,
    DynamicAttribute,
    DynamicText,
    Element,
    MarkupAs,
    NodeType,
    Template,
    Text,
)


def test_element_with_text():
    template = create_template("<p>Hello</p>")
    assert isinstance(template, Template)
    assert list(template) == [Element("p", {}, [Text("Hello")])]


def test_template_is_immutable():
    template = create_template("<p></p>")
    assert isinstance(template.content, tuple)
    with pytest.raises(AttributeError):
        template.content = ()


def test_text_and_expressions_preserve_order():
    template = create_template("<p>Hi {{name}}!</p>")
    assert template[0].content == [
        Text("Hi "),
        DynamicText(PathExpression(["name"])),
        Text("!"),
    ]


def test_expression_with_less_than_stays_whole():
    template = create_template("<p>{{ a < b }}</p>")
    assert template[0].content == [
        DynamicText(OperatorExpression("<", [PathExpression(["a"]), PathExpression(["b"])])),
    ]


def test_unspaced_less_than_in_expression():
    template = create_template("<p>{{a<b}}</p>")
    assert template[0].content == [
        DynamicText(OperatorExpression("<", [PathExpression(["a"]), PathExpression(["b"])])),
    ]


def test_unspaced_less_than_in_block_condition():
    template = create_template("<p>{{if i<n}}x{{/if}}</p>")
    (block,) = template[0].content
    assert isinstance(block, ConditionalBlock)
    assert block.expressions == [
        OperatorExpression("<", [PathExpression(["i"]), PathExpression(["n"])]),
    ]
    assert block.contents == [[Text("x")]]


def test_entities_are_decoded():
    template = create_template("<p>&lt;b&gt; &amp; more</p>")
    assert template[0].content == [Text("<b> & more")]


def test_void_element_does_not_open_a_frame():
    template = create_template("<div><img src=\"a\"><span>x</span></div>")
    img, span = template[0].content
    assert img == Element("img", {"src": Attribute("a")}, None)
    assert span.tag_name == "span"
    assert span.content == [Text("x")]


def test_self_closing_element():
    template = create_template("<widget/><p></p>")
    assert [node.tag_name for node in template] == ["widget", "p"]
    assert template[0].self_closing
    assert template[0].content is None


def test_conditional_comment_is_kept():
    template = create_template("<!--[if IE]><p>old</p><![endif]-->")
    assert list(template) == [Comment("[if IE]><p>old</p><![endif]")]


def test_ordinary_comment_is_dropped():
    template = create_template("<!-- note --><p></p>")
    assert [node.node_type for node in template] == [NodeType.ELEMENT]


def test_doctype():
    assert create_template("<!DOCTYPE html>")[0] == Doctype("html")


def test_doctype_public_ids():
    template = create_template(
        '<!DOCTYPE html PUBLIC "-//W3C//DTD XHTML 1.0 Strict//EN" '
        '"http://www.w3.org/TR/xhtml1/DTD/xhtml1-strict.dtd">'
    )
    assert template[0] == Doctype(
        "html",
        "-//W3C//DTD XHTML 1.0 Strict//EN",
        "http://www.w3.org/TR/xhtml1/DTD/xhtml1-strict.dtd",
    )


def test_doctype_system_id():
    template = create_template('<!doctype html SYSTEM "about:legacy-compat">')
    assert template[0] == Doctype("html", None, "about:legacy-compat")


def test_unknown_declaration_fails():
    with pytest.raises(TemplateStructureError, match="Error parsing template"):
        create_template('<?xml version="1.0"?>')


class TestAttributes:
    def parse(self, markup):
        return create_template(markup)[0].attributes

    def test_literal(self):
        assert self.parse('<div class="box"></div>') == {"class": Attribute("box")}

    def test_empty_and_valueless(self):
        attributes = self.parse('<input value="" disabled>')
        assert attributes == {"value": Attribute(""), "disabled": Attribute(True)}

    def test_single_expression(self):
        attributes = self.parse('<div class="{{x}}"></div>')
        assert attributes == {"class": DynamicAttribute(PathExpression(["x"]))}

    def test_constant_expression_is_literal(self):
        attributes = self.parse('<div data-n="{{3}}"></div>')
        assert attributes == {"data-n": Attribute(3)}

    def test_mixed_spans(self):
        attribute = self.parse('<div class="a {{x}} b"></div>')["class"]
        assert isinstance(attribute, DynamicAttribute)
        assert attribute.template == Template([
            Text("a "),
            DynamicText(PathExpression(["x"])),
            Text(" b"),
        ])

    def test_block_inside_attribute(self):
        attribute = self.parse('<div class="{{if on}}active{{/if}}"></div>')["class"]
        assert isinstance(attribute.template, Template)
        block = attribute.template[0]
        assert isinstance(block, ConditionalBlock)
        assert block.contents == [[Text("active")]]

    def test_unbalanced_block_fails(self):
        with pytest.raises(TemplateStructureError, match="Unbalanced block in class attribute"):
            self.parse('<div class="{{if on}}active"></div>')

    def test_unspaced_less_than_in_attribute(self):
        attributes = self.parse('<div title="{{a<b}}"></div>')
        assert attributes == {
            "title": DynamicAttribute(
                OperatorExpression("<", [PathExpression(["a"]), PathExpression(["b"])])
            ),
        }

    def test_names_keep_source_case(self):
        attributes = self.parse('<div dataValue="1" class="x"></div>')
        assert attributes == {"dataValue": Attribute("1"), "class": Attribute("x")}

    def test_duplicate_attribute_fails(self):
        with pytest.raises(TemplateStructureError, match="Duplicate attribute"):
            self.parse('<div a="1" a="2"></div>')

    def test_duplicate_attribute_ignores_case(self):
        with pytest.raises(TemplateStructureError, match="Duplicate attribute"):
            self.parse('<div a="1" A="2"></div>')

    def test_alias_hook(self):
        element = create_template('<div as="page.box" id="b"></div>')[0]
        assert element.hooks == [MarkupAs(["page", "box"])]
        assert element.attributes == {"id": Attribute("b")}

    def test_event_hook_literal_value(self):
        element = create_template("<div on=\"open: 'yes'\"></div>")[0]
        assert element.hooks[0].name == "open"
        assert element.hooks[0].expression == LiteralExpression("yes")

    def test_hook_attributes_must_be_literal(self):
        with pytest.raises(TemplateStructureError, match="must be a literal string"):
            create_template('<div as="{{name}}"></div>')


def test_mismatched_closing_tag():
    with pytest.raises(TemplateStructureError, match="Mismatched closing HTML tag: </span>"):
        create_template("<div></span>")


def test_unexpected_closing_tag():
    with pytest.raises(TemplateStructureError, match="Unexpected closing HTML tag"):
        create_template("<p></p></div>")


def test_unclosed_element_fails():
    with pytest.raises(TemplateStructureError, match="Unclosed <div> at end of template"):
        create_template("<div><p>text</p>")


def test_unclosed_element_allowed_when_not_strict():
    template = TemplateParser(strict_close=False).parse_html("<div><p>text")
    div = template[0]
    assert div.tag_name == "div"
    assert div.content[0].content == [Text("text")]


def test_to_dict():
    data = create_template('<p class="x">{{name}}</p>').to_dict()
    assert data == {
        "type": "TEMPLATE",
        "content": [{
            "type": "ELEMENT",
            "tag_name": "p",
            "attributes": {"class": {"type": "ATTRIBUTE", "data": "x"}},
            "content": [{
                "type": "DYNAMIC_TEXT",
                "expression": {
                    "type": "PathExpression",
                    "segments": ["name"],
                    "meta": {"source": "name"},
                },
            }],
        }],
    }
