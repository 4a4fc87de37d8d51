"""
Tessera HTML Tokenizer
======================

Turns markup into lexical events for the template parser:

    start(tag, tag_name, attributes, self_closing)
    end(tag, tag_name)
    text(data)
    comment(tag, data)
    other(tag)

Built on ``html.parser.HTMLParser``. Character references are decoded before
events are emitted, so text and attribute values arrive unescaped. Attributes
without a value arrive as ``True``. Attribute names keep the case they were
written with.
"""

from __future__ import annotations

import re
from html.parser import HTMLParser
from typing import Any, Callable, Dict, List, Optional, Tuple

from tessera.engine.scanner import match_braces
from tessera.errors import TemplateStructureError
from tessera.templates.nodes import VOID_ELEMENTS


class HtmlHandlers:
    """Callbacks receiving tokenizer events."""

    def __init__(
        self,
        start: Callable[[str, str, Dict[str, Any], bool], None],
        end: Callable[[str, str], None],
        text: Callable[[str], None],
        comment: Callable[[str, str], None],
        other: Callable[[str], None],
    ) -> None:
        self.start = start
        self.end = end
        self.text = text
        self.comment = comment
        self.other = other


# Comments and elements whose text HTMLParser hands over without decoding references
RAW_TEXT_PATTERN = re.compile(
    r"(<!--[\s\S]*?-->|<(script|style)\b[\s\S]*?</\2\s*>)", re.IGNORECASE
)
MARKUP_OPEN = re.compile(r"<(?=[A-Za-z/!?])")


def _escape_chunk(chunk: str) -> str:
    output: List[str] = []
    pos = 0
    while True:
        start = chunk.find("{{", pos)
        if start == -1:
            break
        end = match_braces(chunk, 2, start, "{", "}")
        if end == -1:
            break
        output.append(chunk[pos:start])
        output.append(MARKUP_OPEN.sub("&lt;", chunk[start:end]))
        pos = end
    output.append(chunk[pos:])
    return "".join(output)


def escape_expressions(source: str) -> str:
    """
    Escape ``<`` inside ``{{ ... }}`` wherever it would open a tag.

    ``{{a<b}}`` would otherwise start a ``<b`` tag. The reference is decoded
    again by the tokenizer, so text and attribute events carry the
    expression as written.
    """
    parts = RAW_TEXT_PATTERN.split(source)
    output: List[str] = []
    # split() yields [text, raw element, tag name, text, ...]
    for index in range(0, len(parts), 3):
        output.append(_escape_chunk(parts[index]))
        if index + 1 < len(parts):
            output.append(parts[index + 1])
    return "".join(output)


TAG_NAME_PATTERN = re.compile(r"<[^\s/>]+")
ATTRIBUTE_PATTERN = re.compile(
    r"""([^\s/>"'=][^\s/>=]*)(?:\s*=\s*(?:"[^"]*"|'[^']*'|[^\s"'>]*))?"""
)


def source_attribute_names(starttag: Optional[str]) -> List[str]:
    """Attribute names in the order and case they appear in a start tag."""
    if not starttag:
        return []
    head = TAG_NAME_PATTERN.match(starttag)
    body = starttag[head.end():] if head else starttag
    return [match.group(1) for match in ATTRIBUTE_PATTERN.finditer(body)]


class HtmlTokenizer(HTMLParser):
    """
    Event-emitting HTML tokenizer.

    Consecutive text chunks are merged into a single text event, and ``<``
    inside expressions is never read as markup, so ``{{ a<b }}`` reaches the
    parser in one piece.

    Example:
        tokenizer = HtmlTokenizer(handlers)
        tokenizer.parse("<p>Hello {{name}}</p>")
    """

    def __init__(self, handlers: HtmlHandlers) -> None:
        super().__init__(convert_charrefs=True)
        self.handlers = handlers
        self._text: List[str] = []

    def parse(self, source: str) -> None:
        """Tokenize the entire source."""
        self.feed(escape_expressions(source))
        self.close()
        self._flush_text()

    def _flush_text(self) -> None:
        if self._text:
            data = "".join(self._text)
            self._text = []
            self.handlers.text(data)

    def _attributes(self, tag_name: str, attrs: List[Tuple[str, Optional[str]]]) -> Dict[str, Any]:
        # HTMLParser lowercases names; take them from the source when they line up
        names = source_attribute_names(self.get_starttag_text())
        if [name.lower() for name in names] != [name for name, _ in attrs]:
            names = [name for name, _ in attrs]

        attributes: Dict[str, Any] = {}
        seen = set()
        for name, (lowered, value) in zip(names, attrs):
            if lowered in seen:
                raise TemplateStructureError(
                    f"Duplicate attribute {name!r} on <{tag_name}>"
                )
            seen.add(lowered)
            attributes[name] = True if value is None else value
        return attributes

    def handle_starttag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        self._flush_text()
        attributes = self._attributes(tag, attrs)
        self.handlers.start(self.get_starttag_text() or f"<{tag}>", tag, attributes, False)

    def handle_startendtag(self, tag: str, attrs: List[Tuple[str, Optional[str]]]) -> None:
        self._flush_text()
        attributes = self._attributes(tag, attrs)
        self.handlers.start(self.get_starttag_text() or f"<{tag}/>", tag, attributes, True)

    def handle_endtag(self, tag: str) -> None:
        self._flush_text()
        # </br> and friends never close anything
        if tag in VOID_ELEMENTS:
            return
        self.handlers.end(f"</{tag}>", tag)

    def handle_data(self, data: str) -> None:
        self._text.append(data)

    def handle_comment(self, data: str) -> None:
        self._flush_text()
        self.handlers.comment(f"<!--{data}-->", data)

    def handle_decl(self, decl: str) -> None:
        self._flush_text()
        self.handlers.other(f"<!{decl}>")

    def unknown_decl(self, data: str) -> None:
        self._flush_text()
        self.handlers.other(f"<![{data}]>")

    def handle_pi(self, data: str) -> None:
        self._flush_text()
        self.handlers.other(f"<?{data}>")


CONDITIONAL_COMMENT = re.compile(r"^<!--\[[\s\S]*\]-->$")


def is_conditional_comment(tag: str) -> bool:
    """True for comments written as ``<!--[ ... ]-->``."""
    return bool(CONDITIONAL_COMMENT.match(tag))


# Elements whose text must keep its whitespace
PRESERVE_PATTERN = re.compile(
    r"(<(pre|textarea|script|style)\b[\s\S]*?</\2\s*>)", re.IGNORECASE
)
TAG_PATTERN = re.compile(r"""<!--[\s\S]*?-->|<[A-Za-z/!?](?:"[^"]*"|'[^']*'|[^>"'])*>""")
TEXT_STOP = re.compile(r"\{\{|<")
WHITESPACE = re.compile(r"\s+")


def _flush_text(text: List[Tuple[bool, str]], output: List[str]) -> None:
    # Whitespace-only runs between tags are dropped
    if any(expression or data.strip() for expression, data in text):
        for expression, data in text:
            output.append(data if expression else WHITESPACE.sub(" ", data))
    text.clear()


def _minify_markup(chunk: str) -> str:
    output: List[str] = []
    text: List[Tuple[bool, str]] = []
    pos = 0
    while pos < len(chunk):
        if chunk.startswith("{{", pos):
            end = match_braces(chunk, 2, pos, "{", "}")
            if end == -1:
                end = len(chunk)
            text.append((True, chunk[pos:end]))
            pos = end
            continue

        tag = TAG_PATTERN.match(chunk, pos) if chunk[pos] == "<" else None
        if tag:
            _flush_text(text, output)
            output.append(tag.group())
            pos = tag.end()
            continue

        stop = TEXT_STOP.search(chunk, pos + 1)
        end = stop.start() if stop else len(chunk)
        text.append((False, chunk[pos:end]))
        pos = end

    _flush_text(text, output)
    return "".join(output)


def minify(source: str) -> str:
    """
    Collapse insignificant whitespace in markup.

    Only text between tags changes: whitespace-only runs are removed and
    other runs shrink to a single space. Tags, attribute values and
    ``{{ ... }}`` bodies are copied as written, as are the contents of
    ``pre``, ``textarea``, ``script`` and ``style``. The ``&sp;`` entity is
    then turned into a literal space, so templates can keep a significant
    space between tags.
    """
    parts = PRESERVE_PATTERN.split(source)
    output: List[str] = []
    # split() yields [text, preserved, tag name, text, preserved, tag name, ...]
    for index in range(0, len(parts), 3):
        output.append(_minify_markup(parts[index]))
        if index + 1 < len(parts):
            output.append(parts[index + 1])
    return "".join(output).strip().replace("&sp;", " ")
