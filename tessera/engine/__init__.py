"""
Tessera Engine Module
=====================

The template parser and its collaborators.

Components:
- Tokenizer: HTML markup to lexical events
- Scanner: text to literal/expression spans
- Classifier: expression keywords to metadata
- Parser: lexical events to a Template AST
- Markup: observers run on finished elements
"""

from tessera.engine.classifier import create_expression
from tessera.engine.markup import MarkupHooks, create_default_markup, default_markup
from tessera.engine.parser import (
    ParseNode,
    TemplateParser,
    create_string_template,
    create_template,
)
from tessera.engine.scanner import match_braces, parse_text
from tessera.engine.tokenizer import HtmlTokenizer, minify

__all__ = [
    "create_expression",
    "MarkupHooks",
    "create_default_markup",
    "default_markup",
    "ParseNode",
    "TemplateParser",
    "create_string_template",
    "create_template",
    "match_braces",
    "parse_text",
    "HtmlTokenizer",
    "minify",
]
