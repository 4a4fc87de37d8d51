"""
Tessera - HTML Template Parser
==============================

Compiles HTML templates with embedded ``{{ ... }}`` expressions into an
immutable AST for a separate rendering and data-binding runtime.

Features:
---------
- HTML markup with conditionals, loops and generic blocks
- Expression language with paths, aliases, calls and operators
- Named views composed by element, tag or expression
- Attribute, array and content splitting for view elements
- Alias and event hooks on elements and views
- Element observers run as elements close
- JSON-dumpable AST and a small CLI

Quick Start:
    from tessera import ViewRegistry

    views = ViewRegistry()
    views.register("card", "<div class='card'>{{@title}}</div>", element="card")
    page = views.register("page", "<card title='{{user.name}}'></card>")
    template = page.parse()
"""

from __future__ import annotations

__version__ = "0.1.0"
__author__ = "Tessera Team"
__license__ = "MIT"

from tessera.core.config import Config, get_config
from tessera.engine.classifier import create_expression
from tessera.engine.markup import MarkupHooks
from tessera.engine.parser import create_string_template, create_template
from tessera.errors import (
    ExpressionSyntaxError,
    TemplateError,
    TemplateLexicalError,
    TemplateStructureError,
    ViewResolutionError,
)
from tessera.expressions.grammar import create_path_expression
from tessera.templates.nodes import Template
from tessera.templates.views import View, ViewRegistry

__all__ = [
    "__version__",
    "Config",
    "get_config",
    "create_expression",
    "create_path_expression",
    "create_string_template",
    "create_template",
    "MarkupHooks",
    "Template",
    "View",
    "ViewRegistry",
    "TemplateError",
    "TemplateLexicalError",
    "TemplateStructureError",
    "ViewResolutionError",
    "ExpressionSyntaxError",
]
