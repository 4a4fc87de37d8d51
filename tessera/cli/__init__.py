"""
Tessera CLI
===========

Command-line interface for the template parser.

Commands:
- parse: Print the AST of a template as JSON
- check: Validate that templates parse
"""

from tessera.cli.main import cli, main

__all__ = ["cli", "main"]
