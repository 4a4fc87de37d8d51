"""
Tessera Errors
==============

Exception hierarchy shared by the template parser and the expression grammar.

Every failure is raised synchronously; a malformed template never produces a
partial tree. Context (the offending expression or the full template source)
is appended to the message as the error travels outwards, keeping the
original exception object whenever it is one of ours.
"""

from __future__ import annotations

from typing import Optional


class TemplateError(Exception):
    """Base exception for template errors."""

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message

    def add_context(self, text: str) -> "TemplateError":
        """Append diagnostic context to the message in place."""
        self.message += text
        self.args = (self.message,)
        return self

    def __str__(self) -> str:
        return self.message


class TemplateLexicalError(TemplateError):
    """Raised for unbalanced expression braces or a stalled scan."""
    pass


class TemplateStructureError(TemplateError):
    """Raised for mismatched tags, blocks and malformed attributes."""
    pass


class ViewResolutionError(TemplateError):
    """Raised when a named view is not found in the registry."""

    def __init__(self, message: str, name: Optional[str] = None) -> None:
        super().__init__(message)
        self.name = name


class ExpressionSyntaxError(TemplateError):
    """Raised when an expression body fails the expression grammar."""

    def __init__(self, message: str, position: int = -1) -> None:
        super().__init__(message)
        self.position = position


def append_error_message(err: BaseException, message: str) -> TemplateError:
    """
    Add context to an error on its way out.

    Our own errors keep their identity and get the text appended; anything
    else is wrapped in a TemplateError that the caller raises ``from`` the
    original.
    """
    if isinstance(err, TemplateError):
        return err.add_context(message)
    return TemplateError(f"{err}{message}")
