"""
Tessera Markup Hooks
====================

Observers that adjust elements right after the parser closes them.

Observers are registered per event name, ``"element:<tag>"``, and run in
priority order (then registration order). Each receives the finished
Element and may mutate its hook list in place.

Example:
    markup = MarkupHooks()

    @markup.handler("element:a")
    def external_links(element):
        ...
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional

from tessera.expressions.grammar import create_path_expression
from tessera.expressions.nodes import FnExpression
from tessera.templates.nodes import Element, ElementOn

ElementCallback = Callable[[Element], None]


class HookPriority(Enum):
    """Observer execution priority."""

    HIGHEST = 0
    HIGH = 25
    NORMAL = 50
    LOW = 75
    LOWEST = 100


@dataclass
class HookHandler:
    """Registered observer."""

    callback: ElementCallback
    priority: int = HookPriority.NORMAL.value
    order: int = 0


class MarkupHooks:
    """
    Ordered observer lists keyed by event name.

    Exceptions raised by observers propagate to the parser, so a failing
    observer fails the parse.
    """

    def __init__(self) -> None:
        self._handlers: Dict[str, List[HookHandler]] = {}
        self._counter = 0

    def on(
        self,
        event: str,
        callback: ElementCallback,
        priority: int = HookPriority.NORMAL.value,
    ) -> "MarkupHooks":
        """Register an observer for an event such as "element:form"."""
        self._counter += 1
        handlers = self._handlers.setdefault(event, [])
        handlers.append(HookHandler(callback, priority, self._counter))
        handlers.sort(key=lambda h: (h.priority, h.order))
        return self

    def handler(
        self,
        event: str,
        priority: int = HookPriority.NORMAL.value,
    ) -> Callable[[ElementCallback], ElementCallback]:
        """Decorator form of on()."""
        def decorator(func: ElementCallback) -> ElementCallback:
            self.on(event, func, priority)
            return func
        return decorator

    def remove(self, event: str, callback: ElementCallback) -> bool:
        handlers = self._handlers.get(event, [])
        for handler in handlers:
            if handler.callback == callback:
                handlers.remove(handler)
                return True
        return False

    def has_handlers(self, event: str) -> bool:
        return bool(self._handlers.get(event))

    def emit(self, event: str, element: Element) -> None:
        """Run every observer registered for the event."""
        for handler in list(self._handlers.get(event, ())):
            handler.callback(element)

    def __len__(self) -> int:
        return sum(len(handlers) for handlers in self._handlers.values())

    def __repr__(self) -> str:
        return f"<MarkupHooks events={sorted(self._handlers)}>"


PREVENT_DEFAULT = "$preventDefault()"


def _is_prevent_default(hook: object) -> bool:
    expression = getattr(hook, "expression", None)
    return isinstance(expression, FnExpression) and expression.segments == ["$preventDefault"]


def has_listener_for(element: Element, event_name: str) -> bool:
    return any(
        isinstance(hook, ElementOn) and hook.name == event_name
        for hook in element.hooks or ()
    )


def add_listener(element: Element, event_name: str, source: str) -> None:
    if element.hooks is None:
        element.hooks = []
    element.hooks.append(ElementOn(event_name, create_path_expression(source)))


def prevent_form_submit(element: Element) -> None:
    """Forms that handle submit also get a default-prevention hook."""
    if not has_listener_for(element, "submit"):
        return
    for hook in element.hooks or ():
        if isinstance(hook, ElementOn) and hook.name == "submit" and _is_prevent_default(hook):
            return
    add_listener(element, "submit", PREVENT_DEFAULT)


def create_default_markup() -> MarkupHooks:
    """Observers installed on every parser unless another set is given."""
    markup = MarkupHooks()
    markup.on("element:form", prevent_form_submit)
    return markup


default_markup = create_default_markup()


def get_markup(markup: Optional[MarkupHooks] = None) -> MarkupHooks:
    return markup if markup is not None else default_markup
