"""
Tessera Views
=============

Named templates and the registry used to resolve them while parsing.

A view is registered under a (possibly namespaced) name such as
``"app:card"``. Lookups are relative to the namespace of the view being
parsed: from inside ``"app:page"``, ``find("card")`` tries ``"app:card"``
before ``"card"``.

Example:
    views = ViewRegistry()
    views.register("card", "<div class='card'>{{@content}}</div>",
                   element="card", attributes="title")
    views.register("page", "<card><title>Hi</title>Body</card>")
    template = views.find("page").parse()
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Iterable, List, Optional, Union

from tessera.core.config import get_config
from tessera.errors import append_error_message
from tessera.templates.nodes import Template
from tessera.utils.logger import get_logger

logger = get_logger("tessera.views")


def _split_names(value: Union[str, Iterable[str], None]) -> List[str]:
    if not value:
        return []
    if isinstance(value, str):
        return value.split()
    return list(value)


class View:
    """
    A named template source.

    Attributes:
        registry: Registry the view belongs to
        name: Fully qualified name, e.g. "app:card"
        source: Template source text
        at: Namespace used for relative lookups from this view
        string: Parse as a plain string template (no HTML)
        unminified: Source is already minified (or must not be)
        attributes_map: Declared attribute names accepted as child elements
        arrays_map: Declared array tag -> attribute name
        template: Parsed template, set by parse()

    Attribute names keep the case written in the source, so
    ``<card itemCount="3">`` passes ``itemCount`` to the view.
    """

    def __init__(
        self,
        registry: "ViewRegistry",
        name: str,
        source: str = "",
        *,
        string: bool = False,
        unminified: Optional[bool] = None,
        element: Union[str, Iterable[str], None] = None,
        attributes: Union[str, Iterable[str], None] = None,
        arrays: Union[str, Iterable[str], None] = None,
    ) -> None:
        self.registry = registry
        self.name = name
        self.source = source
        self.at = name.rpartition(":")[0] or None
        self.string = string
        if unminified is None:
            unminified = not get_config().get_bool("parser.minify", True)
        self.unminified = unminified
        self.element_names = _split_names(element)
        self.attributes_map: Dict[str, bool] = {
            attribute: True for attribute in _split_names(attributes)
        }
        self.arrays_map: Dict[str, str] = {}
        for entry in _split_names(arrays):
            tag, _, attribute = entry.partition("/")
            self.arrays_map[tag] = attribute or tag
        self.template: Optional[Template] = None

    def parse(self) -> Template:
        """
        Parse the view source into a Template.

        Errors are re-raised with the view name and source appended.
        """
        from tessera.engine.parser import create_string_template, create_template
        from tessera.engine.tokenizer import minify

        try:
            if self.string:
                template = create_string_template(self.source, self)
            else:
                source = self.source if self.unminified else minify(self.source)
                template = create_template(source, self)
        except Exception as err:
            message = f'\n\nWithin template "{self.name}":\n{self.source}'
            wrapped = append_error_message(err, message)
            if wrapped is err:
                raise
            raise wrapped from err
        self.template = template
        return template

    def __repr__(self) -> str:
        return f"<View {self.name!r}>"


class ViewRegistry:
    """
    Registry of views, looked up by name and by custom element tag.

    Attributes:
        element_map: Custom element tag -> view
    """

    def __init__(self) -> None:
        self.name_map: Dict[str, View] = {}
        self.element_map: Dict[str, View] = {}

    def register(self, name: str, source: str = "", **options: Any) -> View:
        """
        Register a view.

        Args:
            name: View name, optionally namespaced with ":"
            source: Template source
            **options: string, unminified, element, attributes, arrays

        Returns:
            The registered view
        """
        view = View(self, name, source, **options)
        self.name_map[name] = view
        for tag in view.element_names:
            self.element_map[tag] = view
        logger.debug("Registered view", view=name, elements=view.element_names or None)
        return view

    def find(self, name: str, at: Optional[str] = None) -> Optional[View]:
        """
        Find a view relative to a namespace.

        Args:
            name: View name as written in the template
            at: Namespace of the referencing view

        Returns:
            The view, or None if not registered
        """
        if at:
            segments = at.split(":")
            for end in range(len(segments), 0, -1):
                candidate = ":".join(segments[:end] + [name])
                view = self.name_map.get(candidate)
                if view is not None:
                    return view
        return self.name_map.get(name)

    def __contains__(self, name: str) -> bool:
        return name in self.name_map

    def __len__(self) -> int:
        return len(self.name_map)

    def load_directory(self, directory: Union[str, Path], suffix: str = ".html") -> List[View]:
        """
        Register every template file below a directory.

        ``cards/item.html`` becomes the view ``cards:item``.
        """
        root = Path(directory)
        views = []
        for path in sorted(root.rglob(f"*{suffix}")):
            relative = path.relative_to(root).with_suffix("")
            name = ":".join(relative.parts)
            views.append(self.register(name, path.read_text(encoding="utf-8")))
        return views
