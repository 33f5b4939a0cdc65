"""HTML attribute serialization and escaping."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from markupsafe import Markup, escape


class HtmlBuilder:
    """Turns attribute mappings and text into safe HTML fragments.

    Attribute values are escaped, ``True`` renders a bare attribute,
    ``None`` and ``False`` are left out. Python-friendly keys are converted
    to HTML names: ``class_`` -> ``class``, ``data_id`` -> ``data-id``.
    """

    def attributes(self, attributes: Mapping[Any, Any] | None) -> str:
        """Render a mapping as an attribute string. Returns '' or ' key="val" key2="val2"'."""
        if not attributes:
            return ""

        parts = []
        for key, value in attributes.items():
            element = self.attribute_element(key, value)
            if element is not None:
                parts.append(element)

        if not parts:
            return ""
        return " " + " ".join(parts)

    def attribute_element(self, key: Any, value: Any) -> str | None:
        if value is None or value is False:
            return None

        # Integer keys come from list-style attributes, e.g. ["required"]
        if isinstance(key, int):
            return str(escape(value))

        name = str(key).rstrip("_").replace("_", "-")
        if value is True:
            return name
        return f'{name}="{escape(value)}"'

    def entities(self, value: Any) -> Markup:
        return escape("" if value is None else value)

    def to_html_string(self, html: str) -> Markup:
        return Markup(html)
