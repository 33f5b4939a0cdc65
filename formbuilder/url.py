"""URL generation used to resolve form actions and image sources."""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol
from urllib.parse import quote, urlencode


class UrlGenerator(Protocol):
    """What the form builder needs from the host application's router."""

    def to(self, path: str, parameters: Any = None) -> str: ...

    def route(self, name: str, parameters: Any = None) -> str: ...

    def current(self) -> str: ...


def is_absolute_url(path: str) -> bool:
    return path.startswith(("http://", "https://", "//", "mailto:", "tel:", "#"))


def append_parameters(path: str, parameters: Any = None) -> str:
    """Append list parameters as path segments and mapping parameters as a query string."""
    if not parameters:
        return path

    if isinstance(parameters, Mapping):
        separator = "&" if "?" in path else "?"
        return f"{path}{separator}{urlencode(parameters, doseq=True)}"

    segments = "/".join(quote(str(p), safe="") for p in parameters)
    return f"{path.rstrip('/')}/{segments}"


class RouteTableUrlGenerator:
    """Framework-free URL generator backed by a name -> path template table.

    Usage:
        urls = RouteTableUrlGenerator({"item-detail": "/items/{item_id}"}, current="/items")
        urls.route("item-detail", {"item_id": 5})  # "/items/5"
    """

    def __init__(self, routes: Mapping[str, str] | None = None, current: str = "/"):
        self.routes = dict(routes or {})
        self._current = current

    def to(self, path: str, parameters: Any = None) -> str:
        if not is_absolute_url(path) and not path.startswith("/"):
            path = "/" + path
        return append_parameters(path, parameters)

    def route(self, name: str, parameters: Any = None) -> str:
        try:
            template = self.routes[name]
        except KeyError:
            available = ", ".join(sorted(self.routes)) or "(none)"
            raise LookupError(f"No route named '{name}'. Registered: {available}")

        if parameters is None:
            return template
        if isinstance(parameters, Mapping):
            return template.format(**parameters)
        return template.format(*parameters)

    def current(self) -> str:
        return self._current

    def __repr__(self) -> str:
        return f"RouteTableUrlGenerator({sorted(self.routes)!r}, current={self._current!r})"
