"""Old input: values from a rejected submission, used to re-populate forms.

The request that fails validation flashes its submitted values into the
session; the next request pops them and hands them to the form builder.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping, MutableMapping
from typing import Any, Protocol

from formbuilder.values import data_get, transform_key

logger = logging.getLogger(__name__)

OLD_INPUT_SESSION_KEY = "_old_input"

DEFAULT_EXCLUDE = frozenset({"_token", "_csrf", "_method", "password", "password_confirmation"})


class OldInput(Protocol):
    def get(self, name: str) -> Any: ...

    def is_empty(self) -> bool: ...


class NullOldInput:
    """Old input source that never holds anything."""

    def get(self, name: str) -> Any:
        return None

    def is_empty(self) -> bool:
        return True

    def __repr__(self) -> str:
        return "NullOldInput()"


class SessionOldInput:
    """Read-only view over values flashed by the previous request."""

    def __init__(self, data: Mapping[str, Any] | None = None):
        self._data = dict(data or {})

    @classmethod
    def from_session(
        cls, session: MutableMapping[str, Any], key: str = OLD_INPUT_SESSION_KEY
    ) -> SessionOldInput:
        """Pop flashed old input out of the session so it is only used once."""
        return cls(session.pop(key, None))

    def get(self, name: str) -> Any:
        if name in self._data:
            return self._data[name]
        return data_get(self._data, transform_key(name))

    def is_empty(self) -> bool:
        return not self._data

    def __repr__(self) -> str:
        return f"SessionOldInput({sorted(self._data)!r})"


def flash_old_input(
    session: MutableMapping[str, Any],
    data: Mapping[str, Any] | Iterable[tuple[str, Any]],
    *,
    key: str = OLD_INPUT_SESSION_KEY,
    exclude: Iterable[str] = DEFAULT_EXCLUDE,
) -> None:
    """Store submitted values in the session for the next request.

    Multi-valued fields (``tags[]``) keep every value. Non-string values such
    as uploads are skipped.
    """
    excluded = set(exclude)
    # Litestar's FormMultiDict keeps repeated keys in multi_items()
    if hasattr(data, "multi_items"):
        items = data.multi_items()
    elif isinstance(data, Mapping):
        items = data.items()
    else:
        items = data

    flashed: dict[str, Any] = {}
    for name, value in items:
        if name in excluded or not isinstance(value, str):
            continue
        if name.endswith("[]"):
            flashed.setdefault(name, []).append(value)
        elif name in flashed:
            previous = flashed[name]
            flashed[name] = (previous if isinstance(previous, list) else [previous]) + [value]
        else:
            flashed[name] = value

    session[key] = flashed
    logger.debug("Flashed old input for %d field(s)", len(flashed))
