"""Helpers shared by value resolution: absence checks, key transforms and lookups."""

from __future__ import annotations

import re
from collections.abc import Mapping, Sequence
from typing import Any

_MISSING = object()

FALSE_STRINGS = frozenset({"", "0", "false", "off", "no"})


def is_absent(value: Any) -> bool:
    """Single absence predicate used for options, resolved values and model lookups."""
    return value is None or value is _MISSING


def transform_key(key: str) -> str:
    """Convert bracketed field names to dot notation. user[address][city] -> user.address.city"""
    key = key.replace(".", "_").replace("[]", "")
    return key.replace("[", ".").replace("]", "")


def _lookup(target: Any, segment: str) -> Any:
    if isinstance(target, Mapping):
        return target.get(segment, _MISSING)
    if isinstance(target, Sequence) and not isinstance(target, str):
        if re.fullmatch(r"\d+", segment):
            index = int(segment)
            return target[index] if index < len(target) else _MISSING
        return _MISSING
    return getattr(target, segment, _MISSING)


def data_get(target: Any, key: str) -> Any:
    """Look up *key* on a mapping or object, walking dotted paths when the literal key misses.

    Returns None when nothing is found.
    """
    if target is None:
        return None

    value = _lookup(target, key)
    if value is not _MISSING:
        return value

    if "." not in key:
        return None

    for segment in key.split("."):
        target = _lookup(target, segment)
        if is_absent(target):
            return None
    return target


def to_bool(value: Any) -> bool:
    """Coerce a posted value to a boolean. Strings like "0" and "off" are false."""
    if isinstance(value, str):
        return value.strip().lower() not in FALSE_STRINGS
    return bool(value)


def is_sequence(value: Any) -> bool:
    return isinstance(value, (list, tuple, set, frozenset))


def contains(values: Any, needle: Any) -> bool:
    """Membership test comparing string forms, since posted values arrive as strings."""
    return str(needle) in {str(v) for v in values}


def loose_equals(left: Any, right: Any) -> bool:
    """Equality that treats 1 and "1" alike, as posted values are always strings."""
    if left is None or right is None:
        return left is right
    return left == right or str(left) == str(right)
