"""
Generic JSON value type and safe accessors.

Upstream responses are arbitrarily nested, untyped JSON documents. This
module names that shape explicitly and provides total accessors that never
raise on a wrong type or a missing key, so the mappers can describe
"where a field lives" as plain paths instead of chains of optional lookups.
"""

from __future__ import annotations

from typing import TypeAlias

JsonPrimitive: TypeAlias = str | int | float | bool | None
JsonValue: TypeAlias = JsonPrimitive | list["JsonValue"] | dict[str, "JsonValue"]
JsonDict: TypeAlias = dict[str, JsonValue]

PathKey: TypeAlias = str | int
"""A single step in a path: a dict key or a list index."""


def dig(value: JsonValue, *path: PathKey) -> JsonValue:
    """
    Follow ``path`` through nested dicts and lists.

    Parameters
    ----------
    value : JsonValue
        The starting node.
    *path : str | int
        Dict keys (``str``) or list indices (``int``, negative allowed).

    Returns
    -------
    JsonValue
        The node at the end of the path, or None if any step is missing or
        lands on a node of the wrong kind.

    Examples
    --------
    >>> dig({"a": [{"b": 1}]}, "a", 0, "b")
    1
    >>> dig({"a": "text"}, "a", "b") is None
    True
    """
    current: JsonValue = value
    for key in path:
        if isinstance(key, int):
            if not isinstance(current, list):
                return None
            try:
                current = current[key]
            except IndexError:
                return None
        else:
            if not isinstance(current, dict) or key not in current:
                return None
            current = current[key]
    return current


def as_dict(value: JsonValue) -> JsonDict:
    """Return ``value`` if it is an object, else an empty dict."""
    return value if isinstance(value, dict) else {}


def as_list(value: JsonValue) -> list[JsonValue]:
    """Return ``value`` if it is an array, else an empty list."""
    return value if isinstance(value, list) else []


def as_str(value: JsonValue, default: str = "") -> str:
    """Return ``value`` if it is a string, else ``default``."""
    return value if isinstance(value, str) else default
