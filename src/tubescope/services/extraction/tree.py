"""
Key-name search over arbitrary JSON trees.

Upstream responses place the same kind of record ("renderer" nodes such as
``videoRenderer``) at different depths depending on the page template or
response type. Instead of fixed paths, the engine finds records by scanning
the whole tree for a property name.

The walk is depth-first in document order: object properties in insertion
order, array elements by index. A match does not stop the descent, because
some record shapes nest child records under the same key. There is no depth
bound. Input nodes are never mutated.
"""

from __future__ import annotations

from collections.abc import Iterable, Iterator

from tubescope.models.json_value import JsonDict, JsonValue


def _walk(node: JsonValue, keys: tuple[str, ...]) -> Iterator[JsonValue]:
    """Yield every value stored under any of ``keys`` below ``node``, in order."""
    if isinstance(node, dict):
        for key in keys:
            if key in node:
                yield node[key]
        for child in node.values():
            yield from _walk(child, keys)
    elif isinstance(node, list):
        for child in node:
            yield from _walk(child, keys)


def collect(root: JsonValue, key: str) -> list[JsonValue]:
    """
    Collect every value found under a property named ``key``.

    Parameters
    ----------
    root : JsonValue
        Any JSON value.
    key : str
        Property name to look for.

    Returns
    -------
    list[JsonValue]
        A new list of matched values in depth-first encounter order. Values
        nested inside an earlier match are included after it.

    Examples
    --------
    >>> collect({"a": {"k": 1, "b": [{"k": 2}]}}, "k")
    [1, 2]
    >>> collect({"k": {"k": "inner"}}, "k")
    [{'k': 'inner'}, 'inner']
    """
    return list(_walk(root, (key,)))


def collect_dicts(root: JsonValue, key: str) -> list[JsonDict]:
    """Like ``collect``, keeping only matches whose value is an object."""
    return [value for value in _walk(root, (key,)) if isinstance(value, dict)]


def find_first(root: JsonValue, key: str) -> JsonValue | None:
    """
    Return the first value ``collect`` would yield, without walking the rest.

    Returns None when the key does not occur anywhere in the tree.
    """
    return next(_walk(root, (key,)), None)


def collect_any(root: JsonValue, keys: Iterable[str]) -> list[JsonDict]:
    """
    Collect object values stored under any of several property names.

    Used where one record type is tagged with different renderer keys
    depending on the response (``videoRenderer``, ``gridVideoRenderer``,
    ``compactVideoRenderer``). Matches keep a single depth-first order
    across all keys; within one object, keys are checked in the order given.
    """
    return [value for value in _walk(root, tuple(keys)) if isinstance(value, dict)]
