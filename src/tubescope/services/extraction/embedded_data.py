"""
Embedded data extraction from raw page markup.

YouTube pages bootstrap client-side rendering from JSON object literals
assigned to well-known globals inside inline scripts, e.g.::

    var ytInitialData = {...};
    var ytInitialPlayerResponse = {...};

This module locates such an assignment and parses its literal as JSON. It
never raises: a page template that does not expose a given global is an
ordinary case, so every failure path returns ``None`` and is logged at
DEBUG level for diagnostics only. A blob is either fully parsed or absent.

Functions
---------
extract_embedded_json
    Parse the object literal bound to one global.
extract_embedded_blobs
    Parse several globals from the same page.
"""

from __future__ import annotations

import json
import logging
import re
from collections.abc import Iterable

from tubescope.models.json_value import JsonValue

logger = logging.getLogger(__name__)

INITIAL_DATA = "ytInitialData"
"""Global holding the initial render data (search, watch, channel pages)."""

PLAYER_RESPONSE = "ytInitialPlayerResponse"
"""Global holding the player configuration (watch pages only)."""

# Upper bound for the balanced-brace scan, in characters.
_MAX_SCAN_LENGTH = 10_000_000

# Handles: var ytInitialData = {...};
#          window["ytInitialData"] = {...};
#          ytInitialData = {...};
_ASSIGNMENT_PREFIX = r"(?:\bvar\s+|window\[[\"']|\b){name}(?:[\"']\])?\s*=\s*"


def _greedy_pattern(variable_name: str) -> re.Pattern[str]:
    """
    Assignment regex whose group 1 greedily captures the literal.

    ``.`` does not cross newlines, so the capture runs to the last ``};`` on
    the assignment's line.
    """
    prefix = _ASSIGNMENT_PREFIX.format(name=re.escape(variable_name))
    return re.compile(prefix + r"(\{.*\})\s*;")


def _prefix_pattern(variable_name: str) -> re.Pattern[str]:
    """Assignment regex ending right before the literal's opening brace."""
    prefix = _ASSIGNMENT_PREFIX.format(name=re.escape(variable_name))
    return re.compile(prefix + r"(?=\{)")


def _extract_json_object(text: str, start: int) -> str | None:
    """
    Extract a balanced JSON object starting at ``start``.

    Uses brace-counting that honours string literals and escapes, which
    recovers the literal when it spans several lines or when the same line
    carries further statements after the assignment.

    Parameters
    ----------
    text : str
        Raw page source.
    start : int
        Position of the opening ``{``.

    Returns
    -------
    str | None
        The balanced object text, or None if there is no opening brace at
        ``start`` or the braces never balance within the scan limit.
    """
    if start >= len(text) or text[start] != "{":
        return None

    depth = 0
    in_string = False
    escape = False
    limit = min(len(text), start + _MAX_SCAN_LENGTH)

    for i in range(start, limit):
        ch = text[i]

        if escape:
            escape = False
            continue

        if ch == "\\":
            if in_string:
                escape = True
            continue

        if ch == '"':
            in_string = not in_string
            continue

        if in_string:
            continue

        if ch == "{":
            depth += 1
        elif ch == "}":
            depth -= 1
            if depth == 0:
                return text[start : i + 1]

    return None


def _loads_object(candidate: str) -> dict[str, JsonValue] | None:
    """Parse ``candidate`` as a JSON object, returning None on any failure."""
    try:
        value = json.loads(candidate)
    except (json.JSONDecodeError, ValueError):
        return None
    return value if isinstance(value, dict) else None


def extract_embedded_json(html: str, variable_name: str) -> JsonValue | None:
    """
    Parse the object literal assigned to ``variable_name`` in ``html``.

    The greedy same-line capture is tried first. If it does not match or
    does not parse (for example because another statement follows on the
    same line, or the literal spans lines), the literal is re-read with a
    balanced-brace scan from the assignment's opening brace.

    Parameters
    ----------
    html : str
        Raw page source.
    variable_name : str
        Name of the global, e.g. ``"ytInitialData"``.

    Returns
    -------
    JsonValue | None
        The parsed object, or None if the assignment is absent or its literal
        is not a valid JSON object.

    Examples
    --------
    >>> extract_embedded_json('<script>var ytInitialData = {"a":1};</script>', "ytInitialData")
    {'a': 1}
    >>> extract_embedded_json("<html></html>", "ytInitialData") is None
    True
    """
    if not html or not variable_name:
        return None

    match = _greedy_pattern(variable_name).search(html)
    if match:
        value = _loads_object(match.group(1))
        if value is not None:
            return value

    prefix = _prefix_pattern(variable_name).search(html)
    if not prefix:
        logger.debug("No assignment for %s found in page", variable_name)
        return None

    balanced = _extract_json_object(html, prefix.end())
    if balanced is not None:
        value = _loads_object(balanced)
        if value is not None:
            return value

    logger.debug(
        "Assignment for %s found but its literal is not valid JSON",
        variable_name,
    )
    return None


def extract_embedded_blobs(
    html: str, variable_names: Iterable[str]
) -> dict[str, JsonValue]:
    """
    Parse several globals from one page.

    Parameters
    ----------
    html : str
        Raw page source.
    variable_names : Iterable[str]
        Names of the globals to look for.

    Returns
    -------
    dict[str, JsonValue]
        Parsed blobs keyed by name. Names whose blob is absent or malformed
        are left out.
    """
    blobs: dict[str, JsonValue] = {}
    for name in variable_names:
        value = extract_embedded_json(html, name)
        if value is not None:
            blobs[name] = value
    return blobs
