"""Text normalization utilities.

Upstream pages render numbers and times for humans: "1.2M views",
"1,234 subscribers", "4:13". This module converts those display strings to
canonical values and back, so records always carry integers and the
display form is derived from them.

Conversions:
- Magnitude strings <-> integers ("2.3K" -> 2300, 2300 -> "2.3K")
- Clock-style durations <-> seconds ("1:02:05" <-> 3725)
- Platform text containers ({"simpleText": ...}, {"runs": [...]}) -> str
"""

from __future__ import annotations

import re
from decimal import Decimal, InvalidOperation
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from tubescope.models.json_value import JsonValue

_COUNT_RE = re.compile(r"^\s*(\d+(?:\.\d+)?)\s*([KMB])?(?![A-Za-z])", re.IGNORECASE)
_CLOCK_RE = re.compile(r"^\s*(\d+)(?::(\d{1,2}))?(?::(\d{1,2}))?\s*$")

_MULTIPLIERS: dict[str, int] = {
    "K": 1_000,
    "M": 1_000_000,
    "B": 1_000_000_000,
}


def parse_count(text: str | int | None) -> int:
    """
    Parse a possibly abbreviated count into an integer.

    Thousands separators are removed, then a leading decimal number with an
    optional ``K``/``M``/``B`` suffix (case-insensitive) is read. Anything
    after the number ("views", "subscribers") is ignored.

    Parameters
    ----------
    text : str | int | None
        Display text such as ``"1.2K views"`` or ``"1,234"``. Integers are
        returned unchanged.

    Returns
    -------
    int
        The parsed count, or 0 when the text does not start with a number.

    Examples
    --------
    >>> parse_count("2.3K views")
    2300
    >>> parse_count("1,234")
    1234
    >>> parse_count("No views")
    0
    """
    if isinstance(text, bool) or text is None:
        return 0
    if isinstance(text, int):
        return text

    match = _COUNT_RE.match(text.replace(",", ""))
    if not match:
        return 0

    number, suffix = match.group(1), match.group(2)
    try:
        value = Decimal(number)
    except InvalidOperation:
        return 0
    if suffix:
        value *= _MULTIPLIERS[suffix.upper()]
    return int(value)


def format_count(number: int) -> str:
    """
    Render an integer in the abbreviated form used by upstream displays.

    Parameters
    ----------
    number : int
        Exact count.

    Returns
    -------
    str
        ``str(number)`` below 1,000; otherwise one decimal place with a
        ``K``, ``M`` or ``B`` suffix.

    Examples
    --------
    >>> format_count(999)
    '999'
    >>> format_count(1500)
    '1.5K'
    >>> format_count(2_000_000)
    '2.0M'
    """
    if number >= 1_000_000_000:
        return f"{number / 1_000_000_000:.1f}B"
    if number >= 1_000_000:
        return f"{number / 1_000_000:.1f}M"
    if number >= 1_000:
        return f"{number / 1_000:.1f}K"
    return str(number)


def format_duration(seconds: int | float | None) -> str:
    """
    Format elapsed seconds as ``H:MM:SS`` (with hours) or ``M:SS``.

    Examples
    --------
    >>> format_duration(65)
    '1:05'
    >>> format_duration(3725)
    '1:02:05'
    """
    total = max(int(seconds or 0), 0)
    hours, remainder = divmod(total, 3600)
    minutes, secs = divmod(remainder, 60)
    if hours > 0:
        return f"{hours}:{minutes:02d}:{secs:02d}"
    return f"{minutes}:{secs:02d}"


def parse_duration(text: str | None) -> int:
    """
    Parse a clock-style duration (``"4:13"``, ``"1:03:22"``) into seconds.

    A bare number is taken as seconds. Anything else yields 0.
    """
    if not text:
        return 0
    match = _CLOCK_RE.match(text)
    if not match:
        return 0
    parts = [int(p) for p in match.groups() if p is not None]
    total = 0
    for part in parts:
        total = total * 60 + part
    return total


def extract_text(node: JsonValue) -> str:
    """
    Flatten a platform text container into a plain string.

    Handles ``{"simpleText": "..."}``, ``{"runs": [{"text": "..."}, ...]}``
    and the newer ``{"content": "..."}`` view-model shape. Plain strings are
    returned as-is; anything else yields an empty string.
    """
    if isinstance(node, str):
        return node
    if not isinstance(node, dict):
        return ""

    simple = node.get("simpleText")
    if isinstance(simple, str):
        return simple

    runs = node.get("runs")
    if isinstance(runs, list):
        return "".join(
            run["text"]
            for run in runs
            if isinstance(run, dict) and isinstance(run.get("text"), str)
        )

    content = node.get("content")
    if isinstance(content, str):
        return content

    return ""
