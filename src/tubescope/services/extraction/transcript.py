"""
Timed-text caption decoding.

The caption feed is a flat XML document of ``<text>`` elements::

    <transcript>
      <text start="1.5" dur="2.0">Hello &amp; world</text>
      ...
    </transcript>

Because the structure is constrained and flat, it is scanned with a regex
rather than a full XML parser. Segments keep source order; nothing is merged
or re-segmented.
"""

from __future__ import annotations

import html
import logging
import re

from tubescope.models.records import TranscriptSegment

logger = logging.getLogger(__name__)

_TEXT_ELEMENT_RE = re.compile(
    r"<text\b(?P<attrs>[^>]*?)(?<!/)>(?P<body>.*?)</text>",
    re.DOTALL,
)
_ATTR_RE = re.compile(r"""(?P<name>[\w:-]+)\s*=\s*(?P<quote>["'])(?P<value>.*?)(?P=quote)""")
_INNER_TAG_RE = re.compile(r"<[^>]+>")

_STANDARD_ENTITIES: tuple[tuple[str, str], ...] = (
    ("&lt;", "<"),
    ("&gt;", ">"),
    ("&quot;", '"'),
    ("&#39;", "'"),
    ("&amp;", "&"),
)


def decode_entities(text: str) -> str:
    """
    Decode the five standard HTML entities, then any remaining references.

    ``&amp;`` is replaced last among the five. Caption feeds escape the
    ampersand of numeric references (``I&amp;#39;m``), so ``html.unescape``
    always runs on the result to resolve what that exposes (``&#39;``,
    ``&#8217;``).
    """
    for entity, char in _STANDARD_ENTITIES:
        text = text.replace(entity, char)
    if "&" in text:
        text = html.unescape(text)
    return text


def _parse_attrs(raw: str) -> dict[str, str]:
    return {m.group("name"): m.group("value") for m in _ATTR_RE.finditer(raw)}


def _to_float(value: str | None) -> float:
    if value is None:
        return 0.0
    try:
        number = float(value)
    except ValueError:
        return 0.0
    return number if number >= 0 else 0.0


def decode_transcript(timed_text_xml: str) -> list[TranscriptSegment]:
    """
    Decode a timed-text XML payload into ordered segments.

    Parameters
    ----------
    timed_text_xml : str
        The caption document.

    Returns
    -------
    list[TranscriptSegment]
        One segment per ``<text>`` element, in source order. ``dur`` defaults
        to 0.0 when absent. Inner markup is stripped and line breaks inside a
        segment become spaces.

    Examples
    --------
    >>> segments = decode_transcript('<text start="1.5" dur="2.0">Hello &amp; world</text>')
    >>> segments[0].text
    'Hello & world'
    """
    segments: list[TranscriptSegment] = []
    for match in _TEXT_ELEMENT_RE.finditer(timed_text_xml):
        attrs = _parse_attrs(match.group("attrs"))
        if "start" not in attrs:
            continue
        body = _INNER_TAG_RE.sub("", match.group("body"))
        text = decode_entities(body)
        text = " ".join(text.split())
        segments.append(
            TranscriptSegment(
                start=_to_float(attrs.get("start")),
                duration=_to_float(attrs.get("dur")),
                text=text,
            )
        )

    logger.debug("Decoded %d transcript segments", len(segments))
    return segments
