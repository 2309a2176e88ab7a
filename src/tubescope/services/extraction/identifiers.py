"""
Identifier extraction from user input.

Operations accept either a bare identifier or a full URL. URLs are reduced
to an identifier by matching the known path shapes:

- videos: ``/watch?v=``, ``/embed/``, ``/shorts/``, ``/live/``, ``/v/``,
  ``youtu.be/``
- channels: ``/channel/UC...``, ``/@handle``, ``/c/<name>``,
  ``/user/<name>``
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Literal
from urllib.parse import ParseResult, parse_qs, unquote, urlparse

from tubescope.models.youtube_types import is_channel_id, is_handle, is_video_id

_VIDEO_PATH_RE = re.compile(r"^/(?:embed|shorts|live|v|e)/([A-Za-z0-9_-]{11})(?:[/?#]|$)")
_SHORT_LINK_RE = re.compile(r"^/([A-Za-z0-9_-]{11})(?:[/?#]|$)")
_CHANNEL_PATH_RE = re.compile(r"^/channel/(UC[A-Za-z0-9_-]{22})(?:[/?#]|$)")
_HANDLE_PATH_RE = re.compile(r"^/(@[^/?#]+)")
_LEGACY_PATH_RE = re.compile(r"^/(c|user)/([^/?#]+)")

_YOUTUBE_HOSTS = ("youtube.com", "youtube-nocookie.com")

ChannelKind = Literal["id", "handle", "custom", "user"]


@dataclass(frozen=True)
class ChannelRef:
    """
    A channel reference reduced from user input.

    Attributes
    ----------
    kind : ChannelKind
        ``"id"`` for ``UC...`` IDs, ``"handle"`` for ``@handles``,
        ``"custom"`` for ``/c/<name>`` and ``"user"`` for ``/user/<name>``.
    value : str
        The ID, handle (with ``@``) or legacy name.
    """

    kind: ChannelKind
    value: str

    @property
    def page_path(self) -> str:
        """Site-relative path of the channel page."""
        if self.kind == "id":
            return f"/channel/{self.value}"
        if self.kind == "handle":
            return f"/{self.value}"
        if self.kind == "custom":
            return f"/c/{self.value}"
        return f"/user/{self.value}"


def _looks_like_url(value: str) -> bool:
    lowered = value.lower()
    return (
        lowered.startswith(("http://", "https://", "www.", "m."))
        or "youtube.com" in lowered
        or "youtu.be" in lowered
    )


def _on_host(host: str, domains: tuple[str, ...]) -> bool:
    return any(host == d or host.endswith(f".{d}") for d in domains)


def _parse(value: str) -> ParseResult:
    if not re.match(r"^[a-z][a-z0-9+.-]*://", value, re.IGNORECASE):
        value = f"https://{value}"
    return urlparse(value)


def extract_video_id(value: str | None) -> str | None:
    """
    Reduce a video URL or bare ID to the 11-character video ID.

    Parameters
    ----------
    value : str | None
        A video ID or any supported video URL.

    Returns
    -------
    str | None
        The video ID, or None when the input is empty or a URL whose shape is
        not recognized. Bare (non-URL) input is returned stripped.

    Examples
    --------
    >>> extract_video_id("https://www.youtube.com/watch?v=dQw4w9WgXcQ&t=42")
    'dQw4w9WgXcQ'
    >>> extract_video_id("https://youtu.be/dQw4w9WgXcQ")
    'dQw4w9WgXcQ'
    >>> extract_video_id(" dQw4w9WgXcQ ")
    'dQw4w9WgXcQ'
    """
    if value is None:
        return None
    candidate = value.strip()
    if not candidate:
        return None
    if not _looks_like_url(candidate):
        return candidate

    parsed = _parse(candidate)
    host = parsed.netloc.lower().split(":")[0]

    if _on_host(host, ("youtu.be",)):
        match = _SHORT_LINK_RE.match(parsed.path)
        return match.group(1) if match else None

    if not _on_host(host, _YOUTUBE_HOSTS):
        return None

    if parsed.path.rstrip("/") == "/watch":
        ids = parse_qs(parsed.query).get("v", [])
        if ids and is_video_id(ids[0]):
            return ids[0]
        return None

    match = _VIDEO_PATH_RE.match(parsed.path)
    return match.group(1) if match else None


def extract_channel_ref(value: str | None) -> ChannelRef | None:
    """
    Reduce a channel URL, handle or bare ID to a ``ChannelRef``.

    Parameters
    ----------
    value : str | None
        A ``UC...`` channel ID, an ``@handle`` or any supported channel URL.

    Returns
    -------
    ChannelRef | None
        The reference, or None when the input is empty or unrecognized.

    Examples
    --------
    >>> extract_channel_ref("https://www.youtube.com/@veritasium/videos")
    ChannelRef(kind='handle', value='@veritasium')
    >>> extract_channel_ref("UCHnyfMqiRRG1u-2MsSQLbXA").kind
    'id'
    """
    if value is None:
        return None
    candidate = value.strip()
    if not candidate:
        return None

    if not _looks_like_url(candidate):
        if is_channel_id(candidate):
            return ChannelRef(kind="id", value=candidate)
        if candidate.startswith("@"):
            return ChannelRef(kind="handle", value=candidate) if is_handle(candidate) else None
        if re.match(r"^[A-Za-z0-9._-]+$", candidate):
            return ChannelRef(kind="handle", value=f"@{candidate}")
        return None

    parsed = _parse(candidate)
    host = parsed.netloc.lower().split(":")[0]
    if not _on_host(host, _YOUTUBE_HOSTS):
        return None
    path = unquote(parsed.path)

    match = _CHANNEL_PATH_RE.match(path)
    if match:
        return ChannelRef(kind="id", value=match.group(1))

    match = _HANDLE_PATH_RE.match(path)
    if match:
        return ChannelRef(kind="handle", value=match.group(1))

    match = _LEGACY_PATH_RE.match(path)
    if match:
        kind: ChannelKind = "custom" if match.group(1) == "c" else "user"
        return ChannelRef(kind=kind, value=match.group(2))

    return None


def extract_channel_id(value: str | None) -> str | None:
    """
    Reduce channel input to its identifier string.

    Returns the ``UC...`` ID, the ``@handle`` or the legacy name, whichever
    the input carries, or None when it cannot be recognized.
    """
    ref = extract_channel_ref(value)
    return ref.value if ref else None
