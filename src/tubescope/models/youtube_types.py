"""
Custom validated types for YouTube identifiers.

Provides strongly-typed wrappers for YouTube IDs that enforce format and length
constraints at the type level, so a record can never carry a display string or
a URL fragment where an identifier belongs.
"""

from __future__ import annotations

import re
from typing import Annotated

from pydantic import BeforeValidator, Field

_VIDEO_ID_RE = re.compile(r"^[A-Za-z0-9_-]{11}$")
_CHANNEL_ID_RE = re.compile(r"^UC[A-Za-z0-9_-]{22}$")
_HANDLE_RE = re.compile(r"^@[A-Za-z0-9._-]{3,30}$")


def validate_video_id(v: str) -> str:
    """Validate YouTube Video ID format."""
    if not isinstance(v, str):
        raise TypeError("VideoId must be a string")

    # Check length
    if len(v) != 11:
        raise ValueError(
            f"VideoId must be exactly 11 characters long, got {len(v)}: {v}"
        )

    # Check valid characters (alphanumeric, hyphens, underscores)
    if not re.match(r"^[A-Za-z0-9_-]+$", v):
        raise ValueError(f"VideoId contains invalid characters: {v}")

    return v


def validate_channel_id(v: str) -> str:
    """Validate YouTube Channel ID format."""
    if not isinstance(v, str):
        raise TypeError("ChannelId must be a string")

    # Check length
    if len(v) != 24:
        raise ValueError(
            f"ChannelId must be exactly 24 characters long, got {len(v)}: {v}"
        )

    # Check prefix
    if not v.startswith("UC"):
        raise ValueError(f'ChannelId must start with "UC", got: {v}')

    # Check valid characters (alphanumeric, hyphens, underscores)
    if not re.match(r"^UC[A-Za-z0-9_-]+$", v):
        raise ValueError(f"ChannelId contains invalid characters: {v}")

    return v


def validate_comment_id(v: str) -> str:
    """Validate that a comment ID is a non-empty token."""
    if not isinstance(v, str):
        raise TypeError("CommentId must be a string")

    cleaned = v.strip()
    if not cleaned:
        raise ValueError("CommentId cannot be empty or whitespace-only")

    return cleaned


def is_video_id(value: str) -> bool:
    """Return True if ``value`` has the shape of a video ID."""
    return bool(_VIDEO_ID_RE.match(value))


def is_channel_id(value: str) -> bool:
    """Return True if ``value`` has the shape of a ``UC...`` channel ID."""
    return bool(_CHANNEL_ID_RE.match(value))


def is_handle(value: str) -> bool:
    """Return True if ``value`` looks like an ``@handle``."""
    return bool(_HANDLE_RE.match(value))


# Type aliases for use in Pydantic models
VideoId = Annotated[
    str,
    BeforeValidator(validate_video_id),
    Field(description="YouTube Video ID (11 chars, alphanumeric)"),
]

ChannelId = Annotated[
    str,
    BeforeValidator(validate_channel_id),
    Field(description="YouTube Channel ID (24 chars, starts with UC)"),
]

CommentId = Annotated[
    str,
    BeforeValidator(validate_comment_id),
    Field(description="YouTube comment ID (non-empty token)"),
]
