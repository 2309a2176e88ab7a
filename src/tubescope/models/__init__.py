"""
Data models module for tubescope.

Defines the generic JSON value type, validated YouTube identifier types and
the Pydantic records every extraction operation produces.
"""

from __future__ import annotations

from .json_value import JsonDict, JsonValue
from .records import (
    CaptionTrack,
    ChannelSummary,
    CommentRecord,
    OperationResult,
    SearchResultChannel,
    Thumbnail,
    TranscriptSegment,
    VideoDetails,
    VideoSummary,
)
from .youtube_types import ChannelId, CommentId, VideoId

__all__ = [
    "JsonDict",
    "JsonValue",
    "ChannelId",
    "CommentId",
    "VideoId",
    "Thumbnail",
    "VideoSummary",
    "VideoDetails",
    "SearchResultChannel",
    "ChannelSummary",
    "CommentRecord",
    "CaptionTrack",
    "TranscriptSegment",
    "OperationResult",
]
