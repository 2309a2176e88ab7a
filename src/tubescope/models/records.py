"""
Pydantic models for normalized extraction records.

Every public operation maps raw upstream nodes into one of these records.
Records always carry a validated identifier, integer counts (never display
strings) and, where a duration applies, both the raw seconds and the
formatted clock string. Serialization uses camelCase keys.

Models
------
Thumbnail
    A single thumbnail image reference.
VideoSummary
    A video as it appears in search, trending, channel and related lists.
VideoDetails
    Full watch-page metadata for one video.
SearchResultChannel
    A channel as it appears in search results.
ChannelSummary
    Channel-page metadata.
CommentRecord
    A top-level comment on a video.
CaptionTrack
    One caption track advertised by the player configuration.
TranscriptSegment
    One timed caption segment.
OperationResult
    Uniform success/failure envelope returned by every operation.
"""

from __future__ import annotations

import datetime as _dt
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, computed_field
from pydantic.alias_generators import to_camel

from tubescope.models.youtube_types import ChannelId, CommentId, VideoId
from tubescope.utils.text import format_count, format_duration

WATCH_URL = "https://www.youtube.com/watch?v={video_id}"
EMBED_URL = "https://www.youtube.com/embed/{video_id}"
CHANNEL_URL = "https://www.youtube.com/channel/{channel_id}"


class RecordModel(BaseModel):
    """Base class for records: camelCase serialization, populate by name."""

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )

    def to_dict(self) -> dict[str, Any]:
        """Serialize to a JSON-compatible dict with camelCase keys."""
        return self.model_dump(mode="json", by_alias=True)


class Thumbnail(RecordModel):
    """A single thumbnail image reference."""

    url: str
    width: int = 0
    height: int = 0


class VideoSummary(RecordModel):
    """
    A video as it appears in list-style responses.

    Attributes
    ----------
    video_id : VideoId
        11-character video identifier.
    title : str
        Video title.
    description : str
        Description snippet, when the source provides one.
    channel_name : str
        Display name of the owning channel.
    channel_id : str | None
        Owning channel ID, if present in the node.
    thumbnails : list[Thumbnail]
        Thumbnails in the order the source lists them.
    published_text : str
        Relative publish time as displayed ("3 days ago").
    view_count : int
        Resolved view count.
    length_seconds : int
        Duration in seconds (0 for live streams).
    is_live : bool
        Whether the video is currently live.
    is_upcoming : bool
        Whether the video is a scheduled premiere or stream.
    """

    video_id: VideoId
    title: str = ""
    description: str = ""
    channel_name: str = ""
    channel_id: str | None = None
    thumbnails: list[Thumbnail] = Field(default_factory=list)
    published_text: str = ""
    view_count: int = Field(default=0, ge=0)
    length_seconds: int = Field(default=0, ge=0)
    is_live: bool = False
    is_upcoming: bool = False

    @computed_field(alias="duration")  # type: ignore[prop-decorator]
    @property
    def duration(self) -> str:
        """Clock-style duration derived from ``length_seconds``."""
        return format_duration(self.length_seconds)

    @computed_field(alias="viewCountText")  # type: ignore[prop-decorator]
    @property
    def view_count_text(self) -> str:
        """Abbreviated view count derived from ``view_count``."""
        return format_count(self.view_count)

    @computed_field(alias="url")  # type: ignore[prop-decorator]
    @property
    def url(self) -> str:
        """Canonical watch URL."""
        return WATCH_URL.format(video_id=self.video_id)


class VideoDetails(VideoSummary):
    """
    Full watch-page metadata for one video.

    Extends ``VideoSummary`` with the fields only the player configuration
    and watch page carry.
    """

    keywords: list[str] = Field(default_factory=list)
    like_count: int = Field(default=0, ge=0)
    category: str = ""
    publish_date: _dt.date | None = None
    is_family_safe: bool = True
    is_private: bool = False

    @computed_field(alias="likeCountText")  # type: ignore[prop-decorator]
    @property
    def like_count_text(self) -> str:
        """Abbreviated like count derived from ``like_count``."""
        return format_count(self.like_count)

    @computed_field(alias="embedUrl")  # type: ignore[prop-decorator]
    @property
    def embed_url(self) -> str:
        """Embeddable player URL."""
        return EMBED_URL.format(video_id=self.video_id)


class SearchResultChannel(RecordModel):
    """A channel as it appears in search results."""

    channel_id: ChannelId
    title: str = ""
    handle: str | None = None
    description: str = ""
    thumbnails: list[Thumbnail] = Field(default_factory=list)
    subscriber_count: int = Field(default=0, ge=0)
    video_count: int = Field(default=0, ge=0)

    @computed_field(alias="subscriberCountText")  # type: ignore[prop-decorator]
    @property
    def subscriber_count_text(self) -> str:
        """Abbreviated subscriber count."""
        return format_count(self.subscriber_count)

    @computed_field(alias="url")  # type: ignore[prop-decorator]
    @property
    def url(self) -> str:
        """Canonical channel URL."""
        return CHANNEL_URL.format(channel_id=self.channel_id)


class ChannelSummary(SearchResultChannel):
    """
    Channel-page metadata.

    Adds the fields only the channel page exposes to the search-result
    shape.
    """

    keywords: list[str] = Field(default_factory=list)
    vanity_url: str | None = None
    is_family_safe: bool = True
    available_countries: list[str] = Field(default_factory=list)

    @computed_field(alias="videoCountText")  # type: ignore[prop-decorator]
    @property
    def video_count_text(self) -> str:
        """Abbreviated video count."""
        return format_count(self.video_count)


class CommentRecord(RecordModel):
    """A top-level comment on a video."""

    comment_id: CommentId
    author: str = ""
    author_channel_id: str | None = None
    content: str = ""
    published_text: str = ""
    like_count: int = Field(default=0, ge=0)
    reply_count: int = Field(default=0, ge=0)
    is_pinned: bool = False
    is_hearted: bool = False
    author_is_channel_owner: bool = False


class CaptionTrack(RecordModel):
    """One caption track advertised by the player configuration."""

    base_url: str
    language_code: str
    name: str = ""
    kind: str = ""
    is_translatable: bool = False

    @property
    def is_generated(self) -> bool:
        """True for automatic speech recognition tracks."""
        return self.kind == "asr"


class TranscriptSegment(RecordModel):
    """
    One timed caption segment.

    Attributes
    ----------
    start : float
        Start time in seconds.
    duration : float
        Duration in seconds (zero allowed).
    text : str
        Entity-decoded caption text.
    """

    start: float = Field(ge=0.0)
    duration: float = Field(default=0.0, ge=0.0)
    text: str = ""

    @property
    def end(self) -> float:
        """End time in seconds."""
        return self.start + self.duration


class OperationResult(BaseModel):
    """
    Uniform envelope returned by every public operation.

    A successful result carries operation-specific fields in ``payload``;
    a failed one carries only ``error``.

    Examples
    --------
    >>> OperationResult.fail("Query is required").to_dict()
    {'success': False, 'error': 'Query is required'}
    """

    success: bool
    error: str | None = None
    payload: dict[str, Any] = Field(default_factory=dict)
    timestamp: _dt.datetime = Field(
        default_factory=lambda: _dt.datetime.now(_dt.timezone.utc)
    )

    @classmethod
    def ok(cls, **payload: Any) -> OperationResult:
        """Build a success envelope from keyword fields."""
        return cls(success=True, payload=payload)

    @classmethod
    def fail(cls, error: str) -> OperationResult:
        """Build a failure envelope."""
        return cls(success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        """
        Serialize the envelope.

        Success: ``{"success": True, <payload fields>, "timestamp": ...}``
        with payload keys and records converted to camelCase. Failure:
        ``{"success": False, "error": ...}``.
        """
        if not self.success:
            return {"success": False, "error": self.error or "Unknown error"}

        data: dict[str, Any] = {"success": True}
        for key, value in self.payload.items():
            data[to_camel(key)] = _serialize(value)
        data["timestamp"] = self.timestamp.isoformat()
        return data


def _serialize(value: Any) -> Any:
    """Convert records (and containers of records) to plain JSON values."""
    if isinstance(value, RecordModel):
        return value.to_dict()
    if isinstance(value, list):
        return [_serialize(item) for item in value]
    if isinstance(value, dict):
        return {key: _serialize(item) for key, item in value.items()}
    return value
