"""
Mapping of raw renderer nodes into normalized records.

Upstream nodes carry the same information in several shapes: a view count
may be an exact ``"1,234,567 views"`` string or an abbreviated
``"1.2M views"`` one, a title may be ``simpleText`` or ``runs``. Each record
type therefore declares, per output field, an ordered tuple of
``FieldSource`` candidates. The first candidate whose path resolves to a
usable value wins; otherwise the field keeps the model default.

Mappers only raise ``UnsupportedFormatError``, and only when a record's
identifier cannot be recovered. Every other missing field takes its default.

Functions
---------
map_video_renderer
    ``videoRenderer`` / ``compactVideoRenderer`` / ``gridVideoRenderer``
    node to ``VideoSummary``.
map_channel_renderer
    ``channelRenderer`` node to ``SearchResultChannel``.
map_comment
    ``commentRenderer`` or ``commentEntityPayload`` node to ``CommentRecord``.
map_video_details
    Player configuration (+ initial data, + meta tags) to ``VideoDetails``.
map_channel_header
    Channel page initial data to ``ChannelSummary``.
map_caption_tracks
    Player configuration to a list of ``CaptionTrack``.
"""

from __future__ import annotations

import datetime as _dt
import logging
import re
import shlex
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeVar

from pydantic import BaseModel, ValidationError

from tubescope.exceptions import UnsupportedFormatError
from tubescope.models.json_value import JsonDict, JsonValue, PathKey, as_list, dig
from tubescope.models.records import (
    CaptionTrack,
    ChannelSummary,
    CommentRecord,
    SearchResultChannel,
    Thumbnail,
    VideoDetails,
    VideoSummary,
)
from tubescope.services.extraction.tree import collect, find_first
from tubescope.utils.text import extract_text, parse_count, parse_duration

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", bound=BaseModel)

_LIKE_LABEL_RES = (
    re.compile(r"^([\d,.]+[KMB]?)\s+likes?$", re.IGNORECASE),
    re.compile(r"along with ([\d,]+) other (?:people|person)", re.IGNORECASE),
)


# ---------------------------------------------------------------------------
# Candidate sources
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class FieldSource:
    """
    One candidate location for an output field.

    Attributes
    ----------
    path : tuple[PathKey, ...]
        Keys and indices followed from the node with ``dig``.
    convert : Callable[[JsonValue], Any] | None
        Conversion applied to the raw value. A conversion returning None or
        an empty string marks the candidate as absent.
    """

    path: tuple[PathKey, ...]
    convert: Callable[[JsonValue], Any] | None = None


def src(*path: PathKey, convert: Callable[[JsonValue], Any] | None = None) -> FieldSource:
    """Shorthand constructor for ``FieldSource``."""
    return FieldSource(path=path, convert=convert)


def pick(node: JsonValue, sources: tuple[FieldSource, ...]) -> Any:
    """
    Return the first usable value among ``sources``, or None.

    Examples
    --------
    >>> pick({"b": 2}, (src("a"), src("b")))
    2
    """
    for source in sources:
        value: Any = dig(node, *source.path)
        if value is None:
            continue
        if source.convert is not None:
            value = source.convert(value)
        if value is None or value == "":
            continue
        return value
    return None


def resolve_fields(
    node: JsonValue, table: Mapping[str, tuple[FieldSource, ...]]
) -> dict[str, Any]:
    """Resolve every field of ``table``, leaving out fields with no usable source."""
    resolved: dict[str, Any] = {}
    for field_name, sources in table.items():
        value = pick(node, sources)
        if value is not None:
            resolved[field_name] = value
    return resolved


def _build(model: type[RecordT], id_field: str, fields: dict[str, Any]) -> RecordT:
    """Construct ``model``, raising UnsupportedFormatError for a bad identifier."""
    record_type = model.__name__
    identifier = fields.get(id_field)
    if not isinstance(identifier, str) or not identifier.strip():
        raise UnsupportedFormatError(
            f"{record_type} node has no {id_field}", record_type=record_type
        )
    try:
        return model(**fields)
    except ValidationError as e:
        raise UnsupportedFormatError(
            f"{record_type} node could not be mapped: {e.errors()[0]['msg']}",
            record_type=record_type,
        ) from e


# ---------------------------------------------------------------------------
# Conversions
# ---------------------------------------------------------------------------


def _text(value: JsonValue) -> str:
    return extract_text(value).strip()


def _count(value: JsonValue) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    # Only text that leads with a number counts; "No views" stays absent.
    text = extract_text(value).strip()
    if not text or not text[0].isdigit():
        return None
    return parse_count(text)


def _duration(value: JsonValue) -> int | None:
    text = extract_text(value)
    seconds = parse_duration(text)
    return seconds or None


def _int(value: JsonValue) -> int | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value
    if isinstance(value, str) and value.strip().isdigit():
        return int(value)
    return None


def _bool(value: JsonValue) -> bool | None:
    return value if isinstance(value, bool) else None


def _str_list(value: JsonValue) -> list[str] | None:
    items = [item for item in as_list(value) if isinstance(item, str)]
    return items or None


def _absolute_url(url: str) -> str:
    return f"https:{url}" if url.startswith("//") else url


def _thumbnails(value: JsonValue) -> list[Thumbnail] | None:
    thumbnails = []
    for item in as_list(value):
        url = dig(item, "url")
        if not isinstance(url, str) or not url:
            continue
        thumbnails.append(
            Thumbnail(
                url=_absolute_url(url),
                width=_int(dig(item, "width")) or 0,
                height=_int(dig(item, "height")) or 0,
            )
        )
    return thumbnails or None


def _single_thumbnail(value: JsonValue) -> list[Thumbnail] | None:
    if isinstance(value, str) and value:
        return [Thumbnail(url=_absolute_url(value))]
    return None


def _overlay_duration(value: JsonValue) -> int | None:
    overlay = find_first(value, "thumbnailOverlayTimeStatusRenderer")
    return _duration(dig(overlay, "text"))


def _handle(value: JsonValue) -> str | None:
    text = extract_text(value).strip().lstrip("/")
    return text if text.startswith("@") else None


def _handle_from_url(value: JsonValue) -> str | None:
    if not isinstance(value, str):
        return None
    return _handle(value.rstrip("/").rsplit("/", 1)[-1])


def _vss_language(value: JsonValue) -> str | None:
    # vssId is ".en" for manual tracks and "a.en" for generated ones.
    if not isinstance(value, str):
        return None
    return value.split(".", 1)[-1] or None


def _date(value: JsonValue) -> _dt.date | None:
    if not isinstance(value, str) or len(value) < 10:
        return None
    try:
        return _dt.date.fromisoformat(value[:10])
    except ValueError:
        return None


def _keyword_string(value: JsonValue) -> list[str] | None:
    if not isinstance(value, str) or not value.strip():
        return None
    try:
        words = shlex.split(value)
    except ValueError:
        words = value.split()
    return words or None


def _browse_id(value: JsonValue) -> str | None:
    browse_id = dig(value, "navigationEndpoint", "browseEndpoint", "browseId")
    if isinstance(browse_id, str) and browse_id.startswith("UC"):
        return browse_id
    return None


def _first_run_browse_id(value: JsonValue) -> str | None:
    for run in as_list(dig(value, "runs")):
        browse_id = _browse_id(run)
        if browse_id:
            return browse_id
    return None


# ---------------------------------------------------------------------------
# Videos
# ---------------------------------------------------------------------------

VIDEO_RENDERER_FIELDS: dict[str, tuple[FieldSource, ...]] = {
    "video_id": (src("videoId"),),
    "title": (
        src("title", convert=_text),
        src("headline", convert=_text),
    ),
    "description": (
        src("detailedMetadataSnippets", 0, "snippetText", convert=_text),
        src("descriptionSnippet", convert=_text),
    ),
    "channel_name": (
        src("ownerText", convert=_text),
        src("longBylineText", convert=_text),
        src("shortBylineText", convert=_text),
    ),
    "channel_id": (
        src("ownerText", convert=_first_run_browse_id),
        src("longBylineText", convert=_first_run_browse_id),
        src("shortBylineText", convert=_first_run_browse_id),
        src(
            "channelThumbnailSupportedRenderers",
            "channelThumbnailWithLinkRenderer",
            convert=_browse_id,
        ),
    ),
    "thumbnails": (src("thumbnail", "thumbnails", convert=_thumbnails),),
    "published_text": (src("publishedTimeText", convert=_text),),
    # Exact counts ("1,234,567 views") beat abbreviated ones ("1.2M views").
    "view_count": (
        src("viewCountText", "simpleText", convert=_count),
        src("viewCountText", convert=_count),
        src("shortViewCountText", convert=_count),
    ),
    "length_seconds": (
        src("lengthSeconds", convert=_int),
        src("lengthText", convert=_duration),
        src("thumbnailOverlays", convert=_overlay_duration),
    ),
}


def _badge_styles(node: JsonDict) -> set[str]:
    styles = set()
    for key in ("badges", "ownerBadges", "thumbnailOverlays"):
        for style in collect(node.get(key), "style"):
            if isinstance(style, str):
                styles.add(style)
    return styles


def map_video_renderer(node: JsonDict) -> VideoSummary:
    """
    Map a list-style video renderer node into a ``VideoSummary``.

    Parameters
    ----------
    node : JsonDict
        The value of a ``videoRenderer``, ``compactVideoRenderer`` or
        ``gridVideoRenderer`` key.

    Returns
    -------
    VideoSummary
        The normalized record.

    Raises
    ------
    UnsupportedFormatError
        If the node carries no valid video ID.
    """
    fields = resolve_fields(node, VIDEO_RENDERER_FIELDS)
    styles = _badge_styles(node)
    fields["is_live"] = bool(
        styles & {"BADGE_STYLE_TYPE_LIVE_NOW", "LIVE"}
    )
    fields["is_upcoming"] = "upcomingEventData" in node or "UPCOMING" in styles
    return _build(VideoSummary, "video_id", fields)


# Paths are rooted at {"player": ..., "initial": ..., "meta": ...}.
VIDEO_DETAILS_FIELDS: dict[str, tuple[FieldSource, ...]] = {
    "video_id": (
        src("player", "videoDetails", "videoId"),
        src("meta", "videoId"),
    ),
    "title": (
        src("player", "videoDetails", "title"),
        src("player", "microformat", "playerMicroformatRenderer", "title", convert=_text),
        src("meta", "title"),
    ),
    "description": (
        src("player", "videoDetails", "shortDescription"),
        src(
            "player",
            "microformat",
            "playerMicroformatRenderer",
            "description",
            convert=_text,
        ),
        src("meta", "description"),
    ),
    "channel_name": (
        src("player", "videoDetails", "author"),
        src("player", "microformat", "playerMicroformatRenderer", "ownerChannelName"),
    ),
    "channel_id": (
        src("player", "videoDetails", "channelId"),
        src("player", "microformat", "playerMicroformatRenderer", "externalChannelId"),
        src("meta", "channelId"),
    ),
    "thumbnails": (
        src("player", "videoDetails", "thumbnail", "thumbnails", convert=_thumbnails),
        src(
            "player",
            "microformat",
            "playerMicroformatRenderer",
            "thumbnail",
            "thumbnails",
            convert=_thumbnails,
        ),
        src("meta", "thumbnail", convert=_single_thumbnail),
    ),
    "view_count": (
        src("player", "videoDetails", "viewCount", convert=_int),
        src("player", "microformat", "playerMicroformatRenderer", "viewCount", convert=_int),
        src("meta", "viewCount", convert=_int),
    ),
    "length_seconds": (
        src("player", "videoDetails", "lengthSeconds", convert=_int),
        src(
            "player",
            "microformat",
            "playerMicroformatRenderer",
            "lengthSeconds",
            convert=_int,
        ),
    ),
    "keywords": (
        src("player", "videoDetails", "keywords", convert=_str_list),
        src("meta", "keywords", convert=_str_list),
    ),
    "category": (
        src("player", "microformat", "playerMicroformatRenderer", "category"),
        src("meta", "genre"),
    ),
    "publish_date": (
        src("player", "microformat", "playerMicroformatRenderer", "publishDate", convert=_date),
        src("player", "microformat", "playerMicroformatRenderer", "uploadDate", convert=_date),
        src("meta", "publishDate", convert=_date),
    ),
    "published_text": (
        src("initial", "videoPrimaryInfoRenderer", "dateText", convert=_text),
    ),
    "is_family_safe": (
        src("player", "microformat", "playerMicroformatRenderer", "isFamilySafe", convert=_bool),
        src("meta", "isFamilyFriendly", convert=_bool),
    ),
    "is_private": (src("player", "videoDetails", "isPrivate", convert=_bool),),
    "is_live": (
        src("player", "videoDetails", "isLive", convert=_bool),
        src(
            "player",
            "microformat",
            "playerMicroformatRenderer",
            "liveBroadcastDetails",
            "isLiveNow",
            convert=_bool,
        ),
    ),
    "is_upcoming": (src("player", "videoDetails", "isUpcoming", convert=_bool),),
}


def extract_like_count(initial: JsonValue) -> int | None:
    """
    Find the like count in watch-page initial data.

    The count only appears inside accessibility labels of the like button,
    e.g. ``"1,579 likes"`` or ``"like this video along with 1,579 other
    people"``.
    """
    for key in ("label", "accessibilityText", "title"):
        for label in collect(initial, key):
            if not isinstance(label, str):
                continue
            for pattern in _LIKE_LABEL_RES:
                match = pattern.search(label.strip())
                if match:
                    return parse_count(match.group(1))
    return None


def map_video_details(
    player: JsonValue,
    initial: JsonValue = None,
    meta: JsonDict | None = None,
) -> VideoDetails:
    """
    Map watch-page data into ``VideoDetails``.

    Parameters
    ----------
    player : JsonValue
        The player configuration (``ytInitialPlayerResponse`` or the
        ``player`` endpoint response).
    initial : JsonValue, optional
        The watch page initial data or ``next`` endpoint response, which
        carries the like count and relative publish date.
    meta : JsonDict | None, optional
        Output of ``extract_meta_tags`` for the same page.

    Returns
    -------
    VideoDetails
        The normalized record.

    Raises
    ------
    UnsupportedFormatError
        If no source carries a valid video ID.
    """
    primary_info = find_first(initial, "videoPrimaryInfoRenderer") if initial else None
    root: JsonDict = {
        "player": player,
        "initial": {"videoPrimaryInfoRenderer": primary_info},
        "meta": meta or {},
    }
    fields = resolve_fields(root, VIDEO_DETAILS_FIELDS)
    if initial is not None:
        likes = extract_like_count(initial)
        if likes is not None:
            fields["like_count"] = likes
    return _build(VideoDetails, "video_id", fields)


# ---------------------------------------------------------------------------
# Channels
# ---------------------------------------------------------------------------

CHANNEL_RENDERER_FIELDS: dict[str, tuple[FieldSource, ...]] = {
    "channel_id": (
        src("channelId"),
        src("navigationEndpoint", "browseEndpoint", "browseId"),
    ),
    "title": (src("title", convert=_text),),
    "handle": (
        src("subscriberCountText", convert=_handle),
        src("navigationEndpoint", "browseEndpoint", "canonicalBaseUrl", convert=_handle),
    ),
    "description": (src("descriptionSnippet", convert=_text),),
    "thumbnails": (src("thumbnail", "thumbnails", convert=_thumbnails),),
    "subscriber_count": (src("subscriberCountText", convert=_count),),
    "video_count": (src("videoCountText", convert=_count),),
}


def map_channel_renderer(node: JsonDict) -> SearchResultChannel:
    """
    Map a ``channelRenderer`` node into a ``SearchResultChannel``.

    Newer result templates put the ``@handle`` in ``subscriberCountText``
    and move the subscriber count to ``videoCountText``; in that case the
    video count is not available and stays 0.

    Raises
    ------
    UnsupportedFormatError
        If the node carries no valid channel ID.
    """
    fields = resolve_fields(node, CHANNEL_RENDERER_FIELDS)
    if _handle(node.get("subscriberCountText")):
        fields.pop("video_count", None)
        subscribers = _count(node.get("videoCountText"))
        if subscribers is None:
            fields.pop("subscriber_count", None)
        else:
            fields["subscriber_count"] = subscribers
    return _build(SearchResultChannel, "channel_id", fields)


def _header_parts(header: JsonValue) -> JsonDict:
    """Classify the metadata rows of a ``pageHeaderViewModel``."""
    parts: JsonDict = {}
    for part_list in collect(header, "metadataParts"):
        for part in as_list(part_list):
            text = _text(dig(part, "text"))
            if not text:
                continue
            lowered = text.lower()
            if text.startswith("@"):
                parts.setdefault("handle", text)
            elif "subscriber" in lowered:
                parts.setdefault("subscribers", text)
            elif "video" in lowered:
                parts.setdefault("videos", text)
    return parts


# Paths are rooted at {"metadata": ..., "c4": ..., "page": ..., "parts": ...}.
CHANNEL_HEADER_FIELDS: dict[str, tuple[FieldSource, ...]] = {
    "channel_id": (
        src("metadata", "externalId"),
        src("c4", "channelId"),
    ),
    "title": (
        src("metadata", "title"),
        src("c4", "title"),
        src("page", "title", "dynamicTextViewModel", "text", convert=_text),
        src("page", "pageTitle"),
    ),
    "handle": (
        src("c4", "channelHandleText", convert=_handle),
        src("parts", "handle", convert=_handle),
        src("metadata", "vanityChannelUrl", convert=_handle_from_url),
    ),
    "description": (src("metadata", "description"),),
    "thumbnails": (
        src("metadata", "avatar", "thumbnails", convert=_thumbnails),
        src("c4", "avatar", "thumbnails", convert=_thumbnails),
    ),
    "subscriber_count": (
        src("c4", "subscriberCountText", convert=_count),
        src("parts", "subscribers", convert=_count),
    ),
    "video_count": (
        src("c4", "videosCountText", convert=_count),
        src("parts", "videos", convert=_count),
    ),
    "keywords": (src("metadata", "keywords", convert=_keyword_string),),
    "vanity_url": (src("metadata", "vanityChannelUrl"),),
    "is_family_safe": (src("metadata", "isFamilySafe", convert=_bool),),
    "available_countries": (
        src("metadata", "availableCountryCodes", convert=_str_list),
    ),
}


def map_channel_header(initial: JsonValue) -> ChannelSummary:
    """
    Map channel page initial data (or a ``browse`` response) into a
    ``ChannelSummary``.

    Reads ``channelMetadataRenderer`` plus whichever header template the
    page uses: the older ``c4TabbedHeaderRenderer`` or the newer
    ``pageHeaderViewModel``.

    Raises
    ------
    UnsupportedFormatError
        If no source carries a valid channel ID.
    """
    page_header = find_first(initial, "pageHeaderViewModel")
    root: JsonDict = {
        "metadata": find_first(initial, "channelMetadataRenderer"),
        "c4": find_first(initial, "c4TabbedHeaderRenderer"),
        "page": page_header,
        "parts": _header_parts(page_header),
    }
    fields = resolve_fields(root, CHANNEL_HEADER_FIELDS)
    return _build(ChannelSummary, "channel_id", fields)


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------

COMMENT_RENDERER_FIELDS: dict[str, tuple[FieldSource, ...]] = {
    "comment_id": (src("commentId"),),
    "author": (src("authorText", convert=_text),),
    "author_channel_id": (src("authorEndpoint", "browseEndpoint", "browseId"),),
    "content": (src("contentText", convert=_text),),
    "published_text": (src("publishedTimeText", convert=_text),),
    "like_count": (
        src("voteCount", "accessibility", "accessibilityData", "label", convert=_count),
        src("voteCount", convert=_count),
        src("likeCount", convert=_int),
    ),
    "reply_count": (src("replyCount", convert=_int),),
    "author_is_channel_owner": (src("authorIsChannelOwner", convert=_bool),),
    "is_hearted": (
        src(
            "actionButtons",
            "commentActionButtonsRenderer",
            "creatorHeart",
            "creatorHeartRenderer",
            "isHearted",
            convert=_bool,
        ),
    ),
}

COMMENT_ENTITY_FIELDS: dict[str, tuple[FieldSource, ...]] = {
    "comment_id": (src("properties", "commentId"),),
    "author": (src("author", "displayName"),),
    "author_channel_id": (src("author", "channelId"),),
    "content": (src("properties", "content", "content"),),
    "published_text": (src("properties", "publishedTime"),),
    "like_count": (
        src("toolbar", "likeCountA11y", convert=_count),
        src("toolbar", "likeCountNotliked", convert=_count),
    ),
    "reply_count": (src("toolbar", "replyCount", convert=_count),),
    "author_is_channel_owner": (src("author", "isCreator", convert=_bool),),
    "is_hearted": (
        src(
            "toolbar",
            "heartState",
            convert=lambda v: v == "TOOLBAR_HEART_STATE_HEARTED",
        ),
    ),
}


def map_comment(node: JsonDict) -> CommentRecord:
    """
    Map a comment node into a ``CommentRecord``.

    Accepts both the ``commentRenderer`` shape and the
    ``commentEntityPayload`` shape used by entity-batch responses.

    Raises
    ------
    UnsupportedFormatError
        If the node carries no comment ID.
    """
    if isinstance(node.get("properties"), dict):
        fields = resolve_fields(node, COMMENT_ENTITY_FIELDS)
    else:
        fields = resolve_fields(node, COMMENT_RENDERER_FIELDS)
        fields["is_pinned"] = "pinnedCommentBadge" in node
    return _build(CommentRecord, "comment_id", fields)


# ---------------------------------------------------------------------------
# Captions
# ---------------------------------------------------------------------------

CAPTION_TRACK_FIELDS: dict[str, tuple[FieldSource, ...]] = {
    "base_url": (src("baseUrl"),),
    "language_code": (src("languageCode"), src("vssId", convert=_vss_language)),
    "name": (src("name", convert=_text),),
    "kind": (src("kind"),),
    "is_translatable": (src("isTranslatable", convert=_bool),),
}


def map_caption_tracks(player: JsonValue) -> list[CaptionTrack]:
    """
    List the caption tracks advertised by a player configuration.

    Tracks without a URL or language code are skipped. An empty list means
    the video has no captions.
    """
    tracks: list[CaptionTrack] = []
    raw_tracks = dig(
        player, "captions", "playerCaptionsTracklistRenderer", "captionTracks"
    )
    for raw in as_list(raw_tracks):
        fields = resolve_fields(raw, CAPTION_TRACK_FIELDS)
        if not fields.get("base_url") or not fields.get("language_code"):
            logger.debug("Skipping caption track without URL or language")
            continue
        fields["base_url"] = _absolute_url(str(fields["base_url"]))
        tracks.append(CaptionTrack(**fields))
    return tracks
