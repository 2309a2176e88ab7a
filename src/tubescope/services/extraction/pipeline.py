"""
Extraction pipeline: the entry point for every public operation.

Each operation declares an ordered list of ``Strategy`` stages. The primary
stage calls the internal structured endpoint; the fallback stage fetches the
public page and reads its embedded data. ``run_strategies`` evaluates the
stages in order and moves to the next one when a stage fails with
``NetworkError``, ``ParseError`` or ``NotFoundError``, or yields nothing
usable. The last stage's failure is terminal.

``YouTubeExtractor`` wraps every operation so that callers always receive
an ``OperationResult`` envelope and never an exception.

Classes
-------
Strategy
    A named retrieval stage.
StageOutcome
    The items or the error produced by one stage.
YouTubeExtractor
    Public async operations.

Functions
---------
run_strategies
    Evaluate stages in order with the fallback policy.
select_caption_track
    Choose the caption track for a requested language.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Awaitable, Callable, Sequence
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from tubescope.config.settings import Settings
from tubescope.config.settings import settings as default_settings
from tubescope.exceptions import (
    NetworkError,
    NotFoundError,
    ParseError,
    TubescopeError,
    UnsupportedFormatError,
)
from tubescope.models.json_value import JsonDict, JsonValue, as_list, as_str, dig
from tubescope.models.records import (
    CaptionTrack,
    ChannelSummary,
    CommentRecord,
    OperationResult,
    SearchResultChannel,
    VideoDetails,
    VideoSummary,
)
from tubescope.models.youtube_types import is_channel_id, is_video_id
from tubescope.services.extraction.embedded_data import (
    INITIAL_DATA,
    PLAYER_RESPONSE,
    extract_embedded_blobs,
    extract_embedded_json,
)
from tubescope.services.extraction.fetcher import Fetcher
from tubescope.services.extraction.identifiers import (
    ChannelRef,
    extract_channel_ref,
    extract_video_id,
)
from tubescope.services.extraction.mappers import (
    map_caption_tracks,
    map_channel_header,
    map_channel_renderer,
    map_comment,
    map_video_details,
    map_video_renderer,
)
from tubescope.services.extraction.meta_tags import extract_meta_tags
from tubescope.services.extraction.transcript import decode_transcript
from tubescope.services.extraction.tree import (
    collect_any,
    collect_dicts,
    find_first,
)

logger = logging.getLogger(__name__)

# Search filters ("sp" query parameter / "params" request field).
VIDEO_SEARCH_FILTER = "EgIQAQ=="
CHANNEL_SEARCH_FILTER = "EgIQAg=="

# Browse parameters selecting a channel's "Videos" tab.
CHANNEL_VIDEOS_TAB = "EgZ2aWRlb3PyBgQKAjoA"
TRENDING_BROWSE_ID = "FEtrending"

VIDEO_RENDERER_KEYS = ("videoRenderer", "gridVideoRenderer")
RELATED_RENDERER_KEYS = ("compactVideoRenderer", "videoRenderer")
CHANNEL_RENDERER_KEYS = ("channelRenderer",)
COMMENT_KEYS = ("commentRenderer", "commentEntityPayload")
PAGE_CONTINUATION_KEYS = ("reloadContinuationItemsCommand", "appendContinuationItemsAction")

NO_TRANSCRIPTS = "No transcripts available for this video"

_REGION_RE = re.compile(r"^[A-Za-z]{2}$")

FALLBACK_ERRORS: tuple[type[TubescopeError], ...] = (
    NetworkError,
    ParseError,
    NotFoundError,
)


# ---------------------------------------------------------------------------
# Strategy evaluation
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Strategy:
    """
    One retrieval stage.

    Attributes
    ----------
    name : str
        Label used in logs (e.g. ``"search endpoint"``).
    run : Callable[[], Awaitable[list[Any]]]
        Coroutine factory returning the stage's usable items.
    """

    name: str
    run: Callable[[], Awaitable[list[Any]]]


@dataclass(frozen=True)
class StageOutcome:
    """Items produced by a stage, or the error it failed with."""

    strategy: str
    items: list[Any] = field(default_factory=list)
    error: TubescopeError | None = None

    @property
    def succeeded(self) -> bool:
        """True when the stage produced at least one item without error."""
        return self.error is None and bool(self.items)


async def run_stage(strategy: Strategy) -> StageOutcome:
    """Run one stage, capturing fallback-eligible errors in the outcome."""
    logger.debug("Running strategy: %s", strategy.name)
    try:
        items = await strategy.run()
    except FALLBACK_ERRORS as e:
        return StageOutcome(strategy=strategy.name, error=e)
    return StageOutcome(strategy=strategy.name, items=list(items))


async def run_strategies(
    strategies: Sequence[Strategy],
    empty_message: str = "No matching records found",
    resource: str | None = None,
) -> list[Any]:
    """
    Evaluate ``strategies`` in order and return the first usable items.

    Parameters
    ----------
    strategies : Sequence[Strategy]
        Stages in priority order.
    empty_message : str, optional
        Message of the ``NotFoundError`` raised when the last stage yields
        nothing.
    resource : str | None, optional
        Record kind reported on that ``NotFoundError``.

    Returns
    -------
    list[Any]
        Items of the first stage that produced any.

    Raises
    ------
    NetworkError, ParseError, NotFoundError
        The last stage's error, unchanged.
    NotFoundError
        If the last stage succeeded but yielded nothing.
    """
    if not strategies:
        raise ValueError("At least one strategy is required")

    outcome: StageOutcome | None = None
    for index, strategy in enumerate(strategies):
        outcome = await run_stage(strategy)
        if outcome.succeeded:
            return outcome.items
        if index < len(strategies) - 1:
            reason = outcome.error.message if outcome.error else "no usable records"
            logger.warning(
                "Strategy '%s' failed (%s); falling back to '%s'",
                strategy.name,
                reason,
                strategies[index + 1].name,
            )

    assert outcome is not None
    if outcome.error is not None:
        raise outcome.error
    raise NotFoundError(empty_message, resource=resource)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _map_nodes(nodes: list[JsonDict], mapper: Callable[[JsonDict], Any]) -> list[Any]:
    """Map nodes, skipping those whose identifier cannot be recovered."""
    records = []
    for node in nodes:
        try:
            records.append(mapper(node))
        except UnsupportedFormatError as e:
            logger.debug("Skipping node: %s", e.message)
    return records


def _unique(records: list[Any], id_attr: str) -> list[Any]:
    """Drop records whose identifier was already seen, keeping order."""
    seen: set[str] = set()
    unique = []
    for record in records:
        key = getattr(record, id_attr)
        if key in seen:
            continue
        seen.add(key)
        unique.append(record)
    return unique


def _clamp(requested: int | None, default: int, ceiling: int) -> int:
    if requested is None:
        requested = default
    return max(1, min(int(requested), ceiling))


def _require_player(player: JsonValue, video_id: str) -> None:
    """Raise NotFoundError when the player response carries no video."""
    if isinstance(dig(player, "videoDetails"), dict):
        return
    reason = as_str(dig(player, "playabilityStatus", "reason"))
    raise NotFoundError(reason or f"Video not found: {video_id}", resource="video")


def _comment_continuation(data: JsonValue) -> str | None:
    """Token that loads the first page of comments for a watch response."""
    for section in collect_dicts(data, "itemSectionRenderer"):
        if section.get("sectionIdentifier") == "comment-item-section":
            token = find_first(section, "token")
            if isinstance(token, str):
                return token
    for panel in collect_dicts(data, "engagementPanelSectionListRenderer"):
        if panel.get("panelIdentifier") == "engagement-panel-comments-section":
            token = find_first(panel, "token")
            if isinstance(token, str):
                return token
    return None


def _next_page_token(data: JsonValue) -> str | None:
    """
    Token for the next page of top-level comments, if any.

    Only ``continuationItemRenderer`` entries listed directly in a reload or
    append command count; those nested in a comment thread load replies.
    """
    token: JsonValue = None
    for command in collect_any(data, PAGE_CONTINUATION_KEYS):
        for item in as_list(command.get("continuationItems")):
            renderer = dig(item, "continuationItemRenderer")
            if isinstance(renderer, dict):
                token = find_first(renderer, "token")
    return token if isinstance(token, str) else None


def _with_owner(videos: list[VideoSummary], data: JsonValue) -> list[VideoSummary]:
    """Fill channel name and ID from channel metadata where the node lacks them."""
    metadata = find_first(data, "channelMetadataRenderer")
    title = as_str(dig(metadata, "title"))
    channel_id = as_str(dig(metadata, "externalId")) or None
    if not title and not channel_id:
        return videos
    filled = []
    for video in videos:
        update: dict[str, Any] = {}
        if not video.channel_name and title:
            update["channel_name"] = title
        if not video.channel_id and channel_id:
            update["channel_id"] = channel_id
        filled.append(video.model_copy(update=update) if update else video)
    return filled


def _timedtext_url(base_url: str) -> str:
    """Drop any ``fmt`` override so the feed is served as plain timed text."""
    parts = urlsplit(base_url)
    query = [(k, v) for k, v in parse_qsl(parts.query, keep_blank_values=True) if k != "fmt"]
    return urlunsplit(parts._replace(query=urlencode(query)))


def select_caption_track(
    tracks: list[CaptionTrack], language: str | None = None
) -> CaptionTrack:
    """
    Choose the caption track for ``language``.

    Preference order: exact language code match, then prefix match
    (``"en"`` matches ``"en-GB"``), each preferring manual tracks over
    generated ones; then the first manual track; then the first track.

    Parameters
    ----------
    tracks : list[CaptionTrack]
        Non-empty list of available tracks.
    language : str | None, optional
        Requested language code (default: ``"en"``).

    Returns
    -------
    CaptionTrack
        The selected track.
    """
    wanted = (language or "en").strip().lower()
    ordered = sorted(tracks, key=lambda t: t.is_generated)

    for track in ordered:
        if track.language_code.lower() == wanted:
            return track
    for track in ordered:
        code = track.language_code.lower()
        if code.startswith(wanted) or wanted.startswith(code.split("-")[0]):
            return track
    return ordered[0]


# ---------------------------------------------------------------------------
# Public operations
# ---------------------------------------------------------------------------


class YouTubeExtractor:
    """
    Structured-data extraction operations.

    Every method returns an ``OperationResult``. Failures of any kind are
    reported in the envelope; nothing is raised to the caller.

    Parameters
    ----------
    fetcher : Fetcher | None, optional
        Fetcher used for all network I/O (default: a new ``Fetcher``).
    settings : Settings | None, optional
        Settings for limits and defaults (default: the global settings).

    Examples
    --------
    >>> extractor = YouTubeExtractor()
    >>> result = await extractor.search_videos("lofi hip hop", max_results=5)
    >>> result.to_dict()["videos"][0]["videoId"]
    'jfKfPfyJRdk'
    """

    def __init__(
        self,
        fetcher: Fetcher | None = None,
        settings: Settings | None = None,
    ) -> None:
        self._settings = settings or default_settings
        self._fetcher = fetcher or Fetcher(self._settings)

    async def _guarded(
        self,
        action: str,
        operation: Callable[[], Awaitable[OperationResult]],
    ) -> OperationResult:
        """Run ``operation``, converting every failure to an envelope."""
        try:
            return await operation()
        except TubescopeError as e:
            logger.warning("Could not %s: %s", action, e.message)
            return OperationResult.fail(e.message)
        except Exception as e:
            logger.exception("Unexpected error while trying to %s", action)
            return OperationResult.fail(f"Failed to {action}: {e}")

    def _video_id_or_error(self, video: str | None) -> tuple[str | None, str | None]:
        """Reduce input to a video ID, or return the failure message."""
        if video is None or not video.strip():
            return None, "Video ID or URL is required"
        video_id = extract_video_id(video)
        if video_id is None:
            return None, f"Could not extract a video ID from: {video.strip()}"
        if not is_video_id(video_id):
            return None, f"Invalid video ID: {video_id}"
        return video_id, None

    def _channel_ref_or_error(
        self, channel: str | None
    ) -> tuple[ChannelRef | None, str | None]:
        """Reduce input to a channel reference, or return the failure message."""
        if channel is None or not channel.strip():
            return None, "Channel ID or URL is required"
        ref = extract_channel_ref(channel)
        if ref is None:
            return None, f"Could not extract a channel from: {channel.strip()}"
        return ref, None

    # -- fetch helpers ------------------------------------------------------

    async def _page_blob(
        self,
        path: str,
        params: dict[str, str] | None = None,
        name: str = INITIAL_DATA,
    ) -> JsonValue:
        """Fetch a public page and return one embedded blob."""
        html = await self._fetcher.get_text(path, params=params)
        blob = extract_embedded_json(html, name)
        if blob is None:
            raise ParseError(f"{name} not found on page {path}", blob_name=name)
        return blob

    async def _watch_page(self, video_id: str) -> tuple[str, dict[str, JsonValue]]:
        """Fetch a watch page and return its markup and embedded blobs."""
        html = await self._fetcher.get_text("/watch", params={"v": video_id})
        blobs = extract_embedded_blobs(html, (PLAYER_RESPONSE, INITIAL_DATA))
        return html, blobs

    async def _resolve_browse_id(self, ref: ChannelRef) -> str:
        """Resolve a handle or legacy name to a ``UC...`` channel ID."""
        if ref.kind == "id":
            return ref.value
        data = await self._fetcher.post_innertube(
            "navigation/resolve_url",
            {"url": f"{self._settings.base_url}{ref.page_path}"},
        )
        browse_id = find_first(data, "browseId")
        if not isinstance(browse_id, str) or not is_channel_id(browse_id):
            raise NotFoundError(f"Channel not found: {ref.value}", resource="channel")
        return browse_id

    # -- search -------------------------------------------------------------

    async def search_videos(
        self, query: str | None, max_results: int | None = None
    ) -> OperationResult:
        """
        Search for videos.

        Parameters
        ----------
        query : str | None
            Search terms.
        max_results : int | None, optional
            Maximum number of videos, clamped to ``[1, max_results_ceiling]``
            (default: ``default_max_results``).

        Returns
        -------
        OperationResult
            ``query``, ``results`` (count) and ``videos`` on success.
        """
        if query is None or not query.strip():
            return OperationResult.fail("Query is required")
        terms = query.strip()
        limit = _clamp(
            max_results,
            self._settings.default_max_results,
            self._settings.max_results_ceiling,
        )

        async def from_endpoint() -> list[VideoSummary]:
            data = await self._fetcher.post_innertube(
                "search", {"query": terms, "params": VIDEO_SEARCH_FILTER}
            )
            return _map_nodes(collect_any(data, VIDEO_RENDERER_KEYS), map_video_renderer)

        async def from_page() -> list[VideoSummary]:
            data = await self._page_blob(
                "/results", params={"search_query": terms, "sp": VIDEO_SEARCH_FILTER}
            )
            return _map_nodes(collect_any(data, VIDEO_RENDERER_KEYS), map_video_renderer)

        async def operation() -> OperationResult:
            videos = await run_strategies(
                [
                    Strategy("search endpoint", from_endpoint),
                    Strategy("results page", from_page),
                ],
                empty_message=f"No videos found for: {terms}",
                resource="videoRenderer",
            )
            videos = _unique(videos, "video_id")[:limit]
            return OperationResult.ok(query=terms, results=len(videos), videos=videos)

        return await self._guarded("search videos", operation)

    async def search_channels(
        self, query: str | None, max_results: int | None = None
    ) -> OperationResult:
        """Search for channels. Mirrors ``search_videos`` with a channel filter."""
        if query is None or not query.strip():
            return OperationResult.fail("Query is required")
        terms = query.strip()
        limit = _clamp(
            max_results,
            self._settings.default_max_results,
            self._settings.max_results_ceiling,
        )

        async def from_endpoint() -> list[SearchResultChannel]:
            data = await self._fetcher.post_innertube(
                "search", {"query": terms, "params": CHANNEL_SEARCH_FILTER}
            )
            return _map_nodes(collect_any(data, CHANNEL_RENDERER_KEYS), map_channel_renderer)

        async def from_page() -> list[SearchResultChannel]:
            data = await self._page_blob(
                "/results", params={"search_query": terms, "sp": CHANNEL_SEARCH_FILTER}
            )
            return _map_nodes(collect_any(data, CHANNEL_RENDERER_KEYS), map_channel_renderer)

        async def operation() -> OperationResult:
            channels = await run_strategies(
                [
                    Strategy("search endpoint", from_endpoint),
                    Strategy("results page", from_page),
                ],
                empty_message=f"No channels found for: {terms}",
                resource="channelRenderer",
            )
            channels = _unique(channels, "channel_id")[:limit]
            return OperationResult.ok(
                query=terms, results=len(channels), channels=channels
            )

        return await self._guarded("search channels", operation)

    # -- videos -------------------------------------------------------------

    async def _fetch_video_details(self, video_id: str) -> VideoDetails:
        async def from_endpoint() -> list[VideoDetails]:
            player = await self._fetcher.post_innertube("player", {"videoId": video_id})
            _require_player(player, video_id)
            initial: JsonValue = None
            try:
                initial = await self._fetcher.post_innertube("next", {"videoId": video_id})
            except (NetworkError, ParseError) as e:
                logger.warning(
                    "Engagement data unavailable for %s: %s", video_id, e.message
                )
            return _map_nodes(
                [{"player": player, "initial": initial}],
                lambda node: map_video_details(node["player"], node["initial"]),
            )

        async def from_page() -> list[VideoDetails]:
            html, blobs = await self._watch_page(video_id)
            meta = extract_meta_tags(html)
            player = blobs.get(PLAYER_RESPONSE)
            if player is None and not meta:
                raise ParseError(
                    f"No video metadata found on watch page for {video_id}",
                    blob_name=PLAYER_RESPONSE,
                )
            if player is not None:
                _require_player(player, video_id)
            return _map_nodes(
                [{"player": player, "initial": blobs.get(INITIAL_DATA), "meta": meta}],
                lambda node: map_video_details(
                    node["player"], node["initial"], node["meta"]
                ),
            )

        items = await run_strategies(
            [
                Strategy("player endpoint", from_endpoint),
                Strategy("watch page", from_page),
            ],
            empty_message=f"Video not found: {video_id}",
            resource="videoDetails",
        )
        return items[0]

    async def get_video_details(self, video: str | None) -> OperationResult:
        """
        Get full metadata for one video.

        Parameters
        ----------
        video : str | None
            Video ID or any supported video URL.

        Returns
        -------
        OperationResult
            ``video`` (``VideoDetails``) on success.
        """
        video_id, error = self._video_id_or_error(video)
        if error:
            return OperationResult.fail(error)
        assert video_id is not None

        async def operation() -> OperationResult:
            details = await self._fetch_video_details(video_id)
            return OperationResult.ok(video=details)

        return await self._guarded("get video details", operation)

    async def get_video_tags(self, video: str | None) -> OperationResult:
        """Get the keyword tags of one video."""
        video_id, error = self._video_id_or_error(video)
        if error:
            return OperationResult.fail(error)
        assert video_id is not None

        async def operation() -> OperationResult:
            details = await self._fetch_video_details(video_id)
            return OperationResult.ok(
                video_id=details.video_id,
                title=details.title,
                tags=list(details.keywords),
                tag_count=len(details.keywords),
            )

        return await self._guarded("get video tags", operation)

    async def get_related_videos(
        self, video: str | None, max_results: int | None = None
    ) -> OperationResult:
        """Get videos listed as related to one video."""
        video_id, error = self._video_id_or_error(video)
        if error:
            return OperationResult.fail(error)
        assert video_id is not None
        limit = _clamp(
            max_results,
            self._settings.default_max_results,
            self._settings.max_results_ceiling,
        )

        def related(data: JsonValue) -> list[VideoSummary]:
            videos = _map_nodes(collect_any(data, RELATED_RENDERER_KEYS), map_video_renderer)
            return [v for v in videos if v.video_id != video_id]

        async def from_endpoint() -> list[VideoSummary]:
            data = await self._fetcher.post_innertube("next", {"videoId": video_id})
            return related(data)

        async def from_page() -> list[VideoSummary]:
            data = await self._page_blob("/watch", params={"v": video_id})
            return related(data)

        async def operation() -> OperationResult:
            videos = await run_strategies(
                [
                    Strategy("next endpoint", from_endpoint),
                    Strategy("watch page", from_page),
                ],
                empty_message=f"No related videos found for: {video_id}",
                resource="compactVideoRenderer",
            )
            videos = _unique(videos, "video_id")[:limit]
            return OperationResult.ok(
                video_id=video_id, results=len(videos), videos=videos
            )

        return await self._guarded("get related videos", operation)

    async def get_trending_videos(
        self, max_results: int | None = None, region: str | None = None
    ) -> OperationResult:
        """Get trending videos for a region (default: the configured ``gl``)."""
        region_code = (region or self._settings.gl).strip()
        if not _REGION_RE.match(region_code):
            return OperationResult.fail("Region must be a two-letter country code")
        region_code = region_code.upper()
        limit = _clamp(
            max_results,
            self._settings.default_max_results,
            self._settings.max_results_ceiling,
        )

        async def from_endpoint() -> list[VideoSummary]:
            data = await self._fetcher.post_innertube(
                "browse", {"browseId": TRENDING_BROWSE_ID}, region=region_code
            )
            return _map_nodes(collect_any(data, VIDEO_RENDERER_KEYS), map_video_renderer)

        async def from_page() -> list[VideoSummary]:
            data = await self._page_blob("/feed/trending", params={"gl": region_code})
            return _map_nodes(collect_any(data, VIDEO_RENDERER_KEYS), map_video_renderer)

        async def operation() -> OperationResult:
            videos = await run_strategies(
                [
                    Strategy("browse endpoint", from_endpoint),
                    Strategy("trending page", from_page),
                ],
                empty_message=f"No trending videos found for region {region_code}",
                resource="videoRenderer",
            )
            videos = _unique(videos, "video_id")[:limit]
            return OperationResult.ok(
                region=region_code, results=len(videos), videos=videos
            )

        return await self._guarded("get trending videos", operation)

    # -- channels -----------------------------------------------------------

    async def get_channel_info(self, channel: str | None) -> OperationResult:
        """
        Get channel-page metadata.

        Parameters
        ----------
        channel : str | None
            ``UC...`` ID, ``@handle`` or any supported channel URL.

        Returns
        -------
        OperationResult
            ``channel`` (``ChannelSummary``) on success.
        """
        ref, error = self._channel_ref_or_error(channel)
        if error:
            return OperationResult.fail(error)
        assert ref is not None

        async def from_endpoint() -> list[ChannelSummary]:
            browse_id = await self._resolve_browse_id(ref)
            data = await self._fetcher.post_innertube("browse", {"browseId": browse_id})
            return _map_nodes([data], map_channel_header)

        async def from_page() -> list[ChannelSummary]:
            data = await self._page_blob(ref.page_path)
            return _map_nodes([data], map_channel_header)

        async def operation() -> OperationResult:
            items = await run_strategies(
                [
                    Strategy("browse endpoint", from_endpoint),
                    Strategy("channel page", from_page),
                ],
                empty_message=f"Channel not found: {ref.value}",
                resource="channelMetadataRenderer",
            )
            return OperationResult.ok(channel=items[0])

        return await self._guarded("get channel info", operation)

    async def get_channel_videos(
        self, channel: str | None, max_results: int | None = None
    ) -> OperationResult:
        """Get the latest uploads listed on a channel's videos tab."""
        ref, error = self._channel_ref_or_error(channel)
        if error:
            return OperationResult.fail(error)
        assert ref is not None
        limit = _clamp(
            max_results,
            self._settings.default_max_results,
            self._settings.max_results_ceiling,
        )

        def uploads(data: JsonValue) -> list[VideoSummary]:
            videos = _map_nodes(collect_any(data, VIDEO_RENDERER_KEYS), map_video_renderer)
            return _with_owner(videos, data)

        async def from_endpoint() -> list[VideoSummary]:
            browse_id = await self._resolve_browse_id(ref)
            data = await self._fetcher.post_innertube(
                "browse", {"browseId": browse_id, "params": CHANNEL_VIDEOS_TAB}
            )
            return uploads(data)

        async def from_page() -> list[VideoSummary]:
            data = await self._page_blob(f"{ref.page_path}/videos")
            return uploads(data)

        async def operation() -> OperationResult:
            videos = await run_strategies(
                [
                    Strategy("browse endpoint", from_endpoint),
                    Strategy("channel videos page", from_page),
                ],
                empty_message=f"No videos found for channel: {ref.value}",
                resource="videoRenderer",
            )
            videos = _unique(videos, "video_id")[:limit]
            channel_id = next(
                (v.channel_id for v in videos if v.channel_id), ref.value
            )
            return OperationResult.ok(
                channel_id=channel_id, results=len(videos), videos=videos
            )

        return await self._guarded("get channel videos", operation)

    # -- comments -----------------------------------------------------------

    async def get_video_comments(
        self, video: str | None, max_comments: int | None = None
    ) -> OperationResult:
        """
        Get the first page of top-level comments on a video.

        The comments feed is loaded with a continuation token found in the
        watch response; the token is read from the ``next`` endpoint first
        and from the watch page as fallback.

        Returns
        -------
        OperationResult
            ``video_id``, ``results``, ``comments`` and ``continuation`` (the
            token for the following page, or None) on success.
        """
        video_id, error = self._video_id_or_error(video)
        if error:
            return OperationResult.fail(error)
        assert video_id is not None
        limit = _clamp(
            max_comments,
            self._settings.default_max_comments,
            self._settings.max_comments_ceiling,
        )

        async def load_comments(watch_data: JsonValue) -> list[JsonValue]:
            token = _comment_continuation(watch_data)
            if token is None:
                raise NotFoundError(
                    "Comments are disabled or unavailable for this video",
                    resource="comments",
                )
            data = await self._fetcher.post_innertube("next", {"continuation": token})
            return [data] if collect_any(data, COMMENT_KEYS) else []

        async def from_endpoint() -> list[JsonValue]:
            watch_data = await self._fetcher.post_innertube("next", {"videoId": video_id})
            return await load_comments(watch_data)

        async def from_page() -> list[JsonValue]:
            watch_data = await self._page_blob("/watch", params={"v": video_id})
            return await load_comments(watch_data)

        async def operation() -> OperationResult:
            pages = await run_strategies(
                [
                    Strategy("next endpoint", from_endpoint),
                    Strategy("watch page", from_page),
                ],
                empty_message=f"No comments found for: {video_id}",
                resource="commentRenderer",
            )
            data = pages[0]
            comments: list[CommentRecord] = _map_nodes(
                collect_any(data, COMMENT_KEYS), map_comment
            )
            comments = _unique(comments, "comment_id")[:limit]
            return OperationResult.ok(
                video_id=video_id,
                results=len(comments),
                comments=comments,
                continuation=_next_page_token(data),
            )

        return await self._guarded("get video comments", operation)

    # -- transcripts --------------------------------------------------------

    async def get_video_transcript(
        self, video: str | None, language: str | None = None
    ) -> OperationResult:
        """
        Get the timed transcript of a video.

        The caption track list comes from the watch page's player
        configuration, or from the ``player`` endpoint when the page cannot
        be read. An empty track list is reported as
        ``"No transcripts available for this video"`` without further
        requests.

        Parameters
        ----------
        video : str | None
            Video ID or any supported video URL.
        language : str | None, optional
            Preferred language code (default: ``"en"``).

        Returns
        -------
        OperationResult
            ``video_id``, ``language``, ``is_generated``,
            ``available_languages``, ``segment_count``, ``segments`` and
            ``text`` on success.
        """
        video_id, error = self._video_id_or_error(video)
        if error:
            return OperationResult.fail(error)
        assert video_id is not None

        async def from_page() -> list[JsonValue]:
            _, blobs = await self._watch_page(video_id)
            player = blobs.get(PLAYER_RESPONSE)
            if player is None:
                raise ParseError(
                    f"{PLAYER_RESPONSE} not found on watch page for {video_id}",
                    blob_name=PLAYER_RESPONSE,
                )
            return [player]

        async def from_endpoint() -> list[JsonValue]:
            player = await self._fetcher.post_innertube("player", {"videoId": video_id})
            return [player]

        async def operation() -> OperationResult:
            players = await run_strategies(
                [
                    Strategy("watch page", from_page),
                    Strategy("player endpoint", from_endpoint),
                ],
                empty_message=f"Video not found: {video_id}",
                resource="videoDetails",
            )
            tracks = map_caption_tracks(players[0])
            if not tracks:
                raise NotFoundError(NO_TRANSCRIPTS, resource="captionTracks")

            track = select_caption_track(tracks, language)
            xml = await self._fetcher.get_text(_timedtext_url(track.base_url))
            segments = decode_transcript(xml)
            if not segments:
                raise NotFoundError(
                    f"Caption track '{track.language_code}' returned no segments",
                    resource="transcript",
                )
            return OperationResult.ok(
                video_id=video_id,
                language=track.language_code,
                is_generated=track.is_generated,
                available_languages=[t.language_code for t in tracks],
                segment_count=len(segments),
                segments=segments,
                text=" ".join(s.text for s in segments if s.text),
            )

        return await self._guarded("get video transcript", operation)
