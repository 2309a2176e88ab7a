"""
Tests for the extraction pipeline and the public operations.

The fetcher is replaced by a mock whose ``get_text`` serves saved pages by
path and whose ``post_innertube`` returns canned endpoint responses, so each
test controls exactly which stage succeeds.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from tubescope.exceptions import NetworkError, NotFoundError, ParseError
from tubescope.models.records import CaptionTrack, OperationResult
from tubescope.services.extraction.embedded_data import (
    INITIAL_DATA,
    PLAYER_RESPONSE,
    extract_embedded_json,
)
from tubescope.services.extraction.fetcher import Fetcher
from tubescope.services.extraction.pipeline import (
    CHANNEL_SEARCH_FILTER,
    CHANNEL_VIDEOS_TAB,
    NO_TRANSCRIPTS,
    TRENDING_BROWSE_ID,
    VIDEO_SEARCH_FILTER,
    Strategy,
    YouTubeExtractor,
    run_strategies,
    select_caption_track,
)

VIDEO_ID = "dQw4w9WgXcQ"
CHANNEL_ID = "UCHnyfMqiRRG1u-2MsSQLbXA"


def serve(pages: dict[str, str]) -> Callable:
    """Build a ``get_text`` replacement that serves pages by path."""

    async def get_text(url: str, params: dict[str, str] | None = None) -> str:
        for prefix, body in pages.items():
            if url.startswith(prefix):
                return body
        raise NetworkError(f"Request to {url} returned status 404", url=url, status_code=404)

    return get_text


def page_with(initial: dict) -> str:
    """Wrap initial data in a minimal page."""
    return f"<html><script>var ytInitialData = {json.dumps(initial)};</script></html>"


@pytest.fixture
def fetcher() -> MagicMock:
    mock = MagicMock(spec=Fetcher)
    mock.get_text = AsyncMock(side_effect=serve({}))
    mock.post_innertube = AsyncMock(side_effect=NetworkError("endpoint unavailable"))
    return mock


@pytest.fixture
def extractor(fetcher: MagicMock, test_settings) -> YouTubeExtractor:
    return YouTubeExtractor(fetcher=fetcher, settings=test_settings)


@pytest.fixture
def watch_blobs(watch_page: str) -> tuple[dict, dict]:
    return (
        extract_embedded_json(watch_page, PLAYER_RESPONSE),
        extract_embedded_json(watch_page, INITIAL_DATA),
    )


@pytest.fixture
def channel_initial(channel_page: str) -> dict:
    return extract_embedded_json(channel_page, INITIAL_DATA)


# ---------------------------------------------------------------------------
# Strategy evaluation
# ---------------------------------------------------------------------------


def _stage(name: str, result: list | Exception) -> Strategy:
    async def run() -> list:
        if isinstance(result, Exception):
            raise result
        return result

    return Strategy(name, run)


class TestRunStrategies:
    """Tests for run_strategies."""

    async def test_first_usable_stage_wins(self) -> None:
        """Test later stages are not run once one succeeds."""
        later = AsyncMock(return_value=["never"])
        items = await run_strategies([_stage("a", [1, 2]), Strategy("b", later)])

        assert items == [1, 2]
        later.assert_not_awaited()

    @pytest.mark.parametrize(
        "error",
        [NetworkError("down"), ParseError("no blob"), NotFoundError("nothing")],
    )
    async def test_fallback_errors_move_to_next_stage(self, error: Exception) -> None:
        """Test each fallback-eligible error triggers the next stage."""
        items = await run_strategies([_stage("a", error), _stage("b", ["ok"])])
        assert items == ["ok"]

    async def test_empty_stage_falls_back(self) -> None:
        """Test a stage with no usable items falls back."""
        assert await run_strategies([_stage("a", []), _stage("b", ["ok"])]) == ["ok"]

    async def test_last_error_is_raised_unchanged(self) -> None:
        """Test the final stage's error is terminal."""
        last = ParseError("ytInitialData not found")
        with pytest.raises(ParseError) as exc_info:
            await run_strategies([_stage("a", NetworkError("down")), _stage("b", last)])
        assert exc_info.value is last

    async def test_last_stage_empty_raises_not_found(self) -> None:
        """Test an empty final stage raises NotFoundError with the given message."""
        with pytest.raises(NotFoundError, match="No videos found for: x") as exc_info:
            await run_strategies(
                [_stage("a", NetworkError("down")), _stage("b", [])],
                empty_message="No videos found for: x",
                resource="videoRenderer",
            )
        assert exc_info.value.resource == "videoRenderer"

    async def test_other_errors_propagate(self) -> None:
        """Test errors outside the fallback set are not swallowed."""
        with pytest.raises(RuntimeError):
            await run_strategies([_stage("a", RuntimeError("bug")), _stage("b", ["ok"])])

    async def test_fallback_is_logged(self, caplog) -> None:
        """Test each fallback logs a warning naming both stages."""
        with caplog.at_level(logging.WARNING, logger="tubescope"):
            await run_strategies([_stage("primary", NetworkError("down")), _stage("page", [1])])

        assert "Strategy 'primary' failed (down); falling back to 'page'" in caplog.text

    async def test_requires_a_strategy(self) -> None:
        """Test an empty strategy list is a programming error."""
        with pytest.raises(ValueError):
            await run_strategies([])


# ---------------------------------------------------------------------------
# Caption track selection
# ---------------------------------------------------------------------------


def _track(code: str, kind: str = "") -> CaptionTrack:
    return CaptionTrack(base_url=f"https://x/timedtext?lang={code}", language_code=code, kind=kind)


class TestSelectCaptionTrack:
    """Tests for select_caption_track."""

    def test_exact_manual_match_preferred(self) -> None:
        """Test a manual track beats a generated one in the same language."""
        tracks = [_track("en", "asr"), _track("en")]
        assert select_caption_track(tracks, "en").is_generated is False

    def test_prefix_match(self) -> None:
        """Test regional variants match the base language both ways."""
        tracks = [_track("fr"), _track("de-DE")]
        assert select_caption_track(tracks, "de").language_code == "de-DE"
        assert select_caption_track([_track("en")], "en-GB").language_code == "en"

    def test_falls_back_to_first_manual(self) -> None:
        """Test an unavailable language picks the first manual track."""
        tracks = [_track("es", "asr"), _track("pt")]
        assert select_caption_track(tracks, "ja").language_code == "pt"

    def test_generated_only(self) -> None:
        """Test a generated track is used when nothing else exists."""
        assert select_caption_track([_track("en", "asr")], None).is_generated is True


# ---------------------------------------------------------------------------
# Search
# ---------------------------------------------------------------------------


class TestSearchVideos:
    """Tests for YouTubeExtractor.search_videos."""

    async def test_endpoint_results(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, search_response: dict
    ) -> None:
        """Test results from the search endpoint, at any depth."""
        fetcher.post_innertube.side_effect = None
        fetcher.post_innertube.return_value = search_response

        result = await extractor.search_videos("  rick astley ")
        data = result.to_dict()

        assert data["success"] is True
        assert data["query"] == "rick astley"
        assert data["results"] == 2
        assert [v["videoId"] for v in data["videos"]] == ["aaaaaaaaaaa", "bbbbbbbbbbb"]
        assert data["videos"][1]["viewCount"] == 2_500
        fetcher.post_innertube.assert_awaited_once_with(
            "search", {"query": "rick astley", "params": VIDEO_SEARCH_FILTER}
        )
        fetcher.get_text.assert_not_awaited()

    async def test_falls_back_to_results_page(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, video_node
    ) -> None:
        """Test a failing endpoint falls back to the page with the same records."""
        page = page_with(
            {"contents": [video_node("aaaaaaaaaaa", "One"), video_node("bbbbbbbbbbb", "Two")]}
        )
        fetcher.get_text.side_effect = serve({"/results": page})

        result = await extractor.search_videos("query")

        assert result.success is True
        assert [v.video_id for v in result.payload["videos"]] == ["aaaaaaaaaaa", "bbbbbbbbbbb"]
        fetcher.get_text.assert_awaited_once_with(
            "/results", params={"search_query": "query", "sp": VIDEO_SEARCH_FILTER}
        )

    async def test_saved_results_page(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, search_page: str
    ) -> None:
        """Test the saved page yields its three videos, skipping the id-less node."""
        fetcher.get_text.side_effect = serve({"/results": search_page})

        result = await extractor.search_videos("rick")

        assert result.payload["results"] == 3
        assert [v.video_id for v in result.payload["videos"]] == [
            "dQw4w9WgXcQ",
            "jNQXAC9IVRw",
            "9bZkp7q19f0",
        ]

    async def test_empty_endpoint_response_falls_back(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, search_page: str
    ) -> None:
        """Test an endpoint response without renderers counts as a failure."""
        fetcher.post_innertube.side_effect = None
        fetcher.post_innertube.return_value = {"contents": {}}
        fetcher.get_text.side_effect = serve({"/results": search_page})

        result = await extractor.search_videos("rick")

        assert result.payload["results"] == 3

    async def test_max_results_and_deduplication(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, video_node
    ) -> None:
        """Test duplicates are dropped before the limit is applied."""
        fetcher.post_innertube.side_effect = None
        fetcher.post_innertube.return_value = {
            "items": [
                video_node("aaaaaaaaaaa", "A"),
                video_node("aaaaaaaaaaa", "A again"),
                video_node("bbbbbbbbbbb", "B"),
                video_node("ccccccccccc", "C"),
            ]
        }

        result = await extractor.search_videos("q", max_results=2)

        assert [v.video_id for v in result.payload["videos"]] == ["aaaaaaaaaaa", "bbbbbbbbbbb"]
        assert result.payload["results"] == 2

    async def test_max_results_clamped_to_one(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, search_response: dict
    ) -> None:
        """Test non-positive limits are raised to one."""
        fetcher.post_innertube.side_effect = None
        fetcher.post_innertube.return_value = search_response

        result = await extractor.search_videos("q", max_results=0)

        assert result.payload["results"] == 1

    async def test_all_stages_fail(self, extractor: YouTubeExtractor, fetcher: MagicMock) -> None:
        """Test the last stage's error becomes the envelope's message."""
        fetcher.get_text.side_effect = serve({"/results": "<html>consent wall</html>"})

        result = await extractor.search_videos("q")

        assert result.to_dict() == {
            "success": False,
            "error": "ytInitialData not found on page /results",
        }

    async def test_no_results(self, extractor: YouTubeExtractor, fetcher: MagicMock) -> None:
        """Test a parsed page without renderers reports no results."""
        fetcher.get_text.side_effect = serve({"/results": page_with({"contents": []})})

        result = await extractor.search_videos("zzzz")

        assert result.error == "No videos found for: zzzz"

    @pytest.mark.parametrize("query", [None, "", "   "])
    async def test_query_required(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, query: str | None
    ) -> None:
        """Test blank queries fail without any request."""
        result = await extractor.search_videos(query)

        assert result.error == "Query is required"
        fetcher.post_innertube.assert_not_awaited()
        fetcher.get_text.assert_not_awaited()

    async def test_unexpected_errors_become_envelopes(
        self, extractor: YouTubeExtractor, fetcher: MagicMock
    ) -> None:
        """Test bugs are reported, never raised."""
        fetcher.post_innertube.side_effect = RuntimeError("boom")

        result = await extractor.search_videos("q")

        assert result.success is False
        assert result.error == "Failed to search videos: boom"


class TestSearchChannels:
    """Tests for YouTubeExtractor.search_channels."""

    async def test_results_page(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, search_page: str
    ) -> None:
        """Test channels are read from the results page."""
        fetcher.get_text.side_effect = serve({"/results": search_page})

        result = await extractor.search_channels("rick astley")
        data = result.to_dict()

        assert data["results"] == 1
        assert data["channels"][0]["channelId"] == "UCuAXFkgsw1L7xaCfnd5JJOw"
        assert data["channels"][0]["subscriberCount"] == 4_200_000
        fetcher.post_innertube.assert_awaited_once_with(
            "search", {"query": "rick astley", "params": CHANNEL_SEARCH_FILTER}
        )

    async def test_query_required(self, extractor: YouTubeExtractor) -> None:
        """Test blank queries fail."""
        assert (await extractor.search_channels(" ")).error == "Query is required"


# ---------------------------------------------------------------------------
# Videos
# ---------------------------------------------------------------------------


class TestVideoDetails:
    """Tests for get_video_details and get_video_tags."""

    async def test_player_endpoint(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, watch_blobs: tuple
    ) -> None:
        """Test details from the player and next endpoints."""
        player, initial = watch_blobs
        fetcher.post_innertube.side_effect = [player, initial]

        result = await extractor.get_video_details(f"https://youtu.be/{VIDEO_ID}")
        video = result.to_dict()["video"]

        assert video["videoId"] == VIDEO_ID
        assert video["likeCount"] == 18_123_456
        assert video["publishDate"] == "2009-10-24"
        assert video["duration"] == "3:33"
        assert fetcher.post_innertube.await_args_list[0].args == ("player", {"videoId": VIDEO_ID})
        assert fetcher.post_innertube.await_args_list[1].args == ("next", {"videoId": VIDEO_ID})
        fetcher.get_text.assert_not_awaited()

    async def test_engagement_failure_is_tolerated(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, watch_blobs: tuple
    ) -> None:
        """Test a failing next call only loses the like count."""
        player, _ = watch_blobs
        fetcher.post_innertube.side_effect = [player, NetworkError("down")]

        result = await extractor.get_video_details(VIDEO_ID)

        assert result.success is True
        assert result.payload["video"].like_count == 0
        assert result.payload["video"].view_count == 1_234_567_890

    async def test_watch_page_fallback(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, watch_page: str
    ) -> None:
        """Test the watch page is used when the endpoint fails."""
        fetcher.get_text.side_effect = serve({"/watch": watch_page})

        result = await extractor.get_video_details(VIDEO_ID)

        assert result.payload["video"].like_count == 18_123_456
        fetcher.get_text.assert_awaited_once_with("/watch", params={"v": VIDEO_ID})

    async def test_unplayable_video(self, extractor: YouTubeExtractor, fetcher: MagicMock) -> None:
        """Test the playability reason is reported."""
        unplayable = {"playabilityStatus": {"status": "ERROR", "reason": "Video unavailable"}}
        fetcher.post_innertube.side_effect = None
        fetcher.post_innertube.return_value = unplayable
        fetcher.get_text.side_effect = serve(
            {"/watch": f"<script>var ytInitialPlayerResponse = {json.dumps(unplayable)};</script>"}
        )

        result = await extractor.get_video_details(VIDEO_ID)

        assert result.error == "Video unavailable"

    async def test_watch_page_without_metadata(
        self, extractor: YouTubeExtractor, fetcher: MagicMock
    ) -> None:
        """Test a page with neither player data nor meta tags fails."""
        fetcher.get_text.side_effect = serve({"/watch": "<html></html>"})

        result = await extractor.get_video_details(VIDEO_ID)

        assert result.error == f"No video metadata found on watch page for {VIDEO_ID}"

    @pytest.mark.parametrize(
        ("video", "message"),
        [
            (None, "Video ID or URL is required"),
            ("  ", "Video ID or URL is required"),
            ("https://vimeo.com/1", "Could not extract a video ID from: https://vimeo.com/1"),
            ("bad-id", "Invalid video ID: bad-id"),
        ],
    )
    async def test_invalid_input(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, video: str | None, message: str
    ) -> None:
        """Test input errors fail before any request."""
        result = await extractor.get_video_details(video)

        assert result.error == message
        fetcher.post_innertube.assert_not_awaited()

    async def test_tags(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, watch_page: str
    ) -> None:
        """Test the tags payload."""
        fetcher.get_text.side_effect = serve({"/watch": watch_page})

        data = (await extractor.get_video_tags(VIDEO_ID)).to_dict()

        assert data["videoId"] == VIDEO_ID
        assert data["tags"] == ["rick astley", "Never Gonna Give You Up", "nggyu", "rickroll"]
        assert data["tagCount"] == 4
        assert data["title"].startswith("Rick Astley")


class TestRelatedVideos:
    """Tests for get_related_videos."""

    async def test_next_endpoint(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, watch_blobs: tuple
    ) -> None:
        """Test related videos exclude the video itself."""
        _, initial = watch_blobs
        fetcher.post_innertube.side_effect = None
        fetcher.post_innertube.return_value = initial

        result = await extractor.get_related_videos(VIDEO_ID)
        videos = result.payload["videos"]

        assert result.payload["video_id"] == VIDEO_ID
        assert [v.video_id for v in videos] == ["yPYZpwSpKmA", "L_jWHffIx5E"]
        assert videos[0].view_count == 123_456_789
        assert videos[0].length_seconds == 205
        assert videos[1].is_live is True

    async def test_watch_page_fallback(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, watch_page: str
    ) -> None:
        """Test related videos from the watch page."""
        fetcher.get_text.side_effect = serve({"/watch": watch_page})

        result = await extractor.get_related_videos(VIDEO_ID, max_results=1)

        assert [v.video_id for v in result.payload["videos"]] == ["yPYZpwSpKmA"]


class TestTrendingVideos:
    """Tests for get_trending_videos."""

    async def test_region_is_sent_to_endpoint(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, search_response: dict
    ) -> None:
        """Test the region overrides the client context for the browse call."""
        fetcher.post_innertube.side_effect = None
        fetcher.post_innertube.return_value = search_response

        result = await extractor.get_trending_videos(region="gb")

        assert result.payload["region"] == "GB"
        fetcher.post_innertube.assert_awaited_once_with(
            "browse", {"browseId": TRENDING_BROWSE_ID}, region="GB"
        )

    async def test_page_fallback(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, search_page: str
    ) -> None:
        """Test the trending page is used with the default region."""
        fetcher.get_text.side_effect = serve({"/feed/trending": search_page})

        result = await extractor.get_trending_videos(max_results=2)

        assert result.payload["region"] == "US"
        assert result.payload["results"] == 2
        fetcher.get_text.assert_awaited_once_with("/feed/trending", params={"gl": "US"})

    @pytest.mark.parametrize("region", ["USA", "1A", "u"])
    async def test_invalid_region(self, extractor: YouTubeExtractor, region: str) -> None:
        """Test malformed region codes are rejected."""
        result = await extractor.get_trending_videos(region=region)
        assert result.error == "Region must be a two-letter country code"


# ---------------------------------------------------------------------------
# Channels
# ---------------------------------------------------------------------------


class TestChannelInfo:
    """Tests for get_channel_info."""

    async def test_handle_is_resolved_then_browsed(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, channel_initial: dict
    ) -> None:
        """Test handles are resolved to an ID before browsing."""
        resolved = {"endpoint": {"browseEndpoint": {"browseId": CHANNEL_ID}}}
        fetcher.post_innertube.side_effect = [resolved, channel_initial]

        result = await extractor.get_channel_info("https://www.youtube.com/@veritasium")
        channel = result.to_dict()["channel"]

        assert channel["channelId"] == CHANNEL_ID
        assert channel["handle"] == "@veritasium"
        assert channel["subscriberCount"] == 17_200_000
        calls = fetcher.post_innertube.await_args_list
        assert calls[0].args == (
            "navigation/resolve_url",
            {"url": "https://www.youtube.com/@veritasium"},
        )
        assert calls[1].args == ("browse", {"browseId": CHANNEL_ID})

    async def test_id_skips_resolution(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, channel_initial: dict
    ) -> None:
        """Test channel IDs are browsed directly."""
        fetcher.post_innertube.side_effect = None
        fetcher.post_innertube.return_value = channel_initial

        await extractor.get_channel_info(CHANNEL_ID)

        fetcher.post_innertube.assert_awaited_once_with("browse", {"browseId": CHANNEL_ID})

    async def test_channel_page_fallback(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, channel_page: str
    ) -> None:
        """Test the channel page is used when the endpoint fails."""
        fetcher.get_text.side_effect = serve({"/@veritasium": channel_page})

        result = await extractor.get_channel_info("@veritasium")

        assert result.payload["channel"].title == "Veritasium"

    async def test_unresolvable_handle(
        self, extractor: YouTubeExtractor, fetcher: MagicMock
    ) -> None:
        """Test a handle that resolves nowhere and has no page fails."""
        fetcher.post_innertube.side_effect = None
        fetcher.post_innertube.return_value = {}

        result = await extractor.get_channel_info("@nobody-here")

        assert result.success is False
        assert "404" in result.error

    @pytest.mark.parametrize(
        ("channel", "message"),
        [
            (None, "Channel ID or URL is required"),
            ("two words", "Could not extract a channel from: two words"),
        ],
    )
    async def test_invalid_input(
        self, extractor: YouTubeExtractor, channel: str | None, message: str
    ) -> None:
        """Test input errors."""
        assert (await extractor.get_channel_info(channel)).error == message


class TestChannelVideos:
    """Tests for get_channel_videos."""

    async def test_browse_videos_tab(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, channel_initial: dict
    ) -> None:
        """Test uploads inherit the channel owner from page metadata."""
        fetcher.post_innertube.side_effect = None
        fetcher.post_innertube.return_value = channel_initial

        result = await extractor.get_channel_videos(CHANNEL_ID)
        videos = result.payload["videos"]

        assert result.payload["channel_id"] == CHANNEL_ID
        assert [v.video_id for v in videos] == ["HeQX2HjkcNo", "pTn6Ewhb27k"]
        assert {v.channel_name for v in videos} == {"Veritasium"}
        assert {v.channel_id for v in videos} == {CHANNEL_ID}
        assert videos[0].length_seconds == 2_040
        fetcher.post_innertube.assert_awaited_once_with(
            "browse", {"browseId": CHANNEL_ID, "params": CHANNEL_VIDEOS_TAB}
        )

    async def test_videos_page_fallback(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, channel_page: str
    ) -> None:
        """Test the channel's videos page is used as fallback."""
        fetcher.get_text.side_effect = serve({f"/channel/{CHANNEL_ID}/videos": channel_page})

        result = await extractor.get_channel_videos(
            f"https://www.youtube.com/channel/{CHANNEL_ID}", max_results=1
        )

        assert result.payload["results"] == 1


# ---------------------------------------------------------------------------
# Comments
# ---------------------------------------------------------------------------


class TestVideoComments:
    """Tests for get_video_comments."""

    async def test_comments_via_continuation(
        self,
        extractor: YouTubeExtractor,
        fetcher: MagicMock,
        watch_blobs: tuple,
        comments_response: dict,
    ) -> None:
        """Test the watch response token loads the comment feed."""
        _, initial = watch_blobs
        fetcher.post_innertube.side_effect = [initial, comments_response]

        data = (await extractor.get_video_comments(VIDEO_ID)).to_dict()

        assert data["videoId"] == VIDEO_ID
        assert data["results"] == 2
        assert [c["commentId"] for c in data["comments"]] == ["UgzKxQ1", "UgzKxQ2"]
        assert data["continuation"] == "NEXT_PAGE_TOKEN"
        token_call = fetcher.post_innertube.await_args_list[1]
        assert token_call.args[0] == "next"
        assert token_call.args[1]["continuation"].startswith("Eg0SC2RRdzR3OVdnWGNR")

    async def test_reply_continuations_are_not_the_next_page(
        self,
        extractor: YouTubeExtractor,
        fetcher: MagicMock,
        watch_blobs: tuple,
        comments_response: dict,
    ) -> None:
        """Test a last page whose final thread has replies has no continuation."""
        _, initial = watch_blobs
        replies = {
            "commentRepliesRenderer": {
                "contents": [
                    {
                        "continuationItemRenderer": {
                            "continuationEndpoint": {
                                "continuationCommand": {"token": "REPLIES_TOKEN"}
                            }
                        }
                    }
                ]
            }
        }
        comments_response["onResponseReceivedEndpoints"][0][
            "reloadContinuationItemsCommand"
        ]["continuationItems"] = [
            {"commentThreadRenderer": {"commentViewModel": {}}},
            {"commentThreadRenderer": {"commentViewModel": {}, "replies": replies}},
        ]
        fetcher.post_innertube.side_effect = [initial, comments_response]

        data = (await extractor.get_video_comments(VIDEO_ID)).to_dict()

        assert data["results"] == 2
        assert data["continuation"] is None

    async def test_next_page_from_append_action(
        self,
        extractor: YouTubeExtractor,
        fetcher: MagicMock,
        watch_blobs: tuple,
        comments_response: dict,
    ) -> None:
        """Test the page token is read from an append action's own items."""
        _, initial = watch_blobs
        endpoint = comments_response["onResponseReceivedEndpoints"][0]
        endpoint["appendContinuationItemsAction"] = endpoint.pop(
            "reloadContinuationItemsCommand"
        )
        fetcher.post_innertube.side_effect = [initial, comments_response]

        result = await extractor.get_video_comments(VIDEO_ID)

        assert result.payload["continuation"] == "NEXT_PAGE_TOKEN"

    async def test_max_comments(
        self,
        extractor: YouTubeExtractor,
        fetcher: MagicMock,
        watch_blobs: tuple,
        comments_response: dict,
    ) -> None:
        """Test the comment limit."""
        _, initial = watch_blobs
        fetcher.post_innertube.side_effect = [initial, comments_response]

        result = await extractor.get_video_comments(VIDEO_ID, max_comments=1)

        assert result.payload["results"] == 1

    async def test_token_from_watch_page(
        self,
        extractor: YouTubeExtractor,
        fetcher: MagicMock,
        watch_page: str,
        comments_response: dict,
    ) -> None:
        """Test the watch page supplies the token when the endpoint fails."""
        fetcher.post_innertube.side_effect = [NetworkError("down"), comments_response]
        fetcher.get_text.side_effect = serve({"/watch": watch_page})

        result = await extractor.get_video_comments(VIDEO_ID)

        assert result.payload["results"] == 2

    async def test_comments_disabled(
        self, extractor: YouTubeExtractor, fetcher: MagicMock
    ) -> None:
        """Test a watch response without a comment section."""
        fetcher.post_innertube.side_effect = None
        fetcher.post_innertube.return_value = {"contents": {}}
        fetcher.get_text.side_effect = serve({"/watch": page_with({"contents": {}})})

        result = await extractor.get_video_comments(VIDEO_ID)

        assert result.error == "Comments are disabled or unavailable for this video"


# ---------------------------------------------------------------------------
# Transcripts
# ---------------------------------------------------------------------------


class TestVideoTranscript:
    """Tests for get_video_transcript."""

    async def test_transcript_from_watch_page(
        self,
        extractor: YouTubeExtractor,
        fetcher: MagicMock,
        watch_page: str,
        timed_text_xml: str,
    ) -> None:
        """Test the full transcript payload."""
        fetcher.get_text.side_effect = serve(
            {"/watch": watch_page, "https://www.youtube.com/api/timedtext": timed_text_xml}
        )

        data = (await extractor.get_video_transcript(VIDEO_ID)).to_dict()

        assert data["success"] is True
        assert data["language"] == "en"
        assert data["isGenerated"] is False
        assert data["availableLanguages"] == ["en", "en", "de-DE"]
        assert data["segmentCount"] == 3
        assert data["segments"][1] == {
            "start": 18.6,
            "duration": 3.2,
            "text": "We're no strangers to love",
        }
        assert data["text"] == (
            "[Music] We're no strangers to love You know the rules & so do I"
        )
        timedtext_url = fetcher.get_text.await_args_list[1].args[0]
        assert "fmt=" not in timedtext_url
        assert "lang=en" in timedtext_url
        fetcher.post_innertube.assert_not_awaited()

    async def test_requested_language(
        self,
        extractor: YouTubeExtractor,
        fetcher: MagicMock,
        watch_page: str,
        timed_text_xml: str,
    ) -> None:
        """Test a regional track is chosen for its base language."""
        fetcher.get_text.side_effect = serve(
            {"/watch": watch_page, "https://www.youtube.com/api/timedtext": timed_text_xml}
        )

        result = await extractor.get_video_transcript(VIDEO_ID, language="de")

        assert result.payload["language"] == "de-DE"

    async def test_no_caption_tracks(
        self, extractor: YouTubeExtractor, fetcher: MagicMock
    ) -> None:
        """Test a video without captions fails after a single fetch."""
        player = {"videoDetails": {"videoId": VIDEO_ID}, "playabilityStatus": {"status": "OK"}}
        fetcher.get_text.side_effect = serve(
            {"/watch": f"<script>var ytInitialPlayerResponse = {json.dumps(player)};</script>"}
        )

        result = await extractor.get_video_transcript(VIDEO_ID)

        assert result.to_dict() == {"success": False, "error": NO_TRANSCRIPTS}
        assert fetcher.get_text.await_count == 1
        fetcher.post_innertube.assert_not_awaited()

    async def test_player_endpoint_fallback(
        self,
        extractor: YouTubeExtractor,
        fetcher: MagicMock,
        watch_blobs: tuple,
        timed_text_xml: str,
    ) -> None:
        """Test the player endpoint supplies tracks when the page fails."""
        player, _ = watch_blobs
        fetcher.post_innertube.side_effect = None
        fetcher.post_innertube.return_value = player
        fetcher.get_text.side_effect = serve(
            {"https://www.youtube.com/api/timedtext": timed_text_xml}
        )

        result = await extractor.get_video_transcript(VIDEO_ID)

        assert result.payload["segment_count"] == 3
        fetcher.post_innertube.assert_awaited_once_with("player", {"videoId": VIDEO_ID})

    async def test_empty_caption_feed(
        self, extractor: YouTubeExtractor, fetcher: MagicMock, watch_page: str
    ) -> None:
        """Test a feed without segments is a failure."""
        fetcher.get_text.side_effect = serve(
            {"/watch": watch_page, "https://www.youtube.com/api/timedtext": "<transcript/>"}
        )

        result = await extractor.get_video_transcript(VIDEO_ID)

        assert result.error == "Caption track 'en' returned no segments"


async def test_operations_always_return_envelopes(
    extractor: YouTubeExtractor, fetcher: MagicMock
) -> None:
    """Test every operation reports network failure in its envelope."""
    operations = [
        extractor.search_videos("q"),
        extractor.search_channels("q"),
        extractor.get_video_details(VIDEO_ID),
        extractor.get_video_tags(VIDEO_ID),
        extractor.get_related_videos(VIDEO_ID),
        extractor.get_trending_videos(),
        extractor.get_channel_info(CHANNEL_ID),
        extractor.get_channel_videos(CHANNEL_ID),
        extractor.get_video_comments(VIDEO_ID),
        extractor.get_video_transcript(VIDEO_ID),
    ]
    for operation in operations:
        result = await operation
        assert isinstance(result, OperationResult)
        assert result.success is False
        assert result.error
