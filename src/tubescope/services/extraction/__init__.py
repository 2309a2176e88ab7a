"""
Extraction engine for YouTube structured data.

Components, leaf first:

- ``fetcher``: HTTP requests with browser-like headers.
- ``embedded_data``: JSON blobs assigned to page globals.
- ``tree``: key-name search over arbitrary JSON trees.
- ``transcript``: timed-text caption decoding.
- ``identifiers``: video and channel IDs from URLs.
- ``meta_tags``: watch-page meta-tag metadata.
- ``mappers``: raw nodes to normalized records.
- ``pipeline``: primary/fallback strategies and the public operations.
"""

from __future__ import annotations

from tubescope.services.extraction.embedded_data import (
    INITIAL_DATA,
    PLAYER_RESPONSE,
    extract_embedded_blobs,
    extract_embedded_json,
)
from tubescope.services.extraction.fetcher import Fetcher, RawPage
from tubescope.services.extraction.identifiers import (
    ChannelRef,
    extract_channel_id,
    extract_channel_ref,
    extract_video_id,
)
from tubescope.services.extraction.pipeline import (
    StageOutcome,
    Strategy,
    YouTubeExtractor,
    run_strategies,
    select_caption_track,
)
from tubescope.services.extraction.transcript import decode_transcript
from tubescope.services.extraction.tree import collect, collect_any, find_first

__all__ = [
    "INITIAL_DATA",
    "PLAYER_RESPONSE",
    "ChannelRef",
    "Fetcher",
    "RawPage",
    "StageOutcome",
    "Strategy",
    "YouTubeExtractor",
    "collect",
    "collect_any",
    "decode_transcript",
    "extract_channel_id",
    "extract_channel_ref",
    "extract_embedded_blobs",
    "extract_embedded_json",
    "extract_video_id",
    "find_first",
    "run_strategies",
    "select_caption_track",
]
