"""
Pytest configuration and fixtures for tubescope tests.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any

import pytest

from tubescope.config.settings import Settings

PAGES_DIR = Path(__file__).parent / "fixtures" / "pages"

TIMED_TEXT_XML = (
    '<?xml version="1.0" encoding="utf-8" ?><transcript>'
    '<text start="0.5" dur="2.1">[Music]</text>'
    '<text start="18.6" dur="3.2">We&#39;re no strangers to love</text>'
    '<text start="22.1" dur="4.0">You know the rules &amp; so do I</text>'
    "</transcript>"
)


def load_page(name: str) -> str:
    """Read a saved page from the fixtures directory."""
    return (PAGES_DIR / name).read_text(encoding="utf-8")


def innertube_video(video_id: str, title: str, views: str = "1,000 views") -> dict[str, Any]:
    """A minimal ``videoRenderer`` node as the search endpoint returns it."""
    return {
        "videoRenderer": {
            "videoId": video_id,
            "title": {"runs": [{"text": title}]},
            "viewCountText": {"simpleText": views},
            "lengthText": {"simpleText": "1:00"},
        }
    }


@pytest.fixture
def test_settings() -> Settings:
    """Settings with defaults pinned for tests."""
    return Settings(
        base_url="https://www.youtube.com",
        hl="en",
        gl="US",
        request_timeout=5.0,
        default_max_results=10,
        max_results_ceiling=50,
        default_max_comments=20,
        max_comments_ceiling=100,
    )


@pytest.fixture
def search_page() -> str:
    """Saved search results page with three videos and one channel."""
    return load_page("search_results.html")


@pytest.fixture
def watch_page() -> str:
    """Saved watch page with player configuration, initial data and meta tags."""
    return load_page("watch.html")


@pytest.fixture
def channel_page() -> str:
    """Saved channel videos page using the view-model header."""
    return load_page("channel.html")


@pytest.fixture
def timed_text_xml() -> str:
    """Caption feed with three segments."""
    return TIMED_TEXT_XML


@pytest.fixture
def search_response() -> dict[str, Any]:
    """Search endpoint response with two videos nested at different depths."""
    return {
        "estimatedResults": "2",
        "contents": {
            "twoColumnSearchResultsRenderer": {
                "primaryContents": {
                    "sectionListRenderer": {
                        "contents": [
                            {
                                "itemSectionRenderer": {
                                    "contents": [
                                        innertube_video("aaaaaaaaaaa", "First", "12 views"),
                                        {
                                            "shelfRenderer": {
                                                "content": {
                                                    "verticalListRenderer": {
                                                        "items": [
                                                            innertube_video(
                                                                "bbbbbbbbbbb",
                                                                "Second",
                                                                "2.5K views",
                                                            )
                                                        ]
                                                    }
                                                }
                                            }
                                        },
                                    ]
                                }
                            }
                        ]
                    }
                }
            }
        },
    }


@pytest.fixture
def comments_response() -> dict[str, Any]:
    """Comment continuation response using the entity-payload shape."""
    return {
        "onResponseReceivedEndpoints": [
            {
                "reloadContinuationItemsCommand": {
                    "continuationItems": [
                        {"commentThreadRenderer": {"commentViewModel": {}}},
                        {
                            "continuationItemRenderer": {
                                "continuationEndpoint": {
                                    "continuationCommand": {"token": "NEXT_PAGE_TOKEN"}
                                }
                            }
                        },
                    ]
                }
            }
        ],
        "frameworkUpdates": {
            "entityBatchUpdate": {
                "mutations": [
                    {
                        "payload": {
                            "commentEntityPayload": {
                                "properties": {
                                    "commentId": "UgzKxQ1",
                                    "content": {"content": "Never gonna give this up"},
                                    "publishedTime": "2 years ago",
                                },
                                "author": {
                                    "displayName": "@listener",
                                    "channelId": "UCaaaaaaaaaaaaaaaaaaaaaa",
                                    "isCreator": False,
                                },
                                "toolbar": {
                                    "likeCountNotliked": "1.5K",
                                    "replyCount": "12",
                                    "heartState": "TOOLBAR_HEART_STATE_HEARTED",
                                },
                            }
                        }
                    },
                    {
                        "payload": {
                            "commentEntityPayload": {
                                "properties": {
                                    "commentId": "UgzKxQ2",
                                    "content": {"content": "Second comment"},
                                    "publishedTime": "1 year ago",
                                },
                                "author": {"displayName": "@other"},
                                "toolbar": {"likeCountNotliked": "", "replyCount": ""},
                            }
                        }
                    },
                ]
            }
        },
    }


@pytest.fixture
def video_node():
    """Factory for minimal ``videoRenderer`` nodes."""
    return innertube_video
