"""
Tests for watch-page meta tag extraction.
"""

from __future__ import annotations

from tubescope.services.extraction.meta_tags import extract_meta_tags


def test_watch_page_meta_tags(watch_page: str) -> None:
    """Test every supported tag is read from a saved watch page."""
    meta = extract_meta_tags(watch_page)

    assert meta == {
        "videoId": "dQw4w9WgXcQ",
        "title": "Rick Astley - Never Gonna Give You Up (Official Music Video)",
        "description": "The official video for Never Gonna Give You Up by Rick Astley.",
        "thumbnail": "https://i.ytimg.com/vi/dQw4w9WgXcQ/maxresdefault.jpg",
        "keywords": ["rick astley", "Never Gonna Give You Up", "rickroll"],
        "channelId": "UCuAXFkgsw1L7xaCfnd5JJOw",
        "viewCount": 1234567890,
        "publishDate": "2009-10-24T23:57:33-07:00",
        "genre": "Music",
        "isFamilyFriendly": True,
    }


def test_name_fallbacks() -> None:
    """Test name= tags are used when Open Graph tags are missing."""
    html = (
        '<meta name="title" content="Plain title">'
        '<meta name="description" content="Plain description">'
        '<meta itemprop="videoId" content="jNQXAC9IVRw">'
    )
    assert extract_meta_tags(html) == {
        "videoId": "jNQXAC9IVRw",
        "title": "Plain title",
        "description": "Plain description",
    }


def test_unusable_values_are_left_out() -> None:
    """Test malformed channel IDs, counts and empty contents are skipped."""
    html = (
        '<meta itemprop="channelId" content="not-a-channel">'
        '<meta itemprop="interactionCount" content="1.2M">'
        '<meta property="og:title" content="">'
        '<meta itemprop="isFamilyFriendly" content="False">'
    )
    assert extract_meta_tags(html) == {"isFamilyFriendly": False}


def test_empty_page() -> None:
    """Test empty markup yields an empty dict."""
    assert extract_meta_tags("") == {}
    assert extract_meta_tags("<html><head></head></html>") == {}
