"""
Watch-page metadata from HTML meta tags.

Watch pages repeat core video metadata as Open Graph (``og:``) tags and
``itemprop`` microdata. These survive template changes that move or rename
the embedded player configuration, so they serve as the last candidate
source when mapping video details.
"""

from __future__ import annotations

import logging
import re

from bs4 import BeautifulSoup

from tubescope.models.json_value import JsonDict

logger = logging.getLogger(__name__)

_CHANNEL_ID_RE = re.compile(r"UC[A-Za-z0-9_-]{22}")


def _content(soup: BeautifulSoup, **attrs: str) -> str | None:
    tag = soup.find(attrs=attrs)
    if tag is None:
        return None
    value = tag.get("content")
    if not value:
        return None
    return str(value)


def extract_meta_tags(html: str) -> JsonDict:
    """
    Read video metadata from a watch page's meta tags.

    Parameters
    ----------
    html : str
        Raw watch-page markup.

    Returns
    -------
    JsonDict
        Any of ``videoId``, ``title``, ``description``, ``thumbnail``,
        ``keywords``, ``channelId``, ``viewCount``, ``publishDate``,
        ``genre`` and ``isFamilyFriendly`` that the page carries. Tags that
        are absent or unusable are left out.
    """
    if not html:
        return {}

    soup = BeautifulSoup(html, "html.parser")
    found: JsonDict = {}

    video_id = _content(soup, itemprop="videoId") or _content(soup, itemprop="identifier")
    if video_id:
        found["videoId"] = video_id

    title = _content(soup, property="og:title") or _content(soup, name="title")
    if title:
        found["title"] = title

    description = _content(soup, property="og:description") or _content(
        soup, name="description"
    )
    if description:
        found["description"] = description

    thumbnail = _content(soup, property="og:image")
    if thumbnail:
        found["thumbnail"] = thumbnail

    tags = [
        str(tag["content"])
        for tag in soup.find_all("meta", attrs={"property": "og:video:tag"})
        if tag.get("content")
    ]
    if tags:
        found["keywords"] = tags

    channel_id = _content(soup, itemprop="channelId")
    if channel_id and _CHANNEL_ID_RE.fullmatch(channel_id):
        found["channelId"] = channel_id

    views = _content(soup, itemprop="interactionCount")
    if views and views.isdigit():
        found["viewCount"] = int(views)

    published = _content(soup, itemprop="datePublished") or _content(
        soup, itemprop="uploadDate"
    )
    if published:
        found["publishDate"] = published

    genre = _content(soup, itemprop="genre")
    if genre:
        found["genre"] = genre

    family_friendly = _content(soup, itemprop="isFamilyFriendly")
    if family_friendly:
        found["isFamilyFriendly"] = family_friendly.lower() == "true"

    logger.debug("Found %d meta-tag fields", len(found))
    return found
