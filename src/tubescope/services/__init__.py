"""
Services module for tubescope.

Contains the extraction engine that fetches public YouTube pages and the
internal web endpoint and turns their data into normalized records.
"""

from __future__ import annotations

from tubescope.services.extraction import YouTubeExtractor

__all__: list[str] = ["YouTubeExtractor"]
