"""
tubescope - Structured data extraction for public YouTube pages.

A library-first toolkit that recovers search results, video and channel
metadata, comments and transcripts from YouTube without an API key, using
the internal web endpoint first and the embedded page data as a fallback.
"""

from __future__ import annotations

__version__ = "0.3.0"
__author__ = "tubescope"
__email__ = "noreply@tubescope.dev"
__license__ = "AGPL-3.0-or-later"

__all__ = ["__version__", "__author__", "__email__", "__license__"]
