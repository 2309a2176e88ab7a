"""Utility modules for tubescope."""

from tubescope.utils.text import (
    extract_text,
    format_count,
    format_duration,
    parse_count,
    parse_duration,
)

__all__ = [
    "parse_count",
    "format_count",
    "format_duration",
    "parse_duration",
    "extract_text",
]
