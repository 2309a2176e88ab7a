"""
Configuration management module for tubescope.

Handles application settings loaded from environment variables and
``.env`` files.
"""

from __future__ import annotations

from tubescope.config.settings import Settings, get_settings, settings

__all__ = ["Settings", "get_settings", "settings"]
