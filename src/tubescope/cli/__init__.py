"""
CLI module for tubescope.

Provides the command-line interface built with Typer.
"""

from __future__ import annotations
