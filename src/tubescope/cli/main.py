"""
Main CLI entry point for tubescope.

Every command runs one extraction operation and prints its result envelope
as JSON. The exit code is 0 when the envelope reports success and 1
otherwise.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Coroutine
from pathlib import Path
from typing import Any, Optional

import typer
from rich.console import Console
from rich.panel import Panel

from tubescope import __version__
from tubescope.config.settings import settings
from tubescope.exceptions import EXIT_CODE_GENERAL_ERROR, EXIT_CODE_SUCCESS
from tubescope.models.records import OperationResult
from tubescope.services.extraction.pipeline import YouTubeExtractor

console = Console()

app = typer.Typer(
    name="tubescope",
    help="Structured data extraction for public YouTube pages",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
_handlers: list[logging.Handler] = []


def _setup_logging(verbose: bool = False, log_file: Optional[Path] = None) -> None:
    """
    Configure the ``tubescope`` logger.

    Parameters
    ----------
    verbose : bool, optional
        If True, log at DEBUG level and echo records to stderr (default False).
    log_file : Path, optional
        If given, also write records to this file.
    """
    root_logger = logging.getLogger("tubescope")
    for handler in _handlers:
        root_logger.removeHandler(handler)
        handler.close()
    _handlers.clear()

    log_level = logging.DEBUG if verbose else getattr(logging, settings.log_level)
    root_logger.setLevel(log_level)

    formatter = logging.Formatter(_LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S")

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, mode="a")
        file_handler.setLevel(log_level)
        file_handler.setFormatter(formatter)
        _handlers.append(file_handler)

    if verbose:
        console_handler = logging.StreamHandler()
        console_handler.setLevel(logging.DEBUG)
        console_handler.setFormatter(formatter)
        _handlers.append(console_handler)

    for handler in _handlers:
        root_logger.addHandler(handler)


def _emit(
    operation: Coroutine[Any, Any, OperationResult],
    text_field: Optional[str] = None,
) -> None:
    """Run an operation, print its envelope and exit with the matching code."""
    result = asyncio.run(operation)
    envelope = result.to_dict()

    if text_field is not None and result.success:
        console.print(
            str(envelope.get(text_field, "")), markup=False, highlight=False, soft_wrap=True
        )
    else:
        console.print_json(data=envelope)

    raise typer.Exit(EXIT_CODE_SUCCESS if result.success else EXIT_CODE_GENERAL_ERROR)


@app.command()
def search(
    query: str = typer.Argument(..., help="Search terms"),
    max_results: Optional[int] = typer.Option(
        None, "--max-results", "-n", help="Maximum number of results (1-50)"
    ),
    channels: bool = typer.Option(
        False, "--channels", help="Search for channels instead of videos"
    ),
) -> None:
    """Search for videos or channels."""
    extractor = YouTubeExtractor()
    if channels:
        _emit(extractor.search_channels(query, max_results))
    else:
        _emit(extractor.search_videos(query, max_results))


@app.command()
def video(
    video: str = typer.Argument(..., help="Video ID or URL"),
    tags: bool = typer.Option(False, "--tags", help="Only show the video's tags"),
) -> None:
    """Show metadata for one video."""
    extractor = YouTubeExtractor()
    if tags:
        _emit(extractor.get_video_tags(video))
    else:
        _emit(extractor.get_video_details(video))


@app.command()
def channel(
    channel: str = typer.Argument(..., help="Channel ID, @handle or URL"),
    videos: Optional[int] = typer.Option(
        None, "--videos", help="List this many of the channel's latest videos"
    ),
) -> None:
    """Show channel metadata, or its latest videos with --videos."""
    extractor = YouTubeExtractor()
    if videos is not None:
        _emit(extractor.get_channel_videos(channel, videos))
    else:
        _emit(extractor.get_channel_info(channel))


@app.command()
def comments(
    video: str = typer.Argument(..., help="Video ID or URL"),
    max_comments: Optional[int] = typer.Option(
        None, "--max", "-n", help="Maximum number of comments (1-100)"
    ),
) -> None:
    """Show top-level comments on a video."""
    _emit(YouTubeExtractor().get_video_comments(video, max_comments))


@app.command()
def transcript(
    video: str = typer.Argument(..., help="Video ID or URL"),
    language: str = typer.Option("en", "--language", "-l", help="Caption language code"),
    text: bool = typer.Option(False, "--text", help="Print plain text only"),
) -> None:
    """Show the timed transcript of a video."""
    _emit(
        YouTubeExtractor().get_video_transcript(video, language),
        text_field="text" if text else None,
    )


@app.command()
def trending(
    region: str = typer.Option("US", "--region", "-r", help="Two-letter region code"),
    max_results: Optional[int] = typer.Option(
        None, "--max-results", "-n", help="Maximum number of results (1-50)"
    ),
) -> None:
    """Show trending videos for a region."""
    _emit(YouTubeExtractor().get_trending_videos(max_results, region))


@app.command()
def related(
    video: str = typer.Argument(..., help="Video ID or URL"),
    max_results: Optional[int] = typer.Option(
        None, "--max-results", "-n", help="Maximum number of results (1-50)"
    ),
) -> None:
    """Show videos related to a video."""
    _emit(YouTubeExtractor().get_related_videos(video, max_results))


@app.command()
def version() -> None:
    """Show version information."""
    console.print(
        Panel(
            f"[bold blue]tubescope[/bold blue] v{__version__}",
            title="Version",
            border_style="blue",
        )
    )


@app.callback()
def main(
    verbose: bool = typer.Option(
        False, "--verbose", "-v", help="Enable debug logging"
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", help="Also write logs to this file"
    ),
) -> None:
    """
    tubescope - Structured data extraction for public YouTube pages.

    Search videos and channels, read video and channel metadata, comments
    and transcripts, without an API key.
    """
    _setup_logging(verbose=verbose, log_file=log_file)


if __name__ == "__main__":
    app()
