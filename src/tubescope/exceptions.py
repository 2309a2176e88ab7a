"""
Custom exceptions for the tubescope extraction engine.

This module defines the error taxonomy used throughout the engine. Every
error is scoped to a single operation call: the extraction pipeline catches
these at its boundary and turns them into a failure envelope, so none of
them escape to library callers.
"""

from __future__ import annotations


class TubescopeError(Exception):
    """Base exception for all tubescope errors."""

    def __init__(self, message: str) -> None:
        """
        Initialize TubescopeError.

        Parameters
        ----------
        message : str
            Human-readable error message.
        """
        self.message = message
        super().__init__(message)


class NetworkError(TubescopeError):
    """
    Exception raised for network-related failures.

    Raised by the fetcher when a request gets a non-2xx response or fails at
    the transport level (connection refused, DNS failure, timeout).

    Attributes
    ----------
    message : str
        Human-readable error message.
    url : str | None
        The URL that was being requested.
    status_code : int | None
        HTTP status code, or None for transport failures.
    original_error : Exception | None
        The original exception that caused this error.

    Examples
    --------
    >>> try:
    ...     html = await fetcher.get_text(url)
    ... except NetworkError as e:
    ...     print(f"Request to {e.url} failed with {e.status_code}")
    """

    def __init__(
        self,
        message: str = "Network error occurred",
        url: str | None = None,
        status_code: int | None = None,
        original_error: Exception | None = None,
    ) -> None:
        """
        Initialize NetworkError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Network error occurred").
        url : str | None, optional
            The URL that was being requested (default: None).
        status_code : int | None, optional
            HTTP status code returned by the server (default: None).
        original_error : Exception | None, optional
            The original exception that caused this error (default: None).
        """
        self.url = url
        self.status_code = status_code
        self.original_error = original_error
        super().__init__(message)


class ParseError(TubescopeError):
    """
    Exception raised when an expected payload cannot be parsed.

    Covers a missing embedded blob on a page that should carry one, and
    response bodies that are not valid JSON.

    Attributes
    ----------
    message : str
        Human-readable error message.
    blob_name : str | None
        Name of the embedded variable that was expected, if applicable.
    """

    def __init__(
        self,
        message: str = "Failed to parse response",
        blob_name: str | None = None,
    ) -> None:
        """
        Initialize ParseError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Failed to parse response").
        blob_name : str | None, optional
            Name of the embedded variable that was expected (default: None).
        """
        self.blob_name = blob_name
        super().__init__(message)


class NotFoundError(TubescopeError):
    """
    Exception raised when a successful parse yields no matching records.

    Examples are a search with no results or a video without caption tracks.

    Attributes
    ----------
    message : str
        Human-readable error message.
    resource : str | None
        The kind of record that was looked for (e.g. "videoRenderer").
    """

    def __init__(
        self,
        message: str = "No matching records found",
        resource: str | None = None,
    ) -> None:
        """
        Initialize NotFoundError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "No matching records found").
        resource : str | None, optional
            The kind of record that was looked for (default: None).
        """
        self.resource = resource
        super().__init__(message)


class UnsupportedFormatError(TubescopeError):
    """
    Exception raised when a node has a shape the mapper cannot use.

    Mappers fall back to defaults for missing optional fields and only raise
    this when the record identifier itself is unrecoverable. The pipeline
    skips such nodes instead of failing the operation.

    Attributes
    ----------
    message : str
        Human-readable error message.
    record_type : str | None
        The record type being mapped (e.g. "VideoSummary").
    """

    def __init__(
        self,
        message: str = "Unsupported record format",
        record_type: str | None = None,
    ) -> None:
        """
        Initialize UnsupportedFormatError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Unsupported record format").
        record_type : str | None, optional
            The record type being mapped (default: None).
        """
        self.record_type = record_type
        super().__init__(message)


# Exit codes for CLI integration
EXIT_CODE_SUCCESS = 0
EXIT_CODE_GENERAL_ERROR = 1
