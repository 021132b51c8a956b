"""
Custom exceptions for the tubedex application.

This module defines domain-specific exceptions for error handling
throughout the scraping pipeline, including network failures, page
parsing failures, identity mismatches, and fatal I/O errors.
"""

from __future__ import annotations

from pathlib import Path


class TubedexError(Exception):
    """Base exception for all tubedex errors."""

    def __init__(self, message: str) -> None:
        """
        Initialize TubedexError.

        Parameters
        ----------
        message : str
            Human-readable error message.
        """
        self.message = message
        super().__init__(message)


class FetchError(TubedexError):
    """
    Exception raised when a page could not be fetched.

    Covers both transport failures (connection errors, timeouts) and
    non-2xx HTTP responses. Callers retry these with back-off and then
    escalate to the next source.

    Attributes
    ----------
    message : str
        Human-readable error message.
    url : str
        The URL that was requested.
    status_code : int
        HTTP status code, or 0 for transport failures.
    retry_count : int
        Number of attempts made before giving up.

    Examples
    --------
    >>> try:
    ...     html = await fetch_with_retry(fetcher, url, policy)
    ... except FetchError as e:
    ...     print(f"{e.url} failed after {e.retry_count} attempts")
    """

    def __init__(
        self,
        message: str = "Page fetch failed",
        url: str = "",
        status_code: int = 0,
        retry_count: int = 0,
    ) -> None:
        """
        Initialize FetchError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Page fetch failed").
        url : str, optional
            The URL that was requested (default: "").
        status_code : int, optional
            HTTP status code, 0 for transport errors (default: 0).
        retry_count : int, optional
            Number of attempts made (default: 0).
        """
        self.url = url
        self.status_code = status_code
        self.retry_count = retry_count
        super().__init__(message)


class PageParseError(TubedexError):
    """
    Exception raised when a fetched page carries no usable data.

    Parse failures are never retried; the reconciler treats the source
    as unavailable and moves on to the next one.

    Attributes
    ----------
    message : str
        Human-readable error message.
    url : str
        The URL of the page that failed to parse.
    reason : str
        Short machine-readable reason (e.g. ``"no_metrics"``).
    """

    def __init__(
        self,
        message: str = "Page contained no usable data",
        url: str = "",
        reason: str = "unparseable",
    ) -> None:
        """
        Initialize PageParseError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message.
        url : str, optional
            The URL of the page (default: "").
        reason : str, optional
            Short reason identifier (default: "unparseable").
        """
        self.url = url
        self.reason = reason
        super().__init__(message)


class ChannelMismatchError(TubedexError):
    """
    Exception raised when a page belongs to a different channel.

    Raised when the identity found on a fetched page (stable ID or handle)
    does not correspond to the reference that was requested, typically
    because an intermediate cache served a stale page.

    Attributes
    ----------
    message : str
        Human-readable error message.
    expected : str
        The reference that was requested.
    found : str
        The identity found on the page.
    """

    def __init__(
        self,
        message: str = "Page belongs to a different channel",
        expected: str = "",
        found: str = "",
    ) -> None:
        """
        Initialize ChannelMismatchError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message.
        expected : str, optional
            The requested reference (default: "").
        found : str, optional
            The identity found on the page (default: "").
        """
        self.expected = expected
        self.found = found
        super().__init__(message)


class ConfigurationError(TubedexError):
    """
    Exception raised when the channel list cannot be read.

    This is fatal to the whole run; the CLI exits with a non-zero code.

    Attributes
    ----------
    message : str
        Human-readable error message.
    path : Path | None
        The configuration file involved, if any.
    """

    def __init__(
        self,
        message: str = "Invalid configuration",
        path: Path | None = None,
    ) -> None:
        """
        Initialize ConfigurationError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Invalid configuration").
        path : Path | None, optional
            The configuration file involved (default: None).
        """
        self.path = path
        super().__init__(message)


class OutputWriteError(TubedexError):
    """
    Exception raised when the directory document cannot be written.

    Attributes
    ----------
    message : str
        Human-readable error message.
    path : Path | None
        The output file that could not be written.
    """

    def __init__(
        self,
        message: str = "Failed to write output",
        path: Path | None = None,
    ) -> None:
        """
        Initialize OutputWriteError.

        Parameters
        ----------
        message : str, optional
            Human-readable error message (default: "Failed to write output").
        path : Path | None, optional
            The output file (default: None).
        """
        self.path = path
        super().__init__(message)


# Exit codes for CLI integration
EXIT_CODE_SUCCESS = 0
EXIT_CODE_GENERAL_ERROR = 1
EXIT_CODE_INVALID_ARGS = 2
EXIT_CODE_INTERRUPTED = 130  # Standard Unix signal interrupt exit code
