"""Venue client errors. Each carries the status the aggregator reports for it."""

from __future__ import annotations


class VenueError(Exception):
    """Base exception for all venue market-data failures."""

    status = "error"

    def __init__(self, message: str, venue: str = "", status_code: int | None = None) -> None:
        super().__init__(message)
        self.venue = venue
        self.status_code = status_code


class UnsupportedSymbolError(VenueError):
    """Symbol has no native spelling on the venue, or the venue does not list it."""

    status = "unavailable"


class RateLimitError(VenueError):
    """Venue rate limit hit (HTTP 429/418 or a rate-limit error body). Retryable."""


class VenueTimeoutError(VenueError):
    """Request exceeded the per-call timeout."""

    status = "timeout"


class VenueHTTPError(VenueError):
    """Non-retryable HTTP failure (4xx other than rate limiting, or 5xx)."""


class VenueNetworkError(VenueError):
    """Connection-level failure before a response arrived."""


class MalformedResponseError(VenueError):
    """Response could not be parsed into the expected shape."""
