"""Exception types raised by the Reddit API client."""
from __future__ import annotations

from typing import Any


class RedditError(Exception):
    """Base class for every error raised by this package."""


class DecodeError(RedditError, ValueError):
    """A response body could not be turned into typed records."""


class MalformedScalar(DecodeError):
    """A scalar field matched neither the boolean nor the numeric wire shape."""

    def __init__(self, raw: Any, message: str | None = None) -> None:
        self.raw = raw
        super().__init__(message or f"Malformed scalar value: {raw!r}")


class MalformedEnvelope(DecodeError):
    """A listing wrapper is missing its ``data``/``children`` keys."""


class MalformedThing(DecodeError):
    """A listing child lacks a required field or has a field of the wrong type."""

    def __init__(self, message: str, *, field: str | None = None) -> None:
        self.field = field
        super().__init__(message)


class UnexpectedChildCount(DecodeError):
    """The post listing of a comments response did not hold exactly one post."""

    def __init__(self, count: int) -> None:
        self.count = count
        super().__init__(f"Expected exactly one post in listing, found {count}")


class RedditAPIError(RedditError, RuntimeError):
    """The platform rejected a request or returned an error payload."""

    def __init__(self, message: str, *, status_code: int | None = None) -> None:
        self.status_code = status_code
        super().__init__(message)


class AuthenticationError(RedditAPIError):
    """No usable OAuth token could be obtained or the current one is unusable."""


__all__ = [
    "AuthenticationError",
    "DecodeError",
    "MalformedEnvelope",
    "MalformedScalar",
    "MalformedThing",
    "RedditAPIError",
    "RedditError",
    "UnexpectedChildCount",
]
