"""Exception hierarchy for upstream feed failures."""

from __future__ import annotations


class FeedError(RuntimeError):
    """Base class for all upstream feed failures."""


class FeedTransientError(FeedError):
    """Network failures, timeouts, rate limiting and 5xx responses."""


class FeedPayloadError(FeedError):
    """The upstream answered, but not with the payload we expected."""
