"""Error types raised by the core domain."""

from __future__ import annotations


class AutoReplyError(Exception):
    """Base class for autoreply domain errors."""


class ValidationError(AutoReplyError):
    """Rule input rejected before it reaches the store."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class DuplicateKeywordError(AutoReplyError):
    """A rule with the same normalized keyword already exists."""

    def __init__(self, keyword: str) -> None:
        super().__init__(f"Keyword already exists: {keyword}")
        self.keyword = keyword


class GeneratorFailure(AutoReplyError):
    """A reply generator failed or returned an unusable result."""


class NotReadyError(AutoReplyError):
    """The messaging transport is not connected."""


class ConnectionStateError(AutoReplyError):
    """An illegal connection state transition was requested."""
