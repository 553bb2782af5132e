"""Ports (interfaces) used by the core pipeline.

Ports define the minimal contracts for persistence, reply generation,
notifications, and delivery so that the core can be reused with different
backends.
"""

from __future__ import annotations

from typing import Protocol, Sequence

from core.models import (
    ActivityLogEntry,
    AiReplyRequest,
    KeywordReplyRequest,
    KeywordRule,
    ReplyResult,
)

SEVERITY_INFORMATION = "information"
SEVERITY_WARNING = "warning"
SEVERITY_ERROR = "error"


class RulePersistencePort(Protocol):
    """Storage for the keyword rule collection."""

    def load(self) -> list[KeywordRule]:
        ...

    def save(self, rules: Sequence[KeywordRule]) -> None:
        ...


class KeywordReplyGenerator(Protocol):
    """Returns the reply of the first listed keyword found in the message."""

    async def generate(self, request: KeywordReplyRequest) -> ReplyResult:
        ...


class AiReplyGenerator(Protocol):
    """Produces a free-form reply for a message with no keyword match."""

    async def generate(self, request: AiReplyRequest) -> ReplyResult:
        ...


class NotifierPort(Protocol):
    """User-facing notifications (toasts in the dashboard)."""

    def notify(self, title: str, message: str, severity: str = SEVERITY_INFORMATION) -> None:
        ...


class ActivitySinkPort(Protocol):
    """Receives every activity log entry as it is appended."""

    def append(self, entry: ActivityLogEntry) -> None:
        ...


class SenderPort(Protocol):
    """Outbound delivery of a reply to a conversation."""

    async def send(self, conversation_id: str, text: str) -> None:
        ...
