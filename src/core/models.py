"""Core domain models.

These dataclasses are shared across the core and adapters to avoid tight
coupling to any integration-specific types.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Tuple, Union

KIND_INCOMING = "incoming"
KIND_OUTGOING = "outgoing"
KIND_INFO = "info"

LOG_KINDS = (KIND_INCOMING, KIND_OUTGOING, KIND_INFO)


@dataclass(frozen=True)
class KeywordRule:
    """A single keyword -> reply rule. Edits are delete + add."""

    id: str
    keyword: str
    reply: str
    created_at: datetime


@dataclass(frozen=True)
class ActivityLogEntry:
    """One append-only entry in the activity log."""

    id: int
    kind: str
    text: str
    timestamp: datetime


@dataclass(frozen=True)
class KeywordReplyRequest:
    """Input for the keyword reply generator (index-aligned lists)."""

    message: str
    keywords: Tuple[str, ...]
    replies: Tuple[str, ...]

    def __post_init__(self) -> None:
        if len(self.keywords) != len(self.replies):
            raise ValueError("keywords and replies must have the same length")

    @classmethod
    def from_rules(cls, message: str, rules) -> "KeywordReplyRequest":
        rules = tuple(rules)
        return cls(
            message=message,
            keywords=tuple(rule.keyword for rule in rules),
            replies=tuple(rule.reply for rule in rules),
        )


@dataclass(frozen=True)
class AiReplyRequest:
    """Input for the AI reply generator."""

    message: str


@dataclass(frozen=True)
class ReplyResult:
    """Generator output. An empty reply means there is nothing to send."""

    reply: str = ""

    @property
    def has_reply(self) -> bool:
        return bool(self.reply.strip())


# Decision outcomes: exactly one per routed message.


@dataclass(frozen=True)
class KeywordReply:
    text: str


@dataclass(frozen=True)
class AiReply:
    text: str


@dataclass(frozen=True)
class NoReplyAiFailed:
    pass


@dataclass(frozen=True)
class NoReplyNoMatch:
    pass


@dataclass(frozen=True)
class NotReady:
    pass


DecisionOutcome = Union[KeywordReply, AiReply, NoReplyAiFailed, NoReplyNoMatch, NotReady]


def outcome_reply_text(outcome: DecisionOutcome) -> str | None:
    """Return the text to send for reply outcomes, else None."""

    if isinstance(outcome, (KeywordReply, AiReply)):
        return outcome.text
    return None


def describe_outcome(outcome: DecisionOutcome) -> str:
    """Short human-readable label used by the CLI and dashboard."""

    if isinstance(outcome, KeywordReply):
        return f"keyword reply: {outcome.text}"
    if isinstance(outcome, AiReply):
        return f"AI reply: {outcome.text}"
    if isinstance(outcome, NoReplyAiFailed):
        return "no reply (AI generation failed)"
    if isinstance(outcome, NoReplyNoMatch):
        return "no reply (no keyword match)"
    return "not ready"
