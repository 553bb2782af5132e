"""Core reply routing decision.

This module is integration-agnostic. It only relies on ports for reply
generation and notifications, enabling other transports or LLM backends
without changes here.

The routing order is strict:
1) Refuse when the transport is not ready (no log entries, no generator calls)
2) Log the incoming message
3) Keyword phase (only with rules): first listed keyword found wins
4) AI phase (only without a keyword match and with AI enabled)
5) Otherwise log that no reply was sent
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Optional, Sequence

from core.activity_log import ActivityLog
from core.models import (
    KIND_INCOMING,
    KIND_INFO,
    KIND_OUTGOING,
    AiReply,
    AiReplyRequest,
    DecisionOutcome,
    KeywordReply,
    KeywordReplyRequest,
    KeywordRule,
    NoReplyAiFailed,
    NoReplyNoMatch,
    NotReady,
)
from core.ports import (
    SEVERITY_ERROR,
    AiReplyGenerator,
    KeywordReplyGenerator,
    NotifierPort,
)

LOGGER = logging.getLogger(__name__)


@dataclass
class RouteProgress:
    """How far a route got; read by callers that abandon it on timeout."""

    ai_started: bool = False


class ReplyResolver:
    """Decides the outcome for one incoming message and logs every step."""

    def __init__(
        self,
        keyword_generator: KeywordReplyGenerator,
        ai_generator: Optional[AiReplyGenerator],
        activity_log: ActivityLog,
        notifier: NotifierPort,
    ) -> None:
        self._keyword_generator = keyword_generator
        self._ai_generator = ai_generator
        self._log = activity_log
        self._notifier = notifier

    async def route(
        self,
        message: str,
        rules: Sequence[KeywordRule],
        ai_enabled: bool,
        connection_ready: bool,
        progress: Optional[RouteProgress] = None,
    ) -> DecisionOutcome:
        """Route one message through keyword match, then AI fallback."""

        if not connection_ready:
            self._notifier.notify(
                "WhatsApp not ready",
                "Cannot process message, WhatsApp is not connected.",
                SEVERITY_ERROR,
            )
            return NotReady()

        # Freeze the snapshot so edits made while we await are never observed.
        rules = tuple(rules)

        self._log.append(KIND_INCOMING, f'Received: "{message}"')

        if rules:
            reply = await self._keyword_phase(message, rules)
            if reply:
                self._log.append(KIND_OUTGOING, f'Auto-replying (keyword): "{reply}"')
                return KeywordReply(reply)

        if ai_enabled and self._ai_generator is not None:
            if progress is not None:
                progress.ai_started = True
            return await self._ai_phase(message)

        self._log.append(KIND_INFO, "No keyword match and AI replies are disabled. No reply sent.")
        return NoReplyNoMatch()

    async def _keyword_phase(self, message: str, rules: Sequence[KeywordRule]) -> str:
        request = KeywordReplyRequest.from_rules(message, rules)
        try:
            result = await self._keyword_generator.generate(request)
        except Exception:
            LOGGER.warning("Keyword reply generator failed", exc_info=True)
            self._notifier.notify(
                "Keyword reply error",
                "Could not process keyword-based reply.",
                SEVERITY_ERROR,
            )
            self._log.append(KIND_INFO, "Error processing keyword reply.")
            return ""
        # Whitespace-only replies count as no match.
        return result.reply if result.has_reply else ""

    async def _ai_phase(self, message: str) -> DecisionOutcome:
        self._log.append(KIND_INFO, "No keyword match. Attempting AI smart reply...")
        try:
            result = await self._ai_generator.generate(AiReplyRequest(message=message))
        except Exception:
            LOGGER.warning("AI reply generator failed", exc_info=True)
            self._notifier.notify(
                "Smart reply error",
                "Could not generate smart reply.",
                SEVERITY_ERROR,
            )
            self._log.append(KIND_INFO, "Error generating AI smart reply.")
            return NoReplyAiFailed()

        if not result.has_reply:
            self._log.append(KIND_INFO, "AI could not generate a smart reply.")
            return NoReplyAiFailed()

        self._log.append(KIND_OUTGOING, f'Auto-replying (AI): "{result.reply}"')
        return AiReply(result.reply)
