"""Deterministic keyword reply generator.

Implements the core KeywordReplyGenerator with plain substring matching, so
keyword replies never depend on a network call.
"""

from __future__ import annotations

from core.models import KeywordReplyRequest, ReplyResult
from core.rules_engine import match_reply


class SubstringKeywordReplyGenerator:
    """Returns the reply of the first listed keyword contained in the message."""

    async def generate(self, request: KeywordReplyRequest) -> ReplyResult:
        return ReplyResult(reply=match_reply(request.message, request.keywords, request.replies))
