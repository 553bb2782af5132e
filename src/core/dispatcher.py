"""Per-conversation serialization of routing calls.

Messages within one conversation are routed strictly one after another so
log entries and replies keep arrival order. Different conversations may be
routed concurrently; they only share the read-only rule snapshot.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from core.activity_log import ActivityLog
from core.connection import ConnectionGate, IncomingMessage
from core.errors import NotReadyError
from core.models import (
    KIND_INFO,
    DecisionOutcome,
    NoReplyAiFailed,
    NoReplyNoMatch,
    outcome_reply_text,
)
from core.ports import SEVERITY_ERROR, NotifierPort, SenderPort
from core.resolver import ReplyResolver, RouteProgress
from core.rule_store import RuleStore

LOGGER = logging.getLogger(__name__)


class ConversationDispatcher:
    """Feeds messages to the resolver and hands replies to the sender."""

    def __init__(
        self,
        resolver: ReplyResolver,
        rule_store: RuleStore,
        gate: ConnectionGate,
        sender: SenderPort,
        activity_log: ActivityLog,
        notifier: NotifierPort,
        ai_enabled: Callable[[], bool],
        route_timeout: Optional[float] = None,
    ) -> None:
        self._resolver = resolver
        self._rule_store = rule_store
        self._gate = gate
        self._sender = sender
        self._log = activity_log
        self._notifier = notifier
        self._ai_enabled = ai_enabled
        self._route_timeout = route_timeout or None
        self._locks: dict[str, asyncio.Lock] = {}
        self._lock_users: dict[str, int] = {}
        self._tasks: set[asyncio.Task] = set()

    @property
    def active_conversations(self) -> tuple[str, ...]:
        """Conversation ids with a routing call running or waiting."""

        return tuple(self._locks)

    async def dispatch(self, conversation_id: str, text: str) -> DecisionOutcome:
        """Route one message and send the reply if the transport is still up."""

        lock = self._locks.setdefault(conversation_id, asyncio.Lock())
        self._lock_users[conversation_id] = self._lock_users.get(conversation_id, 0) + 1
        try:
            async with lock:
                return await self._dispatch_locked(conversation_id, text)
        finally:
            self._lock_users[conversation_id] -= 1
            if not self._lock_users[conversation_id]:
                del self._lock_users[conversation_id]
                del self._locks[conversation_id]

    async def _dispatch_locked(self, conversation_id: str, text: str) -> DecisionOutcome:
        rules = self._rule_store.all()
        ai_enabled = self._ai_enabled()
        outcome = await self._route(text, rules, ai_enabled)

        reply = outcome_reply_text(outcome)
        if reply is None:
            return outcome

        # Readiness may have dropped while a generator was in flight.
        if not self._gate.ready:
            self._log.append(KIND_INFO, "Reply not sent: WhatsApp disconnected.")
            return outcome

        try:
            await self._sender.send(conversation_id, reply)
        except NotReadyError:
            self._log.append(KIND_INFO, "Reply not sent: WhatsApp disconnected.")
            return outcome
        LOGGER.info("Reply sent to %s", conversation_id)
        return outcome

    async def _route(self, text: str, rules, ai_enabled: bool) -> DecisionOutcome:
        progress = RouteProgress()
        route = self._resolver.route(text, rules, ai_enabled, self._gate.ready, progress)
        if self._route_timeout is None:
            return await route
        try:
            return await asyncio.wait_for(route, timeout=self._route_timeout)
        except asyncio.TimeoutError:
            LOGGER.warning("Routing timed out after %ss", self._route_timeout)
            if progress.ai_started:
                self._notifier.notify("Smart reply error", "Could not generate smart reply.", SEVERITY_ERROR)
                self._log.append(KIND_INFO, "Reply generation timed out. No reply sent.")
                return NoReplyAiFailed()
            self._notifier.notify("Keyword reply error", "Could not process keyword-based reply.", SEVERITY_ERROR)
            self._log.append(KIND_INFO, "Reply generation timed out. No reply sent.")
            return NoReplyNoMatch()

    async def run(self) -> None:
        """Consume the gate's message channel until cancelled."""

        async for message in self._gate.messages():
            # Lock waiters are served FIFO, so per-conversation order survives the fan-out.
            task = asyncio.create_task(self._dispatch_safely(message))
            self._tasks.add(task)
            task.add_done_callback(self._tasks.discard)

    async def _dispatch_safely(self, message: IncomingMessage) -> None:
        try:
            await self.dispatch(message.conversation_id, message.text)
        except Exception:
            LOGGER.exception("Error while routing message for %s", message.conversation_id)
