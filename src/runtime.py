"""Object graph for the auto-reply service.

Both the CLI and the dashboard build the same runtime so the routing
behavior is identical regardless of the frontend.
"""

from __future__ import annotations

import logging
from typing import Callable, Optional

from adapters.json_rule_repository import JsonRuleRepository
from adapters.keyword_generator import SubstringKeywordReplyGenerator
from adapters.openai_generator import OpenAIReplyGenerator
from adapters.sqlite_activity import SQLiteActivityStore
from adapters.whatsapp_session import SimulatedWhatsAppSession
from core.activity_log import ActivityLog
from core.config import ActivityConfig, AiReplyConfig, RoutingConfig
from core.connection import ConnectionGate, ConnectionState
from core.dispatcher import ConversationDispatcher
from core.models import KIND_INFO
from core.ports import AiReplyGenerator, NotifierPort
from core.resolver import ReplyResolver
from core.rule_store import RuleStore

LOGGER = logging.getLogger(__name__)


class AutoReplyRuntime:
    """Holds the wired components and the mutable AI toggle."""

    def __init__(
        self,
        rule_store: RuleStore,
        gate: ConnectionGate,
        session: SimulatedWhatsAppSession,
        activity_log: ActivityLog,
        resolver: ReplyResolver,
        dispatcher: ConversationDispatcher,
        ai_config: AiReplyConfig,
        activity_store: Optional[SQLiteActivityStore] = None,
        on_ai_toggle: Optional[Callable[[bool], None]] = None,
    ) -> None:
        self.rule_store = rule_store
        self.gate = gate
        self.session = session
        self.activity_log = activity_log
        self.resolver = resolver
        self.dispatcher = dispatcher
        self.ai_config = ai_config
        self.activity_store = activity_store
        self._ai_enabled = ai_config.enabled
        self._on_ai_toggle = on_ai_toggle

    @property
    def ai_enabled(self) -> bool:
        return self._ai_enabled

    def set_ai_enabled(self, enabled: bool) -> None:
        """Flip the AI fallback, persist it, and record the change."""

        enabled = bool(enabled)
        if enabled == self._ai_enabled:
            return
        self._ai_enabled = enabled
        if self._on_ai_toggle is not None:
            self._on_ai_toggle(enabled)
        self.activity_log.append(KIND_INFO, f"AI smart replies {'enabled' if enabled else 'disabled'}.")


def _log_readiness(activity_log: ActivityLog) -> Callable[[ConnectionState, ConnectionState], None]:
    def listener(old_state: ConnectionState, new_state: ConnectionState) -> None:
        was_ready = old_state.name == "connected"
        is_ready = new_state.name == "connected"
        if is_ready and not was_ready:
            activity_log.append(KIND_INFO, "WhatsApp connection established.")
        elif was_ready and not is_ready:
            activity_log.append(KIND_INFO, "WhatsApp disconnected.")

    return listener


def build_runtime(
    *,
    rules_path: str,
    session_path: str,
    ai_config: AiReplyConfig,
    routing_config: RoutingConfig,
    activity_config: ActivityConfig,
    notifier: NotifierPort,
    db_path: Optional[str] = None,
    ai_generator: Optional[AiReplyGenerator] = None,
    on_ai_toggle: Optional[Callable[[bool], None]] = None,
) -> AutoReplyRuntime:
    """Wire storage, transport, generators, and routing into one runtime."""

    activity_log = ActivityLog(max_entries=activity_config.max_entries)

    activity_store: Optional[SQLiteActivityStore] = None
    if activity_config.persist and db_path:
        activity_store = SQLiteActivityStore(db_path)
        activity_store.init_db()
        removed = activity_store.cleanup(activity_config.ttl_days)
        LOGGER.info("Activity cleanup removed %s entries", removed)
        activity_log.subscribe(activity_store.append)

    rule_store = RuleStore.hydrate(JsonRuleRepository(rules_path))

    gate = ConnectionGate()
    gate.add_listener(_log_readiness(activity_log))
    session = SimulatedWhatsAppSession(gate, session_path)

    if ai_generator is None:
        # The OpenAI client is created lazily, so a missing key only matters
        # once AI replies are actually requested.
        ai_generator = OpenAIReplyGenerator(ai_config)

    resolver = ReplyResolver(
        keyword_generator=SubstringKeywordReplyGenerator(),
        ai_generator=ai_generator,
        activity_log=activity_log,
        notifier=notifier,
    )

    runtime: AutoReplyRuntime

    dispatcher = ConversationDispatcher(
        resolver=resolver,
        rule_store=rule_store,
        gate=gate,
        sender=session,
        activity_log=activity_log,
        notifier=notifier,
        ai_enabled=lambda: runtime.ai_enabled,
        route_timeout=routing_config.route_timeout_seconds,
    )

    runtime = AutoReplyRuntime(
        rule_store=rule_store,
        gate=gate,
        session=session,
        activity_log=activity_log,
        resolver=resolver,
        dispatcher=dispatcher,
        ai_config=ai_config,
        activity_store=activity_store,
        on_ai_toggle=on_ai_toggle,
    )
    return runtime
