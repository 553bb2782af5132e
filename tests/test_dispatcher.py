from __future__ import annotations

import asyncio
from typing import Optional

from adapters.keyword_generator import SubstringKeywordReplyGenerator
from core.activity_log import ActivityLog
from core.connection import Connected, Connecting, ConnectionGate, Disconnected
from core.dispatcher import ConversationDispatcher
from core.models import (
    AiReply,
    AiReplyRequest,
    KeywordReply,
    KeywordReplyRequest,
    NoReplyAiFailed,
    NoReplyNoMatch,
    NotReady,
    ReplyResult,
)
from core.resolver import ReplyResolver
from core.rule_store import RuleStore


class FakeNotifier:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str, str]] = []

    def notify(self, title: str, message: str, severity: str = "information") -> None:
        self.sent.append((title, message, severity))


class FakeSender:
    def __init__(self) -> None:
        self.sent: list[tuple[str, str]] = []

    async def send(self, conversation_id: str, text: str) -> None:
        self.sent.append((conversation_id, text))


class GatedAiGenerator:
    """Blocks replies for messages listed in ``blocked`` until released."""

    def __init__(self, blocked: tuple[str, ...] = ()) -> None:
        self.blocked = blocked
        self.release = asyncio.Event()
        self.on_call = None

    async def generate(self, request: AiReplyRequest) -> ReplyResult:
        if self.on_call is not None:
            self.on_call()
        if request.message in self.blocked:
            await self.release.wait()
        return ReplyResult(reply=f"re: {request.message}")


class StalledKeywordGenerator:
    async def generate(self, request: KeywordReplyRequest) -> ReplyResult:
        await asyncio.Event().wait()
        return ReplyResult()


class MutatingKeywordGenerator:
    """Edits the store mid-decision to prove the snapshot is stable."""

    def __init__(self, store: RuleStore) -> None:
        self._store = store
        self._inner = SubstringKeywordReplyGenerator()

    async def generate(self, request: KeywordReplyRequest) -> ReplyResult:
        for rule in self._store.all():
            self._store.remove(rule.id)
        self._store.add("other", "changed")
        return await self._inner.generate(request)


def _ready_gate() -> ConnectionGate:
    gate = ConnectionGate()
    gate.transition(Connecting())
    gate.transition(Connected())
    return gate


def _build(
    ai: GatedAiGenerator,
    *,
    store: Optional[RuleStore] = None,
    gate: Optional[ConnectionGate] = None,
    ai_enabled: bool = True,
    route_timeout: Optional[float] = None,
    keyword_generator=None,
    notifier: Optional[FakeNotifier] = None,
) -> tuple[ConversationDispatcher, ActivityLog, FakeSender, ConnectionGate]:
    store = store or RuleStore()
    gate = gate or _ready_gate()
    log = ActivityLog()
    sender = FakeSender()
    notifier = notifier or FakeNotifier()
    resolver = ReplyResolver(
        keyword_generator=keyword_generator or SubstringKeywordReplyGenerator(),
        ai_generator=ai,
        activity_log=log,
        notifier=notifier,
    )
    dispatcher = ConversationDispatcher(
        resolver=resolver,
        rule_store=store,
        gate=gate,
        sender=sender,
        activity_log=log,
        notifier=notifier,
        ai_enabled=lambda: ai_enabled,
        route_timeout=route_timeout,
    )
    return dispatcher, log, sender, gate


def test_keyword_reply_is_sent() -> None:
    store = RuleStore()
    store.add("price", "$10")
    dispatcher, log, sender, _ = _build(GatedAiGenerator(), store=store)

    outcome = asyncio.run(dispatcher.dispatch("alice", "price please"))

    assert outcome == KeywordReply("$10")
    assert sender.sent == [("alice", "$10")]
    assert [entry.kind for entry in log.entries()] == ["incoming", "outgoing"]


def test_not_ready_gate_yields_not_ready() -> None:
    dispatcher, log, sender, _ = _build(GatedAiGenerator(), gate=ConnectionGate())

    outcome = asyncio.run(dispatcher.dispatch("alice", "hello"))

    assert outcome == NotReady()
    assert sender.sent == []
    assert log.entries() == ()


def test_same_conversation_is_routed_in_arrival_order() -> None:
    ai = GatedAiGenerator(blocked=("first",))
    dispatcher, log, sender, _ = _build(ai)

    async def scenario():
        first = asyncio.create_task(dispatcher.dispatch("alice", "first"))
        second = asyncio.create_task(dispatcher.dispatch("alice", "second"))
        for _ in range(5):
            await asyncio.sleep(0)
        ai.release.set()
        return await asyncio.gather(first, second)

    outcomes = asyncio.run(scenario())

    assert outcomes == [AiReply("re: first"), AiReply("re: second")]
    assert sender.sent == [("alice", "re: first"), ("alice", "re: second")]
    texts = [entry.text for entry in log.entries()]
    assert texts.index('Auto-replying (AI): "re: first"') < texts.index('Received: "second"')


def test_other_conversations_are_not_blocked() -> None:
    ai = GatedAiGenerator(blocked=("slow",))
    dispatcher, _, sender, _ = _build(ai)

    async def scenario():
        slow = asyncio.create_task(dispatcher.dispatch("alice", "slow"))
        await asyncio.sleep(0)
        await dispatcher.dispatch("bob", "fast")
        assert sender.sent == [("bob", "re: fast")]
        ai.release.set()
        await slow

    asyncio.run(scenario())

    assert sender.sent == [("bob", "re: fast"), ("alice", "re: slow")]


def test_reply_not_sent_when_disconnected_mid_generation() -> None:
    ai = GatedAiGenerator()
    dispatcher, log, sender, gate = _build(ai)
    ai.on_call = lambda: gate.transition(Disconnected())

    outcome = asyncio.run(dispatcher.dispatch("alice", "hello"))

    assert outcome == AiReply("re: hello")
    assert sender.sent == []
    assert log.entries()[-1].text == "Reply not sent: WhatsApp disconnected."


def test_route_timeout_gives_up_without_reply() -> None:
    ai = GatedAiGenerator(blocked=("hello",))
    notifier = FakeNotifier()
    dispatcher, log, sender, _ = _build(ai, route_timeout=0.01, notifier=notifier)

    outcome = asyncio.run(dispatcher.dispatch("alice", "hello"))

    assert outcome == NoReplyAiFailed()
    assert sender.sent == []
    assert notifier.sent == [("Smart reply error", "Could not generate smart reply.", "error")]
    assert log.entries()[-1].text == "Reply generation timed out. No reply sent."


def test_timeout_in_keyword_phase_is_not_an_ai_failure() -> None:
    store = RuleStore()
    store.add("price", "$10")
    notifier = FakeNotifier()
    dispatcher, log, sender, _ = _build(
        GatedAiGenerator(),
        store=store,
        route_timeout=0.01,
        keyword_generator=StalledKeywordGenerator(),
        notifier=notifier,
    )

    outcome = asyncio.run(dispatcher.dispatch("alice", "price?"))

    assert outcome == NoReplyNoMatch()
    assert sender.sent == []
    assert notifier.sent == [("Keyword reply error", "Could not process keyword-based reply.", "error")]
    texts = [entry.text for entry in log.entries()]
    assert "No keyword match. Attempting AI smart reply..." not in texts
    assert texts[-1] == "Reply generation timed out. No reply sent."


def test_conversation_locks_are_released_when_idle() -> None:
    ai = GatedAiGenerator(blocked=("first",))
    dispatcher, _, sender, _ = _build(ai)

    async def scenario():
        first = asyncio.create_task(dispatcher.dispatch("alice", "first"))
        second = asyncio.create_task(dispatcher.dispatch("alice", "second"))
        await asyncio.sleep(0)
        assert dispatcher.active_conversations == ("alice",)
        ai.release.set()
        await asyncio.gather(first, second)
        await dispatcher.dispatch("bob", "third")

    asyncio.run(scenario())

    assert len(sender.sent) == 3
    assert dispatcher.active_conversations == ()


def test_rule_edits_during_routing_are_not_observed() -> None:
    store = RuleStore()
    store.add("price", "$10")
    dispatcher, _, sender, _ = _build(
        GatedAiGenerator(),
        store=store,
        ai_enabled=False,
        keyword_generator=MutatingKeywordGenerator(store),
    )

    outcome = asyncio.run(dispatcher.dispatch("alice", "price?"))

    assert outcome == KeywordReply("$10")
    assert sender.sent == [("alice", "$10")]
    assert [rule.keyword for rule in store.all()] == ["other"]


def test_run_consumes_gate_messages() -> None:
    store = RuleStore()
    store.add("price", "$10")
    dispatcher, _, sender, gate = _build(GatedAiGenerator(), store=store, ai_enabled=False)

    async def scenario():
        gate.offer("alice", "price?")
        worker = asyncio.create_task(dispatcher.run())
        for _ in range(10):
            await asyncio.sleep(0)
            if sender.sent:
                break
        worker.cancel()

    asyncio.run(scenario())

    assert sender.sent == [("alice", "$10")]
