from __future__ import annotations

import asyncio

from adapters.log_notifier import LoggingNotifier
from core.config import ActivityConfig, AiReplyConfig, RoutingConfig
from core.models import AiReply, AiReplyRequest, KeywordReply, ReplyResult
from runtime import build_runtime


class FakeAiGenerator:
    async def generate(self, request: AiReplyRequest) -> ReplyResult:
        return ReplyResult(reply="Sure!")


def _build(tmp_path, *, ai_enabled: bool = False, toggles: list | None = None):
    return build_runtime(
        rules_path=str(tmp_path / "rules.json"),
        session_path=str(tmp_path / ".wa_session"),
        db_path=str(tmp_path / "autoreply.db"),
        ai_config=AiReplyConfig(
            enabled=ai_enabled,
            model="gpt-4o-mini",
            system_prompt="",
            temperature=0.7,
            max_tokens=100,
            timeout_seconds=5,
        ),
        routing_config=RoutingConfig(route_timeout_seconds=5),
        activity_config=ActivityConfig(max_entries=100, persist=True, ttl_days=30),
        notifier=LoggingNotifier(),
        ai_generator=FakeAiGenerator(),
        on_ai_toggle=toggles.append if toggles is not None else None,
    )


def test_end_to_end_keyword_reply(tmp_path) -> None:
    runtime = _build(tmp_path)
    runtime.rule_store.add("price", "$10")
    runtime.session.connect()
    runtime.session.confirm_scan()

    outcome = asyncio.run(runtime.dispatcher.dispatch("alice", "what is the price?"))

    assert outcome == KeywordReply("$10")
    assert [item.text for item in runtime.session.sent] == ["$10"]
    texts = [entry.text for entry in runtime.activity_log.entries()]
    assert texts[0] == "WhatsApp connection established."
    assert runtime.activity_store is not None
    assert len(runtime.activity_store.list_entries()) == len(texts)


def test_rules_survive_restart(tmp_path) -> None:
    _build(tmp_path).rule_store.add("Hours", "9-5")

    reloaded = _build(tmp_path)

    assert [rule.keyword for rule in reloaded.rule_store.all()] == ["hours"]


def test_ai_toggle_is_persisted_and_logged(tmp_path) -> None:
    toggles: list = []
    runtime = _build(tmp_path, toggles=toggles)
    runtime.session.connect()
    runtime.session.confirm_scan()

    runtime.set_ai_enabled(True)
    runtime.set_ai_enabled(True)
    outcome = asyncio.run(runtime.dispatcher.dispatch("alice", "hello"))

    assert toggles == [True]
    assert outcome == AiReply("Sure!")
    assert "AI smart replies enabled." in [entry.text for entry in runtime.activity_log.entries()]


def test_disconnect_is_logged(tmp_path) -> None:
    runtime = _build(tmp_path)
    runtime.session.connect()
    runtime.session.confirm_scan()
    runtime.session.disconnect()

    assert runtime.activity_log.entries()[-1].text == "WhatsApp disconnected."
