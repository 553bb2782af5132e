from __future__ import annotations

import asyncio
from types import SimpleNamespace
from typing import Optional

import pytest
from openai import OpenAIError

from adapters.openai_generator import OpenAIReplyGenerator, parse_reply
from core.config import AiReplyConfig
from core.errors import GeneratorFailure
from core.models import AiReplyRequest


class FakeCompletions:
    def __init__(self, content: Optional[str] = None, error: Optional[Exception] = None) -> None:
        self.calls: list[dict] = []
        self._content = content
        self._error = error

    async def create(self, **kwargs):
        self.calls.append(kwargs)
        if self._error is not None:
            raise self._error
        message = SimpleNamespace(content=self._content)
        return SimpleNamespace(choices=[SimpleNamespace(message=message)])


class FakeClient:
    def __init__(self, completions: FakeCompletions) -> None:
        self.chat = SimpleNamespace(completions=completions)


def _config() -> AiReplyConfig:
    return AiReplyConfig(
        enabled=True,
        model="gpt-4o-mini",
        system_prompt="",
        temperature=0.2,
        max_tokens=120,
        timeout_seconds=5,
    )


def test_reply_is_parsed_and_trimmed() -> None:
    completions = FakeCompletions(content='{"reply": "  Sure!  "}')
    generator = OpenAIReplyGenerator(_config(), client=FakeClient(completions))

    result = asyncio.run(generator.generate(AiReplyRequest(message="can you help?")))

    assert result.reply == "Sure!"
    call = completions.calls[0]
    assert call["model"] == "gpt-4o-mini"
    assert call["response_format"] == {"type": "json_object"}
    assert "can you help?" in call["messages"][-1]["content"]
    assert "WhatsApp" in call["messages"][0]["content"]


def test_empty_reply_means_no_reply() -> None:
    generator = OpenAIReplyGenerator(_config(), client=FakeClient(FakeCompletions(content='{"reply": ""}')))

    result = asyncio.run(generator.generate(AiReplyRequest(message="hi")))

    assert not result.has_reply


def test_api_error_becomes_generator_failure() -> None:
    completions = FakeCompletions(error=OpenAIError("rate limited"))
    generator = OpenAIReplyGenerator(_config(), client=FakeClient(completions))

    with pytest.raises(GeneratorFailure):
        asyncio.run(generator.generate(AiReplyRequest(message="hi")))


def test_invalid_payload_is_rejected() -> None:
    with pytest.raises(GeneratorFailure):
        parse_reply("not json at all")
    with pytest.raises(GeneratorFailure):
        parse_reply('{"reply": 42}')


def test_missing_content_is_empty_reply() -> None:
    assert parse_reply(None).reply == ""
