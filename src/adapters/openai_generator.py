"""OpenAI-backed smart reply generator.

Implements the core AiReplyGenerator. The model is asked for a JSON object
``{"reply": "..."}`` and the payload is validated with pydantic before the
core ever sees it.
"""

from __future__ import annotations

import logging
import os
from typing import Any, Optional

from dotenv import load_dotenv
from openai import AsyncOpenAI, OpenAIError
from pydantic import BaseModel, ValidationError

from core.config import AiReplyConfig
from core.errors import GeneratorFailure
from core.models import AiReplyRequest, ReplyResult

LOGGER = logging.getLogger(__name__)

DEFAULT_SYSTEM_PROMPT = "You are a helpful assistant responding to WhatsApp messages."

_FORMAT_INSTRUCTIONS = (
    'Respond with a JSON object of the form {"reply": "<text>"}. '
    'Use an empty string for "reply" if you cannot produce a suitable reply.'
)


class ReplyOutput(BaseModel):
    """Schema the model output must satisfy."""

    reply: str = ""


def build_messages(system_prompt: str, message: str) -> list[dict[str, str]]:
    return [
        {"role": "system", "content": f"{system_prompt}\n\n{_FORMAT_INSTRUCTIONS}"},
        {"role": "user", "content": f"Generate a suitable reply to the following message:\n{message}"},
    ]


def parse_reply(content: Optional[str]) -> ReplyResult:
    """Validate raw model output into a ReplyResult."""

    if not content:
        return ReplyResult(reply="")
    try:
        output = ReplyOutput.model_validate_json(content)
    except ValidationError as exc:
        raise GeneratorFailure(f"Model returned an invalid reply payload: {exc.error_count()} error(s)") from exc
    return ReplyResult(reply=output.reply.strip())


def build_client(timeout_seconds: float) -> AsyncOpenAI:
    """Create an AsyncOpenAI client from environment variables."""

    load_dotenv()
    api_key = os.getenv("OPENAI_API_KEY")
    # Fail fast on missing credentials instead of on the first message.
    if not api_key:
        raise RuntimeError("Missing OPENAI_API_KEY in environment")
    base_url = os.getenv("OPENAI_BASE_URL") or None
    LOGGER.info("Initializing OpenAI client")
    return AsyncOpenAI(api_key=api_key, base_url=base_url, timeout=timeout_seconds)


class OpenAIReplyGenerator:
    """Generates a free-form reply with a chat completion call."""

    def __init__(self, config: AiReplyConfig, client: Any = None) -> None:
        self._config = config
        self._client = client

    def _get_client(self) -> Any:
        if self._client is None:
            self._client = build_client(self._config.timeout_seconds)
        return self._client

    async def generate(self, request: AiReplyRequest) -> ReplyResult:
        system_prompt = self._config.system_prompt or DEFAULT_SYSTEM_PROMPT
        try:
            response = await self._get_client().chat.completions.create(
                model=self._config.model,
                messages=build_messages(system_prompt, request.message),
                temperature=self._config.temperature,
                max_tokens=self._config.max_tokens,
                response_format={"type": "json_object"},
            )
        except OpenAIError as exc:
            raise GeneratorFailure(f"OpenAI request failed: {exc}") from exc

        if not response.choices:
            return ReplyResult(reply="")
        return parse_reply(response.choices[0].message.content)
