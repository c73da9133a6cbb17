"""OpenAI (GPT-4o, o3) provider adapter."""

from __future__ import annotations

import logging
from typing import Any

import openai

from greyflow.config import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE, OPENAI_API_KEY
from greyflow.errors import ProviderError
from greyflow.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)


class OpenAIAdapter(ProviderAdapter):
    def __init__(self, model: str = "gpt-4o"):
        self.model = model
        self.client = openai.AsyncOpenAI(api_key=OPENAI_API_KEY or None)

    async def generate(
        self,
        messages: list[dict],
        system: str | None = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> str:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": self._format_messages(messages, system),
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

        try:
            raw = await self.client.chat.completions.create(**kwargs)
        except openai.APIStatusError as e:
            logger.error(f"OpenAI API error: {e}")
            raise ProviderError(f"API request failed ({e.status_code}): {e.message}", status_code=e.status_code) from e
        except openai.APIError as e:
            logger.error(f"OpenAI API error: {e}")
            raise ProviderError(f"OpenAI request failed: {e}") from e

        return raw.choices[0].message.content or ""

    async def aclose(self):
        await self.client.close()

    def _format_messages(self, messages: list[dict], system: str | None = None) -> list[dict]:
        formatted = []
        if system:
            formatted.append({"role": "system", "content": system})

        for msg in messages:
            role = msg.get("role", "user")
            if role not in ("system", "assistant"):
                role = "user"
            formatted.append({"role": role, "content": str(msg.get("content", ""))})
        return formatted
