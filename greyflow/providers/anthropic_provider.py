"""Anthropic (Claude) provider adapter."""

from __future__ import annotations

import logging
from typing import Any

import anthropic

from greyflow.config import ANTHROPIC_API_KEY, DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE
from greyflow.errors import ProviderError
from greyflow.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)


class AnthropicAdapter(ProviderAdapter):
    def __init__(self, model: str = "claude-sonnet-4-5-20250929"):
        self.model = model
        self.client = anthropic.AsyncAnthropic(api_key=ANTHROPIC_API_KEY or None)

    async def generate(
        self,
        messages: list[dict],
        system: str | None = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> str:
        kwargs: dict[str, Any] = {
            "model": self.model,
            "messages": self._format_messages(messages),
            "max_tokens": max_tokens,
            "temperature": temperature,
        }

        if system:
            kwargs["system"] = system

        try:
            raw = await self.client.messages.create(**kwargs)
        except anthropic.APIStatusError as e:
            logger.error(f"Anthropic API error: {e}")
            raise ProviderError(f"API request failed ({e.status_code}): {e.message}", status_code=e.status_code) from e
        except anthropic.APIError as e:
            logger.error(f"Anthropic API error: {e}")
            raise ProviderError(f"Anthropic request failed: {e}") from e

        return "\n".join(block.text for block in raw.content if block.type == "text")

    async def aclose(self):
        await self.client.close()

    def _format_messages(self, messages: list[dict]) -> list[dict]:
        """Convert our internal format to Anthropic's format."""
        formatted = []
        for msg in messages:
            role = msg.get("role", "user")
            if role == "system":
                continue  # system messages go via the system parameter
            if role != "assistant":
                role = "user"
            formatted.append({"role": role, "content": str(msg.get("content", ""))})
        return formatted
