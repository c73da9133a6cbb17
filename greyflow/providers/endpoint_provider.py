"""Generic chat endpoint adapter: POSTs an OpenAI-style payload to any URL."""

from __future__ import annotations

import json
import logging
from typing import Any

import httpx

from greyflow.config import DEFAULT_ENDPOINT, DEFAULT_MAX_TOKENS, DEFAULT_MODEL, DEFAULT_TEMPERATURE, PROCESSOR_TIMEOUT
from greyflow.errors import ProviderError
from greyflow.providers.base import ProviderAdapter

logger = logging.getLogger(__name__)


class EndpointAdapter(ProviderAdapter):
    def __init__(
        self,
        endpoint: str = DEFAULT_ENDPOINT,
        model: str = DEFAULT_MODEL,
        client: httpx.AsyncClient | None = None,
        timeout: float = PROCESSOR_TIMEOUT,
    ):
        self.endpoint = endpoint
        self.model = model
        self._owns_client = client is None
        self.client = client or httpx.AsyncClient(timeout=timeout)

    async def generate(
        self,
        messages: list[dict],
        system: str | None = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> str:
        api_messages = [{"role": "system", "content": system}, *messages] if system else list(messages)
        payload = {"model": self.model, "messages": api_messages}

        logger.info(f"Making AI API call to: {self.endpoint}")
        try:
            response = await self.client.post(self.endpoint, json=payload)
        except httpx.HTTPError as e:
            logger.error(f"Endpoint request failed: {e}")
            raise ProviderError(f"Network error: Unable to connect to {self.endpoint}. {e}") from e

        if response.is_error:
            message = self._error_message(response.text)
            logger.error(f"API response error: {response.status_code} {message[:200]}")
            raise ProviderError(
                f"API request failed ({response.status_code}): {message}",
                status_code=response.status_code,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise ProviderError(f"Unexpected API response format. The API returned: {response.text[:500]}") from e

        return self._extract_text(data)

    async def aclose(self):
        if self._owns_client:
            await self.client.aclose()

    @staticmethod
    def _error_message(error_text: str) -> str:
        """Prefer ``reason`` or a string ``error`` from a JSON error body."""
        try:
            body = json.loads(error_text)
        except ValueError:
            return error_text
        if isinstance(body, dict):
            if body.get("reason"):
                return str(body["reason"])
            if isinstance(body.get("error"), str):
                return body["error"]
        return error_text

    @staticmethod
    def _extract_text(data: Any) -> str:
        """Pull the reply out of the handful of response shapes chat endpoints use."""
        if isinstance(data, str):
            return data

        if isinstance(data, dict):
            choices = data.get("choices")
            if choices:
                choice = choices[0]
                message = choice.get("message") or {}
                if isinstance(message, dict) and message.get("content"):
                    return message["content"]
                if choice.get("text"):
                    return choice["text"]

            message = data.get("message")
            if message:
                if isinstance(message, str):
                    return message
                if isinstance(message, dict) and message.get("content"):
                    return message["content"]

            for key in ("content", "response", "text"):
                if data.get(key):
                    return data[key]

        raise ProviderError(f"Unexpected API response format. The API returned: {json.dumps(data)[:500]}")
