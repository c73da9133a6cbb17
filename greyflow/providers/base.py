"""Base provider adapter: abstract interface for all text-generation backends."""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from greyflow.config import DEFAULT_MAX_TOKENS, DEFAULT_TEMPERATURE

logger = logging.getLogger(__name__)


class ProviderAdapter(ABC):
    """Sends a chat transcript to a model and returns the reply text."""

    model: str

    @abstractmethod
    async def generate(
        self,
        messages: list[dict],
        system: str | None = None,
        temperature: float = DEFAULT_TEMPERATURE,
        max_tokens: int = DEFAULT_MAX_TOKENS,
    ) -> str:
        """Call the model and return its text.

        ``messages`` is a list of ``{"role": "user"|"assistant", "content": str}``.
        Raises ``ProviderError`` on any non-successful response.
        """

    async def aclose(self):
        """Release network resources held by the adapter."""
