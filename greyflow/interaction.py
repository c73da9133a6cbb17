"""Operator-facing collaborators for nodes that need a human answer mid-run."""

from __future__ import annotations

import asyncio
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Awaitable, Callable

from greyflow.errors import OperatorUnavailableError
from greyflow.models import generate_id

logger = logging.getLogger(__name__)

RequestFn = Callable[[str], Awaitable[str]]


class OperatorChannel(ABC):
    """Where the engine sends questions it cannot answer from the graph alone."""

    @abstractmethod
    async def request_raw_input(self, prompt: str) -> str:
        """Ask for a node's raw input (an input node with nothing to work on)."""

    @abstractmethod
    async def request_additional_info(self, request: str) -> str:
        """Ask for information a processor reported as missing."""

    def cancel(self):
        """Resolve any outstanding question with a neutral value."""


class CallbackOperatorChannel(OperatorChannel):
    """Adapts plain async callables. A missing callable means the capability is absent."""

    def __init__(
        self,
        request_raw_input: RequestFn | None = None,
        request_additional_info: RequestFn | None = None,
    ):
        self._raw_input = request_raw_input
        self._additional_info = request_additional_info

    @property
    def supports_raw_input(self) -> bool:
        return self._raw_input is not None

    @property
    def supports_additional_info(self) -> bool:
        return self._additional_info is not None

    async def request_raw_input(self, prompt: str) -> str:
        if self._raw_input is None:
            raise NotImplementedError("No raw input callback configured")
        return await self._raw_input(prompt)

    async def request_additional_info(self, request: str) -> str:
        if self._additional_info is None:
            raise NotImplementedError("No additional info callback configured")
        return await self._additional_info(request)


@dataclass
class OperatorQuestion:
    kind: str  # raw_input | additional_info
    prompt: str
    id: str = field(default_factory=generate_id)

    def to_dict(self) -> dict:
        return {"id": self.id, "kind": self.kind, "prompt": self.prompt}


class QueueOperatorChannel(OperatorChannel):
    """Holds at most one pending question until someone calls ``respond``.

    Used by the HTTP server: the engine awaits the question while the
    client polls ``pending`` and posts the answer.
    """

    def __init__(self, timeout: float | None = None):
        self.timeout = timeout
        self.pending: OperatorQuestion | None = None
        self._future: asyncio.Future[str] | None = None

    async def request_raw_input(self, prompt: str) -> str:
        return await self._ask("raw_input", prompt)

    async def request_additional_info(self, request: str) -> str:
        return await self._ask("additional_info", request)

    def respond(self, answer: str, question_id: str | None = None) -> bool:
        """Deliver an answer. Returns False if nothing (or a different question) is pending."""
        if self.pending is None or self._future is None or self._future.done():
            return False
        if question_id and question_id != self.pending.id:
            return False
        self._future.set_result(answer)
        return True

    def cancel(self):
        if self._future is not None and not self._future.done():
            self._future.set_result("")

    async def _ask(self, kind: str, prompt: str) -> str:
        loop = asyncio.get_running_loop()
        self.pending = OperatorQuestion(kind=kind, prompt=prompt)
        self._future = loop.create_future()
        logger.info(f"Waiting for operator ({kind}): {prompt[:80]}")
        try:
            if self.timeout:
                return await asyncio.wait_for(self._future, timeout=self.timeout)
            return await self._future
        except asyncio.TimeoutError as e:
            raise OperatorUnavailableError(f"No operator answer within {self.timeout}s to: {prompt}") from e
        finally:
            self.pending = None
            self._future = None
