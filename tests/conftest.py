"""Shared fakes: scripted providers, handlers and observers."""

from __future__ import annotations

import asyncio

import pytest

from greyflow.handlers import HandlerRegistry, NodeHandler
from greyflow.handlers.basic import InputHandler, OutputHandler
from greyflow.handlers.processor import ProcessorHandler
from greyflow.models import NodeKind, NodeResult, WorkflowGraph
from greyflow.providers import ProviderAdapter


class FakeProvider(ProviderAdapter):
    """Returns scripted replies in order; the last one repeats.

    A reply may be a callable taking the message list, or an exception
    instance to raise.
    """

    def __init__(self, *replies, model: str = "fake"):
        self.model = model
        self.replies = list(replies) or [""]
        self.calls: list[dict] = []
        self.closed = 0

    async def generate(self, messages, system=None, temperature=0.7, max_tokens=4096):
        self.calls.append({"messages": [dict(m) for m in messages], "system": system})
        index = min(len(self.calls), len(self.replies)) - 1
        reply = self.replies[index]
        if isinstance(reply, Exception):
            raise reply
        if callable(reply):
            return reply(messages)
        return reply

    async def aclose(self):
        self.closed += 1


class HangingProvider(ProviderAdapter):
    """Never answers until cancelled."""

    model = "hang"

    def __init__(self):
        self.started = asyncio.Event()
        self.cancelled = False

    async def generate(self, messages, system=None, temperature=0.7, max_tokens=4096):
        self.started.set()
        try:
            await asyncio.Event().wait()
        except asyncio.CancelledError:
            self.cancelled = True
            raise
        return ""


class ScriptedHandler(NodeHandler):
    """Returns canned ``NodeResult`` objects and records every request."""

    def __init__(self, kind: NodeKind, *results):
        self.kind = kind
        self.results = list(results)
        self.requests = []

    async def execute(self, request):
        self.requests.append(request)
        index = min(len(self.requests), len(self.results)) - 1
        result = self.results[index]
        if isinstance(result, Exception):
            raise result
        if callable(result):
            return result(request)
        return result


class RecordingObserver:
    def __init__(self):
        self.steps: list[str] = []
        self.statuses: list[tuple[str, str]] = []

    def on_step(self, line: str) -> None:
        self.steps.append(line)

    def on_status_change(self, node_id: str, status: str) -> None:
        self.statuses.append((node_id, status))

    def final_status(self) -> dict[str, str]:
        result: dict[str, str] = {}
        for node_id, status in self.statuses:
            result[node_id] = status
        return result


def make_graph(nodes: list[dict], edges: list[tuple[str, str]] = ()) -> WorkflowGraph:
    return WorkflowGraph.model_validate({
        "nodes": nodes,
        "edges": [{"source": s, "target": t} for s, t in edges],
    })


def build_registry(provider: ProviderAdapter | dict[str, ProviderAdapter]) -> HandlerRegistry:
    """Input, output and processor handlers wired to fake providers.

    A dict maps a node's ``model`` to its provider.
    """
    if isinstance(provider, dict):
        factory = lambda model, endpoint: provider[model]  # noqa: E731
    else:
        factory = lambda model, endpoint: provider  # noqa: E731

    registry = HandlerRegistry()
    registry.register(NodeKind.INPUT, InputHandler())
    registry.register(NodeKind.OUTPUT, OutputHandler())
    registry.register(NodeKind.PROCESSOR, ProcessorHandler(factory))
    return registry


@pytest.fixture
def observer():
    return RecordingObserver()
