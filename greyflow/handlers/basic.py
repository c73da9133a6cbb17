"""Input and output nodes."""

from __future__ import annotations

from greyflow.handlers.base import HandlerRequest, NodeHandler
from greyflow.models import NodeKind, NodeResult

DEFAULT_INPUT_PROMPT = "Please provide input for this step:"


class InputHandler(NodeHandler):
    kind = NodeKind.INPUT

    async def execute(self, request: HandlerRequest) -> NodeResult:
        if not request.input.strip():
            return NodeResult.ask_input(request.node.prompt or DEFAULT_INPUT_PROMPT)
        return NodeResult.complete(request.input)


class OutputHandler(NodeHandler):
    kind = NodeKind.OUTPUT

    async def execute(self, request: HandlerRequest) -> NodeResult:
        return NodeResult.complete(request.input)
