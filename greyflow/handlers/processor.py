"""Processor nodes: text generation with the reserved-prefix protocol."""

from __future__ import annotations

import logging
from typing import Callable

from greyflow.directives import parse_directive
from greyflow.handlers.base import HandlerRequest, NodeHandler
from greyflow.models import NodeKind, NodeResult
from greyflow.providers import ProviderAdapter, create_provider

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[str | None, str | None], ProviderAdapter]


class ProcessorHandler(NodeHandler):
    kind = NodeKind.PROCESSOR

    def __init__(self, provider_factory: ProviderFactory = create_provider):
        self.provider_factory = provider_factory

    async def execute(self, request: HandlerRequest) -> NodeResult:
        node = request.node
        messages = [*request.history, {"role": "user", "content": request.input}]

        provider = self.provider_factory(node.model, node.api_endpoint)
        try:
            reply = await provider.generate(messages, system=node.system_prompt)
        finally:
            await provider.aclose()

        directive = parse_directive(reply)
        logger.debug(f"Processor {node.id} replied with {directive.kind.value}")
        if directive.is_final:
            return NodeResult.complete(directive.text)
        return NodeResult.ask_more_info(directive.text, content=reply)
