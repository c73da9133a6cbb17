"""PDF and Word nodes: structure the input, render it, report the file name."""

from __future__ import annotations

import asyncio
from pathlib import Path

from greyflow.config import OUTPUT_DIR
from greyflow.documents import render_and_save, structure_document
from greyflow.handlers.base import HandlerRequest, NodeHandler
from greyflow.handlers.processor import ProviderFactory
from greyflow.models import NodeKind, NodeResult


class DocumentHandler(NodeHandler):
    """``provider_factory`` is optional; without it sections come from a markdown parse."""

    def __init__(
        self,
        kind: NodeKind,
        provider_factory: ProviderFactory | None = None,
        output_dir: Path = OUTPUT_DIR,
    ):
        if kind not in (NodeKind.PDF, NodeKind.WORD):
            raise ValueError(f"DocumentHandler cannot render {kind.value} nodes")
        self.kind = kind
        self.provider_factory = provider_factory
        self.output_dir = output_dir

    async def execute(self, request: HandlerRequest) -> NodeResult:
        node = request.node
        config = node.document_config

        provider = self.provider_factory(node.model, node.api_endpoint) if self.provider_factory else None
        try:
            document = await structure_document(request.input, config.document_type, provider)
        finally:
            if provider is not None:
                await provider.aclose()

        confirmation = await asyncio.to_thread(
            render_and_save,
            document,
            self.kind.value,
            config.document_type,
            config.filename,
            self.output_dir,
        )
        return NodeResult.complete(confirmation)
