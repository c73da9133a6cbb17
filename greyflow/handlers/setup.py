"""Wire the built-in handlers into the default registry."""

from __future__ import annotations

from pathlib import Path

from greyflow.api_client import ApiClient
from greyflow.config import OUTPUT_DIR, STRUCTURE_WITH_LLM
from greyflow.handlers.api import ApiHandler
from greyflow.handlers.basic import InputHandler, OutputHandler
from greyflow.handlers.document import DocumentHandler
from greyflow.handlers.processor import ProcessorHandler, ProviderFactory
from greyflow.handlers.registry import HandlerRegistry
from greyflow.models import NodeKind
from greyflow.providers import create_provider


def create_default_registry(
    provider_factory: ProviderFactory = create_provider,
    api_client: ApiClient | None = None,
    output_dir: Path = OUTPUT_DIR,
    structure_with_llm: bool = STRUCTURE_WITH_LLM,
) -> HandlerRegistry:
    """Create a registry with a handler for every node kind."""
    registry = HandlerRegistry()
    document_provider = provider_factory if structure_with_llm else None

    registry.register(NodeKind.INPUT, InputHandler())
    registry.register(NodeKind.PROCESSOR, ProcessorHandler(provider_factory))
    registry.register(NodeKind.API, ApiHandler(api_client))
    registry.register(NodeKind.OUTPUT, OutputHandler())
    registry.register(NodeKind.PDF, DocumentHandler(NodeKind.PDF, document_provider, output_dir))
    registry.register(NodeKind.WORD, DocumentHandler(NodeKind.WORD, document_provider, output_dir))

    return registry
