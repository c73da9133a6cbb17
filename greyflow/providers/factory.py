"""Provider factory: create the right adapter for a processor node."""

from __future__ import annotations

from greyflow.config import DEFAULT_ENDPOINT, DEFAULT_MODEL
from greyflow.providers.base import ProviderAdapter

SDK_PROVIDERS = ("openai", "anthropic")


def parse_model_string(model: str) -> tuple[str, str]:
    """Parse 'provider/model-name' into (provider, model).

    Bare model names (``gpt-4o``) are served by the chat endpoint.
    """
    if "/" in model:
        provider, model_name = model.split("/", 1)
        if provider.lower() in SDK_PROVIDERS:
            return provider.lower(), model_name
    return "endpoint", model


def create_provider(model: str | None = None, endpoint: str | None = None) -> ProviderAdapter:
    """Create an adapter for the node's ``model`` and optional ``api_endpoint``."""
    provider, model_name = parse_model_string(model or DEFAULT_MODEL)

    if provider == "anthropic":
        from greyflow.providers.anthropic_provider import AnthropicAdapter
        return AnthropicAdapter(model=model_name)
    if provider == "openai":
        from greyflow.providers.openai_provider import OpenAIAdapter
        return OpenAIAdapter(model=model_name)

    from greyflow.providers.endpoint_provider import EndpointAdapter
    return EndpointAdapter(endpoint=endpoint or DEFAULT_ENDPOINT, model=model_name)
