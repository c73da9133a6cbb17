"""Provider adapter layer: text-generation backends for processor nodes."""

from greyflow.providers.base import ProviderAdapter
from greyflow.providers.factory import create_provider, parse_model_string

__all__ = ["ProviderAdapter", "create_provider", "parse_model_string"]
