"""Node handlers, one per node kind."""

from greyflow.handlers.base import HandlerRequest, NodeHandler
from greyflow.handlers.registry import HandlerRegistry
from greyflow.handlers.setup import create_default_registry

__all__ = ["HandlerRegistry", "HandlerRequest", "NodeHandler", "create_default_registry"]
