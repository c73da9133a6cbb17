"""Handler registry: maps node kinds to handlers and dispatches invocations."""

from __future__ import annotations

import logging

from greyflow.errors import UnknownNodeTypeError
from greyflow.handlers.base import HandlerRequest, NodeHandler
from greyflow.models import NodeKind, NodeResult

logger = logging.getLogger(__name__)


def _key(kind: NodeKind | str) -> str:
    return kind.value if isinstance(kind, NodeKind) else str(kind)


class HandlerRegistry:
    """Registry of node handlers, one per ``NodeKind``."""

    def __init__(self):
        self._handlers: dict[str, NodeHandler] = {}

    def register(self, kind: NodeKind | str, handler: NodeHandler):
        key = _key(kind)
        if key not in {k.value for k in NodeKind}:
            raise ValueError(f"Not a node kind: {key}")
        self._handlers[key] = handler

    def get(self, kind: NodeKind | str) -> NodeHandler | None:
        return self._handlers.get(_key(kind))

    def kinds(self) -> list[str]:
        return list(self._handlers.keys())

    async def dispatch(self, kind: NodeKind | str, request: HandlerRequest) -> NodeResult:
        """Execute ``request`` with the handler for ``kind``.

        Raises ``UnknownNodeTypeError`` for kinds with no handler. Handler
        exceptions are logged and re-raised unchanged.
        """
        handler = self.get(kind)
        if handler is None:
            raise UnknownNodeTypeError(_key(kind), node_id=request.node.id)

        try:
            return await handler.execute(request)
        except Exception as e:
            logger.error(f"Handler '{_key(kind)}' failed on node {request.node.id}: {e}")
            raise

    async def aclose(self):
        for handler in self._handlers.values():
            await handler.aclose()
