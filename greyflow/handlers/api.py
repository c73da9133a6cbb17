"""API nodes: one templated HTTP call per invocation."""

from __future__ import annotations

from greyflow.api_client import ApiClient
from greyflow.errors import ApiCallError
from greyflow.handlers.base import HandlerRequest, NodeHandler
from greyflow.models import NodeKind, NodeResult


class ApiHandler(NodeHandler):
    kind = NodeKind.API

    def __init__(self, client: ApiClient | None = None):
        self.client = client or ApiClient()

    async def execute(self, request: HandlerRequest) -> NodeResult:
        node = request.node
        if not node.api_endpoint:
            raise ApiCallError("API endpoint is required for API agents")
        result = await self.client.call(node.api_endpoint, request.input, node.api_config)
        return NodeResult.complete(result)

    async def aclose(self):
        await self.client.aclose()
