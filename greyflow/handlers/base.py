"""Uniform request/response contract every node handler satisfies."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from greyflow.models import NodeKind, NodeResult, WorkflowNode


@dataclass
class HandlerRequest:
    """One invocation of a handler.

    ``history`` holds earlier user/assistant turns for this node when the
    engine re-invokes it after asking the operator for more information.
    """

    node: WorkflowNode
    input: str
    history: list[dict] = field(default_factory=list)
    attempt: int = 1


class NodeHandler(ABC):
    kind: NodeKind

    @abstractmethod
    async def execute(self, request: HandlerRequest) -> NodeResult:
        """Run the node against ``request.input``. Collaborator failures propagate."""

    async def aclose(self):
        pass
