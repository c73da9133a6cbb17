"""ExecutionContext: all mutable state of one workflow run."""

from __future__ import annotations

from dataclasses import dataclass, field

from greyflow.cancellation import CancellationToken
from greyflow.events import ExecutionObserver, SafeObserver
from greyflow.models import NodeStatus, WorkflowGraph, WorkflowNode, generate_id


@dataclass
class ExecutionContext:
    """Owned by exactly one ``WorkflowEngine.run`` call and discarded afterwards."""

    graph: WorkflowGraph
    starting_input: str = ""
    observer: SafeObserver = field(default_factory=lambda: SafeObserver(None))
    token: CancellationToken = field(default_factory=CancellationToken)
    run_id: str = field(default_factory=generate_id)
    origins: list[WorkflowNode] = field(default_factory=list)
    results: dict[str, str] = field(default_factory=dict)
    order: list[str] = field(default_factory=list)
    status: dict[str, NodeStatus] = field(default_factory=dict)
    passes: int = 0

    @classmethod
    def create(
        cls,
        graph: WorkflowGraph,
        starting_input: str = "",
        observer: ExecutionObserver | None = None,
        token: CancellationToken | None = None,
    ) -> "ExecutionContext":
        ctx = cls(
            graph=graph,
            starting_input=starting_input,
            observer=SafeObserver(observer),
            token=token or CancellationToken(),
        )
        ctx.status = {n.id: NodeStatus.IDLE for n in graph.nodes}
        return ctx

    # -- results --

    def record(self, node_id: str, value: str):
        """Store a node's final output. Each node resolves exactly once."""
        if node_id in self.results:
            raise RuntimeError(f"Node {node_id} already has a result")
        self.results[node_id] = value
        self.order.append(node_id)

    def is_resolved(self, node_id: str) -> bool:
        return node_id in self.results

    @property
    def all_resolved(self) -> bool:
        return len(self.results) >= len(self.graph.nodes)

    def unresolved(self) -> list[WorkflowNode]:
        return [n for n in self.graph.nodes if n.id not in self.results]

    def last_result(self) -> str | None:
        if not self.order:
            return None
        return self.results[self.order[-1]]

    # -- reporting --

    def step(self, line: str):
        self.observer.on_step(line)

    def set_status(self, node_id: str, status: NodeStatus):
        self.status[node_id] = status
        self.observer.on_status_change(node_id, status.value)

    def nodes_in(self, *statuses: NodeStatus) -> list[str]:
        return [nid for nid, s in self.status.items() if s in statuses]
