"""Scheduler: decides which node runs next and what input it receives."""

from __future__ import annotations

import logging
from typing import Iterator

from greyflow.config import PASS_FACTOR
from greyflow.context import ExecutionContext
from greyflow.models import WorkflowGraph, WorkflowNode

logger = logging.getLogger(__name__)

INPUT_SEPARATOR = "\n\n"


class Scheduler:
    """Iterative fixed-point topological ordering.

    Each pass scans every unresolved node in declaration order. A node is
    ready once every edge pointing at it comes from a resolved node; nodes
    without inbound edges are always ready. Passes stop when one makes no
    progress, when everything is resolved, or after ``node_count * pass_factor``
    passes.
    """

    def __init__(self, graph: WorkflowGraph, pass_factor: int = PASS_FACTOR):
        self.graph = graph
        self.pass_factor = pass_factor

    @property
    def max_passes(self) -> int:
        return len(self.graph.nodes) * self.pass_factor

    def is_ready(self, node: WorkflowNode, ctx: ExecutionContext) -> bool:
        return all(ctx.is_resolved(e.source) for e in self.graph.edges_to(node.id))

    def resolve_input(self, node: WorkflowNode, ctx: ExecutionContext) -> str:
        """Upstream results joined in edge declaration order, or the run's starting input."""
        incoming = self.graph.edges_to(node.id)
        if not incoming:
            return ctx.starting_input
        if len(incoming) == 1:
            return ctx.results.get(incoming[0].source, "")
        inputs = [ctx.results.get(e.source, "") for e in incoming]
        return INPUT_SEPARATOR.join(i for i in inputs if i)

    def iter_ready(self, ctx: ExecutionContext) -> Iterator[tuple[WorkflowNode, str]]:
        """Yield ``(node, resolved_input)`` one at a time.

        The caller must record the node's result in ``ctx`` before advancing;
        readiness of later nodes is evaluated lazily against ``ctx.results``.
        Origin nodes come first and always receive the starting input.
        """
        for node in ctx.origins:
            if not ctx.is_resolved(node.id):
                yield node, ctx.starting_input

        progress = True
        while progress and not ctx.all_resolved and ctx.passes < self.max_passes:
            progress = False
            ctx.passes += 1
            for node in self.graph.nodes:
                if ctx.is_resolved(node.id) or not self.is_ready(node, ctx):
                    continue
                yield node, self.resolve_input(node, ctx)
                if ctx.is_resolved(node.id):
                    progress = True

        if not ctx.all_resolved:
            logger.warning(
                f"[{ctx.run_id}] Scheduling stopped after {ctx.passes} passes with "
                f"{len(ctx.unresolved())} unresolved nodes"
            )
