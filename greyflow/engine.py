"""Workflow engine: runs a graph of nodes against one starting input.

Flow per run:
1. Reject an empty graph; pick the origin nodes (input nodes, else the first node
   without inbound edges).
2. Let the scheduler hand out ready nodes one at a time.
3. Dispatch each node to its handler, pausing to ask the operator when the
   handler needs raw input or more information.
4. Join the output nodes (or terminal nodes) into the final result.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field

from greyflow.cancellation import CancellationToken
from greyflow.config import MAX_INTERACTIVE_RETRIES, PASS_FACTOR, STATUS_DELAY
from greyflow.context import ExecutionContext
from greyflow.errors import (
    EmptyWorkflowError,
    NodeExecutionError,
    OperatorUnavailableError,
    RetryLimitExceededError,
    UnknownNodeTypeError,
    UnresolvedNodesError,
    WorkflowCancelled,
    WorkflowError,
)
from greyflow.events import ExecutionObserver, SafeObserver
from greyflow.handlers import HandlerRegistry, HandlerRequest, create_default_registry
from greyflow.interaction import OperatorChannel
from greyflow.models import NodeKind, NodeResult, NodeStatus, WorkflowGraph, WorkflowNode
from greyflow.scheduler import INPUT_SEPARATOR, Scheduler

logger = logging.getLogger(__name__)

NO_OUTPUT = "No output generated"


@dataclass
class RunOutcome:
    status: str  # completed | failed | cancelled
    result: str | None = None
    error: str | None = None
    trace: list[str] = field(default_factory=list)
    node_status: dict[str, str] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return self.status == "completed"


class _Recorder:
    """Observer that keeps a copy of everything before forwarding it."""

    def __init__(self, inner: ExecutionObserver | None):
        self.inner = SafeObserver(inner)
        self.trace: list[str] = []
        self.node_status: dict[str, str] = {}

    def on_step(self, line: str) -> None:
        self.trace.append(line)
        self.inner.on_step(line)

    def on_status_change(self, node_id: str, status: str) -> None:
        self.node_status[node_id] = status
        self.inner.on_status_change(node_id, status)


class WorkflowEngine:
    """Stateless between runs; every ``run`` gets its own ``ExecutionContext``."""

    def __init__(
        self,
        registry: HandlerRegistry | None = None,
        max_interactive_retries: int = MAX_INTERACTIVE_RETRIES,
        pass_factor: int = PASS_FACTOR,
        status_delay: float = STATUS_DELAY,
    ):
        if max_interactive_retries < 1:
            raise ValueError("max_interactive_retries must be at least 1")
        self.registry = registry or create_default_registry()
        self.max_interactive_retries = max_interactive_retries
        self.pass_factor = pass_factor
        self.status_delay = status_delay

    async def run(
        self,
        graph: WorkflowGraph,
        starting_input: str = "",
        observer: ExecutionObserver | None = None,
        operator: OperatorChannel | None = None,
        token: CancellationToken | None = None,
    ) -> str:
        """Execute ``graph`` and return the aggregated result.

        Raises a ``WorkflowError`` subclass on any fatal condition and
        ``WorkflowCancelled`` when ``token`` fires.
        """
        ctx = ExecutionContext.create(graph, starting_input, observer, token)
        if operator is not None:
            ctx.token.on_cancel(operator.cancel)

        ctx.step("Starting workflow execution...")
        logger.info(f"[{ctx.run_id}] Starting workflow with {len(graph.nodes)} nodes")

        try:
            result = await self._run(ctx, operator)
        except WorkflowCancelled:
            for node_id in ctx.status:
                ctx.set_status(node_id, NodeStatus.IDLE)
            ctx.step("Workflow cancelled")
            logger.info(f"[{ctx.run_id}] Workflow cancelled")
            raise

        ctx.step("Workflow completed successfully!")
        logger.info(f"[{ctx.run_id}] Workflow completed after {ctx.passes} passes")
        return result

    async def execute(
        self,
        graph: WorkflowGraph,
        starting_input: str = "",
        observer: ExecutionObserver | None = None,
        operator: OperatorChannel | None = None,
        token: CancellationToken | None = None,
    ) -> RunOutcome:
        """Like ``run`` but reports the outcome instead of raising."""
        recorder = _Recorder(observer)
        try:
            result = await self.run(graph, starting_input, recorder, operator, token)
        except WorkflowCancelled:
            return RunOutcome("cancelled", trace=recorder.trace, node_status=recorder.node_status)
        except WorkflowError as e:
            return RunOutcome("failed", error=str(e), trace=recorder.trace, node_status=recorder.node_status)
        return RunOutcome("completed", result=result, trace=recorder.trace, node_status=recorder.node_status)

    async def aclose(self):
        await self.registry.aclose()

    # -- Orchestration --

    async def _run(self, ctx: ExecutionContext, operator: OperatorChannel | None) -> str:
        graph = ctx.graph
        if not graph.nodes:
            raise EmptyWorkflowError()

        ctx.origins = self._find_origins(ctx)
        origin_ids = {n.id for n in ctx.origins}

        scheduler = Scheduler(graph, self.pass_factor)
        for node, node_input in scheduler.iter_ready(ctx):
            ctx.token.raise_if_cancelled()
            kind = NodeKind.INPUT.value if node.id in origin_ids else node.type
            value = await self._execute_node(ctx, node, kind, node_input, operator, node.id in origin_ids)
            ctx.record(node.id, value)

        if not ctx.all_resolved:
            unresolved = ctx.unresolved()
            names = [n.display_name for n in unresolved]
            ctx.step(f"Workflow incomplete. Unprocessed nodes: {', '.join(names)}")
            for n in unresolved:
                ctx.set_status(n.id, NodeStatus.ERROR)
            raise UnresolvedNodesError([n.id for n in unresolved], names)

        ctx.token.raise_if_cancelled()
        return self._aggregate(ctx)

    def _find_origins(self, ctx: ExecutionContext) -> list[WorkflowNode]:
        """Input nodes, else the first node without inbound edges.

        A graph where every node has an inbound edge has no fallback; the
        scheduler then reports all of its nodes as unresolved.
        """
        inputs = ctx.graph.nodes_of_kind(NodeKind.INPUT)
        if inputs:
            return inputs

        for node in ctx.graph.nodes:
            if not ctx.graph.edges_to(node.id):
                ctx.step("No input node found, using first node as input")
                return [node]

        logger.warning(f"[{ctx.run_id}] No input node and no node without inbound edges")
        return []

    async def _execute_node(
        self,
        ctx: ExecutionContext,
        node: WorkflowNode,
        kind: str,
        node_input: str,
        operator: OperatorChannel | None,
        is_origin: bool,
    ) -> str:
        label = node.display_name
        ctx.step(f"Processing node: {label}")
        ctx.set_status(node.id, NodeStatus.EXECUTING)

        try:
            if is_origin and self.status_delay > 0:
                await ctx.token.guard(asyncio.sleep(self.status_delay))
            value = await self._resolve(ctx, node, kind, node_input, operator)
        except WorkflowCancelled:
            raise
        except UnknownNodeTypeError as e:
            self._fail(ctx, node, str(e))
            raise UnknownNodeTypeError(e.node_type, node_id=node.id, node_label=label) from e
        except WorkflowError as e:
            self._fail(ctx, node, str(e))
            raise
        except Exception as e:
            self._fail(ctx, node, str(e))
            raise NodeExecutionError(f"Failed to execute node {label}: {e}", node_id=node.id) from e

        ctx.set_status(node.id, NodeStatus.COMPLETED)
        ctx.step(f"Completed node: {label}")
        return value

    def _fail(self, ctx: ExecutionContext, node: WorkflowNode, message: str):
        logger.error(f"[{ctx.run_id}] Node {node.id} failed: {message}")
        ctx.step(f"Failed to execute node {node.display_name}: {message}")
        ctx.set_status(node.id, NodeStatus.ERROR)

    # -- Interactive resolution --

    async def _resolve(
        self,
        ctx: ExecutionContext,
        node: WorkflowNode,
        kind: str,
        node_input: str,
        operator: OperatorChannel | None,
    ) -> str:
        """Invoke the handler until it reports a final value.

        The handler runs at most ``max_interactive_retries`` times; the
        operator is asked between invocations, never after the last one.
        """
        history: list[dict] = []
        current = node_input

        for attempt in range(1, self.max_interactive_retries + 1):
            request = HandlerRequest(node=node, input=current, history=list(history), attempt=attempt)
            result = await ctx.token.guard(self.registry.dispatch(kind, request))
            ctx.token.raise_if_cancelled()
            if result.is_complete:
                return result.content
            if attempt == self.max_interactive_retries:
                break

            if result.needs_input:
                current = await self._ask(ctx, node, operator, result, raw=True)
            else:
                history.append({"role": "user", "content": current})
                history.append({"role": "assistant", "content": result.content or result.info_request or ""})
                current = await self._ask(ctx, node, operator, result, raw=False)

        raise RetryLimitExceededError(node.display_name, self.max_interactive_retries, node_id=node.id)

    async def _ask(
        self,
        ctx: ExecutionContext,
        node: WorkflowNode,
        operator: OperatorChannel | None,
        result: NodeResult,
        raw: bool,
    ) -> str:
        if operator is None:
            raise OperatorUnavailableError(
                f"Node {node.display_name} needs operator input but no operator channel is available",
                node_id=node.id,
            )

        if raw:
            prompt = result.input_prompt or ""
            logger.info(f"[{ctx.run_id}] Node {node.id} requests input: {prompt[:80]}")
            ask = operator.request_raw_input(prompt)
        else:
            prompt = result.info_request or ""
            logger.info(f"[{ctx.run_id}] Node {node.id} requests more info: {prompt[:80]}")
            ask = operator.request_additional_info(prompt)

        try:
            answer = await ctx.token.guard(ask)
        except NotImplementedError as e:
            raise OperatorUnavailableError(
                f"Node {node.display_name} needs operator input but the channel cannot provide it: {e}",
                node_id=node.id,
            ) from e

        ctx.token.raise_if_cancelled()
        return answer

    # -- Result --

    def _aggregate(self, ctx: ExecutionContext) -> str:
        """Join output nodes, else terminal nodes, else the last resolved node.

        The last fallback only triggers for a fully resolved graph in which
        every node has an outgoing edge, which a valid DAG cannot produce.
        """
        graph = ctx.graph
        chosen = graph.nodes_of_kind(NodeKind.OUTPUT) or graph.terminal_nodes()
        if chosen:
            return INPUT_SEPARATOR.join(ctx.results[n.id] for n in chosen if ctx.results.get(n.id))
        return ctx.last_result() or NO_OUTPUT
