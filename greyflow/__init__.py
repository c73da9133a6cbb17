"""GreyFlow: run visual agent workflows as directed graphs."""

from greyflow.cancellation import CancellationToken
from greyflow.engine import RunOutcome, WorkflowEngine
from greyflow.events import EventBus, ExecutionObserver
from greyflow.interaction import CallbackOperatorChannel, OperatorChannel, QueueOperatorChannel
from greyflow.models import NodeKind, NodeResult, NodeStatus, WorkflowDocument, WorkflowEdge, WorkflowGraph, WorkflowNode

__version__ = "1.0.0"

__all__ = [
    "CallbackOperatorChannel",
    "CancellationToken",
    "EventBus",
    "ExecutionObserver",
    "NodeKind",
    "NodeResult",
    "NodeStatus",
    "OperatorChannel",
    "QueueOperatorChannel",
    "RunOutcome",
    "WorkflowDocument",
    "WorkflowEdge",
    "WorkflowEngine",
    "WorkflowGraph",
    "WorkflowNode",
]
