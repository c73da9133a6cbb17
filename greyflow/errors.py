"""Exception hierarchy for workflow execution and its collaborators."""

from __future__ import annotations


class WorkflowError(Exception):
    """A fatal condition that aborts a workflow run."""

    def __init__(self, message: str, node_id: str | None = None):
        super().__init__(message)
        self.node_id = node_id


class StructuralError(WorkflowError):
    """The graph itself cannot be executed. Never retried."""


class EmptyWorkflowError(StructuralError):
    def __init__(self):
        super().__init__("Workflow is empty. Please add at least one agent.")


class UnresolvedNodesError(StructuralError):
    """Scheduling stopped with nodes that never became ready (cycle or disconnected)."""

    def __init__(self, node_ids: list[str], names: list[str]):
        self.node_ids = node_ids
        self.names = names
        super().__init__(
            f"Workflow has circular dependencies or disconnected nodes: {', '.join(names)}"
        )


class UnknownNodeTypeError(StructuralError):
    def __init__(self, node_type: str, node_id: str | None = None, node_label: str | None = None):
        self.node_type = node_type
        message = f"Unknown agent type: {node_type}"
        if node_label:
            message = f"Failed to execute node {node_label}: {message}"
        super().__init__(message, node_id=node_id)


class NodeExecutionError(WorkflowError):
    """A node's handler failed."""


class OperatorUnavailableError(NodeExecutionError):
    """A node asked for operator input but no operator could answer."""


class RetryLimitExceededError(WorkflowError):
    def __init__(self, node_name: str, attempts: int, node_id: str | None = None):
        self.attempts = attempts
        super().__init__(
            f"Node {node_name} exceeded max retries ({attempts}) waiting for complete input",
            node_id=node_id,
        )


class WorkflowCancelled(Exception):
    """The run was cancelled by the operator. Not a failure."""

    def __init__(self, message: str = "Workflow cancelled"):
        super().__init__(message)


# ---------------------------------------------------------------------------
# Collaborator errors (raised by providers, the HTTP caller, document rendering)
# ---------------------------------------------------------------------------


class CollaboratorError(Exception):
    """A remote or rendering collaborator failed."""


class ProviderError(CollaboratorError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class ApiCallError(CollaboratorError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class DocumentError(CollaboratorError):
    pass


class InvalidWorkflowDocument(ValueError):
    """A persisted workflow file is not a GreyFlow document."""
