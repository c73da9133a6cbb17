"""Core data structures for GreyFlow workflows."""

from __future__ import annotations

import time
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Literal

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

WORKFLOW_FORMAT = "GreyFlow"
WORKFLOW_VERSION = "1.0"


def generate_id() -> str:
    return uuid.uuid4().hex[:12]


class NodeKind(str, Enum):
    """Closed set of node types the engine knows how to dispatch."""

    INPUT = "input"
    PROCESSOR = "processor"
    API = "api"
    OUTPUT = "output"
    PDF = "pdf"
    WORD = "word"


class NodeStatus(str, Enum):
    IDLE = "idle"
    EXECUTING = "executing"
    COMPLETED = "completed"
    ERROR = "error"


# ---------------------------------------------------------------------------
# Workflow definition (persisted shape)
# ---------------------------------------------------------------------------


class _CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="ignore")


HTTPMethod = Literal["GET", "POST", "PUT", "DELETE", "PATCH"]
AuthType = Literal["none", "bearer", "apikey", "basic"]
DocumentType = Literal["general", "cv", "research", "report", "letter", "custom"]


class ApiRequestConfig(_CamelModel):
    """Request template for an ``api`` node. ``{{input}}`` is replaced with the node input."""

    method: HTTPMethod = "GET"
    headers: dict[str, str] = Field(default_factory=dict)
    query_params: dict[str, str] = Field(default_factory=dict)
    body_template: str | None = None
    response_format: Literal["json", "text", "xml"] = "json"
    auth_type: AuthType = "none"
    auth_value: str | None = None
    auth_header: str | None = None
    use_cors_proxy: bool = False


class DocumentConfig(_CamelModel):
    filename: str | None = None
    document_type: DocumentType = "general"


class WorkflowNode(_CamelModel):
    """A single agent placed on the canvas.

    Accepts both the flat shape and the editor's nested
    ``{"id", "type", "position", "data": {...}}`` shape.
    """

    id: str = Field(default_factory=generate_id)
    type: str = "processor"
    label: str = ""
    prompt: str | None = None
    system_prompt: str | None = None
    model: str | None = None
    api_endpoint: str | None = None
    api_config: ApiRequestConfig | None = None
    pdf_config: DocumentConfig | None = None
    word_config: DocumentConfig | None = None
    position: dict[str, float] = Field(default_factory=lambda: {"x": 0, "y": 0})

    @model_validator(mode="before")
    @classmethod
    def flatten_editor_data(cls, value: Any) -> Any:
        if isinstance(value, dict) and isinstance(value.get("data"), dict):
            flat = {k: v for k, v in value.items() if k != "data"}
            for key, item in value["data"].items():
                flat.setdefault(key, item)
            return flat
        return value

    @property
    def display_name(self) -> str:
        return self.label or self.id

    @property
    def document_config(self) -> DocumentConfig:
        if self.type == NodeKind.WORD.value:
            return self.word_config or DocumentConfig()
        return self.pdf_config or DocumentConfig()


class WorkflowEdge(_CamelModel):
    source: str
    target: str
    id: str | None = None
    animated: bool = False


class WorkflowGraph(_CamelModel):
    """Nodes + directed edges. Treated as immutable during a run."""

    nodes: list[WorkflowNode] = Field(default_factory=list)
    edges: list[WorkflowEdge] = Field(default_factory=list)

    @model_validator(mode="after")
    def check_unique_ids(self) -> "WorkflowGraph":
        seen: set[str] = set()
        for node in self.nodes:
            if node.id in seen:
                raise ValueError(f"Duplicate node id: {node.id}")
            seen.add(node.id)
        return self

    def get_node(self, node_id: str) -> WorkflowNode | None:
        for node in self.nodes:
            if node.id == node_id:
                return node
        return None

    def edges_to(self, node_id: str) -> list[WorkflowEdge]:
        """Inbound edges in declaration order."""
        return [e for e in self.edges if e.target == node_id]

    def edges_from(self, node_id: str) -> list[WorkflowEdge]:
        return [e for e in self.edges if e.source == node_id]

    def terminal_nodes(self) -> list[WorkflowNode]:
        """Nodes with no outgoing edges."""
        sources = {e.source for e in self.edges}
        return [n for n in self.nodes if n.id not in sources]

    def nodes_of_kind(self, kind: NodeKind) -> list[WorkflowNode]:
        return [n for n in self.nodes if n.type == kind.value]


class WorkflowDocument(WorkflowGraph):
    """The persisted / exported workflow file."""

    id: str = Field(default_factory=lambda: f"workflow-{generate_id()}")
    name: str = "Untitled Workflow"
    format: str = WORKFLOW_FORMAT
    version: str = WORKFLOW_VERSION
    exported_at: str | None = None
    last_saved: str | None = None

    def touch(self) -> None:
        self.last_saved = datetime.now(timezone.utc).isoformat()

    def graph(self) -> WorkflowGraph:
        return WorkflowGraph(nodes=self.nodes, edges=self.edges)


# ---------------------------------------------------------------------------
# Handler response
# ---------------------------------------------------------------------------


@dataclass
class NodeResult:
    """What a handler returns for one invocation.

    ``is_complete`` means ``content`` is the node's final value. Otherwise the
    handler is asking the operator for raw input or for more information.
    """

    content: str = ""
    needs_input: bool = False
    input_prompt: str | None = None
    needs_more_info: bool = False
    info_request: str | None = None
    is_complete: bool = True

    @classmethod
    def complete(cls, content: str) -> "NodeResult":
        return cls(content=content, is_complete=True)

    @classmethod
    def ask_input(cls, prompt: str) -> "NodeResult":
        return cls(needs_input=True, input_prompt=prompt, is_complete=False)

    @classmethod
    def ask_more_info(cls, request: str, content: str = "") -> "NodeResult":
        return cls(content=content, needs_more_info=True, info_request=request, is_complete=False)


# ---------------------------------------------------------------------------
# Events
# ---------------------------------------------------------------------------


@dataclass
class Event:
    type: str  # step | status
    run_id: str
    ts: float = field(default_factory=time.time)
    data: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"type": self.type, "run_id": self.run_id, "ts": self.ts, "data": self.data}
