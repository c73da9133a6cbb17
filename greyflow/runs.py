"""WorkflowRun: one background execution started from the HTTP server."""

from __future__ import annotations

import asyncio
import logging
import time
from pathlib import Path

from greyflow.cancellation import CancellationToken
from greyflow.engine import WorkflowEngine
from greyflow.events import EventBus
from greyflow.interaction import QueueOperatorChannel
from greyflow.models import WorkflowDocument, generate_id

logger = logging.getLogger(__name__)


class WorkflowRun:
    """Engine task + operator queue + event log for a single run."""

    def __init__(
        self,
        engine: WorkflowEngine,
        document: WorkflowDocument,
        starting_input: str = "",
        log_dir: Path | None = None,
        operator_timeout: float | None = None,
    ):
        self.id = generate_id()
        self.engine = engine
        self.workflow_id = document.id
        self.workflow_name = document.name
        self.graph = document.graph()
        self.starting_input = starting_input

        self.event_bus = EventBus(run_id=self.id, log_file=log_dir / f"{self.id}.jsonl" if log_dir else None)
        self.operator = QueueOperatorChannel(timeout=operator_timeout)
        self.token = CancellationToken()

        self._status = "pending"  # pending | running | completed | failed | cancelled
        self.result: str | None = None
        self.error: str | None = None
        self._task: asyncio.Task | None = None

        self.created_at = time.time()
        self.updated_at = time.time()

    @property
    def status(self) -> str:
        if self._status == "running" and self.operator.pending is not None:
            return "waiting_for_operator"
        return self._status

    @property
    def finished(self) -> bool:
        return self._status in ("completed", "failed", "cancelled")

    def start(self) -> asyncio.Task:
        """Launch the engine in the background on the running loop."""
        self._status = "running"
        self._task = asyncio.create_task(self._execute())
        logger.info(f"Run {self.id} started for workflow {self.workflow_id}")
        return self._task

    async def _execute(self):
        try:
            outcome = await self.engine.execute(
                self.graph, self.starting_input, self.event_bus, self.operator, self.token
            )
        except Exception as e:
            logger.exception(f"Run {self.id} crashed")
            self._status, self.error = "failed", str(e)
        else:
            self._status, self.result, self.error = outcome.status, outcome.result, outcome.error

        self.updated_at = time.time()
        self.event_bus.emit_simple("finished", status=self._status, result=self.result, error=self.error)
        logger.info(f"Run {self.id} finished: {self._status}")

    async def wait(self):
        if self._task is not None:
            await self._task

    def respond(self, answer: str, question_id: str | None = None) -> bool:
        """Answer the pending operator question."""
        delivered = self.operator.respond(answer, question_id)
        if delivered:
            self.updated_at = time.time()
        return delivered

    def cancel(self):
        if not self.finished:
            self.token.cancel()
            self.updated_at = time.time()

    def summary(self) -> dict:
        pending = self.operator.pending
        return {
            "id": self.id,
            "workflow_id": self.workflow_id,
            "workflow_name": self.workflow_name,
            "status": self.status,
            "result": self.result,
            "error": self.error,
            "question": pending.to_dict() if pending else None,
            "node_status": dict(self.event_bus.node_status),
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
