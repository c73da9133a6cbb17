"""Event system: progress trace and node status, with streaming support."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import Protocol, runtime_checkable

from greyflow.models import Event

logger = logging.getLogger(__name__)


@runtime_checkable
class ExecutionObserver(Protocol):
    """Fire-and-forget sink for a run's progress. Never awaited, never aborts the run."""

    def on_step(self, line: str) -> None: ...

    def on_status_change(self, node_id: str, status: str) -> None: ...


class NullObserver:
    def on_step(self, line: str) -> None:
        pass

    def on_status_change(self, node_id: str, status: str) -> None:
        pass


class SafeObserver:
    """Wraps an observer so that its failures are logged instead of raised."""

    def __init__(self, inner: ExecutionObserver | None):
        self._inner = inner or NullObserver()

    def on_step(self, line: str) -> None:
        try:
            self._inner.on_step(line)
        except Exception as e:
            logger.warning(f"Observer on_step failed: {e}")

    def on_status_change(self, node_id: str, status: str) -> None:
        try:
            self._inner.on_status_change(node_id, status)
        except Exception as e:
            logger.warning(f"Observer on_status_change failed for {node_id}: {e}")


class EventBus:
    """Append-only event log with subscription support.

    Implements ``ExecutionObserver`` so it can be handed straight to the engine.
    """

    def __init__(self, run_id: str = "", log_file: Path | None = None):
        self.run_id = run_id
        self._log_file = log_file
        self._subscribers: list[asyncio.Queue] = []
        self._history: list[Event] = []
        self.node_status: dict[str, str] = {}

        if log_file:
            log_file.parent.mkdir(parents=True, exist_ok=True)

    def emit(self, event: Event):
        """Emit an event, log it and notify subscribers."""
        self._history.append(event)
        self._persist(event)
        self._notify(event)
        logger.debug(f"Event: {event.type} [{event.run_id}] {event.data}")

    def emit_simple(self, type: str, **data):
        """Convenience: emit with keyword args."""
        self.emit(Event(type=type, run_id=self.run_id, data=data))

    # -- ExecutionObserver --

    def on_step(self, line: str) -> None:
        self.emit_simple("step", line=line)

    def on_status_change(self, node_id: str, status: str) -> None:
        self.node_status[node_id] = status
        self.emit_simple("status", node_id=node_id, status=status)

    # -- Queries --

    def trace(self) -> list[str]:
        """Progress lines in the order they were emitted."""
        return [e.data["line"] for e in self._history if e.type == "step"]

    def recent(self, limit: int = 50, offset: int = 0) -> list[Event]:
        """Get recent events (paginated)."""
        start = max(0, len(self._history) - offset - limit)
        end = len(self._history) - offset
        return self._history[start:end]

    def subscribe(self) -> asyncio.Queue:
        """Subscribe to live events."""
        q: asyncio.Queue = asyncio.Queue(maxsize=1000)
        self._subscribers.append(q)
        return q

    def unsubscribe(self, q: asyncio.Queue):
        if q in self._subscribers:
            self._subscribers.remove(q)

    def _persist(self, event: Event):
        if self._log_file:
            with open(self._log_file, "a") as f:
                f.write(json.dumps(event.to_dict()) + "\n")

    def _notify(self, event: Event):
        for q in self._subscribers:
            try:
                q.put_nowait(event)
            except asyncio.QueueFull:
                pass
