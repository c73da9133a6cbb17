"""FastAPI server: workflow CRUD, templates and interactive runs."""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import uvicorn
from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel

from greyflow.config import SERVER_HOST, SERVER_PORT
from greyflow.engine import WorkflowEngine
from greyflow.errors import InvalidWorkflowDocument
from greyflow.models import WorkflowDocument
from greyflow.runs import WorkflowRun
from greyflow.store import WorkflowStore, dump_document, parse_document
from greyflow.templates import get_template, list_templates

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(name)s] %(levelname)s: %(message)s")
logger = logging.getLogger(__name__)

app = FastAPI(title="GreyFlow", version="1.0", description="Visual agent workflow runner")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Active and finished runs
run_registry: dict[str, WorkflowRun] = {}

_store: WorkflowStore | None = None
_engine: WorkflowEngine | None = None


def get_store() -> WorkflowStore:
    global _store
    if _store is None:
        _store = WorkflowStore()
    return _store


def get_engine() -> WorkflowEngine:
    global _engine
    if _engine is None:
        _engine = WorkflowEngine()
    return _engine


# ---------------------------------------------------------------------------
# Request / Response Models
# ---------------------------------------------------------------------------


class StartRunRequest(BaseModel):
    workflow_id: str | None = None
    workflow: dict[str, Any] | None = None
    input: str = ""


class RespondRequest(BaseModel):
    response: str
    question_id: str | None = None


# ---------------------------------------------------------------------------
# Templates
# ---------------------------------------------------------------------------


@app.get("/templates")
async def get_templates() -> list[dict]:
    return [{"key": key, "name": name} for key, name in list_templates().items()]


@app.get("/templates/{key}")
async def get_template_document(key: str) -> dict:
    doc = get_template(key)
    if doc is None:
        raise HTTPException(status_code=404, detail=f"Template {key} not found")
    return dump_document(doc)


# ---------------------------------------------------------------------------
# Workflows
# ---------------------------------------------------------------------------


@app.get("/workflows")
async def list_workflows() -> list[dict]:
    return [
        {"id": w.id, "name": w.name, "node_count": len(w.nodes), "last_saved": w.last_saved}
        for w in get_store().list_all()
    ]


@app.post("/workflows")
async def save_workflow(body: dict[str, Any]) -> dict:
    """Create or update a workflow. Nodes may use the flat or the editor shape."""
    doc = _validate(body)
    return dump_document(get_store().save(doc))


@app.post("/workflows/import")
async def import_workflow(body: dict[str, Any]) -> dict:
    """Import an exported ``.gre`` document; the format tag is checked."""
    try:
        doc = parse_document(body)
    except InvalidWorkflowDocument as e:
        raise HTTPException(status_code=422, detail=str(e))
    return dump_document(get_store().save(doc))


@app.get("/workflows/{workflow_id}")
async def get_workflow(workflow_id: str) -> dict:
    return dump_document(_get_workflow(workflow_id))


@app.get("/workflows/{workflow_id}/export")
async def export_workflow(workflow_id: str) -> dict:
    doc = _get_workflow(workflow_id)
    doc.exported_at = _now()
    return dump_document(doc)


@app.delete("/workflows/{workflow_id}")
async def delete_workflow(workflow_id: str) -> dict:
    if not get_store().delete(workflow_id):
        raise HTTPException(status_code=404, detail=f"Workflow {workflow_id} not found")
    return {"status": "deleted", "id": workflow_id}


# ---------------------------------------------------------------------------
# Runs
# ---------------------------------------------------------------------------


@app.post("/runs")
async def start_run(req: StartRunRequest) -> dict:
    """Start executing a saved workflow (or an inline one) in the background."""
    if req.workflow is not None:
        doc = _validate(req.workflow)
    elif req.workflow_id:
        doc = _get_workflow(req.workflow_id)
    else:
        raise HTTPException(status_code=422, detail="Provide workflow_id or workflow")

    run = WorkflowRun(get_engine(), doc, req.input)
    run_registry[run.id] = run
    run.start()

    logger.info(f"Run {run.id} created for {doc.name}")
    return run.summary()


@app.get("/runs")
async def list_runs() -> list[dict]:
    return [r.summary() for r in run_registry.values()]


@app.get("/runs/{run_id}")
async def get_run(run_id: str) -> dict:
    return _get_run(run_id).summary()


@app.get("/runs/{run_id}/trace")
async def get_trace(run_id: str) -> list[str]:
    return _get_run(run_id).event_bus.trace()


@app.post("/runs/{run_id}/respond")
async def respond_to_question(run_id: str, req: RespondRequest) -> dict:
    """Answer the question the run is waiting on."""
    run = _get_run(run_id)
    if not run.respond(req.response, req.question_id):
        raise HTTPException(status_code=409, detail="No matching question is pending")
    return {"status": "delivered"}


@app.post("/runs/{run_id}/cancel")
async def cancel_run(run_id: str) -> dict:
    run = _get_run(run_id)
    run.cancel()
    return {"status": "cancelling" if not run.finished else run.status, "id": run_id}


# ---------------------------------------------------------------------------
# Events (WebSocket + Polling)
# ---------------------------------------------------------------------------


@app.websocket("/runs/{run_id}/events")
async def event_stream(websocket: WebSocket, run_id: str):
    """WebSocket stream of run events."""
    await websocket.accept()
    run = run_registry.get(run_id)
    if not run:
        await websocket.close(code=4004, reason="Run not found")
        return

    queue = run.event_bus.subscribe()
    try:
        while True:
            event = await queue.get()
            await websocket.send_json(event.to_dict())
            if event.type == "finished":
                break
    except WebSocketDisconnect:
        pass
    finally:
        run.event_bus.unsubscribe(queue)


@app.get("/runs/{run_id}/events")
async def get_events(run_id: str, limit: int = 50, offset: int = 0) -> list[dict]:
    """Get recent events (polling fallback)."""
    run = _get_run(run_id)
    return [e.to_dict() for e in run.event_bus.recent(limit=limit, offset=offset)]


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _validate(body: dict[str, Any]) -> WorkflowDocument:
    try:
        return WorkflowDocument.model_validate(body)
    except ValueError as e:
        raise HTTPException(status_code=422, detail=str(e))


def _get_workflow(workflow_id: str) -> WorkflowDocument:
    doc = get_store().load(workflow_id)
    if not doc:
        raise HTTPException(status_code=404, detail=f"Workflow {workflow_id} not found")
    return doc


def _get_run(run_id: str) -> WorkflowRun:
    run = run_registry.get(run_id)
    if not run:
        raise HTTPException(status_code=404, detail=f"Run {run_id} not found")
    return run


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


# ---------------------------------------------------------------------------
# Entry Point
# ---------------------------------------------------------------------------


def main():
    """Start the GreyFlow server."""
    print(f"Starting GreyFlow server on {SERVER_HOST}:{SERVER_PORT}")
    uvicorn.run(app, host=SERVER_HOST, port=SERVER_PORT, log_level="info")


if __name__ == "__main__":
    main()
