"""Test background workflow runs."""

import json

import pytest

from conftest import FakeProvider, build_registry
from greyflow.engine import WorkflowEngine
from greyflow.models import WorkflowDocument
from greyflow.runs import WorkflowRun


def make_doc() -> WorkflowDocument:
    return WorkflowDocument.model_validate({
        "id": "workflow-t",
        "name": "T",
        "nodes": [{"id": "in1", "type": "input"}, {"id": "out1", "type": "output"}],
        "edges": [{"source": "in1", "target": "out1"}],
    })


@pytest.mark.asyncio
async def test_run_completes_and_logs(tmp_path):
    engine = WorkflowEngine(build_registry(FakeProvider()), status_delay=0)
    run = WorkflowRun(engine, make_doc(), "hi", log_dir=tmp_path)
    assert run.status == "pending"

    run.start()
    await run.wait()

    assert run.status == "completed"
    assert run.finished
    assert run.result == "hi"
    summary = run.summary()
    assert summary["workflow_id"] == "workflow-t"
    assert summary["question"] is None
    assert summary["node_status"] == {"in1": "completed", "out1": "completed"}

    lines = (tmp_path / f"{run.id}.jsonl").read_text().splitlines()
    assert json.loads(lines[-1])["type"] == "finished"


@pytest.mark.asyncio
async def test_operator_timeout_fails_run():
    engine = WorkflowEngine(build_registry(FakeProvider()), status_delay=0)
    run = WorkflowRun(engine, make_doc(), "", operator_timeout=0.01)

    run.start()
    await run.wait()

    assert run.status == "failed"
    assert run.error == "No operator answer within 0.01s to: Please provide input for this step:"


@pytest.mark.asyncio
async def test_cancel_after_finish_is_noop():
    engine = WorkflowEngine(build_registry(FakeProvider()), status_delay=0)
    run = WorkflowRun(engine, make_doc(), "hi")
    run.start()
    await run.wait()

    run.cancel()
    assert run.status == "completed"
    assert not run.token.cancelled
