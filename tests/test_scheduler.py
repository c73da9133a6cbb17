"""Test readiness and input resolution of the scheduler."""

from conftest import make_graph
from greyflow.context import ExecutionContext
from greyflow.scheduler import Scheduler


def drive(graph, starting_input="", origins=(), outputs=None):
    """Run the scheduler, recording ``outputs[id]`` (or the input) for each node."""
    ctx = ExecutionContext.create(graph, starting_input)
    ctx.origins = [graph.get_node(i) for i in origins]
    seen = []
    for node, node_input in Scheduler(graph).iter_ready(ctx):
        seen.append((node.id, node_input))
        ctx.record(node.id, (outputs or {}).get(node.id, node_input))
    return ctx, seen


def test_chain_runs_in_dependency_order():
    graph = make_graph([{"id": "c"}, {"id": "b"}, {"id": "a"}], [("a", "b"), ("b", "c")])
    ctx, seen = drive(graph, "x", origins=["a"], outputs={"a": "A", "b": "B"})

    assert seen == [("a", "x"), ("b", "A"), ("c", "B")]
    assert ctx.all_resolved


def test_fan_in_joins_in_edge_declaration_order():
    graph = make_graph(
        [{"id": "in"}, {"id": "a"}, {"id": "b"}, {"id": "join"}],
        [("in", "a"), ("in", "b"), ("b", "join"), ("a", "join")],
    )
    _, seen = drive(graph, "x", origins=["in"], outputs={"a": "A", "b": "B"})

    assert dict(seen)["join"] == "B\n\nA"


def test_fan_in_skips_empty_upstream_results():
    graph = make_graph([{"id": "a"}, {"id": "b"}, {"id": "join"}], [("a", "join"), ("b", "join")])
    _, seen = drive(graph, "x", outputs={"a": "", "b": "B"})

    assert dict(seen)["join"] == "B"


def test_roots_receive_starting_input():
    graph = make_graph([{"id": "a"}, {"id": "b"}])
    _, seen = drive(graph, "start")

    assert seen == [("a", "start"), ("b", "start")]


def test_origin_with_inbound_edge_still_gets_starting_input():
    graph = make_graph([{"id": "a"}, {"id": "b"}], [("b", "a")])
    _, seen = drive(graph, "start", origins=["a"], outputs={"a": "A"})

    assert seen == [("a", "start"), ("b", "start")]


def test_cycle_stops_without_progress():
    graph = make_graph([{"id": "a"}, {"id": "b"}], [("a", "b"), ("b", "a")])
    ctx, seen = drive(graph, "x")

    assert seen == []
    assert ctx.passes == 1
    assert [n.id for n in ctx.unresolved()] == ["a", "b"]


def test_pass_without_progress_ends_scheduling():
    graph = make_graph([{"id": "a"}, {"id": "b"}], [("a", "b")])
    ctx = ExecutionContext.create(graph, "x")
    scheduler = Scheduler(graph, pass_factor=1)

    # Never recording a result means no pass makes progress.
    yielded = list(scheduler.iter_ready(ctx))

    assert [n.id for n, _ in yielded] == ["a"]
    assert ctx.passes == 1
    assert scheduler.max_passes == 2
