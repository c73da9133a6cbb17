"""Command-line interface: run workflow files in the terminal."""

from __future__ import annotations

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.panel import Panel
from rich.prompt import Prompt
from rich.table import Table

from greyflow.engine import RunOutcome, WorkflowEngine
from greyflow.errors import InvalidWorkflowDocument
from greyflow.interaction import OperatorChannel
from greyflow.models import WorkflowDocument
from greyflow.store import export_document, export_filename, parse_document
from greyflow.templates import get_template, list_templates

console = Console()

STATUS_STYLES = {
    "idle": "dim",
    "executing": "blue",
    "completed": "green",
    "error": "red",
}


class ConsoleObserver:
    """Prints the progress trace as it happens."""

    def on_step(self, line: str) -> None:
        style = "red" if line.startswith(("Failed", "Workflow incomplete")) else "cyan"
        if line == "Workflow completed successfully!":
            style = "bold green"
        console.print(line, style=style, markup=False)

    def on_status_change(self, node_id: str, status: str) -> None:
        pass


class PromptOperatorChannel(OperatorChannel):
    """Asks the person at the terminal."""

    async def request_raw_input(self, prompt: str) -> str:
        console.print(Panel(prompt, title="[bold]Input needed[/bold]", border_style="yellow"))
        return await asyncio.to_thread(Prompt.ask, "Your input")

    async def request_additional_info(self, request: str) -> str:
        console.print(Panel(request, title="[bold]Additional information needed[/bold]", border_style="yellow"))
        return await asyncio.to_thread(Prompt.ask, "Your answer")


def load_document(path: Path) -> WorkflowDocument:
    """Load a ``.gre``/``.json`` workflow file, or a template key."""
    if not path.exists():
        template = get_template(str(path))
        if template is not None:
            return template
        raise FileNotFoundError(f"Workflow file not found: {path}")
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except ValueError as e:
        raise InvalidWorkflowDocument(f"{path} is not valid JSON: {e}") from e
    return parse_document(data)


def print_graph(doc: WorkflowDocument):
    table = Table(show_header=True, header_style="bold magenta", title=doc.name)
    table.add_column("Node ID", style="cyan")
    table.add_column("Label", style="green")
    table.add_column("Type", style="yellow")
    table.add_column("Inputs", style="blue")

    for node in doc.nodes:
        sources = ", ".join(e.source for e in doc.edges_to(node.id)) or "-"
        table.add_row(node.id, node.label or "-", node.type, sources)
    console.print(table)


def print_outcome(doc: WorkflowDocument, outcome: RunOutcome):
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Node", style="cyan")
    table.add_column("Status")
    for node in doc.nodes:
        status = outcome.node_status.get(node.id, "idle")
        style = STATUS_STYLES.get(status, "white")
        table.add_row(node.display_name, f"[{style}]{status}[/{style}]")
    console.print(table)

    if outcome.status == "completed":
        console.print(Panel(outcome.result or "", title="[bold]Result[/bold]", border_style="green"))
    elif outcome.status == "cancelled":
        console.print("[yellow]Workflow cancelled[/yellow]")
    else:
        console.print(Panel(outcome.error or "", title="[bold]Workflow failed[/bold]", border_style="red"))


async def run_workflow(path: Path, starting_input: str | None) -> int:
    doc = load_document(path)
    print_graph(doc)
    if starting_input is None:
        starting_input = await asyncio.to_thread(Prompt.ask, "Starting input", default="")

    engine = WorkflowEngine()
    try:
        outcome = await engine.execute(doc.graph(), starting_input, ConsoleObserver(), PromptOperatorChannel())
    finally:
        await engine.aclose()

    print_outcome(doc, outcome)
    return 0 if outcome.status != "failed" else 1


def show_templates():
    table = Table(show_header=True, header_style="bold magenta")
    table.add_column("Key", style="cyan")
    table.add_column("Name", style="green")
    table.add_column("Nodes", style="yellow")
    for key, name in list_templates().items():
        table.add_row(key, name, str(len(get_template(key).nodes)))
    console.print(table)


def export_template(key: str, target: Path) -> int:
    doc = get_template(key)
    if doc is None:
        console.print(f"[red]Unknown template: {key}. Available: {', '.join(list_templates())}[/red]")
        return 1
    path = export_document(doc, target if target.suffix else target / export_filename(doc.name))
    console.print(f"[green]Exported {doc.name} to {path}[/green]")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="greyflow", description="Run GreyFlow agent workflows")
    parser.add_argument("-v", "--verbose", action="store_true", help="Show debug logs")
    sub = parser.add_subparsers(dest="command", required=True)

    run = sub.add_parser("run", help="Run a workflow file (.gre/.json) or a template key")
    run.add_argument("workflow", type=Path)
    run.add_argument("--input", "-i", dest="input", default=None, help="Starting input")

    sub.add_parser("templates", help="List built-in templates")

    export = sub.add_parser("export-template", help="Write a built-in template to a .gre file")
    export.add_argument("name")
    export.add_argument("target", type=Path)

    sub.add_parser("serve", help="Start the HTTP server")
    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
    )

    if args.command == "run":
        console.print("[bold magenta]GreyFlow[/bold magenta]")
        console.print("=" * 60)
        try:
            return asyncio.run(run_workflow(args.workflow, args.input))
        except (FileNotFoundError, InvalidWorkflowDocument) as e:
            console.print(f"[red]ERROR: {e}[/red]")
            return 1
        except KeyboardInterrupt:
            console.print("\n[yellow]Interrupted[/yellow]")
            return 130
    if args.command == "templates":
        show_templates()
        return 0
    if args.command == "export-template":
        return export_template(args.name, args.target)
    if args.command == "serve":
        from greyflow.server import main as serve
        serve()
        return 0
    return 2


if __name__ == "__main__":
    sys.exit(main())
