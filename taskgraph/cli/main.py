"""Main CLI entry point using Typer."""

import json
from pathlib import Path

import typer
from pydantic import ValidationError
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from taskgraph import __version__
from taskgraph.core.exceptions import GraphCycleDetectedError, TaskGraphError
from taskgraph.graph.builder import build_graph
from taskgraph.graph.critical_path import CriticalPathFinder
from taskgraph.graph.eligibility import EligibilityEvaluator
from taskgraph.graph.leveler import TopologicalLeveler
from taskgraph.graph.models import GraphSnapshot
from taskgraph.graph.pipeline import compute_layout

app = typer.Typer(
    name="taskgraph",
    help="Taskgraph - Task Dependency Graph Engine",
    add_completion=True,
    rich_markup_mode="rich",
)

console = Console()

STATUS_COLORS = {
    "completed": "green",
    "in_progress": "blue",
    "pending": "dim",
}


def version_callback(value: bool) -> None:
    """Print version and exit."""
    if value:
        console.print(f"[bold blue]Taskgraph[/bold blue] version {__version__}")
        raise typer.Exit()


def load_snapshot(path: Path) -> GraphSnapshot:
    """
    Load a ``{"tasks": [...], "dependencies": [...]}`` JSON file.

    Raises:
        typer.Exit: If the file is missing or invalid.
    """
    if not path.exists() or not path.is_file():
        console.print(f"[bold red]Snapshot not found: {path}[/bold red]")
        raise typer.Exit(code=1)

    try:
        return GraphSnapshot.model_validate_json(path.read_text())
    except ValidationError as e:
        console.print(f"[bold red]Invalid snapshot {path}:[/bold red]\n{escape(str(e))}")
        raise typer.Exit(code=1) from e


def report_error(error: TaskGraphError) -> None:
    """Print an engine error, with the deadlock hint for cycles."""
    console.print(f"[bold red]{error}[/bold red]")
    if isinstance(error, GraphCycleDetectedError):
        console.print(f"[yellow]{error.remediation}[/yellow]")


@app.callback()
def main(
    version: bool | None = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
) -> None:
    """
    Taskgraph - levels, start eligibility and critical paths for task graphs.
    """
    pass


@app.command()
def layout(
    snapshot: Path = typer.Argument(..., help="Path to a tasks/dependencies JSON file"),
    output: Path | None = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the layout as JSON to this file",
    ),
) -> None:
    """
    Compute levels, coordinates and the critical path.

    Example:
        taskgraph layout tasks.json -o layout.json
    """
    data = load_snapshot(snapshot)

    try:
        result = compute_layout(data.tasks, data.dependencies)
    except TaskGraphError as e:
        report_error(e)
        raise typer.Exit(code=1) from e

    table = Table(title="Task Layout")
    table.add_column("Level", style="cyan")
    table.add_column("Task", style="bold")
    table.add_column("Status")
    table.add_column("Position")
    table.add_column("Critical")

    for node in sorted(result.nodes, key=lambda n: (n.level, n.y)):
        color = STATUS_COLORS.get(node.status.value, "white")
        table.add_row(
            str(node.level),
            escape(node.title or node.task_id),
            f"[{color}]{node.status.value}[/{color}]",
            f"({node.x:g}, {node.y:g})",
            "[red]yes[/red]" if node.is_critical else "",
        )

    console.print(table)

    if output:
        output.write_text(json.dumps(result.to_dict(), indent=2))
        console.print(f"[green]Saved to {output}[/green]")


@app.command("can-start")
def can_start(
    snapshot: Path = typer.Argument(..., help="Path to a tasks/dependencies JSON file"),
    task_id: str = typer.Argument(..., help="Task to check"),
) -> None:
    """
    Check whether a task's blocking dependencies are all completed.

    Example:
        taskgraph can-start tasks.json T2
    """
    data = load_snapshot(snapshot)
    evaluator = EligibilityEvaluator(build_graph(data.tasks, data.dependencies))

    try:
        report = evaluator.evaluate(task_id)
    except TaskGraphError as e:
        report_error(e)
        raise typer.Exit(code=1) from e

    if report.can_start:
        console.print(f"[bold green]{task_id} can start[/bold green]")
    else:
        console.print(
            f"[bold yellow]{task_id} is blocked by: "
            f"{', '.join(report.unmet_dependencies)}[/bold yellow]"
        )


@app.command("critical-path")
def critical_path(
    snapshot: Path = typer.Argument(..., help="Path to a tasks/dependencies JSON file"),
) -> None:
    """
    Show the longest chain of blocking dependencies.
    """
    data = load_snapshot(snapshot)
    graph = build_graph(data.tasks, data.dependencies)

    try:
        path = CriticalPathFinder().find(graph)
    except TaskGraphError as e:
        report_error(e)
        raise typer.Exit(code=1) from e

    if not path.task_ids:
        console.print("[dim]No blocking dependencies[/dim]")
        return

    chain = " -> ".join(escape(graph.tasks[t].title or t) for t in path.task_ids)
    console.print(
        Panel(
            chain,
            title=f"[bold red]Critical Path ({path.length} tasks)[/bold red]",
            border_style="red",
        )
    )


@app.command()
def check(
    snapshot: Path = typer.Argument(..., help="Path to a tasks/dependencies JSON file"),
) -> None:
    """
    Validate a snapshot: dangling dependencies and cycles.
    """
    data = load_snapshot(snapshot)
    graph = build_graph(data.tasks, data.dependencies)

    for edge in graph.dropped_edges:
        console.print(
            f"[yellow]Dropped dependency {edge.id}: "
            f"{edge.task_id} -> {edge.depends_on_task_id} references an unknown task[/yellow]"
        )

    try:
        levels = TopologicalLeveler().assign_levels(graph)
    except GraphCycleDetectedError as e:
        report_error(e)
        raise typer.Exit(code=1) from e

    depth = max(levels.values()) + 1 if levels else 0
    console.print(
        f"[bold green]OK[/bold green]: {len(graph.tasks)} tasks, "
        f"{len(graph.edges)} dependencies, {depth} levels"
    )


@app.command()
def serve(
    port: int | None = typer.Option(None, "--port", "-p", help="Port for the API server"),
    host: str | None = typer.Option(None, "--host", "-h", help="Host to bind to"),
) -> None:
    """
    Start the Taskgraph API server.

    Example:
        taskgraph serve --port 3000
    """
    import uvicorn

    from taskgraph.api.main import app as api_app
    from taskgraph.core.config import get_settings
    from taskgraph.core.logging import configure_logging

    settings = get_settings()
    configure_logging(settings)

    host = host or settings.taskgraph_api_host
    port = port or settings.taskgraph_api_port

    console.print(
        Panel(
            f"[bold]API:[/bold]    http://{host}:{port}/api/graph/layout\n"
            f"[bold]Docs:[/bold]   http://{host}:{port}/docs\n"
            f"[bold]Health:[/bold] http://{host}:{port}/health",
            title="[bold cyan]Taskgraph API[/bold cyan]",
            border_style="cyan",
        )
    )

    uvicorn.run(api_app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    app()
