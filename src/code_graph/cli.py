"""Typer app for indexing, querying and planning against a project graph."""

from __future__ import annotations

import asyncio
import logging
from collections import Counter
from pathlib import Path

import typer
from rich.console import Console
from rich.table import Table

from code_graph.session import ProjectSession

app = typer.Typer(name="code-graph", help="Knowledge graph and prompt context for a TS/JS project.")
console = Console()


def _setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(level=level, format="%(name)s | %(levelname)s | %(message)s")


def _check_project(project: Path) -> Path:
    if not project.is_dir():
        console.print(f"[red]✗[/red] Project directory not found: {project}")
        raise typer.Exit(1)
    return project.resolve()


async def _indexed_session(project: Path) -> ProjectSession:
    session = ProjectSession()
    await session.start_indexing(project, watch=False)
    session.stop_indexing()
    return session


@app.command()
def index(
    project: Path = typer.Argument(Path("."), help="Project root directory"),
    as_json: bool = typer.Option(False, "--json", help="Print the graph snapshot as JSON"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable detailed logging"),
) -> None:
    """Index the project once and show graph statistics."""
    _setup_logging(verbose)
    root = _check_project(project)
    session = asyncio.run(_indexed_session(root))
    graph = session.get_graph()

    if as_json:
        typer.echo(graph.model_dump_json(indent=2))
        return

    kind_counts = Counter(n.kind.value for n in graph.nodes.values())
    edge_counts = Counter(e.kind.value for e in graph.edges)
    console.print(f"[bold]Graph for {root}[/bold]")
    console.print(f"  Files: {len(graph.files())}")
    console.print(f"  Nodes: {len(graph.nodes)}")
    for kind, count in sorted(kind_counts.items()):
        console.print(f"    {kind}: {count}")
    console.print(f"  Edges: {len(graph.edges)}")
    for kind, count in sorted(edge_counts.items()):
        console.print(f"    {kind}: {count}")


@app.command()
def query(
    prompt: str = typer.Argument(..., help="Free-text request"),
    project: Path = typer.Option(Path("."), "--project", "-p", help="Project root directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable detailed logging"),
) -> None:
    """Show the ranked nodes and the context document for a prompt."""
    _setup_logging(verbose)
    root = _check_project(project)

    async def run() -> tuple[list, str]:
        session = await _indexed_session(root)
        retriever = session.retriever
        return retriever.find_relevant(prompt), await retriever.get_context_for_prompt(prompt)

    ranked, context = asyncio.run(run())
    if not ranked:
        console.print(f"[yellow]No matching code for '{prompt}'[/yellow]")
        return

    table = Table(title=f"Top {len(ranked)} nodes")
    table.add_column("Score", justify="right")
    table.add_column("Kind", style="cyan")
    table.add_column("Id")
    table.add_column("Lines", justify="right")
    for r in ranked:
        table.add_row(str(r.score), r.node.kind.value, r.node.id, f"{r.node.start.line}-{r.node.end.line}")
    console.print(table)
    console.print(context, markup=False, highlight=False)


@app.command()
def plan(
    prompt: str = typer.Argument(..., help="Free-text request"),
    project: Path = typer.Option(Path("."), "--project", "-p", help="Project root directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable detailed logging"),
) -> None:
    """Generate a step plan for a request using the project context."""
    _setup_logging(verbose)
    root = _check_project(project)

    async def run():
        session = await _indexed_session(root)
        return await session.create_plan(prompt)

    result = asyncio.run(run())
    for i, step in enumerate(result.steps, 1):
        detail = step.file_path or step.command or step.thought or ""
        console.print(f"[bold]{i}.[/bold] [cyan]{step.type.value}[/cyan] {detail}")
        if step.content:
            console.print(f"   {step.content}", markup=False)


@app.command()
def watch(
    project: Path = typer.Argument(Path("."), help="Project root directory"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable detailed logging"),
) -> None:
    """Index the project and keep the graph updated until Ctrl+C."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(name)s | %(levelname)s | %(message)s",
    )
    root = _check_project(project)
    session = ProjectSession()

    async def run() -> None:
        await session.start_indexing(root)
        if not session.project_indexer.is_watching:
            console.print(f"[red]✗[/red] Could not watch {root}")
            raise typer.Exit(1)
        console.print(f"\n[bold green]Watching[/bold green] [cyan]{root}[/cyan] for changes...")
        console.print(f"[dim]  {len(session.store)} nodes indexed. Press Ctrl+C to stop[/dim]\n")
        while True:
            await asyncio.sleep(1)

    try:
        asyncio.run(run())
    except KeyboardInterrupt:
        session.stop_indexing()
        console.print(f"\n[yellow]Stopped watching.[/yellow] {len(session.store)} nodes in graph.")


if __name__ == "__main__":
    app()
