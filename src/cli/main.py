"""CLI entry point and base commands.

Provides the main CLI application with commands for:
- serve: Run the API server
- agents: Show the agent pipeline
- render: Print an agent's rendered system prompt
- workflows: List stored workflows
"""

# Configure logging early before other imports
import src.logging_config  # noqa: F401

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from src.agents.prompts import find_placeholders, get_template, render_prompt
from src.agents.registry import PIPELINE, AgentType, get_agent_info

app = typer.Typer(
    name="specflow",
    help="Spec-driven document generation through a pipeline of LLM agents",
    add_completion=False,
    no_args_is_help=True,
)

console = Console()


def parse_vars(pairs: list[str]) -> dict[str, str]:
    """Parse ``key=value`` pairs; later keys win.

    Raises:
        typer.BadParameter: If a pair has no ``=`` or an empty key
    """
    values: dict[str, str] = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key.strip():
            raise typer.BadParameter(f"Expected key=value, got '{pair}'", param_hint="--var")
        values[key.strip()] = value
    return values


@app.command()
def serve(
    host: Annotated[
        Optional[str],  # noqa: UP007
        typer.Option("--host", "-h", help="Host to bind to (default: API_HOST)"),
    ] = None,
    port: Annotated[
        Optional[int],  # noqa: UP007
        typer.Option("--port", "-p", help="Port to bind to (default: API_PORT)"),
    ] = None,
    reload: Annotated[
        bool,
        typer.Option("--reload", "-r", help="Enable auto-reload for development"),
    ] = False,
    workers: Annotated[
        Optional[int],  # noqa: UP007
        typer.Option("--workers", "-w", help="Number of worker processes (default: API_WORKERS)"),
    ] = None,
) -> None:
    """Start the Specflow API server.

    Runs the FastAPI application with uvicorn.
    """
    import uvicorn

    from src.settings import get_settings

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    workers = workers or settings.api_workers

    console.print(
        Panel(
            f"[bold green]Starting Specflow API Server[/bold green]\n"
            f"Host: {host}\n"
            f"Port: {port}\n"
            f"Workers: {workers}\n"
            f"Reload: {reload}",
            title="Specflow",
            border_style="green",
        )
    )

    uvicorn.run(
        "src.api.main:app",
        host=host,
        port=port,
        reload=reload,
        workers=workers if not reload else 1,
        log_level=settings.log_level.lower(),
    )


@app.command()
def agents() -> None:
    """Show the agent pipeline with output types and default variables."""
    table = Table(title="Agent Pipeline", show_header=True)
    table.add_column("#", justify="right", style="dim")
    table.add_column("Agent", style="cyan")
    table.add_column("Name")
    table.add_column("Primary Output", style="green")
    table.add_column("Variables")

    for index, agent_type in enumerate(PIPELINE):
        info = get_agent_info(agent_type)
        table.add_row(
            str(index),
            agent_type.value,
            info.name,
            info.primary_output,
            ", ".join(v.key for v in info.default_variables),
        )

    console.print(table)


@app.command()
def render(
    agent: Annotated[
        AgentType,
        typer.Argument(help="Agent whose prompt to render"),
    ],
    var: Annotated[
        Optional[list[str]],  # noqa: UP007
        typer.Option("--var", "-v", help="Context variable as key=value (repeatable)"),
    ] = None,
    constitution_file: Annotated[
        Optional[Path],  # noqa: UP007
        typer.Option(
            "--constitution-file",
            "-c",
            exists=True,
            dir_okay=False,
            readable=True,
            help="File whose text is appended as the project constitution",
        ),
    ] = None,
    placeholders: Annotated[
        bool,
        typer.Option("--placeholders", help="List the template's placeholders instead"),
    ] = False,
) -> None:
    """Print an agent's system prompt with variables substituted.

    Missing variables render as "[name not specified]".
    """
    if placeholders:
        for name in find_placeholders(get_template(agent)):
            console.print(name)
        return

    constitution = constitution_file.read_text(encoding="utf-8") if constitution_file else None
    prompt = render_prompt(agent, parse_vars(var or []), constitution)
    # Plain print: prompt text is Markdown, not rich markup
    typer.echo(prompt)


@app.command()
def workflows(
    limit: Annotated[
        int,
        typer.Option("--limit", "-l", help="Maximum workflows to show"),
    ] = 50,
) -> None:
    """List stored workflows, newest first."""
    asyncio.run(_list_workflows(limit))


async def _list_workflows(limit: int) -> None:
    """List workflows from database."""
    from src.dal import WorkflowRepository
    from src.storage import close_db, get_session

    try:
        async with get_session() as session:
            repo = WorkflowRepository(session)
            items = await repo.list_all(limit=limit)
            total = await repo.count()

            # Extract data while session is active
            rows = [
                (
                    w.id[:8],
                    w.name,
                    w.current_agent or "-",
                    w.status,
                    w.updated_at.strftime("%Y-%m-%d %H:%M") if w.updated_at else "-",
                )
                for w in items
            ]
    finally:
        await close_db()

    if not rows:
        console.print("[yellow]No workflows found.[/yellow]")
        return

    table = Table(title=f"Workflows ({len(rows)}/{total})", show_header=True)
    table.add_column("ID", style="dim")
    table.add_column("Name", style="cyan")
    table.add_column("Agent")
    table.add_column("Status", justify="center")
    table.add_column("Updated")

    status_colors = {"completed": "green", "in_progress": "yellow", "error": "red"}
    for row in rows:
        color = status_colors.get(row[3], "dim")
        table.add_row(row[0], row[1], row[2], f"[{color}]{row[3]}[/{color}]", row[4])

    console.print(table)


if __name__ == "__main__":
    app()
