"""CLI entrypoint using typer."""

from __future__ import annotations

import asyncio

import typer
from rich.console import Console
from rich.table import Table

from grant_monitor_core.config.settings import Settings
from grant_monitor_core.models.similarity import SimilarityMode, SimilarityOutcome
from grant_monitor_infra.db.engine import create_engine
from grant_monitor_infra.db.session import create_session_factory, init_db
from grant_monitor_service.observability import configure_logging, configure_tracing
from grant_monitor_service.similarity import create_resolver

app = typer.Typer(
    name="grant-monitor",
    help="Similar grant cluster lookup for the grant pipeline dashboard",
)
console = Console()


@app.command()
def similar(
    cluster_id: str = typer.Argument(..., help="Reference grant cluster id"),
    threshold: float | None = typer.Option(
        None,
        "--threshold",
        "-t",
        min=0.0,
        max=1.0,
        help="Minimum similarity [default: from settings]",
    ),
    limit: int | None = typer.Option(
        None, "--limit", "-n", min=1, help="Maximum results [default: from settings]"
    ),
    local: bool = typer.Option(
        False, "--local", help="Skip database ranking functions, rank in-process"
    ),
    as_json: bool = typer.Option(False, "--json", help="Print the raw outcome as JSON"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Find grant clusters similar to CLUSTER_ID."""
    settings = Settings()
    if verbose:
        settings.log_level = "DEBUG"

    if threshold is None:
        threshold = settings.similarity_default_threshold
    if limit is None:
        limit = settings.similarity_default_limit
    elif limit > settings.similarity_max_limit:
        msg = f"must be between 1 and {settings.similarity_max_limit}"
        raise typer.BadParameter(msg, param_hint="'--limit'")

    configure_logging(settings)
    configure_tracing(settings)

    mode: SimilarityMode = "local" if local else "auto"
    outcome = asyncio.run(_resolve(settings, cluster_id, threshold, limit, mode))

    if as_json:
        console.print_json(outcome.model_dump_json())
    elif outcome.success:
        _print_results(outcome)

    if not outcome.success:
        console.print(f"[red]Error:[/red] {outcome.error}", style="bold")
        raise typer.Exit(code=1)


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", help="Bind address"),
    port: int | None = typer.Option(None, "--port", help="Bind port"),
    verbose: bool = typer.Option(False, "-v", "--verbose", help="Enable debug logging"),
) -> None:
    """Run the similarity API."""
    import uvicorn

    from grant_monitor_service.api import create_app

    settings = Settings()
    if verbose:
        settings.log_level = "DEBUG"

    configure_logging(settings)
    configure_tracing(settings)

    bind_host = host or settings.api_host
    bind_port = port or settings.api_port
    console.print(f"[bold green]Serving on[/bold green] http://{bind_host}:{bind_port}")
    uvicorn.run(create_app(settings), host=bind_host, port=bind_port, log_config=None)


@app.command("init-db")
def init_database() -> None:
    """Create the grant_clusters table (SQLite mode)."""
    settings = Settings()
    configure_logging(settings)
    asyncio.run(_init_db(settings))
    console.print(f"[green]Database initialised:[/green] {settings.database_url}")


@app.command()
def version() -> None:
    """Show version."""
    console.print("grant-monitor v0.1.0")


async def _resolve(
    settings: Settings,
    cluster_id: str,
    threshold: float,
    limit: int,
    mode: SimilarityMode,
) -> SimilarityOutcome:
    """Run one resolution against a fresh engine."""
    engine = create_engine(settings)
    try:
        session_factory = create_session_factory(engine)
        async with session_factory() as session:
            resolver = create_resolver(session, settings)
            return await resolver.resolve(cluster_id, threshold, limit, mode=mode)
    finally:
        await engine.dispose()


async def _init_db(settings: Settings) -> None:
    """Create tables and release the engine."""
    engine = create_engine(settings)
    try:
        await init_db(engine)
    finally:
        await engine.dispose()


def _print_results(outcome: SimilarityOutcome) -> None:
    """Render results as a table."""
    data = outcome.data or []
    if not data:
        console.print("[yellow]No similar clusters found[/yellow]")
        return

    table = Table(title=f"Similar clusters ({outcome.source})")
    table.add_column("Score", justify="right")
    table.add_column("ID")
    table.add_column("Grant")
    table.add_column("Organisation")
    for result in data:
        table.add_row(
            f"{result.similarity_score:.3f}",
            result.id,
            result.grant_name,
            result.grant_organisation or "",
        )
    console.print(table)
    console.print(f"[dim]{outcome.count} result(s)[/dim]")


if __name__ == "__main__":
    app()
