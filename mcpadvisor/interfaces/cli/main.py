"""
CLI Main - Typer-based command-line interface.

Usage:
    mcpadvisor search "read and summarize PDF files" -k pdf -k documents
    mcpadvisor health
    mcpadvisor catalog --url https://getmcp.io/api/servers.json
    mcpadvisor serve
"""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path

import typer
from rich.console import Console
from rich.panel import Panel
from rich.progress import Progress, SpinnerColumn, TextColumn
from rich.table import Table

from mcpadvisor.config import McpAdvisorError, Settings, get_settings
from mcpadvisor.domains.search import RerankOptions, SearchQuery

app = typer.Typer(
    name="mcpadvisor",
    help="MCP Advisor - Find the right MCP server for a task",
    add_completion=False,
)
console = Console()


def _configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


@app.command()
def search(
    task: str = typer.Argument(..., help="What you want an MCP server to do"),
    keyword: list[str] = typer.Option([], "--keyword", "-k", help="Search keyword (repeatable)"),
    capability: list[str] = typer.Option(
        [], "--capability", "-c", help="Required capability (repeatable)"
    ),
    limit: int | None = typer.Option(None, "--limit", "-n", help="Number of results"),
    min_score: float | None = typer.Option(None, "--min-score", help="Minimum ranking score"),
    as_json: bool = typer.Option(False, "--json", help="Print results as JSON"),
) -> None:
    """Recommend MCP servers for a task."""
    settings = get_settings()
    _configure_logging(settings)

    query = SearchQuery(task_description=task, keywords=keyword, capabilities=capability)
    overrides: dict[str, float | int] = {}
    if limit is not None:
        overrides["limit"] = limit
    if min_score is not None:
        overrides["min_score"] = min_score
    options = RerankOptions(**overrides) if overrides else None

    asyncio.run(_search_async(settings, query, options, as_json))


async def _search_async(
    settings: Settings,
    query: SearchQuery,
    options: RerankOptions | None,
    as_json: bool,
) -> None:
    """Async search implementation."""
    from mcpadvisor.interfaces.services import build_services

    try:
        services = build_services(settings)
    except McpAdvisorError as e:
        console.print(f"[red]Error:[/red] {e.message}")
        raise typer.Exit(1)

    try:
        with Progress(
            SpinnerColumn(),
            TextColumn("[progress.description]{task.description}"),
            console=console,
            transient=True,
        ) as progress:
            progress.add_task("Searching providers...", total=None)
            await services.start()
            results = await services.orchestrator.search(query, options)
    finally:
        await services.close()

    if as_json:
        console.print_json(
            json.dumps([r.model_dump(mode="json") for r in results], ensure_ascii=False)
        )
        return

    if not results:
        console.print(
            Panel(
                "No MCP servers matched. Try a broader description or more keywords.",
                title="No Results",
                style="yellow",
            )
        )
        return

    table = Table(title=f"MCP servers for: {query.task_description[:60]}")
    table.add_column("#", style="dim", width=3)
    table.add_column("Server", style="cyan")
    table.add_column("Score", style="green", justify="right")
    table.add_column("Provider", style="magenta")
    table.add_column("Source")
    table.add_column("Description")

    for i, result in enumerate(results, 1):
        description = result.description
        if len(description) > 80:
            description = description[:77] + "..."
        table.add_row(
            str(i),
            result.title,
            f"{result.score:.3f}" if result.score is not None else "-",
            result.provider_name,
            result.source_url,
            description,
        )

    console.print(table)


@app.command()
def health() -> None:
    """Check the full-text search backends."""
    settings = get_settings()
    _configure_logging(settings)
    asyncio.run(_health_async(settings))


async def _health_async(settings: Settings) -> None:
    """Async health implementation."""
    from mcpadvisor.adapters.meilisearch import BackendMonitor, create_backend
    from mcpadvisor.config import resolve_backend_configs

    active, fallback = resolve_backend_configs(settings)
    primary = create_backend(active)
    secondary = create_backend(fallback) if fallback else None
    monitor = BackendMonitor(primary, secondary)

    try:
        report = await monitor.report()
    finally:
        await primary.close()
        if secondary:
            await secondary.close()

    table = Table(title="Search Backend Health")
    table.add_column("Role", style="cyan")
    table.add_column("Kind")
    table.add_column("Host")
    table.add_column("Status")
    table.add_column("Latency (ms)", justify="right")
    table.add_column("Documents", justify="right")

    rows = [("primary", report.primary)]
    if report.fallback:
        rows.append(("fallback", report.fallback))
    for role, backend in rows:
        status = "[green]healthy[/green]" if backend.healthy else f"[red]{backend.error}[/red]"
        table.add_row(
            role,
            backend.kind,
            backend.host,
            status,
            f"{backend.latency_ms:.1f}" if backend.latency_ms is not None else "-",
            str(backend.document_count) if backend.document_count is not None else "-",
        )

    console.print(table)
    console.print(Panel(report.recommendation, title="Recommendation"))
    if not report.primary.healthy and not (report.fallback and report.fallback.healthy):
        raise typer.Exit(1)


@app.command()
def catalog(
    url: list[str] = typer.Option([], "--url", "-u", help="Remote catalog URL (repeatable)"),
    file: list[Path] = typer.Option([], "--file", "-f", help="Local catalog file (repeatable)"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Offline data file to write"),
) -> None:
    """Merge catalog sources into the offline data file."""
    from mcpadvisor.domains.catalog import load_sources

    settings = get_settings()
    _configure_logging(settings)

    remote_urls = url or settings.catalog_remote_urls or [settings.getmcp_api_url]
    local_files = file or settings.catalog_local_files
    target = output or settings.offline_data_path

    entries = asyncio.run(
        load_sources(remote_urls, local_files, timeout=settings.http_timeout_seconds)
    )
    if not entries:
        console.print("[red]Error:[/red] No entries loaded from any source")
        raise typer.Exit(1)

    records = [
        {
            "title": e.title,
            "description": e.description,
            "github_url": e.source_url,
            "categories": e.categories,
            "tags": e.tags,
            "installations": e.installations,
        }
        for e in entries
    ]
    target.parent.mkdir(parents=True, exist_ok=True)
    target.write_text(json.dumps(records, indent=2, ensure_ascii=False), encoding="utf-8")
    console.print(f"[green]Wrote {len(records)} entries to:[/green] {target}")


@app.command()
def serve(
    host: str | None = typer.Option(None, "--host", "-h", help="Host to bind"),
    port: int | None = typer.Option(None, "--port", "-p", help="Port to bind"),
    reload: bool = typer.Option(False, "--reload", "-r", help="Enable auto-reload"),
) -> None:
    """Start the API server."""
    import uvicorn

    settings = get_settings()
    _configure_logging(settings)
    host = host or settings.api_host
    port = port or settings.api_port

    console.print("\n[green]Starting MCP Advisor API server[/green]")
    console.print(f"[dim]http://{host}:{port}[/dim]\n")

    uvicorn.run(
        "mcpadvisor.interfaces.api:create_app",
        host=host,
        port=port,
        reload=reload,
        factory=True,
    )


@app.command()
def version() -> None:
    """Show version information."""
    from mcpadvisor import __version__

    console.print(f"MCP Advisor v{__version__}")


def main() -> None:
    """CLI entry point."""
    app()


if __name__ == "__main__":
    main()
