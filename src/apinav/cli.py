from __future__ import annotations

import json
from pathlib import Path
from typing import Optional, Sequence

import typer
from rich.console import Console
from rich.table import Table

from apinav.config import Settings
from apinav.domain.models import ApiEndpoint
from apinav.log import configure_logging
from apinav.orchestrator.provider import EndpointProvider, ScanReport
from apinav.repo.project_detector import detect_project_type
from apinav.scanners.registry import build_default_registry


app = typer.Typer(no_args_is_help=True, add_completion=False)

console = Console()


@app.callback()
def main_options(
    log_level: Optional[str] = typer.Option(
        None, "--log-level", help="DEBUG|INFO|WARNING|ERROR (default: APINAV_LOG_LEVEL or WARNING)"
    ),
) -> None:
    settings = Settings()
    configure_logging(log_level or settings.log_level)


def _resolve_roots(roots: Sequence[str]) -> list[Path]:
    out: list[Path] = []
    for root in roots:
        root_path = Path(root).expanduser().resolve()
        if not root_path.exists():
            raise typer.BadParameter(f"Root path does not exist: {root_path}")
        if not root_path.is_dir():
            raise typer.BadParameter(f"Root path is not a directory: {root_path}")
        out.append(root_path)
    return out


def _run_scan(roots: Sequence[str]) -> tuple[EndpointProvider, ScanReport]:
    settings = Settings()
    provider = EndpointProvider(build_default_registry(settings), _resolve_roots(roots), settings=settings)
    report = provider.scan_workspace()
    if report is None:
        # only possible if something else is scanning through this provider
        raise typer.Exit(code=1)
    return provider, report


def _print_report(report: ScanReport) -> None:
    for r in report.roots:
        status = f"[red]failed: {r.error}[/red]" if r.error else f"{r.endpoint_count} endpoints"
        console.print(f"[bold]{r.root}[/bold] ({r.project_type}): {status}")


def _endpoint_table(endpoints: Sequence[ApiEndpoint]) -> Table:
    table = Table(show_header=True, header_style="bold")
    table.add_column("METHOD", no_wrap=True)
    table.add_column("PATH")
    table.add_column("HANDLER")
    table.add_column("FILE:LINE", no_wrap=True)
    table.add_column("LANG", no_wrap=True)

    for e in endpoints:
        table.add_row(
            e.http_method or "ANY",
            e.api_path,
            e.qualified_name,
            e.location,
            e.language,
        )
    return table


def _to_json(endpoints: Sequence[ApiEndpoint]) -> str:
    return json.dumps([e.model_dump(mode="json") for e in endpoints], indent=2)


@app.command()
def scan(
    roots: list[str] = typer.Argument(..., help="Workspace roots to scan"),
    format: str = typer.Option("table", help="Output format: table|json"),
) -> None:
    """Detect each root's framework and list every endpoint found."""
    if format.lower() not in ("table", "json"):
        raise typer.BadParameter(f"Unknown format: {format}")

    provider, report = _run_scan(roots)

    if format.lower() == "json":
        # plain stdout so the output stays machine readable
        typer.echo(_to_json(provider.endpoints))
        return

    console.print(f"[bold green]apinav[/bold green] scan: {len(report.roots)} root(s)")
    _print_report(report)
    console.print(f"Endpoints found: [bold]{report.endpoint_count}[/bold]")
    if provider.endpoints:
        console.print(_endpoint_table(provider.endpoints))


@app.command()
def search(
    query: str = typer.Argument(..., help="Case-insensitive substring of path, class or handler"),
    roots: list[str] = typer.Argument(..., help="Workspace roots to scan"),
    limit: Optional[int] = typer.Option(None, help="Max rows to print (default: APINAV_SEARCH_MAX_RESULTS)"),
    format: str = typer.Option("table", help="Output format: table|json"),
) -> None:
    """Scan the roots, then print endpoints matching QUERY."""
    provider, _ = _run_scan(roots)
    matches = provider.search_endpoints(query)
    cap = limit if limit is not None else provider.settings.search_max_results
    shown = matches[:cap]

    if format.lower() == "json":
        typer.echo(_to_json(shown))
        return

    console.print(f"[bold]Matches:[/bold] {len(matches)} (showing up to {cap})")
    if shown:
        console.print(_endpoint_table(shown))


@app.command()
def detect(
    root: str = typer.Argument(..., help="Workspace root"),
) -> None:
    """Print the project type detected for ROOT."""
    (root_path,) = _resolve_roots([root])
    console.print(detect_project_type(root_path))


def main() -> None:
    app()


if __name__ == "__main__":
    main()
