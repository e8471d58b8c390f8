"""ScanHub CLI - security scan orchestration."""

from contextlib import contextmanager

import typer
from rich.console import Console
from rich.table import Table

from scanhub.config import load_settings
from scanhub.errors import ConfigError, ValidationError
from scanhub.logging_setup import configure_logging
from scanhub.models import (
    ScanTaskRequest,
    ScanTaskResponse,
    Severity,
    TaskStatus,
    credential_from_header,
)
from scanhub.runtime import ScanHub, build_scanhub

app = typer.Typer(
    name="scanhub",
    help="Security scan orchestration engine",
    no_args_is_help=True,
)
console = Console()

_STATUS_STYLE = {
    TaskStatus.PENDING: "cyan",
    TaskStatus.IN_PROGRESS: "blue",
    TaskStatus.COMPLETED: "green",
    TaskStatus.FAILED: "red",
    TaskStatus.INVALID: "yellow",
}

_SEVERITY_STYLE = {
    Severity.CRITICAL: "bold red",
    Severity.HIGH: "red",
    Severity.MEDIUM: "yellow",
    Severity.LOW: "cyan",
    Severity.INFO: "dim",
}


def open_scanhub(verbose: bool = False) -> ScanHub:
    """Load settings and assemble the engine."""
    try:
        settings = load_settings()
    except ConfigError as exc:
        console.print(f"[red]Configuration error: {exc.message}[/red]")
        raise typer.Exit(1) from None
    configure_logging(verbose or settings.verbose)
    return build_scanhub(settings)


@contextmanager
def scanhub_session(verbose: bool = False):
    hub = open_scanhub(verbose)
    try:
        yield hub
    finally:
        hub.close()


def _report(response: ScanTaskResponse) -> None:
    style = _STATUS_STYLE.get(response.status, "white")
    console.print(f"[{style}]{response.status.value}[/{style}] {response.scan_task_id}")
    if response.message:
        console.print(f"  {response.message}", markup=False)
    if response.is_error:
        raise typer.Exit(1)


@app.command()
def version() -> None:
    """Show the installed ScanHub version."""
    from importlib.metadata import PackageNotFoundError
    from importlib.metadata import version as pkg_version

    try:
        current_version = pkg_version("scanhub")
    except PackageNotFoundError:
        current_version = "0.0.0+unknown"

    console.print(f"ScanHub {current_version}")


@app.command()
def submit(
    url: list[str] = typer.Option(..., "--url", "-u", help="Target URL (repeatable)"),
    protocol: list[str] = typer.Option(..., "--protocol", "-p", help="HTTP, HTTPS or FTP"),
    depth: int = typer.Option(1, "--depth", "-d", help="Scanning depth (1-10)"),
    start: str | None = typer.Option(None, "--start", help="ISO-8601 start time"),
    credentials: str | None = typer.Option(
        None, "--credentials", "-c", help="Authorization header value (Bearer/Basic)"
    ),
    task_id: str | None = typer.Option(None, "--id", help="Explicit scan task id"),
    scope: str = typer.Option("strict", "--scope", help="Scanner scope"),
    run_now: bool = typer.Option(True, "--run/--no-run", help="Run the scan immediately"),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Submit a scan task, and run it unless --no-run is given."""
    request = ScanTaskRequest(
        target_urls=url,
        protocol_types=protocol,
        scanning_depth=depth,
        start_time=start,
        credentials=credentials,
        scan_task_id=task_id,
        scope=scope,
    )
    with scanhub_session(verbose) as hub:
        if run_now:
            with console.status("[bold]Scanning...[/bold]"):
                response = hub.tasks.submit_and_run(request)
        else:
            response = hub.tasks.submit(request)
    _report(response)


@app.command()
def run(
    task_id: str = typer.Argument(..., help="Scan task id"),
    credentials: str | None = typer.Option(
        None, "--credentials", "-c", help="Authorization header value (Bearer/Basic)"
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
) -> None:
    """Run a previously submitted PENDING task."""
    try:
        credential = credential_from_header(credentials)
    except ValidationError as exc:
        console.print(f"[red]{exc.message}[/red]")
        raise typer.Exit(1) from None

    with scanhub_session(verbose) as hub:
        with console.status("[bold]Scanning...[/bold]"):
            response = hub.tasks.run(task_id, credential)
    _report(response)


@app.command()
def status(
    task_id: str = typer.Argument(..., help="Scan task id"),
) -> None:
    """Show the current status of a scan task."""
    with scanhub_session() as hub:
        response = hub.tasks.status(task_id)
    _report(response)


@app.command()
def results(
    task_id: str = typer.Argument(..., help="Scan task id"),
    show_logs: bool = typer.Option(False, "--logs", help="Print execution logs too"),
) -> None:
    """Show stored results and findings for a scan task."""
    with scanhub_session() as hub:
        responses = hub.results.results_for_task(task_id)

    if any(r.is_error for r in responses):
        for response in responses:
            console.print(f"[red]{response.summary}[/red]")
        raise typer.Exit(1)
    if not responses:
        console.print(f"[yellow]No results stored for task {task_id}[/yellow]")
        return

    for response in responses:
        console.print(f"\n[bold]Result {response.result_id}[/bold]")
        console.print(f"[dim]{response.summary}[/dim]")
        findings = response.details.get("vulnerabilities", [])
        if findings:
            table = Table(show_header=True, header_style="bold")
            table.add_column("Severity")
            table.add_column("Type")
            table.add_column("Location")
            table.add_column("Description", overflow="fold")
            for vuln in findings:
                style = _SEVERITY_STYLE[Severity.parse(vuln["severity"])]
                table.add_row(
                    f"[{style}]{vuln['severity']}[/{style}]",
                    vuln["type"],
                    vuln["location"],
                    vuln["description"][:120],
                )
            console.print(table)

        if show_logs:
            for line in response.details.get("executionLogs", []):
                console.print(f"  {line}", markup=False)


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
