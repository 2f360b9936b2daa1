"""Scan job inspection CLI commands."""

import typer
from rich.table import Table

from riskscan.errors import RiskScanError, ScanNotFound

from .deps import cli_module
from .scan_command import DEFAULT_USER
from .shared import STATUS_STYLES, app, console, print_job, print_json


def _manager():
    cli = cli_module()
    settings = cli.load_scan_settings()
    cli.setup_logging(settings.log_level)
    try:
        return cli.build_manager(settings)
    except RiskScanError as exc:
        console.print(f"[red]Configuration error: {exc}[/red]")
        raise typer.Exit(1) from exc


@app.command()
def status(
    scan_id: str = typer.Argument(..., help="Scan identifier"),
    as_json: bool = typer.Option(False, "--json", help="Print the job document as JSON"),
) -> None:
    """Show the state of a scan job."""
    manager = _manager()
    try:
        job = manager.get_scan_status(scan_id)
    except ScanNotFound as exc:
        console.print(f"[red]{exc}[/red]")
        raise typer.Exit(1) from exc

    if as_json:
        print_json(job.to_dict())
        return
    print_job(job)


@app.command("list")
def list_scans(
    user: str = typer.Option(DEFAULT_USER, "--user", "-u", help="Owner of the scan jobs"),
    limit: int = typer.Option(50, "--limit", "-n", min=1, help="Maximum jobs to show"),
) -> None:
    """List a user's scans, newest first."""
    manager = _manager()
    jobs = manager.list_scans(user, limit)
    if not jobs:
        console.print("[dim]No scans found.[/dim]")
        return

    table = Table(title=f"Scans for {user}")
    table.add_column("ID", no_wrap=True)
    table.add_column("Target")
    table.add_column("Status")
    table.add_column("Risk", justify="right")
    table.add_column("Created")
    for job in jobs:
        style = STATUS_STYLES.get(str(job.status), "")
        table.add_row(
            job.id,
            job.target_url,
            f"[{style}]{job.status}[/{style}]",
            "-" if job.risk_score is None else str(job.risk_score),
            f"{job.created_at:%Y-%m-%d %H:%M:%S}",
        )
    console.print(table)
