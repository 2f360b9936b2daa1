"""Scan CLI command."""

import typer

from riskscan.errors import InvalidTarget, RiskScanError

from .deps import cli_module
from .shared import app, console, print_job, print_json

DEFAULT_USER = "local"


@app.command()
def scan(
    target: str = typer.Argument(..., help="Host name or URL to scan"),
    user: str = typer.Option(DEFAULT_USER, "--user", "-u", help="Owner of the scan job"),
    as_json: bool = typer.Option(False, "--json", help="Print the job document as JSON"),
    no_wait: bool = typer.Option(
        False, "--no-wait", help="Print the scan identifier instead of the report"
    ),
) -> None:
    """Scan a website and print its risk report."""
    cli = cli_module()
    settings = cli.load_scan_settings()
    cli.setup_logging(settings.log_level)

    try:
        manager = cli.build_manager(settings)
    except RiskScanError as exc:
        console.print(f"[red]Configuration error: {exc}[/red]")
        raise typer.Exit(1) from exc

    async def run_scan() -> str:
        scan_id = await manager.create_scan(target, user)
        if no_wait:
            console.print(scan_id)
            # Nothing else owns the job once this process exits.
            await manager.wait()
            return scan_id

        if as_json:
            await manager.wait(scan_id)
        else:
            with console.status(f"[blue]Scanning {target}...[/blue]"):
                await manager.wait(scan_id)
        return scan_id

    try:
        scan_id = cli.safe_async_run(run_scan())
    except InvalidTarget as exc:
        console.print(f"[red]Invalid target: {exc}[/red]")
        raise typer.Exit(1) from exc

    if no_wait:
        return

    job = manager.get_scan_status(scan_id)
    if as_json:
        print_json(job.to_dict())
        return
    print_job(job)
