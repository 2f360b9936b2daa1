"""Shared CLI app objects and helpers."""

import json
import logging
from typing import Any

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.panel import Panel

from riskscan.config import ScanSettings
from riskscan.modules.jobs import JobStatus, ScanJob, ScanManager
from riskscan.modules.scanner.reporting import print_findings_summary

app = typer.Typer(
    name="riskscan",
    help="Website security scan engine",
    no_args_is_help=True,
)
console = Console()

STATUS_STYLES = {
    "pending": "dim",
    "running": "blue",
    "completed": "green",
    "failed": "red",
}


def setup_logging(level: str = "WARNING") -> None:
    """Route log records through Rich on the shared console."""
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=console, rich_tracebacks=True, show_path=False)],
        force=True,
    )


def build_manager(settings: ScanSettings) -> ScanManager:
    """Create the scan manager used by every command."""
    return ScanManager(settings=settings)


def print_json(data: Any) -> None:
    console.print_json(json.dumps(data))


def print_job(job: ScanJob) -> None:
    """Print a job header panel followed by its report, if any."""
    style = STATUS_STYLES.get(str(job.status), "")
    lines = [
        f"[bold]Scan:[/bold] {job.id}",
        f"[bold]Target:[/bold] {job.target_url}",
        f"[bold]Status:[/bold] [{style}]{job.status}[/{style}]",
        f"[bold]Started:[/bold] {job.started_at:%Y-%m-%d %H:%M:%S %Z}",
    ]
    if job.completed_at:
        lines.append(f"[bold]Finished:[/bold] {job.completed_at:%Y-%m-%d %H:%M:%S %Z}")
    if job.error:
        lines.append(f"[bold red]Error:[/bold red] {job.error}")
    console.print(Panel("\n".join(lines), title="Scan Job", border_style="blue"))

    if job.status == JobStatus.COMPLETED:
        print_findings_summary(console, job.target_url, job.risk_score, job.findings)
