"""riskscan CLI - website security scan engine."""

from riskscan.cli_commands.shared import app, build_manager, console, setup_logging
from riskscan.config import load_scan_settings
from riskscan.utils.async_utils import safe_async_run

# Register commands on the shared app.
from riskscan.cli_commands import info_command as _info_command  # noqa: E402,F401
from riskscan.cli_commands import jobs_command as _jobs_command  # noqa: E402,F401
from riskscan.cli_commands import scan_command as _scan_command  # noqa: E402,F401

__all__ = [
    "app",
    "build_manager",
    "console",
    "load_scan_settings",
    "main",
    "safe_async_run",
    "setup_logging",
]


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
