"""Version CLI command."""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

from riskscan.config import VERSION

from .shared import app, console


@app.command()
def version() -> None:
    """Show the installed riskscan version."""
    try:
        current_version = pkg_version("riskscan")
    except PackageNotFoundError:
        current_version = VERSION

    console.print(f"riskscan {current_version}")
