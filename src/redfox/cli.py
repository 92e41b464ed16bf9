"""RedFox CLI - concurrent HTTP credential auditing."""

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as pkg_version

from redfox import __version__
from redfox.cli_commands import (  # noqa: F401  (registers commands)
    benchmark_command,
    config_command,
    report_command,
    scan_command,
    sessions_command,
    validate_command,
    wordlist_command,
)
from redfox.cli_commands.shared import app, console

__all__ = ["app", "main"]


@app.command()
def version() -> None:
    """Show the installed RedFox version."""
    try:
        current_version = pkg_version("redfox")
    except PackageNotFoundError:
        current_version = __version__

    console.print(f"RedFoxTool {current_version}")


def main():
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
