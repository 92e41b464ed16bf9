"""Shared CLI app objects and helpers."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import NoReturn

import typer
from rich.console import Console

from redfox.config import RedFoxConfig, load_config
from redfox.errors import EXIT_INPUT, RedFoxError
from redfox.utils.logs import configure_logging

app = typer.Typer(
    name="redfox",
    help="Concurrent HTTP credential auditing for authorized security assessments",
    no_args_is_help=True,
)
console = Console()


@dataclass
class CliState:
    """Global options captured by the app callback."""

    config_path: Path | None = None
    verbose: int = 0
    quiet: bool = False


state = CliState()


@app.callback()
def main_callback(
    config: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Config file (default: $REDFOX_CONFIG or ~/.redfox/config.yml)",
    ),
    verbose: int = typer.Option(0, "--verbose", "-v", count=True, help="More output (-vv for debug paths)"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only warnings and errors"),
) -> None:
    """RedFox: audit login endpoints you are authorized to test."""
    state.config_path = config
    state.verbose = verbose
    state.quiet = quiet


def fail(message: str, code: int = EXIT_INPUT) -> NoReturn:
    """Print an error and exit with ``code``."""
    console.print(f"[red]Error: {message}[/red]")
    raise typer.Exit(code)


def fail_with(exc: RedFoxError) -> NoReturn:
    fail(str(exc), exc.exit_code)


def load_settings() -> RedFoxConfig:
    """Load the effective config and configure logging from it."""
    try:
        config = load_config(state.config_path)
    except RedFoxError as exc:
        configure_logging(verbose=state.verbose, quiet=state.quiet)
        fail_with(exc)
    configure_logging(
        config.general.log_level,
        config.general.log_file,
        verbose=state.verbose,
        quiet=state.quiet,
    )
    return config


def parse_json_option(value: str | None, name: str) -> dict[str, str]:
    """Parse a ``--data``/``--headers`` style JSON object option."""
    if not value:
        return {}
    try:
        data = json.loads(value)
    except json.JSONDecodeError as exc:
        fail(f"{name} must be a JSON object: {exc}")
    if not isinstance(data, dict):
        fail(f"{name} must be a JSON object")
    return {str(key): str(item) for key, item in data.items()}
