"""Report conversion CLI command."""

from __future__ import annotations

from pathlib import Path

import typer

from redfox.errors import RedFoxError
from redfox.modules.report import load_json_report, report_filename, write_report

from .scan_command import resolve_format
from .scan_runner import print_session
from .shared import app, console, fail_with, load_settings


@app.command()
def report(
    path: Path = typer.Argument(..., help="JSON report written by a previous scan"),
    output_format: str = typer.Option("html", "--format", "-f", help="json, html, csv, txt or xml"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Output directory (default: next to the input)"),
) -> None:
    """Convert a saved JSON report to another format."""
    load_settings()
    fmt = resolve_format(output_format, "html")
    try:
        session = load_json_report(path)
    except RedFoxError as exc:
        fail_with(exc)

    print_session(session)
    report_dir = output or path.expanduser().parent
    filename = report_filename(session, fmt)
    if (report_dir / filename).resolve() == path.expanduser().resolve():
        filename = f"{path.stem}.converted.{fmt.value}"
    report_path = write_report(session, report_dir, fmt, filename=filename)
    console.print(f"[green]Report written:[/green] {report_path}")
