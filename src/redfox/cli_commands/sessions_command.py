"""Session history CLI commands: sessions and resume."""

from __future__ import annotations

import typer
from rich.table import Table

from redfox.errors import RedFoxError
from redfox.modules.report import ReportFormat
from redfox.modules.scanner import ScanRequest
from redfox.modules.session import SessionStore
from redfox.modules.target import resolve_target

from .scan_command import resolve_format
from .scan_runner import run_sessions
from .shared import app, console, fail, fail_with, load_settings

RESUMABLE_STATES = {"stopped", "aborted"}


@app.command()
def sessions(
    limit: int = typer.Option(20, "--limit", "-n", help="Number of sessions to show"),
) -> None:
    """List recent scan sessions."""
    config = load_settings()
    with SessionStore.in_results_dir(config.output.results_path) as store:
        records = store.list_recent(limit)

    if not records:
        console.print("[dim]No sessions recorded yet.[/dim]")
        return

    table = Table(title="Recent sessions")
    table.add_column("ID", style="cyan")
    table.add_column("Started")
    table.add_column("Target")
    table.add_column("Mode")
    table.add_column("State")
    table.add_column("Attempts", justify="right")
    table.add_column("Found", justify="right", style="green")
    table.add_column("Progress", justify="right")
    for record in records:
        started = record.started_at or record.created_at
        progress = "-"
        if record.total_candidates:
            progress = f"{record.resume_offset}/{record.total_candidates}"
        table.add_row(
            record.id[:8],
            started.strftime("%Y-%m-%d %H:%M:%S") if started else "-",
            record.target,
            record.mode,
            record.state + (f" ({record.stop_reason})" if record.stop_reason else ""),
            str(record.attempted),
            str(record.succeeded),
            progress,
        )
    console.print(table)


@app.command()
def resume(
    session_id: str = typer.Argument(..., help="Session ID or unique prefix"),
    output_format: str | None = typer.Option(None, "--format", help="Report format for the resumed run"),
    no_save: bool = typer.Option(False, "--no-save", help="Do not write a report or history entry"),
) -> None:
    """Continue a stopped or aborted session from where it left off."""
    config = load_settings()
    with SessionStore.in_results_dir(config.output.results_path) as store:
        record = store.get(session_id)
        if record is None:
            fail(f"No session matching {session_id!r}")
        params = store.request_params(record)

    if record.state not in RESUMABLE_STATES:
        fail(f"Session {record.id[:8]} is {record.state}; only stopped or aborted sessions can be resumed")
    if not params:
        fail(f"Session {record.id[:8]} has no stored scan parameters")

    try:
        request = ScanRequest.from_dict(params)
        target = resolve_target(record.target, verify_tls=request.verify_tls)
    except RedFoxError as exc:
        fail_with(exc)
    except (KeyError, TypeError, ValueError) as exc:
        fail(f"Stored parameters for {record.id[:8]} are invalid: {exc}")
    request.resume_offset = record.resume_offset or 0

    console.print(
        f"[cyan]Resuming {record.id[:8]} against {target.url} "
        f"at candidate {request.resume_offset}[/cyan]"
    )
    fmt: ReportFormat = resolve_format(output_format, config.output.default_format)
    exit_code = run_sessions(
        request,
        [target],
        config,
        fmt=fmt,
        output_dir=config.output.results_path,
        save=config.output.save_results and not no_save,
    )
    raise typer.Exit(exit_code)
