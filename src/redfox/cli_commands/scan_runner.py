"""Runs scan sessions from the CLI: progress, summaries and persistence."""

from __future__ import annotations

import logging
from pathlib import Path

import typer
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeElapsedColumn,
)
from rich.table import Table

from redfox.config import RedFoxConfig
from redfox.errors import EXIT_CONNECTIVITY, EXIT_FAILURE, EXIT_OK, RedFoxError
from redfox.modules.credentials import CredentialSource
from redfox.modules.report import ReportFormat, build_summary, write_report
from redfox.modules.results import AttemptOutcome, Session, SessionState
from redfox.modules.scanner import ScanRequest, Scanner
from redfox.modules.session import SessionStore
from redfox.modules.target import Scope, Target
from redfox.utils.async_utils import run_with_interrupt

from .shared import console, fail_with, state

logger = logging.getLogger(__name__)

STATE_STYLES = {
    SessionState.COMPLETED: "green",
    SessionState.STOPPED: "yellow",
    SessionState.ABORTED: "red",
}


def session_exit_code(session: Session) -> int:
    if session.stop_reason == "interrupted":
        return EXIT_FAILURE
    if session.state is SessionState.ABORTED:
        return EXIT_CONNECTIVITY
    return EXIT_OK


def run_sessions(
    request: ScanRequest,
    targets: list[Target],
    config: RedFoxConfig,
    *,
    fmt: ReportFormat,
    output_dir: Path,
    save: bool,
    check_dns: bool = True,
) -> int:
    """Run one session per target and return the process exit code."""
    scope = Scope(config.scanning.allowed_targets)
    try:
        for target in targets:
            scope.enforce(target)
        source = request.build_source()
    except RedFoxError as exc:
        fail_with(exc)

    exit_code = EXIT_OK
    for target in targets:
        session = _run_target(request, source, scope, target, check_dns)
        print_session(session)
        if save:
            persist_session(session, request, config, fmt, output_dir)
        exit_code = max(exit_code, session_exit_code(session))
        if session.stop_reason == "interrupted":
            break
    return exit_code


def _run_target(
    request: ScanRequest,
    source: CredentialSource,
    scope: Scope,
    target: Target,
    check_dns: bool,
) -> Session:
    progress = Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TextColumn("[green]{task.fields[found]} found"),
        TimeElapsedColumn(),
        console=console,
        disable=state.quiet,
    )
    task_id = None
    found = 0

    def on_start(session: Session) -> None:
        nonlocal task_id
        remaining = (session.total_candidates or 0) - session.resume_offset
        task_id = progress.add_task(target.url, total=max(remaining, 0), found=0)

    def on_outcome(outcome: AttemptOutcome) -> None:
        nonlocal found
        if outcome.success:
            found += 1
            progress.console.print(
                f"[bold green][+] Valid credentials:[/bold green] "
                f"{outcome.pair.username}:{outcome.pair.password}"
            )
        if task_id is not None:
            progress.update(task_id, advance=1, found=found)

    scanner = Scanner(
        request,
        source=source,
        scope=scope,
        on_outcome=on_outcome,
        on_start=on_start,
        check_dns=check_dns,
    )
    with progress:
        try:
            return run_with_interrupt(scanner.run(target), on_interrupt=scanner.cancel)
        except KeyboardInterrupt:
            console.print("[red]Aborted.[/red]")
            if scanner.session is None:
                raise typer.Exit(EXIT_FAILURE) from None
            return scanner.session


def print_session(session: Session) -> None:
    """Print statistics and any valid credentials for a finished session."""
    summary = build_summary(session)
    style = STATE_STYLES.get(session.state, "white")
    state_text = f"[{style}]{session.state}[/{style}]"
    if session.stop_reason:
        state_text += f" ({session.stop_reason})"

    table = Table(title=f"Session {session.id[:8]}: {session.target.url}", show_header=False)
    table.add_column("Field", style="cyan")
    table.add_column("Value")
    table.add_row("State", state_text)
    table.add_row("Mode", str(session.mode))
    table.add_row("Attempts", str(summary["attempted"]))
    table.add_row("Successful", f"[green]{summary['succeeded']}[/green]")
    table.add_row("Failed", str(summary["failed"]))
    table.add_row("Errors", str(summary["errored"]))
    table.add_row("Success rate", f"{summary['success_rate']:.1f}%")
    table.add_row("Avg latency", f"{summary['average_latency_ms']:.0f} ms")
    table.add_row("Duration", f"{summary['duration_seconds']:.1f} s")
    if session.state is not SessionState.COMPLETED and session.total_candidates:
        table.add_row("Resume offset", f"{session.resume_offset}/{session.total_candidates}")
    if session.error:
        table.add_row("Error", f"[red]{session.error}[/red]")
    console.print(table)

    successes = session.successes
    if not successes:
        console.print("[dim]No valid credentials found.[/dim]")
        return
    found = Table(title="Valid credentials")
    found.add_column("#", justify="right")
    found.add_column("Username", style="green")
    found.add_column("Password", style="green")
    found.add_column("Status")
    for i, outcome in enumerate(successes, 1):
        status = str(outcome.status_code) if outcome.status_code is not None else "-"
        found.add_row(str(i), outcome.pair.username, outcome.pair.password, status)
    console.print(found)


def persist_session(
    session: Session,
    request: ScanRequest,
    config: RedFoxConfig,
    fmt: ReportFormat,
    output_dir: Path,
) -> Path:
    """Write the session report and record it in the history database."""
    report_path = write_report(session, output_dir, fmt)
    with SessionStore.in_results_dir(config.output.results_path) as store:
        store.save(session, request.to_dict(), report_path)
    console.print(f"[green]Results saved:[/green] {report_path}")
    return report_path
