"""Benchmark CLI command."""

from __future__ import annotations

import typer
from rich.table import Table

from redfox.errors import EXIT_CONNECTIVITY, RedFoxError
from redfox.modules.credentials import AttackMode
from redfox.modules.scanner import BenchmarkResult, ScanRequest, run_benchmark
from redfox.modules.target import resolve_target
from redfox.utils.async_utils import run_with_interrupt

from .shared import app, console, fail, fail_with, load_settings


def print_benchmark(result: BenchmarkResult) -> None:
    table = Table(title=f"Benchmark: {result.target} ({result.threads} threads)")
    table.add_column("Iteration", justify="right")
    table.add_column("Attempts", justify="right")
    table.add_column("Succeeded", justify="right")
    table.add_column("Errors", justify="right")
    table.add_column("Duration", justify="right")
    table.add_column("Attempts/s", justify="right", style="cyan")
    for item in result.iterations:
        table.add_row(
            str(item.iteration),
            str(item.attempts),
            str(item.succeeded),
            str(item.errored),
            f"{item.duration:.2f}s",
            f"{item.rate:.1f}",
        )
    console.print(table)
    console.print(
        f"[bold]Total:[/bold] {result.total_attempts} attempts in {result.total_duration:.2f}s, "
        f"mean {result.mean_rate:.1f}/s, best {result.best_rate:.1f}/s"
    )


@app.command()
def benchmark(
    url: str = typer.Option(..., "--url", "-u", help="Target URL"),
    users_file: str = typer.Option(..., "--users-file", help="User wordlist"),
    passwords_file: str = typer.Option(..., "--passwords-file", help="Password wordlist"),
    iterations: int = typer.Option(3, "--iterations", "-n", help="Number of runs"),
    threads: int | None = typer.Option(None, "--threads", "-t", help="Concurrent workers"),
    rate_limit: float | None = typer.Option(None, "--rate-limit", help="Attempts per second (0 = unlimited)"),
) -> None:
    """Measure attempts/second against a target. Nothing is persisted."""
    config = load_settings()
    if iterations < 1:
        fail("--iterations must be at least 1")

    request = ScanRequest.from_config(
        config,
        mode=AttackMode.DICTIONARY,
        users=users_file,
        passwords=passwords_file,
        threads=threads,
        rate_limit=rate_limit,
    )
    try:
        target = resolve_target(url, verify_tls=request.verify_tls)
        result = run_with_interrupt(run_benchmark(request, target, iterations))
    except RedFoxError as exc:
        fail_with(exc)
    except KeyboardInterrupt:
        fail("Benchmark interrupted")

    print_benchmark(result)
    if not result.iterations or result.total_attempts == 0:
        raise typer.Exit(EXIT_CONNECTIVITY)
