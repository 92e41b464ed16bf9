"""Validate CLI command."""

from __future__ import annotations

import typer

from redfox.errors import EXIT_CONNECTIVITY, EXIT_INPUT, RedFoxError
from redfox.modules.executor import AttemptExecutor, ExecutorOptions
from redfox.modules.target import Scope, Target, check_resolvable, resolve_target, validate_url
from redfox.utils.async_utils import run_with_interrupt

from .shared import app, console, load_settings


async def probe(target: Target, options: ExecutorOptions) -> AttemptExecutor:
    async with AttemptExecutor(target, options) as executor:
        await executor.prepare()
    return executor


@app.command()
def validate(
    url: str = typer.Argument(..., help="Target URL to check"),
    probe_target: bool = typer.Option(False, "--probe", help="Also resolve the host and fetch the page"),
) -> None:
    """Check a target URL before scanning it."""
    config = load_settings()
    result = validate_url(url)
    for error in result.errors:
        console.print(f"[red]✗ {error}[/red]")
    for warning in result.warnings:
        console.print(f"[yellow]! {warning}[/yellow]")
    if not result.is_valid:
        raise typer.Exit(EXIT_INPUT)

    target = resolve_target(url, verify_tls=config.scanning.verify_tls)
    scope = Scope(config.scanning.allowed_targets)
    if not scope.permits(target):
        console.print(f"[red]✗ {target.host} is outside the configured allowed_targets[/red]")
        raise typer.Exit(EXIT_INPUT)
    console.print(f"[green]✓ {target.url} is a valid target[/green]")
    if not probe_target:
        return

    options = ExecutorOptions(
        timeout=config.scanning.timeout,
        user_agent=config.scanning.user_agent,
        proxy=config.scanning.proxy,
    )
    try:
        check_resolvable(target)
        executor = run_with_interrupt(probe(target, options))
    except RedFoxError as exc:
        console.print(f"[red]✗ {exc}[/red]")
        raise typer.Exit(EXIT_CONNECTIVITY) from None

    console.print(f"[green]✓ {target.host} is reachable[/green]")
    form = executor.form
    if form is None:
        console.print("[dim]No login form detected on the page.[/dim]")
    else:
        console.print(
            f"[green]✓ Login form:[/green] action={form.action} "
            f"user={form.username_field} password={form.password_field}"
        )
