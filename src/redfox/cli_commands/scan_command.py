"""Scan CLI command."""

from __future__ import annotations

from pathlib import Path

import typer

from redfox.errors import RedFoxError
from redfox.modules.credentials import AttackMode, CandidateOrder
from redfox.modules.executor import AuthMethod
from redfox.modules.report import ReportFormat
from redfox.modules.scanner import ScanRequest
from redfox.modules.scheduler import SuccessPolicy
from redfox.modules.target import resolve_targets

from .scan_runner import run_sessions
from .shared import app, fail, fail_with, load_settings, parse_json_option


def resolve_format(value: str | None, default: str) -> ReportFormat:
    try:
        return ReportFormat((value or default).lower())
    except ValueError:
        fail(f"Unknown report format {value or default!r}; use json, html, csv, txt or xml")


@app.command()
def scan(
    url: str = typer.Option(..., "--url", "-u", help="Target URL, comma-separated list or file of targets"),
    user: str | None = typer.Option(None, "--user", "-U", help="Username, comma list, wordlist file or @name"),
    passwords: str | None = typer.Option(None, "--passwords", "-P", help="Password wordlist file, comma list or @name"),
    combo: str | None = typer.Option(None, "--combo", "-C", help="user:password combo file (credential-stuffing)"),
    mode: AttackMode | None = typer.Option(None, "--mode", "-m", help="Attack mode (default: dictionary, or credential-stuffing with --combo)"),
    order: CandidateOrder = typer.Option(CandidateOrder.USER_FIRST, "--order", help="Candidate ordering"),
    charset: str = typer.Option("digits", "--charset", help="Brute-force charset: digits, lower, upper, alpha, alnum, hex, symbols (join with +) or literal"),
    min_length: int = typer.Option(1, "--min-length", help="Brute-force minimum length"),
    max_length: int = typer.Option(4, "--max-length", help="Brute-force maximum length"),
    suffixes: str | None = typer.Option(None, "--suffixes", help="Hybrid suffixes, comma-separated"),
    auth: AuthMethod = typer.Option(AuthMethod.FORM, "--auth", help="How credentials are submitted"),
    username_field: str = typer.Option("username", "--username-field", help="Form/JSON username field"),
    password_field: str = typer.Option("password", "--password-field", help="Form/JSON password field"),
    data: str | None = typer.Option(None, "--data", help="Extra POST fields as a JSON object"),
    headers: str | None = typer.Option(None, "--headers", help="Extra HTTP headers as a JSON object"),
    cookies: str | None = typer.Option(None, "--cookies", help="Cookie header sent with every attempt"),
    proxy: str | None = typer.Option(None, "--proxy", help="HTTP or SOCKS proxy URL"),
    success_match: str | None = typer.Option(None, "--success-match", help="Body text that marks a successful login"),
    failure_match: str | None = typer.Option(None, "--failure-match", help="Body text that marks a failed login"),
    threads: int | None = typer.Option(None, "--threads", "-t", help="Concurrent workers"),
    timeout: float | None = typer.Option(None, "--timeout", help="Per-attempt timeout in seconds"),
    max_retries: int | None = typer.Option(None, "--max-retries", help="Retries for network errors and throttling"),
    rate_limit: float | None = typer.Option(None, "--rate-limit", help="Attempts per second across all workers (0 = unlimited)"),
    stop_on_success: bool = typer.Option(False, "--stop-on-success", "-f", help="Stop after the first valid credential"),
    per_user: bool = typer.Option(False, "--per-user", help="Stop trying a user once one password works"),
    max_time: float | None = typer.Option(None, "--max-time", help="Session time budget in seconds"),
    output_format: str | None = typer.Option(None, "--format", help="Report format: json, html, csv, txt, xml"),
    output: Path | None = typer.Option(None, "--output", "-o", help="Directory for the report file"),
    no_save: bool = typer.Option(False, "--no-save", help="Do not write a report or history entry"),
) -> None:
    """Audit login endpoints with a credential source."""
    config = load_settings()

    if mode is None:
        mode = AttackMode.STUFFING if combo else AttackMode.DICTIONARY
    if stop_on_success and per_user:
        fail("--stop-on-success and --per-user are mutually exclusive")
    policy = SuccessPolicy.EXHAUSTIVE
    if stop_on_success:
        policy = SuccessPolicy.FIRST
    elif per_user:
        policy = SuccessPolicy.PER_USER
    fmt = resolve_format(output_format, config.output.default_format)

    request = ScanRequest.from_config(
        config,
        mode=mode,
        users=user,
        passwords=passwords,
        combos=combo,
        order=order,
        charset=charset,
        min_length=min_length,
        max_length=max_length,
        suffixes=[s.strip() for s in suffixes.split(",") if s.strip()] if suffixes else None,
        auth_method=auth,
        username_field=username_field,
        password_field=password_field,
        extra_data=parse_json_option(data, "--data"),
        headers=parse_json_option(headers, "--headers"),
        cookies=cookies,
        proxy=proxy,
        success_match=success_match,
        failure_match=failure_match,
        threads=threads,
        timeout=timeout,
        max_retries=max_retries,
        rate_limit=rate_limit,
        success_policy=policy,
        max_time=max_time,
    )
    if request.threads < 1:
        fail("--threads must be at least 1")

    try:
        targets = resolve_targets(url, verify_tls=request.verify_tls)
    except RedFoxError as exc:
        fail_with(exc)

    exit_code = run_sessions(
        request,
        targets,
        config,
        fmt=fmt,
        output_dir=output or config.output.results_path,
        save=config.output.save_results and not no_save,
    )
    raise typer.Exit(exit_code)
