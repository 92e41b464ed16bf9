"""Plain-text report: fixed-width summary and successful credentials."""

from __future__ import annotations

from datetime import UTC, datetime

from redfox import __version__
from redfox.modules.results import Session

from .summary import build_summary

WIDTH = 70


def render_text(session: Session) -> str:
    summary = build_summary(session)
    rule, heavy = "-" * WIDTH, "=" * WIDTH
    lines = [
        heavy,
        "RedFoxTool report: authentication audit results".center(WIDTH).rstrip(),
        heavy,
        "",
        f"Generated:        {datetime.now(UTC).strftime('%Y-%m-%d %H:%M:%S %Z')}",
        f"Session:          {session.id}",
        f"Target:           {session.target.url}",
        f"Mode:             {session.mode.value}",
        f"State:            {session.state.value}"
        + (f" ({session.stop_reason})" if session.stop_reason else ""),
        f"Total attempts:   {summary['attempted']}",
        f"Successful:       {summary['succeeded']}",
        f"Failed:           {summary['failed']}",
        f"Errors:           {summary['errored']}",
        f"Success rate:     {summary['success_rate']:.1f}%",
        "",
    ]
    if session.error:
        lines += [f"Error:            {session.error}", ""]

    successes = session.successes
    if successes:
        lines += [rule, "Successful credentials:", rule]
        for i, outcome in enumerate(successes, 1):
            status = outcome.status_code if outcome.status_code is not None else "-"
            lines.append(
                f"{i:3}. {outcome.pair.username:20} {outcome.pair.password:30} "
                f"[{status}] {outcome.latency * 1000:.0f}ms"
            )
        lines.append("")

    lines += [
        rule,
        "Statistics:",
        rule,
        f"Unique users:     {summary['unique_users']}",
        f"Unique passwords: {summary['unique_passwords']}",
        f"Avg latency:      {summary['average_latency_ms']:.0f} ms",
        f"Duration:         {summary['duration_seconds']:.1f} s",
        "",
        rule,
        f"Generated by RedFoxTool v{__version__}. Authorized testing only.",
        heavy,
    ]
    return "\n".join(lines) + "\n"
