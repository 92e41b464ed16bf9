"""Summary statistics shared by every report format."""

from __future__ import annotations

from typing import Any

from redfox.modules.results import AttemptOutcome, Session


def average_latency_ms(outcomes: list[AttemptOutcome]) -> float:
    if not outcomes:
        return 0.0
    return sum(o.latency for o in outcomes) / len(outcomes) * 1000.0


def build_summary(session: Session) -> dict[str, Any]:
    """Counters and derived statistics for ``session``."""
    outcomes = session.outcomes
    tallies = session.tallies
    return {
        **tallies.to_dict(),
        "success_rate": round(tallies.success_rate, 2),
        "unique_users": len({o.pair.username for o in outcomes}),
        "unique_passwords": len({o.pair.password for o in outcomes}),
        "average_latency_ms": round(average_latency_ms(outcomes), 2),
        "duration_seconds": round(session.duration, 3),
        "total_candidates": session.total_candidates,
    }
