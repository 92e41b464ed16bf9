"""CSV report rendering: one row per outcome."""

from __future__ import annotations

import csv
import io

from redfox.modules.results import Session

COLUMNS = [
    "username",
    "password",
    "kind",
    "success",
    "status_code",
    "latency_ms",
    "retries",
    "detail",
    "provenance",
    "timestamp",
]


def render_csv(session: Session) -> str:
    buffer = io.StringIO()
    writer = csv.writer(buffer, lineterminator="\n")
    writer.writerow(COLUMNS)
    for outcome in session.outcomes:
        writer.writerow(
            [
                outcome.pair.username,
                outcome.pair.password,
                outcome.kind.value,
                str(outcome.success).lower(),
                "" if outcome.status_code is None else outcome.status_code,
                f"{outcome.latency * 1000:.1f}",
                outcome.retries,
                outcome.detail,
                outcome.pair.provenance,
                outcome.timestamp.isoformat(),
            ]
        )
    return buffer.getvalue()
