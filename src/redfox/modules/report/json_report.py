"""JSON report rendering and loading."""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from redfox import __version__
from redfox.errors import InputError
from redfox.modules.credentials import AttackMode
from redfox.modules.results import AttemptOutcome, Session, SessionState
from redfox.modules.target import Target

from .summary import build_summary

TOOL_NAME = "RedFoxTool"


def _iso(value: datetime | None) -> str | None:
    return value.isoformat() if value is not None else None


def _parse(value: str | None) -> datetime | None:
    return datetime.fromisoformat(value) if value else None


def session_to_dict(session: Session) -> dict[str, Any]:
    """Serialize a session with metadata, summary and every outcome."""
    return {
        "report_metadata": {
            "tool": TOOL_NAME,
            "version": __version__,
            "generated_at": datetime.now(UTC).isoformat(),
        },
        "session": {
            "id": session.id,
            "target": session.target.to_dict(),
            "mode": session.mode.value,
            "policy": session.policy,
            "state": session.state.value,
            "created_at": _iso(session.created_at),
            "started_at": _iso(session.started_at),
            "finished_at": _iso(session.finished_at),
            "stop_reason": session.stop_reason,
            "error": session.error,
            "total_candidates": session.total_candidates,
            "resume_offset": session.resume_offset,
        },
        "summary": build_summary(session),
        "outcomes": [outcome.to_dict() for outcome in session.outcomes],
    }


def session_from_dict(data: dict[str, Any]) -> Session:
    """Rebuild a session from ``session_to_dict`` output."""
    try:
        info = data["session"]
        return Session(
            target=Target.from_dict(info["target"]),
            mode=AttackMode(info["mode"]),
            policy=info.get("policy", "exhaustive"),
            id=info["id"],
            state=SessionState(info["state"]),
            created_at=_parse(info["created_at"]),
            started_at=_parse(info.get("started_at")),
            finished_at=_parse(info.get("finished_at")),
            stop_reason=info.get("stop_reason"),
            error=info.get("error"),
            total_candidates=info.get("total_candidates"),
            resume_offset=int(info.get("resume_offset", 0)),
            outcomes=[AttemptOutcome.from_dict(item) for item in data.get("outcomes", [])],
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise InputError(f"Malformed report data: {exc}") from exc


def render_json(session: Session) -> str:
    return json.dumps(session_to_dict(session), indent=2, ensure_ascii=False)


def load_json_report(path: Path) -> Session:
    """Read a JSON report written by ``write_report``."""
    try:
        data = json.loads(Path(path).read_text(encoding="utf-8"))
    except FileNotFoundError as exc:
        raise InputError(f"Report not found: {path}") from exc
    except json.JSONDecodeError as exc:
        raise InputError(f"Invalid JSON in {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise InputError(f"Invalid report structure in {path}")
    return session_from_dict(data)
