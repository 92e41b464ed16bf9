"""Attempt outcomes and the session model."""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import UTC, datetime
from enum import StrEnum
from typing import Any

from redfox.modules.credentials import AttackMode, CredentialPair
from redfox.modules.target import Target


def _utc_now() -> datetime:
    return datetime.now(UTC)


class OutcomeKind(StrEnum):
    """Classification of a single attempt."""

    SUCCESS = "success"
    INVALID = "invalid_credentials"
    NETWORK_ERROR = "network_error"
    TIMEOUT = "timeout"
    RATE_LIMITED = "rate_limited"

    @property
    def tally(self) -> str:
        """Tally bucket: succeeded, failed or errored."""
        if self is OutcomeKind.SUCCESS:
            return "succeeded"
        if self in (OutcomeKind.INVALID, OutcomeKind.TIMEOUT):
            return "failed"
        return "errored"


@dataclass(frozen=True, slots=True)
class AttemptOutcome:
    """Result of one authentication attempt."""

    pair: CredentialPair
    kind: OutcomeKind
    timestamp: datetime = field(default_factory=_utc_now)
    latency: float = 0.0
    status_code: int | None = None
    detail: str = ""
    retries: int = 0
    fatal: bool = False
    metadata: dict[str, Any] = field(default_factory=dict)

    @property
    def success(self) -> bool:
        return self.kind is OutcomeKind.SUCCESS

    def to_dict(self) -> dict[str, Any]:
        return {
            "username": self.pair.username,
            "password": self.pair.password,
            "provenance": self.pair.provenance,
            "kind": self.kind.value,
            "timestamp": self.timestamp.isoformat(),
            "latency": self.latency,
            "status_code": self.status_code,
            "detail": self.detail,
            "retries": self.retries,
            "fatal": self.fatal,
            "metadata": self.metadata,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> AttemptOutcome:
        return cls(
            pair=CredentialPair(data["username"], data["password"], data.get("provenance", "")),
            kind=OutcomeKind(data["kind"]),
            timestamp=datetime.fromisoformat(data["timestamp"]),
            latency=float(data.get("latency", 0.0)),
            status_code=data.get("status_code"),
            detail=data.get("detail", ""),
            retries=int(data.get("retries", 0)),
            fatal=bool(data.get("fatal", False)),
            metadata=dict(data.get("metadata") or {}),
        )


class SessionState(StrEnum):
    """Session lifecycle states."""

    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    STOPPED = "stopped"
    ABORTED = "aborted"

    @property
    def terminal(self) -> bool:
        return self in (SessionState.COMPLETED, SessionState.STOPPED, SessionState.ABORTED)


_TRANSITIONS: dict[SessionState, frozenset[SessionState]] = {
    SessionState.PENDING: frozenset({SessionState.RUNNING, SessionState.ABORTED}),
    SessionState.RUNNING: frozenset(
        {SessionState.COMPLETED, SessionState.STOPPED, SessionState.ABORTED}
    ),
    SessionState.COMPLETED: frozenset(),
    SessionState.STOPPED: frozenset(),
    SessionState.ABORTED: frozenset(),
}


@dataclass(frozen=True, slots=True)
class Tallies:
    """Aggregate counters over terminal outcomes."""

    attempted: int = 0
    succeeded: int = 0
    failed: int = 0
    errored: int = 0
    by_kind: dict[str, int] = field(default_factory=dict)

    @property
    def success_rate(self) -> float:
        if not self.attempted:
            return 0.0
        return self.succeeded / self.attempted * 100.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "attempted": self.attempted,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "errored": self.errored,
            "by_kind": dict(self.by_kind),
        }

    @classmethod
    def from_outcomes(cls, outcomes: list[AttemptOutcome]) -> Tallies:
        by_kind = {kind.value: 0 for kind in OutcomeKind}
        buckets = {"succeeded": 0, "failed": 0, "errored": 0}
        for outcome in outcomes:
            by_kind[outcome.kind.value] += 1
            buckets[outcome.kind.tally] += 1
        return cls(attempted=len(outcomes), by_kind=by_kind, **buckets)


@dataclass
class Session:
    """One run of the engine against one target."""

    target: Target
    mode: AttackMode
    policy: str = "exhaustive"
    id: str = field(default_factory=lambda: uuid.uuid4().hex)
    state: SessionState = SessionState.PENDING
    created_at: datetime = field(default_factory=_utc_now)
    started_at: datetime | None = None
    finished_at: datetime | None = None
    stop_reason: str | None = None
    error: str | None = None
    total_candidates: int | None = None
    resume_offset: int = 0
    outcomes: list[AttemptOutcome] = field(default_factory=list)

    def transition(self, state: SessionState) -> None:
        """Move to ``state``; states never regress."""
        if state not in _TRANSITIONS[self.state]:
            raise ValueError(f"Invalid session transition {self.state} -> {state}")
        self.state = state
        if state is SessionState.RUNNING:
            self.started_at = _utc_now()
        elif state.terminal:
            self.finished_at = _utc_now()
            if self.started_at is None:
                self.started_at = self.finished_at

    @property
    def tallies(self) -> Tallies:
        return Tallies.from_outcomes(self.outcomes)

    @property
    def successes(self) -> list[AttemptOutcome]:
        return [o for o in self.outcomes if o.success]

    @property
    def duration(self) -> float:
        if self.started_at is None:
            return 0.0
        end = self.finished_at or _utc_now()
        return max((end - self.started_at).total_seconds(), 0.0)

    @property
    def failed_fatally(self) -> bool:
        return self.state is SessionState.ABORTED
