"""Thread-safe result aggregation."""

from __future__ import annotations

import threading

from .models import AttemptOutcome, OutcomeKind, Tallies


class ResultAggregator:
    """Session-wide accumulation point for terminal attempt outcomes.

    Outcomes are keyed by credential identity; recording the same pair again
    replaces the earlier outcome so only the latest one is counted.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._outcomes: dict[tuple[str, str], AttemptOutcome] = {}
        self._counts: dict[OutcomeKind, int] = {kind: 0 for kind in OutcomeKind}
        self._success_users: set[str] = set()

    def record(self, outcome: AttemptOutcome) -> bool:
        """Record a terminal outcome. Returns False if it replaced an earlier one."""
        key = outcome.pair.key
        with self._lock:
            previous = self._outcomes.pop(key, None)
            if previous is not None:
                self._counts[previous.kind] -= 1
            self._outcomes[key] = outcome
            self._counts[outcome.kind] += 1
            if outcome.success:
                self._success_users.add(outcome.pair.username)
            return previous is None

    def tallies(self) -> Tallies:
        with self._lock:
            counts = dict(self._counts)
            attempted = len(self._outcomes)
        buckets = {"succeeded": 0, "failed": 0, "errored": 0}
        for kind, count in counts.items():
            buckets[kind.tally] += count
        return Tallies(
            attempted=attempted,
            by_kind={kind.value: count for kind, count in counts.items()},
            **buckets,
        )

    def outcomes(self) -> list[AttemptOutcome]:
        """Recorded outcomes in recording order."""
        with self._lock:
            return list(self._outcomes.values())

    def successes(self) -> list[AttemptOutcome]:
        return [o for o in self.outcomes() if o.success]

    def has_success(self, username: str | None = None) -> bool:
        with self._lock:
            if username is None:
                return bool(self._success_users)
            return username in self._success_users

    def __len__(self) -> int:
        with self._lock:
            return len(self._outcomes)
