"""Retry and backoff policy."""

from __future__ import annotations

from dataclasses import dataclass

from redfox.modules.results import AttemptOutcome, OutcomeKind

RETRYABLE_KINDS = frozenset({OutcomeKind.NETWORK_ERROR, OutcomeKind.RATE_LIMITED})


@dataclass(frozen=True)
class RetryPolicy:
    """Exponential backoff: ``base_delay * multiplier**attempt`` capped at ``max_delay``.

    A server-provided Retry-After raises the delay (still capped).
    """

    max_retries: int = 3
    base_delay: float = 0.5
    multiplier: float = 2.0
    max_delay: float = 30.0

    def should_retry(self, outcome: AttemptOutcome, attempt: int) -> bool:
        """``attempt`` is the zero-based number of retries already made."""
        if outcome.fatal or outcome.kind not in RETRYABLE_KINDS:
            return False
        return attempt < self.max_retries

    def delay_for(self, attempt: int, retry_after: float | None = None) -> float:
        delay = self.base_delay * (self.multiplier**attempt)
        if retry_after is not None:
            delay = max(delay, retry_after)
        return min(delay, self.max_delay)
