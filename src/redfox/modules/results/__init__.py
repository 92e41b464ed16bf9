"""Attempt outcomes, sessions and aggregation."""

from .aggregator import ResultAggregator
from .models import AttemptOutcome, OutcomeKind, Session, SessionState, Tallies

__all__ = [
    "AttemptOutcome",
    "OutcomeKind",
    "ResultAggregator",
    "Session",
    "SessionState",
    "Tallies",
]
