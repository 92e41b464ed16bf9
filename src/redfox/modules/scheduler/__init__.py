"""Scheduling: worker pool, throttling, retries and resume checkpoints."""

from .checkpoint import ResumeCheckpoint
from .rate_limiter import TokenBucket
from .retry import RETRYABLE_KINDS, RetryPolicy
from .scheduler import Scheduler, SchedulerConfig, StopReason, SuccessPolicy

__all__ = [
    "RETRYABLE_KINDS",
    "ResumeCheckpoint",
    "RetryPolicy",
    "Scheduler",
    "SchedulerConfig",
    "StopReason",
    "SuccessPolicy",
    "TokenBucket",
]
