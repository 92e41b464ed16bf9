"""Bounded worker pool that drives a session."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable, Iterable
from dataclasses import dataclass, field, replace
from enum import StrEnum
from typing import Protocol

from redfox.modules.credentials import CredentialPair
from redfox.modules.results import AttemptOutcome, OutcomeKind, ResultAggregator

from .checkpoint import ResumeCheckpoint
from .rate_limiter import TokenBucket
from .retry import RetryPolicy

logger = logging.getLogger(__name__)

DEFAULT_WORKERS = 20


class SuccessPolicy(StrEnum):
    """When a success ends the session early."""

    FIRST = "first"
    PER_USER = "per-user"
    EXHAUSTIVE = "exhaustive"


class StopReason(StrEnum):
    SUCCESS = "success"
    TIME_BUDGET = "time_budget"
    INTERRUPTED = "interrupted"
    ABORTED = "aborted"


class Executor(Protocol):
    async def attempt(self, pair: CredentialPair) -> AttemptOutcome: ...


@dataclass
class SchedulerConfig:
    """Concurrency, throttling and termination settings."""

    workers: int = DEFAULT_WORKERS
    rate_limit: float = 0.0
    burst: int = 1
    retry: RetryPolicy = field(default_factory=RetryPolicy)
    success_policy: SuccessPolicy = SuccessPolicy.EXHAUSTIVE
    max_time: float | None = None
    max_consecutive_errors: int = 10
    queue_size: int | None = None


_Item = tuple[int, CredentialPair] | None


class Scheduler:
    """Feeds candidates through a bounded queue to N workers.

    The cancellation event is checked before every dispatch; attempts that
    are already in flight are allowed to finish.
    """

    def __init__(
        self,
        executor: Executor,
        aggregator: ResultAggregator,
        config: SchedulerConfig | None = None,
        *,
        on_outcome: Callable[[AttemptOutcome], None] | None = None,
        checkpoint: ResumeCheckpoint | None = None,
        limiter: TokenBucket | None = None,
    ) -> None:
        self.executor = executor
        self.aggregator = aggregator
        self.config = config or SchedulerConfig()
        if self.config.workers < 1:
            raise ValueError("workers must be at least 1")
        self.on_outcome = on_outcome
        self.checkpoint = checkpoint or ResumeCheckpoint()
        self.limiter = limiter or TokenBucket(self.config.rate_limit, self.config.burst)
        self.stop_reason: StopReason | None = None
        self.fatal_error: str | None = None
        self.dispatched = 0
        self._cancel = asyncio.Event()
        self._consecutive_errors = 0
        self._dispatched_keys: set[tuple[str, str]] = set()

    @property
    def cancelled(self) -> bool:
        return self._cancel.is_set()

    def cancel(self, reason: StopReason = StopReason.INTERRUPTED) -> None:
        """Stop dispatching new work. The first reason wins."""
        if self.stop_reason is None:
            self.stop_reason = reason
            logger.info("Cancelling session: %s", reason)
        self._cancel.set()

    def abort(self, message: str) -> None:
        if self.fatal_error is None:
            self.fatal_error = message
            logger.error("Aborting session: %s", message)
        self.cancel(StopReason.ABORTED)

    async def run(self, candidates: Iterable[tuple[int, CredentialPair]]) -> None:
        """Process ``(index, pair)`` candidates until exhausted or cancelled."""
        workers = self.config.workers
        queue: asyncio.Queue[_Item] = asyncio.Queue(maxsize=self.config.queue_size or workers * 2)

        watchdog = None
        if self.config.max_time:
            watchdog = asyncio.create_task(self._watchdog(self.config.max_time))

        tasks = [asyncio.create_task(self._worker(queue)) for _ in range(workers)]
        tasks.append(asyncio.create_task(self._produce(queue, candidates)))
        try:
            await asyncio.gather(*tasks)
        finally:
            if watchdog is not None:
                watchdog.cancel()
            for task in tasks:
                if not task.done():
                    task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)

    async def _produce(self, queue: asyncio.Queue[_Item], candidates: Iterable[tuple[int, CredentialPair]]) -> None:
        try:
            for index, pair in candidates:
                if self.cancelled:
                    break
                if pair.key in self._dispatched_keys:
                    self.checkpoint.mark_done(index)
                    continue
                self._dispatched_keys.add(pair.key)
                await queue.put((index, pair))
        finally:
            for _ in range(self.config.workers):
                await queue.put(None)

    async def _watchdog(self, seconds: float) -> None:
        await asyncio.sleep(seconds)
        logger.warning("Session time budget of %.1fs exhausted", seconds)
        self.cancel(StopReason.TIME_BUDGET)

    async def _worker(self, queue: asyncio.Queue[_Item]) -> None:
        while True:
            item = await queue.get()
            try:
                if item is None:
                    return
                if self.cancelled:
                    continue
                index, pair = item
                if (
                    self.config.success_policy is SuccessPolicy.PER_USER
                    and self.aggregator.has_success(pair.username)
                ):
                    self.checkpoint.mark_done(index)
                    continue
                await self._process(index, pair)
            finally:
                queue.task_done()

    async def _process(self, index: int, pair: CredentialPair) -> None:
        retry = self.config.retry
        last: AttemptOutcome | None = None
        attempt = 0
        while True:
            await self.limiter.acquire()
            if self.cancelled:
                break
            self.dispatched += 1
            outcome = await self.executor.attempt(pair)
            if attempt:
                outcome = replace(outcome, retries=attempt)
            last = outcome

            if outcome.fatal:
                self._record(index, outcome)
                self.abort(outcome.detail or "permanent network error")
                return
            if not retry.should_retry(outcome, attempt):
                break

            delay = retry.delay_for(attempt, outcome.metadata.get("retry_after"))
            if outcome.kind is OutcomeKind.RATE_LIMITED:
                logger.warning("Target is throttling (%s); backing off %.1fs", outcome.detail, delay)
                self.limiter.pause(delay)
            else:
                logger.debug("Retrying %s in %.1fs after %s", pair.username, delay, outcome.detail)
            attempt += 1
            if await self._sleep_unless_cancelled(delay):
                break

        if last is not None:
            self._record(index, last)

    async def _sleep_unless_cancelled(self, delay: float) -> bool:
        """Sleep for ``delay``; return True if cancelled meanwhile."""
        try:
            await asyncio.wait_for(self._cancel.wait(), timeout=delay)
        except TimeoutError:
            return False
        return True

    def _record(self, index: int, outcome: AttemptOutcome) -> None:
        # Runs without awaiting so the cancel flag is set before any other
        # worker can pass its dispatch check.
        self.aggregator.record(outcome)
        self.checkpoint.mark_done(index)

        if outcome.kind is OutcomeKind.NETWORK_ERROR:
            self._consecutive_errors += 1
            limit = self.config.max_consecutive_errors
            if limit and self._consecutive_errors >= limit and not outcome.fatal:
                self.abort(f"{self._consecutive_errors} consecutive network errors; target unreachable")
        elif outcome.kind is not OutcomeKind.TIMEOUT:
            # Timeouts neither extend nor reset the error streak.
            self._consecutive_errors = 0

        if outcome.success:
            logger.info("Valid credentials: %s", outcome.pair.username)
            if self.config.success_policy is SuccessPolicy.FIRST:
                self.cancel(StopReason.SUCCESS)

        if self.on_outcome is not None:
            self.on_outcome(outcome)
