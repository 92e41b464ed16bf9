"""Tests for the scheduler, token bucket, retry policy and checkpoints."""

import asyncio
import time

import pytest

from redfox.modules.credentials import CredentialPair
from redfox.modules.results import AttemptOutcome, OutcomeKind, ResultAggregator
from redfox.modules.scheduler import (
    ResumeCheckpoint,
    RetryPolicy,
    Scheduler,
    SchedulerConfig,
    StopReason,
    SuccessPolicy,
    TokenBucket,
)


class FakeExecutor:
    """Classifies pairs with a callback instead of sending requests."""

    def __init__(self, classify, delay: float = 0.0):
        self.classify = classify
        self.delay = delay
        self.calls: list[CredentialPair] = []

    async def attempt(self, pair: CredentialPair) -> AttemptOutcome:
        self.calls.append(pair)
        await asyncio.sleep(self.delay)
        result = self.classify(pair, self.calls.count(pair))
        if isinstance(result, AttemptOutcome):
            return result
        return AttemptOutcome(pair, result)


def candidates(users, passwords):
    pairs = [CredentialPair(u, p) for u in users for p in passwords]
    return list(enumerate(pairs))


def only_valid(*valid):
    def classify(pair, _attempt):
        return OutcomeKind.SUCCESS if pair.key in valid else OutcomeKind.INVALID

    return classify


class TestTokenBucket:
    """Global rate limiting."""

    @pytest.mark.asyncio
    async def test_enforces_rate(self):
        bucket = TokenBucket(rate=50, capacity=1)
        start = time.monotonic()

        for _ in range(11):
            await bucket.acquire()

        # first token is immediate, the other ten wait 1/50 s each
        assert time.monotonic() - start >= 0.18

    @pytest.mark.asyncio
    async def test_unlimited(self):
        bucket = TokenBucket(rate=0)
        start = time.monotonic()

        for _ in range(1000):
            await bucket.acquire()

        assert bucket.unlimited
        assert time.monotonic() - start < 0.5

    @pytest.mark.asyncio
    async def test_pause_delays_unlimited_bucket(self):
        bucket = TokenBucket(rate=0)
        bucket.pause(0.1)
        start = time.monotonic()

        await bucket.acquire()

        assert time.monotonic() - start >= 0.09

    def test_invalid_arguments(self):
        with pytest.raises(ValueError):
            TokenBucket(rate=-1)
        with pytest.raises(ValueError):
            TokenBucket(rate=1, capacity=0)


class TestRetryPolicy:
    def test_exponential_backoff_is_capped(self):
        policy = RetryPolicy(base_delay=0.5, multiplier=2.0, max_delay=3.0)

        assert [policy.delay_for(n) for n in range(4)] == [0.5, 1.0, 2.0, 3.0]

    def test_retry_after_raises_delay(self):
        policy = RetryPolicy(base_delay=0.5, max_delay=30.0)

        assert policy.delay_for(0, retry_after=5.0) == 5.0
        assert policy.delay_for(0, retry_after=120.0) == 30.0

    def test_only_transient_kinds_retry(self):
        policy = RetryPolicy(max_retries=2)
        pair = CredentialPair("a", "b")

        assert policy.should_retry(AttemptOutcome(pair, OutcomeKind.NETWORK_ERROR), 0)
        assert policy.should_retry(AttemptOutcome(pair, OutcomeKind.RATE_LIMITED), 1)
        assert not policy.should_retry(AttemptOutcome(pair, OutcomeKind.RATE_LIMITED), 2)
        assert not policy.should_retry(AttemptOutcome(pair, OutcomeKind.TIMEOUT), 0)
        assert not policy.should_retry(AttemptOutcome(pair, OutcomeKind.INVALID), 0)
        assert not policy.should_retry(AttemptOutcome(pair, OutcomeKind.NETWORK_ERROR, fatal=True), 0)


class TestResumeCheckpoint:
    def test_out_of_order_completion(self):
        checkpoint = ResumeCheckpoint()

        checkpoint.mark_done(1)
        checkpoint.mark_done(2)
        assert checkpoint.offset == 0

        checkpoint.mark_done(0)
        assert checkpoint.offset == 3

    def test_starts_at_offset_and_ignores_old_indexes(self):
        checkpoint = ResumeCheckpoint(10)

        checkpoint.mark_done(3)
        checkpoint.mark_done(10)

        assert checkpoint.offset == 11


class TestScheduler:
    """Worker pool behaviour."""

    @pytest.mark.asyncio
    async def test_exhaustive_run(self):
        executor = FakeExecutor(only_valid(("admin", "admin")))
        aggregator = ResultAggregator()
        checkpoint = ResumeCheckpoint()
        scheduler = Scheduler(
            executor, aggregator, SchedulerConfig(workers=3), checkpoint=checkpoint
        )

        await scheduler.run(candidates(["admin", "root"], ["123456", "admin"]))

        tallies = aggregator.tallies()
        assert tallies.attempted == 4
        assert tallies.succeeded == 1
        assert tallies.by_kind["invalid_credentials"] == 3
        assert scheduler.stop_reason is None
        assert checkpoint.offset == 4

    @pytest.mark.asyncio
    async def test_no_dispatch_after_first_success(self):
        """With stop-on-first-success nothing new is dispatched once a success is recorded."""
        users = [f"user{i}" for i in range(10)]
        executor = FakeExecutor(only_valid(("user2", "p1")), delay=0.005)
        aggregator = ResultAggregator()
        dispatched_at_success: list[int] = []

        def on_outcome(item: AttemptOutcome) -> None:
            if item.success:
                dispatched_at_success.append(len(executor.calls))

        scheduler = Scheduler(
            executor,
            aggregator,
            SchedulerConfig(workers=4, success_policy=SuccessPolicy.FIRST),
            on_outcome=on_outcome,
        )

        await scheduler.run(candidates(users, ["p0", "p1", "p2"]))

        assert scheduler.stop_reason is StopReason.SUCCESS
        assert dispatched_at_success
        assert len(executor.calls) == dispatched_at_success[0]
        assert len(executor.calls) < 30

    @pytest.mark.asyncio
    async def test_per_user_policy_skips_remaining_passwords(self):
        executor = FakeExecutor(only_valid(("a", "p1")))
        aggregator = ResultAggregator()
        checkpoint = ResumeCheckpoint()
        scheduler = Scheduler(
            executor,
            aggregator,
            SchedulerConfig(workers=1, success_policy=SuccessPolicy.PER_USER),
            checkpoint=checkpoint,
        )

        await scheduler.run(candidates(["a", "b"], ["p1", "p2", "p3"]))

        assert [str(p) for p in executor.calls] == ["a:p1", "b:p1", "b:p2", "b:p3"]
        assert checkpoint.offset == 6

    @pytest.mark.asyncio
    async def test_duplicates_dispatched_once(self):
        executor = FakeExecutor(only_valid())
        aggregator = ResultAggregator()
        pairs = [CredentialPair("a", "1"), CredentialPair("a", "2"), CredentialPair("a", "1", "other")]

        await Scheduler(executor, aggregator, SchedulerConfig(workers=2)).run(enumerate(pairs))

        assert len(executor.calls) == 2
        assert len(aggregator) == 2

    @pytest.mark.asyncio
    async def test_transient_errors_are_retried(self):
        def flaky(pair, attempt):
            return OutcomeKind.NETWORK_ERROR if attempt < 3 else OutcomeKind.INVALID

        executor = FakeExecutor(flaky)
        aggregator = ResultAggregator()
        config = SchedulerConfig(workers=1, retry=RetryPolicy(max_retries=3, base_delay=0.001))

        await Scheduler(executor, aggregator, config).run(candidates(["a"], ["1"]))

        (result,) = aggregator.outcomes()
        assert result.kind is OutcomeKind.INVALID
        assert result.retries == 2
        assert len(executor.calls) == 3

    @pytest.mark.asyncio
    async def test_retries_exhausted_records_error(self):
        executor = FakeExecutor(lambda pair, attempt: OutcomeKind.NETWORK_ERROR)
        aggregator = ResultAggregator()
        config = SchedulerConfig(
            workers=1,
            retry=RetryPolicy(max_retries=2, base_delay=0.001),
            max_consecutive_errors=0,
        )

        await Scheduler(executor, aggregator, config).run(candidates(["a"], ["1", "2"]))

        assert len(executor.calls) == 6
        assert aggregator.tallies().errored == 2

    @pytest.mark.asyncio
    async def test_rate_limited_pauses_all_workers(self):
        def throttled_once(pair, attempt):
            if attempt == 1 and pair.password == "1":
                return AttemptOutcome(pair, OutcomeKind.RATE_LIMITED, metadata={"retry_after": 0.2})
            return OutcomeKind.INVALID

        executor = FakeExecutor(throttled_once)
        aggregator = ResultAggregator()
        config = SchedulerConfig(workers=2, retry=RetryPolicy(max_retries=1, base_delay=0.001))
        start = time.monotonic()

        await Scheduler(executor, aggregator, config).run(candidates(["a"], ["1", "2", "3", "4"]))

        assert time.monotonic() - start >= 0.18
        assert aggregator.tallies().by_kind["invalid_credentials"] == 4

    @pytest.mark.asyncio
    async def test_timeouts_are_not_retried(self):
        executor = FakeExecutor(lambda pair, attempt: OutcomeKind.TIMEOUT)
        aggregator = ResultAggregator()

        await Scheduler(executor, aggregator, SchedulerConfig(workers=2)).run(
            candidates(["a"], ["1", "2"])
        )

        assert len(executor.calls) == 2
        assert aggregator.tallies().failed == 2

    @pytest.mark.asyncio
    async def test_fatal_outcome_aborts(self):
        def fatal(pair, attempt):
            return AttemptOutcome(pair, OutcomeKind.NETWORK_ERROR, detail="DNS failure", fatal=True)

        executor = FakeExecutor(fatal)
        aggregator = ResultAggregator()
        scheduler = Scheduler(executor, aggregator, SchedulerConfig(workers=1))

        await scheduler.run(candidates(["a"], ["1", "2", "3"]))

        assert scheduler.stop_reason is StopReason.ABORTED
        assert scheduler.fatal_error == "DNS failure"
        assert len(executor.calls) == 1

    @pytest.mark.asyncio
    async def test_consecutive_network_errors_abort(self):
        executor = FakeExecutor(lambda pair, attempt: OutcomeKind.NETWORK_ERROR)
        aggregator = ResultAggregator()
        config = SchedulerConfig(
            workers=1, retry=RetryPolicy(max_retries=0), max_consecutive_errors=3
        )
        scheduler = Scheduler(executor, aggregator, config)

        await scheduler.run(candidates(["a"], [str(i) for i in range(10)]))

        assert scheduler.stop_reason is StopReason.ABORTED
        assert "unreachable" in scheduler.fatal_error
        assert len(aggregator) == 3

    @pytest.mark.asyncio
    async def test_timeouts_do_not_reset_error_streak(self):
        def alternate(pair, attempt):
            return OutcomeKind.NETWORK_ERROR if int(pair.password) % 2 == 0 else OutcomeKind.TIMEOUT

        executor = FakeExecutor(alternate)
        aggregator = ResultAggregator()
        config = SchedulerConfig(
            workers=1, retry=RetryPolicy(max_retries=0), max_consecutive_errors=3
        )
        scheduler = Scheduler(executor, aggregator, config)

        await scheduler.run(candidates(["a"], [str(i) for i in range(20)]))

        assert scheduler.stop_reason is StopReason.ABORTED
        assert len(aggregator) == 5

    @pytest.mark.asyncio
    async def test_invalid_response_resets_error_streak(self):
        def mostly_errors(pair, attempt):
            return OutcomeKind.INVALID if int(pair.password) % 2 else OutcomeKind.NETWORK_ERROR

        executor = FakeExecutor(mostly_errors)
        aggregator = ResultAggregator()
        config = SchedulerConfig(
            workers=1, retry=RetryPolicy(max_retries=0), max_consecutive_errors=2
        )
        scheduler = Scheduler(executor, aggregator, config)

        await scheduler.run(candidates(["a"], [str(i) for i in range(10)]))

        assert scheduler.stop_reason is None
        assert len(aggregator) == 10

    @pytest.mark.asyncio
    async def test_executor_exception_propagates(self):
        def broken(pair, attempt):
            raise RuntimeError("classifier bug")

        scheduler = Scheduler(FakeExecutor(broken), ResultAggregator(), SchedulerConfig(workers=2))

        with pytest.raises(RuntimeError, match="classifier bug"):
            await asyncio.wait_for(
                scheduler.run(candidates(["a"], [str(i) for i in range(50)])), timeout=5
            )

    @pytest.mark.asyncio
    async def test_time_budget(self):
        executor = FakeExecutor(only_valid(), delay=0.02)
        aggregator = ResultAggregator()
        scheduler = Scheduler(executor, aggregator, SchedulerConfig(workers=1, max_time=0.1))

        await scheduler.run(candidates(["a"], [str(i) for i in range(100)]))

        assert scheduler.stop_reason is StopReason.TIME_BUDGET
        assert 0 < len(aggregator) < 100

    @pytest.mark.asyncio
    async def test_cancel_keeps_recorded_results(self):
        executor = FakeExecutor(only_valid(), delay=0.01)
        aggregator = ResultAggregator()
        checkpoint = ResumeCheckpoint()
        scheduler = Scheduler(
            executor, aggregator, SchedulerConfig(workers=2), checkpoint=checkpoint
        )

        async def cancel_soon():
            await asyncio.sleep(0.05)
            scheduler.cancel()

        await asyncio.gather(
            scheduler.run(candidates(["a"], [str(i) for i in range(200)])),
            cancel_soon(),
        )

        assert scheduler.stop_reason is StopReason.INTERRUPTED
        assert 0 < len(aggregator) < 200
        assert checkpoint.offset == len(aggregator)

    def test_rejects_zero_workers(self):
        with pytest.raises(ValueError):
            Scheduler(FakeExecutor(only_valid()), ResultAggregator(), SchedulerConfig(workers=0))
