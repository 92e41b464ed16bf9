"""Throughput benchmark: repeated exhaustive scans without persistence."""

from __future__ import annotations

import dataclasses
import logging
import statistics
import time
from dataclasses import dataclass, field

import httpx

from redfox.modules.results import Session
from redfox.modules.scheduler import SuccessPolicy
from redfox.modules.target import Target

from .request import ScanRequest
from .scanner import Scanner

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BenchmarkIteration:
    iteration: int
    attempts: int
    succeeded: int
    errored: int
    duration: float

    @property
    def rate(self) -> float:
        return self.attempts / self.duration if self.duration > 0 else 0.0


@dataclass
class BenchmarkResult:
    target: str
    threads: int
    iterations: list[BenchmarkIteration] = field(default_factory=list)

    @property
    def total_attempts(self) -> int:
        return sum(i.attempts for i in self.iterations)

    @property
    def total_duration(self) -> float:
        return sum(i.duration for i in self.iterations)

    @property
    def mean_rate(self) -> float:
        if not self.iterations:
            return 0.0
        return statistics.fmean(i.rate for i in self.iterations)

    @property
    def best_rate(self) -> float:
        return max((i.rate for i in self.iterations), default=0.0)


async def run_benchmark(
    request: ScanRequest,
    target: Target,
    iterations: int = 3,
    transport: httpx.AsyncBaseTransport | None = None,
) -> BenchmarkResult:
    """Run the same exhaustive scan ``iterations`` times and measure attempts/second.

    Stops early if an iteration aborts, since later ones would measure the
    same failure.
    """
    if iterations < 1:
        raise ValueError("iterations must be at least 1")
    request = dataclasses.replace(
        request, success_policy=SuccessPolicy.EXHAUSTIVE, max_time=None, resume_offset=0
    )
    result = BenchmarkResult(target=target.url, threads=request.threads)
    source = request.build_source()

    for number in range(1, iterations + 1):
        scanner = Scanner(request, source=source, transport=transport)
        started = time.perf_counter()
        session: Session = await scanner.run(target)
        elapsed = time.perf_counter() - started
        tallies = session.tallies
        result.iterations.append(
            BenchmarkIteration(
                iteration=number,
                attempts=tallies.attempted,
                succeeded=tallies.succeeded,
                errored=tallies.errored,
                duration=elapsed,
            )
        )
        logger.info(
            "Iteration %d: %d attempts in %.2fs (%.1f/s)",
            number,
            tallies.attempted,
            elapsed,
            result.iterations[-1].rate,
        )
        if session.failed_fatally:
            logger.error("Benchmark iteration %d aborted: %s", number, session.error)
            break
    return result
