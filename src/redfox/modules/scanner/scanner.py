"""Scanner: runs one session against one target."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable

import httpx

from redfox.errors import RedFoxError
from redfox.modules.credentials import CredentialSource
from redfox.modules.executor import AttemptExecutor
from redfox.modules.results import AttemptOutcome, ResultAggregator, Session, SessionState
from redfox.modules.scheduler import ResumeCheckpoint, Scheduler, StopReason
from redfox.modules.target import Scope, Target, check_resolvable

from .request import ScanRequest

logger = logging.getLogger(__name__)


class Scanner:
    """Wires source, executor, scheduler and aggregator for a session.

    ``run`` returns the session in a terminal state; attempt-level and
    connectivity failures are recorded on the session rather than raised.
    Input and scope problems raise before any session is started.
    """

    def __init__(
        self,
        request: ScanRequest,
        *,
        source: CredentialSource | None = None,
        scope: Scope | None = None,
        transport: httpx.AsyncBaseTransport | None = None,
        on_outcome: Callable[[AttemptOutcome], None] | None = None,
        on_start: Callable[[Session], None] | None = None,
        check_dns: bool = False,
    ):
        self.request = request
        self._source = source
        self.scope = scope or Scope()
        self.transport = transport
        self.on_outcome = on_outcome
        self.on_start = on_start
        self.check_dns = check_dns
        self.session: Session | None = None
        self._scheduler: Scheduler | None = None
        self._interrupted = False

    @property
    def source(self) -> CredentialSource:
        if self._source is None:
            self._source = self.request.build_source()
        return self._source

    def cancel(self) -> None:
        """Graceful stop: no new attempts, in-flight ones finish."""
        self._interrupted = True
        if self._scheduler is not None:
            self._scheduler.cancel(StopReason.INTERRUPTED)

    async def run(self, target: Target) -> Session:
        self.scope.enforce(target)
        source = self.source
        offset = self.request.resume_offset
        session = Session(
            target=target,
            mode=source.mode,
            policy=self.request.success_policy.value,
            total_candidates=source.total(),
            resume_offset=offset,
        )
        self.session = session
        logger.info(
            "Session %s: %s mode against %s (%d candidates, starting at %d)",
            session.id[:8],
            session.mode,
            target.url,
            session.total_candidates,
            offset,
        )

        async with AttemptExecutor(
            target, self.request.executor_options(), transport=self.transport
        ) as executor:
            try:
                if self.check_dns:
                    await asyncio.to_thread(check_resolvable, target)
                await executor.prepare()
            except RedFoxError as exc:
                logger.error("Target %s is unreachable: %s", target.url, exc)
                session.error = str(exc)
                session.stop_reason = StopReason.ABORTED.value
                session.transition(SessionState.ABORTED)
                return session

            await self._execute(session, executor, source, offset)
        return session

    async def _execute(
        self,
        session: Session,
        executor: AttemptExecutor,
        source: CredentialSource,
        offset: int,
    ) -> None:
        aggregator = ResultAggregator()
        checkpoint = ResumeCheckpoint(offset)
        scheduler = Scheduler(
            executor,
            aggregator,
            self.request.scheduler_config(),
            on_outcome=self.on_outcome,
            checkpoint=checkpoint,
        )
        self._scheduler = scheduler
        session.transition(SessionState.RUNNING)
        if self.on_start is not None:
            self.on_start(session)
        if self._interrupted:
            scheduler.cancel(StopReason.INTERRUPTED)

        try:
            await scheduler.run(source.iter_pairs(offset))
        except asyncio.CancelledError:
            self._finish(session, aggregator, checkpoint)
            session.stop_reason = StopReason.INTERRUPTED.value
            session.error = "Interrupted"
            session.transition(SessionState.ABORTED)
            raise

        self._finish(session, aggregator, checkpoint)
        if scheduler.fatal_error is not None:
            session.error = scheduler.fatal_error
            session.stop_reason = StopReason.ABORTED.value
            session.transition(SessionState.ABORTED)
        elif scheduler.stop_reason is not None:
            session.stop_reason = scheduler.stop_reason.value
            session.transition(SessionState.STOPPED)
        else:
            session.transition(SessionState.COMPLETED)
        logger.info(
            "Session %s %s: %d attempted, %d succeeded",
            session.id[:8],
            session.state,
            len(session.outcomes),
            len(session.successes),
        )

    @staticmethod
    def _finish(session: Session, aggregator: ResultAggregator, checkpoint: ResumeCheckpoint) -> None:
        session.outcomes = aggregator.outcomes()
        session.resume_offset = checkpoint.offset


async def run_scan(request: ScanRequest, target: Target, **kwargs) -> Session:
    """Convenience wrapper: one session against ``target``."""
    return await Scanner(request, **kwargs).run(target)
