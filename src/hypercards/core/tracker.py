"""Job lifecycle tracking for submitted cards.

This module provides :class:`JobLifecycleTracker`, the state machine that
follows one job from submission to a terminal outcome.

State Machine
-------------
::

    IDLE ──begin_submission()──> SUBMITTING ──track(handle)──> POLLING
                                                                 │
                                          ┌──────────────────────┤
                                          v                      v
                                      COMPLETED               FAILED

    reset() returns to IDLE from any state.

Polling
-------
Entering POLLING issues the first status query right away, then one query
per ``interval`` seconds.  The tracker owns exactly two tasks:

- the **timer** task, which sleeps for the interval and fires a tick
- the **in-flight** task, which awaits a single status request

A tick that fires while a request is still in flight is skipped, so at most
one request is outstanding per job.  Every response is applied together with
the job id it was issued for and compared against the tracker's current job
id; responses for a superseded job, or arriving after ``stop()``/``reset()``,
are discarded.

Transient failures (network errors, non-2xx responses, malformed bodies) are
recorded as :class:`~hypercards.core.errors.PollTransientError` and logged;
the next tick proceeds normally.  There is no attempt limit and no backoff.

Usage
-----
::

    tracker = JobLifecycleTracker(client, listener=print)
    tracker.track(handle)
    state = await tracker.wait()
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Awaitable, Callable
from enum import Enum

from .config import config
from .errors import BackendUnavailable, PollTransientError, TerminalFailure, TrackerStateError
from .models import (
    DisplayStage,
    JobHandle,
    JobResult,
    JobSnapshot,
    JobStatus,
    TaskProgress,
    TrackerUpdate,
)
from .progress import translate

logger = logging.getLogger(__name__)

Listener = Callable[[TrackerUpdate], None]
Sleep = Callable[[float], Awaitable[None]]


class TrackerState(str, Enum):
    IDLE = "idle"
    SUBMITTING = "submitting"
    POLLING = "polling"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (TrackerState.COMPLETED, TrackerState.FAILED)


def _current_task() -> asyncio.Task | None:
    try:
        return asyncio.current_task()
    except RuntimeError:
        return None


class JobLifecycleTracker:
    """Track a single job from submission to completion or failure.

    Attributes:
        transient_failures (int):
            Number of transient poll failures for the current job.
        last_transient_error (PollTransientError | None):
            Most recent transient poll failure for the current job.
        skipped_ticks (int):
            Ticks skipped because a request was still in flight.
    """

    def __init__(
        self,
        client,
        interval: float | None = None,
        listener: Listener | None = None,
        sleep: Sleep = asyncio.sleep,
    ) -> None:
        """Initialise the tracker in the IDLE state.

        Args:
            client: Object providing ``async get_status(job_id)``, normally a
                :class:`~hypercards.api.client.GenerationServiceClient`
            interval: Seconds between polls (default: from config)
            listener: Called with a :class:`TrackerUpdate` on every status
                change, progress update and terminal resolution
            sleep: Coroutine used to wait between ticks
        """
        self._client = client
        self._interval = interval if interval is not None else config.poll_interval_seconds
        self._listener = listener
        self._sleep = sleep

        self._state = TrackerState.IDLE
        self._job: JobHandle | None = None
        self._status: JobStatus | None = None
        self._progress: TaskProgress | None = None
        self._stages: tuple[DisplayStage, ...] = ()
        self._result: JobResult | None = None
        self._error: TerminalFailure | None = None

        # Owned exclusively by this instance; cancelled before reassignment.
        self._timer: asyncio.Task | None = None
        self._inflight: asyncio.Task | None = None
        self._settled: asyncio.Event | None = None

        self.transient_failures = 0
        self.last_transient_error: PollTransientError | None = None
        self.skipped_ticks = 0

    # -- Read-only state -----------------------------------------------------

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def job(self) -> JobHandle | None:
        return self._job

    @property
    def job_id(self) -> str | None:
        return self._job.id if self._job is not None else None

    @property
    def status(self) -> JobStatus | None:
        return self._status

    @property
    def progress(self) -> TaskProgress | None:
        return self._progress

    @property
    def stages(self) -> tuple[DisplayStage, ...]:
        return self._stages

    @property
    def result(self) -> JobResult | None:
        return self._result

    @property
    def error(self) -> TerminalFailure | None:
        return self._error

    @property
    def snapshot(self) -> JobSnapshot | None:
        if self._status is None:
            return None
        return JobSnapshot(status=self._status, progress=self._progress, result=self._result)

    @property
    def is_polling(self) -> bool:
        return self._timer is not None and not self._timer.done()

    # -- Lifecycle -----------------------------------------------------------

    def begin_submission(self) -> None:
        """Enter SUBMITTING, discarding any previous finished job.

        Raises:
            TrackerStateError: If a submission or poll is already active
        """
        if self._state in (TrackerState.SUBMITTING, TrackerState.POLLING):
            raise TrackerStateError(f"Cannot start a new submission while {self._state.value}")

        self.reset()
        self._state = TrackerState.SUBMITTING

    def track(self, handle: JobHandle) -> None:
        """Take ownership of ``handle`` and follow it to a terminal state.

        Any previously tracked job is stopped first. A handle that is already
        terminal resolves immediately; otherwise polling starts with an
        immediate status query.

        Must be called from within a running event loop.
        """
        self.stop()

        self._job = handle
        self._status = handle.status
        self._progress = handle.snapshot.progress
        self._stages = translate(self._progress)
        self._result = None
        self._error = None
        self._settled = asyncio.Event()
        self.transient_failures = 0
        self.last_transient_error = None
        self.skipped_ticks = 0

        if handle.status is JobStatus.COMPLETED:
            logger.info(f"Job {handle.id} completed synchronously")
            self._finish(
                TrackerState.COMPLETED, JobStatus.COMPLETED, result=handle.snapshot.result or JobResult()
            )
            return

        if handle.status is JobStatus.FAILED:
            self._finish(TrackerState.FAILED, JobStatus.FAILED, error=TerminalFailure(handle.id))
            return

        logger.info(f"Polling job {handle.id} every {self._interval}s")
        self._state = TrackerState.POLLING
        self._notify()

        self._tick(handle.id)
        self._timer = asyncio.create_task(self._run_timer(handle.id))

    def stop(self) -> None:
        """Cancel the timer and any in-flight request. Idempotent."""
        timer, self._timer = self._timer, None
        inflight, self._inflight = self._inflight, None

        if timer is not None and not timer.done():
            timer.cancel()
        # A response being applied inside the in-flight task may stop the
        # tracker; that task finishes on its own.
        if inflight is not None and not inflight.done() and inflight is not _current_task():
            inflight.cancel()

        if self._settled is not None:
            self._settled.set()

    def reset(self) -> None:
        """Stop polling, discard the job and return to IDLE. Safe from any state."""
        self.stop()

        if self._job is not None:
            logger.debug(f"Releasing job {self._job.id}")

        self._state = TrackerState.IDLE
        self._job = None
        self._status = None
        self._progress = None
        self._stages = ()
        self._result = None
        self._error = None
        self._settled = None

    async def wait(self) -> TrackerState:
        """Wait until the current job settles and return the tracker state.

        Returns immediately when nothing is being polled. Settling means a
        terminal state, ``stop()`` or ``reset()``.
        """
        event = self._settled
        if event is not None and self._state is TrackerState.POLLING:
            await event.wait()
        return self._state

    async def aclose(self) -> None:
        """Reset the tracker and wait for its cancelled tasks to unwind."""
        current = _current_task()
        pending = [
            task for task in (self._timer, self._inflight) if task is not None and task is not current
        ]
        self.reset()
        if pending:
            await asyncio.gather(*pending, return_exceptions=True)

    # -- Polling -------------------------------------------------------------

    async def _run_timer(self, job_id: str) -> None:
        while True:
            await self._sleep(self._interval)
            self._tick(job_id)

    def _tick(self, job_id: str) -> None:
        if job_id != self.job_id or self._state is not TrackerState.POLLING:
            return

        if self._inflight is not None and not self._inflight.done():
            self.skipped_ticks += 1
            logger.debug(f"Poll for job {job_id} still in flight, skipping tick")
            return

        self._inflight = asyncio.create_task(self._poll(job_id))

    async def _poll(self, job_id: str) -> None:
        try:
            response = await self._client.get_status(job_id)
        except BackendUnavailable as e:
            self._record_transient(job_id, e)
            return

        self._apply(job_id, response.to_snapshot())

    def _record_transient(self, job_id: str, cause: Exception) -> None:
        if job_id != self.job_id:
            return

        error = PollTransientError(job_id, cause)
        self.transient_failures += 1
        self.last_transient_error = error
        logger.warning(f"Transient poll failure ({type(error).__name__}): {error}")

    def _apply(self, job_id: str, snapshot: JobSnapshot) -> bool:
        """Apply a status snapshot issued for ``job_id``.

        Returns:
            True if the snapshot was applied, False if it was discarded as
            stale
        """
        if job_id != self.job_id:
            logger.debug(f"Discarding status for superseded job {job_id}")
            return False
        if self._state is not TrackerState.POLLING or self._timer is None:
            logger.debug(f"Discarding status for job {job_id} in state {self._state.value}")
            return False

        status = snapshot.status

        if status is JobStatus.COMPLETED:
            self._finish(TrackerState.COMPLETED, status, result=snapshot.result or JobResult())
            return True

        if status is JobStatus.FAILED:
            self._finish(TrackerState.FAILED, status, error=TerminalFailure(job_id))
            return True

        if status is JobStatus.QUEUED and self._status is JobStatus.GENERATING:
            # Status only moves forward
            logger.debug(f"Ignoring status {status.value} for job {job_id} after generating")
            status = self._status

        changed = status is not self._status
        self._status = status

        if snapshot.progress is not None:
            self._progress = snapshot.progress
            self._stages = translate(snapshot.progress)
            changed = True

        if changed:
            self._notify()
        return True

    def _finish(
        self,
        state: TrackerState,
        status: JobStatus,
        result: JobResult | None = None,
        error: TerminalFailure | None = None,
    ) -> None:
        self._state = state
        self._status = status
        self._result = result
        self._error = error
        self._progress = None
        self._stages = ()
        self.stop()

        if error is not None:
            logger.info(f"Job {self.job_id} failed: {error}")
        else:
            logger.info(f"Job {self.job_id} completed")
        self._notify()

    def _notify(self) -> None:
        if self._listener is None or self._job is None:
            return

        update = TrackerUpdate(
            job_id=self._job.id,
            state=self._state,
            status=self._status,
            stages=self._stages,
            result=self._result,
            error=self._error,
        )
        try:
            self._listener(update)
        except Exception:
            logger.error(f"Tracker listener failed for job {self._job.id}", exc_info=True)

    def __repr__(self) -> str:
        return f"JobLifecycleTracker(state={self._state.value}, job={self.job_id})"
