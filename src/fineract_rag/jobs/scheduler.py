"""
Job Scheduler

Named, independently controllable periodic tasks on the asyncio event loop.

State Model
-----------
- A job is *running* while its timer task is alive, *stopped* otherwise.
- ``start`` on a running job is a no-op; ``stop``/``restart`` on an
  unknown job return False instead of raising.
- Stopping cancels future firings only. A handler that is already
  executing is shielded from the cancellation and runs to completion.
- A job never overlaps with itself: a firing (scheduled or manual) that
  arrives while the previous run is still executing is skipped.
"""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Dict, List, Optional, Set

logger = logging.getLogger("rag.jobs")

JobHandler = Callable[[], Awaitable[Any]]


@dataclass
class JobRunResult:
    """Outcome of a single handler execution."""
    job_name: str
    ran: bool
    result: Any = None
    error: Optional[str] = None
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    @property
    def ok(self) -> bool:
        return self.ran and self.error is None


@dataclass
class ScheduledJob:
    name: str
    interval_seconds: float
    handler: JobHandler

    last_started_at: Optional[datetime] = None
    last_finished_at: Optional[datetime] = None
    last_error: Optional[str] = None
    run_count: int = 0

    _timer: Optional[asyncio.Task] = field(default=None, repr=False)
    _lock: asyncio.Lock = field(default_factory=asyncio.Lock, repr=False)

    @property
    def is_running(self) -> bool:
        return self._timer is not None and not self._timer.done()

    @property
    def is_executing(self) -> bool:
        return self._lock.locked()

    def describe(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "interval_seconds": self.interval_seconds,
            "running": self.is_running,
            "executing": self.is_executing,
            "run_count": self.run_count,
            "last_started_at": self.last_started_at,
            "last_finished_at": self.last_finished_at,
            "last_error": self.last_error,
        }


class JobScheduler:
    """
    Registry of scheduled jobs. Must be used from within a running event loop.
    """

    def __init__(self) -> None:
        self._jobs: Dict[str, ScheduledJob] = {}
        self._in_flight: Set[asyncio.Task] = set()

    # ------------------------------------------------------------------
    # Registry
    # ------------------------------------------------------------------

    def register(self, name: str, interval_seconds: float, handler: JobHandler) -> bool:
        """
        Add a job in the stopped state. Returns False if the name is taken.
        """
        if interval_seconds <= 0:
            raise ValueError(f"Job interval must be positive, got {interval_seconds!r}")

        if name in self._jobs:
            logger.debug("Job %s already registered", name)
            return False

        self._jobs[name] = ScheduledJob(name=name, interval_seconds=interval_seconds, handler=handler)
        logger.info("Job %s registered (every %ss)", name, interval_seconds)
        return True

    def has_job(self, name: str) -> bool:
        return name in self._jobs

    def get_job(self, name: str) -> Optional[ScheduledJob]:
        return self._jobs.get(name)

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def start(self, name: str) -> bool:
        job = self._jobs.get(name)
        if job is None:
            logger.warning("Job not found: %s", name)
            return False

        if job.is_running:
            return True

        job._timer = asyncio.get_running_loop().create_task(
            self._timer_loop(job),
            name=f"job-timer:{name}",
        )
        logger.info("Job %s started", name)
        return True

    def stop(self, name: str) -> bool:
        job = self._jobs.get(name)
        if job is None:
            logger.warning("Job not found: %s", name)
            return False

        if job._timer is not None:
            job._timer.cancel()
            job._timer = None
            logger.info("Job %s stopped", name)
        return True

    def restart(self, name: str) -> bool:
        """Stop then start a job. False (and a warning) if the job is unknown."""
        if name not in self._jobs:
            logger.warning("Cannot restart unknown job: %s", name)
            return False

        self.stop(name)
        started = self.start(name)
        if started:
            logger.info("Restarted job: %s", name)
        return started

    def remove(self, name: str) -> bool:
        if not self.stop(name):
            return False
        del self._jobs[name]
        return True

    def stop_all(self) -> List[str]:
        """Stop and remove every registered job. Returns the removed names."""
        names = list(self._jobs)
        for name in names:
            self.remove(name)
        if names:
            logger.info("All jobs stopped: %s", ", ".join(names))
        return names

    async def wait_idle(self, timeout: Optional[float] = None) -> bool:
        """
        Wait for handlers that are still executing after their timers stopped.

        Returns False if some were still executing when ``timeout`` expired.
        """
        pending = [t for t in self._in_flight if not t.done()]
        if not pending:
            return True

        logger.info("Waiting for %d in-flight job run(s)", len(pending))
        _, still_pending = await asyncio.wait(pending, timeout=timeout)
        return not still_pending

    # ------------------------------------------------------------------
    # Execution
    # ------------------------------------------------------------------

    async def trigger_now(self, name: str) -> Optional[JobRunResult]:
        """
        Run a job's handler once, outside its schedule.

        The timer is left untouched. Returns None for an unknown job.
        """
        job = self._jobs.get(name)
        if job is None:
            logger.warning("Cannot trigger unknown job: %s", name)
            return None

        logger.info("Manually triggering job %s", name)
        return await self._run_shielded(job)

    def get_job_status(self, detailed: bool = False) -> Dict[str, Any]:
        """
        Map of job name to running flag, or to the full bookkeeping record
        when ``detailed`` is set. Removed jobs are absent.
        """
        if detailed:
            return {name: job.describe() for name, job in self._jobs.items()}
        return {name: job.is_running for name, job in self._jobs.items()}

    async def _timer_loop(self, job: ScheduledJob) -> None:
        while True:
            await asyncio.sleep(job.interval_seconds)
            await self._run_shielded(job)

    async def _run_shielded(self, job: ScheduledJob) -> JobRunResult:
        run = asyncio.ensure_future(self._execute(job))
        self._in_flight.add(run)
        run.add_done_callback(self._in_flight.discard)
        return await asyncio.shield(run)

    async def _execute(self, job: ScheduledJob) -> JobRunResult:
        if job._lock.locked():
            logger.warning("Job %s is still running; skipping this firing", job.name)
            return JobRunResult(job_name=job.name, ran=False, error="already running")

        async with job._lock:
            started = datetime.now(timezone.utc)
            job.last_started_at = started
            job.run_count += 1
            logger.info("Job %s run #%d started", job.name, job.run_count)

            try:
                result = await job.handler()
            except Exception as exc:
                logger.exception("Job %s failed", job.name)
                job.last_error = f"{type(exc).__name__}: {exc}"
                finished = datetime.now(timezone.utc)
                job.last_finished_at = finished
                return JobRunResult(
                    job_name=job.name,
                    ran=True,
                    error=job.last_error,
                    started_at=started,
                    finished_at=finished,
                )

            finished = datetime.now(timezone.utc)
            job.last_error = None
            job.last_finished_at = finished
            logger.info(
                "Job %s finished in %.1fs",
                job.name,
                (finished - started).total_seconds(),
            )
            return JobRunResult(
                job_name=job.name,
                ran=True,
                result=result,
                started_at=started,
                finished_at=finished,
            )
