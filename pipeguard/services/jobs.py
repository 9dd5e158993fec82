# Copyright (c) 2025 Parth Sinha and Shine Gupta. All rights reserved.
# PipeGuard - Consent-gated remediation and risk analysis for failed CI/CD pipelines.

"""
Background Job Queue

Supervised asyncio workers for fire-and-forget work such as executing an
approved remediation after the triggering request has returned.
"""

import asyncio
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Optional

import structlog

from pipeguard.core.config import Settings, get_settings
from pipeguard.core.enums import JobStatus
from pipeguard.exceptions import JobQueueNotRunningError

logger = structlog.get_logger(__name__)

JobFactory = Callable[[], Awaitable[Any]]


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Job:
    """ Record of one submitted background job. """
    id: str
    name: str
    status: JobStatus = JobStatus.QUEUED
    result: Any = None
    error: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    started_at: Optional[datetime] = None
    finished_at: Optional[datetime] = None

    def is_finished(self) -> bool:
        return self.status in (JobStatus.SUCCEEDED, JobStatus.FAILED, JobStatus.CANCELLED)

    def to_dict(self) -> dict:
        """ Convert to dictionary. """
        return {
            "id": self.id,
            "name": self.name,
            "status": self.status.value,
            "error": self.error,
            "created_at": self.created_at.isoformat(),
            "started_at": self.started_at.isoformat() if self.started_at else None,
            "finished_at": self.finished_at.isoformat() if self.finished_at else None,
        }


class BackgroundJobQueue:
    """
    asyncio.Queue drained by a fixed pool of worker tasks.

    Job failures are recorded and logged; they never stop a worker. The queue
    has its own start/stop lifecycle independent of any caller. Only the most
    recent `max_finished` finished jobs are retained; older records are
    evicted in submission order.

    Example:
        ```python
        async with BackgroundJobQueue(name="remediation") as queue:
            job_id = queue.submit(lambda: service.execute_with_consent("p1", True))
            job = await queue.wait(job_id)
        ```
    """

    def __init__(
        self,
        name: str = "default",
        workers: Optional[int] = None,
        max_size: Optional[int] = None,
        max_finished: Optional[int] = None,
        settings: Optional[Settings] = None,
    ):
        jobs_settings = (settings or get_settings()).jobs

        self.name = name
        self.worker_count = workers or jobs_settings.workers
        self.max_size = max_size if max_size is not None else jobs_settings.max_size
        self.max_finished = max_finished or jobs_settings.max_finished

        self._queue: Optional[asyncio.Queue] = None
        self._workers: list[asyncio.Task] = []
        self._jobs: dict[str, Job] = {}
        self._factories: dict[str, JobFactory] = {}
        self._events: dict[str, asyncio.Event] = {}
        self._running = False

    @property
    def is_running(self) -> bool:
        return self._running

    async def start(self) -> None:
        """ Start worker tasks. No-op when already running. """
        if self._running:
            return

        self._queue = asyncio.Queue(maxsize=self.max_size)
        self._workers = [
            asyncio.create_task(self._worker(index), name=f"{self.name}-worker-{index}")
            for index in range(self.worker_count)
        ]
        self._running = True

        logger.info("job_queue_started", queue=self.name, workers=self.worker_count)

    async def stop(self, drain: bool = True) -> None:
        """
        Stop the queue.

        Args:
            drain: Wait for queued jobs to finish before stopping workers;
                otherwise queued jobs are marked cancelled
        """
        if not self._running:
            return

        self._running = False

        if drain:
            await self._queue.join()
        else:
            self._cancel_queued()

        for worker in self._workers:
            worker.cancel()
        await asyncio.gather(*self._workers, return_exceptions=True)
        self._workers = []

        logger.info("job_queue_stopped", queue=self.name, drained=drain)

    def submit(self, factory: JobFactory, name: Optional[str] = None) -> str:
        """
        Enqueue a coroutine factory.

        Args:
            factory: Zero-argument callable returning an awaitable
            name: Job name for logs

        Returns:
            Job id

        Raises:
            JobQueueNotRunningError: If the queue was not started
        """
        if not self._running:
            raise JobQueueNotRunningError(self.name)

        job = Job(id=str(uuid.uuid4()), name=name or getattr(factory, "__name__", "job"))
        self._jobs[job.id] = job
        self._factories[job.id] = factory
        self._events[job.id] = asyncio.Event()
        self._queue.put_nowait(job.id)

        logger.debug("job_submitted", queue=self.name, job_id=job.id, job_name=job.name)
        return job.id

    def get_job(self, job_id: str) -> Optional[Job]:
        return self._jobs.get(job_id)

    def jobs(self) -> list[Job]:
        return list(self._jobs.values())

    async def wait(self, job_id: str, timeout: Optional[float] = None) -> Job:
        """
        Wait for a job to finish.

        Args:
            job_id: Job id returned by submit()
            timeout: Seconds to wait, or None for no limit

        Returns:
            The finished job record

        Raises:
            KeyError: If the job id is unknown
            asyncio.TimeoutError: If the timeout elapses
        """
        job = self._jobs[job_id]
        await asyncio.wait_for(self._events[job_id].wait(), timeout=timeout)
        return job

    async def _worker(self, index: int) -> None:
        while True:
            job_id = await self._queue.get()
            try:
                await self._run(job_id)
            finally:
                self._queue.task_done()

    async def _run(self, job_id: str) -> None:
        job = self._jobs[job_id]
        factory = self._factories.pop(job_id, None)

        if job.status == JobStatus.CANCELLED or factory is None:
            return

        job.status = JobStatus.RUNNING
        job.started_at = _utcnow()
        logger.info("job_started", queue=self.name, job_id=job.id, job_name=job.name)

        try:
            job.result = await factory()
            job.status = JobStatus.SUCCEEDED
            logger.info("job_succeeded", queue=self.name, job_id=job.id, job_name=job.name)
        except asyncio.CancelledError:
            job.status = JobStatus.CANCELLED
            logger.warning("job_cancelled", queue=self.name, job_id=job.id, job_name=job.name)
            raise
        except Exception as e:
            job.status = JobStatus.FAILED
            job.error = str(e)
            logger.error(
                "job_failed",
                queue=self.name,
                job_id=job.id,
                job_name=job.name,
                error=str(e),
                exc_info=True,
            )
        finally:
            job.finished_at = _utcnow()
            self._events[job.id].set()
            self._prune_finished()

    def _cancel_queued(self) -> None:
        while not self._queue.empty():
            job_id = self._queue.get_nowait()
            job = self._jobs[job_id]
            job.status = JobStatus.CANCELLED
            job.finished_at = _utcnow()
            self._factories.pop(job_id, None)
            self._events[job_id].set()
            self._queue.task_done()
        self._prune_finished()

    def _prune_finished(self) -> None:
        finished = [job_id for job_id, job in self._jobs.items() if job.is_finished()]
        excess = len(finished) - self.max_finished
        if excess <= 0:
            return

        for job_id in finished[:excess]:
            del self._jobs[job_id]
            self._events.pop(job_id, None)

        logger.debug("jobs_pruned", queue=self.name, evicted=excess, retained=len(self._jobs))

    async def __aenter__(self):
        await self.start()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.stop()
