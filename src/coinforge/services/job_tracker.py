"""In-process tracker for generation jobs.

The tracker is the only owner of job state. All methods are synchronous and
never await, so each call is atomic with respect to the event loop.
State is lost on restart; terminal jobs are evicted after a TTL.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, replace
from datetime import datetime, timedelta, timezone

from coinforge.errors.exceptions import ConflictError, UnknownJobError
from coinforge.models.enums import JobStatus
from coinforge.services.id_generator import generate_token

logger = logging.getLogger(__name__)

_TERMINAL = frozenset({JobStatus.DONE, JobStatus.FAILED})


@dataclass
class GenerationJob:
    job_id: str
    status: JobStatus
    percent: int
    created_at: datetime
    updated_at: datetime
    account_id: str | None = None
    artifact: str | None = None
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.status in _TERMINAL


class JobTracker:
    """Keyed store of GenerationJob entries with create/progress/complete/fail/get."""

    def __init__(self, ttl_seconds: int | None = None):
        self._jobs: dict[str, GenerationJob] = {}
        self._ttl = timedelta(seconds=ttl_seconds) if ttl_seconds else None

    def __len__(self) -> int:
        return len(self._jobs)

    def __contains__(self, job_id: str) -> bool:
        return job_id in self._jobs

    def create(self, account_id: str | None = None) -> str:
        """Allocate a fresh job id and install a running entry at 0%."""
        job_id = generate_token("job_")
        while job_id in self._jobs:
            job_id = generate_token("job_")
        now = datetime.now(timezone.utc)
        self._jobs[job_id] = GenerationJob(
            job_id=job_id,
            status=JobStatus.RUNNING,
            percent=0,
            created_at=now,
            updated_at=now,
            account_id=account_id,
        )
        logger.info("Job %s created", job_id)
        return job_id

    def set_progress(self, job_id: str, percent: int) -> None:
        if not 0 <= percent <= 100:
            raise ValueError(f"percent must be within 0..100, got {percent}")
        job = self._require(job_id)
        if job.is_terminal:
            raise ConflictError(f"Job {job_id} is already {job.status}")
        # Progress never moves backwards
        if percent > job.percent:
            job.percent = percent
            job.updated_at = datetime.now(timezone.utc)

    def complete(self, job_id: str, artifact: str) -> None:
        job = self._require(job_id)
        if job.is_terminal:
            raise ConflictError(f"Job {job_id} is already {job.status}")
        job.status = JobStatus.DONE
        job.percent = 100
        job.artifact = artifact
        job.updated_at = datetime.now(timezone.utc)
        logger.info("Job %s completed (%d chars)", job_id, len(artifact))

    def fail(self, job_id: str, reason: str | None = None) -> bool:
        """Mark a job failed. Returns False if the job was already terminal."""
        job = self._require(job_id)
        if job.is_terminal:
            logger.warning("Ignoring failure for job %s, already %s", job_id, job.status)
            return False
        job.status = JobStatus.FAILED
        job.percent = 100
        job.error = reason
        job.updated_at = datetime.now(timezone.utc)
        logger.warning("Job %s failed: %s", job_id, reason or "unknown error")
        return True

    def get(self, job_id: str) -> GenerationJob:
        """Return a read-only snapshot of the job."""
        return replace(self._require(job_id))

    def purge_expired(self, now: datetime | None = None) -> int:
        """Drop terminal jobs whose last update is older than the TTL."""
        if self._ttl is None:
            return 0
        cutoff = (now or datetime.now(timezone.utc)) - self._ttl
        expired = [
            job_id
            for job_id, job in self._jobs.items()
            if job.is_terminal and job.updated_at < cutoff
        ]
        for job_id in expired:
            del self._jobs[job_id]
        if expired:
            logger.info("Evicted %d expired jobs", len(expired))
        return len(expired)

    def _require(self, job_id: str) -> GenerationJob:
        job = self._jobs.get(job_id)
        if job is None:
            raise UnknownJobError(job_id)
        return job
