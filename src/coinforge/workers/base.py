"""Base worker interface for tracked background jobs."""

import logging
from abc import ABC, abstractmethod
from typing import Any

from coinforge.logging_config import bind_job_context
from coinforge.models.enums import JobStatus
from coinforge.services.job_tracker import JobTracker

logger = logging.getLogger(__name__)


class BaseWorker(ABC):
    """Abstract base class for workers whose state lives in the JobTracker."""

    def __init__(self, tracker: JobTracker):
        self.tracker = tracker

    @abstractmethod
    async def process(self, job_id: str, payload: Any) -> str:
        """Run the job and return its artifact."""
        ...

    async def on_complete(self, job_id: str, payload: Any, artifact: str) -> None:
        """Hook run after the job is marked done. Failures here do not fail the job."""
        return None

    async def execute(self, job_id: str, payload: Any) -> JobStatus:
        """Execute the full job lifecycle: running -> process -> done/failed."""
        bind_job_context(job_id, getattr(payload, "wallet_address", None))

        try:
            artifact = await self.process(job_id, payload)
        except Exception as exc:
            logger.exception("Job %s failed during processing", job_id)
            self.tracker.fail(job_id, str(exc) or exc.__class__.__name__)
            return JobStatus.FAILED

        self.tracker.complete(job_id, artifact)

        try:
            await self.on_complete(job_id, payload, artifact)
        except Exception:
            # The tracker still serves the artifact; only the durable copy is missing.
            logger.exception("Job %s completed but its result could not be persisted", job_id)

        return JobStatus.DONE
