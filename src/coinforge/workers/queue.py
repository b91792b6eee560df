"""Generation launcher: validate, debit, register the job, run it in the background."""

from __future__ import annotations

import asyncio
import logging
from decimal import Decimal

from coinforge.errors.exceptions import (
    InsufficientCreditsError,
    UnknownAccountError,
    ValidationError,
)
from coinforge.models.enums import JobStatus
from coinforge.models.job import UserInputs
from coinforge.repositories.account_repo import AccountRepository
from coinforge.services.job_tracker import JobTracker
from coinforge.workers.base import BaseWorker
from coinforge.workers.generation_pipeline import GenerationRequest

logger = logging.getLogger(__name__)


class GenerationLauncher:
    """Starts generation jobs. The caller gets a job id before any provider call is made.

    The cost is debited before the job exists and refunded if the job ends
    failed, so a failed generation never costs credits.
    """

    def __init__(self, session_factory, tracker: JobTracker, pipeline: BaseWorker, cost: Decimal):
        self.session_factory = session_factory
        self.tracker = tracker
        self.pipeline = pipeline
        self.cost = Decimal(cost)
        self._tasks: set[asyncio.Task] = set()

    @property
    def active_count(self) -> int:
        return len(self._tasks)

    async def start(self, wallet_address: str, inputs: UserInputs) -> str:
        """Validate inputs, debit the account and spawn the pipeline. Returns the job id."""
        missing = inputs.missing_fields()
        if missing:
            raise ValidationError(
                f"Missing required fields: {', '.join(missing)}", {"missing": missing}
            )

        async with self.session_factory() as session:
            repo = AccountRepository(session)
            account = await repo.get_by_wallet(wallet_address)
            if account is None:
                raise UnknownAccountError(wallet_address)
            account_id = account.account_id

            if self.cost > 0:
                if not await repo.try_debit(account_id, self.cost):
                    await session.rollback()
                    raise InsufficientCreditsError(wallet_address, self.cost)
                await session.commit()

        job_id = self.tracker.create(account_id)
        request = GenerationRequest(account_id=account_id, wallet_address=wallet_address, inputs=inputs)

        task = asyncio.create_task(self._run(job_id, request), name=f"generation-{job_id}")
        self._tasks.add(task)
        task.add_done_callback(lambda t, job_id=job_id: self._on_task_done(job_id, t))

        logger.info("Started generation job %s for %s (cost=%s)", job_id, wallet_address, self.cost)
        return job_id

    async def _run(self, job_id: str, request: GenerationRequest) -> None:
        try:
            await self.pipeline.execute(job_id, request)
        except asyncio.CancelledError:
            self.tracker.fail(job_id, "cancelled")
            raise
        except Exception as exc:
            self.tracker.fail(job_id, str(exc) or exc.__class__.__name__)
            raise
        finally:
            if job_id in self.tracker and self.tracker.get(job_id).status == JobStatus.FAILED:
                await self._refund(job_id, request)

    async def _refund(self, job_id: str, request: GenerationRequest) -> None:
        if self.cost <= 0:
            return
        try:
            async with self.session_factory() as session:
                await AccountRepository(session).add_credits(request.account_id, self.cost)
                await session.commit()
        except Exception:
            logger.exception(
                "Refund of %s credits for failed job %s (%s) could not be applied",
                self.cost, job_id, request.wallet_address,
            )
            return
        logger.info("Refunded %s credits to %s for failed job %s", self.cost, request.wallet_address, job_id)

    def _on_task_done(self, job_id: str, task: asyncio.Task) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Generation task for job %s raised: %s", job_id, exc, exc_info=exc)

    async def drain(self) -> None:
        """Wait for every running job to finish."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)

    async def shutdown(self) -> None:
        """Cancel running jobs; their charges are refunded."""
        tasks = list(self._tasks)
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
            logger.info("Cancelled %d running generation jobs", len(tasks))
