"""Background scheduler: periodic deposit reconciliation and job eviction."""

import asyncio
import logging

logger = logging.getLogger(__name__)

_LOCK_KEY = "coinforge:scheduler:deposits"


async def _tick(app, interval: int, scan_deposits: bool) -> None:
    tracker = getattr(app.state, "job_tracker", None)
    if tracker is not None:
        tracker.purge_expired()

    reconciler = getattr(app.state, "deposit_reconciler", None)
    if not scan_deposits or reconciler is None:
        return

    # Distributed lock via Redis SET NX so only one instance scans per interval
    redis = getattr(app.state, "redis", None)
    if redis:
        locked = await redis.set(_LOCK_KEY, "1", nx=True, ex=max(int(interval) - 1, 1))
        if not locked:
            logger.debug("Deposit scan already locked by another instance")
            return

    summary = await reconciler.reconcile_all()
    if summary.credits_added:
        logger.info(
            "Scheduled deposit scan credited %s across %d accounts",
            summary.credits_added, summary.accounts_credited,
        )


async def run_scheduler(app, interval: int = 60, scan_deposits: bool = True) -> None:
    """Background task that periodically reconciles deposits for every account."""
    logger.info("Deposit scheduler started (poll_interval=%ds)", interval)

    while True:
        try:
            await asyncio.sleep(interval)
            await _tick(app, interval, scan_deposits)
        except asyncio.CancelledError:
            logger.info("Deposit scheduler stopped")
            break
        except Exception as exc:
            logger.exception("Scheduler error: %s", exc)
            # Continue running despite errors
