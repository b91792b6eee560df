"""Tests for the background deposit scheduler."""

import asyncio
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from coinforge.services.deposit_reconciler import ReconcileSummary
from coinforge.services.job_tracker import JobTracker
from coinforge.workers import scheduler


def _app(reconciler=None, redis=None, tracker=None):
    return SimpleNamespace(
        state=SimpleNamespace(deposit_reconciler=reconciler, redis=redis, job_tracker=tracker)
    )


@pytest.mark.asyncio
async def test_tick_reconciles_all_accounts():
    reconciler = AsyncMock()
    reconciler.reconcile_all.return_value = ReconcileSummary(accounts_scanned=2)

    await scheduler._tick(_app(reconciler), interval=60, scan_deposits=True)

    reconciler.reconcile_all.assert_awaited_once()


@pytest.mark.asyncio
async def test_tick_skips_scan_when_disabled():
    reconciler = AsyncMock()
    tracker = JobTracker(ttl_seconds=1)

    await scheduler._tick(_app(reconciler, tracker=tracker), interval=60, scan_deposits=False)

    reconciler.reconcile_all.assert_not_awaited()


@pytest.mark.asyncio
async def test_tick_respects_redis_lock():
    reconciler = AsyncMock()
    redis = AsyncMock()
    redis.set.return_value = None  # lock held by another instance

    await scheduler._tick(_app(reconciler, redis=redis), interval=60, scan_deposits=True)

    redis.set.assert_awaited_once_with("coinforge:scheduler:deposits", "1", nx=True, ex=59)
    reconciler.reconcile_all.assert_not_awaited()


@pytest.mark.asyncio
async def test_tick_evicts_expired_jobs():
    from datetime import datetime, timedelta, timezone

    tracker = JobTracker(ttl_seconds=1)
    job_id = tracker.create()
    tracker.complete(job_id, "doc")
    tracker._jobs[job_id].updated_at = datetime.now(timezone.utc) - timedelta(seconds=5)

    await scheduler._tick(_app(tracker=tracker), interval=60, scan_deposits=True)

    assert job_id not in tracker


@pytest.mark.asyncio
async def test_scheduler_survives_errors_and_stops_on_cancel():
    reconciler = AsyncMock()
    reconciler.reconcile_all.side_effect = [RuntimeError("db down"), ReconcileSummary(), ReconcileSummary()]

    task = asyncio.create_task(scheduler.run_scheduler(_app(reconciler), interval=0.01))
    for _ in range(100):
        await asyncio.sleep(0.01)
        if reconciler.reconcile_all.await_count >= 2:
            break
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)

    assert reconciler.reconcile_all.await_count >= 2
    assert task.done()
