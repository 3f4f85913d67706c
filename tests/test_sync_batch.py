import asyncio

import pytest

import app.batch.sync_batch as sync_batch
from app.batch.sync_batch import run_sync_blocking, start_sync_scheduler
from catalog.domain.sync_log import SyncResult
from config.settings import SyncSettings


def test_scheduler_keeps_running_after_a_failed_iteration(monkeypatch):
    calls = []

    async def flaky_run(settings):
        calls.append(settings)
        if len(calls) == 1:
            raise RuntimeError("db down")
        if len(calls) == 2:
            return SyncResult(success=True, run_id=1, videos_synced=3)
        raise asyncio.CancelledError()

    monkeypatch.setattr(sync_batch, "run_sync_once", flaky_run)

    with pytest.raises(asyncio.CancelledError):
        asyncio.run(start_sync_scheduler(SyncSettings(batch_enabled=True, interval_minutes=0)))

    assert len(calls) == 3


def test_scheduler_disabled_does_nothing(monkeypatch):
    async def fail(settings):
        raise AssertionError("should not run")

    monkeypatch.setattr(sync_batch, "run_sync_once", fail)
    assert asyncio.run(start_sync_scheduler(SyncSettings(batch_enabled=False))) is None


def test_run_is_skipped_while_previous_worker_is_alive(monkeypatch):
    def unreachable():
        raise AssertionError("repository should not be opened")

    monkeypatch.setattr(sync_batch, "CatalogRepositoryImpl", unreachable)
    assert sync_batch._run_lock.acquire(blocking=False)
    try:
        result = run_sync_blocking(SyncSettings())
    finally:
        sync_batch._run_lock.release()

    assert result.success is False
    assert result.run_id is None
    assert result.message == "Previous sync is still running"
    assert not sync_batch._run_lock.locked()
