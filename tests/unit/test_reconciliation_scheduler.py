"""Tests for the periodic reconciliation scheduler."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from src.services.booking.reconciliation_scheduler import ReconciliationScheduler
from src.services.booking.results import ProcessingSummary


@pytest.fixture
def processor():
    processor = MagicMock()
    processor.process_pending = AsyncMock(return_value=ProcessingSummary(total=1, success=1))
    return processor


class TestRunOnce:
    @pytest.mark.asyncio
    async def test_records_summary(self, processor):
        scheduler = ReconciliationScheduler(processor, interval_seconds=60)
        summary = await scheduler.run_once()
        assert summary.success == 1
        assert scheduler.last_summary is summary
        assert scheduler.cycles == 1

    @pytest.mark.asyncio
    async def test_errors_are_swallowed(self, processor):
        processor.process_pending.side_effect = RuntimeError("boom")
        scheduler = ReconciliationScheduler(processor, interval_seconds=60)
        assert await scheduler.run_once() is None
        assert scheduler.cycles == 1


class TestRun:
    @pytest.mark.asyncio
    async def test_stops_on_shutdown(self, processor):
        shutdown = asyncio.Event()
        scheduler = ReconciliationScheduler(processor, interval_seconds=3600, shutdown_event=shutdown)

        task = asyncio.create_task(scheduler.run())
        await asyncio.sleep(0.01)
        scheduler.stop()
        await asyncio.wait_for(task, timeout=1)

        assert processor.process_pending.await_count == 1

    @pytest.mark.asyncio
    async def test_trigger_wakes_loop_early(self, processor):
        scheduler = ReconciliationScheduler(processor, interval_seconds=3600)

        task = asyncio.create_task(scheduler.run())
        await asyncio.sleep(0.01)
        scheduler.trigger()
        await asyncio.sleep(0.01)
        scheduler.stop()
        await asyncio.wait_for(task, timeout=1)

        assert processor.process_pending.await_count == 2

    @pytest.mark.asyncio
    async def test_error_does_not_stop_loop(self, processor):
        processor.process_pending.side_effect = [RuntimeError("boom"), ProcessingSummary()]
        scheduler = ReconciliationScheduler(processor, interval_seconds=0.01)

        task = asyncio.create_task(scheduler.run())
        await asyncio.sleep(0.05)
        scheduler.stop()
        await asyncio.wait_for(task, timeout=1)

        assert scheduler.cycles >= 2

    @pytest.mark.asyncio
    async def test_already_stopped(self, processor):
        shutdown = asyncio.Event()
        shutdown.set()
        scheduler = ReconciliationScheduler(processor, shutdown_event=shutdown)
        await scheduler.run()
        processor.process_pending.assert_not_awaited()
