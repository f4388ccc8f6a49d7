"""Tests for the fixed-interval cycle scheduler."""

import asyncio

import pytest

from face_attendance.scheduler import CycleScheduler


class TestCycleScheduler:
    """Test cases for CycleScheduler."""

    def test_rejects_non_positive_interval(self):
        async def cycle(number):
            pass

        with pytest.raises(ValueError):
            CycleScheduler(cycle, interval=0)

    @pytest.mark.asyncio
    async def test_runs_cycles_in_order(self):
        seen = []

        async def cycle(number):
            seen.append(number)

        scheduler = CycleScheduler(cycle, interval=0.01)
        scheduler.start()
        await asyncio.sleep(0.1)
        await scheduler.stop()

        assert len(seen) >= 3
        assert seen == list(range(1, len(seen) + 1))
        assert scheduler.stats["cycles_run"] == len(seen)
        assert not scheduler.is_running

    @pytest.mark.asyncio
    async def test_tick_skipped_while_cycle_in_flight(self):
        release = asyncio.Event()
        started = asyncio.Event()

        async def cycle(number):
            started.set()
            await release.wait()

        scheduler = CycleScheduler(cycle, interval=1.0)
        first = asyncio.create_task(scheduler.tick())
        await started.wait()

        assert scheduler.in_flight
        assert await scheduler.tick() is False

        release.set()
        assert await first is True
        assert scheduler.stats["cycles_skipped"] == 1
        assert scheduler.stats["cycles_run"] == 1

    @pytest.mark.asyncio
    async def test_cycles_never_overlap(self):
        active = 0
        max_active = 0

        async def cycle(number):
            nonlocal active, max_active
            active += 1
            max_active = max(max_active, active)
            await asyncio.sleep(0.035)
            active -= 1

        scheduler = CycleScheduler(cycle, interval=0.01)
        scheduler.start()
        await asyncio.sleep(0.2)
        await scheduler.stop()

        assert max_active == 1
        assert scheduler.stats["cycles_run"] >= 2
        # Each overrun of ~3.5 intervals drops the ticks it covered
        assert scheduler.stats["cycles_skipped"] >= scheduler.stats["cycles_run"] - 1

    @pytest.mark.asyncio
    async def test_failing_cycle_does_not_stop_schedule(self):
        seen = []

        async def cycle(number):
            seen.append(number)
            if number == 1:
                raise RuntimeError("detector exploded")

        scheduler = CycleScheduler(cycle, interval=0.01)
        scheduler.start()
        await asyncio.sleep(0.08)
        await scheduler.stop()

        assert len(seen) >= 2
        assert scheduler.stats["cycles_failed"] == 1

    @pytest.mark.asyncio
    async def test_stop_waits_for_in_flight_cycle(self):
        finished = []
        started = asyncio.Event()

        async def cycle(number):
            started.set()
            await asyncio.sleep(0.05)
            finished.append(number)

        scheduler = CycleScheduler(cycle, interval=10.0)
        scheduler.start()
        await started.wait()
        await scheduler.stop()

        assert finished == [1]
        assert not scheduler.in_flight

    @pytest.mark.asyncio
    async def test_stop_wakes_idle_scheduler(self):
        async def cycle(number):
            pass

        scheduler = CycleScheduler(cycle, interval=60.0)
        scheduler.start()
        await asyncio.sleep(0.01)

        await asyncio.wait_for(scheduler.stop(), timeout=1.0)

        assert scheduler.stats["cycles_run"] == 1

    @pytest.mark.asyncio
    async def test_stop_before_start_is_noop(self):
        async def cycle(number):
            pass

        await CycleScheduler(cycle).stop()
