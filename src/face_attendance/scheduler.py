"""Fixed-interval scheduler for recognition cycles."""

import asyncio
import logging
import math
from typing import Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)

CycleCallback = Callable[[int], Awaitable[None]]


class CycleScheduler:
    """Runs a cycle coroutine every `interval` seconds, one at a time.

    Ticks are aligned to the start time. A tick that comes due while a
    cycle is still running is skipped, never queued or run concurrently.
    A cycle that raises is logged and the schedule carries on.
    """

    def __init__(self, cycle: CycleCallback, interval: float = 1.0):
        """Initialize scheduler.

        Args:
            cycle: Coroutine function called with the cycle number
            interval: Seconds between ticks
        """
        if interval <= 0:
            raise ValueError(f"interval must be positive, got {interval}")

        self._cycle = cycle
        self.interval = interval

        self._task: Optional[asyncio.Task] = None
        self._stop_event: Optional[asyncio.Event] = None
        self._in_flight = False
        self._cycle_number = 0

        self._stats = {
            "cycles_run": 0,
            "cycles_skipped": 0,
            "cycles_failed": 0,
        }

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    @property
    def in_flight(self) -> bool:
        return self._in_flight

    @property
    def stats(self) -> Dict[str, int]:
        return dict(self._stats)

    def start(self) -> None:
        """Start ticking on the running event loop."""
        if self.is_running:
            return

        self._stop_event = asyncio.Event()
        self._task = asyncio.create_task(self._run())
        logger.info(f"Scheduler started ({self.interval * 1000:.0f} ms interval)")

    async def stop(self) -> None:
        """Stop ticking. An in-flight cycle is allowed to finish."""
        if self._task is None:
            return

        self._stop_event.set()
        await self._task
        self._task = None
        logger.info(f"Scheduler stopped: {self._stats}")

    async def wait(self) -> None:
        """Wait until the scheduler stops."""
        if self._task is not None:
            await asyncio.shield(self._task)

    async def tick(self) -> bool:
        """Run one cycle unless another is in flight.

        Returns:
            True if a cycle ran, False if the tick was skipped
        """
        if self._in_flight:
            self._stats["cycles_skipped"] += 1
            logger.debug("Skipping tick, previous cycle still in flight")
            return False

        self._in_flight = True
        self._cycle_number += 1
        try:
            await self._cycle(self._cycle_number)
            self._stats["cycles_run"] += 1
        except Exception:
            self._stats["cycles_failed"] += 1
            logger.exception(f"Cycle {self._cycle_number} failed")
        finally:
            self._in_flight = False

        return True

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time()

        while not self._stop_event.is_set():
            delay = next_tick - loop.time()
            if delay > 0:
                try:
                    await asyncio.wait_for(self._stop_event.wait(), timeout=delay)
                    break
                except asyncio.TimeoutError:
                    pass

            await self.tick()

            # Drop ticks that came due while the cycle was running
            overdue = loop.time() - next_tick
            missed = max(0, math.floor(overdue / self.interval))
            if missed:
                self._stats["cycles_skipped"] += missed
                logger.debug(f"Cycle overran interval, skipped {missed} tick(s)")
            next_tick += (missed + 1) * self.interval
