"""
DIGEST SCHEDULER

Fixed-period ticks for the digest cycle:
- First tick fires immediately, then every `interval_seconds`
- Each cycle runs as its own task; the period is measured from tick start
- Overlap guard: a tick that finds the previous cycle still running is
  skipped and counted, so cycles never run concurrently
"""

import asyncio
import logging
from datetime import datetime
from typing import Awaitable, Callable, Dict, Optional

logger = logging.getLogger(__name__)

SleepFunc = Callable[[float], Awaitable[None]]


class DigestScheduler:
    """
    Periodic runner for one async callback.
    """

    def __init__(self, interval_seconds: float, sleep: SleepFunc = asyncio.sleep):
        """
        Args:
            interval_seconds: Period between tick starts
            sleep: Awaitable sleep (tests inject a fake)
        """
        if interval_seconds <= 0:
            raise ValueError(f"interval_seconds must be positive, got {interval_seconds}")
        self.interval_seconds = interval_seconds
        self._sleep = sleep
        self._running = False
        self._current: Optional[asyncio.Task] = None

        # Stats
        self.ticks = 0
        self.ticks_run = 0
        self.ticks_skipped = 0
        self.cycles_failed = 0
        self.last_tick_time: Optional[datetime] = None

    @property
    def running(self) -> bool:
        return self._running

    async def run(self, callback: Callable[[], Awaitable], max_ticks: Optional[int] = None):
        """
        Tick until stop() is called (or max_ticks ticks have fired).

        The in-flight cycle, if any, is awaited before returning.
        """
        self._running = True
        logger.info(f"[SCHEDULER] Started (every {self.interval_seconds:.0f}s)")
        try:
            while self._running:
                self._tick(callback)

                if max_ticks is not None and self.ticks >= max_ticks:
                    break

                await self._sleep(self.interval_seconds)
        finally:
            self._running = False
            if self._current is not None and not self._current.done():
                logger.info("[SCHEDULER] Waiting for in-flight cycle to finish")
                await self._current
            logger.info(
                f"[SCHEDULER] Stopped after {self.ticks} ticks "
                f"({self.ticks_run} run, {self.ticks_skipped} skipped)"
            )

    def stop(self):
        """End the loop after the current sleep."""
        self._running = False

    def _tick(self, callback: Callable[[], Awaitable]):
        self.ticks += 1
        self.last_tick_time = datetime.now()

        if self._current is not None and not self._current.done():
            self.ticks_skipped += 1
            logger.warning(f"[SCHEDULER] Tick {self.ticks} skipped: previous cycle still running")
            return

        self.ticks_run += 1
        self._current = asyncio.ensure_future(self._guarded(callback))

    async def _guarded(self, callback: Callable[[], Awaitable]):
        try:
            await callback()
        except asyncio.CancelledError:
            raise
        except Exception as e:
            self.cycles_failed += 1
            logger.exception(f"[SCHEDULER] Cycle error: {e}")

    def get_stats(self) -> Dict:
        return {
            'ticks': self.ticks,
            'ticks_run': self.ticks_run,
            'ticks_skipped': self.ticks_skipped,
            'cycles_failed': self.cycles_failed,
            'last_tick_time': self.last_tick_time.isoformat() if self.last_tick_time else None,
            'interval_seconds': self.interval_seconds,
        }
