"""
Fixed-delay pacing between successive upstream calls.
"""
import asyncio
from typing import Awaitable, Callable

SleepFunc = Callable[[float], Awaitable[None]]


class PacingPolicy:
    """
    Enforces `delay_seconds` between consecutive calls.

    The first wait() after construction (or reset()) returns immediately,
    every later one sleeps for the full delay.
    """

    def __init__(self, delay_seconds: float, sleep: SleepFunc = asyncio.sleep):
        if delay_seconds < 0:
            raise ValueError(f"delay_seconds must be >= 0, got {delay_seconds}")
        self.delay_seconds = delay_seconds
        self._sleep = sleep
        self._first = True
        self.waits = 0

    def reset(self):
        self._first = True

    async def wait(self):
        if self._first:
            self._first = False
            return
        if self.delay_seconds > 0:
            self.waits += 1
            await self._sleep(self.delay_seconds)
