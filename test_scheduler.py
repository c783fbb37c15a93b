import asyncio
import unittest

from digest.scheduler import DigestScheduler


class FakeSleep:
    """Records requested delays and yields to the loop once."""

    def __init__(self, log=None):
        self.delays = []
        self.log = log if log is not None else []
        self.on_sleep = None

    async def __call__(self, seconds):
        self.delays.append(seconds)
        if self.on_sleep is not None:
            self.on_sleep()
        self.log.append("sleep")
        await asyncio.sleep(0)


class TestDigestScheduler(unittest.IsolatedAsyncioTestCase):

    async def test_first_tick_immediate_then_fixed_period(self):
        print("\nTesting tick timing...")
        log = []
        sleep = FakeSleep(log)
        scheduler = DigestScheduler(600, sleep=sleep)
        sleep.on_sleep = lambda: log.append(f"ticks={scheduler.ticks_run}")

        async def cycle():
            log.append("cycle")

        await scheduler.run(cycle, max_ticks=3)

        # tick 1 is launched before the first sleep
        self.assertEqual(log[:2], ["ticks=1", "sleep"])
        self.assertEqual(sleep.delays, [600, 600])
        self.assertEqual(log.count("cycle"), 3)
        self.assertEqual(scheduler.ticks_run, 3)
        self.assertEqual(scheduler.ticks_skipped, 0)

    async def test_overlapping_tick_is_skipped(self):
        print("\nTesting overlap guard...")
        release = asyncio.Event()
        active = []
        max_active = []

        async def slow_cycle():
            active.append(1)
            max_active.append(len(active))
            await release.wait()
            active.pop()

        scheduler = DigestScheduler(60, sleep=FakeSleep())
        run_task = asyncio.create_task(scheduler.run(slow_cycle, max_ticks=3))

        while scheduler.ticks < 3:
            await asyncio.sleep(0)

        self.assertEqual(scheduler.ticks_run, 1)
        self.assertEqual(scheduler.ticks_skipped, 2)
        self.assertFalse(run_task.done())

        # run() waits for the in-flight cycle before returning
        release.set()
        await run_task
        self.assertEqual(max(max_active), 1)
        self.assertEqual(active, [])

    async def test_stop_ends_loop(self):
        scheduler = DigestScheduler(60, sleep=FakeSleep())
        calls = []

        async def cycle():
            calls.append(1)
            if len(calls) == 2:
                scheduler.stop()

        await scheduler.run(cycle)

        self.assertEqual(len(calls), 2)
        self.assertEqual(scheduler.ticks, 2)
        self.assertFalse(scheduler.running)

    async def test_cycle_error_does_not_stop_scheduler(self):
        scheduler = DigestScheduler(60, sleep=FakeSleep())
        calls = []

        async def failing_cycle():
            calls.append(1)
            raise RuntimeError("cycle blew up")

        await scheduler.run(failing_cycle, max_ticks=2)

        self.assertEqual(len(calls), 2)
        self.assertEqual(scheduler.cycles_failed, 2)
        self.assertEqual(scheduler.get_stats()['ticks_run'], 2)

    def test_invalid_interval(self):
        with self.assertRaises(ValueError):
            DigestScheduler(0)


if __name__ == '__main__':
    unittest.main()
