"""Fixed-period scheduler driving export cycles"""
import asyncio
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Optional
from logging_config import get_logger, log_error

logger = get_logger(__name__)


class ExportScheduler:
    """Runs a blocking cycle once per tick of a fixed-period clock

    Cycles never overlap. When a cycle outlasts the interval, one overdue
    tick fires as soon as it finishes and any further missed ticks are
    dropped; the period stays anchored to the start time.
    """

    def __init__(self, interval: float, cycle: Callable[[], Any]):
        if interval <= 0:
            raise ValueError("interval must be positive")
        self.interval = interval
        self._cycle = cycle
        # One worker keeps cycles sequential off the event loop thread
        self._executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="export_cycle")

    async def run(self, stop: Optional[asyncio.Event] = None, max_cycles: Optional[int] = None) -> int:
        """Tick until stop is set, max_cycles have run, or the task is cancelled

        Returns the number of cycles executed.
        """
        loop = asyncio.get_running_loop()
        next_tick = loop.time() + self.interval
        cycles = 0

        logger.info("Export scheduler started", interval_seconds=self.interval)
        while max_cycles is None or cycles < max_cycles:
            delay = next_tick - loop.time()
            if delay > 0 and await self._wait(stop, delay):
                break
            if stop is not None and stop.is_set():
                break

            try:
                await self.run_once()
            except Exception as e:
                log_error(logger, e, {"component": "export_scheduler", "cycle": cycles + 1})
            cycles += 1

            next_tick += self.interval
            overdue = loop.time() - next_tick
            if overdue > 0:
                skipped = int(overdue // self.interval)
                if skipped:
                    logger.warning("Export cycle overran interval, dropping ticks",
                                   skipped_ticks=skipped, interval_seconds=self.interval)
                next_tick += skipped * self.interval

        logger.info("Export scheduler stopped", cycles=cycles)
        return cycles

    async def run_once(self) -> Any:
        """Run a single cycle on the worker thread, after any cycle in progress"""
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(self._executor, self._cycle)

    async def _wait(self, stop: Optional[asyncio.Event], delay: float) -> bool:
        """Sleep until the next tick; True if stop was set meanwhile"""
        if stop is None:
            await asyncio.sleep(delay)
            return False
        try:
            await asyncio.wait_for(stop.wait(), timeout=delay)
        except asyncio.TimeoutError:
            return False
        return True

    def shutdown(self) -> None:
        """Release the cycle worker thread"""
        self._executor.shutdown(wait=True)
