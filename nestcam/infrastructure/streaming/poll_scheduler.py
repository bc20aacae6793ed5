"""
Fixed-period polling of a FetchSource.

Tick n starts at start + n * period regardless of how long earlier fetches
take, so slow fetches overlap. Each tick runs in its own task and reports
its result or error as soon as it finishes. Slots missed while the event
loop was blocked are skipped, so at most one fetch starts per wake-up.
"""

import asyncio
import logging
from typing import Any, Callable, Optional, Set

from ..external.fetch_source import FetchSource

logger = logging.getLogger(__name__)

ResultCallback = Callable[[Any], None]
ErrorCallback = Callable[[BaseException], None]


class PollScheduler:
    """
    Runs FetchSource.execute() every period_ms milliseconds while started.

    stop() is synchronous: no further tick is scheduled and results of
    fetches still in flight are dropped when they arrive. The HTTP calls
    themselves are not cancelled. The scheduler can be started again.
    """

    def __init__(self, source: FetchSource, period_ms: int, name: Optional[str] = None) -> None:
        if period_ms <= 0:
            raise ValueError("period_ms must be positive")
        self.source = source
        self.period_ms = period_ms
        self.name = name or source.name
        self._ticker: Optional[asyncio.Task] = None
        self._in_flight: Set[asyncio.Task] = set()
        # Bumped on every start/stop; ticks from an older run are ignored
        self._generation = 0
        # Ticks started since construction, across restarts
        self.tick_count = 0

    @property
    def is_running(self) -> bool:
        return self._ticker is not None

    @property
    def in_flight(self) -> int:
        return len(self._in_flight)

    def start(self, on_result: ResultCallback, on_error: ErrorCallback) -> None:
        """
        Start ticking. Must be called from a running event loop.

        Raises:
            RuntimeError: If the scheduler is already running
        """
        if self._ticker is not None:
            raise RuntimeError(f"Poll scheduler {self.name} is already running")
        self._generation += 1
        self._ticker = asyncio.create_task(
            self._run(self._generation, on_result, on_error),
            name=f"poll-{self.name}",
        )
        logger.info(f"Started polling {self.name} every {self.period_ms} ms")

    def stop(self) -> None:
        if self._ticker is None:
            return
        self._generation += 1
        self._ticker.cancel()
        self._ticker = None
        logger.info(
            f"Stopped polling {self.name} ({len(self._in_flight)} fetch(es) still in flight)"
        )

    async def _run(self, generation: int, on_result: ResultCallback, on_error: ErrorCallback) -> None:
        loop = asyncio.get_running_loop()
        period = self.period_ms / 1000.0
        started = loop.time()
        tick = 1
        while True:
            delay = started + tick * period - loop.time()
            if delay > 0:
                await asyncio.sleep(delay)
            self.tick_count += 1
            task = asyncio.create_task(self._tick(generation, tick, on_result, on_error))
            self._in_flight.add(task)
            task.add_done_callback(self._in_flight.discard)
            # Slots missed while the loop was blocked are skipped, not replayed
            next_tick = int((loop.time() - started) // period) + 1
            if next_tick > tick + 1:
                logger.debug(f"{self.name} fell behind, skipping {next_tick - tick - 1} tick(s)")
            tick = max(tick + 1, next_tick)

    async def _tick(
        self,
        generation: int,
        tick: int,
        on_result: ResultCallback,
        on_error: ErrorCallback,
    ) -> None:
        try:
            result = await self.source.execute()
        except Exception as e:
            if generation != self._generation:
                logger.debug(f"Dropping error of {self.name} tick {tick} after stop: {e}")
                return
            logger.debug(f"{self.name} tick {tick} failed: {e}")
            on_error(e)
            return

        if generation != self._generation:
            logger.debug(f"Dropping result of {self.name} tick {tick} after stop")
            return
        on_result(result)
