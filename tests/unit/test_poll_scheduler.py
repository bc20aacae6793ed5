"""
Unit tests for nestcam.infrastructure.streaming.poll_scheduler
"""
import asyncio
import time

import pytest

from nestcam.infrastructure.streaming import PollScheduler

PERIOD_MS = 20


class _CountingSource:
    """FetchSource stand-in returning the call number."""

    name = "counting"

    def __init__(self, delay: float = 0.0, fail_on=()):
        self.calls = 0
        self.delay = delay
        self.fail_on = set(fail_on)

    async def execute(self):
        self.calls += 1
        call = self.calls
        if self.delay:
            await asyncio.sleep(self.delay)
        if call in self.fail_on:
            raise RuntimeError(f"tick {call} failed")
        return call


class TestPollScheduler:
    """Tests for PollScheduler"""

    def test_period_must_be_positive(self):
        with pytest.raises(ValueError):
            PollScheduler(_CountingSource(), 0)

    @pytest.mark.asyncio
    async def test_emits_results_every_period(self):
        results, errors = [], []
        scheduler = PollScheduler(_CountingSource(), PERIOD_MS)

        scheduler.start(results.append, errors.append)
        await asyncio.sleep(PERIOD_MS * 5.5 / 1000)
        scheduler.stop()

        assert len(results) >= 3
        assert results[:3] == [1, 2, 3]
        assert errors == []
        assert scheduler.tick_count >= 3

    @pytest.mark.asyncio
    async def test_blocked_loop_does_not_replay_missed_ticks(self):
        source = _CountingSource()
        scheduler = PollScheduler(source, PERIOD_MS)

        scheduler.start(lambda r: None, lambda e: None)
        await asyncio.sleep(PERIOD_MS * 1.5 / 1000)
        calls_before = source.calls
        ticks_before = scheduler.tick_count

        # Block the event loop for ten periods
        time.sleep(PERIOD_MS * 10 / 1000)
        for _ in range(10):
            await asyncio.sleep(0)
        scheduler.stop()

        assert calls_before >= 1
        assert scheduler.tick_count - ticks_before <= 1
        assert source.calls - calls_before <= 1

    @pytest.mark.asyncio
    async def test_first_tick_after_one_period(self):
        results = []
        scheduler = PollScheduler(_CountingSource(), 200)

        scheduler.start(results.append, lambda e: None)
        await asyncio.sleep(0.05)
        scheduler.stop()

        assert results == []

    @pytest.mark.asyncio
    async def test_error_does_not_end_sequence(self):
        results, errors = [], []
        scheduler = PollScheduler(_CountingSource(fail_on={1}), PERIOD_MS)

        scheduler.start(results.append, errors.append)
        await asyncio.sleep(PERIOD_MS * 4.5 / 1000)
        scheduler.stop()

        assert len(errors) == 1
        assert str(errors[0]) == "tick 1 failed"
        assert 2 in results

    @pytest.mark.asyncio
    async def test_slow_fetches_overlap(self):
        source = _CountingSource(delay=PERIOD_MS * 3 / 1000)
        scheduler = PollScheduler(source, PERIOD_MS)

        scheduler.start(lambda r: None, lambda e: None)
        await asyncio.sleep(PERIOD_MS * 3.5 / 1000)

        # Ticks keep starting on schedule while earlier fetches are still running
        assert source.calls >= 3
        assert scheduler.in_flight >= 2
        scheduler.stop()

    @pytest.mark.asyncio
    async def test_stop_drops_in_flight_results(self):
        results = []
        source = _CountingSource(delay=0.05)
        scheduler = PollScheduler(source, PERIOD_MS)

        scheduler.start(results.append, results.append)
        await asyncio.sleep(PERIOD_MS * 1.5 / 1000)
        scheduler.stop()
        calls_at_stop = source.calls
        await asyncio.sleep(0.1)

        assert calls_at_stop >= 1
        assert source.calls == calls_at_stop
        assert results == []
        assert scheduler.in_flight == 0

    @pytest.mark.asyncio
    async def test_restart_after_stop(self):
        results = []
        scheduler = PollScheduler(_CountingSource(), PERIOD_MS)

        scheduler.start(results.append, lambda e: None)
        await asyncio.sleep(PERIOD_MS * 2.5 / 1000)
        scheduler.stop()
        assert not scheduler.is_running

        scheduler.start(results.append, lambda e: None)
        assert scheduler.is_running
        count_before = len(results)
        await asyncio.sleep(PERIOD_MS * 2.5 / 1000)
        scheduler.stop()

        assert len(results) > count_before

    @pytest.mark.asyncio
    async def test_double_start_raises(self):
        scheduler = PollScheduler(_CountingSource(), PERIOD_MS)
        scheduler.start(lambda r: None, lambda e: None)
        try:
            with pytest.raises(RuntimeError):
                scheduler.start(lambda r: None, lambda e: None)
        finally:
            scheduler.stop()

    def test_stop_when_not_running_is_noop(self):
        scheduler = PollScheduler(_CountingSource(), PERIOD_MS)
        scheduler.stop()
        assert not scheduler.is_running
