"""
Unit tests for nestcam.infrastructure.streaming.multicast_channel
"""
import asyncio
from unittest.mock import patch

import pytest

from nestcam.infrastructure.streaming import ChangeFilter, MulticastChannel, PollScheduler

PERIOD_MS = 15


class _ScriptedSource:
    """Returns the scripted values in order, repeating the last one."""

    name = "scripted"

    def __init__(self, values):
        self.values = list(values)
        self.calls = 0

    async def execute(self):
        self.calls += 1
        value = self.values[0] if len(self.values) == 1 else self.values.pop(0)
        if isinstance(value, Exception):
            raise value
        return value


def _channel(values=(1,), change_filter=None):
    source = _ScriptedSource(values)
    return MulticastChannel(PollScheduler(source, PERIOD_MS), change_filter=change_filter), source


def _wait(periods: float):
    return asyncio.sleep(PERIOD_MS * periods / 1000)


class TestReferenceCounting:
    """Polling starts with the first subscriber and stops with the last"""

    @pytest.mark.asyncio
    async def test_two_subscribers_share_one_loop(self):
        channel, _ = _channel()
        first, second = [], []

        with patch.object(channel.scheduler, "start", wraps=channel.scheduler.start) as start:
            a = channel.subscribe(first.append)
            b = channel.subscribe(second.append)
            await _wait(3.5)
            a.unsubscribe()
            b.unsubscribe()

        assert start.call_count == 1
        assert first and first == second

    @pytest.mark.asyncio
    async def test_last_unsubscribe_stops_polling(self):
        channel, source = _channel()
        subscription = channel.subscribe(lambda value: None)
        await _wait(2.5)
        assert channel.is_active

        subscription.unsubscribe()
        calls_after_stop = source.calls
        await _wait(4)

        assert not channel.is_active
        assert channel.subscriber_count == 0
        assert source.calls == calls_after_stop

    @pytest.mark.asyncio
    async def test_polling_continues_while_one_subscriber_remains(self):
        channel, source = _channel()
        a = channel.subscribe(lambda value: None)
        remaining = []
        channel.subscribe(remaining.append)

        a.unsubscribe()
        await _wait(3.5)

        assert channel.is_active
        assert remaining
        channel.close()

    @pytest.mark.asyncio
    async def test_unsubscribe_is_idempotent(self):
        channel, _ = _channel()
        subscription = channel.subscribe(lambda value: None)

        subscription.unsubscribe()
        subscription.unsubscribe()

        assert subscription.closed
        assert channel.subscriber_count == 0

    @pytest.mark.asyncio
    async def test_resubscribe_restarts_polling(self):
        channel, _ = _channel()
        channel.subscribe(lambda value: None).unsubscribe()

        received = []
        channel.subscribe(received.append)
        await _wait(2.5)
        channel.close()

        assert received


class TestFanOut:
    """Results and errors reach every subscriber"""

    @pytest.mark.asyncio
    async def test_error_reaches_all_without_unsubscribing(self):
        boom = RuntimeError("network down")
        channel, _ = _channel(values=[boom, 7])
        errors_a, errors_b, values = [], [], []

        channel.subscribe(values.append, errors_a.append)
        channel.subscribe(lambda value: None, errors_b.append)
        await _wait(3.5)
        channel.close()

        assert errors_a == [boom]
        assert errors_b == [boom]
        assert 7 in values

    @pytest.mark.asyncio
    async def test_raising_callback_does_not_affect_others(self):
        channel, _ = _channel()
        received = []

        def broken(value):
            raise ValueError("subscriber bug")

        channel.subscribe(broken)
        channel.subscribe(received.append)
        await _wait(2.5)
        channel.close()

        assert received

    @pytest.mark.asyncio
    async def test_coroutine_callbacks_are_awaited(self):
        channel, _ = _channel()
        received = []

        async def on_next(value):
            await asyncio.sleep(0)
            received.append(value)

        channel.subscribe(on_next)
        await _wait(2.5)
        channel.close()
        await asyncio.sleep(0.01)

        assert received

    @pytest.mark.asyncio
    async def test_close_completes_subscribers(self):
        channel, _ = _channel()
        completed = []
        subscription = channel.subscribe(lambda value: None, on_complete=lambda: completed.append(True))

        channel.close()

        assert completed == [True]
        assert subscription.closed
        assert not channel.is_active


class TestChangeFilterIntegration:
    """A channel with a ChangeFilter forwards only length changes"""

    @pytest.mark.asyncio
    async def test_repeated_lists_emitted_once(self):
        channel, _ = _channel(values=[["a"], ["a"], ["a", "b"]], change_filter=ChangeFilter())
        received = []

        channel.subscribe(received.append)
        await _wait(5.5)
        channel.close()

        assert received == ["a", "b"]

    @pytest.mark.asyncio
    async def test_non_list_result_goes_to_on_error(self):
        channel, _ = _channel(values=[{"error": "nope"}], change_filter=ChangeFilter())
        errors = []

        channel.subscribe(lambda value: None, errors.append)
        await _wait(2.5)
        channel.close()

        assert errors
        assert isinstance(errors[0], TypeError)
