"""
Shared, reference-counted poll streams.

One PollScheduler per channel, started when the first subscriber arrives
and stopped when the last one leaves. Every subscriber receives the same
results and errors; nobody triggers a poll of their own.
"""

import asyncio
import inspect
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional, Set

from .change_filter import ChangeFilter
from .poll_scheduler import PollScheduler

logger = logging.getLogger(__name__)

NextCallback = Callable[[Any], Any]
ErrorCallback = Callable[[BaseException], Any]
CompleteCallback = Callable[[], Any]


# -----------------------------------------------------------------------------
# Subscriber state
# -----------------------------------------------------------------------------
@dataclass
class _Observer:
    on_next: NextCallback
    on_error: Optional[ErrorCallback] = None
    on_complete: Optional[CompleteCallback] = None


class Subscription:
    """Handle returned by MulticastChannel.subscribe()."""

    def __init__(self, channel: "MulticastChannel", observer: _Observer) -> None:
        self._channel = channel
        self._observer = observer
        self._closed = False

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def channel(self) -> "MulticastChannel":
        return self._channel

    def unsubscribe(self) -> None:
        """Stop receiving emissions. Safe to call more than once."""
        if self._closed:
            return
        self._closed = True
        self._channel._remove(self)


# -----------------------------------------------------------------------------
# Channel
# -----------------------------------------------------------------------------
class MulticastChannel:
    """
    Fans one PollScheduler out to any number of subscribers.

    - Polling starts on the 0 -> 1 subscriber transition and stops on 1 -> 0.
    - An optional ChangeFilter is applied once per result, before fan-out,
      and reset every time polling restarts.
    - Tick errors go to every subscriber's on_error; nobody is unsubscribed
      and polling continues.
    - Callbacks may be plain functions or coroutine functions. A callback
      that raises is logged and does not affect other subscribers.
    """

    def __init__(
        self,
        scheduler: PollScheduler,
        change_filter: Optional[ChangeFilter] = None,
        name: Optional[str] = None,
    ) -> None:
        self.scheduler = scheduler
        self.change_filter = change_filter
        self.name = name or scheduler.name
        self._subscriptions: List[Subscription] = []
        self._callback_tasks: Set[asyncio.Task] = set()

    @property
    def subscriber_count(self) -> int:
        return len(self._subscriptions)

    @property
    def is_active(self) -> bool:
        return self.scheduler.is_running

    def subscribe(
        self,
        on_next: NextCallback,
        on_error: Optional[ErrorCallback] = None,
        on_complete: Optional[CompleteCallback] = None,
    ) -> Subscription:
        """
        Register a subscriber, starting the poll loop if it is the first one.

        Must be called from a running event loop.

        Args:
            on_next: Called with every emitted value
            on_error: Called with every tick error
            on_complete: Called when the channel is closed

        Returns:
            Subscription handle
        """
        subscription = Subscription(self, _Observer(on_next, on_error, on_complete))
        self._subscriptions.append(subscription)
        if len(self._subscriptions) == 1:
            try:
                self._start()
            except RuntimeError:
                self._subscriptions.remove(subscription)
                raise
        logger.info(f"Subscriber added to {self.name} stream. subscribers={self.subscriber_count}")
        return subscription

    def close(self) -> None:
        """Stop polling, complete and drop every subscriber."""
        subscriptions = list(self._subscriptions)
        self._subscriptions.clear()
        self.scheduler.stop()
        for subscription in subscriptions:
            subscription._closed = True
            if subscription._observer.on_complete is not None:
                self._invoke(subscription._observer.on_complete)
        logger.info(f"Closed {self.name} stream ({len(subscriptions)} subscriber(s) completed)")

    def _remove(self, subscription: Subscription) -> None:
        try:
            self._subscriptions.remove(subscription)
        except ValueError:
            return
        if not self._subscriptions:
            self.scheduler.stop()
        logger.info(f"Subscriber removed from {self.name} stream. subscribers={self.subscriber_count}")

    def _start(self) -> None:
        if self.change_filter is not None:
            self.change_filter.reset()
        self.scheduler.start(self._on_result, self._on_error)

    def _on_result(self, value: Any) -> None:
        if self.change_filter is not None:
            try:
                forward, value = self.change_filter.apply(value)
            except TypeError as e:
                self._on_error(e)
                return
            if not forward:
                return
        for subscription in list(self._subscriptions):
            self._invoke(subscription._observer.on_next, value)

    def _on_error(self, error: BaseException) -> None:
        logger.warning(f"Error polling {self.name} stream: {error}")
        for subscription in list(self._subscriptions):
            if subscription._observer.on_error is not None:
                self._invoke(subscription._observer.on_error, error)

    def _invoke(self, callback: Callable[..., Any], *args: Any) -> None:
        try:
            result = callback(*args)
        except Exception as e:
            logger.error(f"Subscriber callback on {self.name} stream raised: {e}", exc_info=True)
            return
        if inspect.isawaitable(result):
            task = asyncio.ensure_future(result)
            self._callback_tasks.add(task)
            task.add_done_callback(self._on_callback_done)

    def _on_callback_done(self, task: asyncio.Task) -> None:
        self._callback_tasks.discard(task)
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.error(f"Subscriber callback on {self.name} stream raised: {error}")
