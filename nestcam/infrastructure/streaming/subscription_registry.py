import logging
from typing import Dict, Optional

from ...domain.models.stream_kind import StreamKind
from .multicast_channel import Subscription

logger = logging.getLogger(__name__)


class SubscriptionRegistry:
    """
    Holds at most one active subscription per stream kind.

    Registering a new handle for a kind cancels the one it replaces, so a
    handle can always be found (and cancelled) by its kind alone.
    """

    def __init__(self) -> None:
        self._handles: Dict[StreamKind, Subscription] = {}

    def register(self, kind: StreamKind, handle: Subscription) -> None:
        previous = self._handles.get(kind)
        self._handles[kind] = handle
        if previous is not None and previous is not handle and not previous.closed:
            logger.warning(
                f"Replacing active {kind.value} subscription; "
                "the previous subscriber will receive no further values"
            )
            previous.unsubscribe()

    def get(self, kind: StreamKind) -> Optional[Subscription]:
        return self._handles.get(kind)

    def cancel(self, kind: StreamKind) -> bool:
        """
        Unsubscribe and forget the handle registered for kind.

        Returns:
            True if an active handle was cancelled
        """
        handle = self._handles.pop(kind, None)
        if handle is None or handle.closed:
            logger.debug(f"No active {kind.value} subscription to cancel")
            return False
        handle.unsubscribe()
        logger.info(f"Cancelled {kind.value} subscription")
        return True

    def cancel_all(self) -> None:
        for kind in list(self._handles):
            self.cancel(kind)

    def __contains__(self, kind: StreamKind) -> bool:
        handle = self._handles.get(kind)
        return handle is not None and not handle.closed

    def __len__(self) -> int:
        return sum(1 for handle in self._handles.values() if not handle.closed)
