import logging
from typing import Any, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


class ChangeFilter:
    """
    Reduces each events poll to its newest event, forwarding only on change.

    "Change" is judged by list length alone: a result with the same number of
    events as the previous one is treated as unchanged, even if the contents
    differ. The first result after a reset is always forwarded.
    """

    def __init__(self) -> None:
        self._last_length: Optional[int] = None

    def reset(self) -> None:
        self._last_length = None

    def apply(self, events: Sequence[Any]) -> Tuple[bool, Any]:
        """
        Returns:
            (forward, newest_event). newest_event is None when forward is False.

        Raises:
            TypeError: If events is not a list of events
        """
        if not isinstance(events, (list, tuple)):
            raise TypeError(f"Expected a list of events, got {type(events).__name__}")
        length = len(events)
        if self._last_length is not None and length == self._last_length:
            return False, None
        self._last_length = length

        # Nothing to forward for an empty poll, but its length is remembered
        if length == 0:
            logger.debug("Events poll returned no events")
            return False, None
        return True, events[-1]
