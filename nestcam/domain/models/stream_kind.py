# Standard library imports
from enum import Enum
from typing import Optional


class StreamKind(str, Enum):
    """The two polled resources a subscription can target"""
    EVENT = "event"
    SNAPSHOT = "snapshot"

    @classmethod
    def parse(cls, value: Optional[str]) -> Optional["StreamKind"]:
        """
        Decode a user-supplied stream name, case-insensitively.

        Accepts "event"/"events" and "snapshot"/"snapshots".
        Returns None for anything else (including None).
        """
        if value is None:
            return None
        if isinstance(value, StreamKind):
            return value
        return _ALIASES.get(str(value).strip().lower())


_ALIASES = {
    "event": StreamKind.EVENT,
    "events": StreamKind.EVENT,
    "snapshot": StreamKind.SNAPSHOT,
    "snapshots": StreamKind.SNAPSHOT,
}
