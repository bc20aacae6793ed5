# Standard library imports
from dataclasses import dataclass
from typing import Any, Mapping, Optional

# Local application imports
from ...core.exceptions import ConfigValidationError

REQUIRED_FIELDS = ("nest_id", "refresh_token", "api_key", "client_id")

DEFAULT_EVENT_INTERVAL_MS = 3000
DEFAULT_SNAPSHOT_INTERVAL_MS = 5000


@dataclass(frozen=True)
class CameraConfig:
    """
    Per-camera client configuration.

    Holds the camera id and the secrets needed for the OAuth -> JWT exchange,
    plus the polling intervals (milliseconds) of the two streams.
    """
    nest_id: str
    refresh_token: str
    api_key: str
    client_id: str
    host: Optional[str] = None
    event_interval: int = DEFAULT_EVENT_INTERVAL_MS
    snapshot_interval: int = DEFAULT_SNAPSHOT_INTERVAL_MS

    def __post_init__(self) -> None:
        """Business validations"""
        if self.event_interval <= 0:
            raise ConfigValidationError(
                "The property: event_interval must be a positive number of milliseconds.",
                field="event_interval",
            )
        if self.snapshot_interval <= 0:
            raise ConfigValidationError(
                "The property: snapshot_interval must be a positive number of milliseconds.",
                field="snapshot_interval",
            )

    @classmethod
    def from_options(cls, options: Optional[Mapping[str, Any]]) -> "CameraConfig":
        """
        Validate a plain options mapping and build a CameraConfig.

        Checks run in a fixed order so callers always see the first problem:
        missing options, too few keys, then each required field in turn.

        Args:
            options: Mapping with nest_id, refresh_token, api_key, client_id
                and optionally host, event_interval, snapshot_interval.

        Returns:
            Validated CameraConfig

        Raises:
            ConfigValidationError: If options are missing or incomplete
        """
        required = ", ".join(REQUIRED_FIELDS)
        if options is None:
            raise ConfigValidationError(
                f"The options argument cannot be None. It must include properties: {required}"
            )
        if len(options) < len(REQUIRED_FIELDS):
            raise ConfigValidationError(
                f"You must have at least the following four properties: {required}"
            )
        for name in REQUIRED_FIELDS:
            if not options.get(name):
                raise ConfigValidationError(
                    f"The property: {name} is not defined.", field=name
                )

        return cls(
            nest_id=options["nest_id"],
            refresh_token=options["refresh_token"],
            api_key=options["api_key"],
            client_id=options["client_id"],
            host=options.get("host") or None,
            event_interval=_interval(options, "event_interval", DEFAULT_EVENT_INTERVAL_MS),
            snapshot_interval=_interval(options, "snapshot_interval", DEFAULT_SNAPSHOT_INTERVAL_MS),
        )


def _interval(options: Mapping[str, Any], name: str, default: int) -> int:
    """Read an optional interval in milliseconds; unset or empty means default."""
    value = options.get(name)
    if value is None or value == "":
        return default
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise ConfigValidationError(
            f"The property: {name} must be a positive number of milliseconds.",
            field=name,
        ) from e
