"""
Centralized DateTime Utilities
==============================

Time helpers for the camera client. The camera API takes epoch
milliseconds; "today" is evaluated in the time zone configured by
LOCAL_TIMEZONE.

Functions:
- now(): timezone-aware datetime in the configured time zone
- start_of_day(): midnight of the given (or current) day
- to_epoch_ms(): datetime -> epoch milliseconds
- today_window_ms(): (start of today, now) in epoch milliseconds
- file_timestamp(): timestamp string safe for file names
"""
import logging
import zoneinfo
from datetime import datetime, timezone as dt_timezone, tzinfo
from typing import Optional, Tuple

from ..core.config import get_settings

logger = logging.getLogger(__name__)


def _get_app_timezone() -> tzinfo:
    """
    Get the application timezone from config.
    Returns timezone object (defaults to UTC if invalid).
    """
    tz_str = get_settings().local_timezone

    if tz_str.upper() == "UTC":
        return dt_timezone.utc

    try:
        return zoneinfo.ZoneInfo(tz_str)
    except (zoneinfo.ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Invalid timezone '{tz_str}', falling back to UTC")
        return dt_timezone.utc


def now() -> datetime:
    """
    Get current datetime with application-configured timezone.

    Returns:
        timezone-aware datetime object
    """
    return datetime.now(_get_app_timezone())


def start_of_day(dt: Optional[datetime] = None) -> datetime:
    """
    Midnight of the day containing dt (default: now), same time zone as dt.
    Naive datetimes are assumed to be in the application timezone.
    """
    if dt is None:
        dt = now()
    elif dt.tzinfo is None:
        dt = dt.replace(tzinfo=_get_app_timezone())
    return dt.replace(hour=0, minute=0, second=0, microsecond=0)


def to_epoch_ms(dt: datetime) -> int:
    """
    Convert datetime object to epoch milliseconds.
    If datetime is naive, assumes application timezone.
    """
    if dt.tzinfo is None:
        dt = dt.replace(tzinfo=_get_app_timezone())
    return int(dt.timestamp() * 1000)


def today_window_ms() -> Tuple[int, int]:
    """(start of today, now) as epoch milliseconds."""
    current = now()
    return to_epoch_ms(start_of_day(current)), to_epoch_ms(current)


def file_timestamp(dt: Optional[datetime] = None) -> str:
    """Timestamp for file names, e.g. 2026-10-19_14-03-27.512"""
    dt = dt or now()
    return dt.strftime("%Y-%m-%d_%H-%M-%S.") + f"{dt.microsecond // 1000:03d}"
