"""
itemsblocker/core/time.py

THE ONLY TIMESTAMP CODE IN ITEMSBLOCKER.

Wire format: YYYY-MM-DDTHH:MM:SS.ffffffZ
             (microseconds, explicit Z, no +00:00)

All datetimes handled by the store are timezone-aware UTC. Every module
that needs "now", a wire timestamp, or a human-readable span imports it
from here.
"""

from datetime import datetime, timedelta, timezone
from typing import Callable

Clock = Callable[[], datetime]

_WIRE_FORMAT = "%Y-%m-%dT%H:%M:%S.%fZ"


def utc_now() -> datetime:
    """Current time as an aware UTC datetime. Default Clock."""
    return datetime.now(timezone.utc)


def to_wire(moment: datetime) -> str:
    """Format an aware datetime in wire format."""
    return moment.astimezone(timezone.utc).strftime(_WIRE_FORMAT)


def from_wire(value: str) -> datetime:
    """
    Parse a wire timestamp back into an aware UTC datetime.

    Raises ValueError on anything that is not wire format.
    """
    if not isinstance(value, str) or not value.endswith("Z"):
        raise ValueError(f"Not a wire timestamp: {value!r}")
    return datetime.strptime(value, _WIRE_FORMAT).replace(tzinfo=timezone.utc)


def format_span(span: timedelta) -> str:
    """
    Remaining-time label used in block listings.

    "1d 02:03:04" when a day or longer, "02:03:04" otherwise.
    Negative spans render as zero.
    """
    total = max(int(span.total_seconds()), 0)
    days, rest = divmod(total, 86400)
    hours, rest = divmod(rest, 3600)
    minutes, seconds = divmod(rest, 60)
    clock = f"{hours:02d}:{minutes:02d}:{seconds:02d}"
    if days >= 1:
        return f"{days}d {clock}"
    return clock


def format_until(moment: datetime) -> str:
    """Short absolute label, e.g. "2026-10-17 14:05 UTC"."""
    return moment.astimezone(timezone.utc).strftime("%Y-%m-%d %H:%M UTC")
