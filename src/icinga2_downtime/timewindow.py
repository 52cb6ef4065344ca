"""
Conversion of local wall-clock downtime windows to epoch seconds.

The default policy subtracts a fixed offset of one hour (two while daylight
saving time is in effect) before counting seconds since the epoch. That is
only right for hosts running on Central European time; LocalTimezonePolicy
does a real timezone-aware conversion and can be swapped in without touching
the dispatch code.
"""

import time
from datetime import datetime, timedelta
from typing import Callable, Optional, Tuple

EPOCH = datetime(1970, 1, 1)

STANDARD_OFFSET = timedelta(hours=1)
DST_OFFSET = timedelta(hours=2)


def local_dst_in_effect(instant: datetime) -> bool:
    """Return True if local daylight saving time applies at the given instant."""
    return time.localtime(instant.timestamp()).tm_isdst > 0


def as_local(instant: datetime) -> datetime:
    """Return the instant as naive local wall-clock time."""
    if instant.tzinfo is not None:
        return instant.astimezone().replace(tzinfo=None)
    return instant


class FixedOffsetPolicy:
    """Subtract 1h (2h under DST) from local time, then count seconds since the epoch."""

    def __init__(
        self,
        is_dst: Callable[[datetime], bool] = local_dst_in_effect,
        standard_offset: timedelta = STANDARD_OFFSET,
        dst_offset: timedelta = DST_OFFSET,
    ):
        self.is_dst = is_dst
        self.standard_offset = standard_offset
        self.dst_offset = dst_offset

    def to_epoch(self, instant: datetime) -> int:
        instant = as_local(instant)
        offset = self.dst_offset if self.is_dst(instant) else self.standard_offset
        return int((instant - offset - EPOCH).total_seconds())


class LocalTimezonePolicy:
    """Interpret naive instants in the local timezone and return their real epoch value."""

    def to_epoch(self, instant: datetime) -> int:
        return int(instant.timestamp())


DEFAULT_POLICY = FixedOffsetPolicy()


def normalize_window(
    end: datetime,
    start: Optional[datetime] = None,
    policy=None,
    now: Callable[[], datetime] = datetime.now,
) -> Tuple[int, int]:
    """
    Convert a downtime window to (start_epoch, end_epoch).

    Args:
        end: End of the window, local wall-clock time
        start: Start of the window; defaults to now
        policy: Object with a ``to_epoch(datetime) -> int`` method
        now: Clock used when start is omitted

    Returns:
        Tuple of start and end epoch seconds

    Raises:
        ValueError: If the window does not end after it starts
    """
    policy = policy or DEFAULT_POLICY
    start = as_local(start or now())
    end = as_local(end)

    if end <= start:
        raise ValueError(
            f"Downtime end {end.isoformat()} must be after start {start.isoformat()}"
        )

    return policy.to_epoch(start), policy.to_epoch(end)
