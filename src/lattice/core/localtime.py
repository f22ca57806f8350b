"""Active hours and wall-clock arithmetic - no I/O dependencies.

Elapsed-time math (task durations, 30-minute steps) is done on UTC instants,
while hour and day boundaries are read in the local zone. Naive datetimes are
treated as already local and use plain arithmetic.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, time, timedelta, timezone, tzinfo

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ActiveHours:
    """Daily bounds `[day_start, day_end)` in which tasks may be placed."""

    day_start: int = 9
    day_end: int = 17

    def clamped(self) -> "ActiveHours":
        """Return a valid range; never yields a zero or negative length day."""
        start = min(max(self.day_start, 0), 23)
        end = min(max(self.day_end, 0), 24)
        if end <= start:
            logger.warning(f"Active hours {self.day_start}-{self.day_end} invalid, using {start}-{start + 1}")
            end = start + 1
        return ActiveHours(start, end)

    def contains_hour(self, hour: int) -> bool:
        return self.day_start <= hour < self.day_end

    def format(self) -> str:
        return f"{self.day_start:02d}:00-{self.day_end:02d}:00"


def parse_active_hours(value: str) -> ActiveHours:
    """Parse "09:00-17:00" (or "9-17") into clamped ActiveHours."""
    start_str, _, end_str = value.partition("-")
    start = int(start_str.strip().split(":")[0])
    end = int(end_str.strip().split(":")[0])
    return ActiveHours(start, end).clamped()


class LocalCalendar:
    """Hour/day boundary arithmetic in one time zone."""

    def __init__(self, tz: tzinfo | None = None):
        self.tz = tz

    def local(self, dt: datetime) -> datetime:
        """View a timestamp in the calendar's zone."""
        if dt.tzinfo is None or self.tz is None:
            return dt
        return dt.astimezone(self.tz)

    def instant(self, dt: datetime) -> datetime:
        """Comparable, hashable key for a timestamp."""
        if dt.tzinfo is None:
            return dt
        return dt.astimezone(timezone.utc)

    def shift(self, dt: datetime, minutes: float) -> datetime:
        """Add elapsed minutes, returning a local timestamp."""
        if dt.tzinfo is None:
            return dt + timedelta(minutes=minutes)
        return (self.instant(dt) + timedelta(minutes=minutes)).astimezone(self.tz or dt.tzinfo)

    def at_hour(self, dt: datetime, hour: int, days: int = 0) -> datetime:
        """`hour:00` on the local date of dt, offset by whole days.

        Hour 24 means midnight of the following day. Wall times skipped by a
        DST transition resolve to the first valid instant after them.
        """
        local = self.local(dt)
        day = local.date() + timedelta(days=days)
        if hour >= 24:
            day += timedelta(days=hour // 24)
            hour %= 24
        result = datetime.combine(day, time(hour, 0), tzinfo=local.tzinfo)
        if result.tzinfo is None:
            return result
        # Round trip through UTC normalises nonexistent wall times.
        return result.astimezone(timezone.utc).astimezone(result.tzinfo)

    def hour_start(self, dt: datetime) -> datetime:
        """Start of the local hour containing dt."""
        local = self.local(dt)
        return local.replace(minute=0, second=0, microsecond=0)

    def hour_key(self, dt: datetime) -> datetime:
        """Instant key of the hour containing dt, used for blocked hours."""
        return self.instant(self.hour_start(dt))

    def round_up(self, dt: datetime, step_minutes: int = 15) -> datetime:
        """Round up to the next local `step_minutes` boundary.

        Values already on a boundary are returned unchanged.
        """
        local = self.local(dt)
        if local.minute % step_minutes == 0 and local.second == 0 and local.microsecond == 0:
            return local
        floor = local.replace(minute=local.minute - local.minute % step_minutes, second=0, microsecond=0)
        return self.shift(floor, step_minutes)
