"""Greedy task placement around fixed commitments - no I/O dependencies.

Every timestamp handled here is an instant (see LocalCalendar.instant);
local views are produced only for the hour and day boundary checks and for
the PlacedTask items handed back to the caller.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from .calendar import BusyInterval, Event, merge_intervals
from .localtime import ActiveHours, LocalCalendar
from .tasks import Task

logger = logging.getLogger(__name__)

SCAN_STEP_MINUTES = 30
BLOCK_STEP_MINUTES = 60
CURSOR_GRANULARITY_MINUTES = 15


@dataclass(frozen=True)
class FixedEvent:
    """An external calendar event shown as-is."""

    event: Event


@dataclass(frozen=True)
class PlacedTask:
    """A task the engine put on the calendar."""

    task_id: str
    start: datetime
    end: datetime

    def format(self) -> str:
        return f"{self.start.strftime('%H:%M')}-{self.end.strftime('%H:%M')}"


ScheduleItem = FixedEvent | PlacedTask


def touches_blocked_hour(
    start: datetime,
    end: datetime,
    blocked: set[datetime],
    cal: LocalCalendar,
) -> bool:
    """Check if any hour overlapping `[start, end)` is blocked."""
    if not blocked:
        return False
    hour = cal.hour_start(start)
    end_at = cal.instant(end)
    while cal.instant(hour) < end_at:
        if cal.instant(hour) in blocked:
            return True
        hour = cal.shift(hour, BLOCK_STEP_MINUTES)
    return False


def within_active_hours(start: datetime, end: datetime, hours: ActiveHours, cal: LocalCalendar) -> bool:
    """Check if `[start, end)` sits inside one day's active hours."""
    local = cal.local(start)
    if not hours.contains_hour(local.hour):
        return False
    return cal.instant(end) <= cal.instant(cal.at_hour(local, hours.day_end))


def find_stale_placements(
    placements: dict[str, datetime],
    tasks_by_id: dict[str, Task],
    busy: list[BusyInterval],
    blocked: set[datetime],
    hours: ActiveHours,
    now: datetime,
    cal: LocalCalendar,
) -> list[str]:
    """
    Ids of placements that can no longer be shown where they are.

    A placement is stale when its task disappeared, when it ended before now
    (archived tasks keep theirs as a record), when it touches a blocked hour,
    when it falls outside the active hours, or when it now overlaps a busy
    interval. Pure function - no I/O.
    """
    now_at = cal.instant(now)
    stale = []
    for task_id, start in placements.items():
        task = tasks_by_id.get(task_id)
        if task is None:
            stale.append(task_id)
            continue

        end = start + task.duration
        if end < now_at and not task.archived:
            stale.append(task_id)
        elif touches_blocked_hour(start, end, blocked, cal):
            stale.append(task_id)
        elif not within_active_hours(start, end, hours, cal):
            stale.append(task_id)
        elif any(b.overlaps(start, end) for b in busy):
            stale.append(task_id)
    return stale


def placed_in_window(
    placements: dict[str, datetime],
    ordered_tasks: list[Task],
    range_start: datetime,
    range_end: datetime,
    cal: LocalCalendar,
) -> list[PlacedTask]:
    """Existing placements starting inside the window, in task order."""
    lo, hi = cal.instant(range_start), cal.instant(range_end)
    placed = []
    for task in ordered_tasks:
        start = placements.get(task.id)
        if start is not None and lo <= start < hi:
            placed.append(PlacedTask(task.id, cal.local(start), cal.local(start + task.duration)))
    return placed


def select_candidate(
    ordered_tasks: list[Task],
    gap: timedelta,
    used: set[str],
    placements: dict[str, datetime],
    offset: int = 0,
) -> Task | None:
    """
    Pick the task for a gap.

    The pool keeps the deadline order of `ordered_tasks`; `offset` rotates
    through it so repeated swaps cycle over every equally eligible task.
    """
    pool = [
        t
        for t in ordered_tasks
        if t.duration <= gap and t.id not in used and t.id not in placements and not t.archived
    ]
    if not pool:
        return None
    return pool[offset % len(pool)]


def _next_blocked_hour(
    cursor: datetime,
    limit: datetime,
    blocked: set[datetime],
    cal: LocalCalendar,
) -> datetime | None:
    """Instant of the first blocked hour starting after cursor and before limit."""
    if not blocked:
        return None
    hour = cal.shift(cal.hour_start(cursor), BLOCK_STEP_MINUTES)
    while cal.instant(hour) < limit:
        if cal.instant(hour) in blocked:
            return cal.instant(hour)
        hour = cal.shift(hour, BLOCK_STEP_MINUTES)
    return None


def scan_gaps(
    ordered_tasks: list[Task],
    busy: list[BusyInterval],
    occupied: list[BusyInterval],
    hours: ActiveHours,
    range_start: datetime,
    range_end: datetime,
    now: datetime,
    placements: dict[str, datetime],
    used: set[str],
    slot_offsets: dict[datetime, int],
    blocked: set[datetime],
    cal: LocalCalendar,
) -> list[PlacedTask]:
    """
    Walk the window and fill free gaps with unplaced tasks.

    Each new placement is recorded in `placements` and its task id added to
    `used`. Tasks longer than every remaining gap are left out.
    """
    ranges = merge_intervals(busy + occupied)
    end_at = cal.instant(range_end)
    cursor = cal.round_up(max(range_start, now, key=cal.instant), CURSOR_GRANULARITY_MINUTES)
    placed: list[PlacedTask] = []

    while cal.instant(cursor) < end_at:
        hour = cal.local(cursor).hour
        if hour < hours.day_start:
            cursor = cal.at_hour(cursor, hours.day_start)
        elif hour >= hours.day_end:
            cursor = cal.at_hour(cursor, hours.day_start, days=1)
            continue

        at = cal.instant(cursor)
        covering = next((r for r in ranges if r.contains(at)), None)
        if covering is not None:
            cursor = cal.local(covering.end)
            continue

        next_busy = next((r.start for r in ranges if r.start > at), end_at)
        day_close = cal.instant(cal.at_hour(cursor, hours.day_end))
        gap_end = min(next_busy, day_close, end_at)

        if cal.hour_key(cursor) in blocked:
            cursor = cal.shift(cursor, BLOCK_STEP_MINUTES)
            continue

        blocked_ahead = _next_blocked_hour(cursor, gap_end, blocked, cal)
        if blocked_ahead is not None:
            gap_end = blocked_ahead

        gap = gap_end - at
        if gap <= timedelta(0):
            cursor = cal.shift(cursor, SCAN_STEP_MINUTES)
            continue

        task = select_candidate(ordered_tasks, gap, used, placements, slot_offsets.get(at, 0))
        if task is None:
            cursor = cal.shift(cursor, SCAN_STEP_MINUTES)
            continue

        placements[task.id] = at
        used.add(task.id)
        end = cal.shift(cursor, task.duration_minutes)
        placed.append(PlacedTask(task.id, cal.local(cursor), end))
        logger.debug(f"Placed {task.id} at {cal.local(cursor).isoformat()} ({task.duration_minutes} min)")
        cursor = end

    return placed
