"""Pure calendar domain logic - no I/O dependencies."""

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Event:
    """A fixed calendar commitment fetched from an external calendar."""

    id: str
    title: str
    start: datetime
    end: datetime | None
    calendar: str = "primary"
    all_day: bool = False

    @property
    def is_timed(self) -> bool:
        return not self.all_day and self.end is not None

    def format_time(self) -> str:
        """Format the event time for display."""
        if self.all_day:
            return "All day"
        return self.start.strftime("%H:%M")

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "start": self.start.isoformat(),
            "end": self.end.isoformat() if self.end else None,
            "calendar": self.calendar,
            "all_day": self.all_day,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Event":
        end = data.get("end")
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title", "Untitled"),
            start=datetime.fromisoformat(data["start"]),
            end=datetime.fromisoformat(end) if end else None,
            calendar=data.get("calendar", "primary"),
            all_day=bool(data.get("all_day", False)),
        )


@dataclass(frozen=True)
class BusyInterval:
    """A half-open `[start, end)` span the scheduler must avoid."""

    start: datetime
    end: datetime

    def __post_init__(self):
        if self.end <= self.start:
            raise ValueError(f"Busy interval must end after it starts: {self.start} >= {self.end}")

    def contains(self, dt: datetime) -> bool:
        """Check if a datetime falls within this interval."""
        return self.start <= dt < self.end

    def overlaps(self, start: datetime, end: datetime) -> bool:
        """Check if `[start, end)` overlaps this interval. Adjacent spans do not."""
        return self.start < end and self.end > start


def merge_intervals(intervals: list[BusyInterval]) -> list[BusyInterval]:
    """
    Collapse overlapping intervals into a minimal sorted disjoint list.

    Intervals that merely touch are kept separate.
    Pure function - no I/O.
    """
    merged: list[BusyInterval] = []
    for current in sorted(intervals, key=lambda i: i.start):
        if merged and current.start < merged[-1].end:
            last = merged[-1]
            merged[-1] = BusyInterval(last.start, max(last.end, current.end))
        else:
            merged.append(current)
    return merged


def busy_intervals(
    events: list[Event],
    range_start: datetime,
    range_end: datetime,
) -> list[BusyInterval]:
    """Busy spans of the timed events that intersect the window."""
    return [
        BusyInterval(e.start, e.end)
        for e in events
        if e.is_timed and e.end > e.start and e.end > range_start and e.start < range_end
    ]


def events_in_window(
    events: list[Event],
    range_start: datetime,
    range_end: datetime,
) -> list[Event]:
    """Timed events starting inside the window, in input order."""
    return [e for e in events if e.is_timed and range_start <= e.start < range_end]


def sort_events_by_start(events: list[Event]) -> list[Event]:
    """Sort events by start time."""
    return sorted(events, key=lambda e: e.start)


def toggle_calendar(selected: list[str], calendar_id: str) -> list[str]:
    """Toggle a calendar in the selection. The last selected calendar stays selected."""
    if calendar_id in selected:
        if len(selected) > 1:
            return [c for c in selected if c != calendar_id]
        return list(selected)
    return [*selected, calendar_id]
