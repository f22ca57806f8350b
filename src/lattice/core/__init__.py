"""Functional core - pure scheduling logic with no I/O."""

from .tasks import Task, sort_by_deadline, filter_active, recently_archived
from .calendar import Event, BusyInterval, merge_intervals, busy_intervals, events_in_window, toggle_calendar
from .localtime import ActiveHours, LocalCalendar, parse_active_hours
from .schedule import FixedEvent, PlacedTask, ScheduleItem, select_candidate, scan_gaps, find_stale_placements
from .session import SessionState, SwapOffset, Block, Unarchive, UndoRecord

__all__ = [
    # Tasks
    "Task",
    "sort_by_deadline",
    "filter_active",
    "recently_archived",
    # Calendar
    "Event",
    "BusyInterval",
    "merge_intervals",
    "busy_intervals",
    "events_in_window",
    "toggle_calendar",
    # Local time
    "ActiveHours",
    "LocalCalendar",
    "parse_active_hours",
    # Placement
    "FixedEvent",
    "PlacedTask",
    "ScheduleItem",
    "select_candidate",
    "scan_gaps",
    "find_stale_placements",
    # Session
    "SessionState",
    "SwapOffset",
    "Block",
    "Unarchive",
    "UndoRecord",
]
