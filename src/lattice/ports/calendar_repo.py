"""Calendar repository interface."""

from datetime import datetime
from typing import Protocol

from lattice.core.calendar import Event


class CalendarRepository(Protocol):
    """Interface for fetching calendar events from any backend."""

    def fetch_events(self, range_start: datetime, range_end: datetime) -> list[Event]:
        """Fetch events overlapping `[range_start, range_end)`."""
        ...
