"""JSON event file adapter - reads a pre-fetched event snapshot."""

import json
import logging
from dataclasses import replace
from datetime import datetime, tzinfo
from pathlib import Path

from lattice.core.calendar import Event, sort_events_by_start

logger = logging.getLogger(__name__)


class FileCalendarAdapter:
    """
    Reads events from a JSON array on disk.

    Implements CalendarRepository protocol. Timestamps written without an
    offset are read in `tz`.
    """

    def __init__(self, path: Path | str, calendars: list[str] | None = None, tz: tzinfo | None = None):
        self.path = Path(path).expanduser()
        self.calendars = calendars
        self.tz = tz

    def _localize(self, event: Event) -> Event:
        if self.tz is None or event.start.tzinfo is not None:
            return event
        end = event.end.replace(tzinfo=self.tz) if event.end and event.end.tzinfo is None else event.end
        return replace(event, start=event.start.replace(tzinfo=self.tz), end=end)

    def fetch_events(self, range_start: datetime, range_end: datetime) -> list[Event]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse {self.path}: {e}")
            return []

        events = []
        for item in data:
            try:
                event = self._localize(Event.from_dict(item))
            except (KeyError, TypeError, ValueError) as e:
                logger.warning(f"Skipping malformed event {item.get('id', '?')}: {e}")
                continue
            if self.calendars and event.calendar not in self.calendars:
                continue
            end = event.end or event.start
            if end > range_start and event.start < range_end:
                events.append(event)
        return sort_events_by_start(events)
