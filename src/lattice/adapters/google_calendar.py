"""Google Calendar API adapter."""

import logging
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path

from lattice.core.calendar import Event, sort_events_by_start

logger = logging.getLogger(__name__)

SCOPES = ["https://www.googleapis.com/auth/calendar.readonly"]


@dataclass(frozen=True)
class CalendarEntry:
    """A calendar the signed-in account can read."""

    id: str
    summary: str
    color: str | None = None
    primary: bool = False


class GoogleCalendarAdapter:
    """
    Fetches events from the selected Google calendars.

    Implements CalendarRepository protocol. Expects an authorised token.json
    in config_folder; signing in is handled elsewhere.
    """

    def __init__(
        self,
        config_folder: str,
        calendars: list[str] | None = None,
        timezone: str = "America/Toronto",
    ):
        self.config_folder = config_folder
        self.calendars = calendars or ["primary"]
        self.timezone = timezone
        self._token_path = Path(config_folder).expanduser() / "token.json"

    def _get_credentials(self):
        """Load credentials from token.json, refreshing if needed."""
        from google.auth.transport.requests import Request
        from google.oauth2.credentials import Credentials

        if not self._token_path.exists():
            logger.warning(f"No token.json in {self.config_folder}")
            return None

        creds = Credentials.from_authorized_user_file(str(self._token_path), SCOPES)

        if creds.expired and creds.refresh_token:
            try:
                creds.refresh(Request())
                self._token_path.write_text(creds.to_json())
                self._token_path.chmod(0o600)
            except Exception as e:
                logger.warning(f"Failed to refresh Google token: {e}")
                return None

        return creds

    def _build_service(self):
        """Build a Google Calendar API service."""
        from googleapiclient.discovery import build

        creds = self._get_credentials()
        if not creds:
            return None
        return build("calendar", "v3", credentials=creds)

    def fetch_events(self, range_start: datetime, range_end: datetime) -> list[Event]:
        """Fetch events from every selected calendar for the window."""
        try:
            return self._fetch_events_api(range_start, range_end)
        except Exception as e:
            logger.warning(f"Google Calendar API error: {e}")
            return []

    def _fetch_events_api(self, range_start: datetime, range_end: datetime) -> list[Event]:
        service = self._build_service()
        if not service:
            return []

        events = []
        for cal_id in self.calendars:
            result = (
                service.events()
                .list(
                    calendarId=cal_id,
                    timeMin=range_start.isoformat(),
                    timeMax=range_end.isoformat(),
                    singleEvents=True,
                    orderBy="startTime",
                    timeZone=self.timezone,
                )
                .execute()
            )

            for item in result.get("items", []):
                start_raw = item.get("start", {})
                end_raw = item.get("end", {})

                # All-day events carry only a date; they never block time.
                if "dateTime" not in start_raw:
                    continue

                events.append(
                    Event(
                        id=item.get("id", ""),
                        title=item.get("summary", "Untitled"),
                        start=datetime.fromisoformat(start_raw["dateTime"]),
                        end=datetime.fromisoformat(end_raw["dateTime"]) if "dateTime" in end_raw else None,
                        calendar=cal_id,
                    )
                )

        return sort_events_by_start(events)

    def list_calendars(self) -> list[CalendarEntry]:
        """List the account's calendars."""
        service = self._build_service()
        if not service:
            return []

        result = service.calendarList().list().execute()
        entries = []
        for item in result.get("items", []):
            if not item.get("id") or not item.get("summary"):
                continue
            entries.append(
                CalendarEntry(
                    id=item["id"],
                    summary=item["summary"],
                    color=item.get("backgroundColor"),
                    primary=bool(item.get("primary", False)),
                )
            )
        return entries
