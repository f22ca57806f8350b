"""Configuration management for Lattice."""

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from .core.localtime import ActiveHours, parse_active_hours

logger = logging.getLogger(__name__)

LATTICE_HOME = Path(os.environ.get("LATTICE_HOME", Path.home() / "lattice"))
CONFIG_FILE = LATTICE_HOME / "config" / "lattice.conf"
DATA_DIR = LATTICE_HOME / "data"


@dataclass
class Config:
    """Lattice configuration."""

    timezone: str = "America/Toronto"
    active_hours: str = "09:00-17:00"
    window_days: int = 1
    archive_days: int = 7
    selected_calendars: list[str] = field(default_factory=lambda: ["primary"])
    google_config_folder: str = ""
    tasks_file: str = str(DATA_DIR / "tasks.json")
    events_file: str = str(DATA_DIR / "events.json")
    session_file: str = str(DATA_DIR / "session.json")

    def active_hours_range(self) -> ActiveHours:
        """Parsed active hours; falls back to 9-17 when unparsable."""
        try:
            return parse_active_hours(self.active_hours)
        except ValueError:
            logger.warning(f"Invalid ACTIVE_HOURS {self.active_hours!r}, using 09:00-17:00")
            return ActiveHours()

    def zone(self) -> ZoneInfo:
        try:
            return ZoneInfo(self.timezone)
        except (ZoneInfoNotFoundError, ValueError):
            logger.warning(f"Unknown timezone {self.timezone!r}, using UTC")
            return ZoneInfo("UTC")


def _unquote(value: str) -> str:
    """Strip quotes, or an inline comment from unquoted values."""
    for quote in ('"', "'"):
        if value.startswith(quote):
            end_quote = value.find(quote, 1)
            return value[1:end_quote] if end_quote != -1 else value[1:]
    if "#" in value:
        value = value.split("#")[0].strip()
    return value


def _split_list(value: str) -> list[str]:
    return [v.strip() for v in value.split(",") if v.strip()]


def load_config(path: Path | None = None) -> Config:
    """Load configuration from lattice.conf."""
    config = Config()
    path = path or CONFIG_FILE

    if not path.exists():
        return config

    for line in path.read_text().splitlines():
        line = line.strip()
        if not line or line.startswith("#"):
            continue

        if "=" not in line:
            continue

        key, _, value = line.partition("=")
        key = key.strip().lower()
        value = _unquote(value.strip())

        match key:
            case "timezone":
                config.timezone = value
            case "active_hours":
                config.active_hours = value
            case "window_days" | "archive_days":
                try:
                    setattr(config, key, max(int(value), 1))
                except ValueError:
                    logger.warning(f"Ignoring non-numeric {key.upper()}: {value!r}")
            case "selected_calendars":
                config.selected_calendars = _split_list(value) or ["primary"]
            case "google_config_folder":
                config.google_config_folder = value
            case "tasks_file":
                config.tasks_file = value
            case "events_file":
                config.events_file = value
            case "session_file":
                config.session_file = value
            case _:
                logger.debug(f"Unknown config key: {key}")

    return config


def save_selected_calendars(selected: list[str], path: Path | None = None) -> None:
    """Rewrite the SELECTED_CALENDARS line, keeping the rest of the file."""
    path = path or CONFIG_FILE
    lines = path.read_text().splitlines() if path.exists() else []
    new_line = f"SELECTED_CALENDARS = {','.join(selected)}"

    for i, line in enumerate(lines):
        if line.strip().lower().startswith("selected_calendars"):
            lines[i] = new_line
            break
    else:
        lines.append(new_line)

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text("\n".join(lines) + "\n")
