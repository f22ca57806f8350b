"""Adapters - I/O implementations of ports."""

from .memory_store import InMemoryTaskStore, TaskNotFoundError
from .json_store import JsonTaskStore
from .file_session import JsonSessionStore
from .file_calendar import FileCalendarAdapter
from .google_calendar import GoogleCalendarAdapter

__all__ = [
    "InMemoryTaskStore",
    "TaskNotFoundError",
    "JsonTaskStore",
    "JsonSessionStore",
    "FileCalendarAdapter",
    "GoogleCalendarAdapter",
]
