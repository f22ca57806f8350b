"""Ports - interfaces/protocols for external dependencies."""

from .task_store import TaskStore
from .calendar_repo import CalendarRepository
from .session_store import SessionStore

__all__ = [
    "TaskStore",
    "CalendarRepository",
    "SessionStore",
]
