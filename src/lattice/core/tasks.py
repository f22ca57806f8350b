"""Pure task domain logic - no I/O dependencies."""

from dataclasses import dataclass, field, replace
from datetime import datetime, timedelta


@dataclass(frozen=True)
class Task:
    """A deadline-bound task waiting to be placed on the calendar."""

    id: str
    title: str
    duration_minutes: int
    target_date: datetime
    date_created: datetime = field(default_factory=datetime.now)
    archived: bool = False

    def __post_init__(self):
        if self.duration_minutes <= 0:
            raise ValueError(f"Task {self.id!r} duration must be positive, got {self.duration_minutes}")

    @property
    def duration(self) -> timedelta:
        return timedelta(minutes=self.duration_minutes)

    def with_archived(self, archived: bool) -> "Task":
        """Copy of this task with the archived flag changed."""
        return replace(self, archived=archived)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "title": self.title,
            "duration_minutes": self.duration_minutes,
            "target_date": self.target_date.isoformat(),
            "date_created": self.date_created.isoformat(),
            "archived": self.archived,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        """Create Task from its stored JSON form."""
        target = datetime.fromisoformat(data["target_date"])
        created = data.get("date_created")
        return cls(
            id=str(data["id"]),
            title=data.get("title", "Untitled"),
            duration_minutes=int(data.get("duration_minutes", 60)),
            target_date=target,
            date_created=datetime.fromisoformat(created) if created else target,
            archived=bool(data.get("archived", False)),
        )


def sort_by_deadline(tasks: list[Task]) -> list[Task]:
    """
    Sort tasks by deadline (ascending), then id.

    The id tie-break keeps placement deterministic when deadlines coincide.
    Pure function - no I/O.
    """
    return sorted(tasks, key=lambda t: (t.target_date, t.id))


def filter_active(tasks: list[Task]) -> list[Task]:
    """Filter out archived tasks."""
    return [t for t in tasks if not t.archived]


def recently_archived(tasks: list[Task], as_of: datetime, days: int = 7) -> list[Task]:
    """Archived tasks created within the last N days, newest first."""
    cutoff = as_of - timedelta(days=days)
    recent = [t for t in tasks if t.archived and t.date_created > cutoff]
    return sorted(recent, key=lambda t: t.date_created, reverse=True)
