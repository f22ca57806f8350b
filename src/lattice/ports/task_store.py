"""Task store interface."""

from typing import Protocol

from lattice.core.tasks import Task


class TaskStore(Protocol):
    """Interface for the persistence backend that owns tasks."""

    def list_tasks(self) -> list[Task]:
        """Snapshot of every task, archived ones included."""
        ...

    def find_by_id(self, task_id: str) -> Task | None:
        """Look up a task. Returns None if it no longer exists."""
        ...

    def set_archived(self, task_id: str, archived: bool) -> None:
        """Set or clear a task's archived flag."""
        ...
