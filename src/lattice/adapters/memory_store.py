"""In-memory task store adapter."""

from lattice.core.tasks import Task


class TaskNotFoundError(KeyError):
    """Raised when a store is asked to change a task it does not hold."""

    pass


class InMemoryTaskStore:
    """
    Dict-backed task storage.

    Implements TaskStore protocol. Tasks are immutable, so archiving replaces
    the stored copy.
    """

    def __init__(self, tasks: list[Task] | None = None):
        self._tasks: dict[str, Task] = {t.id: t for t in tasks or []}

    def list_tasks(self) -> list[Task]:
        return list(self._tasks.values())

    def find_by_id(self, task_id: str) -> Task | None:
        return self._tasks.get(task_id)

    def set_archived(self, task_id: str, archived: bool) -> None:
        task = self._tasks.get(task_id)
        if task is None:
            raise TaskNotFoundError(task_id)
        self._tasks[task_id] = task.with_archived(archived)

    def add(self, task: Task) -> None:
        self._tasks[task.id] = task

    def remove(self, task_id: str) -> None:
        self._tasks.pop(task_id, None)
