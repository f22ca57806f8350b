"""JSON file task store adapter."""

import json
import logging
import uuid
from datetime import datetime
from pathlib import Path

from lattice.core.tasks import Task

from .memory_store import TaskNotFoundError

logger = logging.getLogger(__name__)


class JsonTaskStore:
    """
    File-based task storage.

    Implements TaskStore protocol. All tasks live in one JSON array that is
    rewritten on every change.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()

    def _read(self) -> list[Task]:
        if not self.path.exists():
            return []
        try:
            data = json.loads(self.path.read_text())
        except json.JSONDecodeError as e:
            logger.warning(f"Failed to parse {self.path}: {e}")
            return []
        tasks = []
        for item in data:
            try:
                tasks.append(Task.from_dict(item))
            except (KeyError, ValueError) as e:
                logger.warning(f"Skipping malformed task {item.get('id', '?')}: {e}")
        return tasks

    def _write(self, tasks: list[Task]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps([t.to_dict() for t in tasks], indent=2))

    def list_tasks(self) -> list[Task]:
        return self._read()

    def find_by_id(self, task_id: str) -> Task | None:
        return next((t for t in self._read() if t.id == task_id), None)

    def set_archived(self, task_id: str, archived: bool) -> None:
        tasks = self._read()
        for i, task in enumerate(tasks):
            if task.id == task_id:
                tasks[i] = task.with_archived(archived)
                self._write(tasks)
                return
        raise TaskNotFoundError(task_id)

    def create(self, title: str, duration_minutes: int, target_date: datetime) -> Task:
        """Add a new task with a generated id."""
        task = Task(
            id=uuid.uuid4().hex[:8],
            title=title,
            duration_minutes=duration_minutes,
            target_date=target_date,
            date_created=datetime.now(target_date.tzinfo),
        )
        self._write([*self._read(), task])
        return task

    def delete(self, task_id: str) -> None:
        """Remove a task for good."""
        tasks = self._read()
        kept = [t for t in tasks if t.id != task_id]
        if len(kept) == len(tasks):
            raise TaskNotFoundError(task_id)
        self._write(kept)
