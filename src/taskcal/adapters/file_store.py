"""File-based task storage adapter."""

import json
import logging
from pathlib import Path
from typing import Any

from taskcal.core.tasks import Task, TaskDraft, apply_changes, new_task
from taskcal.errors import NotFoundError, ParseError, StoreError
from taskcal.ports.task_store import TaskFilter

from .memory_store import select_tasks

logger = logging.getLogger(__name__)


class FileTaskStore:
    """
    JSON file task storage.

    Implements TaskStore protocol. All tasks live in one document:
    {"tasks": [record, ...]} using the persisted field names. The file is
    re-read on every call and replaced atomically on every write.
    """

    def __init__(self, path: Path | str):
        self.path = Path(path).expanduser()
        self.path.parent.mkdir(parents=True, exist_ok=True)

    def _read(self) -> list[Task]:
        """Load all tasks. A missing file is an empty store."""
        if not self.path.exists():
            return []

        try:
            data = json.loads(self.path.read_text())
        except (OSError, json.JSONDecodeError) as e:
            raise ParseError(f"Unreadable task file {self.path}: {e}")

        records = data.get("tasks") if isinstance(data, dict) else None
        if not isinstance(records, list):
            raise ParseError(f"Unreadable task file {self.path}: missing 'tasks' list")

        tasks = []
        for record in records:
            try:
                tasks.append(Task.from_record(record))
            except (KeyError, TypeError, AttributeError):
                logger.warning(f"Skipping malformed task record in {self.path}: {record!r}")
        return tasks

    def _write(self, tasks: list[Task]) -> None:
        tmp = self.path.with_name(self.path.name + ".tmp")
        try:
            tmp.write_text(
                json.dumps({"tasks": [t.to_record() for t in tasks]}, indent=2, ensure_ascii=False)
            )
            tmp.replace(self.path)
        except OSError as e:
            raise StoreError(f"Could not write task file {self.path}: {e}")

    def _find(self, tasks: list[Task], task_id: str) -> int:
        for i, t in enumerate(tasks):
            if t.id == task_id:
                return i
        raise NotFoundError(task_id)

    async def create(self, draft: TaskDraft) -> str:
        task = new_task(draft)
        tasks = self._read()
        tasks.append(task)
        self._write(tasks)
        logger.debug(f"Created task {task.id} in {self.path}")
        return task.id

    async def get(self, task_id: str) -> Task:
        tasks = self._read()
        return tasks[self._find(tasks, task_id)]

    async def update(self, task_id: str, changes: dict[str, Any]) -> None:
        tasks = self._read()
        i = self._find(tasks, task_id)
        tasks[i] = apply_changes(tasks[i], changes)
        self._write(tasks)
        logger.debug(f"Updated task {task_id}: {sorted(changes)}")

    async def delete(self, task_id: str) -> None:
        tasks = self._read()
        del tasks[self._find(tasks, task_id)]
        self._write(tasks)
        logger.debug(f"Deleted task {task_id} from {self.path}")

    async def list(self, task_filter: TaskFilter | None = None) -> list[Task]:
        return select_tasks(self._read(), task_filter)
