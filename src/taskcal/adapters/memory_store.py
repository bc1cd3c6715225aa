"""In-memory task store adapter."""

import logging
from datetime import date
from typing import Any

from taskcal.core.classify import filter_overdue, tasks_in_range, tasks_on_date
from taskcal.core.tasks import Task, TaskDraft, apply_changes, new_task
from taskcal.errors import NotFoundError
from taskcal.ports.task_store import TaskFilter

logger = logging.getLogger(__name__)


def select_tasks(tasks: list[Task], task_filter: TaskFilter | None = None) -> list[Task]:
    """
    Order tasks newest first and narrow them by task_filter.

    Date-based narrowing goes through the classification engine so every
    store answers date queries the same way.
    """
    selected = sorted(tasks, key=lambda t: t.created_at, reverse=True)
    if task_filter is None:
        return selected

    f = task_filter
    if f.user_id:
        selected = [t for t in selected if t.user_id == f.user_id]
    if f.task_type is not None:
        selected = [t for t in selected if t.task_type == f.task_type]
    if f.on_date is not None:
        selected = tasks_on_date(selected, f.on_date)
    if f.date_range is not None:
        selected = tasks_in_range(selected, f.date_range[0], f.date_range[1])
    if f.only_overdue:
        selected = filter_overdue(selected, f.as_of or date.today())
    return selected


class MemoryTaskStore:
    """
    In-memory task store.

    Implements TaskStore protocol. Nothing survives the process; used for
    tests and as a scratch store.
    """

    def __init__(self, tasks: list[Task] | None = None):
        self._tasks: dict[str, Task] = {t.id: t for t in tasks or []}

    async def create(self, draft: TaskDraft) -> str:
        task = new_task(draft)
        self._tasks[task.id] = task
        logger.debug(f"Created task {task.id} ({task.task_type.value})")
        return task.id

    async def get(self, task_id: str) -> Task:
        task = self._tasks.get(task_id)
        if task is None:
            raise NotFoundError(task_id)
        return task

    async def update(self, task_id: str, changes: dict[str, Any]) -> None:
        task = await self.get(task_id)
        self._tasks[task_id] = apply_changes(task, changes)
        logger.debug(f"Updated task {task_id}: {sorted(changes)}")

    async def delete(self, task_id: str) -> None:
        if task_id not in self._tasks:
            raise NotFoundError(task_id)
        del self._tasks[task_id]
        logger.debug(f"Deleted task {task_id}")

    async def list(self, task_filter: TaskFilter | None = None) -> list[Task]:
        return select_tasks(list(self._tasks.values()), task_filter)
