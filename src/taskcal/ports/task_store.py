"""Task store interface."""

from dataclasses import dataclass
from datetime import date
from typing import Any, Protocol

from taskcal.core.tasks import Task, TaskDraft, TaskType


@dataclass
class TaskFilter:
    """Optional narrowing for TaskStore.list(). Unset fields do not filter."""

    user_id: str | None = None
    on_date: date | str | None = None
    date_range: tuple[date | str, date | str] | None = None
    task_type: TaskType | None = None
    only_overdue: bool = False
    as_of: date | None = None  # reference day for only_overdue (default: today)


class TaskStore(Protocol):
    """Interface for persisting tasks in any backend."""

    async def create(self, draft: TaskDraft) -> str:
        """Validate and store a new task. Returns its id."""
        ...

    async def get(self, task_id: str) -> Task:
        """Fetch one task. Raises NotFoundError if absent."""
        ...

    async def update(self, task_id: str, changes: dict[str, Any]) -> None:
        """Apply field changes. Raises NotFoundError if absent."""
        ...

    async def delete(self, task_id: str) -> None:
        """Remove a task. Raises NotFoundError if already absent."""
        ...

    async def list(self, task_filter: TaskFilter | None = None) -> list[Task]:
        """List tasks, newest first."""
        ...
