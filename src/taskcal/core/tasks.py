"""Pure task domain logic - no I/O dependencies."""

import uuid
from dataclasses import dataclass, field, replace
from datetime import date, datetime
from enum import Enum
from typing import Any

from ..errors import ParseError, ValidationError


class TaskType(Enum):
    """How a task is anchored in time."""

    SINGLE = "single"  # one start date, optional deadline
    PERIOD = "period"  # inclusive start..end range


class Priority(Enum):
    """Task priority."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"

    @property
    def rank(self) -> int:
        """Numeric rank for sorting (high = 3)."""
        return {"low": 1, "medium": 2, "high": 3}[self.value]


# Fields that update() may touch. id and created_at are fixed at creation.
UPDATABLE_FIELDS = frozenset(
    {
        "title",
        "description",
        "task_type",
        "start_date",
        "due_date",
        "end_date",
        "priority",
        "completed",
        "user_id",
        "subtasks",
    }
)
IMMUTABLE_FIELDS = frozenset({"id", "created_at"})


def to_day(value: date | str | None) -> date:
    """
    Convert a day-like value to a date, dropping any time of day.

    Accepts date, datetime, or an ISO string ("2024-06-01" or
    "2024-06-01T10:00:00Z"). Raises ParseError for anything else.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value.strip():
        day_part = value.strip().split("T")[0].split(" ")[0]
        try:
            return date.fromisoformat(day_part)
        except ValueError:
            pass
    raise ParseError(f"Invalid date: {value!r}")


def new_task_id() -> str:
    """Generate an opaque unique task id."""
    return uuid.uuid4().hex


def _present(value: Any) -> bool:
    # Form inputs send "" for an untouched optional date
    return value is not None and value != ""


def _day_input(value: date | str | None, field_name: str) -> str:
    try:
        return to_day(value).isoformat()
    except ParseError:
        raise ValidationError(f"Invalid {field_name}: {value!r}")


def _enum_input(enum_cls: type[Enum], value: Any, field_name: str) -> Any:
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(str(value).strip().lower())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"Invalid {field_name}: {value!r} (expected one of: {allowed})")


def _title_input(title: Any) -> str:
    if not isinstance(title, str) or not title.strip():
        raise ValidationError("Title is required")
    return title.strip()


def normalize_schedule(
    task_type: TaskType,
    start_date: date | str | None,
    due_date: date | str | None = None,
    end_date: date | str | None = None,
) -> tuple[str, str | None, str | None]:
    """
    Apply the schedule rule shared by create and update.

    single: end_date is cleared, due_date stays optional.
    period: due_date is cleared, end_date defaults to start_date and
    must not fall before it.

    Returns (start_date, due_date, end_date) as ISO day strings.
    """
    start = _day_input(start_date, "start_date")

    if task_type == TaskType.SINGLE:
        due = _day_input(due_date, "due_date") if _present(due_date) else None
        return start, due, None

    end = _day_input(end_date, "end_date") if _present(end_date) else start
    if date.fromisoformat(end) < date.fromisoformat(start):
        raise ValidationError(f"end_date {end} is before start_date {start}")
    return start, None, end


@dataclass
class SubTask:
    """A lightweight nested item. Always single-style."""

    id: str
    title: str
    description: str = ""
    completed: bool = False
    due_date: str | None = None

    def to_record(self) -> dict:
        record = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "completed": self.completed,
        }
        if self.due_date:
            record["dueDate"] = self.due_date
        return record

    @classmethod
    def from_record(cls, data: dict) -> "SubTask":
        return cls(
            id=str(data.get("id", "")),
            title=data.get("title", "") or "",
            description=data.get("description", "") or "",
            completed=data.get("completed") is True,
            due_date=data.get("dueDate") or None,
        )


@dataclass
class TaskDraft:
    """A task that has not been stored yet (no id, no created_at)."""

    title: str
    start_date: date | str
    task_type: TaskType | str = TaskType.SINGLE
    description: str = ""
    due_date: date | str | None = None
    end_date: date | str | None = None
    priority: Priority | str = Priority.MEDIUM
    completed: bool = False
    user_id: str | None = None
    subtasks: list[SubTask] = field(default_factory=list)

    def normalized(self) -> "TaskDraft":
        """Validate and return a copy with enums and ISO day strings."""
        task_type = _enum_input(TaskType, self.task_type, "task_type")
        start, due, end = normalize_schedule(task_type, self.start_date, self.due_date, self.end_date)
        return replace(
            self,
            title=_title_input(self.title),
            description=self.description or "",
            task_type=task_type,
            start_date=start,
            due_date=due,
            end_date=end,
            priority=_enum_input(Priority, self.priority, "priority"),
            completed=bool(self.completed),
            subtasks=list(self.subtasks),
        )


@dataclass
class Task:
    """A stored task. Dates are ISO day strings exactly as persisted."""

    id: str
    title: str
    start_date: str
    task_type: TaskType = TaskType.SINGLE
    description: str = ""
    due_date: str | None = None
    end_date: str | None = None
    priority: Priority = Priority.MEDIUM
    completed: bool = False
    created_at: str = ""
    user_id: str | None = None
    subtasks: list[SubTask] = field(default_factory=list)

    @property
    def is_period(self) -> bool:
        return self.task_type == TaskType.PERIOD

    def to_draft(self) -> TaskDraft:
        return TaskDraft(
            title=self.title,
            start_date=self.start_date,
            task_type=self.task_type,
            description=self.description,
            due_date=self.due_date,
            end_date=self.end_date,
            priority=self.priority,
            completed=self.completed,
            user_id=self.user_id,
            subtasks=list(self.subtasks),
        )

    def to_record(self) -> dict:
        """Serialize using the persisted field names."""
        record = {
            "id": self.id,
            "title": self.title,
            "description": self.description,
            "date": self.start_date,
            "startDate": self.start_date,
            "taskType": self.task_type.value,
            "priority": self.priority.value,
            "completed": self.completed,
            "createdAt": self.created_at,
        }
        if self.due_date:
            record["dueDate"] = self.due_date
        if self.end_date:
            record["endDate"] = self.end_date
        if self.user_id:
            record["userId"] = self.user_id
        if self.subtasks:
            record["subtasks"] = [s.to_record() for s in self.subtasks]
        return record

    @classmethod
    def from_record(cls, data: dict) -> "Task":
        """
        Create Task from a persisted record.

        Lenient: values are kept as stored so that a malformed date is
        excluded by the classification engine instead of failing the load.
        """
        try:
            task_type = TaskType(data.get("taskType") or "single")
        except ValueError:
            task_type = TaskType.SINGLE
        try:
            priority = Priority(data.get("priority") or "medium")
        except ValueError:
            priority = Priority.MEDIUM

        start = data.get("startDate") or data.get("date") or ""
        # Only the field that matches the type survives, as in normalize_schedule
        is_period = task_type == TaskType.PERIOD
        return cls(
            id=str(data["id"]),
            title=data.get("title", "") or "",
            start_date=str(start),
            task_type=task_type,
            description=data.get("description", "") or "",
            due_date=None if is_period else (data.get("dueDate") or None),
            end_date=(data.get("endDate") or None) if is_period else None,
            priority=priority,
            completed=data.get("completed") is True,
            created_at=str(data.get("createdAt", "") or ""),
            user_id=data.get("userId") or None,
            subtasks=[SubTask.from_record(s) for s in data.get("subtasks") or []],
        )


def new_task(draft: TaskDraft, task_id: str | None = None, created_at: datetime | None = None) -> Task:
    """Turn a draft into a Task, validating it first."""
    d = draft.normalized()
    created = created_at or datetime.now()
    return Task(
        id=task_id or new_task_id(),
        title=d.title,
        start_date=d.start_date,
        task_type=d.task_type,
        description=d.description,
        due_date=d.due_date,
        end_date=d.end_date,
        priority=d.priority,
        completed=d.completed,
        created_at=created.isoformat(),
        user_id=d.user_id,
        subtasks=d.subtasks,
    )


def apply_changes(task: Task, changes: dict[str, Any]) -> Task:
    """
    Return a copy of task with changes applied.

    Goes through the same normalization as creation, so switching
    task_type clears the field that no longer applies.
    """
    fixed = IMMUTABLE_FIELDS.intersection(changes)
    if fixed:
        raise ValidationError(f"Field is immutable: {', '.join(sorted(fixed))}")
    unknown = set(changes) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(f"Unknown field: {', '.join(sorted(unknown))}")

    draft = replace(task.to_draft(), **changes).normalized()
    return replace(
        task,
        title=draft.title,
        start_date=draft.start_date,
        task_type=draft.task_type,
        description=draft.description,
        due_date=draft.due_date,
        end_date=draft.end_date,
        priority=draft.priority,
        completed=draft.completed,
        user_id=draft.user_id,
        subtasks=draft.subtasks,
    )
