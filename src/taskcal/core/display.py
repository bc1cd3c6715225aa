"""Pure formatting for task views - no I/O dependencies."""

from dataclasses import dataclass
from datetime import date

from .classify import (
    DUE_SOON_DAYS,
    TaskSummary,
    days_until_due,
    filter_active_periods,
    filter_due_soon,
    filter_overdue,
    is_active_period,
    is_overdue,
    sort_by_due,
    summarize,
    tasks_on_date,
)
from .tasks import Task, TaskType


def schedule_badge(task: Task) -> str:
    """Badge for the task's own schedule type ("" for single tasks)."""
    return "period" if task.task_type == TaskType.PERIOD else ""


def format_schedule(task: Task) -> str:
    """Human-readable dates for a task."""
    if task.task_type == TaskType.PERIOD:
        return f"{task.start_date} → {task.end_date or task.start_date}"
    if task.due_date:
        return f"{task.start_date}, due {task.due_date}"
    return task.start_date


def format_urgency(task: Task, as_of: date) -> str:
    """
    Short urgency note relative to as_of.

    Pure function - no I/O.
    """
    if task.completed:
        return "done"
    if task.task_type == TaskType.PERIOD:
        return "in progress" if is_active_period(task, as_of) else ""

    days = days_until_due(task, as_of)
    if days is None:
        return ""
    if is_overdue(task, as_of):
        return f"OVERDUE by {-days}d"
    if days == 0:
        return "due TODAY"
    return f"due in {days}d"


def format_task_line(task: Task, as_of: date) -> str:
    """
    Format a single task for display in a list.

    Pure function - no I/O.
    """
    check = "x" if task.completed else " "
    badge = schedule_badge(task)
    badge_str = f" [{badge}]" if badge else ""
    urgency = format_urgency(task, as_of)
    details = ", ".join(part for part in (format_schedule(task), urgency) if part)
    return f"- [{check}] {task.title}{badge_str} ({details}) !{task.priority.value} #{task.id}"


def format_summary(summary: TaskSummary, due_soon_days: int = DUE_SOON_DAYS) -> str:
    """Format dashboard counts as markdown lines."""
    return "\n".join(
        [
            f"- Overdue: {summary.overdue_count}",
            f"- Due soon ({due_soon_days} days): {summary.due_soon_count}",
            f"- Active periods: {summary.active_period_count}",
            f"- Completed: {summary.completed_count}",
        ]
    )


def format_task_list(tasks: list[Task], as_of: date, empty: str = "No tasks.") -> str:
    return "\n".join(format_task_line(t, as_of) for t in tasks) or empty


@dataclass
class Agenda:
    """Everything a daily view needs, assembled from one task snapshot."""

    day: date
    on_day: list[Task]
    overdue: list[Task]
    due_soon: list[Task]
    active_periods: list[Task]
    summary: TaskSummary
    due_soon_days: int = DUE_SOON_DAYS


def assemble_agenda(tasks: list[Task], day: date, due_soon_days: int = DUE_SOON_DAYS) -> Agenda:
    """
    Assemble the daily view from a task snapshot.

    Pure function - no I/O.
    """
    return Agenda(
        day=day,
        on_day=tasks_on_date(tasks, day),
        overdue=sort_by_due(filter_overdue(tasks, day)),
        due_soon=sort_by_due(filter_due_soon(tasks, day, due_soon_days)),
        active_periods=sort_by_due(filter_active_periods(tasks, day)),
        summary=summarize(tasks, day, due_soon_days),
        due_soon_days=due_soon_days,
    )


def format_agenda(agenda: Agenda) -> str:
    """
    Format an agenda into markdown sections.

    Pure function - no I/O.
    """
    day = agenda.day
    return f"""## {day.strftime("%A, %B %d, %Y")}

### Summary
{format_summary(agenda.summary, agenda.due_soon_days)}

### On this day
{format_task_list(agenda.on_day, day)}

### Overdue
{format_task_list(agenda.overdue, day, "None")}

### Due soon
{format_task_list(agenda.due_soon, day, "None")}

### Active periods
{format_task_list(agenda.active_periods, day, "None")}"""
