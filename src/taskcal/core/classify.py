"""
Date-based task classification - pure functions, no I/O.

Every comparison is made on calendar days. A task whose date field cannot
be parsed simply does not match the predicate that needs that field.
"""

from dataclasses import dataclass
from datetime import date

from ..errors import ParseError
from .tasks import Task, TaskType, to_day

DUE_SOON_DAYS = 3


def _day(value: date | str | None) -> date | None:
    if value is None or value == "":
        return None
    try:
        return to_day(value)
    except ParseError:
        return None


def period_bounds(task: Task) -> tuple[date, date] | None:
    """Inclusive (start, end) of a period task, or None if unusable."""
    if task.task_type != TaskType.PERIOD:
        return None
    start = _day(task.start_date)
    end = _day(task.end_date)
    if start is None or end is None:
        return None
    return start, end


def days_until_due(task: Task, as_of: date | str) -> int | None:
    """Days until due date (negative if overdue). None without a usable deadline."""
    due = _day(task.due_date)
    ref = _day(as_of)
    if due is None or ref is None:
        return None
    return (due - ref).days


def occurs_on(task: Task, day: date | str) -> bool:
    """Whether the task shows up on the given calendar day."""
    target = _day(day)
    if target is None:
        return False

    if task.task_type == TaskType.PERIOD and task.end_date:
        bounds = period_bounds(task)
        if bounds is None:
            return False
        return bounds[0] <= target <= bounds[1]

    # Single tasks, and period tasks stored without an end date
    start = _day(task.start_date)
    return start is not None and start == target


def tasks_on_date(tasks: list[Task], day: date | str) -> list[Task]:
    """
    Tasks that apply to a day: single tasks starting that day plus
    period tasks whose range contains it.

    Keeps the input order.
    """
    return [t for t in tasks if occurs_on(t, day)]


def is_overdue(task: Task, as_of: date | str) -> bool:
    """Open single task whose deadline is strictly before as_of."""
    if task.completed or task.task_type == TaskType.PERIOD or not task.due_date:
        return False
    due = _day(task.due_date)
    ref = _day(as_of)
    if due is None or ref is None:
        return False
    return due < ref


def is_due_soon(task: Task, as_of: date | str, days: int = DUE_SOON_DAYS) -> bool:
    """Open single task whose deadline is 0..days days after as_of."""
    if task.completed or task.task_type == TaskType.PERIOD or not task.due_date:
        return False
    due = _day(task.due_date)
    ref = _day(as_of)
    if due is None or ref is None:
        return False
    return 0 <= (due - ref).days <= days


def is_active_period(task: Task, as_of: date | str) -> bool:
    """Open period task whose range contains as_of."""
    if task.completed:
        return False
    bounds = period_bounds(task)
    ref = _day(as_of)
    if bounds is None or ref is None:
        return False
    return bounds[0] <= ref <= bounds[1]


def tasks_in_range(tasks: list[Task], range_start: date | str, range_end: date | str) -> list[Task]:
    """
    Period tasks overlapping the closed interval [range_start, range_end].

    Reversed bounds are swapped, so the result does not depend on the
    order the bounds are given in.
    """
    lo = _day(range_start)
    hi = _day(range_end)
    if lo is None or hi is None:
        return []
    if lo > hi:
        lo, hi = hi, lo

    result = []
    for t in tasks:
        bounds = period_bounds(t)
        if bounds is None:
            continue
        start, end = bounds
        if start <= hi and end >= lo:
            result.append(t)
    return result


def filter_overdue(tasks: list[Task], as_of: date | str) -> list[Task]:
    """Filter to overdue tasks only."""
    return [t for t in tasks if is_overdue(t, as_of)]


def filter_due_soon(tasks: list[Task], as_of: date | str, days: int = DUE_SOON_DAYS) -> list[Task]:
    """Filter to tasks due within the next N days."""
    return [t for t in tasks if is_due_soon(t, as_of, days)]


def filter_active_periods(tasks: list[Task], as_of: date | str) -> list[Task]:
    """Filter to period tasks running on as_of."""
    return [t for t in tasks if is_active_period(t, as_of)]


def filter_completed(tasks: list[Task]) -> list[Task]:
    return [t for t in tasks if t.completed]


def sort_by_due(tasks: list[Task]) -> list[Task]:
    """
    Sort by effective deadline (due_date, or end_date for periods), then
    priority descending. Tasks without a usable deadline go last.
    """

    def sort_key(t: Task) -> tuple[int, int, int]:
        deadline = _day(t.end_date if t.task_type == TaskType.PERIOD else t.due_date)
        if deadline is None:
            return (1, 0, -t.priority.rank)
        return (0, deadline.toordinal(), -t.priority.rank)

    return sorted(tasks, key=sort_key)


@dataclass(frozen=True)
class TaskSummary:
    """Dashboard counts for one reference day."""

    overdue_count: int
    due_soon_count: int
    active_period_count: int
    completed_count: int

    def to_dict(self) -> dict[str, int]:
        return {
            "overdueCount": self.overdue_count,
            "dueSoonCount": self.due_soon_count,
            "activePeriodCount": self.active_period_count,
            "completedCount": self.completed_count,
        }


def summarize(tasks: list[Task], as_of: date | str, days: int = DUE_SOON_DAYS) -> TaskSummary:
    """Count overdue, due soon, active period and completed tasks."""
    return TaskSummary(
        overdue_count=sum(1 for t in tasks if is_overdue(t, as_of)),
        due_soon_count=sum(1 for t in tasks if is_due_soon(t, as_of, days)),
        active_period_count=sum(1 for t in tasks if is_active_period(t, as_of)),
        completed_count=sum(1 for t in tasks if t.completed),
    )
