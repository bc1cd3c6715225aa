"""Functional core - pure business logic with no I/O."""

from .tasks import Task, TaskDraft, SubTask, TaskType, Priority, apply_changes, new_task, normalize_schedule
from .classify import (
    TaskSummary,
    tasks_on_date,
    tasks_in_range,
    is_overdue,
    is_due_soon,
    is_active_period,
    summarize,
)
from .breakdown import BreakdownRequest, BreakdownResult, SubtaskProposal, apply_breakdown, fallback_breakdown
from .display import Agenda, assemble_agenda, format_agenda, format_task_line, format_summary, schedule_badge

__all__ = [
    # Tasks
    "Task",
    "TaskDraft",
    "SubTask",
    "TaskType",
    "Priority",
    "apply_changes",
    "new_task",
    "normalize_schedule",
    # Classification
    "TaskSummary",
    "tasks_on_date",
    "tasks_in_range",
    "is_overdue",
    "is_due_soon",
    "is_active_period",
    "summarize",
    # Breakdown
    "BreakdownRequest",
    "BreakdownResult",
    "SubtaskProposal",
    "apply_breakdown",
    "fallback_breakdown",
    # Display
    "Agenda",
    "assemble_agenda",
    "format_agenda",
    "format_task_line",
    "format_summary",
    "schedule_badge",
]
