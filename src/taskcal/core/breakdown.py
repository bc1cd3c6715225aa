"""
Task breakdown model - pure logic, no I/O.

A provider proposes subtasks for one task. The payload is validated here
into typed proposals before anything is turned into Task records.
"""

import json
import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import Any

from ..errors import ParseError, ProviderError, ValidationError
from .tasks import Priority, Task, TaskType, new_task_id, to_day

_JSON_OBJECT = re.compile(r"\{[\s\S]*\}")

FALLBACK_SUGGESTIONS = [
    "Splitting a task into small units makes progress easier to track",
    "Make dependencies explicit and work through them in order",
    "Define a clear finish line for each phase before starting it",
]

FALLBACK_TIPS = [
    "Start with the highest-priority tasks",
    "Limit yourself to 3-5 tasks per day",
    "Review progress regularly and adjust the plan as needed",
    "Schedule important work for the hours you focus best",
]


@dataclass
class BreakdownRequest:
    """What the provider gets to see about a task."""

    title: str
    description: str
    priority: str
    due_date: str | None = None

    @classmethod
    def from_task(cls, task: Task) -> "BreakdownRequest":
        return cls(
            title=task.title,
            description=task.description,
            priority=task.priority.value,
            due_date=task.due_date,
        )

    def to_payload(self) -> dict:
        payload = {"title": self.title, "description": self.description, "priority": self.priority}
        if self.due_date:
            payload["dueDate"] = self.due_date
        return payload


@dataclass
class SubtaskProposal:
    """One proposed subtask. dependencies name other proposals in the same result."""

    title: str
    description: str
    estimated_days: int
    priority: Priority
    dependencies: list[str] = field(default_factory=list)

    def to_dict(self) -> dict:
        data = {
            "title": self.title,
            "description": self.description,
            "estimatedDays": self.estimated_days,
            "priority": self.priority.value,
        }
        if self.dependencies:
            data["dependencies"] = list(self.dependencies)
        return data


@dataclass
class BreakdownResult:
    """Proposed subtasks plus free-text tips."""

    subtasks: list[SubtaskProposal]
    suggestions: list[str] = field(default_factory=list)
    from_fallback: bool = False

    def to_dict(self) -> dict:
        return {
            "subtasks": [s.to_dict() for s in self.subtasks],
            "suggestions": list(self.suggestions),
        }


def extract_json_object(text: str) -> dict:
    """Pull the first {...} block out of model output and decode it."""
    match = _JSON_OBJECT.search(text or "")
    if not match:
        raise ProviderError("Invalid response format: no JSON object found")
    try:
        data = json.loads(match.group(0))
    except json.JSONDecodeError as e:
        raise ProviderError(f"Invalid response format: {e}")
    if not isinstance(data, dict):
        raise ProviderError("Invalid response format: expected a JSON object")
    return data


def _estimated_days(value: Any, title: str) -> int:
    if isinstance(value, bool) or not isinstance(value, (int, float, str)):
        raise ProviderError(f"Invalid estimatedDays for {title!r}: {value!r}")
    if isinstance(value, int):
        number = value
    else:
        try:
            as_float = float(value)
        except (ValueError, OverflowError):
            raise ProviderError(f"Invalid estimatedDays for {title!r}: {value!r}")
        if not as_float.is_integer():
            raise ProviderError(f"estimatedDays must be a positive integer for {title!r}: {value!r}")
        number = int(as_float)
    if number < 1:
        raise ProviderError(f"estimatedDays must be a positive integer for {title!r}: {value!r}")
    return number


def _proposal(item: Any) -> SubtaskProposal:
    if not isinstance(item, dict):
        raise ProviderError(f"Invalid subtask entry: {item!r}")

    title = item.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ProviderError("Subtask without a title")
    title = title.strip()

    description = item.get("description") or ""
    if not isinstance(description, str):
        raise ProviderError(f"Invalid description for {title!r}")

    try:
        priority = Priority(str(item.get("priority") or "medium").strip().lower())
    except ValueError:
        raise ProviderError(f"Invalid priority for {title!r}: {item.get('priority')!r}")

    deps = item.get("dependencies") or []
    if not isinstance(deps, list):
        raise ProviderError(f"Invalid dependencies for {title!r}")

    return SubtaskProposal(
        title=title,
        description=description,
        estimated_days=_estimated_days(item.get("estimatedDays"), title),
        priority=priority,
        dependencies=[d.strip() for d in deps if isinstance(d, str) and d.strip()],
    )


def parse_breakdown(payload: Any) -> BreakdownResult:
    """
    Validate a provider payload into a BreakdownResult.

    Raises ProviderError on any structural problem. Dependencies that do not
    name another subtask of the same result are dropped.
    """
    if not isinstance(payload, dict):
        raise ProviderError("Breakdown payload must be an object")

    raw_subtasks = payload.get("subtasks")
    if not isinstance(raw_subtasks, list) or not raw_subtasks:
        raise ProviderError("Breakdown payload has no subtasks")

    proposals = [_proposal(item) for item in raw_subtasks]
    titles = {p.title for p in proposals}
    for p in proposals:
        p.dependencies = [d for d in p.dependencies if d in titles and d != p.title]

    raw_suggestions = payload.get("suggestions") or []
    if not isinstance(raw_suggestions, list):
        raise ProviderError("Breakdown suggestions must be a list")
    suggestions = [s.strip() for s in raw_suggestions if isinstance(s, str) and s.strip()]

    return BreakdownResult(subtasks=proposals, suggestions=suggestions)


def fallback_breakdown(request: BreakdownRequest) -> BreakdownResult:
    """
    Deterministic plan/execute/verify breakdown used when no provider answers.

    Same request, same result. No network access.
    """
    plan = f"{request.title} - Plan phase"
    execute = f"{request.title} - Execute phase"
    verify = f"{request.title} - Verify phase"
    return BreakdownResult(
        subtasks=[
            SubtaskProposal(
                title=plan,
                description="Define the requirements and make a plan",
                estimated_days=1,
                priority=Priority.HIGH,
            ),
            SubtaskProposal(
                title=execute,
                description="Carry out the actual work",
                estimated_days=2,
                priority=Priority.MEDIUM,
                dependencies=[plan],
            ),
            SubtaskProposal(
                title=verify,
                description="Check the results and fix anything that needs it",
                estimated_days=1,
                priority=Priority.LOW,
                dependencies=[execute],
            ),
        ],
        suggestions=list(FALLBACK_SUGGESTIONS),
        from_fallback=True,
    )


def plan_schedule(proposals: list[SubtaskProposal], start: date) -> list[tuple[date, date]]:
    """
    Lay proposals out one after another from start.

    A proposal begins the day after its latest known dependency ends, or the
    day after the previous proposal when it has none. Returns (start, end)
    per proposal, inclusive. Raises ValidationError when an estimate runs
    past the last representable date.
    """
    finished: dict[str, date] = {}
    schedule = []
    prev_end: date | None = None

    for p in proposals:
        dep_ends = [finished[d] for d in p.dependencies if d in finished]
        try:
            if dep_ends:
                begin = max(dep_ends) + timedelta(days=1)
            elif prev_end is not None:
                begin = prev_end + timedelta(days=1)
            else:
                begin = start
            end = begin + timedelta(days=p.estimated_days - 1)
        except OverflowError:
            raise ValidationError(f"Cannot schedule {p.title!r}: {p.estimated_days} days runs past the calendar")
        finished[p.title] = end
        schedule.append((begin, end))
        prev_end = end

    return schedule


def apply_breakdown(
    original: Task,
    result: BreakdownResult,
    stagger: bool = False,
    created_at: datetime | None = None,
) -> list[Task]:
    """
    Map proposals to new single tasks that replace original.

    By default each task inherits original's start_date and due_date. With
    stagger=True each gets its own estimate-derived start/due dates instead.
    Storage is left to the caller.
    """
    created = (created_at or datetime.now()).isoformat()

    if stagger:
        try:
            start = to_day(original.start_date)
        except ParseError:
            raise ValidationError(f"Cannot schedule subtasks: invalid start_date {original.start_date!r}")
        dates = [(s.isoformat(), e.isoformat()) for s, e in plan_schedule(result.subtasks, start)]
    else:
        dates = [(original.start_date, original.due_date) for _ in result.subtasks]

    return [
        Task(
            id=new_task_id(),
            title=p.title,
            start_date=start_date,
            task_type=TaskType.SINGLE,
            description=p.description,
            due_date=due_date,
            priority=p.priority,
            completed=False,
            created_at=created,
            user_id=original.user_id,
        )
        for p, (start_date, due_date) in zip(result.subtasks, dates)
    ]


def build_breakdown_prompt(request: BreakdownRequest) -> str:
    """Prompt asking a model for a JSON breakdown of one task."""
    return f"""Split the following task into concrete, actionable subtasks so it can be done efficiently.

Task:
- Title: {request.title}
- Description: {request.description}
- Due: {request.due_date or "not set"}
- Priority: {request.priority}

Reply with JSON in exactly this shape:
{{
  "subtasks": [
    {{
      "title": "Concrete subtask title",
      "description": "Details",
      "estimatedDays": 1,
      "priority": "low" | "medium" | "high",
      "dependencies": ["Title of a subtask this one depends on (if any)"]
    }}
  ],
  "suggestions": [
    "Extra tips for getting the task done"
  ]
}}

Notes:
- Subtasks must be specific and actionable
- Each subtask should take 1-3 days
- List dependencies when there are any
"""


def build_schedule_prompt(requests: list[BreakdownRequest]) -> str:
    """Prompt asking a model for scheduling advice on a task list."""
    lines = []
    for i, r in enumerate(requests, start=1):
        lines.append(
            f"{i}. {r.title}\n"
            f"   Description: {r.description}\n"
            f"   Due: {r.due_date or 'not set'}\n"
            f"   Priority: {r.priority}"
        )
    task_list = "\n".join(lines)
    return f"""Analyze the task list below and suggest an efficient schedule:

{task_list}

Cover:
- Task priorities
- An efficient order of execution
- Time management tips
- Points to watch out for

Answer as a bulleted list.
"""


def parse_tips(text: str) -> list[str]:
    """Split model output into one tip per non-empty line."""
    return [line.strip() for line in (text or "").splitlines() if line.strip()]
