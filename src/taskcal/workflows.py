"""Shared workflow layer between CLI and Telegram.

Each function performs one user action against a TaskStore and returns
plain data for the caller to render.
"""

import logging
from datetime import date
from typing import Any

from .adapters.file_store import FileTaskStore
from .adapters.gemini_api import GeminiSuggestionProvider
from .breakdown import BreakdownOrchestrator
from .config import Config
from .core.breakdown import BreakdownResult, apply_breakdown
from .core.display import Agenda, assemble_agenda
from .core.tasks import Task, TaskDraft
from .ports.task_store import TaskFilter, TaskStore

logger = logging.getLogger(__name__)


def get_store(config: Config) -> FileTaskStore:
    """Resolve the task file from config."""
    return FileTaskStore(config.tasks_path)


def get_orchestrator(config: Config) -> BreakdownOrchestrator:
    """Build the breakdown orchestrator, offline-only when Gemini is not configured."""
    provider = None
    if config.has_gemini:
        provider = GeminiSuggestionProvider(
            api_key=config.gemini_api_key,
            model=config.gemini_model,
            base_url=config.gemini_base_url,
            timeout=config.breakdown_timeout,
        )
    return BreakdownOrchestrator(provider, timeout=config.breakdown_timeout)


def user_filter(config: Config, **kwargs: Any) -> TaskFilter:
    """TaskFilter scoped to the configured user (if any)."""
    return TaskFilter(user_id=config.user_id or None, **kwargs)


async def add_task(store: TaskStore, draft: TaskDraft) -> Task:
    """Create a task and return it as stored."""
    task_id = await store.create(draft)
    return await store.get(task_id)


async def edit_task(store: TaskStore, task_id: str, changes: dict[str, Any]) -> Task:
    """Apply changes to a task and return it as stored."""
    await store.update(task_id, changes)
    return await store.get(task_id)


async def toggle_complete(store: TaskStore, task_id: str) -> Task:
    """Flip the completed flag."""
    task = await store.get(task_id)
    return await edit_task(store, task_id, {"completed": not task.completed})


async def load_agenda(store: TaskStore, config: Config, day: date | None = None) -> Agenda:
    """Fetch the user's tasks and assemble the view for one day."""
    tasks = await store.list(user_filter(config))
    return assemble_agenda(tasks, day or date.today(), config.due_soon_days)


async def propose_breakdown(
    store: TaskStore,
    orchestrator: BreakdownOrchestrator,
    task_id: str,
) -> tuple[Task, BreakdownResult]:
    """Look up a task and get a breakdown proposal for it."""
    task = await store.get(task_id)
    result = await orchestrator.request_breakdown(task)
    return task, result


async def replace_with_breakdown(
    store: TaskStore,
    original: Task,
    result: BreakdownResult,
    stagger: bool = False,
) -> list[Task]:
    """
    Replace original with one task per proposed subtask.

    Every produced task is validated before the original is deleted. The
    store assigns the stored ids.
    """
    drafts = [t.to_draft().normalized() for t in apply_breakdown(original, result, stagger=stagger)]

    await store.delete(original.id)
    created = []
    for draft in drafts:
        created.append(await add_task(store, draft))

    logger.info(f"Replaced task {original.id} with {len(created)} subtasks")
    return created
