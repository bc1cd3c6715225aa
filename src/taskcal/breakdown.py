"""Breakdown orchestration - provider call with a bounded wait and offline fallback."""

import asyncio
import logging

from .core.breakdown import FALLBACK_TIPS, BreakdownRequest, BreakdownResult, fallback_breakdown
from .core.tasks import Task
from .errors import ProviderError
from .ports.suggestion_provider import SuggestionProvider

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 20.0


class BreakdownOrchestrator:
    """
    Gets subtask proposals for a task.

    Provider failures never reach the caller: a ProviderError, or no answer
    within timeout seconds, falls back to the deterministic breakdown.
    Does not touch storage.
    """

    def __init__(self, provider: SuggestionProvider | None = None, timeout: float = DEFAULT_TIMEOUT):
        self.provider = provider
        self.timeout = timeout

    async def request_breakdown(self, task: Task) -> BreakdownResult:
        """Propose subtasks for task."""
        request = BreakdownRequest.from_task(task)

        if self.provider is None:
            logger.info("No suggestion provider configured, using offline breakdown")
            return fallback_breakdown(request)

        try:
            return await asyncio.wait_for(self.provider.propose(request), timeout=self.timeout)
        except ProviderError as e:
            logger.warning(f"Suggestion provider failed for task {task.id}: {e}")
        except asyncio.TimeoutError:
            logger.warning(f"Suggestion provider timed out after {self.timeout}s for task {task.id}")

        logger.info("Using offline breakdown")
        return fallback_breakdown(request)

    async def request_schedule_tips(self, tasks: list[Task]) -> list[str]:
        """Scheduling tips for a set of tasks."""
        if self.provider is None or not tasks:
            return list(FALLBACK_TIPS)

        task_requests = [BreakdownRequest.from_task(t) for t in tasks]
        try:
            tips = await asyncio.wait_for(self.provider.advise(task_requests), timeout=self.timeout)
        except ProviderError as e:
            logger.warning(f"Suggestion provider failed to advise: {e}")
            return list(FALLBACK_TIPS)
        except asyncio.TimeoutError:
            logger.warning(f"Suggestion provider timed out after {self.timeout}s while advising")
            return list(FALLBACK_TIPS)

        return tips or list(FALLBACK_TIPS)
