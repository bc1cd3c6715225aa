"""Suggestion provider interface."""

from typing import Protocol

from taskcal.core.breakdown import BreakdownRequest, BreakdownResult


class SuggestionProvider(Protocol):
    """Interface for an external service that proposes subtasks."""

    async def propose(self, request: BreakdownRequest) -> BreakdownResult:
        """Propose a breakdown. Raises ProviderError on transport or parse failure."""
        ...

    async def advise(self, task_requests: list[BreakdownRequest]) -> list[str]:
        """Suggest how to schedule a set of tasks. Raises ProviderError on failure."""
        ...
