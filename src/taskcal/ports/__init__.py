"""Ports - interfaces/protocols for external dependencies."""

from .task_store import TaskFilter, TaskStore
from .suggestion_provider import SuggestionProvider

__all__ = [
    "TaskFilter",
    "TaskStore",
    "SuggestionProvider",
]
