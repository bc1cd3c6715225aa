"""Adapters - I/O implementations of ports."""

from .memory_store import MemoryTaskStore, select_tasks
from .file_store import FileTaskStore
from .gemini_api import GeminiSuggestionProvider

__all__ = [
    "MemoryTaskStore",
    "FileTaskStore",
    "GeminiSuggestionProvider",
    "select_tasks",
]
