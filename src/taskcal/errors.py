"""Domain errors shared by core, adapters and surfaces."""


class TaskError(Exception):
    """Base class for taskcal errors."""

    pass


class ValidationError(TaskError):
    """Raised when task data is rejected before reaching storage."""

    pass


class NotFoundError(TaskError):
    """Raised when a task id does not exist in the store."""

    def __init__(self, task_id: str):
        super().__init__(f"Task not found: {task_id}")
        self.task_id = task_id


class ProviderError(TaskError):
    """Raised when the suggestion provider fails (transport, status or payload)."""

    pass


class ParseError(TaskError):
    """Raised when a stored date or document cannot be parsed."""

    pass


class StoreError(TaskError):
    """Raised when the task file cannot be written."""

    pass
