"""Task status and priority enums."""

from enum import Enum


class TaskStatus(str, Enum):
    """Status values for a Task.

    completed_at is set exactly when a task enters COMPLETED and cleared
    when it leaves it.
    """
    NOT_STARTED = "NotStarted"
    IN_PROGRESS = "InProgress"
    WAITING = "Waiting"
    COMPLETED = "Completed"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
