"""Tasks domain module - task status and priority enums, command types"""

from .status import TaskStatus, TaskPriority
from .commands import CreateTaskCommand, UpdateTaskCommand

__all__ = ["TaskStatus", "TaskPriority", "CreateTaskCommand", "UpdateTaskCommand"]
