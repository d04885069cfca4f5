"""Command types for manual task operations."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class TaskCommand(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class CreateTaskCommand(TaskCommand):
    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    status: Optional[str] = None
    assigned_to: Optional[str] = Field(None, alias="assignedTo")
    due_date: Optional[datetime] = Field(None, alias="dueDate")
    priority: Optional[str] = None


class UpdateTaskCommand(TaskCommand):
    """Partial task update; only fields set by the caller are applied."""
    name: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = None
    status: Optional[str] = None
    assigned_to: Optional[str] = Field(None, alias="assignedTo")
    due_date: Optional[datetime] = Field(None, alias="dueDate")
    priority: Optional[str] = None
