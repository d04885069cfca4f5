"""Manual task management for permit packages.

Auto-created tasks come from automation.TaskAutomationEngine; once created
they are ordinary tasks and are edited through this service like any other.
"""

import logging
from typing import List
from uuid import UUID

from sqlalchemy import case
from sqlalchemy.orm import Session

from ..audit.service import ActivityAuditLog
from ..database import unit_of_work
from ..domain.activity import ActivityType
from ..domain.permits import parse_enum
from ..domain.tasks import CreateTaskCommand, TaskPriority, TaskStatus, UpdateTaskCommand
from ..errors import NotFoundError, ValidationError
from ..models.base import utcnow
from ..models.permit_package import PermitPackage
from ..models.task import Task

logger = logging.getLogger(__name__)

# Workflow order used when listing tasks
STATUS_ORDER = {status.value: index for index, status in enumerate(TaskStatus)}


class TaskService:
    """Create, update, delete and list the tasks of a permit.

    completed_at is set when a task enters Completed and cleared when it
    leaves it. Status changes are recorded as TaskCompleted (entering
    Completed) or FieldUpdated (any other change).
    """

    def __init__(self, db: Session, audit: ActivityAuditLog):
        self.db = db
        self.audit = audit

    def list_tasks(self, permit_id: UUID) -> List[Task]:
        """Tasks ordered by status (workflow order) then due date.

        Raises:
            NotFoundError: Permit does not exist
        """
        self._require_permit(permit_id)
        status_rank = case(STATUS_ORDER, value=Task.status, else_=len(STATUS_ORDER))
        return (
            self.db.query(Task)
            .filter(Task.permit_package_id == permit_id)
            .order_by(status_rank, Task.due_date.is_(None), Task.due_date, Task.created_at)
            .all()
        )

    def get_task(self, task_id: UUID) -> Task:
        task = self.db.get(Task, task_id)
        if task is None:
            raise NotFoundError("Task", task_id)
        return task

    def create_task(self, permit_id: UUID, command: CreateTaskCommand) -> Task:
        """Create a manual task and write a TaskCreated entry.

        Raises:
            ValidationError: Unknown status or priority
            NotFoundError: Permit does not exist
        """
        status = parse_enum(TaskStatus, command.status or TaskStatus.NOT_STARTED, "status")
        priority = (
            parse_enum(TaskPriority, command.priority, "priority").value
            if command.priority is not None
            else None
        )

        with unit_of_work(self.db):
            self._require_permit(permit_id)
            task = Task(
                permit_package_id=permit_id,
                name=command.name,
                description=command.description,
                status=status.value,
                assigned_to=command.assigned_to,
                due_date=command.due_date,
                priority=priority,
                completed_at=utcnow() if status == TaskStatus.COMPLETED else None,
            )
            self.db.add(task)
            self.db.flush()

            self.audit.record(
                permit_id=permit_id,
                activity_type=ActivityType.TASK_CREATED,
                description=f'Task "{task.name}" created',
                new_value=task.name,
                metadata={"taskId": str(task.id)},
            )

        logger.info(
            f"Task created: name={task.name}",
            extra={"permit_id": permit_id, "task_id": task.id},
        )
        return task

    def update_task(self, task_id: UUID, command: UpdateTaskCommand) -> Task:
        """Apply a partial update to a task.

        Raises:
            ValidationError: Unknown status/priority, or clearing the name
            NotFoundError: Task does not exist
        """
        changes = command.model_dump(exclude_unset=True)
        if "name" in changes and not changes["name"]:
            raise ValidationError("Task name cannot be empty")
        if changes.get("status") is None:
            changes.pop("status", None)
        new_status = (
            parse_enum(TaskStatus, changes["status"], "status")
            if "status" in changes
            else None
        )
        if changes.get("priority") is not None:
            changes["priority"] = parse_enum(TaskPriority, changes["priority"], "priority").value

        with unit_of_work(self.db):
            task = self.get_task(task_id)
            old_status = TaskStatus(task.status)

            for field, value in changes.items():
                if field != "status":
                    setattr(task, field, value)

            if new_status is not None and new_status != old_status:
                task.status = new_status.value
                if new_status == TaskStatus.COMPLETED:
                    task.completed_at = utcnow()
                    activity_type = ActivityType.TASK_COMPLETED
                else:
                    activity_type = ActivityType.FIELD_UPDATED
                    if old_status == TaskStatus.COMPLETED:
                        task.completed_at = None

                self.audit.record(
                    permit_id=task.permit_package_id,
                    activity_type=activity_type,
                    description=f'Task "{task.name}" status changed to {new_status.value}',
                    old_value=old_status.value,
                    new_value=new_status.value,
                    metadata={"taskId": str(task.id)},
                )
                logger.info(
                    f"Task status changed: {old_status.value} -> {new_status.value}",
                    extra={"permit_id": task.permit_package_id, "task_id": task.id},
                )

        return task

    def delete_task(self, task_id: UUID) -> None:
        """Raises NotFoundError if the task does not exist."""
        with unit_of_work(self.db):
            task = self.get_task(task_id)
            permit_id = task.permit_package_id
            self.db.delete(task)

        logger.info(
            "Task deleted",
            extra={"permit_id": permit_id, "task_id": task_id},
        )

    def _require_permit(self, permit_id: UUID) -> None:
        if self.db.get(PermitPackage, permit_id) is None:
            raise NotFoundError("Permit", permit_id)
