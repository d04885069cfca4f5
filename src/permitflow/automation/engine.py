"""Task automation engine.

Evaluates automation rules for a status transition and ensures the tasks
they describe exist, writing a TaskCreated activity entry for every task it
actually inserts.

Idempotency: the existence check by (permit, name) is not atomic on its own.
Auto-created tasks also carry automation_key, which is unique per permit, so
a concurrent duplicate insert fails inside its SAVEPOINT and is retried once;
the retry sees the winner's row and becomes a no-op.
"""

import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from ..audit.service import ActivityAuditLog
from ..domain.activity import ActivityType
from ..domain.permits import PermitStatus
from ..errors import ConflictError
from ..models.permit_package import PermitPackage
from ..models.task import Task
from ..observability.metrics import (
    auto_tasks_created_total,
    automation_conflicts_total,
    count_after_commit,
)
from .rules import AutomationRuleRegistry, TaskTemplate

logger = logging.getLogger(__name__)

MAX_INSERT_ATTEMPTS = 2


class TaskAutomationEngine:
    """Creates tasks in response to permit status transitions.

    Runs inside the caller's unit of work; it flushes but never commits.

    Example:
        engine = TaskAutomationEngine(db, audit)
        created = engine.evaluate(permit, PermitStatus.IN_REVIEW, PermitStatus.APPROVED)
    """

    def __init__(
        self,
        db: Session,
        audit: ActivityAuditLog,
        registry: Optional[AutomationRuleRegistry] = None,
    ):
        self.db = db
        self.audit = audit
        self.registry = registry or AutomationRuleRegistry()

    def evaluate(
        self,
        permit: PermitPackage,
        old_status: PermitStatus,
        new_status: PermitStatus,
    ) -> List[Task]:
        """Apply every rule matching old_status -> new_status.

        Returns:
            Tasks inserted by this call (empty when all already existed)
        """
        created = []
        for rule in self.registry.rules_for(old_status, new_status):
            task, was_created = self.ensure_task(permit.id, rule.template, rule_name=rule.name)
            if was_created:
                created.append(task)
        return created

    def ensure_task(
        self,
        permit_id: UUID,
        template: TaskTemplate,
        rule_name: Optional[str] = None,
    ) -> Tuple[Task, bool]:
        """Make sure a task built from template exists for the permit.

        Args:
            permit_id: Permit package id
            template: Task blueprint
            rule_name: Rule label used for metrics (defaults to template key)

        Returns:
            (task, created) where created is False if the task already existed

        Raises:
            ConflictError: If the insert still conflicts after one retry
        """
        label = rule_name or template.key

        for attempt in range(1, MAX_INSERT_ATTEMPTS + 1):
            existing = self._find_existing(permit_id, template)
            if existing is not None:
                logger.debug(
                    f"Automated task already exists: key={template.key}, task_id={existing.id}",
                    extra={"permit_id": permit_id},
                )
                return existing, False

            task = Task(
                permit_package_id=permit_id,
                name=template.name,
                description=template.description,
                status=template.status.value,
                priority=template.priority.value,
                automation_key=template.key,
            )
            try:
                with self.db.begin_nested():
                    self.db.add(task)
                    self.db.flush()
            except IntegrityError:
                automation_conflicts_total.labels(rule=label).inc()
                logger.warning(
                    f"Conflict inserting automated task: key={template.key}, attempt={attempt}",
                    extra={"permit_id": permit_id},
                )
                continue

            self.audit.record(
                permit_id=permit_id,
                activity_type=ActivityType.TASK_CREATED,
                description=f'Task "{task.name}" auto-created',
                new_value=task.name,
                metadata={"taskId": str(task.id), "automationKey": template.key},
            )
            count_after_commit(self.db, auto_tasks_created_total, rule=label)
            logger.info(
                f"Automated task created: key={template.key}, task_id={task.id}",
                extra={"permit_id": permit_id, "task_id": task.id},
            )
            return task, True

        raise ConflictError(
            f"Could not create task '{template.name}' for permit {permit_id}: "
            f"conflicting insert"
        )

    def _find_existing(self, permit_id: UUID, template: TaskTemplate) -> Optional[Task]:
        return (
            self.db.query(Task)
            .filter(
                Task.permit_package_id == permit_id,
                or_(Task.name == template.name, Task.automation_key == template.key),
            )
            .first()
        )
