"""Permit lifecycle manager.

Owns the three state fields of a permit package (status, internal stage,
billing status). Every mutating operation:

1. validates the target value against its closed enum (ValidationError)
2. loads the permit with a row lock (NotFoundError if missing)
3. no-ops when the value is unchanged (no activity entry)
4. persists the change and writes exactly one activity entry
5. for status changes, lets the TaskAutomationEngine react

all inside a single unit of work, so state and audit commit together.

Transitions are permissive by default: any enum member may follow any
other, and every transition taken is logged. Pass strict_transitions=True
to reject moves off the canonical workflow (including out of terminal
states).
"""

import logging
from typing import Any, Dict, Optional, Union
from uuid import UUID

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy.orm import Session

from ..audit.service import ActivityAuditLog
from ..automation.engine import TaskAutomationEngine
from ..database import unit_of_work
from ..domain.activity import ActivityType
from ..domain.permits import (
    BillingStatus,
    InternalStage,
    PermitFieldsPatch,
    PermitStatus,
    is_terminal,
    parse_enum,
    validate_transition,
)
from ..errors import NotFoundError, ValidationError
from ..models.base import utcnow
from ..models.permit_package import PermitPackage
from ..observability.metrics import count_after_commit, status_transitions_total

logger = logging.getLogger(__name__)

# Columns update_fields() may not null out
REQUIRED_FIELDS = ("project_name", "project_address")


def status_change_description(old: str, new: str, note: Optional[str] = None) -> str:
    """Human-readable text for a StatusChange entry.

    Example:
        >>> status_change_description("New", "Submitted")
        'Status changed from New to Submitted'
        >>> status_change_description("New", "Submitted", "Filed at county")
        'Filed at county (Status: New → Submitted)'
    """
    if note:
        return f"{note} (Status: {old} → {new})"
    return f"Status changed from {old} to {new}"


class PermitLifecycleManager:
    """State machine for permit status, internal stage and billing status.

    Example:
        audit = ActivityAuditLog(db, actor_id=user_id)
        manager = PermitLifecycleManager(db, audit, TaskAutomationEngine(db, audit))
        permit = manager.set_status(permit_id, "Approved", note="County approved plans")
    """

    def __init__(
        self,
        db: Session,
        audit: ActivityAuditLog,
        automation: Optional[TaskAutomationEngine] = None,
        strict_transitions: bool = False,
    ):
        self.db = db
        self.audit = audit
        self.automation = automation or TaskAutomationEngine(db, audit)
        self.strict_transitions = strict_transitions

    def set_status(
        self,
        permit_id: UUID,
        new_status: Union[PermitStatus, str],
        note: Optional[str] = None,
        internal_stage: Union[InternalStage, str, None] = None,
    ) -> PermitPackage:
        """Move a permit to a new status.

        Args:
            permit_id: Permit package id
            new_status: Target status (enum member or its string value)
            note: Optional note used as the activity description
            internal_stage: Optional internal stage applied in the same
                transaction and recorded in the entry's metadata

        Returns:
            PermitPackage: The permit after the change

        Raises:
            ValidationError: Unknown status/stage, or non-canonical
                transition in strict mode
            NotFoundError: Permit does not exist
        """
        target = parse_enum(PermitStatus, new_status, "status")
        stage = (
            parse_enum(InternalStage, internal_stage, "internalStage")
            if internal_stage is not None
            else None
        )

        with unit_of_work(self.db):
            permit = self._load_for_update(permit_id)
            current = PermitStatus(permit.status)

            if target == current:
                if stage is not None:
                    self._apply_internal_stage(permit, stage)
                else:
                    logger.debug(
                        f"Status unchanged ({current.value}), nothing to record",
                        extra={"permit_id": permit_id},
                    )
                return permit

            if self.strict_transitions:
                validate_transition(current, target)

            permit.status = target.value
            self._apply_status_timestamps(permit, current, target)

            metadata: Optional[Dict[str, Any]] = None
            if stage is not None and stage.value != permit.internal_stage:
                permit.internal_stage = stage.value
                metadata = {"internalStage": stage.value}

            self.audit.record(
                permit_id=permit.id,
                activity_type=ActivityType.STATUS_CHANGE,
                description=status_change_description(current.value, target.value, note),
                old_value=current.value,
                new_value=target.value,
                metadata=metadata,
            )
            count_after_commit(self.db, status_transitions_total, field="status", to=target.value)
            logger.info(
                f"Permit status changed: {current.value} -> {target.value}",
                extra={"permit_id": permit_id, "actor_id": self.audit.actor_id},
            )

            self.automation.evaluate(permit, current, target)

        return permit

    def set_internal_stage(
        self,
        permit_id: UUID,
        stage: Union[InternalStage, str],
    ) -> PermitPackage:
        """Change the internal stage; writes one FieldUpdated entry.

        Raises:
            ValidationError: Unknown stage
            NotFoundError: Permit does not exist
        """
        target = parse_enum(InternalStage, stage, "internalStage")

        with unit_of_work(self.db):
            permit = self._load_for_update(permit_id)
            self._apply_internal_stage(permit, target)

        return permit

    def set_billing_status(
        self,
        permit_id: UUID,
        new_status: Union[BillingStatus, str],
    ) -> PermitPackage:
        """Change the billing status; writes one BillingStatusChange entry.

        Entering SentToBilling stamps sent_to_billing_at the first time.

        Raises:
            ValidationError: Unknown billing status
            NotFoundError: Permit does not exist
        """
        target = parse_enum(BillingStatus, new_status, "billingStatus")

        with unit_of_work(self.db):
            permit = self._load_for_update(permit_id)
            current = BillingStatus(permit.billing_status)

            if target == current:
                logger.debug(
                    f"Billing status unchanged ({current.value}), nothing to record",
                    extra={"permit_id": permit_id},
                )
                return permit

            permit.billing_status = target.value
            if target == BillingStatus.SENT_TO_BILLING and permit.sent_to_billing_at is None:
                permit.sent_to_billing_at = utcnow()

            self.audit.record(
                permit_id=permit.id,
                activity_type=ActivityType.BILLING_STATUS_CHANGE,
                description=f"Billing status changed from {current.value} to {target.value}",
                old_value=current.value,
                new_value=target.value,
            )
            count_after_commit(self.db, status_transitions_total, field="billing_status", to=target.value)
            logger.info(
                f"Permit billing status changed: {current.value} -> {target.value}",
                extra={"permit_id": permit_id, "actor_id": self.audit.actor_id},
            )

        return permit

    def update_fields(
        self,
        permit_id: UUID,
        patch: Union[PermitFieldsPatch, Dict[str, Any]],
    ) -> PermitPackage:
        """Apply plain field edits. Writes no activity entries.

        Raises:
            ValidationError: Unknown or malformed fields
            NotFoundError: Permit does not exist
        """
        if not isinstance(patch, PermitFieldsPatch):
            try:
                patch = PermitFieldsPatch.model_validate(patch)
            except PydanticValidationError as e:
                raise ValidationError(f"Invalid permit fields: {e}")

        changes = patch.model_dump(exclude_unset=True)
        for field in REQUIRED_FIELDS:
            if field in changes and changes[field] is None:
                raise ValidationError(f"{field} cannot be empty")

        with unit_of_work(self.db):
            permit = self._load_for_update(permit_id)
            for field, value in changes.items():
                setattr(permit, field, value)

        logger.info(
            f"Permit fields updated: {sorted(changes)}",
            extra={"permit_id": permit_id},
        )
        return permit

    def _load_for_update(self, permit_id: UUID) -> PermitPackage:
        permit = (
            self.db.query(PermitPackage)
            .filter(PermitPackage.id == permit_id)
            .with_for_update()
            .first()
        )
        if permit is None:
            raise NotFoundError("Permit", permit_id)
        return permit

    def _apply_internal_stage(self, permit: PermitPackage, target: InternalStage) -> None:
        current = permit.internal_stage
        if current == target.value:
            logger.debug(
                f"Internal stage unchanged ({current}), nothing to record",
                extra={"permit_id": permit.id},
            )
            return

        permit.internal_stage = target.value
        self.audit.record(
            permit_id=permit.id,
            activity_type=ActivityType.FIELD_UPDATED,
            description=f"Internal stage changed from {current or 'none'} to {target.value}",
            old_value=current,
            new_value=target.value,
            metadata={"field": "internalStage"},
        )
        count_after_commit(self.db, status_transitions_total, field="internal_stage", to=target.value)
        logger.info(
            f"Permit internal stage changed: {current} -> {target.value}",
            extra={"permit_id": permit.id, "actor_id": self.audit.actor_id},
        )

    @staticmethod
    def _apply_status_timestamps(
        permit: PermitPackage,
        old: PermitStatus,
        new: PermitStatus,
    ) -> None:
        if is_terminal(new):
            if permit.closed_date is None:
                permit.closed_date = utcnow()
        elif is_terminal(old):
            permit.closed_date = None
