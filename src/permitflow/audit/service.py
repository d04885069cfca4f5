"""Activity audit log for permit packages.

Append-only ledger of domain events. Only the lifecycle manager, the task
automation engine, the task service and the document ledger write to it,
always inside the same unit of work as the state change being described.

Activity types (domain.activity.ActivityType):
- StatusChange, BillingStatusChange
- TaskCreated, TaskCompleted
- DocumentUploaded, DocumentVerified
- FieldUpdated
"""

import logging
from datetime import datetime, timedelta
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import event
from sqlalchemy.orm import Session

from ..domain.activity import ActivityType
from ..models.activity_log import ActivityLogEntry
from ..models.base import utcnow
from ..models.permit_package import PermitPackage

logger = logging.getLogger(__name__)

TIMESTAMP_STEP = timedelta(microseconds=1)


class ImmutableEntryError(RuntimeError):
    """Raised when a flush would modify or delete an activity entry."""


@event.listens_for(Session, "before_flush")
def guard_activity_log_immutability(session, flush_context, instances):
    """Refuse updates to activity entries and deletes outside a permit cascade."""
    for instance in session.dirty:
        if isinstance(instance, ActivityLogEntry) and session.is_modified(instance):
            raise ImmutableEntryError(
                f"Activity log entry {instance.id} is immutable"
            )

    deleted_permits = {
        obj.id for obj in session.deleted if isinstance(obj, PermitPackage)
    }
    for instance in session.deleted:
        if (
            isinstance(instance, ActivityLogEntry)
            and instance.permit_package_id not in deleted_permits
        ):
            raise ImmutableEntryError(
                f"Activity log entry {instance.id} can only be removed with its permit"
            )


class ActivityAuditLog:
    """Append-only activity ledger bound to a session and an acting user.

    Example:
        audit = ActivityAuditLog(db, actor_id=current_user_id)
        audit.record(
            permit_id=permit.id,
            activity_type=ActivityType.STATUS_CHANGE,
            description="Status changed from New to Submitted",
            old_value="New",
            new_value="Submitted",
        )
    """

    def __init__(self, db: Session, actor_id: Optional[UUID] = None):
        self.db = db
        self.actor_id = actor_id
        self._last_created_at: Optional[datetime] = None

    def append(self, entry: ActivityLogEntry) -> ActivityLogEntry:
        """Add an entry to the log.

        The entry is flushed but not committed; the caller's unit of work
        decides whether it persists together with the change it documents.
        Entries appended through one log get strictly increasing created_at
        values, so several entries written in the same unit of work keep
        their order when read back newest first.

        Args:
            entry: Unsaved ActivityLogEntry

        Returns:
            ActivityLogEntry: The same entry, now with an id
        """
        if entry.user_id is None:
            entry.user_id = self.actor_id
        if entry.created_at is None:
            entry.created_at = self._next_timestamp()

        self.db.add(entry)
        self.db.flush()  # Get ID without committing transaction

        logger.debug(
            f"Activity appended: type={entry.activity_type}, "
            f"permit_id={entry.permit_package_id}, entry_id={entry.id}"
        )
        return entry

    def _next_timestamp(self) -> datetime:
        now = utcnow()
        if self._last_created_at is not None and now <= self._last_created_at:
            now = self._last_created_at + TIMESTAMP_STEP
        self._last_created_at = now
        return now

    def record(
        self,
        permit_id: UUID,
        activity_type: ActivityType,
        description: str,
        old_value: Optional[str] = None,
        new_value: Optional[str] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> ActivityLogEntry:
        """Build and append an entry in one call."""
        return self.append(ActivityLogEntry(
            permit_package_id=permit_id,
            activity_type=ActivityType(activity_type).value,
            description=description,
            old_value=old_value,
            new_value=new_value,
            metadata_json=metadata,
        ))

    def recent(self, permit_id: UUID, limit: int = 50) -> List[ActivityLogEntry]:
        """Most recent entries for a permit, newest first.

        Args:
            permit_id: Permit package id
            limit: Maximum number of entries to return

        Returns:
            List of at most `limit` entries ordered by created_at DESC, id DESC
        """
        return (
            self.db.query(ActivityLogEntry)
            .filter(ActivityLogEntry.permit_package_id == permit_id)
            .order_by(ActivityLogEntry.created_at.desc(), ActivityLogEntry.id.desc())
            .limit(limit)
            .all()
        )

    def for_permit(
        self,
        permit_id: UUID,
        activity_type: Optional[ActivityType] = None,
    ) -> List[ActivityLogEntry]:
        """All entries for a permit, newest first, optionally filtered by type."""
        query = self.db.query(ActivityLogEntry).filter(
            ActivityLogEntry.permit_package_id == permit_id
        )
        if activity_type is not None:
            query = query.filter(
                ActivityLogEntry.activity_type == ActivityType(activity_type).value
            )
        return query.order_by(
            ActivityLogEntry.created_at.desc(), ActivityLogEntry.id.desc()
        ).all()
