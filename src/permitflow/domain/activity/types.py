"""ActivityType enum for the permit activity log."""

from enum import Enum


class ActivityType(str, Enum):
    """Kinds of entries written to the activity log.

    Entries are append-only; see audit.service.ActivityAuditLog.
    """
    STATUS_CHANGE = "StatusChange"
    BILLING_STATUS_CHANGE = "BillingStatusChange"
    TASK_CREATED = "TaskCreated"
    TASK_COMPLETED = "TaskCompleted"
    DOCUMENT_UPLOADED = "DocumentUploaded"
    DOCUMENT_VERIFIED = "DocumentVerified"
    FIELD_UPDATED = "FieldUpdated"
