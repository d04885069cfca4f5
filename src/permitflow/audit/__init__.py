"""Append-only activity audit log."""

from .service import ActivityAuditLog, ImmutableEntryError

__all__ = ["ActivityAuditLog", "ImmutableEntryError"]
