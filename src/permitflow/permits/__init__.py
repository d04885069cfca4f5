"""Permit packages - lifecycle state machine, intake and HTTP endpoints."""

from .lifecycle import PermitLifecycleManager
from .service import PermitService

__all__ = ["PermitLifecycleManager", "PermitService"]
