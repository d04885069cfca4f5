"""Permit tasks - manual task service and HTTP endpoints."""

from .service import TaskService

__all__ = ["TaskService"]
