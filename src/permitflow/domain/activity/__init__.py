"""Activity domain module - audit entry types"""

from .types import ActivityType

__all__ = ["ActivityType"]
