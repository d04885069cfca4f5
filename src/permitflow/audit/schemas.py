"""Pydantic schemas for activity log endpoints.

Activity entries are read-only over the API; they are written only by the
lifecycle components as a side effect of state changes.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class ActivityEntryResponse(BaseModel):
    """Response schema for one activity log entry."""
    id: UUID = Field(..., description="Entry unique identifier")
    permit_package_id: UUID = Field(..., description="Permit the entry belongs to")
    user_id: Optional[UUID] = Field(None, description="Acting user")
    activity_type: str = Field(..., description="StatusChange, TaskCreated, DocumentUploaded, ...")
    description: str
    old_value: Optional[str] = None
    new_value: Optional[str] = None
    metadata: Optional[Dict[str, Any]] = Field(
        None,
        validation_alias="metadata_json",
        description="Additional context as JSON",
    )
    created_at: datetime = Field(..., description="Event timestamp")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": "550e8400-e29b-41d4-a716-446655440000",
                "permit_package_id": "7c9e6679-7425-40de-944b-e07fc1f90ae7",
                "user_id": "123e4567-e89b-12d3-a456-426614174000",
                "activity_type": "StatusChange",
                "description": "Status changed from InReview to Approved",
                "old_value": "InReview",
                "new_value": "Approved",
                "metadata": None,
                "created_at": "2025-01-15T10:30:00Z",
            }
        },
    )


class ActivityFeedResponse(BaseModel):
    """Most recent activity entries for a permit, newest first."""
    items: List[ActivityEntryResponse]
    limit: int
