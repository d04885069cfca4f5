"""Pydantic schemas for the Permits API

Request bodies are the command types from domain.permits; this module holds
the response models.
"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PermitResponse(BaseModel):
    """Response schema for a permit package"""
    id: UUID
    customer_id: UUID
    contractor_id: UUID
    project_name: str
    project_address: str
    county: Optional[str] = None
    jurisdiction_notes: Optional[str] = None
    permit_type: str
    status: str
    internal_stage: Optional[str] = None
    billing_status: str
    permit_number: Optional[str] = None
    opened_date: datetime
    target_issue_date: Optional[datetime] = None
    closed_date: Optional[datetime] = None
    sent_to_billing_at: Optional[datetime] = None
    billing_notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PermitListResponse(BaseModel):
    """Response schema for GET /permits"""
    items: List[PermitResponse]
    total: int = Field(..., ge=0)
