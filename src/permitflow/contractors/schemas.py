"""Pydantic schemas for the Contractors API"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict

from ..customers.schemas import PermitSummary


class ContractorResponse(BaseModel):
    """Response schema for a contractor"""
    id: UUID
    company_name: str
    license_number: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    address: Optional[str] = None
    preferred_contact_method: Optional[str] = None
    specialties: Optional[str] = None
    workers_comp_expiration_date: Optional[datetime] = None
    liability_expiration_date: Optional[datetime] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class ContractorDetailResponse(ContractorResponse):
    permit_packages: List[PermitSummary] = []


class ContractorListResponse(BaseModel):
    items: List[ContractorResponse]
    total: int
    page: int
    per_page: int
    total_pages: int
