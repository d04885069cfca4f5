"""Pydantic schemas for the Customers API"""

from datetime import datetime
from typing import List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class CustomerResponse(BaseModel):
    """Response schema for a customer"""
    id: UUID
    name: str
    contact_name: Optional[str] = None
    phone: Optional[str] = None
    email: Optional[str] = None
    main_address: Optional[str] = None
    notes: Optional[str] = None
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)


class PermitSummary(BaseModel):
    """A permit package as listed under its customer or contractor"""
    id: UUID
    project_name: str
    project_address: str
    permit_type: str
    status: str
    permit_number: Optional[str] = None
    opened_date: datetime

    model_config = ConfigDict(from_attributes=True)


class CustomerDetailResponse(CustomerResponse):
    """Customer with its permit packages, newest first"""
    permit_packages: List[PermitSummary] = []


class CustomerListResponse(BaseModel):
    """Paginated customer list"""
    items: List[CustomerResponse]
    total: int
    page: int
    per_page: int
    total_pages: int
