"""Pydantic schemas for the Documents API"""

from datetime import datetime
from typing import Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class DocumentResponse(BaseModel):
    """Response schema for a permit document (metadata only)"""
    id: UUID
    permit_package_id: UUID
    file_name: str
    file_type: str
    category: str
    uploaded_by: Optional[UUID] = None
    uploaded_at: datetime
    version_tag: str
    notes: Optional[str] = None
    is_required: bool
    is_verified: bool
    status: str
    file_size: int
    checksum: Optional[str] = None
    parent_document_id: Optional[UUID] = None
    version_group_id: Optional[UUID] = None

    model_config = ConfigDict(from_attributes=True)


class DocumentListResponse(BaseModel):
    """Response schema for GET /permits/{id}/documents

    `grouped` maps a version group id (or a document's own id when it has
    no group) to the documents in that group, in listing order.
    """
    items: List[DocumentResponse]
    grouped: Dict[str, List[DocumentResponse]]


class DocumentLineageResponse(BaseModel):
    """All revisions of one logical document, oldest first"""
    items: List[DocumentResponse]


class VerifyDocumentRequest(BaseModel):
    """Request body for POST /documents/{id}/verify"""
    is_verified: bool = Field(..., alias="isVerified")
    notes: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, extra="forbid")
