"""Per-operation command types for the permit lifecycle.

Each command names exactly the fields its operation may touch. Enum-typed
fields are validated by the lifecycle manager, not by pydantic, so a bad value
surfaces as the domain ValidationError rather than a schema error.
"""

from datetime import datetime
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class PermitCommand(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")


class CreatePermitCommand(PermitCommand):
    """Intake of a new permit package."""
    customer_id: UUID = Field(..., alias="customerId")
    contractor_id: UUID = Field(..., alias="contractorId")
    project_name: str = Field(..., min_length=1, alias="projectName")
    project_address: str = Field(..., min_length=1, alias="projectAddress")
    permit_type: str = Field(..., alias="permitType")
    county: Optional[str] = None
    jurisdiction_notes: Optional[str] = Field(None, alias="jurisdictionNotes")
    permit_number: Optional[str] = Field(None, alias="permitNumber")
    internal_stage: Optional[str] = Field(None, alias="internalStage")
    target_issue_date: Optional[datetime] = Field(None, alias="targetIssueDate")
    billing_notes: Optional[str] = Field(None, alias="billingNotes")


class StatusChangeCommand(PermitCommand):
    status: str
    internal_stage: Optional[str] = Field(None, alias="internalStage")
    note: Optional[str] = None


class InternalStageChangeCommand(PermitCommand):
    internal_stage: str = Field(..., alias="internalStage")


class BillingChangeCommand(PermitCommand):
    billing_status: str = Field(..., alias="billingStatus")


class PermitFieldsPatch(PermitCommand):
    """Plain field edits with no state-machine semantics.

    Only fields explicitly set by the caller are applied
    (model_dump(exclude_unset=True)).
    """
    project_name: Optional[str] = Field(None, min_length=1, alias="projectName")
    project_address: Optional[str] = Field(None, min_length=1, alias="projectAddress")
    county: Optional[str] = None
    jurisdiction_notes: Optional[str] = Field(None, alias="jurisdictionNotes")
    permit_number: Optional[str] = Field(None, alias="permitNumber")
    target_issue_date: Optional[datetime] = Field(None, alias="targetIssueDate")
    billing_notes: Optional[str] = Field(None, alias="billingNotes")
