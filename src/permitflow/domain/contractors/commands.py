"""Command types for contractor management."""

from datetime import datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

from ..customers.commands import blank_to_none


class ContactMethod(str, Enum):
    PHONE = "phone"
    EMAIL = "email"
    TEXT = "text"


class ContractorCommand(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    @field_validator(
        "email",
        "workers_comp_expiration_date",
        "liability_expiration_date",
        mode="before",
        check_fields=False,
    )
    @classmethod
    def empty_is_none(cls, v):
        return blank_to_none(v)


class CreateContractorCommand(ContractorCommand):
    company_name: str = Field(..., min_length=1, alias="companyName")
    license_number: Optional[str] = Field(None, alias="licenseNumber")
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    preferred_contact_method: Optional[ContactMethod] = Field(None, alias="preferredContactMethod")
    specialties: Optional[str] = None
    workers_comp_expiration_date: Optional[datetime] = Field(None, alias="workersCompExpirationDate")
    liability_expiration_date: Optional[datetime] = Field(None, alias="liabilityExpirationDate")
    notes: Optional[str] = None

    @field_validator("company_name")
    @classmethod
    def validate_company_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Company name cannot be empty")
        return v.strip()


class UpdateContractorCommand(ContractorCommand):
    """Partial contractor update; only fields set by the caller are applied."""
    company_name: Optional[str] = Field(None, min_length=1, alias="companyName")
    license_number: Optional[str] = Field(None, alias="licenseNumber")
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    address: Optional[str] = None
    preferred_contact_method: Optional[ContactMethod] = Field(None, alias="preferredContactMethod")
    specialties: Optional[str] = None
    workers_comp_expiration_date: Optional[datetime] = Field(None, alias="workersCompExpirationDate")
    liability_expiration_date: Optional[datetime] = Field(None, alias="liabilityExpirationDate")
    notes: Optional[str] = None
