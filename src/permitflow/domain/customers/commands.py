"""Command types for customer management."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator


def blank_to_none(value):
    """Treat an empty form field as "not given"."""
    if isinstance(value, str) and not value.strip():
        return None
    return value


class CustomerCommand(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    @field_validator("email", mode="before", check_fields=False)
    @classmethod
    def empty_email_is_none(cls, v):
        return blank_to_none(v)


class CreateCustomerCommand(CustomerCommand):
    name: str = Field(..., min_length=1)
    contact_name: Optional[str] = Field(None, alias="contactName")
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    main_address: Optional[str] = Field(None, alias="mainAddress")
    notes: Optional[str] = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Customer name cannot be empty")
        return v.strip()


class UpdateCustomerCommand(CustomerCommand):
    """Partial customer update; only fields set by the caller are applied."""
    name: Optional[str] = Field(None, min_length=1)
    contact_name: Optional[str] = Field(None, alias="contactName")
    phone: Optional[str] = None
    email: Optional[EmailStr] = None
    main_address: Optional[str] = Field(None, alias="mainAddress")
    notes: Optional[str] = None
