"""Command types for document metadata edits."""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field


class UpdateDocumentCommand(BaseModel):
    """Partial metadata update; only fields set by the caller are applied.

    is_verified and status describe the same review decision. Either may be
    given alone and the other follows; given together they must agree
    (is_verified is true exactly when status is Verified).
    """
    category: Optional[str] = None
    notes: Optional[str] = None
    is_required: Optional[bool] = Field(None, alias="isRequired")
    is_verified: Optional[bool] = Field(None, alias="isVerified")
    status: Optional[str] = None

    model_config = ConfigDict(populate_by_name=True, extra="forbid")
