"""Activity feed endpoint.

Read-only. Entries are immutable and cannot be created, updated or deleted
through the API.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from ..config import get_settings
from ..database import get_db
from ..dependencies import get_audit_log
from ..errors import NotFoundError
from ..models.permit_package import PermitPackage
from .schemas import ActivityEntryResponse, ActivityFeedResponse
from .service import ActivityAuditLog


router = APIRouter(tags=["Activity"])


@router.get(
    "/permits/{permit_id}/activity",
    response_model=ActivityFeedResponse,
    summary="Recent activity of a permit",
    description="Most recent entries first. Defaults to ACTIVITY_FEED_LIMIT entries.",
)
def get_activity(
    permit_id: UUID,
    limit: Optional[int] = Query(None, ge=1, le=500, description="Maximum entries to return"),
    db: Session = Depends(get_db),
    audit: ActivityAuditLog = Depends(get_audit_log),
) -> ActivityFeedResponse:
    if db.get(PermitPackage, permit_id) is None:
        raise NotFoundError("Permit", permit_id)

    effective_limit = limit or get_settings().ACTIVITY_FEED_LIMIT
    entries = audit.recent(permit_id, limit=effective_limit)
    return ActivityFeedResponse(
        items=[ActivityEntryResponse.model_validate(e) for e in entries],
        limit=effective_limit,
    )
