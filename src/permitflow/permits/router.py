"""Permits API Router - intake, lookup, field edits and state changes.

State-changing endpoints are thin adapters over PermitLifecycleManager;
domain errors are mapped to HTTP responses by the handlers in main.py.
"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from ..dependencies import get_lifecycle_manager, get_permit_service
from ..domain.permits import (
    BillingChangeCommand,
    CreatePermitCommand,
    InternalStageChangeCommand,
    PermitFieldsPatch,
    StatusChangeCommand,
)
from .lifecycle import PermitLifecycleManager
from .schemas import PermitListResponse, PermitResponse
from .service import PermitService


router = APIRouter(prefix="/permits", tags=["Permits"])


@router.post(
    "",
    response_model=PermitResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Open a permit package",
)
def create_permit(
    command: CreatePermitCommand,
    service: PermitService = Depends(get_permit_service),
) -> PermitResponse:
    return PermitResponse.model_validate(service.create_permit(command))


@router.get("", response_model=PermitListResponse, summary="List permit packages")
def list_permits(
    status_filter: Optional[str] = Query(None, alias="status", description="Filter by status"),
    service: PermitService = Depends(get_permit_service),
) -> PermitListResponse:
    permits = service.list_permits(status=status_filter)
    return PermitListResponse(
        items=[PermitResponse.model_validate(p) for p in permits],
        total=len(permits),
    )


@router.get("/{permit_id}", response_model=PermitResponse, summary="Get a permit package")
def get_permit(
    permit_id: UUID,
    service: PermitService = Depends(get_permit_service),
) -> PermitResponse:
    return PermitResponse.model_validate(service.get_permit(permit_id))


@router.patch(
    "/{permit_id}",
    response_model=PermitResponse,
    summary="Edit permit fields",
    description="Plain field edits (project name, address, notes, dates). "
                "Status, internal stage and billing status have their own endpoints.",
)
def update_permit(
    permit_id: UUID,
    patch: PermitFieldsPatch,
    manager: PermitLifecycleManager = Depends(get_lifecycle_manager),
) -> PermitResponse:
    return PermitResponse.model_validate(manager.update_fields(permit_id, patch))


@router.delete(
    "/{permit_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a permit package with its tasks, documents and activity",
)
def delete_permit(
    permit_id: UUID,
    service: PermitService = Depends(get_permit_service),
) -> Response:
    service.delete_permit(permit_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{permit_id}/status",
    response_model=PermitResponse,
    summary="Change permit status",
    description="""
    Move the permit to a new status. Setting the current status again is a
    no-op. An optional internalStage is applied in the same transaction.

    Transitions into Approved ensure a "Send to Billing" task exists.
    """
)
def set_status(
    permit_id: UUID,
    command: StatusChangeCommand,
    manager: PermitLifecycleManager = Depends(get_lifecycle_manager),
) -> PermitResponse:
    permit = manager.set_status(
        permit_id,
        command.status,
        note=command.note,
        internal_stage=command.internal_stage,
    )
    return PermitResponse.model_validate(permit)


@router.post(
    "/{permit_id}/internal-stage",
    response_model=PermitResponse,
    summary="Change permit internal stage",
)
def set_internal_stage(
    permit_id: UUID,
    command: InternalStageChangeCommand,
    manager: PermitLifecycleManager = Depends(get_lifecycle_manager),
) -> PermitResponse:
    return PermitResponse.model_validate(
        manager.set_internal_stage(permit_id, command.internal_stage)
    )


@router.post(
    "/{permit_id}/billing-status",
    response_model=PermitResponse,
    summary="Change permit billing status",
)
def set_billing_status(
    permit_id: UUID,
    command: BillingChangeCommand,
    manager: PermitLifecycleManager = Depends(get_lifecycle_manager),
) -> PermitResponse:
    return PermitResponse.model_validate(
        manager.set_billing_status(permit_id, command.billing_status)
    )
