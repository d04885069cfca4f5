"""Contractors API Router"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from ..customers.schemas import PermitSummary
from ..dependencies import get_contractor_service
from ..domain.contractors import CreateContractorCommand, UpdateContractorCommand
from .schemas import ContractorDetailResponse, ContractorListResponse, ContractorResponse
from .service import ContractorService


router = APIRouter(prefix="/contractors", tags=["Contractors"])


@router.get(
    "",
    response_model=ContractorListResponse,
    summary="List contractors",
    description="Ordered by company name. search matches company name, license number, email or phone.",
)
def list_contractors(
    search: Optional[str] = Query(None, description="Case-insensitive substring"),
    page: int = Query(1, ge=1, description="Page number (1-based)"),
    per_page: int = Query(50, ge=1, le=100, description="Items per page"),
    service: ContractorService = Depends(get_contractor_service),
) -> ContractorListResponse:
    contractors, total = service.list_contractors(search=search, page=page, per_page=per_page)
    total_pages = (total + per_page - 1) // per_page if total > 0 else 0

    return ContractorListResponse(
        items=[ContractorResponse.model_validate(c) for c in contractors],
        total=total,
        page=page,
        per_page=per_page,
        total_pages=total_pages,
    )


@router.post(
    "",
    response_model=ContractorResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a contractor",
)
def create_contractor(
    command: CreateContractorCommand,
    service: ContractorService = Depends(get_contractor_service),
) -> ContractorResponse:
    return ContractorResponse.model_validate(service.create_contractor(command))


@router.get(
    "/{contractor_id}",
    response_model=ContractorDetailResponse,
    summary="Get a contractor with its permit packages",
)
def get_contractor(
    contractor_id: UUID,
    service: ContractorService = Depends(get_contractor_service),
) -> ContractorDetailResponse:
    contractor = service.get_contractor(contractor_id)
    response = ContractorDetailResponse.model_validate(contractor)
    response.permit_packages = [
        PermitSummary.model_validate(p)
        for p in sorted(contractor.permit_packages, key=lambda p: p.opened_date, reverse=True)
    ]
    return response


@router.patch("/{contractor_id}", response_model=ContractorResponse, summary="Update a contractor")
def update_contractor(
    contractor_id: UUID,
    command: UpdateContractorCommand,
    service: ContractorService = Depends(get_contractor_service),
) -> ContractorResponse:
    return ContractorResponse.model_validate(service.update_contractor(contractor_id, command))


@router.delete(
    "/{contractor_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a contractor",
    description="Refused with 400 while permit packages reference the contractor.",
)
def delete_contractor(
    contractor_id: UUID,
    service: ContractorService = Depends(get_contractor_service),
) -> Response:
    service.delete_contractor(contractor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
