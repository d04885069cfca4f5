"""Customers API Router"""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from ..dependencies import get_customer_service
from ..domain.customers import CreateCustomerCommand, UpdateCustomerCommand
from .schemas import (
    CustomerDetailResponse,
    CustomerListResponse,
    CustomerResponse,
    PermitSummary,
)
from .service import CustomerService


router = APIRouter(prefix="/customers", tags=["Customers"])


@router.get(
    "",
    response_model=CustomerListResponse,
    summary="List customers",
    description="Ordered by name. search matches name, contact name, email or phone.",
)
def list_customers(
    search: Optional[str] = Query(None, description="Case-insensitive substring"),
    page: int = Query(1, ge=1, description="Page number (1-based)"),
    per_page: int = Query(50, ge=1, le=100, description="Items per page"),
    service: CustomerService = Depends(get_customer_service),
) -> CustomerListResponse:
    customers, total = service.list_customers(search=search, page=page, per_page=per_page)
    total_pages = (total + per_page - 1) // per_page if total > 0 else 0

    return CustomerListResponse(
        items=[CustomerResponse.model_validate(c) for c in customers],
        total=total,
        page=page,
        per_page=per_page,
        total_pages=total_pages,
    )


@router.post(
    "",
    response_model=CustomerResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a customer",
)
def create_customer(
    command: CreateCustomerCommand,
    service: CustomerService = Depends(get_customer_service),
) -> CustomerResponse:
    return CustomerResponse.model_validate(service.create_customer(command))


@router.get(
    "/{customer_id}",
    response_model=CustomerDetailResponse,
    summary="Get a customer with its permit packages",
)
def get_customer(
    customer_id: UUID,
    service: CustomerService = Depends(get_customer_service),
) -> CustomerDetailResponse:
    customer = service.get_customer(customer_id)
    response = CustomerDetailResponse.model_validate(customer)
    response.permit_packages = [
        PermitSummary.model_validate(p)
        for p in sorted(customer.permit_packages, key=lambda p: p.opened_date, reverse=True)
    ]
    return response


@router.patch("/{customer_id}", response_model=CustomerResponse, summary="Update a customer")
def update_customer(
    customer_id: UUID,
    command: UpdateCustomerCommand,
    service: CustomerService = Depends(get_customer_service),
) -> CustomerResponse:
    return CustomerResponse.model_validate(service.update_customer(customer_id, command))


@router.delete(
    "/{customer_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a customer",
    description="Refused with 400 while the customer has permit packages.",
)
def delete_customer(
    customer_id: UUID,
    service: CustomerService = Depends(get_customer_service),
) -> Response:
    service.delete_customer(customer_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
