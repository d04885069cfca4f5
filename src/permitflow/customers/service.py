"""Customer management.

Customers are the property owners a permit package is opened for. They are
not permit-scoped, so changes here write log lines but no activity entries.
"""

import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..database import unit_of_work
from ..domain.customers import CreateCustomerCommand, UpdateCustomerCommand
from ..errors import NotFoundError, ValidationError
from ..models.customer import Customer
from ..models.permit_package import PermitPackage

logger = logging.getLogger(__name__)


class CustomerService:
    """Create, read, update and delete customers."""

    def __init__(self, db: Session, actor_id: Optional[UUID] = None):
        self.db = db
        self.actor_id = actor_id

    def list_customers(
        self,
        search: Optional[str] = None,
        page: int = 1,
        per_page: int = 50,
    ) -> Tuple[List[Customer], int]:
        """Customers ordered by name, optionally filtered.

        Args:
            search: Case-insensitive match on name, contact name, email or phone
            page: 1-based page number
            per_page: Page size

        Returns:
            (customers on the page, total matching customers)
        """
        query = self.db.query(Customer)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Customer.name.ilike(pattern),
                Customer.contact_name.ilike(pattern),
                Customer.email.ilike(pattern),
                Customer.phone.ilike(pattern),
            ))

        total = query.with_entities(func.count(Customer.id)).scalar()
        customers = (
            query.order_by(Customer.name, Customer.created_at)
            .offset((page - 1) * per_page)
            .limit(per_page)
            .all()
        )
        return customers, total

    def get_customer(self, customer_id: UUID) -> Customer:
        customer = self.db.get(Customer, customer_id)
        if customer is None:
            raise NotFoundError("Customer", customer_id)
        return customer

    def create_customer(self, command: CreateCustomerCommand) -> Customer:
        with unit_of_work(self.db):
            customer = Customer(**command.model_dump())
            self.db.add(customer)
            self.db.flush()

        logger.info(
            f"Customer created: id={customer.id}, name={customer.name}",
            extra={"actor_id": self.actor_id},
        )
        return customer

    def update_customer(self, customer_id: UUID, command: UpdateCustomerCommand) -> Customer:
        """Apply a partial update.

        Raises:
            ValidationError: Clearing the name
            NotFoundError: Customer does not exist
        """
        changes = command.model_dump(exclude_unset=True)
        if "name" in changes and not changes["name"]:
            raise ValidationError("Customer name cannot be empty")

        with unit_of_work(self.db):
            customer = self.get_customer(customer_id)
            for field, value in changes.items():
                setattr(customer, field, value)

        logger.info(
            f"Customer updated: id={customer_id}, fields={sorted(changes)}",
            extra={"actor_id": self.actor_id},
        )
        return customer

    def delete_customer(self, customer_id: UUID) -> None:
        """Delete a customer without permits.

        Raises:
            NotFoundError: Customer does not exist
            ValidationError: Customer still has permit packages
        """
        with unit_of_work(self.db):
            customer = self.get_customer(customer_id)
            permit_count = (
                self.db.query(func.count(PermitPackage.id))
                .filter(PermitPackage.customer_id == customer_id)
                .scalar()
            )
            if permit_count:
                raise ValidationError(
                    f"Cannot delete customer with existing permit packages ({permit_count})"
                )
            self.db.delete(customer)

        logger.info(f"Customer deleted: id={customer_id}", extra={"actor_id": self.actor_id})
