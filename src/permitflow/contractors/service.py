"""Contractor management."""

import logging
from typing import List, Optional, Tuple
from uuid import UUID

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from ..database import unit_of_work
from ..domain.contractors import CreateContractorCommand, UpdateContractorCommand
from ..errors import NotFoundError, ValidationError
from ..models.contractor import Contractor
from ..models.permit_package import PermitPackage

logger = logging.getLogger(__name__)


class ContractorService:
    """Create, read, update and delete contractors.

    A contractor referenced by any permit package cannot be deleted.
    """

    def __init__(self, db: Session, actor_id: Optional[UUID] = None):
        self.db = db
        self.actor_id = actor_id

    def list_contractors(
        self,
        search: Optional[str] = None,
        page: int = 1,
        per_page: int = 50,
    ) -> Tuple[List[Contractor], int]:
        """Contractors ordered by company name.

        search matches company name, license number, email or phone,
        case-insensitively.
        """
        query = self.db.query(Contractor)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(
                Contractor.company_name.ilike(pattern),
                Contractor.license_number.ilike(pattern),
                Contractor.email.ilike(pattern),
                Contractor.phone.ilike(pattern),
            ))

        total = query.with_entities(func.count(Contractor.id)).scalar()
        contractors = (
            query.order_by(Contractor.company_name, Contractor.created_at)
            .offset((page - 1) * per_page)
            .limit(per_page)
            .all()
        )
        return contractors, total

    def get_contractor(self, contractor_id: UUID) -> Contractor:
        contractor = self.db.get(Contractor, contractor_id)
        if contractor is None:
            raise NotFoundError("Contractor", contractor_id)
        return contractor

    def create_contractor(self, command: CreateContractorCommand) -> Contractor:
        with unit_of_work(self.db):
            contractor = Contractor(**_column_values(command.model_dump()))
            self.db.add(contractor)
            self.db.flush()

        logger.info(
            f"Contractor created: id={contractor.id}, company={contractor.company_name}",
            extra={"actor_id": self.actor_id},
        )
        return contractor

    def update_contractor(
        self, contractor_id: UUID, command: UpdateContractorCommand
    ) -> Contractor:
        """Apply a partial update.

        Raises:
            ValidationError: Clearing the company name
            NotFoundError: Contractor does not exist
        """
        changes = _column_values(command.model_dump(exclude_unset=True))
        if "company_name" in changes and not changes["company_name"]:
            raise ValidationError("Company name cannot be empty")

        with unit_of_work(self.db):
            contractor = self.get_contractor(contractor_id)
            for field, value in changes.items():
                setattr(contractor, field, value)

        logger.info(
            f"Contractor updated: id={contractor_id}, fields={sorted(changes)}",
            extra={"actor_id": self.actor_id},
        )
        return contractor

    def delete_contractor(self, contractor_id: UUID) -> None:
        """Raises NotFoundError, or ValidationError while permits reference it."""
        with unit_of_work(self.db):
            contractor = self.get_contractor(contractor_id)
            permit_count = (
                self.db.query(func.count(PermitPackage.id))
                .filter(PermitPackage.contractor_id == contractor_id)
                .scalar()
            )
            if permit_count:
                raise ValidationError(
                    f"Cannot delete contractor with existing permit packages ({permit_count})"
                )
            self.db.delete(contractor)

        logger.info(f"Contractor deleted: id={contractor_id}", extra={"actor_id": self.actor_id})


def _column_values(values: dict) -> dict:
    method = values.get("preferred_contact_method")
    if method is not None:
        values["preferred_contact_method"] = method.value
    return values
