"""Permit intake, lookup and deletion.

State changes after intake go through PermitLifecycleManager; this service
only creates, reads and removes permit packages.
"""

import logging
from typing import List, Optional, Union
from uuid import UUID

from sqlalchemy.orm import Session

from ..audit.service import ActivityAuditLog
from ..database import unit_of_work
from ..domain.activity import ActivityType
from ..domain.documents.ports.object_storage_port import ObjectStoragePort
from ..domain.permits import (
    BillingStatus,
    CreatePermitCommand,
    INITIAL_STATUS,
    InternalStage,
    PermitStatus,
    PermitType,
    parse_enum,
)
from ..errors import NotFoundError, StorageError
from ..models.contractor import Contractor
from ..models.customer import Customer
from ..models.permit_document import PermitDocument
from ..models.permit_package import PermitPackage
from ..models.base import utcnow

logger = logging.getLogger(__name__)


class PermitService:
    """Create, read and delete permit packages.

    Example:
        service = PermitService(db, ActivityAuditLog(db, actor_id=user_id), storage)
        permit = service.create_permit(CreatePermitCommand(...))
    """

    def __init__(
        self,
        db: Session,
        audit: ActivityAuditLog,
        storage: Optional[ObjectStoragePort] = None,
    ):
        self.db = db
        self.audit = audit
        self.storage = storage

    def create_permit(self, command: CreatePermitCommand) -> PermitPackage:
        """Open a new permit package in status New.

        Writes a StatusChange entry "Permit package created" with the initial
        status as new value and no old value.

        Raises:
            ValidationError: Unknown permit type or internal stage
            NotFoundError: Customer or contractor does not exist
        """
        permit_type = parse_enum(PermitType, command.permit_type, "permitType")
        stage = parse_enum(
            InternalStage,
            command.internal_stage or InternalStage.IN_PROGRESS,
            "internalStage",
        )

        with unit_of_work(self.db):
            if self.db.get(Customer, command.customer_id) is None:
                raise NotFoundError("Customer", command.customer_id)
            if self.db.get(Contractor, command.contractor_id) is None:
                raise NotFoundError("Contractor", command.contractor_id)

            permit = PermitPackage(
                customer_id=command.customer_id,
                contractor_id=command.contractor_id,
                project_name=command.project_name,
                project_address=command.project_address,
                county=command.county,
                jurisdiction_notes=command.jurisdiction_notes,
                permit_number=command.permit_number,
                permit_type=permit_type.value,
                status=INITIAL_STATUS.value,
                internal_stage=stage.value,
                billing_status=BillingStatus.NOT_SENT.value,
                opened_date=utcnow(),
                target_issue_date=command.target_issue_date,
                billing_notes=command.billing_notes,
            )
            self.db.add(permit)
            self.db.flush()

            self.audit.record(
                permit_id=permit.id,
                activity_type=ActivityType.STATUS_CHANGE,
                description="Permit package created",
                new_value=INITIAL_STATUS.value,
            )

        logger.info(
            f"Permit created: project={permit.project_name}, type={permit.permit_type}",
            extra={"permit_id": permit.id, "actor_id": self.audit.actor_id},
        )
        return permit

    def get_permit(self, permit_id: UUID) -> PermitPackage:
        """Raises NotFoundError if the permit does not exist."""
        permit = self.db.get(PermitPackage, permit_id)
        if permit is None:
            raise NotFoundError("Permit", permit_id)
        return permit

    def list_permits(
        self,
        status: Union[PermitStatus, str, None] = None,
    ) -> List[PermitPackage]:
        """All permits, most recently opened first, optionally by status."""
        query = self.db.query(PermitPackage)
        if status is not None:
            query = query.filter(
                PermitPackage.status == parse_enum(PermitStatus, status, "status").value
            )
        return query.order_by(PermitPackage.opened_date.desc()).all()

    def delete_permit(self, permit_id: UUID) -> None:
        """Delete a permit with its tasks, documents and activity entries.

        Stored document bytes are removed after the commit; failures there
        are logged and do not undo the deletion.

        Raises:
            NotFoundError: Permit does not exist
        """
        with unit_of_work(self.db):
            permit = self.get_permit(permit_id)
            storage_paths = [
                path for (path,) in self.db.query(PermitDocument.storage_path)
                .filter(PermitDocument.permit_package_id == permit_id)
            ]
            self.db.delete(permit)

        logger.info(
            f"Permit deleted with {len(storage_paths)} document(s)",
            extra={"permit_id": permit_id, "actor_id": self.audit.actor_id},
        )

        if self.storage is None:
            return
        for path in storage_paths:
            try:
                self.storage.delete(path)
            except StorageError as e:
                logger.warning(
                    f"Failed to delete stored bytes for removed permit: path={path}, error={e}",
                    extra={"permit_id": permit_id},
                    exc_info=True,
                )
