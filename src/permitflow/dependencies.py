"""FastAPI dependencies wiring the permit lifecycle components.

Each request gets components bound to its own database session and to the
acting user from the bearer token:

    @router.post("/permits/{permit_id}/status")
    def set_status(manager: PermitLifecycleManager = Depends(get_lifecycle_manager)):
        ...

Tests override get_db and get_storage through app.dependency_overrides.
"""

from functools import lru_cache
from uuid import UUID

from fastapi import Depends
from sqlalchemy.orm import Session

from .audit.service import ActivityAuditLog
from .auth.dependencies import get_actor_id
from .automation.engine import TaskAutomationEngine
from .config import get_settings
from .contractors.service import ContractorService
from .customers.service import CustomerService
from .database import get_db
from .documents.ledger import DocumentVersionLedger
from .domain.documents.ports.object_storage_port import ObjectStoragePort
from .infrastructure.storage import build_storage
from .permits.lifecycle import PermitLifecycleManager
from .permits.service import PermitService
from .tasks.service import TaskService


@lru_cache()
def get_storage() -> ObjectStoragePort:
    """Process-wide storage adapter built from settings."""
    return build_storage(get_settings())


def get_audit_log(
    db: Session = Depends(get_db),
    actor_id: UUID = Depends(get_actor_id),
) -> ActivityAuditLog:
    return ActivityAuditLog(db, actor_id=actor_id)


def get_lifecycle_manager(
    db: Session = Depends(get_db),
    audit: ActivityAuditLog = Depends(get_audit_log),
) -> PermitLifecycleManager:
    return PermitLifecycleManager(
        db,
        audit,
        TaskAutomationEngine(db, audit),
        strict_transitions=get_settings().STRICT_STATUS_TRANSITIONS,
    )


def get_permit_service(
    db: Session = Depends(get_db),
    audit: ActivityAuditLog = Depends(get_audit_log),
    storage: ObjectStoragePort = Depends(get_storage),
) -> PermitService:
    return PermitService(db, audit, storage)


def get_task_service(
    db: Session = Depends(get_db),
    audit: ActivityAuditLog = Depends(get_audit_log),
) -> TaskService:
    return TaskService(db, audit)


def get_customer_service(
    db: Session = Depends(get_db),
    actor_id: UUID = Depends(get_actor_id),
) -> CustomerService:
    return CustomerService(db, actor_id=actor_id)


def get_contractor_service(
    db: Session = Depends(get_db),
    actor_id: UUID = Depends(get_actor_id),
) -> ContractorService:
    return ContractorService(db, actor_id=actor_id)


def get_document_ledger(
    db: Session = Depends(get_db),
    audit: ActivityAuditLog = Depends(get_audit_log),
    storage: ObjectStoragePort = Depends(get_storage),
) -> DocumentVersionLedger:
    return DocumentVersionLedger(db, audit, storage)
