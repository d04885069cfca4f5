"""SQLAlchemy Models for PermitFlow"""

from .base import Base
from .customer import Customer
from .contractor import Contractor
from .permit_package import PermitPackage
from .task import Task
from .permit_document import PermitDocument, DocumentVersionSequence
from .activity_log import ActivityLogEntry

__all__ = [
    "Base",
    "Customer",
    "Contractor",
    "PermitPackage",
    "Task",
    "PermitDocument",
    "DocumentVersionSequence",
    "ActivityLogEntry",
]
