"""Health checks for PermitFlow.

A permit service is only useful when it can both write permit state and
store document bytes, so the report covers the database and the storage
backend. Storage being down degrades the service (permits and tasks still
work) while a database failure makes it unhealthy.
"""

import time
from enum import Enum
from typing import Callable, Dict, Optional
from dataclasses import dataclass, field

from sqlalchemy import text
from sqlalchemy.orm import Session

from ..domain.documents.ports.object_storage_port import ObjectStoragePort
from .logging_config import get_logger

logger = get_logger(__name__)


class HealthStatus(str, Enum):
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    UNHEALTHY = "unhealthy"


@dataclass
class ComponentHealth:
    status: HealthStatus
    message: Optional[str] = None
    latency_ms: Optional[float] = None

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "message": self.message,
            "latency_ms": self.latency_ms,
        }


@dataclass
class HealthReport:
    """Per-component results plus the status they add up to."""
    components: Dict[str, ComponentHealth] = field(default_factory=dict)

    @property
    def status(self) -> HealthStatus:
        database = self.components.get("database")
        if database is None or database.status != HealthStatus.HEALTHY:
            return HealthStatus.UNHEALTHY
        if any(c.status != HealthStatus.HEALTHY for c in self.components.values()):
            return HealthStatus.DEGRADED
        return HealthStatus.HEALTHY

    @property
    def accepts_uploads(self) -> bool:
        return all(c.status == HealthStatus.HEALTHY for c in self.components.values())

    def to_dict(self) -> dict:
        return {
            "status": self.status.value,
            "components": {name: c.to_dict() for name, c in self.components.items()},
        }


def _check_component(name: str, check: Callable[[], bool]) -> ComponentHealth:
    start = time.perf_counter()
    try:
        ok = check()
    except Exception as e:
        logger.error(f"{name} health check failed: {e}", exc_info=True)
        return ComponentHealth(HealthStatus.UNHEALTHY, message=f"{name} error: {e}")

    latency_ms = round((time.perf_counter() - start) * 1000, 2)
    if not ok:
        logger.warning(f"{name} health check reported unreachable")
        return ComponentHealth(HealthStatus.UNHEALTHY, message=f"{name} unreachable")
    return ComponentHealth(HealthStatus.HEALTHY, message=f"{name} OK", latency_ms=latency_ms)


def check_database_health(db: Session) -> ComponentHealth:
    def ping() -> bool:
        db.execute(text("SELECT 1"))
        return True

    return _check_component("Database", ping)


def check_storage_health(storage: ObjectStoragePort) -> ComponentHealth:
    return _check_component("Storage", storage.health_check)


def run_health_checks(db: Session, storage: ObjectStoragePort) -> HealthReport:
    """Check the database and the document storage backend.

    Args:
        db: Session used for the connectivity query
        storage: Configured storage adapter

    Returns:
        HealthReport: Component results; report.status is the overall verdict
    """
    return HealthReport(components={
        "database": check_database_health(db),
        "storage": check_storage_health(storage),
    })
