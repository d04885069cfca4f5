"""Unit tests for health reporting"""

from permitflow.infrastructure.storage.local_storage_adapter import LocalStorageAdapter
from permitflow.observability.health import (
    ComponentHealth,
    HealthReport,
    HealthStatus,
    run_health_checks,
)


class UnreachableStorage(LocalStorageAdapter):
    def health_check(self) -> bool:
        return False


class ExplodingStorage(LocalStorageAdapter):
    def health_check(self) -> bool:
        raise ConnectionError("connection refused")


def test_all_components_healthy(db_session, storage):
    report = run_health_checks(db_session, storage)

    assert report.status == HealthStatus.HEALTHY
    assert report.accepts_uploads
    assert report.components["database"].latency_ms is not None


def test_storage_down_degrades(db_session, tmp_path):
    report = run_health_checks(db_session, UnreachableStorage(root_path=str(tmp_path)))

    assert report.status == HealthStatus.DEGRADED
    assert not report.accepts_uploads
    assert report.components["storage"].message == "Storage unreachable"


def test_storage_exception_is_reported(db_session, tmp_path):
    report = run_health_checks(db_session, ExplodingStorage(root_path=str(tmp_path)))

    storage = report.components["storage"]
    assert storage.status == HealthStatus.UNHEALTHY
    assert "connection refused" in storage.message


def test_database_down_is_unhealthy():
    report = HealthReport(components={
        "database": ComponentHealth(HealthStatus.UNHEALTHY, message="Database error"),
        "storage": ComponentHealth(HealthStatus.HEALTHY),
    })

    assert report.status == HealthStatus.UNHEALTHY
    assert report.to_dict()["status"] == "unhealthy"
