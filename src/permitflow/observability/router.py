"""Operational endpoints: Prometheus metrics, health and readiness."""

from fastapi import APIRouter, Depends, Response
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from prometheus_client import generate_latest, CONTENT_TYPE_LATEST

from ..database import get_db
from ..dependencies import get_storage
from ..domain.documents.ports.object_storage_port import ObjectStoragePort
from .health import HealthStatus, run_health_checks

router = APIRouter(tags=["Observability"])


@router.get("/metrics", include_in_schema=False)
def metrics():
    return Response(content=generate_latest(), media_type=CONTENT_TYPE_LATEST)


@router.get(
    "/health",
    summary="Health check",
    description="Database and document storage status. 503 when the database is down.",
)
def health_check(
    db: Session = Depends(get_db),
    storage: ObjectStoragePort = Depends(get_storage),
):
    report = run_health_checks(db, storage)
    status_code = 503 if report.status == HealthStatus.UNHEALTHY else 200
    return JSONResponse(content=report.to_dict(), status_code=status_code)


@router.get("/ready", summary="Readiness check")
def readiness_check(
    db: Session = Depends(get_db),
    storage: ObjectStoragePort = Depends(get_storage),
):
    """Ready once permit writes and document uploads can both be served."""
    report = run_health_checks(db, storage)
    if report.accepts_uploads:
        return {"status": "ready"}

    failing = {
        name: c.message
        for name, c in report.components.items()
        if c.status != HealthStatus.HEALTHY
    }
    return JSONResponse(content={"status": "not_ready", "failing": failing}, status_code=503)
