"""Observability module for PermitFlow.

Provides structured logging, metrics, and health checks.
"""

from .logging_config import configure_logging, get_logger
from .metrics import (
    count_after_commit,
    status_transitions_total,
    auto_tasks_created_total,
    automation_conflicts_total,
    documents_uploaded_total,
    storage_errors_total,
)
from .request_context import (
    request_id_var,
    actor_id_var,
    get_request_id,
    set_request_id,
    get_actor_id,
    set_actor_id,
    generate_request_id,
)
from .health import HealthStatus, ComponentHealth, HealthReport, run_health_checks
from .middleware import RequestIDMiddleware

__all__ = [
    # Logging
    "configure_logging",
    "get_logger",
    # Metrics
    "count_after_commit",
    "status_transitions_total",
    "auto_tasks_created_total",
    "automation_conflicts_total",
    "documents_uploaded_total",
    "storage_errors_total",
    # Request context
    "request_id_var",
    "actor_id_var",
    "get_request_id",
    "set_request_id",
    "get_actor_id",
    "set_actor_id",
    "generate_request_id",
    # Health
    "HealthStatus",
    "ComponentHealth",
    "HealthReport",
    "run_health_checks",
    # Middleware
    "RequestIDMiddleware",
]
