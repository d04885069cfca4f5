"""Prometheus metrics for PermitFlow.

Defines operational counters for the permit lifecycle engine.

Counters describing a database change are queued on the session with
count_after_commit() and applied by database.unit_of_work once the change
commits; a rolled back change is never counted.
"""

from prometheus_client import Counter

PENDING_COUNTS_KEY = "permitflow.pending_counts"

# Lifecycle metrics
status_transitions_total = Counter(
    "permitflow_status_transitions_total",
    "Total permit field transitions recorded",
    ["field", "to"]  # field: status|internal_stage|billing_status
)

# Automation metrics
auto_tasks_created_total = Counter(
    "permitflow_auto_tasks_created_total",
    "Total tasks created by automation rules",
    ["rule"]
)

automation_conflicts_total = Counter(
    "permitflow_automation_conflicts_total",
    "Unique-constraint conflicts hit while ensuring automated tasks",
    ["rule"]
)

# Document metrics
documents_uploaded_total = Counter(
    "permitflow_documents_uploaded_total",
    "Total documents uploaded",
    ["category"]
)

storage_errors_total = Counter(
    "permitflow_storage_errors_total",
    "Storage backend failures",
    ["operation"]  # operation: save|get|delete
)


def count_after_commit(session, counter: Counter, **labels) -> None:
    """Queue one increment of counter, applied when the session commits."""
    session.info.setdefault(PENDING_COUNTS_KEY, []).append(counter.labels(**labels))


def publish_pending_counts(session) -> None:
    for child in session.info.pop(PENDING_COUNTS_KEY, []):
        child.inc()


def discard_pending_counts(session) -> None:
    session.info.pop(PENDING_COUNTS_KEY, None)
