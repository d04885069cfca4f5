"""Unit tests for structured logging"""

import json
import sys
import logging

import pytest

from permitflow.observability.logging_config import JSONFormatter, RequestContextFilter
from permitflow.observability.request_context import (
    actor_id_var,
    get_request_id,
    request_id_var,
)


def make_record(message="Permit status changed", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="permitflow.permits.lifecycle",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=None,
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture
def request_context():
    request_token = request_id_var.set("req-123")
    actor_token = actor_id_var.set("9b2f6a52-0000-4000-8000-000000000001")
    yield
    request_id_var.reset(request_token)
    actor_id_var.reset(actor_token)


class TestRequestContextFilter:
    """Test context propagation onto log records"""

    def test_adds_request_and_actor(self, request_context):
        record = make_record()
        assert RequestContextFilter().filter(record) is True
        assert record.request_id == "req-123"
        assert record.actor_id == "9b2f6a52-0000-4000-8000-000000000001"

    def test_explicit_actor_wins(self, request_context):
        record = make_record(actor_id="explicit")
        RequestContextFilter().filter(record)
        assert record.actor_id == "explicit"

    def test_outside_request(self):
        assert get_request_id() == "no-request-id"
        record = make_record()
        RequestContextFilter().filter(record)
        assert record.request_id == "no-request-id"
        assert record.actor_id is None


class TestJSONFormatter:
    """Test JSON log lines"""

    def test_base_fields(self):
        data = json.loads(JSONFormatter().format(make_record(request_id="req-1")))

        assert data["level"] == "INFO"
        assert data["logger"] == "permitflow.permits.lifecycle"
        assert data["request_id"] == "req-1"
        assert data["message"] == "Permit status changed"
        assert "timestamp" in data

    def test_domain_ids_included_when_present(self):
        data = json.loads(JSONFormatter().format(make_record(permit_id="p-1", task_id=None)))

        assert data["permit_id"] == "p-1"
        assert "task_id" not in data
        assert "document_id" not in data

    def test_http_fields(self):
        data = json.loads(JSONFormatter().format(
            make_record(method="POST", path="/api/v1/permits", status_code=201, duration_ms=3.2)
        ))
        assert data["status_code"] == 201
        assert data["duration_ms"] == 3.2

    def test_exception_details(self):
        try:
            raise RuntimeError("storage offline")
        except RuntimeError:
            record = make_record(message="Upload failed")
            record.exc_info = sys.exc_info()

        data = json.loads(JSONFormatter().format(record))
        assert data["error"] == "storage offline"
        assert "RuntimeError" in data["traceback"]
