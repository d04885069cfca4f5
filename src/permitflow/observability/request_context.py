"""Per-request context for log correlation.

Holds the request id (from X-Request-ID or freshly generated) and the acting
user id resolved from the bearer token. Both live in ContextVars so they
follow the request across sync endpoints run in the threadpool.
"""

import uuid
from contextvars import ContextVar
from typing import Optional

request_id_var: ContextVar[Optional[str]] = ContextVar("request_id", default=None)
actor_id_var: ContextVar[Optional[str]] = ContextVar("actor_id", default=None)


def generate_request_id() -> str:
    return str(uuid.uuid4())


def get_request_id() -> str:
    """Current request ID, or "no-request-id" outside a request."""
    return request_id_var.get() or "no-request-id"


def set_request_id(request_id: str) -> None:
    request_id_var.set(request_id)


def get_actor_id() -> Optional[str]:
    return actor_id_var.get()


def set_actor_id(actor_id) -> None:
    actor_id_var.set(str(actor_id) if actor_id is not None else None)
