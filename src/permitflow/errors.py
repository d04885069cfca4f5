"""Domain error taxonomy for the permit lifecycle engine.

Every component raises one of these; the HTTP layer maps them to responses
(see main.py exception handlers). None of them is retried automatically
except ConflictError, which callers retry once for idempotent operations.
"""


class PermitFlowError(Exception):
    """Base class for all domain errors."""

    error_code = "permitflow_error"


class ValidationError(PermitFlowError):
    """Value not in a closed enum, or otherwise malformed input."""

    error_code = "validation_error"


class NotFoundError(PermitFlowError):
    """Referenced permit, task, document, customer or contractor does not exist."""

    error_code = "not_found"

    def __init__(self, entity: str, entity_id):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(f"{entity} {entity_id} not found")


class ConflictError(PermitFlowError):
    """Uniqueness violation detected at the store layer."""

    error_code = "conflict"


class StorageError(PermitFlowError):
    """Failure reported by the storage collaborator."""

    error_code = "storage_error"


class PayloadTooLargeError(StorageError):
    """Payload exceeds the storage backend's configured maximum size."""

    error_code = "payload_too_large"

    def __init__(self, size_bytes: int, max_size: int):
        self.size_bytes = size_bytes
        self.max_size = max_size
        super().__init__(
            f"File exceeds maximum size of {max_size} bytes (got {size_bytes} bytes)"
        )
