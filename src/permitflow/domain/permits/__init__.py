"""Permits domain module - status/stage/billing enums and command types"""

from .status import (
    PermitStatus,
    InternalStage,
    BillingStatus,
    PermitType,
    INITIAL_STATUS,
    TERMINAL_STATUSES,
    CANONICAL_TRANSITIONS,
    parse_enum,
    is_terminal,
    is_canonical_transition,
    get_allowed_transitions,
    validate_transition,
)
from .commands import (
    CreatePermitCommand,
    StatusChangeCommand,
    InternalStageChangeCommand,
    BillingChangeCommand,
    PermitFieldsPatch,
)

__all__ = [
    "PermitStatus",
    "InternalStage",
    "BillingStatus",
    "PermitType",
    "INITIAL_STATUS",
    "TERMINAL_STATUSES",
    "CANONICAL_TRANSITIONS",
    "parse_enum",
    "is_terminal",
    "is_canonical_transition",
    "get_allowed_transitions",
    "validate_transition",
    "CreatePermitCommand",
    "StatusChangeCommand",
    "InternalStageChangeCommand",
    "BillingChangeCommand",
    "PermitFieldsPatch",
]
