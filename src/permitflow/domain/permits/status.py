"""PermitPackage status, internal stage and billing status enums.

State Flow (canonical path):
    New → Submitted → InReview → Approved → Issued → Inspections → FinaledClosed

InReview ⇄ RevisionsNeeded is allowed both ways; Canceled is reachable from
any non-terminal state.

Terminal States: FinaledClosed, Canceled

The lifecycle manager records any transition between enum members; the
canonical table below is used for reporting and for the opt-in strict mode.
"""

from enum import Enum
from typing import Dict, List, Type, TypeVar

from ...errors import ValidationError


class PermitStatus(str, Enum):
    """External-facing workflow state of a permit package."""
    NEW = "New"
    SUBMITTED = "Submitted"
    IN_REVIEW = "InReview"
    REVISIONS_NEEDED = "RevisionsNeeded"
    APPROVED = "Approved"
    ISSUED = "Issued"
    INSPECTIONS = "Inspections"
    FINALED_CLOSED = "FinaledClosed"
    CANCELED = "Canceled"


class InternalStage(str, Enum):
    """Operational note on where the permit is waiting internally."""
    WAITING_ON_CONTRACTOR_DOCS = "WaitingOnContractorDocs"
    WAITING_ON_COUNTY = "WaitingOnCounty"
    WAITING_ON_BILLING = "WaitingOnBilling"
    READY_TO_SUBMIT = "ReadyToSubmit"
    READY_TO_CLOSE = "ReadyToClose"
    IN_PROGRESS = "InProgress"


class BillingStatus(str, Enum):
    """Handoff state towards the billing department."""
    NOT_SENT = "NotSent"
    SENT_TO_BILLING = "SentToBilling"
    BILLED = "Billed"
    PAID = "Paid"


class PermitType(str, Enum):
    BUILDING = "Building"
    ELECTRICAL = "Electrical"
    PLUMBING = "Plumbing"
    MECHANICAL = "Mechanical"
    ROOFING = "Roofing"
    HVAC = "HVAC"
    STRUCTURAL = "Structural"
    MOBILE_HOME = "MobileHome"
    OTHER = "Other"


INITIAL_STATUS = PermitStatus.NEW

TERMINAL_STATUSES = frozenset({
    PermitStatus.FINALED_CLOSED,
    PermitStatus.CANCELED,
})

# Canonical forward transitions
CANONICAL_TRANSITIONS: Dict[PermitStatus, List[PermitStatus]] = {
    PermitStatus.NEW: [PermitStatus.SUBMITTED, PermitStatus.CANCELED],
    PermitStatus.SUBMITTED: [PermitStatus.IN_REVIEW, PermitStatus.CANCELED],
    PermitStatus.IN_REVIEW: [
        PermitStatus.APPROVED,
        PermitStatus.REVISIONS_NEEDED,
        PermitStatus.CANCELED,
    ],
    PermitStatus.REVISIONS_NEEDED: [PermitStatus.IN_REVIEW, PermitStatus.CANCELED],
    PermitStatus.APPROVED: [PermitStatus.ISSUED, PermitStatus.CANCELED],
    PermitStatus.ISSUED: [PermitStatus.INSPECTIONS, PermitStatus.CANCELED],
    PermitStatus.INSPECTIONS: [PermitStatus.FINALED_CLOSED, PermitStatus.CANCELED],
    PermitStatus.FINALED_CLOSED: [],  # Terminal state
    PermitStatus.CANCELED: [],  # Terminal state
}


E = TypeVar("E", bound=Enum)


def parse_enum(enum_cls: Type[E], value, field: str) -> E:
    """Coerce a raw value into a member of enum_cls.

    Args:
        enum_cls: Target enumeration
        value: Enum member or its string value
        field: Field name used in the error message

    Returns:
        The matching enum member

    Raises:
        ValidationError: If value is not a member of enum_cls
    """
    if isinstance(value, enum_cls):
        return value
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(member.value for member in enum_cls)
        raise ValidationError(
            f"Invalid {field} '{value}'. Allowed values: {allowed}"
        )


def is_terminal(status: PermitStatus) -> bool:
    return status in TERMINAL_STATUSES


def is_canonical_transition(current: PermitStatus, new: PermitStatus) -> bool:
    """Check whether current → new lies on the canonical workflow.

    Example:
        >>> is_canonical_transition(PermitStatus.IN_REVIEW, PermitStatus.REVISIONS_NEEDED)
        True
        >>> is_canonical_transition(PermitStatus.NEW, PermitStatus.APPROVED)
        False
    """
    return new in CANONICAL_TRANSITIONS.get(current, [])


def get_allowed_transitions(status: PermitStatus) -> List[PermitStatus]:
    """Get list of canonical transitions from a given status."""
    return CANONICAL_TRANSITIONS.get(status, [])


def validate_transition(current: PermitStatus, new: PermitStatus) -> None:
    """Reject non-canonical transitions (strict mode only).

    Raises:
        ValidationError: If the transition is not canonical
    """
    if not is_canonical_transition(current, new):
        allowed = [s.value for s in get_allowed_transitions(current)]
        raise ValidationError(
            f"Invalid transition: {current.value} -> {new.value}. "
            f"Allowed transitions from {current.value}: {allowed}"
        )
