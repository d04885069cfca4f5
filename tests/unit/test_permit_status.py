"""Unit tests for permit status enums and canonical transitions

Tests cover:
- Coercion of raw values into closed enums
- Canonical workflow table
- Strict-mode transition validation
- StatusChange descriptions
"""

import pytest

from permitflow.domain.permits import (
    BillingStatus,
    InternalStage,
    PermitStatus,
    TERMINAL_STATUSES,
    get_allowed_transitions,
    is_canonical_transition,
    is_terminal,
    parse_enum,
    validate_transition,
)
from permitflow.errors import ValidationError
from permitflow.permits.lifecycle import status_change_description


class TestParseEnum:
    """Test parse_enum coercion"""

    def test_accepts_member(self):
        assert parse_enum(PermitStatus, PermitStatus.APPROVED, "status") is PermitStatus.APPROVED

    def test_accepts_string_value(self):
        assert parse_enum(PermitStatus, "RevisionsNeeded", "status") is PermitStatus.REVISIONS_NEEDED
        assert parse_enum(InternalStage, "WaitingOnCounty", "internalStage") is InternalStage.WAITING_ON_COUNTY
        assert parse_enum(BillingStatus, "Paid", "billingStatus") is BillingStatus.PAID

    def test_rejects_unknown_value(self):
        with pytest.raises(ValidationError, match="Invalid status 'Pending'"):
            parse_enum(PermitStatus, "Pending", "status")

    def test_rejects_wrong_case(self):
        """Enum values are matched exactly"""
        with pytest.raises(ValidationError):
            parse_enum(PermitStatus, "approved", "status")

    def test_error_lists_allowed_values(self):
        with pytest.raises(ValidationError) as exc_info:
            parse_enum(BillingStatus, "Invoiced", "billingStatus")
        assert "NotSent, SentToBilling, Billed, Paid" in str(exc_info.value)


class TestCanonicalTransitions:
    """Test the canonical workflow table"""

    @pytest.mark.parametrize("current,new", [
        (PermitStatus.NEW, PermitStatus.SUBMITTED),
        (PermitStatus.SUBMITTED, PermitStatus.IN_REVIEW),
        (PermitStatus.IN_REVIEW, PermitStatus.APPROVED),
        (PermitStatus.APPROVED, PermitStatus.ISSUED),
        (PermitStatus.ISSUED, PermitStatus.INSPECTIONS),
        (PermitStatus.INSPECTIONS, PermitStatus.FINALED_CLOSED),
    ])
    def test_forward_path_is_canonical(self, current, new):
        assert is_canonical_transition(current, new)

    def test_review_loop_both_ways(self):
        assert is_canonical_transition(PermitStatus.IN_REVIEW, PermitStatus.REVISIONS_NEEDED)
        assert is_canonical_transition(PermitStatus.REVISIONS_NEEDED, PermitStatus.IN_REVIEW)

    def test_skipping_steps_is_not_canonical(self):
        assert not is_canonical_transition(PermitStatus.NEW, PermitStatus.APPROVED)
        assert not is_canonical_transition(PermitStatus.SUBMITTED, PermitStatus.ISSUED)

    @pytest.mark.parametrize("status", [s for s in PermitStatus if s not in TERMINAL_STATUSES])
    def test_cancel_reachable_from_every_open_state(self, status):
        assert PermitStatus.CANCELED in get_allowed_transitions(status)

    @pytest.mark.parametrize("status", sorted(TERMINAL_STATUSES))
    def test_terminal_states_have_no_exits(self, status):
        assert is_terminal(status)
        assert get_allowed_transitions(status) == []

    def test_open_states_are_not_terminal(self):
        assert not is_terminal(PermitStatus.INSPECTIONS)
        assert not is_terminal(PermitStatus.NEW)


class TestValidateTransition:
    """Test strict-mode validation"""

    def test_canonical_transition_passes(self):
        validate_transition(PermitStatus.IN_REVIEW, PermitStatus.APPROVED)

    def test_non_canonical_transition_raises(self):
        with pytest.raises(ValidationError, match="Invalid transition: New -> Issued"):
            validate_transition(PermitStatus.NEW, PermitStatus.ISSUED)

    def test_leaving_terminal_state_raises(self):
        with pytest.raises(ValidationError):
            validate_transition(PermitStatus.CANCELED, PermitStatus.NEW)


class TestStatusChangeDescription:
    """Test activity descriptions for status changes"""

    def test_without_note(self):
        assert status_change_description("New", "Submitted") == "Status changed from New to Submitted"

    def test_with_note(self):
        assert (
            status_change_description("InReview", "Approved", "County approved plans")
            == "County approved plans (Status: InReview → Approved)"
        )

    def test_blank_note_falls_back(self):
        assert status_change_description("New", "Canceled", "") == "Status changed from New to Canceled"
