"""Integration tests for PermitLifecycleManager

Tests cover:
- One StatusChange entry per real transition, none for no-ops
- Internal stage and billing status changes
- Lifecycle timestamps (closed date, sent-to-billing)
- Strict transition mode
- Atomicity of state and audit writes
- Metrics counted only once the change commits
"""

from uuid import uuid4

import pytest
from prometheus_client import REGISTRY
from sqlalchemy.exc import OperationalError

from permitflow.automation.rules import DEFAULT_RULES
from permitflow.domain.activity import ActivityType
from permitflow.domain.permits import PermitStatus
from permitflow.errors import NotFoundError, ValidationError
from permitflow.models import ActivityLogEntry, PermitPackage
from permitflow.permits import PermitLifecycleManager


def count_entries(db_session, permit_id, activity_type=None) -> int:
    query = db_session.query(ActivityLogEntry).filter(ActivityLogEntry.permit_package_id == permit_id)
    if activity_type is not None:
        query = query.filter(ActivityLogEntry.activity_type == activity_type.value)
    return query.count()


class TestSetStatus:
    """Test status transitions"""

    @pytest.mark.parametrize("target", [s for s in PermitStatus if s != PermitStatus.NEW])
    def test_change_writes_one_status_entry(self, db_session, audit, lifecycle, permit, target):
        before = count_entries(db_session, permit.id, ActivityType.STATUS_CHANGE)

        updated = lifecycle.set_status(permit.id, target.value)

        assert updated.status == target.value
        assert count_entries(db_session, permit.id, ActivityType.STATUS_CHANGE) == before + 1
        latest = audit.for_permit(permit.id, ActivityType.STATUS_CHANGE)[0]
        assert latest.old_value == "New"
        assert latest.new_value == target.value
        assert latest.description == f"Status changed from New to {target.value}"

    def test_same_status_is_noop(self, db_session, lifecycle, permit):
        before = count_entries(db_session, permit.id)

        result = lifecycle.set_status(permit.id, "New")

        assert result.status == "New"
        assert count_entries(db_session, permit.id) == before

    def test_entry_carries_actor(self, audit, actor_id, lifecycle, permit):
        lifecycle.set_status(permit.id, PermitStatus.SUBMITTED)
        assert audit.for_permit(permit.id, ActivityType.STATUS_CHANGE)[0].user_id == actor_id

    def test_note_used_as_description(self, audit, lifecycle, permit):
        lifecycle.set_status(permit.id, "Submitted", note="Filed at Hillsborough County")

        entry = audit.for_permit(permit.id, ActivityType.STATUS_CHANGE)[0]
        assert entry.description == "Filed at Hillsborough County (Status: New → Submitted)"

    def test_unknown_status_rejected(self, db_session, lifecycle, permit):
        before = count_entries(db_session, permit.id)

        with pytest.raises(ValidationError):
            lifecycle.set_status(permit.id, "Pending")

        assert count_entries(db_session, permit.id) == before
        assert db_session.get(PermitPackage, permit.id).status == "New"

    def test_unknown_permit(self, lifecycle):
        with pytest.raises(NotFoundError, match="Permit"):
            lifecycle.set_status(uuid4(), "Submitted")

    def test_any_enum_transition_is_recorded(self, audit, lifecycle, permit):
        """Transitions are permissive by default, including out of terminal states"""
        lifecycle.set_status(permit.id, "FinaledClosed")
        lifecycle.set_status(permit.id, "InReview")

        values = [(e.old_value, e.new_value) for e in audit.for_permit(permit.id, ActivityType.STATUS_CHANGE)]
        assert values[:2] == [("FinaledClosed", "InReview"), ("New", "FinaledClosed")]


class TestStatusWithInternalStage:
    """Test the optional internal stage on status changes"""

    def test_stage_applied_and_recorded_in_metadata(self, audit, lifecycle, permit):
        updated = lifecycle.set_status(permit.id, "Submitted", internal_stage="WaitingOnCounty")

        assert updated.internal_stage == "WaitingOnCounty"
        entry = audit.for_permit(permit.id, ActivityType.STATUS_CHANGE)[0]
        assert entry.metadata_json == {"internalStage": "WaitingOnCounty"}

    def test_unchanged_stage_not_in_metadata(self, audit, lifecycle, permit):
        lifecycle.set_status(permit.id, "Submitted", internal_stage="InProgress")
        assert audit.for_permit(permit.id, ActivityType.STATUS_CHANGE)[0].metadata_json is None

    def test_same_status_with_new_stage_records_only_stage(self, db_session, audit, lifecycle, permit):
        status_before = count_entries(db_session, permit.id, ActivityType.STATUS_CHANGE)

        updated = lifecycle.set_status(permit.id, "New", internal_stage="ReadyToSubmit")

        assert updated.internal_stage == "ReadyToSubmit"
        assert count_entries(db_session, permit.id, ActivityType.STATUS_CHANGE) == status_before
        assert len(audit.for_permit(permit.id, ActivityType.FIELD_UPDATED)) == 1

    def test_invalid_stage_rejected_before_any_change(self, db_session, lifecycle, permit):
        with pytest.raises(ValidationError):
            lifecycle.set_status(permit.id, "Submitted", internal_stage="Lunch")
        assert db_session.get(PermitPackage, permit.id).status == "New"


class TestClosedDate:
    """Test terminal-state timestamps"""

    def test_set_on_entering_terminal_state(self, lifecycle, permit):
        assert permit.closed_date is None
        assert lifecycle.set_status(permit.id, "Canceled").closed_date is not None

    def test_kept_when_moving_between_terminal_states(self, lifecycle, permit):
        first = lifecycle.set_status(permit.id, "Canceled").closed_date
        assert lifecycle.set_status(permit.id, "FinaledClosed").closed_date == first

    def test_cleared_on_reopen(self, lifecycle, permit):
        lifecycle.set_status(permit.id, "FinaledClosed")
        assert lifecycle.set_status(permit.id, "Inspections").closed_date is None


class TestInternalStage:
    """Test set_internal_stage"""

    def test_change_writes_field_updated(self, audit, lifecycle, permit):
        updated = lifecycle.set_internal_stage(permit.id, "WaitingOnContractorDocs")

        assert updated.internal_stage == "WaitingOnContractorDocs"
        entries = audit.for_permit(permit.id, ActivityType.FIELD_UPDATED)
        assert len(entries) == 1
        assert entries[0].description == "Internal stage changed from InProgress to WaitingOnContractorDocs"
        assert entries[0].old_value == "InProgress"
        assert entries[0].metadata_json == {"field": "internalStage"}

    def test_same_stage_is_noop(self, audit, lifecycle, permit):
        lifecycle.set_internal_stage(permit.id, "InProgress")
        assert audit.for_permit(permit.id, ActivityType.FIELD_UPDATED) == []

    def test_unknown_stage(self, lifecycle, permit):
        with pytest.raises(ValidationError):
            lifecycle.set_internal_stage(permit.id, "Sleeping")


class TestBillingStatus:
    """Test set_billing_status"""

    def test_change_writes_billing_entry(self, audit, lifecycle, permit):
        updated = lifecycle.set_billing_status(permit.id, "SentToBilling")

        assert updated.billing_status == "SentToBilling"
        assert updated.sent_to_billing_at is not None
        entries = audit.for_permit(permit.id, ActivityType.BILLING_STATUS_CHANGE)
        assert [(e.old_value, e.new_value) for e in entries] == [("NotSent", "SentToBilling")]
        assert entries[0].description == "Billing status changed from NotSent to SentToBilling"

    def test_sent_timestamp_kept_once_set(self, lifecycle, permit):
        sent_at = lifecycle.set_billing_status(permit.id, "SentToBilling").sent_to_billing_at
        lifecycle.set_billing_status(permit.id, "NotSent")
        assert lifecycle.set_billing_status(permit.id, "SentToBilling").sent_to_billing_at == sent_at

    def test_same_billing_status_is_noop(self, audit, lifecycle, permit):
        lifecycle.set_billing_status(permit.id, "NotSent")
        assert audit.for_permit(permit.id, ActivityType.BILLING_STATUS_CHANGE) == []

    def test_unknown_billing_status(self, lifecycle, permit):
        with pytest.raises(ValidationError):
            lifecycle.set_billing_status(permit.id, "Invoiced")


class TestStrictTransitions:
    """Test the opt-in canonical workflow guard"""

    @pytest.fixture
    def strict(self, db_session, audit):
        return PermitLifecycleManager(db_session, audit, strict_transitions=True)

    def test_canonical_step_allowed(self, strict, permit):
        assert strict.set_status(permit.id, "Submitted").status == "Submitted"

    def test_skipping_steps_rejected(self, db_session, strict, permit):
        before = count_entries(db_session, permit.id)
        with pytest.raises(ValidationError, match="Invalid transition"):
            strict.set_status(permit.id, "Approved")

        assert db_session.get(PermitPackage, permit.id).status == "New"
        assert count_entries(db_session, permit.id) == before

    def test_terminal_state_locked(self, strict, permit):
        strict.set_status(permit.id, "Canceled")
        with pytest.raises(ValidationError):
            strict.set_status(permit.id, "New")


def transitions_counted(field: str, to: str) -> float:
    return REGISTRY.get_sample_value(
        "permitflow_status_transitions_total", {"field": field, "to": to}
    ) or 0.0


def auto_tasks_counted(rule: str) -> float:
    return REGISTRY.get_sample_value(
        "permitflow_auto_tasks_created_total", {"rule": rule}
    ) or 0.0


class TestMetricsAfterCommit:
    """Counters move only for changes that committed"""

    def test_committed_transition_counted_once(self, lifecycle, permit):
        before = transitions_counted("status", "Submitted")

        lifecycle.set_status(permit.id, "Submitted")

        assert transitions_counted("status", "Submitted") == before + 1

    def test_failed_commit_not_counted(self, monkeypatch, db_session, lifecycle, permit):
        rule = DEFAULT_RULES[0].name
        status_before = transitions_counted("status", "Approved")
        billing_before = transitions_counted("billing_status", "Paid")
        tasks_before = auto_tasks_counted(rule)

        def failing_commit():
            raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

        monkeypatch.setattr(db_session, "commit", failing_commit)
        with pytest.raises(OperationalError):
            lifecycle.set_status(permit.id, "Approved")
        with pytest.raises(OperationalError):
            lifecycle.set_billing_status(permit.id, "Paid")

        assert transitions_counted("status", "Approved") == status_before
        assert transitions_counted("billing_status", "Paid") == billing_before
        assert auto_tasks_counted(rule) == tasks_before
        assert db_session.info.get("permitflow.pending_counts") is None

    def test_exception_inside_unit_of_work_not_counted(self, db_session, audit, permit):
        manager = PermitLifecycleManager(db_session, audit, ExplodingAutomation())
        before = transitions_counted("status", "Approved")

        with pytest.raises(RuntimeError):
            manager.set_status(permit.id, "Approved")

        assert transitions_counted("status", "Approved") == before


class ExplodingAutomation:
    def evaluate(self, permit, old_status, new_status):
        raise RuntimeError("automation backend down")


class TestAtomicity:
    """State change and audit entry commit together or not at all"""

    def test_failure_after_state_change_rolls_back(self, db_session, audit, permit):
        manager = PermitLifecycleManager(db_session, audit, ExplodingAutomation())
        before = count_entries(db_session, permit.id)

        with pytest.raises(RuntimeError):
            manager.set_status(permit.id, "Approved")

        assert db_session.get(PermitPackage, permit.id).status == "New"
        assert count_entries(db_session, permit.id) == before


class TestUpdateFields:
    """Test plain field edits"""

    def test_fields_updated_without_audit(self, db_session, lifecycle, permit):
        before = count_entries(db_session, permit.id)

        updated = lifecycle.update_fields(permit.id, {"projectName": "Smith Residence Pool", "county": "Pasco"})

        assert updated.project_name == "Smith Residence Pool"
        assert updated.county == "Pasco"
        assert count_entries(db_session, permit.id) == before

    def test_unset_fields_untouched(self, lifecycle, permit):
        lifecycle.update_fields(permit.id, {"county": "Pinellas"})
        updated = lifecycle.update_fields(permit.id, {"permitNumber": "BLD-2026-0042"})

        assert updated.county == "Pinellas"
        assert updated.permit_number == "BLD-2026-0042"

    def test_required_field_cannot_be_cleared(self, lifecycle, permit):
        with pytest.raises(ValidationError, match="project_name"):
            lifecycle.update_fields(permit.id, {"projectName": None})

    def test_state_fields_not_accepted(self, lifecycle, permit):
        with pytest.raises(ValidationError):
            lifecycle.update_fields(permit.id, {"status": "Approved"})
