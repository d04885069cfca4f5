"""Integration tests for TaskService (manual tasks)"""

from datetime import datetime, timedelta, timezone
from uuid import uuid4

import pytest

from permitflow.domain.activity import ActivityType
from permitflow.domain.tasks import CreateTaskCommand, UpdateTaskCommand
from permitflow.errors import NotFoundError, ValidationError


class TestCreateTask:
    """Test task creation"""

    def test_create_writes_task_created(self, audit, task_service, permit):
        task = task_service.create_task(permit.id, CreateTaskCommand(
            name="Call county plans examiner",
            assignedTo="dana@permitflow.test",
            priority="medium",
        ))

        assert task.status == "NotStarted"
        assert task.completed_at is None
        assert task.automation_key is None
        (entry,) = audit.for_permit(permit.id, ActivityType.TASK_CREATED)
        assert entry.description == 'Task "Call county plans examiner" created'
        assert entry.metadata_json == {"taskId": str(task.id)}

    def test_create_completed_sets_completed_at(self, task_service, permit):
        task = task_service.create_task(permit.id, CreateTaskCommand(name="Collect NOC", status="Completed"))
        assert task.completed_at is not None

    def test_invalid_status(self, task_service, permit):
        with pytest.raises(ValidationError):
            task_service.create_task(permit.id, CreateTaskCommand(name="Collect NOC", status="Done"))

    def test_invalid_priority(self, task_service, permit):
        with pytest.raises(ValidationError):
            task_service.create_task(permit.id, CreateTaskCommand(name="Collect NOC", priority="urgent"))

    def test_missing_permit(self, task_service):
        with pytest.raises(NotFoundError, match="Permit"):
            task_service.create_task(uuid4(), CreateTaskCommand(name="Collect NOC"))


class TestUpdateTask:
    """Test status changes and completed_at handling"""

    @pytest.fixture
    def task(self, task_service, permit):
        return task_service.create_task(permit.id, CreateTaskCommand(name="Collect NOC"))

    def test_complete(self, audit, task_service, task, permit):
        updated = task_service.update_task(task.id, UpdateTaskCommand(status="Completed"))

        assert updated.status == "Completed"
        assert updated.completed_at is not None
        (entry,) = audit.for_permit(permit.id, ActivityType.TASK_COMPLETED)
        assert entry.description == 'Task "Collect NOC" status changed to Completed'
        assert (entry.old_value, entry.new_value) == ("NotStarted", "Completed")

    def test_reopen_clears_completed_at(self, audit, task_service, task, permit):
        task_service.update_task(task.id, UpdateTaskCommand(status="Completed"))
        reopened = task_service.update_task(task.id, UpdateTaskCommand(status="InProgress"))

        assert reopened.completed_at is None
        latest = audit.for_permit(permit.id, ActivityType.FIELD_UPDATED)[0]
        assert (latest.old_value, latest.new_value) == ("Completed", "InProgress")

    def test_non_status_edit_writes_nothing(self, db_session, audit, task_service, task, permit):
        before = len(audit.for_permit(permit.id))
        due = datetime(2026, 11, 2, tzinfo=timezone.utc)

        updated = task_service.update_task(task.id, UpdateTaskCommand(assignedTo="lee", dueDate=due, priority="low"))

        assert updated.assigned_to == "lee"
        assert updated.priority == "low"
        assert len(audit.for_permit(permit.id)) == before

    def test_same_status_writes_nothing(self, audit, task_service, task, permit):
        before = len(audit.for_permit(permit.id))
        task_service.update_task(task.id, UpdateTaskCommand(status="NotStarted"))
        assert len(audit.for_permit(permit.id)) == before

    def test_empty_name_rejected(self, task_service, task):
        with pytest.raises(ValidationError):
            task_service.update_task(task.id, UpdateTaskCommand(name=None))

    def test_missing_task(self, task_service):
        with pytest.raises(NotFoundError, match="Task"):
            task_service.update_task(uuid4(), UpdateTaskCommand(status="Completed"))


class TestListAndDelete:
    """Test ordering and deletion"""

    def test_ordered_by_status_then_due_date(self, task_service, permit):
        now = datetime.now(timezone.utc)

        def create(name, status, due=None):
            task_service.create_task(permit.id, CreateTaskCommand(name=name, status=status, dueDate=due))

        create("done", "Completed", now)
        create("later", "NotStarted", now + timedelta(days=7))
        create("undated", "NotStarted")
        create("working", "InProgress", now)
        create("sooner", "NotStarted", now + timedelta(days=1))
        create("blocked", "Waiting", now)

        names = [t.name for t in task_service.list_tasks(permit.id)]
        assert names == ["sooner", "later", "undated", "working", "blocked", "done"]

    def test_list_for_missing_permit(self, task_service):
        with pytest.raises(NotFoundError):
            task_service.list_tasks(uuid4())

    def test_delete(self, task_service, permit):
        task = task_service.create_task(permit.id, CreateTaskCommand(name="Collect NOC"))

        task_service.delete_task(task.id)

        assert task_service.list_tasks(permit.id) == []
        with pytest.raises(NotFoundError):
            task_service.get_task(task.id)
