"""Pytest fixtures for the permit lifecycle components.

Provides reusable test fixtures for:
- In-memory SQLite database with a fresh schema per test
- Seeded customer, contractor and permit package
- Local document storage rooted in tmp_path
- Component instances bound to the test session and acting user
- Authenticated FastAPI test client

Usage:
    def test_approve(lifecycle, permit):
        lifecycle.set_status(permit.id, "Approved")
"""

from typing import Generator
from uuid import UUID, uuid4

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from permitflow.audit import ActivityAuditLog
from permitflow.auth.jwt import create_access_token
from permitflow.automation import TaskAutomationEngine
from permitflow.contractors import ContractorService
from permitflow.customers import CustomerService
from permitflow.database import build_engine
from permitflow.documents import DocumentVersionLedger
from permitflow.domain.permits import CreatePermitCommand
from permitflow.infrastructure.storage import LocalStorageAdapter
from permitflow.models import Base, Contractor, Customer, PermitPackage
from permitflow.permits import PermitLifecycleManager, PermitService
from permitflow.tasks import TaskService


@pytest.fixture(scope="function")
def engine():
    """Shared in-memory SQLite engine with the full schema."""
    engine = build_engine(
        "sqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Session, None, None]:
    """Create a fresh database session for each test."""
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def actor_id() -> UUID:
    return uuid4()


@pytest.fixture
def audit(db_session: Session, actor_id: UUID) -> ActivityAuditLog:
    return ActivityAuditLog(db_session, actor_id=actor_id)


@pytest.fixture
def storage(tmp_path) -> LocalStorageAdapter:
    return LocalStorageAdapter(root_path=str(tmp_path / "storage"))


@pytest.fixture
def lifecycle(db_session: Session, audit: ActivityAuditLog) -> PermitLifecycleManager:
    return PermitLifecycleManager(db_session, audit, TaskAutomationEngine(db_session, audit))


@pytest.fixture
def permit_service(db_session, audit, storage) -> PermitService:
    return PermitService(db_session, audit, storage)


@pytest.fixture
def task_service(db_session, audit) -> TaskService:
    return TaskService(db_session, audit)


@pytest.fixture
def customer_service(db_session, actor_id) -> CustomerService:
    return CustomerService(db_session, actor_id=actor_id)


@pytest.fixture
def contractor_service(db_session, actor_id) -> ContractorService:
    return ContractorService(db_session, actor_id=actor_id)


@pytest.fixture
def ledger(db_session, audit, storage) -> DocumentVersionLedger:
    return DocumentVersionLedger(db_session, audit, storage)


@pytest.fixture
def customer(db_session: Session) -> Customer:
    customer = Customer(name="Harbor Homes LLC", email="office@harborhomes.test")
    db_session.add(customer)
    db_session.commit()
    return customer


@pytest.fixture
def contractor(db_session: Session) -> Contractor:
    contractor = Contractor(company_name="Gulf Coast Builders", license_number="CBC1234567")
    db_session.add(contractor)
    db_session.commit()
    return contractor


@pytest.fixture
def make_permit(permit_service, customer, contractor):
    """Factory for additional permits owned by the seeded customer/contractor."""

    def _make(project_name: str = "Smith Residence Addition", **fields) -> PermitPackage:
        command = CreatePermitCommand(
            customer_id=customer.id,
            contractor_id=contractor.id,
            project_name=project_name,
            project_address=fields.pop("project_address", "120 Bayshore Dr, Tampa FL"),
            permit_type=fields.pop("permit_type", "Building"),
            **fields,
        )
        return permit_service.create_permit(command)

    return _make


@pytest.fixture
def permit(make_permit) -> PermitPackage:
    """A permit package in status New."""
    return make_permit()


@pytest.fixture
def auth_token(actor_id: UUID) -> str:
    return create_access_token(actor_id)


@pytest.fixture
def client(db_session: Session, storage: LocalStorageAdapter, auth_token: str):
    """Test client authenticated as the acting user.

    get_db and get_storage are overridden so API calls share the test
    session and the tmp_path storage.
    """
    from permitflow.database import get_db
    from permitflow.dependencies import get_storage
    from permitflow.main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage

    client = TestClient(app)
    client.headers.update({"Authorization": f"Bearer {auth_token}"})
    try:
        yield client
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def anonymous_client(db_session: Session, storage: LocalStorageAdapter):
    """Test client without an Authorization header."""
    from permitflow.database import get_db
    from permitflow.dependencies import get_storage
    from permitflow.main import app

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_storage] = lambda: storage
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()
