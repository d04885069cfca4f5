"""Integration tests for ContractorService"""

from datetime import datetime, timezone
from uuid import uuid4

import pytest
from pydantic import ValidationError as PydanticValidationError

from permitflow.domain.contractors import CreateContractorCommand, UpdateContractorCommand
from permitflow.errors import NotFoundError, ValidationError
from permitflow.models import Contractor


class TestCreateContractor:
    def test_create_with_compliance_fields(self, db_session, contractor_service):
        contractor = contractor_service.create_contractor(CreateContractorCommand(
            companyName="Suncoast Electric",
            licenseNumber="EC13001234",
            preferredContactMethod="text",
            specialties="Service upgrades, generators",
            workersCompExpirationDate="2027-03-31T00:00:00Z",
        ))

        stored = db_session.get(Contractor, contractor.id)
        assert stored.preferred_contact_method == "text"
        assert stored.specialties == "Service upgrades, generators"
        assert stored.workers_comp_expiration_date.date() == datetime(2027, 3, 31, tzinfo=timezone.utc).date()
        assert stored.liability_expiration_date is None

    def test_blank_dates_are_null(self, contractor_service):
        contractor = contractor_service.create_contractor(CreateContractorCommand(
            companyName="Suncoast Electric",
            email="",
            liabilityExpirationDate="",
        ))
        assert contractor.email is None
        assert contractor.liability_expiration_date is None

    def test_unknown_contact_method(self):
        with pytest.raises(PydanticValidationError):
            CreateContractorCommand(companyName="Suncoast Electric", preferredContactMethod="fax")


class TestListContractors:
    @pytest.fixture(autouse=True)
    def contractors(self, contractor_service):
        for company, license_number in [
            ("Tampa Bay Roofing", "CCC1330001"),
            ("Apex Plumbing", "CFC1420002"),
        ]:
            contractor_service.create_contractor(
                CreateContractorCommand(companyName=company, licenseNumber=license_number)
            )

    def test_ordered_by_company_name(self, contractor_service):
        contractors, total = contractor_service.list_contractors()

        assert total == 2
        assert [c.company_name for c in contractors] == ["Apex Plumbing", "Tampa Bay Roofing"]

    def test_search_matches_license_number(self, contractor_service):
        contractors, total = contractor_service.list_contractors(search="ccc133")
        assert total == 1
        assert contractors[0].company_name == "Tampa Bay Roofing"


class TestUpdateContractor:
    def test_partial_update(self, contractor_service, contractor):
        updated = contractor_service.update_contractor(
            contractor.id, UpdateContractorCommand(preferredContactMethod="email")
        )

        assert updated.preferred_contact_method == "email"
        assert updated.license_number == "CBC1234567"

    def test_missing_contractor(self, contractor_service):
        with pytest.raises(NotFoundError, match="Contractor"):
            contractor_service.update_contractor(uuid4(), UpdateContractorCommand(phone="727-555-0199"))


class TestDeleteContractor:
    def test_delete(self, db_session, contractor_service):
        contractor = contractor_service.create_contractor(
            CreateContractorCommand(companyName="Apex Plumbing")
        )

        contractor_service.delete_contractor(contractor.id)

        assert db_session.get(Contractor, contractor.id) is None

    def test_refused_while_permits_exist(self, db_session, contractor_service, contractor, permit):
        with pytest.raises(ValidationError, match="existing permit packages"):
            contractor_service.delete_contractor(contractor.id)

        assert db_session.get(Contractor, contractor.id) is not None
