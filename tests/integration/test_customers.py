"""Integration tests for CustomerService"""

from uuid import uuid4

import pytest
from pydantic import ValidationError as PydanticValidationError

from permitflow.domain.customers import CreateCustomerCommand, UpdateCustomerCommand
from permitflow.errors import NotFoundError, ValidationError
from permitflow.models import Customer


class TestCreateCustomer:
    """Test customer creation and command validation"""

    def test_create(self, db_session, customer_service):
        customer = customer_service.create_customer(CreateCustomerCommand(
            name="  Bayview Condo Association ",
            contactName="Rita Alvarez",
            email="rita@bayview.test",
            mainAddress="400 Bayview Blvd, Clearwater FL",
        ))

        stored = db_session.get(Customer, customer.id)
        assert stored.name == "Bayview Condo Association"
        assert stored.contact_name == "Rita Alvarez"
        assert stored.main_address == "400 Bayview Blvd, Clearwater FL"

    def test_blank_email_is_stored_as_null(self, customer_service):
        customer = customer_service.create_customer(CreateCustomerCommand(name="Walk-in", email=""))
        assert customer.email is None

    def test_invalid_email(self):
        with pytest.raises(PydanticValidationError):
            CreateCustomerCommand(name="Walk-in", email="not-an-email")

    def test_blank_name(self):
        with pytest.raises(PydanticValidationError):
            CreateCustomerCommand(name="   ")


class TestListCustomers:
    """Test ordering, search and pagination"""

    @pytest.fixture(autouse=True)
    def customers(self, customer_service):
        for name, email in [
            ("Zephyr Properties", "ops@zephyr.test"),
            ("Anchor Realty", "leasing@anchor.test"),
            ("Mango Grove HOA", None),
        ]:
            customer_service.create_customer(CreateCustomerCommand(name=name, email=email))

    def test_ordered_by_name(self, customer_service):
        customers, total = customer_service.list_customers()

        assert total == 3
        assert [c.name for c in customers] == ["Anchor Realty", "Mango Grove HOA", "Zephyr Properties"]

    def test_search_is_case_insensitive(self, customer_service):
        customers, total = customer_service.list_customers(search="GROVE")
        assert total == 1
        assert customers[0].name == "Mango Grove HOA"

    def test_search_matches_email(self, customer_service):
        customers, _ = customer_service.list_customers(search="anchor.test")
        assert [c.name for c in customers] == ["Anchor Realty"]

    def test_pagination(self, customer_service):
        customers, total = customer_service.list_customers(page=2, per_page=2)
        assert total == 3
        assert [c.name for c in customers] == ["Zephyr Properties"]


class TestUpdateCustomer:
    def test_partial_update(self, customer_service, customer):
        updated = customer_service.update_customer(
            customer.id, UpdateCustomerCommand(phone="813-555-0100")
        )

        assert updated.phone == "813-555-0100"
        assert updated.name == "Harbor Homes LLC"
        assert updated.email == "office@harborhomes.test"

    def test_clear_email(self, customer_service, customer):
        updated = customer_service.update_customer(customer.id, UpdateCustomerCommand(email=""))
        assert updated.email is None

    def test_missing_customer(self, customer_service):
        with pytest.raises(NotFoundError, match="Customer"):
            customer_service.update_customer(uuid4(), UpdateCustomerCommand(phone="813-555-0100"))


class TestDeleteCustomer:
    def test_delete(self, db_session, customer_service):
        customer = customer_service.create_customer(CreateCustomerCommand(name="Walk-in"))

        customer_service.delete_customer(customer.id)

        assert db_session.get(Customer, customer.id) is None

    def test_refused_while_permits_exist(self, db_session, customer_service, customer, permit):
        with pytest.raises(ValidationError, match="existing permit packages"):
            customer_service.delete_customer(customer.id)

        assert db_session.get(Customer, customer.id) is not None

    def test_missing_customer(self, customer_service):
        with pytest.raises(NotFoundError):
            customer_service.delete_customer(uuid4())
