"""Integration tests for the customer and contractor endpoints"""

from datetime import timedelta
from uuid import uuid4

from fastapi.testclient import TestClient


class TestCustomerEndpoints:
    def test_create(self, client: TestClient):
        response = client.post("/api/v1/customers", json={
            "name": "Bayview Condo Association",
            "contactName": "Rita Alvarez",
            "email": "",
        })

        assert response.status_code == 201
        data = response.json()
        assert data["name"] == "Bayview Condo Association"
        assert data["contact_name"] == "Rita Alvarez"
        assert data["email"] is None

    def test_invalid_email_is_422(self, client: TestClient):
        response = client.post("/api/v1/customers", json={"name": "Walk-in", "email": "nope"})
        assert response.status_code == 422

    def test_unknown_field_is_422(self, client: TestClient):
        response = client.post("/api/v1/customers", json={"name": "Walk-in", "fax": "555"})
        assert response.status_code == 422

    def test_list_search_and_paginate(self, client: TestClient, customer):
        client.post("/api/v1/customers", json={"name": "Anchor Realty"})
        client.post("/api/v1/customers", json={"name": "Anchor Marine"})

        data = client.get("/api/v1/customers", params={"search": "anchor", "per_page": 1}).json()

        assert data["total"] == 2
        assert data["total_pages"] == 2
        assert [c["name"] for c in data["items"]] == ["Anchor Marine"]

    def test_get_lists_permits_newest_first(self, client: TestClient, db_session, customer, make_permit):
        older = make_permit("Older Addition")
        newer = make_permit("Newer Pool")
        older.opened_date = newer.opened_date - timedelta(days=3)
        db_session.commit()

        response = client.get(f"/api/v1/customers/{customer.id}")

        assert response.status_code == 200
        permits = response.json()["permit_packages"]
        assert [p["project_name"] for p in permits] == ["Newer Pool", "Older Addition"]

    def test_patch(self, client: TestClient, customer):
        response = client.patch(f"/api/v1/customers/{customer.id}", json={"mainAddress": "9 Dock St"})

        assert response.status_code == 200
        assert response.json()["main_address"] == "9 Dock St"
        assert response.json()["name"] == "Harbor Homes LLC"

    def test_delete_blocked_by_permits(self, client: TestClient, customer, permit):
        response = client.delete(f"/api/v1/customers/{customer.id}")

        assert response.status_code == 400
        assert response.json()["error"] == "validation_error"

    def test_delete(self, client: TestClient):
        created = client.post("/api/v1/customers", json={"name": "Walk-in"}).json()

        assert client.delete(f"/api/v1/customers/{created['id']}").status_code == 204
        assert client.get(f"/api/v1/customers/{created['id']}").status_code == 404

    def test_unknown_customer(self, client: TestClient):
        assert client.get(f"/api/v1/customers/{uuid4()}").status_code == 404


class TestContractorEndpoints:
    def test_create(self, client: TestClient):
        response = client.post("/api/v1/contractors", json={
            "companyName": "Suncoast Electric",
            "licenseNumber": "EC13001234",
            "preferredContactMethod": "phone",
            "liabilityExpirationDate": "2027-06-30T00:00:00Z",
        })

        assert response.status_code == 201
        data = response.json()
        assert data["company_name"] == "Suncoast Electric"
        assert data["preferred_contact_method"] == "phone"
        assert data["liability_expiration_date"].startswith("2027-06-30")

    def test_unknown_contact_method_is_422(self, client: TestClient):
        response = client.post("/api/v1/contractors", json={
            "companyName": "Suncoast Electric",
            "preferredContactMethod": "pager",
        })
        assert response.status_code == 422

    def test_list(self, client: TestClient, contractor):
        data = client.get("/api/v1/contractors", params={"search": "gulf"}).json()

        assert data["total"] == 1
        assert data["items"][0]["license_number"] == "CBC1234567"

    def test_get_includes_permits(self, client: TestClient, contractor, permit):
        data = client.get(f"/api/v1/contractors/{contractor.id}").json()
        assert [p["id"] for p in data["permit_packages"]] == [str(permit.id)]

    def test_patch(self, client: TestClient, contractor):
        response = client.patch(f"/api/v1/contractors/{contractor.id}", json={"specialties": "Roofing"})

        assert response.status_code == 200
        assert response.json()["specialties"] == "Roofing"

    def test_delete_blocked_by_permits(self, client: TestClient, contractor, permit):
        assert client.delete(f"/api/v1/contractors/{contractor.id}").status_code == 400

    def test_requires_authentication(self, anonymous_client: TestClient):
        assert anonymous_client.get("/api/v1/contractors").status_code in (401, 403)
