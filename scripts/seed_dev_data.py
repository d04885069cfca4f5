#!/usr/bin/env python
"""Seed script for a development database.

Creates a customer and a contractor to open permits against, and prints a
bearer token for a development user so the API can be called right away.
The same records can be created through /api/v1/customers and
/api/v1/contractors; this script only saves a first round trip.

Usage:
    alembic upgrade head
    python scripts/seed_dev_data.py

Environment Variables:
    DATABASE_URL: Database connection string
    JWT_SECRET: Signing key shared with the API
    DEV_USER_ID: UUID used as the token subject (default: random)
"""

import os
import sys
from uuid import UUID, uuid4

from permitflow.auth.jwt import create_access_token
from permitflow.database import get_db_session
from permitflow.models import Contractor, Customer


def main():
    """Create seed rows and print their ids and a token."""
    user_id_str = os.getenv("DEV_USER_ID")
    try:
        user_id = UUID(user_id_str) if user_id_str else uuid4()
    except ValueError:
        print(f"ERROR: Invalid DEV_USER_ID format: {user_id_str}")
        sys.exit(1)

    try:
        with get_db_session() as session:
            customer = Customer(
                name="Sample Homeowner",
                contact_name="Pat Rivera",
                email="pat.rivera@example.com",
                main_address="120 Bayshore Dr, Tampa FL",
            )
            contractor = Contractor(
                company_name="Sample Builders Inc",
                license_number="CBC0000000",
                preferred_contact_method="email",
            )
            session.add_all([customer, contractor])
            session.flush()
            customer_id, contractor_id = customer.id, contractor.id
    except Exception as e:
        print(f"ERROR: Failed to seed database: {e}")
        sys.exit(1)

    print("SUCCESS: Seed data created")
    print(f"  Customer:   {customer_id}")
    print(f"  Contractor: {contractor_id}")
    print(f"  User:       {user_id}")
    print(f"  Token:      {create_access_token(user_id)}")


if __name__ == "__main__":
    main()
