"""Add contractor compliance fields

Revision ID: 002
Revises: 001
Create Date: 2026-10-19 00:00:00.000000

Adds specialties and insurance expiration dates to contractor and restricts
preferred_contact_method to phone, email or text.
"""
from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None


CONTACT_METHODS = ('phone', 'email', 'text')


def upgrade() -> None:
    op.add_column('contractor', sa.Column('specialties', sa.Text(), nullable=True))
    op.add_column('contractor', sa.Column('workers_comp_expiration_date', sa.TIMESTAMP(timezone=True), nullable=True))
    op.add_column('contractor', sa.Column('liability_expiration_date', sa.TIMESTAMP(timezone=True), nullable=True))
    op.create_check_constraint(
        'ck_contractor_preferred_contact_method',
        'contractor',
        "preferred_contact_method IS NULL OR preferred_contact_method IN ("
        + ", ".join(repr(m) for m in CONTACT_METHODS) + ")",
    )


def downgrade() -> None:
    op.drop_constraint('ck_contractor_preferred_contact_method', 'contractor', type_='check')
    op.drop_column('contractor', 'liability_expiration_date')
    op.drop_column('contractor', 'workers_comp_expiration_date')
    op.drop_column('contractor', 'specialties')
