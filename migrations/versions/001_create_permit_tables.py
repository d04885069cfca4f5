"""Create permit lifecycle tables

Revision ID: 001
Revises:
Create Date: 2026-10-19 00:00:00.000000

Tables: customer, contractor, permit_package, task, permit_document,
document_version_sequence, activity_log
"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


PERMIT_STATUSES = ('New', 'Submitted', 'InReview', 'RevisionsNeeded', 'Approved',
                   'Issued', 'Inspections', 'FinaledClosed', 'Canceled')
INTERNAL_STAGES = ('WaitingOnContractorDocs', 'WaitingOnCounty', 'WaitingOnBilling',
                   'ReadyToSubmit', 'ReadyToClose', 'InProgress')
BILLING_STATUSES = ('NotSent', 'SentToBilling', 'Billed', 'Paid')
PERMIT_TYPES = ('Building', 'Electrical', 'Plumbing', 'Mechanical', 'Roofing',
                'HVAC', 'Structural', 'MobileHome', 'Other')


def _in_list(column, values):
    return f"{column} IN ({', '.join(repr(v) for v in values)})"


def _timestamps():
    return [
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
    ]


def upgrade():
    """Create permit lifecycle schema."""

    op.create_table(
        'customer',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('contact_name', sa.Text(), nullable=True),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('main_address', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_customer_name', 'customer', ['name'])
    op.create_index('ix_customer_email', 'customer', ['email'])

    op.create_table(
        'contractor',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('company_name', sa.Text(), nullable=False),
        sa.Column('license_number', sa.Text(), nullable=True),
        sa.Column('phone', sa.Text(), nullable=True),
        sa.Column('email', sa.Text(), nullable=True),
        sa.Column('address', sa.Text(), nullable=True),
        sa.Column('preferred_contact_method', sa.Text(), nullable=True),
        sa.Column('notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
    )
    op.create_index('ix_contractor_company_name', 'contractor', ['company_name'])
    op.create_index('ix_contractor_license_number', 'contractor', ['license_number'])

    op.create_table(
        'permit_package',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('customer_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('contractor_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('project_name', sa.Text(), nullable=False),
        sa.Column('project_address', sa.Text(), nullable=False),
        sa.Column('county', sa.Text(), nullable=True),
        sa.Column('jurisdiction_notes', sa.Text(), nullable=True),
        sa.Column('permit_type', sa.Text(), nullable=False),
        sa.Column('status', sa.Text(), server_default='New', nullable=False),
        sa.Column('internal_stage', sa.Text(), nullable=True),
        sa.Column('permit_number', sa.Text(), nullable=True),
        sa.Column('opened_date', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('target_issue_date', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('closed_date', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('billing_status', sa.Text(), server_default='NotSent', nullable=False),
        sa.Column('sent_to_billing_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('billing_notes', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['customer_id'], ['customer.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['contractor_id'], ['contractor.id'], ondelete='CASCADE'),
        sa.CheckConstraint(_in_list('status', PERMIT_STATUSES), name='ck_permit_package_status'),
        sa.CheckConstraint(_in_list('internal_stage', INTERNAL_STAGES), name='ck_permit_package_internal_stage'),
        sa.CheckConstraint(_in_list('billing_status', BILLING_STATUSES), name='ck_permit_package_billing_status'),
        sa.CheckConstraint(_in_list('permit_type', PERMIT_TYPES), name='ck_permit_package_permit_type'),
    )
    op.create_index('ix_permit_package_customer_id', 'permit_package', ['customer_id'])
    op.create_index('ix_permit_package_contractor_id', 'permit_package', ['contractor_id'])
    op.create_index('ix_permit_package_status', 'permit_package', ['status'])
    op.create_index('ix_permit_package_billing_status', 'permit_package', ['billing_status'])
    op.create_index('ix_permit_package_permit_number', 'permit_package', ['permit_number'])
    op.create_index('ix_permit_package_county', 'permit_package', ['county'])

    op.create_table(
        'task',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('permit_package_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('name', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('status', sa.Text(), server_default='NotStarted', nullable=False),
        sa.Column('assigned_to', sa.Text(), nullable=True),
        sa.Column('due_date', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('completed_at', sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column('priority', sa.Text(), nullable=True),
        # Set only on auto-created tasks; unique per permit
        sa.Column('automation_key', sa.Text(), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['permit_package_id'], ['permit_package.id'], ondelete='CASCADE'),
        sa.UniqueConstraint('permit_package_id', 'automation_key', name='uq_task_permit_automation_key'),
    )
    op.create_index('ix_task_permit_package_id', 'task', ['permit_package_id'])
    op.create_index('ix_task_status', 'task', ['status'])
    op.create_index('ix_task_assigned_to', 'task', ['assigned_to'])
    op.create_index('ix_task_due_date', 'task', ['due_date'])

    op.create_table(
        'permit_document',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('permit_package_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('file_name', sa.Text(), nullable=False),
        sa.Column('file_type', sa.Text(), nullable=False),
        sa.Column('category', sa.Text(), nullable=False),
        sa.Column('uploaded_by', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('uploaded_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('version_tag', sa.Text(), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('is_required', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('is_verified', sa.Boolean(), server_default='false', nullable=False),
        sa.Column('status', sa.Text(), server_default='Pending', nullable=False),
        sa.Column('file_size', sa.BigInteger(), nullable=False),
        sa.Column('storage_path', sa.Text(), nullable=False),
        sa.Column('checksum', sa.Text(), nullable=True),
        sa.Column('parent_document_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('version_group_id', postgresql.UUID(as_uuid=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['permit_package_id'], ['permit_package.id'], ondelete='CASCADE'),
        sa.ForeignKeyConstraint(['parent_document_id'], ['permit_document.id'], ondelete='SET NULL'),
        sa.UniqueConstraint('permit_package_id', 'file_name', 'category', 'version_tag',
                            name='uq_permit_document_version_tag'),
    )
    op.create_index('ix_permit_document_permit_package_id', 'permit_document', ['permit_package_id'])
    op.create_index('ix_permit_document_category', 'permit_document', ['category'])
    op.create_index('ix_permit_document_status', 'permit_document', ['status'])
    op.create_index('ix_permit_document_version_group_id', 'permit_document', ['version_group_id'])
    op.create_index('ix_permit_document_parent_document_id', 'permit_document', ['parent_document_id'])

    op.create_table(
        'document_version_sequence',
        sa.Column('permit_package_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('file_name', sa.Text(), nullable=False),
        sa.Column('category', sa.Text(), nullable=False),
        sa.Column('last_version', sa.Integer(), nullable=False),
        sa.PrimaryKeyConstraint('permit_package_id', 'file_name', 'category', name='pk_document_version_sequence'),
        sa.ForeignKeyConstraint(['permit_package_id'], ['permit_package.id'], ondelete='CASCADE'),
    )

    op.create_table(
        'activity_log',
        sa.Column('id', postgresql.UUID(as_uuid=True), server_default=sa.text('gen_random_uuid()'), nullable=False),
        sa.Column('permit_package_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('activity_type', sa.Text(), nullable=False),
        sa.Column('description', sa.Text(), nullable=False),
        sa.Column('old_value', sa.Text(), nullable=True),
        sa.Column('new_value', sa.Text(), nullable=True),
        sa.Column('metadata_json', postgresql.JSONB(astext_type=sa.Text()), nullable=True),
        sa.Column('created_at', sa.TIMESTAMP(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.PrimaryKeyConstraint('id'),
        sa.ForeignKeyConstraint(['permit_package_id'], ['permit_package.id'], ondelete='CASCADE'),
    )
    op.create_index('ix_activity_log_permit_package_id', 'activity_log', ['permit_package_id'])
    op.create_index('ix_activity_log_activity_type', 'activity_log', ['activity_type'])
    op.create_index('ix_activity_log_permit_created_at', 'activity_log', ['permit_package_id', 'created_at'])

    # Activity entries are append-only (deletes only via permit cascade)
    op.execute("""
        CREATE OR REPLACE FUNCTION activity_log_reject_update() RETURNS trigger AS $$
        BEGIN
            RAISE EXCEPTION 'activity_log entries are immutable';
        END;
        $$ LANGUAGE plpgsql
    """)
    op.execute("""
        CREATE TRIGGER activity_log_no_update
        BEFORE UPDATE ON activity_log
        FOR EACH ROW EXECUTE FUNCTION activity_log_reject_update()
    """)


def downgrade():
    """Drop permit lifecycle schema."""
    op.execute("DROP TRIGGER IF EXISTS activity_log_no_update ON activity_log")
    op.execute("DROP FUNCTION IF EXISTS activity_log_reject_update()")
    op.drop_table('activity_log')
    op.drop_table('document_version_sequence')
    op.drop_table('permit_document')
    op.drop_table('task')
    op.drop_table('permit_package')
    op.drop_table('contractor')
    op.drop_table('customer')
