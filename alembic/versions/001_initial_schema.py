"""Initial schema: profiles, jobs, applications, shift OTPs and logs, ratings, payments

Revision ID: 001
Revises:
Create Date: 2026-10-17 09:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '001'
down_revision = None
branch_labels = None
depends_on = None


def _uuid():
    return postgresql.UUID(as_uuid=True)


def upgrade() -> None:
    """Create the marketplace tables and shift verification constraints."""

    op.create_table(
        'profiles',
        sa.Column('user_id', _uuid(), primary_key=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('phone', sa.String(20), nullable=False),
        sa.Column('role', sa.String(20), nullable=False),
        sa.Column('skill', sa.String(255), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('wage', sa.Numeric(10, 2), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('NOW()')),
        sa.CheckConstraint("role IN ('worker', 'contractor')", name='check_profile_role'),
    )
    op.create_index('ix_profiles_phone', 'profiles', ['phone'])

    op.create_table(
        'jobs',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('contractor_id', _uuid(), sa.ForeignKey('profiles.user_id'), nullable=False),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', sa.String(255), nullable=True),
        sa.Column('wage', sa.Numeric(10, 2), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('NOW()')),
    )
    op.create_index('ix_jobs_contractor_id', 'jobs', ['contractor_id'])

    op.create_table(
        'applications',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('worker_id', _uuid(), sa.ForeignKey('profiles.user_id'), nullable=False),
        sa.Column('contractor_id', _uuid(), sa.ForeignKey('profiles.user_id'), nullable=False),
        sa.Column('job_id', _uuid(), sa.ForeignKey('jobs.id'), nullable=False),
        sa.Column('status', sa.String(20), nullable=False, server_default='pending'),
        sa.Column('offered_wage', sa.Numeric(10, 2), nullable=True),
        sa.Column('contractor_wage', sa.Numeric(10, 2), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('NOW()')),
        sa.Column('updated_at', sa.DateTime(), nullable=False, server_default=sa.text('NOW()')),
        sa.CheckConstraint(
            "status IN ('pending', 'accepted', 'rejected')",
            name='check_application_status'
        ),
    )
    op.create_index('ix_applications_worker_id', 'applications', ['worker_id'])
    op.create_index('ix_applications_contractor_id', 'applications', ['contractor_id'])
    op.create_index('ix_applications_job_id', 'applications', ['job_id'])

    op.create_table(
        'shift_otps',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('application_id', _uuid(), sa.ForeignKey('applications.id'), nullable=False),
        sa.Column('contractor_id', _uuid(), sa.ForeignKey('profiles.user_id'), nullable=False),
        sa.Column('worker_id', _uuid(), sa.ForeignKey('profiles.user_id'), nullable=False),
        sa.Column('job_id', _uuid(), sa.ForeignKey('jobs.id'), nullable=False),
        sa.Column('code', sa.String(6), nullable=False),
        sa.Column('type', sa.String(10), nullable=False),
        sa.Column('expires_at', sa.DateTime(), nullable=False),
        sa.Column('used', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('NOW()')),
        sa.CheckConstraint("type IN ('start', 'end')", name='check_otp_type'),
    )
    op.create_index('idx_shift_otps_lookup', 'shift_otps', ['application_id', 'type', 'used'])
    op.create_index('idx_shift_otps_contractor_pending', 'shift_otps', ['contractor_id', 'used'])

    op.create_table(
        'shift_logs',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('worker_id', _uuid(), sa.ForeignKey('profiles.user_id'), nullable=False),
        sa.Column('contractor_id', _uuid(), sa.ForeignKey('profiles.user_id'), nullable=False),
        sa.Column('job_id', _uuid(), sa.ForeignKey('jobs.id'), nullable=False),
        sa.Column('start_time', sa.DateTime(), nullable=False),
        sa.Column('end_time', sa.DateTime(), nullable=True),
        sa.Column('status', sa.String(20), nullable=False, server_default='ongoing'),
        sa.CheckConstraint("status IN ('ongoing', 'completed')", name='check_shift_status'),
        sa.CheckConstraint(
            "(status = 'ongoing' AND end_time IS NULL) OR "
            "(status = 'completed' AND end_time IS NOT NULL AND end_time >= start_time)",
            name='check_shift_end_time'
        ),
    )
    op.create_index('ix_shift_logs_job_id', 'shift_logs', ['job_id'])
    # At most one ongoing shift per (job, contractor, worker)
    op.create_index(
        'uq_shift_logs_one_ongoing',
        'shift_logs',
        ['job_id', 'contractor_id', 'worker_id'],
        unique=True,
        postgresql_where=sa.text("status = 'ongoing'"),
    )

    op.create_table(
        'ratings',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('rater_id', _uuid(), sa.ForeignKey('profiles.user_id'), nullable=False),
        sa.Column('rated_id', _uuid(), sa.ForeignKey('profiles.user_id'), nullable=False),
        sa.Column('job_id', _uuid(), sa.ForeignKey('jobs.id'), nullable=False),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('review', sa.Text(), nullable=False, server_default=''),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('NOW()')),
        sa.CheckConstraint('rating BETWEEN 1 AND 5', name='check_rating_range'),
    )
    op.create_index('ix_ratings_rated_id', 'ratings', ['rated_id'])

    op.create_table(
        'payments',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('application_id', _uuid(), sa.ForeignKey('applications.id'), nullable=False),
        sa.Column('contractor_id', _uuid(), sa.ForeignKey('profiles.user_id'), nullable=False),
        sa.Column('worker_id', _uuid(), sa.ForeignKey('profiles.user_id'), nullable=False),
        sa.Column('job_id', _uuid(), sa.ForeignKey('jobs.id'), nullable=False),
        sa.Column('razorpay_order_id', sa.String(64), nullable=False),
        sa.Column('razorpay_payment_id', sa.String(64), nullable=False, unique=True),
        sa.Column('razorpay_signature', sa.String(128), nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='INR'),
        sa.Column('created_at', sa.DateTime(), nullable=False, server_default=sa.text('NOW()')),
    )
    op.create_index('ix_payments_application_id', 'payments', ['application_id'])

    op.create_table(
        'audit_logs',
        sa.Column('id', _uuid(), primary_key=True),
        sa.Column('actor_id', _uuid(), nullable=True),
        sa.Column('table_name', sa.String(255), nullable=False),
        sa.Column('record_id', _uuid(), nullable=False),
        sa.Column('action', sa.String(50), nullable=False),
        sa.Column('old_values', postgresql.JSONB(), nullable=True),
        sa.Column('new_values', postgresql.JSONB(), nullable=True),
        sa.Column('reason', sa.Text(), nullable=True),
        sa.Column('timestamp', sa.DateTime(), nullable=False, server_default=sa.text('NOW()')),
    )
    op.create_index('idx_audit_logs_record', 'audit_logs', ['table_name', 'record_id'])


def downgrade() -> None:
    """Drop the marketplace tables."""
    op.drop_index('idx_audit_logs_record', table_name='audit_logs')
    op.drop_table('audit_logs')
    op.drop_index('ix_payments_application_id', table_name='payments')
    op.drop_table('payments')
    op.drop_index('ix_ratings_rated_id', table_name='ratings')
    op.drop_table('ratings')
    op.drop_index('uq_shift_logs_one_ongoing', table_name='shift_logs')
    op.drop_index('ix_shift_logs_job_id', table_name='shift_logs')
    op.drop_table('shift_logs')
    op.drop_index('idx_shift_otps_contractor_pending', table_name='shift_otps')
    op.drop_index('idx_shift_otps_lookup', table_name='shift_otps')
    op.drop_table('shift_otps')
    op.drop_index('ix_applications_job_id', table_name='applications')
    op.drop_index('ix_applications_contractor_id', table_name='applications')
    op.drop_index('ix_applications_worker_id', table_name='applications')
    op.drop_table('applications')
    op.drop_index('ix_jobs_contractor_id', table_name='jobs')
    op.drop_table('jobs')
    op.drop_index('ix_profiles_phone', table_name='profiles')
    op.drop_table('profiles')
