"""Initial Mowsy schema

Revision ID: 001_initial
Revises:
Create Date: 2026-10-19

Users, jobs, job applications, equipment, rentals, payments and reviews.
Money as NUMERIC(10, 2).
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = '001_initial'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


visibility = sa.Enum('zip_code', 'school_district', name='visibility')
job_category = sa.Enum('mowing', 'weeding', 'leaf_removal', 'trimming', 'cleanup', 'other', name='jobcategory')
job_status = sa.Enum('open', 'in_progress', 'completed', 'cancelled', name='jobstatus')
application_status = sa.Enum('pending', 'accepted', 'rejected', name='applicationstatus')
equipment_category = sa.Enum('mower', 'weed_whacker', 'edger', name='equipmentcategory')
fuel_type = sa.Enum('gas', 'electric', 'battery', name='fueltype')
power_type = sa.Enum('corded', 'cordless', 'gas', 'push', name='powertype')
rental_status = sa.Enum('requested', 'approved', 'active', 'completed', 'cancelled', name='rentalstatus')
payment_type = sa.Enum('job_payment', 'equipment_rental', name='paymenttype')
payment_status = sa.Enum('pending', 'succeeded', 'failed', 'cancelled', name='paymentstatus')
review_type = sa.Enum('job_completion', 'equipment_rental', name='reviewtype')


def upgrade() -> None:
    # === USERS ===
    op.create_table(
        'users',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('email', sa.String(255), unique=True, nullable=False, index=True),
        sa.Column('password_hash', sa.String(255), nullable=False),
        sa.Column('first_name', sa.String(100), nullable=False),
        sa.Column('last_name', sa.String(100), nullable=False),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('address', sa.String(255), nullable=True),
        sa.Column('city', sa.String(100), nullable=True),
        sa.Column('state', sa.String(50), nullable=True),
        sa.Column('zip_code', sa.String(10), nullable=True, index=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('elementary_school_district_name', sa.String(255), nullable=True, index=True),
        sa.Column('elementary_school_district_code', sa.String(50), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('stripe_customer_id', sa.String(255), nullable=True),
        sa.Column('insurance_document_url', sa.String(500), nullable=True),
        sa.Column('insurance_verified', sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column('insurance_verified_at', sa.DateTime(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    # === JOBS ===
    op.create_table(
        'jobs',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('title', sa.String(255), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('special_notes', sa.Text(), nullable=True),
        sa.Column('category', job_category, nullable=False),
        sa.Column('fixed_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('estimated_hours', sa.Float(), nullable=True),
        sa.Column('address', sa.String(255), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('zip_code', sa.String(10), nullable=True, index=True),
        sa.Column('elementary_school_district_name', sa.String(255), nullable=True, index=True),
        sa.Column('visibility', visibility, nullable=False),
        sa.Column('status', job_status, nullable=False, server_default='open', index=True),
        sa.Column('scheduled_date', sa.DateTime(), nullable=True),
        sa.Column('completion_image_urls', sa.JSON(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True, index=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    # === JOB APPLICATIONS ===
    op.create_table(
        'job_applications',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('job_id', sa.Integer(), sa.ForeignKey('jobs.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('message', sa.Text(), nullable=True),
        sa.Column('status', application_status, nullable=False, server_default='pending'),
        sa.Column('applied_at', sa.DateTime(), nullable=True),
        sa.UniqueConstraint('job_id', 'user_id', name='uq_job_applications_job_user'),
    )

    # === EQUIPMENT ===
    op.create_table(
        'equipment',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('name', sa.String(255), nullable=False),
        sa.Column('make', sa.String(100), nullable=True),
        sa.Column('model', sa.String(100), nullable=True),
        sa.Column('category', equipment_category, nullable=False),
        sa.Column('fuel_type', fuel_type, nullable=True),
        sa.Column('power_type', power_type, nullable=True),
        sa.Column('daily_rental_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('image_urls', sa.JSON(), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column('address', sa.String(255), nullable=True),
        sa.Column('latitude', sa.Float(), nullable=True),
        sa.Column('longitude', sa.Float(), nullable=True),
        sa.Column('zip_code', sa.String(10), nullable=True, index=True),
        sa.Column('elementary_school_district_name', sa.String(255), nullable=True, index=True),
        sa.Column('visibility', visibility, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True, index=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    # === EQUIPMENT RENTALS ===
    op.create_table(
        'equipment_rentals',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('equipment_id', sa.Integer(), sa.ForeignKey('equipment.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('renter_user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('start_date', sa.DateTime(), nullable=False),
        sa.Column('end_date', sa.DateTime(), nullable=False),
        sa.Column('total_price', sa.Numeric(10, 2), nullable=False),
        sa.Column('status', rental_status, nullable=False, server_default='requested', index=True),
        sa.Column('pickup_notes', sa.Text(), nullable=True),
        sa.Column('return_notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )
    op.create_index(
        'ix_equipment_rentals_equipment_dates',
        'equipment_rentals',
        ['equipment_id', 'start_date', 'end_date'],
    )

    # === PAYMENTS ===
    op.create_table(
        'payments',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('stripe_payment_intent_id', sa.String(255), unique=True, nullable=False),
        sa.Column('amount', sa.Numeric(10, 2), nullable=False),
        sa.Column('currency', sa.String(3), nullable=False, server_default='usd'),
        sa.Column('type', payment_type, nullable=False),
        sa.Column('related_id', sa.Integer(), nullable=False),
        sa.Column('status', payment_status, nullable=False, server_default='pending'),
        sa.Column('created_at', sa.DateTime(), nullable=True, index=True),
        sa.Column('updated_at', sa.DateTime(), nullable=True),
    )

    # === REVIEWS ===
    op.create_table(
        'reviews',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('reviewer_user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False),
        sa.Column('reviewed_user_id', sa.Integer(), sa.ForeignKey('users.id', ondelete='CASCADE'), nullable=False, index=True),
        sa.Column('job_id', sa.Integer(), sa.ForeignKey('jobs.id', ondelete='SET NULL'), nullable=True),
        sa.Column('equipment_rental_id', sa.Integer(), sa.ForeignKey('equipment_rentals.id', ondelete='SET NULL'), nullable=True),
        sa.Column('rating', sa.Integer(), nullable=False),
        sa.Column('comment', sa.Text(), nullable=True),
        sa.Column('type', review_type, nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=True),
        sa.CheckConstraint('rating >= 1 AND rating <= 5', name='ck_reviews_rating_range'),
    )


def downgrade() -> None:
    op.drop_table('reviews')
    op.drop_table('payments')
    op.drop_index('ix_equipment_rentals_equipment_dates', table_name='equipment_rentals')
    op.drop_table('equipment_rentals')
    op.drop_table('equipment')
    op.drop_table('job_applications')
    op.drop_table('jobs')
    op.drop_table('users')

    bind = op.get_bind()
    for enum_type in (
        review_type,
        payment_status,
        payment_type,
        rental_status,
        power_type,
        fuel_type,
        equipment_category,
        application_status,
        job_status,
        job_category,
        visibility,
    ):
        enum_type.drop(bind, checkfirst=True)
