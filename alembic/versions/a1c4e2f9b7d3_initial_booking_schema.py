"""initial booking schema

Revision ID: a1c4e2f9b7d3
Revises:
Create Date: 2026-10-18 09:12:44.310572

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa

# revision identifiers, used by Alembic.
revision: str = 'a1c4e2f9b7d3'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None

ALLOCATION_MODES = ('TimeOnly', 'StaffOnly', 'ResourceOnly', 'StaffAndResource')


def upgrade() -> None:
    """Upgrade schema."""

    # 1. Businesses and their hours
    op.create_table(
        'businesses',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('allocation_mode', sa.Enum(*ALLOCATION_MODES, name='allocation_mode', native_enum=False, length=32), nullable=False),
        sa.Column('timezone', sa.String(50), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('is_active', sa.Boolean(), nullable=True)
    )

    op.create_table(
        'business_hours',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('business_id', sa.Uuid(), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.CheckConstraint('day_of_week BETWEEN 1 AND 7', name='ck_business_hours_day_of_week')
    )
    op.create_index('ix_business_hours_business_id', 'business_hours', ['business_id'])

    # 2. Resource types and instances
    op.create_table(
        'resource_types',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('business_id', sa.Uuid(), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('total_capacity', sa.Integer(), nullable=False),
        sa.CheckConstraint('total_capacity >= 0', name='ck_resource_types_capacity')
    )
    op.create_index('ix_resource_types_business_id', 'resource_types', ['business_id'])

    op.create_table(
        'resources',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('resource_type_id', sa.Uuid(), sa.ForeignKey('resource_types.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True)
    )
    op.create_index('ix_resources_resource_type_id', 'resources', ['resource_type_id'])

    # 3. Services
    op.create_table(
        'services',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('business_id', sa.Uuid(), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('booking_mode', sa.Enum(*ALLOCATION_MODES, name='allocation_mode', native_enum=False, length=32), nullable=True),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.CheckConstraint('duration_minutes > 0', name='ck_services_duration_positive')
    )
    op.create_index('ix_services_business_id', 'services', ['business_id'])
    op.create_index('ix_services_is_active', 'services', ['is_active'])

    op.create_table(
        'service_resource_types',
        sa.Column('service_id', sa.Uuid(), sa.ForeignKey('services.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('resource_type_id', sa.Uuid(), sa.ForeignKey('resource_types.id', ondelete='CASCADE'), primary_key=True)
    )

    # 4. Staff, capabilities and availability rules
    op.create_table(
        'staff',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('business_id', sa.Uuid(), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('is_active', sa.Boolean(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('ix_staff_business_id', 'staff', ['business_id'])

    op.create_table(
        'staff_services',
        sa.Column('staff_id', sa.Uuid(), sa.ForeignKey('staff.id', ondelete='CASCADE'), primary_key=True),
        sa.Column('service_id', sa.Uuid(), sa.ForeignKey('services.id', ondelete='CASCADE'), primary_key=True)
    )

    op.create_table(
        'staff_availability',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('staff_id', sa.Uuid(), sa.ForeignKey('staff.id', ondelete='CASCADE'), nullable=False),
        sa.Column('kind', sa.Enum('SCHEDULE', 'EXCEPTION', name='availability_kind', native_enum=False, length=16), nullable=False),
        sa.Column('day_of_week', sa.Integer(), nullable=True),
        sa.Column('date', sa.Date(), nullable=True),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.CheckConstraint(
            "(kind = 'SCHEDULE' AND day_of_week IS NOT NULL) OR (kind = 'EXCEPTION' AND date IS NOT NULL)",
            name='ck_staff_availability_key'
        )
    )
    op.create_index('ix_staff_availability_staff_id', 'staff_availability', ['staff_id'])
    op.create_index('ix_staff_availability_date', 'staff_availability', ['date'])

    # 5. Customers
    op.create_table(
        'customers',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('business_id', sa.Uuid(), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('name', sa.String(200), nullable=False),
        sa.Column('phone', sa.String(20), nullable=True),
        sa.Column('email', sa.String(255), nullable=True),
        sa.Column('external_id', sa.String(100), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('ix_customers_business_id', 'customers', ['business_id'])
    op.create_index('ix_customers_external_id', 'customers', ['external_id'])

    # 6. Bookings and resource usage
    op.create_table(
        'bookings',
        sa.Column('id', sa.Uuid(), primary_key=True),
        sa.Column('business_id', sa.Uuid(), sa.ForeignKey('businesses.id', ondelete='CASCADE'), nullable=False),
        sa.Column('customer_id', sa.Uuid(), sa.ForeignKey('customers.id', ondelete='CASCADE'), nullable=False),
        sa.Column('service_id', sa.Uuid(), sa.ForeignKey('services.id'), nullable=False),
        sa.Column('staff_id', sa.Uuid(), sa.ForeignKey('staff.id'), nullable=True),
        sa.Column('booking_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('status', sa.Enum('Confirmed', 'Cancelled', 'Completed', name='booking_status', native_enum=False, length=16), nullable=False),
        sa.Column('notes', sa.Text(), nullable=True),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.func.now())
    )
    op.create_index('ix_bookings_business_time', 'bookings', ['business_id', 'booking_time'])
    op.create_index('ix_bookings_staff_time', 'bookings', ['staff_id', 'booking_time'])
    op.create_index('ix_bookings_customer_time', 'bookings', ['customer_id', 'booking_time'])

    op.create_table(
        'resource_usages',
        sa.Column('id', sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column('booking_id', sa.Uuid(), sa.ForeignKey('bookings.id', ondelete='CASCADE'), nullable=False),
        sa.Column('resource_type_id', sa.Uuid(), sa.ForeignKey('resource_types.id'), nullable=False),
        sa.Column('quantity', sa.Integer(), nullable=False),
        sa.CheckConstraint('quantity > 0', name='ck_resource_usages_quantity_positive')
    )
    op.create_index('ix_resource_usages_booking_id', 'resource_usages', ['booking_id'])
    op.create_index('ix_resource_usages_resource_type_id', 'resource_usages', ['resource_type_id'])


def downgrade() -> None:
    """Downgrade schema."""

    # Drop tables in reverse order (due to foreign keys)
    op.drop_index('ix_resource_usages_resource_type_id', 'resource_usages')
    op.drop_index('ix_resource_usages_booking_id', 'resource_usages')
    op.drop_table('resource_usages')

    op.drop_index('ix_bookings_customer_time', 'bookings')
    op.drop_index('ix_bookings_staff_time', 'bookings')
    op.drop_index('ix_bookings_business_time', 'bookings')
    op.drop_table('bookings')

    op.drop_index('ix_customers_external_id', 'customers')
    op.drop_index('ix_customers_business_id', 'customers')
    op.drop_table('customers')

    op.drop_index('ix_staff_availability_date', 'staff_availability')
    op.drop_index('ix_staff_availability_staff_id', 'staff_availability')
    op.drop_table('staff_availability')
    op.drop_table('staff_services')
    op.drop_index('ix_staff_business_id', 'staff')
    op.drop_table('staff')

    op.drop_table('service_resource_types')
    op.drop_index('ix_services_is_active', 'services')
    op.drop_index('ix_services_business_id', 'services')
    op.drop_table('services')

    op.drop_index('ix_resources_resource_type_id', 'resources')
    op.drop_table('resources')
    op.drop_index('ix_resource_types_business_id', 'resource_types')
    op.drop_table('resource_types')

    op.drop_index('ix_business_hours_business_id', 'business_hours')
    op.drop_table('business_hours')
    op.drop_table('businesses')
