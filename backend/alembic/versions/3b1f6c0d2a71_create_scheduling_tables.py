"""Create appointments, booked_intervals and slot_claims tables

Revision ID: 3b1f6c0d2a71
Revises:
Create Date: 2026-10-17 00:00:00.000000

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '3b1f6c0d2a71'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        'appointments',
        sa.Column('id', sa.String(length=36), nullable=False),
        sa.Column('owner_id', sa.String(), nullable=False),
        sa.Column('customer_user_id', sa.String(), nullable=False),
        sa.Column('service_id', sa.String(), nullable=False),
        sa.Column('service_name', sa.String(), nullable=False),
        sa.Column('price_in_cents', sa.BigInteger(), nullable=False),
        sa.Column('duration_minutes', sa.Integer(), nullable=False),
        sa.Column('start_at', sa.DateTime(), nullable=False),
        sa.Column('customer_name', sa.String(), nullable=False),
        sa.Column('customer_phone', sa.String(), nullable=False),
        sa.Column('customer_email', sa.String(), nullable=True),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_appointments_owner_start', 'appointments', ['owner_id', 'start_at'])
    op.create_index('idx_appointments_customer_start', 'appointments', ['customer_user_id', 'start_at'])

    op.create_table(
        'booked_intervals',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('owner_id', sa.String(), nullable=False),
        sa.Column('appointment_id', sa.String(length=36), nullable=True),
        sa.Column('start_at', sa.DateTime(), nullable=False),
        sa.Column('end_at', sa.DateTime(), nullable=False),
        sa.Column('created_at', sa.DateTime(), nullable=False),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_booked_intervals_owner_start', 'booked_intervals', ['owner_id', 'start_at'])
    op.create_index('idx_booked_intervals_appointment', 'booked_intervals', ['appointment_id'])

    op.create_table(
        'slot_claims',
        sa.Column('id', sa.Integer(), autoincrement=True, nullable=False),
        sa.Column('owner_id', sa.String(), nullable=False),
        sa.Column('bucket_start', sa.DateTime(), nullable=False),
        sa.Column('appointment_id', sa.String(length=36), nullable=True),
        sa.PrimaryKeyConstraint('id'),
        sa.UniqueConstraint('owner_id', 'bucket_start', name='uq_slot_claims_owner_bucket')
    )
    op.create_index('idx_slot_claims_appointment', 'slot_claims', ['appointment_id'])


def downgrade() -> None:
    op.drop_index('idx_slot_claims_appointment', table_name='slot_claims')
    op.drop_table('slot_claims')

    op.drop_index('idx_booked_intervals_appointment', table_name='booked_intervals')
    op.drop_index('idx_booked_intervals_owner_start', table_name='booked_intervals')
    op.drop_table('booked_intervals')

    op.drop_index('idx_appointments_customer_start', table_name='appointments')
    op.drop_index('idx_appointments_owner_start', table_name='appointments')
    op.drop_table('appointments')
