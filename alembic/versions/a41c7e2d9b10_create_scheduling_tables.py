"""create_scheduling_tables

Revision ID: a41c7e2d9b10
Revises:
Create Date: 2026-10-17 09:12:41.318204

"""
from typing import Sequence, Union
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = 'a41c7e2d9b10'
down_revision: Union[str, Sequence[str], None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    # Weekly availability rules
    op.create_table('appointment_availability_rules',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('weekday', sa.Integer(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=False),
        sa.Column('end_time', sa.Time(), nullable=False),
        sa.Column('timezone', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('weekday >= 0 AND weekday <= 6', name='chk_availability_rule_weekday'),
        sa.CheckConstraint('end_time > start_time', name='chk_availability_rule_time_range'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_availability_rules_org_user', 'appointment_availability_rules',
                    ['organization_id', 'user_id'], unique=False)

    # Date overrides
    op.create_table('appointment_availability_overrides',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('date', sa.Date(), nullable=False),
        sa.Column('is_available', sa.Boolean(), nullable=False),
        sa.Column('start_time', sa.Time(), nullable=True),
        sa.Column('end_time', sa.Time(), nullable=True),
        sa.Column('timezone', sa.String(length=100), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('end_time IS NULL OR start_time IS NULL OR end_time > start_time',
                           name='chk_availability_override_time_range'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_availability_overrides_org_user_date', 'appointment_availability_overrides',
                    ['organization_id', 'user_id', 'date'], unique=False)

    # Appointments
    op.create_table('appointments',
        sa.Column('id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('organization_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('user_id', postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column('lead_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('lead_service_id', postgresql.UUID(as_uuid=True), nullable=True),
        sa.Column('type', sa.String(length=20), nullable=False),
        sa.Column('title', sa.String(length=200), nullable=False),
        sa.Column('description', sa.Text(), nullable=True),
        sa.Column('location', sa.String(length=500), nullable=True),
        sa.Column('meeting_link', sa.String(length=500), nullable=True),
        sa.Column('start_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('end_time', sa.DateTime(timezone=True), nullable=False),
        sa.Column('all_day', sa.Boolean(), nullable=False),
        sa.Column('status', sa.String(length=20), nullable=False),
        sa.Column('created_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.Column('updated_at', sa.DateTime(timezone=True), server_default=sa.text('now()'), nullable=False),
        sa.CheckConstraint('end_time > start_time', name='chk_appointment_time_range'),
        sa.CheckConstraint("type <> 'lead_visit' OR (lead_id IS NOT NULL AND lead_service_id IS NOT NULL)",
                           name='chk_appointment_lead_visit_refs'),
        sa.PrimaryKeyConstraint('id')
    )
    op.create_index('idx_appointments_org_user_start', 'appointments',
                    ['organization_id', 'user_id', 'start_time'], unique=False)
    op.create_index('idx_appointments_lead', 'appointments', ['lead_id'], unique=False)


def downgrade() -> None:
    op.drop_index('idx_appointments_lead', table_name='appointments')
    op.drop_index('idx_appointments_org_user_start', table_name='appointments')
    op.drop_table('appointments')

    op.drop_index('idx_availability_overrides_org_user_date', table_name='appointment_availability_overrides')
    op.drop_table('appointment_availability_overrides')

    op.drop_index('idx_availability_rules_org_user', table_name='appointment_availability_rules')
    op.drop_table('appointment_availability_rules')
