"""Baseline migration - appointment status schema

Revision ID: 001
Revises:
Create Date: 2026-10-19 09:00:00.000000

Creates the appointment status store and the clinician directory.
"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision: str = '001'
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Create appointment_statuses and clinicians tables with their indexes."""

    # Clinician directory used to resolve display names
    op.execute("""
        CREATE TABLE IF NOT EXISTS clinicians (
            id BIGSERIAL PRIMARY KEY,
            clinician_id TEXT UNIQUE NOT NULL,
            name TEXT NOT NULL,
            created_at TIMESTAMPTZ DEFAULT NOW(),
            updated_at TIMESTAMPTZ DEFAULT NOW()
        )
    """)

    # One row per appointment booking URL
    op.execute("""
        CREATE TABLE IF NOT EXISTS appointment_statuses (
            id BIGSERIAL PRIMARY KEY,
            href TEXT UNIQUE NOT NULL,
            clinician_id TEXT NOT NULL DEFAULT '',
            clinician_name TEXT NOT NULL DEFAULT '',
            status TEXT NOT NULL DEFAULT 'unknown'
                CHECK (status IN ('unknown', 'booked', 'expired')),
            first_name TEXT NOT NULL DEFAULT '',
            middle_name TEXT NOT NULL DEFAULT '',
            last_name TEXT NOT NULL DEFAULT '',
            preferred_name TEXT NOT NULL DEFAULT '',
            date_of_birth TEXT NOT NULL DEFAULT '',
            phone TEXT NOT NULL DEFAULT '',
            email TEXT NOT NULL DEFAULT '',
            comments TEXT NOT NULL DEFAULT '',
            appointment_type TEXT,
            appointment_date TEXT,
            appointment_time TEXT,
            insurance TEXT,
            member_id TEXT,
            previous_therapy TEXT,
            taking_medication TEXT,
            mental_health_diagnosis TEXT,
            reason_for_therapy TEXT,
            has_medication_history TEXT,
            medication_history TEXT,
            last_error TEXT,
            submitted_at TIMESTAMPTZ DEFAULT NOW(),
            last_attempt_at TIMESTAMPTZ,
            created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
            processing_log JSONB NOT NULL DEFAULT '[]'::jsonb
        )
    """)

    op.create_index(
        'idx_appointment_statuses_clinician_id', 'appointment_statuses', ['clinician_id']
    )
    op.create_index('idx_appointment_statuses_status', 'appointment_statuses', ['status'])
    op.create_index(
        'idx_appointment_statuses_clinician_status',
        'appointment_statuses',
        ['clinician_id', 'status'],
    )
    op.create_index(
        'idx_appointment_statuses_slot',
        'appointment_statuses',
        ['appointment_date', 'appointment_time'],
    )
    op.create_index('idx_appointment_statuses_email', 'appointment_statuses', ['email'])
    op.create_index('idx_appointment_statuses_phone', 'appointment_statuses', ['phone'])

    # Reconciliation reads unknown rows oldest first
    op.create_index(
        'idx_appointment_statuses_status_created',
        'appointment_statuses',
        ['status', sa.text('created_at ASC')],
    )

    op.execute("""
        CREATE OR REPLACE FUNCTION update_updated_at_column()
        RETURNS TRIGGER AS $$
        BEGIN
            NEW.updated_at = NOW();
            RETURN NEW;
        END;
        $$ language 'plpgsql';
    """)

    op.execute("""
        DROP TRIGGER IF EXISTS update_clinicians_updated_at ON clinicians;
        CREATE TRIGGER update_clinicians_updated_at
            BEFORE UPDATE ON clinicians
            FOR EACH ROW
            EXECUTE FUNCTION update_updated_at_column();
    """)


def downgrade() -> None:
    """Drop tables created by the baseline."""
    op.execute("DROP TABLE IF EXISTS appointment_statuses CASCADE")
    op.execute("DROP TABLE IF EXISTS clinicians CASCADE")
    op.execute("DROP FUNCTION IF EXISTS update_updated_at_column() CASCADE")
