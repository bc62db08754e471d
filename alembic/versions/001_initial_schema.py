"""Initial schema - clinics, staff, patients, appointments, working hours.

Revision ID: 001
Revises:
Create Date: 2026-10-18 00:00:00.000000

"""

from typing import Sequence, Union

import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

from alembic import op

# revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.TIMESTAMP(timezone=True),
            nullable=False,
            server_default=sa.text("NOW()"),
        ),
        sa.Column("updated_at", sa.TIMESTAMP(timezone=True), nullable=True),
    ]


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        primary_key=True,
        server_default=sa.text("gen_random_uuid()"),
    )


def upgrade() -> None:
    """Upgrade database schema."""
    op.execute('CREATE EXTENSION IF NOT EXISTS "pgcrypto"')

    op.create_table(
        "tenants",
        _uuid_pk(),
        sa.Column("name", sa.String(200), nullable=False),
        sa.Column("subdomain", sa.String(100), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("phone", sa.String(30), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
    )
    op.create_index("ix_tenants_subdomain", "tenants", ["subdomain"], unique=True)

    op.create_table(
        "users",
        _uuid_pk(),
        sa.Column(
            "tenant_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("tenants.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("email", sa.Text(), nullable=False),
        sa.Column("password_hash", sa.Text(), nullable=False),
        sa.Column("role", sa.String(30), nullable=False, server_default=sa.text("'dentist'")),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'active'")),
        *_timestamps(),
        sa.Column("last_login_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.UniqueConstraint("tenant_id", "email", name="uq_users_tenant_email"),
        sa.CheckConstraint(
            "role IN ('super_admin', 'tenant_admin', 'dentist', 'assistant', 'receptionist')",
            name="users_role_check",
        ),
        sa.CheckConstraint(
            "status IN ('active', 'inactive', 'suspended')",
            name="users_status_check",
        ),
    )
    op.create_index("ix_users_tenant_id", "users", ["tenant_id"])

    op.create_table(
        "patients",
        _uuid_pk(),
        sa.Column(
            "tenant_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("tenants.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("first_name", sa.String(100), nullable=False),
        sa.Column("last_name", sa.String(100), nullable=False),
        sa.Column("document_type", sa.String(20), nullable=False, server_default=sa.text("'DNI'")),
        sa.Column("document_number", sa.String(30), nullable=False),
        sa.Column("birth_date", sa.Date(), nullable=True),
        sa.Column("phone", sa.String(30), nullable=False),
        sa.Column("email", sa.Text(), nullable=True),
        sa.Column("address", sa.Text(), nullable=True),
        sa.Column("allergies", sa.Text(), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.Column("deleted_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.UniqueConstraint("tenant_id", "document_number", name="uq_patients_tenant_document"),
    )
    op.create_index("ix_patients_tenant_id", "patients", ["tenant_id"])

    op.create_table(
        "appointments",
        _uuid_pk(),
        sa.Column(
            "tenant_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("tenants.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "patient_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("patients.id"),
            nullable=False,
        ),
        sa.Column(
            "practitioner_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id"),
            nullable=False,
        ),
        sa.Column("appointment_date", sa.Date(), nullable=False),
        sa.Column("start_time", sa.Time(), nullable=False),
        sa.Column("end_time", sa.Time(), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False, server_default=sa.text("30")),
        sa.Column("status", sa.String(20), nullable=False, server_default=sa.text("'scheduled'")),
        sa.Column("reason", sa.Text(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column(
            "notification_sent", sa.Boolean(), nullable=False, server_default=sa.text("false")
        ),
        sa.Column("reminder_sent", sa.Boolean(), nullable=False, server_default=sa.text("false")),
        sa.Column("cancellation_reason", sa.Text(), nullable=True),
        *_timestamps(),
        sa.Column("cancelled_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.Column("deleted_at", sa.TIMESTAMP(timezone=True), nullable=True),
        sa.CheckConstraint("duration_minutes > 0", name="appointments_duration_check"),
        sa.CheckConstraint("start_time < end_time", name="appointments_interval_check"),
        sa.CheckConstraint(
            "status IN ('scheduled', 'confirmed', 'in_progress', 'completed', 'cancelled', "
            "'no_show')",
            name="appointments_status_check",
        ),
    )
    op.create_index(
        "idx_appointments_practitioner_day",
        "appointments",
        ["tenant_id", "practitioner_id", "appointment_date"],
    )
    op.create_index(
        "idx_appointments_patient_day",
        "appointments",
        ["tenant_id", "patient_id", "appointment_date"],
    )
    op.create_index(
        "idx_appointments_status_date", "appointments", ["status", "appointment_date"]
    )

    op.create_table(
        "schedule_configs",
        _uuid_pk(),
        sa.Column(
            "tenant_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("tenants.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "practitioner_id",
            postgresql.UUID(as_uuid=True),
            sa.ForeignKey("users.id", ondelete="CASCADE"),
            nullable=True,
        ),
        sa.Column("day_of_week", sa.Integer(), nullable=False),
        sa.Column("is_working_day", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        sa.Column("morning_start_time", sa.Time(), nullable=True),
        sa.Column("morning_end_time", sa.Time(), nullable=True),
        sa.Column("afternoon_start_time", sa.Time(), nullable=True),
        sa.Column("afternoon_end_time", sa.Time(), nullable=True),
        sa.Column(
            "appointment_duration", sa.Integer(), nullable=False, server_default=sa.text("30")
        ),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.text("true")),
        *_timestamps(),
        sa.CheckConstraint("day_of_week BETWEEN 0 AND 6", name="schedule_configs_day_check"),
        sa.CheckConstraint("appointment_duration > 0", name="schedule_configs_duration_check"),
        sa.CheckConstraint(
            "morning_start_time IS NULL OR morning_end_time IS NULL "
            "OR morning_start_time < morning_end_time",
            name="schedule_configs_morning_check",
        ),
        sa.CheckConstraint(
            "afternoon_start_time IS NULL OR afternoon_end_time IS NULL "
            "OR afternoon_start_time < afternoon_end_time",
            name="schedule_configs_afternoon_check",
        ),
    )
    op.create_index(
        "uq_schedule_configs_practitioner_day",
        "schedule_configs",
        ["tenant_id", "practitioner_id", "day_of_week"],
        unique=True,
        postgresql_where=sa.text("is_active AND practitioner_id IS NOT NULL"),
    )
    op.create_index(
        "uq_schedule_configs_clinic_day",
        "schedule_configs",
        ["tenant_id", "day_of_week"],
        unique=True,
        postgresql_where=sa.text("is_active AND practitioner_id IS NULL"),
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_index("uq_schedule_configs_clinic_day", table_name="schedule_configs")
    op.drop_index("uq_schedule_configs_practitioner_day", table_name="schedule_configs")
    op.drop_table("schedule_configs")

    op.drop_index("idx_appointments_status_date", table_name="appointments")
    op.drop_index("idx_appointments_patient_day", table_name="appointments")
    op.drop_index("idx_appointments_practitioner_day", table_name="appointments")
    op.drop_table("appointments")

    op.drop_index("ix_patients_tenant_id", table_name="patients")
    op.drop_table("patients")

    op.drop_index("ix_users_tenant_id", table_name="users")
    op.drop_table("users")

    op.drop_index("ix_tenants_subdomain", table_name="tenants")
    op.drop_table("tenants")
