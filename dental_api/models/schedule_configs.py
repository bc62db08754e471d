"""Working-hours configuration table model using SQLAlchemy Core."""

import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Table,
    Time,
    Uuid,
    func,
    text,
)

from dental_api.models.base import metadata

schedule_configs = Table(
    "schedule_configs",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column(
        "tenant_id",
        Uuid,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
    ),
    # NULL practitioner = clinic-wide default
    Column("practitioner_id", Uuid, ForeignKey("users.id", ondelete="CASCADE")),
    # 0 = Sunday ... 6 = Saturday
    Column("day_of_week", Integer, nullable=False),
    Column("is_working_day", Boolean, nullable=False, server_default=text("true")),
    Column("morning_start_time", Time),
    Column("morning_end_time", Time),
    Column("afternoon_start_time", Time),
    Column("afternoon_end_time", Time),
    Column("appointment_duration", Integer, nullable=False, server_default=text("30")),
    Column("is_active", Boolean, nullable=False, server_default=text("true")),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True)),
    CheckConstraint("day_of_week BETWEEN 0 AND 6", name="schedule_configs_day_check"),
    CheckConstraint("appointment_duration > 0", name="schedule_configs_duration_check"),
    CheckConstraint(
        "morning_start_time IS NULL OR morning_end_time IS NULL "
        "OR morning_start_time < morning_end_time",
        name="schedule_configs_morning_check",
    ),
    CheckConstraint(
        "afternoon_start_time IS NULL OR afternoon_end_time IS NULL "
        "OR afternoon_start_time < afternoon_end_time",
        name="schedule_configs_afternoon_check",
    ),
)

# At most one active row per (tenant, practitioner, day); NULLs never collide
# in a unique index, so the clinic-wide rows get their own index.
Index(
    "uq_schedule_configs_practitioner_day",
    schedule_configs.c.tenant_id,
    schedule_configs.c.practitioner_id,
    schedule_configs.c.day_of_week,
    unique=True,
    postgresql_where=text("is_active AND practitioner_id IS NOT NULL"),
    sqlite_where=text("is_active AND practitioner_id IS NOT NULL"),
)
Index(
    "uq_schedule_configs_clinic_day",
    schedule_configs.c.tenant_id,
    schedule_configs.c.day_of_week,
    unique=True,
    postgresql_where=text("is_active AND practitioner_id IS NULL"),
    sqlite_where=text("is_active AND practitioner_id IS NULL"),
)
