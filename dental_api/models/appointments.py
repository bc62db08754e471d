"""Appointments table model using SQLAlchemy Core."""

import uuid

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    Date,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    String,
    Table,
    Text,
    Time,
    Uuid,
    func,
    text,
)

from dental_api.models.base import metadata

appointments = Table(
    "appointments",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    # Ownership / references
    Column(
        "tenant_id",
        Uuid,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
    ),
    Column("patient_id", Uuid, ForeignKey("patients.id"), nullable=False),
    Column("practitioner_id", Uuid, ForeignKey("users.id"), nullable=False),
    # Reserved interval [start_time, end_time) on appointment_date, clinic local time
    Column("appointment_date", Date, nullable=False),
    Column("start_time", Time, nullable=False),
    Column("end_time", Time, nullable=False),
    Column("duration_minutes", Integer, nullable=False, server_default=text("30")),
    # Status management
    Column("status", String(20), nullable=False, server_default=text("'scheduled'")),
    Column("reason", Text, nullable=False),
    Column("notes", Text),
    Column("notification_sent", Boolean, nullable=False, server_default=text("false")),
    Column("reminder_sent", Boolean, nullable=False, server_default=text("false")),
    Column("cancellation_reason", Text),
    # Audit fields
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True)),
    Column("cancelled_at", DateTime(timezone=True)),
    # Soft delete (healthcare compliance)
    Column("deleted_at", DateTime(timezone=True)),
    # Constraints
    CheckConstraint("duration_minutes > 0", name="appointments_duration_check"),
    CheckConstraint("start_time < end_time", name="appointments_interval_check"),
    CheckConstraint(
        "status IN ('scheduled', 'confirmed', 'in_progress', 'completed', 'cancelled', 'no_show')",
        name="appointments_status_check",
    ),
)

# Conflict checks and slot generation filter by these prefixes
Index(
    "idx_appointments_practitioner_day",
    appointments.c.tenant_id,
    appointments.c.practitioner_id,
    appointments.c.appointment_date,
)
Index(
    "idx_appointments_patient_day",
    appointments.c.tenant_id,
    appointments.c.patient_id,
    appointments.c.appointment_date,
)
# No-show sweep scans open appointments across tenants
Index("idx_appointments_status_date", appointments.c.status, appointments.c.appointment_date)
