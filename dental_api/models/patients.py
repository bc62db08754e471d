"""Patient table model using SQLAlchemy Core."""

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    Date,
    DateTime,
    ForeignKey,
    String,
    Table,
    Text,
    UniqueConstraint,
    Uuid,
    func,
    text,
)

from dental_api.models.base import metadata

patients = Table(
    "patients",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column(
        "tenant_id",
        Uuid,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    # Identity
    Column("first_name", String(100), nullable=False),
    Column("last_name", String(100), nullable=False),
    Column("document_type", String(20), nullable=False, server_default=text("'DNI'")),
    Column("document_number", String(30), nullable=False),
    Column("birth_date", Date),
    # Contact
    Column("phone", String(30), nullable=False),
    Column("email", Text),
    Column("address", Text),
    # Clinical notes
    Column("allergies", Text),
    Column("notes", Text),
    # Status
    Column("is_active", Boolean, nullable=False, server_default=text("true")),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True)),
    # Soft delete (clinical records are never removed)
    Column("deleted_at", DateTime(timezone=True)),
    UniqueConstraint("tenant_id", "document_number", name="uq_patients_tenant_document"),
)
