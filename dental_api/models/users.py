"""Staff user (practitioner) table model using SQLAlchemy Core."""

import uuid

from sqlalchemy import (
    CheckConstraint,
    Column,
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

users = Table(
    "users",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column(
        "tenant_id",
        Uuid,
        ForeignKey("tenants.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    ),
    # Profile
    Column("first_name", String(100), nullable=False),
    Column("last_name", String(100), nullable=False),
    Column("email", Text, nullable=False),
    Column("password_hash", Text, nullable=False),
    # Authorization
    Column("role", String(30), nullable=False, server_default=text("'dentist'")),
    Column("status", String(20), nullable=False, server_default=text("'active'")),
    # Audit
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True)),
    Column("last_login_at", DateTime(timezone=True)),
    UniqueConstraint("tenant_id", "email", name="uq_users_tenant_email"),
    CheckConstraint(
        "role IN ('super_admin', 'tenant_admin', 'dentist', 'assistant', 'receptionist')",
        name="users_role_check",
    ),
    CheckConstraint(
        "status IN ('active', 'inactive', 'suspended')",
        name="users_status_check",
    ),
)
