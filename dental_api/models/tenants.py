"""Tenant (clinic) table model using SQLAlchemy Core."""

import uuid

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    String,
    Table,
    Text,
    Uuid,
    func,
    text,
)

from dental_api.models.base import metadata

tenants = Table(
    "tenants",
    metadata,
    Column("id", Uuid, primary_key=True, default=uuid.uuid4),
    Column("name", String(200), nullable=False),
    # Public booking pages resolve the clinic by subdomain
    Column("subdomain", String(100), nullable=False, unique=True, index=True),
    Column("email", Text, nullable=False),
    Column("phone", String(30)),
    Column("address", Text),
    Column("is_active", Boolean, nullable=False, server_default=text("true")),
    Column("created_at", DateTime(timezone=True), nullable=False, server_default=func.now()),
    Column("updated_at", DateTime(timezone=True)),
)
