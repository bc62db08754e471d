"""Script to initialize the database and optionally seed a demo clinic."""

import argparse
import asyncio

from sqlalchemy import text

from dental_api.database import AsyncSessionLocal, engine
from dental_api.models import metadata
from dental_api.schemas.auth import UserRole
from dental_api.services.tenant_service import TenantService
from dental_api.services.user_service import UserService


async def init_db() -> None:
    """Initialize the database by creating all tables."""
    async with engine.begin() as conn:
        if conn.dialect.name == "postgresql":
            await conn.execute(text('CREATE EXTENSION IF NOT EXISTS "pgcrypto"'))

        await conn.run_sync(metadata.create_all)

    print("✓ Database initialized successfully!")


async def seed_demo_clinic(subdomain: str, admin_email: str, admin_password: str) -> None:
    """Create a clinic with one administrator and one dentist."""
    async with AsyncSessionLocal() as session:
        tenant = await TenantService(session).create_tenant(
            name="Demo Dental Clinic",
            subdomain=subdomain,
            email=admin_email,
        )
        users = UserService()
        await users.create_user(
            session,
            tenant_id=tenant["id"],
            email=admin_email,
            password=admin_password,
            first_name="Clinic",
            last_name="Admin",
            role=UserRole.TENANT_ADMIN,
        )
        await users.create_user(
            session,
            tenant_id=tenant["id"],
            email=f"dentist@{subdomain}.com",
            password=admin_password,
            first_name="Demo",
            last_name="Dentist",
            role=UserRole.DENTIST,
        )

    print(f"✓ Seeded clinic '{subdomain}' (admin: {admin_email})")


async def main(args: argparse.Namespace) -> None:
    await init_db()
    if args.seed:
        await seed_demo_clinic(args.subdomain, args.admin_email, args.admin_password)
    await engine.dispose()


if __name__ == "__main__":
    parser = argparse.ArgumentParser(description="Create tables and optionally seed data")
    parser.add_argument("--seed", action="store_true", help="Create a demo clinic")
    parser.add_argument("--subdomain", default="demo")
    parser.add_argument("--admin-email", default="admin@demo.com")
    parser.add_argument("--admin-password", default="ChangeMe123!")
    asyncio.run(main(parser.parse_args()))
