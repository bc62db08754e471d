"""Alembic wrapper for upgrading, rolling back and generating schema migrations.

Usage:
    python scripts/migrate.py                    # upgrade to head
    python scripts/migrate.py downgrade [-1]     # step back one revision
    python scripts/migrate.py create "add recall table"
    python scripts/migrate.py current
"""

import argparse
import sys
from pathlib import Path

from alembic import command
from alembic.config import Config

PROJECT_ROOT = Path(__file__).resolve().parent.parent


def _alembic_config() -> Config:
    cfg = Config(str(PROJECT_ROOT / "alembic.ini"))
    cfg.set_main_option("script_location", str(PROJECT_ROOT / "alembic"))
    return cfg


def upgrade(revision: str = "head") -> None:
    """Apply migrations up to ``revision``."""
    print(f"Upgrading schema to {revision}...")
    command.upgrade(_alembic_config(), revision)
    print("✓ Schema is up to date")


def downgrade(revision: str = "-1") -> None:
    """Revert the schema to an earlier revision."""
    print(f"Downgrading schema to {revision}...")
    command.downgrade(_alembic_config(), revision)
    print("✓ Downgrade completed")


def create(message: str) -> None:
    """Autogenerate a revision from the table definitions in dental_api.models."""
    print(f"Generating revision: {message}")
    command.revision(_alembic_config(), message=message, autogenerate=True)
    print("✓ Revision created, review it before applying")


def current() -> None:
    """Print the revision the database is at."""
    command.current(_alembic_config(), verbose=True)


def main() -> None:
    parser = argparse.ArgumentParser(description="Manage the clinic scheduling schema")
    sub = parser.add_subparsers(dest="action")

    up = sub.add_parser("upgrade", help="Apply migrations (default action)")
    up.add_argument("revision", nargs="?", default="head")

    down = sub.add_parser("downgrade", help="Revert migrations")
    down.add_argument("revision", nargs="?", default="-1")

    new = sub.add_parser("create", help="Autogenerate a new revision")
    new.add_argument("message", nargs="+")

    sub.add_parser("current", help="Show the current revision")

    args = parser.parse_args()

    try:
        if args.action == "downgrade":
            downgrade(args.revision)
        elif args.action == "create":
            create(" ".join(args.message))
        elif args.action == "current":
            current()
        else:
            upgrade(getattr(args, "revision", "head"))
    except Exception as e:
        print(f"✗ Migration command failed: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
