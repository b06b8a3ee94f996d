"""Utility script to load the built-in notification templates."""

from __future__ import annotations

import argparse

from sqlalchemy.exc import SQLAlchemyError

from notification_engine.infrastructure.database import SessionLocal, initialize_database
from notification_engine.infrastructure.repositories import RoleRepository
from notification_engine.infrastructure.seed_templates import seed_templates

DEFAULT_ROLES = (("Administrator", "admin"), ("Staff", "staff"), ("User", "user"))


def parse_args() -> argparse.Namespace:
    """Parse command line arguments for template seeding."""

    parser = argparse.ArgumentParser(
        description="Create or refresh the notification templates of every type and language.",
    )
    parser.add_argument(
        "--with-roles",
        action="store_true",
        help="Also create the admin, staff and user roles when they are missing.",
    )
    return parser.parse_args()


def main() -> None:
    """Seed templates (and optionally roles) using the configured database."""

    args = parse_args()
    initialize_database()

    session = SessionLocal()
    try:
        if args.with_roles:
            repository = RoleRepository(session)
            for name, alias in DEFAULT_ROLES:
                repository.get_or_create(name=name, alias=alias)
        count = seed_templates(session)
    except SQLAlchemyError as exc:
        session.rollback()
        raise SystemExit(f"Could not store notification templates: {exc}") from exc
    else:
        print(f"Seeded {count} notification templates.")
    finally:
        session.close()


if __name__ == "__main__":
    main()
