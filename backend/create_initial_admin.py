# backend/create_initial_admin.py

import logging
import os

from inventorydb.database import SessionLocal
from inventorydb.apps.accounts import services
from inventorydb.apps.accounts.models import PermissionRole
from inventorydb.logging_config import configure_logging

logger = logging.getLogger("create_initial_admin")


def main() -> None:
    configure_logging()
    username = os.getenv("INITIAL_ADMIN_USERNAME", "admin")
    password = os.getenv("INITIAL_ADMIN_PASSWORD")
    if not password:
        raise SystemExit("Set INITIAL_ADMIN_PASSWORD before running this script.")

    db = SessionLocal()
    try:
        existing = services.get_user_by_username(db, username)
        if existing:
            logger.info("User already exists: id=%s, username=%s", existing.id, existing.username)
            return

        user = services.create_user(
            db,
            username=username,
            password=password,
            permission_role=PermissionRole.ADMIN,
        )
        db.commit()
        logger.info("Created admin user id=%s username=%s", user.id, user.username)
    finally:
        db.close()


if __name__ == "__main__":
    main()
