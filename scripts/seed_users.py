"""
DualAuth - Admin Seed Script

Creates the initial admin user. Roles are never granted through the
public registration endpoints, so this is how the first admin appears.

Usage:
    SEED_ADMIN_USERNAME=admin SEED_ADMIN_EMAIL=admin@example.com \
    SEED_ADMIN_PASSWORD=... python -m scripts.seed_users
"""

import logging
import os
import sys
from typing import Optional

from sqlmodel import Session

from dualauth.config import settings
from dualauth.logging_config import configure_logging
from dualauth.auth.database import get_engine, init_db
from dualauth.auth.models import Role, User
from dualauth.auth.schemas import PASSWORD_MIN_LENGTH
from dualauth.auth.store import UserStore, new_user


logger = logging.getLogger(__name__)


def seed_admin_user(
    db: Session, username: str, email: str, password: str
) -> Optional[User]:
    """
    Create an admin unless the email or username is already taken.
    
    Returns:
        The new admin, or None if a matching user already exists
    """
    if len(password) < PASSWORD_MIN_LENGTH:
        raise ValueError(
            f"Admin password must be at least {PASSWORD_MIN_LENGTH} characters"
        )
    
    store = UserStore(db)
    if store.find_conflict(email=email, username=username):
        logger.info("Admin user already exists, nothing to do")
        return None
    
    admin = store.save(new_user(username, email, password, role=Role.ADMIN))
    logger.info("Admin user created: user_id=%s", admin.id)
    return admin


def main() -> int:
    configure_logging(settings.LOG_LEVEL)
    
    username = os.environ.get("SEED_ADMIN_USERNAME", "admin")
    email = os.environ.get("SEED_ADMIN_EMAIL", "")
    password = os.environ.get("SEED_ADMIN_PASSWORD", "")
    if not email or not password:
        logger.error("SEED_ADMIN_EMAIL and SEED_ADMIN_PASSWORD must be set")
        return 1
    
    engine = get_engine(settings.DATABASE_URL)
    init_db(engine)
    try:
        with Session(engine) as db:
            seed_admin_user(db, username, email, password)
    finally:
        engine.dispose()
    return 0


if __name__ == "__main__":
    sys.exit(main())
