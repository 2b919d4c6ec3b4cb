"""
Bootstrap data: the initial global admin.

Also installed as the ``pizza-seed`` console script, which reads the same
environment as the API (``DATABASE_URL``, ``ADMIN_EMAIL``, ``ADMIN_PASSWORD``).
"""

from __future__ import annotations

import sys

from sqlalchemy import select
from sqlalchemy.orm import Session

from ..config import load_config
from ..constants import Roles
from ..db import get_session, init_db, init_engine
from ..logging_config import configure_logging, get_logger
from ..models import Base, User, UserRole
from ..security import hash_password

logger = get_logger(__name__)


def ensure_admin(db: Session, name: str, email: str, password: str) -> User:
    """
    Make sure a user with ``email`` exists and holds the admin role.

    Existing accounts are promoted but their password is left alone, so
    rerunning the seed never locks anybody out.
    """
    user = db.execute(select(User).where(User.email == email)).scalars().one_or_none()
    if user is None:
        user = User(name=name, email=email, password_hash=hash_password(password))
        user.roles.append(UserRole(role=Roles.ADMIN.value))
        db.add(user)
        db.flush()
        logger.info(f"Created admin user {user.id}")
    elif not user.has_role(Roles.ADMIN):
        user.roles.append(UserRole(role=Roles.ADMIN.value))
        db.flush()
        logger.info(f"Promoted user {user.id} to admin")
    return user


def main() -> int:
    config = load_config("pizza-seed")
    configure_logging(config.app_name, config.log_level)

    if not config.admin_email or not config.admin_password:
        print("ADMIN_EMAIL and ADMIN_PASSWORD must be set", file=sys.stderr)
        return 1

    init_engine(config)
    init_db(Base.metadata)
    with get_session() as db:
        user = ensure_admin(db, config.admin_name, config.admin_email, config.admin_password)
        print(f"Admin ready: {user.email} (id {user.id})")
    return 0


if __name__ == "__main__":
    sys.exit(main())
