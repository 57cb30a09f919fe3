"""
Default Admin Seed Utility

Creates the first administrator account on an empty installation so the
back office can be signed into. Values come from the DEFAULT_ADMIN_* settings.
"""

from sqlalchemy.orm import Session
import logging

from tms.auth_utils import get_password_hash
from tms.config import settings
from tms.models import Role, User
from tms.repositories.user_repository import UserRepository

logger = logging.getLogger(__name__)


def seed_default_admin(db: Session) -> bool:
    """
    Create the default admin unless a user with that username already exists.

    Returns:
        bool: True when the account was created
    """
    users = UserRepository(db)
    if users.exists_by_username(settings.default_admin_username):
        logger.info("Default admin already present, skipping seed")
        return False

    # A clashing email or mobile would fail the unique constraints
    email = settings.default_admin_email or None
    if email and users.exists_by_email(email):
        email = None
    if users.exists_by_mobile_number(settings.default_admin_mobile):
        logger.warning(
            f"Default admin not created: mobile number {settings.default_admin_mobile} is already registered"
        )
        return False

    try:
        users.create(User(
            username=settings.default_admin_username,
            email=email,
            full_name=settings.default_admin_full_name,
            mobile_number=settings.default_admin_mobile,
            hashed_password=get_password_hash(settings.default_admin_password),
            role=Role.ADMIN,
            is_active=True,
        ))
        db.commit()
    except Exception as e:
        db.rollback()
        logger.error(f"Error seeding default admin: {e}")
        raise

    logger.info(f"Default admin user '{settings.default_admin_username}' created")
    return True
