"""
Bootstrap utilities for first admin creation.
Handles automatic creation of the first admin user from environment variables.
"""
import logging
from typing import Optional
from sqlalchemy.orm import Session

from ..config import settings
from ..exceptions import AppException
from ..users.models import UserRole
from ..users.repository import UserRepository
from .security import PasswordHasher

logger = logging.getLogger(__name__)


def admin_exists(db: Session) -> bool:
    """
    Check if any admin user exists in the database.

    Args:
        db: Database session

    Returns:
        bool: True if at least one admin exists, False otherwise
    """
    return UserRepository(db).count(role=UserRole.ADMIN) > 0


def create_bootstrap_admin(
    db: Session,
    hasher: PasswordHasher,
    email: Optional[str] = None,
    password: Optional[str] = None
) -> bool:
    """
    Create the first admin user from configuration.

    Args:
        db: Database session
        hasher: Password hasher
        email: Admin email, defaults to ``BOOTSTRAP_ADMIN_EMAIL``
        password: Admin password, defaults to ``BOOTSTRAP_ADMIN_PASSWORD``

    Returns:
        bool: True if admin was created successfully, False otherwise
    """
    email = email or settings.bootstrap_admin_email
    password = password or settings.bootstrap_admin_password
    if not email or not password:
        logger.warning("Bootstrap admin credentials not provided in environment variables")
        return False

    repo = UserRepository(db)
    if repo.find_by_email(email):
        logger.warning(f"Bootstrap failed: Email {email} already exists")
        return False

    try:
        admin = repo.create(
            email=email,
            password_hash=hasher.hash(password),
            role=UserRole.ADMIN,
            first_name="System",
            last_name="Administrator"
        )
    except AppException as e:
        logger.error(f"Failed to create bootstrap admin: {e.detail}")
        return False

    logger.info(f"Bootstrap admin created successfully: {admin.email} (ID: {admin.id})")
    return True


def bootstrap_admin_if_needed(db: Session, hasher: PasswordHasher) -> None:
    """
    Check if admin exists and create bootstrap admin if needed.
    This function should be called during application startup.

    Args:
        db: Database session
        hasher: Password hasher
    """
    logger.info("Checking for existing admin users...")

    if admin_exists(db):
        logger.info("Admin users found. Bootstrap not needed.")
        return

    logger.info("No admin users found. Attempting bootstrap admin creation...")
    if not create_bootstrap_admin(db, hasher):
        logger.warning("Bootstrap admin creation skipped.")
        logger.info("To create the first admin, set BOOTSTRAP_ADMIN_EMAIL and BOOTSTRAP_ADMIN_PASSWORD in your .env file.")
