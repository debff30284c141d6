"""
User Service - Admin management of identity records of any role.
"""
from typing import Any, Dict, List, Optional
from fastapi import Request
from pydantic import BaseModel
from starlette.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
import logging

from ..core.audit_service import create_audit_log, get_audit_logs
from ..core.security import PasswordHasher
from ..exceptions import ConflictException
from .projections import to_user_summary, to_full_profile
from .repository import UserRepository
from .schemas import UserSummary, FullProfile, UserUpdate, AuditLogResponse

# Set up logging
logger = logging.getLogger(__name__)

# Columns that cannot be cleared with an explicit null
NON_NULLABLE_UPDATES = ("password", "is_active")


async def build_update_fields(hasher: PasswordHasher, data: BaseModel) -> Dict[str, Any]:
    """
    Turn a partial update body into repository fields.

    Only fields present in the request are returned. A new password is hashed
    off the event loop and stored as ``password_hash``.
    """
    fields = data.model_dump(exclude_unset=True)
    for name in NON_NULLABLE_UPDATES:
        if name in fields and fields[name] is None:
            del fields[name]

    password = fields.pop("password", None)
    if password:
        fields["password_hash"] = await run_in_threadpool(hasher.hash, password)
    return fields


def get_users(db: Session) -> List[UserSummary]:
    return [to_user_summary(user) for user in UserRepository(db).list_all()]


def get_user(db: Session, user_id: str) -> UserSummary:
    return to_user_summary(UserRepository(db).get_by_id(user_id))


def get_user_profile(db: Session, user_id: str) -> FullProfile:
    """Every stored field of the account except its password hash."""
    return to_full_profile(UserRepository(db).get_by_id(user_id))


async def update_user(
    db: Session,
    hasher: PasswordHasher,
    user_id: str,
    data: UserUpdate
) -> UserSummary:
    """
    Update names, password or active flag of any account.

    Raises:
        ResourceNotFoundException: If the user does not exist
    """
    fields = await build_update_fields(hasher, data)
    user = UserRepository(db).update(user_id, **fields)
    return to_user_summary(user)


async def delete_user(
    db: Session,
    user_id: str,
    current_user_id: str,
    request: Optional[Request] = None
) -> FullProfile:
    """
    Permanently remove an account.

    Returns the profile as it was just before deletion.

    Raises:
        ConflictException: If the admin targets their own account
        ResourceNotFoundException: If the user does not exist
    """
    if user_id == current_user_id:
        raise ConflictException("Administrators cannot delete their own account")

    repo = UserRepository(db)
    profile = to_full_profile(repo.get_by_id(user_id))
    repo.delete(user_id)

    await create_audit_log(
        db, action="USER_DELETED", user_id=current_user_id, request=request,
        details={"deleted_user_id": user_id, "email": profile.email, "role": profile.role.value}
    )
    logger.info(f"User {user_id} deleted by admin {current_user_id}")
    return profile


def get_audit_log_entries(
    db: Session,
    action: Optional[str] = None,
    user_id: Optional[str] = None
) -> List[AuditLogResponse]:
    return [AuditLogResponse.model_validate(entry) for entry in get_audit_logs(db, action, user_id)]
