"""
User Router - Admin-only management of every account on the platform.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.orm import Session

from ..database import get_db
from ..auth.dependencies import get_password_hasher, require_admin
from ..core.security import PasswordHasher
from .schemas import UserSummary, FullProfile, UserUpdate, TokenClaims, AuditLogResponse
from .service import (
    get_users, get_user, get_user_profile, update_user, delete_user, get_audit_log_entries
)

router = APIRouter(prefix="/users", tags=["Users"], dependencies=[Depends(require_admin)])


@router.get("", response_model=List[UserSummary])
async def list_users(db: Session = Depends(get_db)):
    """List every account, whatever its role or status."""
    return get_users(db)


@router.get("/audit-logs", response_model=List[AuditLogResponse])
async def list_audit_logs(
    action: Optional[str] = Query(None, description="Filter by action, e.g. LOGIN_SUCCESS"),
    user_id: Optional[str] = Query(None, alias="userId", description="Filter by user id"),
    db: Session = Depends(get_db)
):
    """Audit trail, newest first."""
    return get_audit_log_entries(db, action=action, user_id=user_id)


@router.get("/{user_id}", response_model=UserSummary)
async def read_user(user_id: str, db: Session = Depends(get_db)):
    return get_user(db, user_id)


@router.get("/{user_id}/profile", response_model=FullProfile)
async def read_user_profile(user_id: str, db: Session = Depends(get_db)):
    """Full profile of an account, without its password hash."""
    return get_user_profile(db, user_id)


@router.patch("/{user_id}", response_model=UserSummary)
async def edit_user(
    user_id: str,
    data: UserUpdate,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher)
):
    """
    Update an account.

    Names, password and active flag can be changed. Email and role cannot.
    """
    return await update_user(db, hasher, user_id, data)


@router.delete("/{user_id}", response_model=FullProfile)
async def remove_user(
    user_id: str,
    request: Request,
    db: Session = Depends(get_db),
    current_user: TokenClaims = Depends(require_admin)
):
    """Permanently delete an account and return what it held."""
    return await delete_user(db, user_id, current_user.user_id, request=request)
