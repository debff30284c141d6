from sqlalchemy.orm import Session
from fastapi import Request
from typing import Optional, Dict, Any, List

from .audit_models import AuditLog

async def create_audit_log(
    db: Session,
    action: str,
    user_id: Optional[str] = None,
    request: Optional[Request] = None,
    details: Optional[Dict[str, Any]] = None
) -> AuditLog:
    """
    Creates an audit log entry.

    Args:
        db: The database session.
        action: A string describing the action performed (e.g., 'LOGIN_SUCCESS', 'PATIENT_DEACTIVATED').
        user_id: The ID of the user the action concerns (if applicable).
        request: The FastAPI request object to extract IP address and request id (if available).
        details: A dictionary containing additional context. Must not contain credentials.

    Returns:
        The created AuditLog object.
    """
    ip_address = None
    request_id = None
    if request:
        if request.client:
            ip_address = request.client.host
        request_id = getattr(request.state, "request_id", None)

    audit_entry = AuditLog(
        user_id=user_id,
        action=action,
        ip_address=ip_address,
        request_id=request_id,
        details=details
    )
    db.add(audit_entry)
    db.commit()
    db.refresh(audit_entry)
    return audit_entry


def get_audit_logs(db: Session, action: Optional[str] = None, user_id: Optional[str] = None) -> List[AuditLog]:
    """Return audit entries, newest first, optionally filtered by action and user."""
    query = db.query(AuditLog)
    if action:
        query = query.filter(AuditLog.action == action)
    if user_id:
        query = query.filter(AuditLog.user_id == user_id)
    return query.order_by(AuditLog.timestamp.desc(), AuditLog.id.desc()).all()
