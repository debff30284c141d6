"""
Patient Service - Business logic for patient management.

Patients are identity records with role PATIENT; every lookup is scoped to
that role, so a doctor's id is "not found" here.
"""
from typing import List, Optional
from fastapi import Request
from sqlalchemy.orm import Session
import logging

from ..auth.service import create_account
from ..core.audit_service import create_audit_log
from ..core.security import PasswordHasher
from ..users.models import UserRole, DiabetesType
from ..users.projections import to_patient, to_deactivated
from ..users.repository import UserRepository
from ..users.schemas import PatientResponse, DeactivatedResponse
from ..users.service import build_update_fields
from .schemas import PatientCreate, PatientUpdate, PatientStats

# Set up logging
logger = logging.getLogger(__name__)


async def create_patient(
    db: Session,
    hasher: PasswordHasher,
    data: PatientCreate,
    request: Optional[Request] = None
) -> PatientResponse:
    """
    Create a patient account with its medical profile.

    Raises:
        EmailAlreadyExistsException: If the email is already registered
    """
    fields = data.model_dump(exclude={"email", "password"})
    user = await create_account(
        db, hasher, UserRole.PATIENT, data.email, data.password, request=request, **fields
    )
    logger.info(f"Patient {user.id} created")
    return to_patient(user)


def get_patients(db: Session, active: Optional[bool] = None) -> List[PatientResponse]:
    """
    List patients, oldest first.

    Args:
        db: Database session
        active: Only active (True) or only deactivated (False) patients; None for all
    """
    return [to_patient(user) for user in UserRepository(db).list_by_role(UserRole.PATIENT, active)]


def get_patient(db: Session, patient_id: str) -> PatientResponse:
    """
    Get a patient by ID. Deactivated patients are still returned.

    Raises:
        ResourceNotFoundException: If no patient has this id
    """
    return to_patient(UserRepository(db).get_by_id(patient_id, UserRole.PATIENT))


async def update_patient(
    db: Session,
    hasher: PasswordHasher,
    patient_id: str,
    data: PatientUpdate
) -> PatientResponse:
    fields = await build_update_fields(hasher, data)
    user = UserRepository(db).update(patient_id, UserRole.PATIENT, **fields)
    return to_patient(user)


async def deactivate_patient(
    db: Session,
    patient_id: str,
    current_user_id: str,
    request: Optional[Request] = None
) -> DeactivatedResponse:
    """
    Soft delete a patient. The record stays and can no longer log in.

    Raises:
        ResourceNotFoundException: If no patient has this id
    """
    user = UserRepository(db).deactivate(patient_id, UserRole.PATIENT)
    response = to_deactivated(user)
    await create_audit_log(
        db, action="PATIENT_DEACTIVATED", user_id=patient_id, request=request,
        details={"by": current_user_id}
    )
    return response


def get_patient_stats(db: Session) -> PatientStats:
    """
    Aggregate counts over active patients.

    Every diabetes type appears in the result, with 0 when no patient has it.
    Patients who have not completed their profile are left out of both breakdowns.
    """
    repo = UserRepository(db)
    scope = {"role": UserRole.PATIENT, "is_active": True}

    by_type = repo.group_by_count("diabetes_type", **scope)
    by_hypertension = repo.group_by_count("has_hypertension", **scope)

    return PatientStats(
        total_patients=repo.count(**scope),
        diabetes_type_stats={t.value: by_type.get(t, 0) for t in DiabetesType},
        hypertension_stats={
            "true": by_hypertension.get(True, 0),
            "false": by_hypertension.get(False, 0)
        }
    )
