"""
Doctor Service - Business logic for doctor management.

This module provides service functions for doctor CRUD operations,
specialty search and the doctor-patient assignment.
"""
from typing import List, Optional
from fastapi import Request
from sqlalchemy.orm import Session
import logging

from ..auth.service import create_account
from ..core.audit_service import create_audit_log
from ..core.security import PasswordHasher
from ..users.models import UserRole
from ..users.projections import to_doctor, to_deactivated, to_doctor_patient
from ..users.repository import UserRepository
from ..users.schemas import DoctorResponse, DeactivatedResponse, DoctorPatientResponse
from ..users.service import build_update_fields
from .schemas import DoctorCreate, DoctorUpdate, DoctorStats

# Set up logging
logger = logging.getLogger(__name__)


async def create_doctor(
    db: Session,
    hasher: PasswordHasher,
    data: DoctorCreate,
    request: Optional[Request] = None
) -> DoctorResponse:
    """
    Create a doctor account with its professional profile.

    Raises:
        EmailAlreadyExistsException: If the email is already registered
    """
    fields = data.model_dump(exclude={"email", "password"})
    user = await create_account(
        db, hasher, UserRole.DOCTOR, data.email, data.password, request=request, **fields
    )
    logger.info(f"Doctor {user.id} created")
    return to_doctor(user)


def get_doctors(db: Session, active: Optional[bool] = None) -> List[DoctorResponse]:
    return [to_doctor(user) for user in UserRepository(db).list_by_role(UserRole.DOCTOR, active)]


def get_doctor(db: Session, doctor_id: str) -> DoctorResponse:
    """
    Get a doctor by ID.

    Raises:
        ResourceNotFoundException: If no doctor has this id
    """
    return to_doctor(UserRepository(db).get_by_id(doctor_id, UserRole.DOCTOR))


async def update_doctor(
    db: Session,
    hasher: PasswordHasher,
    doctor_id: str,
    data: DoctorUpdate
) -> DoctorResponse:
    fields = await build_update_fields(hasher, data)
    user = UserRepository(db).update(doctor_id, UserRole.DOCTOR, **fields)
    return to_doctor(user)


async def deactivate_doctor(
    db: Session,
    doctor_id: str,
    current_user_id: str,
    request: Optional[Request] = None
) -> DeactivatedResponse:
    """Soft delete a doctor. Patient assignments are kept."""
    user = UserRepository(db).deactivate(doctor_id, UserRole.DOCTOR)
    response = to_deactivated(user)
    await create_audit_log(
        db, action="DOCTOR_DEACTIVATED", user_id=doctor_id, request=request,
        details={"by": current_user_id}
    )
    return response


def get_doctor_stats(db: Session) -> DoctorStats:
    repo = UserRepository(db)
    active = repo.count(role=UserRole.DOCTOR, is_active=True)
    inactive = repo.count(role=UserRole.DOCTOR, is_active=False)
    return DoctorStats(total_doctors=active + inactive, active_doctors=active, inactive_doctors=inactive)


def get_doctors_by_specialty(db: Session, specialty: str) -> List[DoctorResponse]:
    """Active doctors whose specialty contains the given text, ignoring case."""
    return [to_doctor(user) for user in UserRepository(db).find_doctors_by_specialty(specialty)]


def get_doctor_patients(db: Session, doctor_id: str) -> List[DoctorPatientResponse]:
    """
    Active patients assigned to a doctor.

    Raises:
        ResourceNotFoundException: If no doctor has this id
    """
    patients = UserRepository(db).list_patients_for_doctor(doctor_id)
    return [to_doctor_patient(user) for user in patients]


def assign_patient(db: Session, doctor_id: str, patient_id: str) -> DoctorPatientResponse:
    """
    Assign a patient to a doctor. Assigning twice is harmless.

    Raises:
        ResourceNotFoundException: If the doctor or the patient does not exist
    """
    return to_doctor_patient(UserRepository(db).assign_patient(doctor_id, patient_id))


def unassign_patient(db: Session, doctor_id: str, patient_id: str) -> None:
    """
    Raises:
        ResourceNotFoundException: If the doctor does not exist or the patient is not assigned to them
    """
    UserRepository(db).unassign_patient(doctor_id, patient_id)
