"""
Doctor Router - API endpoints for doctor profile management.

Every route requires a bearer token. Fixed paths (stats, by-specialty) are
declared before ``/{doctor_id}`` so they are not captured as ids.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..auth.dependencies import get_current_claims, get_password_hasher
from ..core.security import PasswordHasher
from ..users.schemas import DoctorResponse, DeactivatedResponse, DoctorPatientResponse, TokenClaims
from .schemas import DoctorCreate, DoctorUpdate, DoctorStats
from .service import (
    create_doctor,
    get_doctors,
    get_doctor,
    update_doctor,
    deactivate_doctor,
    get_doctor_stats,
    get_doctors_by_specialty,
    get_doctor_patients,
    assign_patient,
    unassign_patient
)

router = APIRouter(prefix="/doctors", tags=["Doctors"], dependencies=[Depends(get_current_claims)])


@router.post("", response_model=DoctorResponse, status_code=status.HTTP_201_CREATED)
async def add_doctor(
    data: DoctorCreate,
    request: Request,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher)
):
    """Create a doctor account with its professional profile."""
    return await create_doctor(db, hasher, data, request=request)


@router.get("", response_model=List[DoctorResponse])
async def list_doctors(
    active: Optional[bool] = Query(None, description="Filter by active status"),
    db: Session = Depends(get_db)
):
    return get_doctors(db, active)


@router.get("/stats", response_model=DoctorStats)
async def doctor_stats(db: Session = Depends(get_db)):
    return get_doctor_stats(db)


@router.get("/by-specialty", response_model=List[DoctorResponse])
async def list_doctors_by_specialty(
    specialty: str = Query(..., min_length=1, description="Text to look for in the specialty"),
    db: Session = Depends(get_db)
):
    """Search active doctors by specialty (case-insensitive, partial match)."""
    return get_doctors_by_specialty(db, specialty)


@router.get("/{doctor_id}", response_model=DoctorResponse)
async def read_doctor(doctor_id: str, db: Session = Depends(get_db)):
    return get_doctor(db, doctor_id)


@router.patch("/{doctor_id}", response_model=DoctorResponse)
async def edit_doctor(
    doctor_id: str,
    data: DoctorUpdate,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher)
):
    """
    Update a doctor profile.

    A new password is re-hashed. Email and role cannot be changed.
    """
    return await update_doctor(db, hasher, doctor_id, data)


@router.delete("/{doctor_id}", response_model=DeactivatedResponse)
async def remove_doctor(
    doctor_id: str,
    request: Request,
    db: Session = Depends(get_db),
    claims: TokenClaims = Depends(get_current_claims)
):
    """Deactivate a doctor (soft delete)."""
    return await deactivate_doctor(db, doctor_id, claims.user_id, request=request)


@router.get("/{doctor_id}/patients", response_model=List[DoctorPatientResponse])
async def list_doctor_patients(doctor_id: str, db: Session = Depends(get_db)):
    """Active patients assigned to this doctor."""
    return get_doctor_patients(db, doctor_id)


@router.post(
    "/{doctor_id}/patients/{patient_id}",
    response_model=DoctorPatientResponse,
    status_code=status.HTTP_201_CREATED
)
async def add_doctor_patient(doctor_id: str, patient_id: str, db: Session = Depends(get_db)):
    return assign_patient(db, doctor_id, patient_id)


@router.delete("/{doctor_id}/patients/{patient_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_doctor_patient(doctor_id: str, patient_id: str, db: Session = Depends(get_db)):
    unassign_patient(db, doctor_id, patient_id)
