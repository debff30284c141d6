"""
Patient Router - API endpoints for patient management.

Every route requires a bearer token.
"""
from typing import List, Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlalchemy.orm import Session

from ..database import get_db
from ..auth.dependencies import get_current_claims, get_password_hasher
from ..core.security import PasswordHasher
from ..users.schemas import PatientResponse, DeactivatedResponse, TokenClaims
from .schemas import PatientCreate, PatientUpdate, PatientStats
from .service import (
    create_patient, get_patients, get_patient, update_patient, deactivate_patient, get_patient_stats
)

router = APIRouter(prefix="/patients", tags=["Patients"], dependencies=[Depends(get_current_claims)])


@router.post("", response_model=PatientResponse, status_code=status.HTTP_201_CREATED)
async def add_patient(
    data: PatientCreate,
    request: Request,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher)
):
    """Create a patient account with its medical profile."""
    return await create_patient(db, hasher, data, request=request)


@router.get("", response_model=List[PatientResponse])
async def list_patients(
    active: Optional[bool] = Query(None, description="Filter by active status"),
    db: Session = Depends(get_db)
):
    return get_patients(db, active)


@router.get("/stats", response_model=PatientStats)
async def patient_stats(db: Session = Depends(get_db)):
    """Totals and breakdowns by diabetes type and hypertension, over active patients."""
    return get_patient_stats(db)


@router.get("/{patient_id}", response_model=PatientResponse)
async def read_patient(patient_id: str, db: Session = Depends(get_db)):
    return get_patient(db, patient_id)


@router.patch("/{patient_id}", response_model=PatientResponse)
async def edit_patient(
    patient_id: str,
    data: PatientUpdate,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher)
):
    """
    Update a patient profile.

    A new password is re-hashed. Email and role cannot be changed.
    """
    return await update_patient(db, hasher, patient_id, data)


@router.delete("/{patient_id}", response_model=DeactivatedResponse)
async def remove_patient(
    patient_id: str,
    request: Request,
    db: Session = Depends(get_db),
    claims: TokenClaims = Depends(get_current_claims)
):
    """Deactivate a patient (soft delete)."""
    return await deactivate_patient(db, patient_id, claims.user_id, request=request)
