"""
Patient Schemas - Request bodies for patient management and the statistics payload.
"""
from datetime import date
from typing import Dict, Optional
from pydantic import EmailStr, Field, field_validator

from ..users.models import DiabetesType, Gender
from ..users.schemas import (
    CamelModel, StrictRequest, MedicalProfileFields, check_diagnosis_year,
    DIAGNOSIS_YEAR_MIN, HEIGHT_MIN_CM, HEIGHT_MAX_CM, WEIGHT_MIN_KG, WEIGHT_MAX_KG
)


class PatientCreate(MedicalProfileFields):
    """
    Patient Creation Schema - Used by staff to create a patient directly

    Unlike self-registration, every diabetes type (MODY included) is accepted
    and the second last name is optional.
    """
    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: str
    last_name: str
    second_last_name: Optional[str] = None


class PatientUpdate(StrictRequest):
    """
    Patient Update Schema - Partial update

    Any field left out is unchanged. Email and role cannot be changed.
    """
    password: Optional[str] = Field(None, min_length=6)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    second_last_name: Optional[str] = None
    diabetes_type: Optional[DiabetesType] = None
    diagnosis_year: Optional[int] = Field(None, ge=DIAGNOSIS_YEAR_MIN)
    has_hypertension: Optional[bool] = None
    birth_date: Optional[date] = None
    gender: Optional[Gender] = None
    height: Optional[float] = Field(None, ge=HEIGHT_MIN_CM, le=HEIGHT_MAX_CM)
    weight: Optional[float] = Field(None, ge=WEIGHT_MIN_KG, le=WEIGHT_MAX_KG)
    medical_history: Optional[str] = None
    current_medications: Optional[str] = None
    allergies: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None
    is_active: Optional[bool] = None

    @field_validator("diagnosis_year")
    @classmethod
    def diagnosis_year_not_in_future(cls, value: Optional[int]) -> Optional[int]:
        return check_diagnosis_year(value)


class PatientStats(CamelModel):
    """Counts over active patients."""
    total_patients: int
    diabetes_type_stats: Dict[str, int]
    hypertension_stats: Dict[str, int]
