"""
User Schemas - Pydantic models for identity record validation and serialization.

Response schemas are whitelists: each one names exactly the fields a scenario may
expose, and none of them has a password field. JSON uses camelCase aliases.
"""
from datetime import date, datetime
from typing import List, Optional
from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from .models import UserRole, DiabetesType, Gender

# Canonical bounds shared by every entry point that accepts medical data
HEIGHT_MIN_CM = 50
HEIGHT_MAX_CM = 250
WEIGHT_MIN_KG = 20
WEIGHT_MAX_KG = 300
DIAGNOSIS_YEAR_MIN = 1900


def check_diagnosis_year(value: Optional[int]) -> Optional[int]:
    """A diagnosis cannot be dated after the current year."""
    if value is not None and value > date.today().year:
        raise ValueError(f"diagnosisYear cannot be later than {date.today().year}")
    return value


class CamelModel(BaseModel):
    """Base for response schemas read straight from ORM objects."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, from_attributes=True)


class StrictRequest(BaseModel):
    """Base for request bodies; unknown fields are rejected."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, extra="forbid")


class MedicalProfileFields(StrictRequest):
    """
    Medical fields shared by patient registration, profile completion and patient creation.

    Fields:
    - diabetes_type: Diabetes classification
    - diagnosis_year: Year of diagnosis (1900 up to the current year)
    - has_hypertension: Whether the patient has hypertension
    - birth_date: Date of birth
    - gender: MALE, FEMALE or OTHER
    - height: Height in centimetres
    - weight: Weight in kilograms
    - medical_history ... emergency_phone: Optional free text
    """
    diabetes_type: DiabetesType
    diagnosis_year: int = Field(..., ge=DIAGNOSIS_YEAR_MIN, description="Year of diagnosis")
    has_hypertension: bool
    birth_date: date
    gender: Gender
    height: float = Field(..., ge=HEIGHT_MIN_CM, le=HEIGHT_MAX_CM, description="Height in centimetres")
    weight: float = Field(..., ge=WEIGHT_MIN_KG, le=WEIGHT_MAX_KG, description="Weight in kilograms")
    medical_history: Optional[str] = None
    current_medications: Optional[str] = None
    allergies: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None

    @field_validator("diagnosis_year")
    @classmethod
    def diagnosis_year_not_in_future(cls, value: int) -> int:
        return check_diagnosis_year(value)


class UserUpdate(StrictRequest):
    """
    User Update Schema - Used by admins to edit an account.

    Email and role are fixed at creation and cannot be changed here.
    """
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    second_last_name: Optional[str] = None
    password: Optional[str] = Field(None, min_length=6)
    is_active: Optional[bool] = None


# ---------------------------------------------------------------------------
# Response projections
# ---------------------------------------------------------------------------

class PublicProfile(CamelModel):
    """Identity returned by register and login."""
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    second_last_name: Optional[str] = None
    role: UserRole


class BasicRegistrationProfile(PublicProfile):
    """Identity returned after step 1 of two-step onboarding."""
    is_profile_complete: bool = False


class MedicalProfile(PublicProfile):
    """Identity plus the medical profile."""
    diabetes_type: Optional[DiabetesType] = None
    diagnosis_year: Optional[int] = None
    has_hypertension: Optional[bool] = None
    birth_date: Optional[date] = None
    gender: Optional[Gender] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    medical_history: Optional[str] = None
    current_medications: Optional[str] = None
    allergies: Optional[str] = None
    emergency_contact: Optional[str] = None
    emergency_phone: Optional[str] = None


class CompletedProfile(MedicalProfile):
    """Identity returned after step 2 of two-step onboarding."""
    is_profile_complete: bool = True


class PatientResponse(CamelModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    second_last_name: Optional[str] = None
    diabetes_type: Optional[DiabetesType] = None
    diagnosis_year: Optional[int] = None
    has_hypertension: Optional[bool] = None
    birth_date: Optional[date] = None
    gender: Optional[Gender] = None
    height: Optional[float] = None
    weight: Optional[float] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DoctorResponse(CamelModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    second_last_name: Optional[str] = None
    role: UserRole
    medical_license: Optional[str] = None
    specialty: Optional[str] = None
    specializations: Optional[List[str]] = None
    institution: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class DoctorPatientResponse(CamelModel):
    """Patient as seen from a doctor's patient list."""
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    second_last_name: Optional[str] = None
    diabetes_type: Optional[DiabetesType] = None
    diagnosis_year: Optional[int] = None


class DeactivatedResponse(CamelModel):
    """Returned by soft-delete endpoints."""
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    second_last_name: Optional[str] = None
    is_active: bool


class UserSummary(CamelModel):
    id: str
    email: str
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    role: UserRole
    is_active: bool
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class FullProfile(MedicalProfile):
    """Every stored field except the password hash."""
    is_active: bool
    medical_license: Optional[str] = None
    specialty: Optional[str] = None
    specializations: Optional[List[str]] = None
    institution: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class TokenClaims(CamelModel):
    """Identity decoded from a verified bearer token."""
    user_id: str
    email: str
    role: UserRole


class AuditLogResponse(CamelModel):
    id: int
    user_id: Optional[str] = None
    action: str
    details: Optional[dict] = None
    ip_address: Optional[str] = None
    request_id: Optional[str] = None
    timestamp: Optional[datetime] = None
