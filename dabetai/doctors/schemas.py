"""
Doctor Schemas - Pydantic models for doctor profile data validation.
"""
from typing import List, Optional
from pydantic import EmailStr, Field

from ..users.schemas import CamelModel, StrictRequest


class DoctorCreate(StrictRequest):
    """
    Doctor Creation Schema

    Fields:
    - email / password: Login credentials (password at least 6 characters)
    - first_name / last_name / second_last_name: Display names
    - medical_license: Professional license number
    - specialty: Main specialty, used by the specialty search
    - specializations: Additional areas of expertise (optional)
    - institution / phone / bio: Optional contact and presentation details
    """
    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: str
    last_name: str
    second_last_name: Optional[str] = None
    medical_license: str
    specialty: str = Field(..., description="Doctor's main specialty")
    specializations: Optional[List[str]] = None
    institution: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = Field(None, description="Professional biography")


class DoctorUpdate(StrictRequest):
    """Partial update. Email and role cannot be changed."""
    password: Optional[str] = Field(None, min_length=6)
    first_name: Optional[str] = None
    last_name: Optional[str] = None
    second_last_name: Optional[str] = None
    medical_license: Optional[str] = None
    specialty: Optional[str] = None
    specializations: Optional[List[str]] = None
    institution: Optional[str] = None
    phone: Optional[str] = None
    bio: Optional[str] = None
    is_active: Optional[bool] = None


class DoctorStats(CamelModel):
    total_doctors: int
    active_doctors: int
    inactive_doctors: int
