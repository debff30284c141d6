"""
Auth Schemas - Request bodies and response envelopes for the authentication routes.
"""
from typing import Generic, Optional, TypeVar
from pydantic import BaseModel, EmailStr, Field, field_validator

from ..users.models import DiabetesType
from ..users.schemas import StrictRequest, MedicalProfileFields

T = TypeVar("T")

# Diabetes types a patient can declare during onboarding
ONBOARDING_DIABETES_TYPES = (DiabetesType.TYPE_1, DiabetesType.TYPE_2, DiabetesType.GESTATIONAL)


class RegisterRequest(StrictRequest):
    """
    Registration Schema - Shared by plain and basic registration

    Fields:
    - email: Login email, unique across every account
    - password: Plain text password (hashed before storage), at least 6 characters
    - first_name / last_name / second_last_name: Display names
    """
    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    second_last_name: str = Field(..., min_length=1)


class BasicRegisterRequest(RegisterRequest):
    """Step 1 of two-step onboarding. No medical data yet."""
    pass


class OnboardingMedicalFields(MedicalProfileFields):
    """Medical fields as accepted during onboarding, where MODY is not offered."""

    @field_validator("diabetes_type")
    @classmethod
    def onboarding_diabetes_type(cls, value: DiabetesType) -> DiabetesType:
        if value not in ONBOARDING_DIABETES_TYPES:
            allowed = ", ".join(t.value for t in ONBOARDING_DIABETES_TYPES)
            raise ValueError(f"diabetesType must be one of: {allowed}")
        return value


class RegisterPatientRequest(OnboardingMedicalFields):
    """Single-step patient registration: identity and medical profile together."""
    email: EmailStr
    password: str = Field(..., min_length=6)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    second_last_name: str = Field(..., min_length=1)


class CompleteProfileRequest(OnboardingMedicalFields):
    """Step 2 of two-step onboarding. The identity comes from the bearer token."""
    pass


class LoginRequest(StrictRequest):
    email: EmailStr
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel, Generic[T]):
    """
    Session envelope returned by registration and login.

    The token keys keep their OAuth2 spelling; ``user`` is a camelCase projection.
    """
    access_token: str
    token_type: str = "bearer"
    user: T


class ProfileResponse(BaseModel, Generic[T]):
    """Envelope returned by profile completion. No new token is issued."""
    user: T


class AuthError(BaseModel):
    """Body of every 401/403/409 produced by the auth routes."""
    detail: str
    errors: Optional[list] = None
