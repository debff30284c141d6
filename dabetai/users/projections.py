"""
Projections - Reshape identity records into the response shape of each scenario.

Services never return a ``User`` directly. Each function below copies only the
fields its schema declares, so the password hash cannot leak through any of them.
"""
from typing import Any, Dict

from .models import User
from .schemas import (
    PublicProfile, BasicRegistrationProfile, MedicalProfile, CompletedProfile,
    PatientResponse, DeactivatedResponse, DoctorResponse, DoctorPatientResponse,
    UserSummary, FullProfile
)


def to_public_profile(user: User) -> PublicProfile:
    return PublicProfile.model_validate(user)


def to_basic_registration_profile(user: User) -> BasicRegistrationProfile:
    """Profile after step 1 of onboarding; completeness is always false here."""
    return BasicRegistrationProfile.model_validate(user)


def to_medical_profile(user: User) -> MedicalProfile:
    return MedicalProfile.model_validate(user)


def to_completed_profile(user: User) -> CompletedProfile:
    """Profile after step 2 of onboarding; completeness is always true here."""
    return CompletedProfile.model_validate(user)


def to_patient(user: User) -> PatientResponse:
    return PatientResponse.model_validate(user)


def to_deactivated(user: User) -> DeactivatedResponse:
    return DeactivatedResponse.model_validate(user)


def to_doctor(user: User) -> DoctorResponse:
    return DoctorResponse.model_validate(user)


def to_doctor_patient(user: User) -> DoctorPatientResponse:
    return DoctorPatientResponse.model_validate(user)


def to_user_summary(user: User) -> UserSummary:
    return UserSummary.model_validate(user)


def to_full_profile(user: User) -> FullProfile:
    return FullProfile.model_validate(user)


def to_claims(user: User) -> Dict[str, Any]:
    """
    Token payload for a session: ``sub`` carries the id.

    Expiry and issue time are added by ``TokenIssuer.sign``.
    """
    return {
        "email": user.email,
        "sub": user.id,
        "role": user.role.value
    }
