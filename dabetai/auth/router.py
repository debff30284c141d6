"""
Authentication routes for the dabetai platform.
"""
from fastapi import APIRouter, Depends, HTTPException, status, Request
from sqlalchemy.orm import Session
import logging

from ..database import get_db
from ..exceptions import AppException
from ..core.security import PasswordHasher, TokenIssuer
from ..users.schemas import (
    PublicProfile, BasicRegistrationProfile, MedicalProfile, CompletedProfile, TokenClaims
)
from .dependencies import get_password_hasher, get_token_issuer, get_current_claims
from .schemas import (
    RegisterRequest, BasicRegisterRequest, RegisterPatientRequest, CompleteProfileRequest,
    LoginRequest, TokenResponse, ProfileResponse, AuthError
)
from .service import register_user, register_basic, register_patient, complete_profile, login_user

# Set up logging
logger = logging.getLogger(__name__)

# Create API router
router = APIRouter(prefix="/auth", tags=["Authentication"])

# ============================================================================
# REGISTRATION ROUTES
# ============================================================================

@router.post(
    "/register",
    response_model=TokenResponse[PublicProfile],
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": AuthError}},
    summary="Register User"
)
async def register_route(
    data: RegisterRequest,
    request: Request,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenIssuer = Depends(get_token_issuer)
):
    """
    Generic registration endpoint. The account gets the USER role.

    Returns:
        Access token and public profile

    Raises:
        EmailAlreadyExistsException: If the email is already registered
    """
    try:
        return await register_user(db, hasher, tokens, data, request=request)
    except AppException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during registration: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred during registration"
        )


@router.post(
    "/register/basic",
    response_model=TokenResponse[BasicRegistrationProfile],
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": AuthError}},
    summary="Patient Registration (Step 1)"
)
async def register_basic_route(
    data: BasicRegisterRequest,
    request: Request,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenIssuer = Depends(get_token_issuer)
):
    """
    First step of two-step onboarding.

    Creates a PATIENT account without medical data. The profile is completed
    later through ``PATCH /auth/complete-profile`` using the returned token.
    """
    try:
        return await register_basic(db, hasher, tokens, data, request=request)
    except AppException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during basic registration: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred during registration"
        )


@router.post(
    "/register/patient",
    response_model=TokenResponse[MedicalProfile],
    status_code=status.HTTP_201_CREATED,
    responses={409: {"model": AuthError}},
    summary="Patient Registration (Single Step)"
)
async def register_patient_route(
    data: RegisterPatientRequest,
    request: Request,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenIssuer = Depends(get_token_issuer)
):
    """Creates a PATIENT account together with its medical profile."""
    try:
        return await register_patient(db, hasher, tokens, data, request=request)
    except AppException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during patient registration: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred during registration"
        )

# ============================================================================
# PROFILE ROUTES
# ============================================================================

@router.patch(
    "/complete-profile",
    response_model=ProfileResponse[CompletedProfile],
    summary="Complete Patient Profile (Step 2)"
)
async def complete_profile_route(
    data: CompleteProfileRequest,
    request: Request,
    db: Session = Depends(get_db),
    claims: TokenClaims = Depends(get_current_claims)
):
    """
    Second step of two-step onboarding.

    Stores the medical profile of the authenticated user. The caller keeps
    using the token it already holds.
    """
    try:
        return await complete_profile(db, claims.user_id, data, request=request)
    except AppException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error completing profile for {claims.user_id}: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred while completing the profile"
        )


@router.get("/profile", response_model=TokenClaims, summary="Get Current Token Claims")
async def get_profile_route(claims: TokenClaims = Depends(get_current_claims)):
    """Returns the identity asserted by the bearer token."""
    return claims

# ============================================================================
# LOGIN
# ============================================================================

@router.post(
    "/login",
    response_model=TokenResponse[PublicProfile],
    responses={401: {"model": AuthError}},
    summary="User Login"
)
async def login_route(
    login_data: LoginRequest,
    request: Request,
    db: Session = Depends(get_db),
    hasher: PasswordHasher = Depends(get_password_hasher),
    tokens: TokenIssuer = Depends(get_token_issuer)
):
    """
    User login endpoint.

    Args:
        login_data: User login credentials
        request: FastAPI request object
        db: Database session

    Returns:
        Access token and public profile

    Raises:
        InvalidCredentialsException: If the email is unknown or the password is wrong
        AccountDeactivatedException: If the account has been deactivated
    """
    try:
        return await login_user(
            db, hasher, tokens,
            email=login_data.email,
            password=login_data.password,
            request=request
        )
    except AppException:
        raise
    except Exception as e:
        logger.error(f"Unexpected error during login: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="An unexpected error occurred during login"
        )
