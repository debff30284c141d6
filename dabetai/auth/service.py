"""
Authentication Service - Registration, profile completion and login.

Registration follows the same steps on every entry point: cheap email pre-check,
password hashing off the event loop, insert. The insert is the authoritative
uniqueness check; the pre-check only spares a bcrypt round for obvious duplicates.
"""
from typing import Optional
from fastapi import Request
from starlette.concurrency import run_in_threadpool
from sqlalchemy.orm import Session
import logging

from ..core.audit_service import create_audit_log
from ..core.security import PasswordHasher, TokenIssuer
from ..exceptions import EmailAlreadyExistsException
from ..users.models import User, UserRole
from ..users.projections import (
    to_public_profile, to_basic_registration_profile, to_medical_profile,
    to_completed_profile, to_claims
)
from ..users.repository import UserRepository
from ..users.schemas import PublicProfile, BasicRegistrationProfile, MedicalProfile, CompletedProfile
from .exceptions import InvalidCredentialsException, AccountDeactivatedException
from .schemas import (
    RegisterRequest, BasicRegisterRequest, RegisterPatientRequest, CompleteProfileRequest,
    TokenResponse, ProfileResponse
)

# Set up logging
logger = logging.getLogger(__name__)


async def create_account(
    db: Session,
    hasher: PasswordHasher,
    role: UserRole,
    email: str,
    password: str,
    request: Optional[Request] = None,
    **fields
) -> User:
    """
    Insert a new identity record with a freshly hashed password.

    Args:
        db: Database session
        hasher: Password hasher
        role: Role fixed by the calling entry point
        email: Login email
        password: Plain text password
        request: FastAPI request object for audit logging
        **fields: Any other column values

    Returns:
        User: The created record

    Raises:
        EmailAlreadyExistsException: If the email is already registered
    """
    repo = UserRepository(db)

    if repo.find_by_email(email):
        logger.warning(f"Registration failed: Email already exists - {email}")
        await create_audit_log(
            db, action="REGISTRATION_FAILED_EMAIL_EXISTS", request=request,
            details={"email": email, "role": role.value}
        )
        raise EmailAlreadyExistsException()

    password_hash = await run_in_threadpool(hasher.hash, password)

    try:
        user = repo.create(email=email, password_hash=password_hash, role=role, **fields)
    except EmailAlreadyExistsException:
        # Lost a race with a concurrent registration for the same email
        await create_audit_log(
            db, action="REGISTRATION_FAILED_EMAIL_EXISTS", request=request,
            details={"email": email, "role": role.value}
        )
        raise

    await create_audit_log(
        db, action="REGISTRATION_SUCCESS", user_id=user.id, request=request,
        details={"email": email, "role": role.value}
    )
    return user


async def register_user(
    db: Session,
    hasher: PasswordHasher,
    tokens: TokenIssuer,
    data: RegisterRequest,
    request: Optional[Request] = None
) -> TokenResponse[PublicProfile]:
    """
    Register a generic USER account and open a session for it.

    Raises:
        EmailAlreadyExistsException: If the email is already registered
    """
    user = await create_account(
        db, hasher, UserRole.USER, data.email, data.password, request=request,
        first_name=data.first_name,
        last_name=data.last_name,
        second_last_name=data.second_last_name
    )
    logger.info(f"User registered: {user.id}")
    return TokenResponse[PublicProfile](
        access_token=tokens.sign(to_claims(user)),
        user=to_public_profile(user)
    )


async def register_basic(
    db: Session,
    hasher: PasswordHasher,
    tokens: TokenIssuer,
    data: BasicRegisterRequest,
    request: Optional[Request] = None
) -> TokenResponse[BasicRegistrationProfile]:
    """
    Step 1 of two-step onboarding: a PATIENT account with no medical profile yet.

    The returned profile always reports ``isProfileComplete=false``.
    """
    user = await create_account(
        db, hasher, UserRole.PATIENT, data.email, data.password, request=request,
        first_name=data.first_name,
        last_name=data.last_name,
        second_last_name=data.second_last_name
    )
    logger.info(f"Patient registered (basic): {user.id}")
    return TokenResponse[BasicRegistrationProfile](
        access_token=tokens.sign(to_claims(user)),
        user=to_basic_registration_profile(user)
    )


async def register_patient(
    db: Session,
    hasher: PasswordHasher,
    tokens: TokenIssuer,
    data: RegisterPatientRequest,
    request: Optional[Request] = None
) -> TokenResponse[MedicalProfile]:
    """Single-step onboarding: a PATIENT account created with its full medical profile."""
    fields = data.model_dump(exclude={"email", "password"})
    user = await create_account(
        db, hasher, UserRole.PATIENT, data.email, data.password, request=request, **fields
    )
    logger.info(f"Patient registered (full): {user.id}")
    return TokenResponse[MedicalProfile](
        access_token=tokens.sign(to_claims(user)),
        user=to_medical_profile(user)
    )


async def complete_profile(
    db: Session,
    user_id: str,
    data: CompleteProfileRequest,
    request: Optional[Request] = None
) -> ProfileResponse[CompletedProfile]:
    """
    Step 2 of two-step onboarding: store the medical profile of an authenticated user.

    Credentials are not checked again and no new token is issued.

    Args:
        db: Database session
        user_id: Id taken from the caller's verified token
        data: Medical profile fields
        request: FastAPI request object for audit logging

    Raises:
        ResourceNotFoundException: If the account no longer exists
    """
    repo = UserRepository(db)
    user = repo.update(user_id, **data.model_dump(exclude_unset=True))
    profile = to_completed_profile(user)

    await create_audit_log(
        db, action="PROFILE_COMPLETED", user_id=user_id, request=request,
        details={"fields": sorted(data.model_fields_set)}
    )
    logger.info(f"Profile completed for user {user_id}")
    return ProfileResponse[CompletedProfile](user=profile)


async def login_user(
    db: Session,
    hasher: PasswordHasher,
    tokens: TokenIssuer,
    email: str,
    password: str,
    request: Optional[Request] = None
) -> TokenResponse[PublicProfile]:
    """
    Authenticate a user and generate an access token.

    An unknown email and a wrong password fail identically. The deactivation
    check runs only after the password has been verified.

    Args:
        db: Database session
        hasher: Password hasher
        tokens: Token issuer
        email: User's email address
        password: User's password
        request: FastAPI request object for audit logging

    Returns:
        Access token and public profile

    Raises:
        InvalidCredentialsException: If the email is unknown or the password is wrong
        AccountDeactivatedException: If the credentials are right but the account is inactive
    """
    user = UserRepository(db).find_by_email(email)

    if user is None:
        await run_in_threadpool(hasher.dummy_verify)
        logger.warning(f"Login failed: Invalid credentials for {email}")
        await create_audit_log(
            db, action="LOGIN_FAILED_INVALID_CREDENTIALS", request=request,
            details={"email": email}
        )
        raise InvalidCredentialsException()

    password_ok = await run_in_threadpool(hasher.verify, password, user.password_hash)
    if not password_ok:
        logger.warning(f"Login failed: Invalid credentials for {email}")
        await create_audit_log(
            db, action="LOGIN_FAILED_INVALID_CREDENTIALS", user_id=user.id, request=request,
            details={"email": email}
        )
        raise InvalidCredentialsException()

    if not user.is_active:
        logger.warning(f"Login failed: Account {user.id} is deactivated")
        await create_audit_log(
            db, action="LOGIN_FAILED_ACCOUNT_DEACTIVATED", user_id=user.id, request=request,
            details={"email": email}
        )
        raise AccountDeactivatedException()

    response = TokenResponse[PublicProfile](
        access_token=tokens.sign(to_claims(user)),
        user=to_public_profile(user)
    )
    await create_audit_log(db, action="LOGIN_SUCCESS", user_id=user.id, request=request)
    logger.info(f"Login successful: User {user.id} ({email})")
    return response
