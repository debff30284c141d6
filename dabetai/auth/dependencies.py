"""
FastAPI dependencies for authentication and authorization.

The guard trusts the signed token: the decoded claims are injected as-is and
the database is not consulted.
"""
from functools import lru_cache
from typing import List, Optional
from fastapi import Depends
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials

from ..config import settings
from ..core.security import PasswordHasher, TokenIssuer
from ..users.models import UserRole
from ..users.schemas import TokenClaims
from .exceptions import InvalidTokenException, PermissionDeniedException

# Bearer scheme; auto_error is off so a missing header is a 401, not a 403
bearer_scheme = HTTPBearer(auto_error=False)


@lru_cache
def get_password_hasher() -> PasswordHasher:
    """Password hasher built once from settings. Tests override this dependency."""
    return PasswordHasher.from_settings(settings)


@lru_cache
def get_token_issuer() -> TokenIssuer:
    """Token issuer built once from settings. Tests override this dependency."""
    return TokenIssuer.from_settings(settings)


def get_current_claims(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    tokens: TokenIssuer = Depends(get_token_issuer)
) -> TokenClaims:
    """
    Get the identity asserted by the bearer token.

    Args:
        credentials: Parsed ``Authorization: Bearer <token>`` header
        tokens: Token issuer used to verify the signature

    Returns:
        TokenClaims: Decoded user id, email and role

    Raises:
        InvalidTokenException: If the header is missing or the token is invalid
        TokenExpiredException: If the token has expired
    """
    if credentials is None or not credentials.credentials:
        raise InvalidTokenException("Not authenticated")

    payload = tokens.verify(credentials.credentials)
    try:
        return TokenClaims(user_id=payload["sub"], email=payload["email"], role=payload["role"])
    except ValueError:
        raise InvalidTokenException("Invalid token payload")


def require_roles(allowed_roles: List[UserRole]):
    """
    Dependency factory to require specific roles.

    Args:
        allowed_roles: List of roles that are allowed access

    Returns:
        Function that checks if the caller has a required role
    """
    def role_checker(claims: TokenClaims = Depends(get_current_claims)) -> TokenClaims:
        if claims.role not in allowed_roles:
            raise PermissionDeniedException(
                required_roles=[role.value for role in allowed_roles],
                user_role=claims.role.value
            )
        return claims

    return role_checker


# Common role dependencies
require_admin = require_roles([UserRole.ADMIN])
