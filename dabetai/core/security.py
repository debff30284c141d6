"""
Core security utilities for password hashing and JWT session tokens.

Both helpers are built from explicit configuration values and handed to the
services through FastAPI dependencies (see ``auth.dependencies``).
"""
from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any
from jose import jwt, JWTError, ExpiredSignatureError
from passlib.context import CryptContext
import logging

from ..config import Settings
from ..auth.exceptions import InvalidTokenException, TokenExpiredException

# Set up logging
logger = logging.getLogger(__name__)

REQUIRED_CLAIMS = ("sub", "email", "role")


class PasswordHasher:
    """
    Salted one-way password hashing backed by bcrypt.

    Attributes:
        rounds: bcrypt work factor
    """
    def __init__(self, rounds: int = 10):
        self.rounds = rounds
        self._context = CryptContext(
            schemes=["bcrypt"],
            deprecated="auto",
            bcrypt__default_rounds=rounds
        )

    @classmethod
    def from_settings(cls, settings: Settings) -> "PasswordHasher":
        return cls(rounds=settings.bcrypt_rounds)

    def hash(self, password: str) -> str:
        """
        Hash a password using bcrypt.

        Args:
            password: Plain text password

        Returns:
            str: Hashed password
        """
        return self._context.hash(password)

    def verify(self, plain_password: str, hashed_password: Optional[str]) -> bool:
        """
        Verify a password against a hash.

        A missing or malformed hash is a mismatch, never an error.

        Args:
            plain_password: Plain text password
            hashed_password: Hashed password to compare against

        Returns:
            bool: True if password matches hash
        """
        if not hashed_password:
            return False
        try:
            return self._context.verify(plain_password, hashed_password)
        except (ValueError, TypeError) as e:
            logger.warning(f"Password verification against unusable hash: {type(e).__name__}")
            return False

    def dummy_verify(self) -> None:
        """Burn roughly one verification worth of CPU when there is no hash to check."""
        self._context.dummy_verify()


class TokenIssuer:
    """
    Signs and verifies symmetric-key JWT access tokens.

    Attributes:
        secret_key: Signing secret
        algorithm: JWS algorithm (HS256 by default)
        expire_minutes: Default token lifetime
    """
    def __init__(self, secret_key: str, algorithm: str = "HS256", expire_minutes: int = 60):
        self.secret_key = secret_key
        self.algorithm = algorithm
        self.expire_minutes = expire_minutes

    @classmethod
    def from_settings(cls, settings: Settings) -> "TokenIssuer":
        return cls(
            secret_key=settings.secret_key,
            algorithm=settings.algorithm,
            expire_minutes=settings.access_token_expire_minutes
        )

    def sign(self, data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
        """
        Create a JWT access token.

        Args:
            data: Claims to encode in the token
            expires_delta: Token lifetime, defaults to the configured one

        Returns:
            str: Encoded JWT token
        """
        to_encode = data.copy()
        issued_at = datetime.now(timezone.utc)
        expire = issued_at + (expires_delta or timedelta(minutes=self.expire_minutes))
        to_encode.update({"iat": issued_at, "exp": expire})

        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify(self, token: str) -> Dict[str, Any]:
        """
        Verify and decode a JWT token.

        Args:
            token: JWT token string

        Returns:
            Dict containing the token payload

        Raises:
            TokenExpiredException: If the token has expired
            InvalidTokenException: If the token is malformed, forged or lacks identity claims
        """
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except ExpiredSignatureError:
            raise TokenExpiredException()
        except JWTError as e:
            logger.warning(f"Rejected token: {str(e)}")
            raise InvalidTokenException()

        missing = [claim for claim in REQUIRED_CLAIMS if not payload.get(claim)]
        if missing:
            logger.warning(f"Rejected token: missing claims {missing}")
            raise InvalidTokenException("Invalid token payload")
        return payload
