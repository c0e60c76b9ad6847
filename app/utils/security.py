"""
Shadi Recommendations - Security Utilities

Password hashing, JWT token management, and security helpers.
"""

import secrets
from datetime import datetime, timedelta, timezone
from typing import Optional

from jose import JWTError, jwt
from passlib.context import CryptContext

from app.config import settings


# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain password against a hashed password."""
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a password for storing."""
    return pwd_context.hash(password)


def generate_nonce() -> str:
    """Random value for Content-Security-Policy script nonces."""
    return secrets.token_urlsafe(16)


def create_access_token(
    data: dict,
    expires_delta: Optional[timedelta] = None
) -> str:
    """
    Create a JWT access token.

    Args:
        data: Dictionary containing token payload
        expires_delta: Optional custom expiration time

    Returns:
        Encoded JWT token string
    """
    to_encode = data.copy()

    if expires_delta:
        expire = datetime.now(timezone.utc) + expires_delta
    else:
        expire = datetime.now(timezone.utc) + timedelta(
            minutes=settings.access_token_expire_minutes
        )

    to_encode.update({
        "exp": expire,
        "type": "access",
        "sid": secrets.token_hex(8),
    })

    encoded_jwt = jwt.encode(
        to_encode,
        settings.jwt_secret_key,
        algorithm=settings.jwt_algorithm
    )

    return encoded_jwt


def decode_token(token: str, verify_exp: bool = True) -> Optional[dict]:
    """
    Decode and verify a JWT token.

    Args:
        token: JWT token string
        verify_exp: Reject expired tokens. The session verifier passes False
            and compares the expiry itself so it can sign the caller out.

    Returns:
        Token payload dict or None if invalid
    """
    try:
        payload = jwt.decode(
            token,
            settings.jwt_secret_key,
            algorithms=[settings.jwt_algorithm],
            options={"verify_exp": verify_exp},
        )
        return payload
    except JWTError:
        return None


def verify_access_token(token: str, verify_exp: bool = True) -> Optional[dict]:
    """
    Verify an access token and return its payload.

    Returns:
        Token payload if valid access token, None otherwise
    """
    payload = decode_token(token, verify_exp=verify_exp)

    if payload is None:
        return None

    if payload.get("type") != "access":
        return None

    return payload
