"""
Password hashing and access tokens for password-based administrators.

Members and identity-provider administrators authenticate with provider
tokens; administrators created through signup log in with a password and
receive a locally signed JWT instead.
"""

from datetime import UTC, datetime, timedelta

from jose import JWTError, jwt  # type: ignore
from passlib.context import CryptContext  # type: ignore

from church_hub.core.config import settings
from church_hub.core.exceptions import InvalidCredentialError

ADMINISTRATOR_TOKEN_KIND = "administrator"

# Password hashing context
pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plaintext password against its hash.

    Args:
        plain_password: The plaintext password to verify
        hashed_password: The hashed password from database

    Returns:
        True if password matches, False otherwise
    """
    return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
    """Hash a plaintext password."""
    return pwd_context.hash(password)


def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: The claims to encode in the token
        expires_delta: Optional custom expiration time

    Returns:
        JWT access token string
    """
    to_encode = data.copy()
    if expires_delta:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(minutes=settings.jwt_access_token_expire_minutes)
    to_encode.update({"exp": expire})
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def create_administrator_token(administrator_id: int) -> str:
    return create_access_token({"sub": str(administrator_id), "kind": ADMINISTRATOR_TOKEN_KIND})


def is_local_token(token: str) -> bool:
    """Return True when the token header names our signing algorithm."""
    try:
        header = jwt.get_unverified_header(token)
    except JWTError:
        return False
    return header.get("alg") == settings.jwt_algorithm


def decode_administrator_token(token: str) -> int:
    """
    Decode a locally issued administrator token.

    Returns:
        The administrator id carried in ``sub``

    Raises:
        InvalidCredentialError: If the token is invalid, expired or not an administrator token
    """
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except JWTError:
        raise InvalidCredentialError() from None

    if payload.get("kind") != ADMINISTRATOR_TOKEN_KIND:
        raise InvalidCredentialError()

    try:
        return int(payload["sub"])
    except (KeyError, TypeError, ValueError):
        raise InvalidCredentialError() from None
