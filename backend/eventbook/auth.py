# backend/eventbook/auth.py
"""
Password hashing and JWT tokens.

Access tokens carry ``sub`` (user id) and ``role`` and are signed with the
configured secret (HS256 by default). Refresh tokens carry ``sub``, a
``jti`` and ``type="refresh"`` and are signed with a separate secret, so
one can never be accepted in place of the other.
"""

from datetime import datetime, timedelta, timezone
import hashlib
import logging
from typing import Any, Dict, Optional, Tuple, cast

import jwt
from passlib.context import CryptContext
import ulid

from .core.config import settings

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """
    Verify a plain password against a hashed password.

    Returns:
        bool: True if password matches, False otherwise
    """
    try:
        return bool(pwd_context.verify(plain_password, hashed_password))
    except Exception as e:
        logger.error(f"Error verifying password: {str(e)}")
        return False


def get_password_hash(password: str) -> str:
    return str(pwd_context.hash(password))


def create_access_token(data: Dict[str, Any], expires_delta: Optional[timedelta] = None) -> str:
    """
    Create a JWT access token.

    Args:
        data: Claims to encode; must include ``sub``
        expires_delta: Optional lifetime, defaults to the configured one
    """
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + (
        expires_delta
        if expires_delta is not None
        else timedelta(minutes=settings.access_token_expire_minutes)
    )
    to_encode.update({"exp": expire, "iat": datetime.now(timezone.utc)})
    return jwt.encode(to_encode, settings.secret_key.get_secret_value(), algorithm=settings.algorithm)


def create_token_for_user(user: Any) -> str:
    return create_access_token({"sub": user.id, "role": user.role})


def decode_access_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify a token.

    Raises:
        jwt.PyJWTError: signature, expiry or format problems
    """
    payload = jwt.decode(
        token,
        settings.secret_key.get_secret_value(),
        algorithms=[settings.algorithm],
    )
    return cast(Dict[str, Any], payload)


REFRESH_TOKEN_TYPE = "refresh"


def create_refresh_token(user_id: str) -> Tuple[str, datetime]:
    """
    Create a signed refresh token for ``user_id``.

    Returns:
        (token, expiry) so the caller can persist the issued token
    """
    now = datetime.now(timezone.utc)
    expire = now + timedelta(days=settings.refresh_token_expire_days)
    payload = {
        "sub": user_id,
        "jti": str(ulid.ULID()),
        "type": REFRESH_TOKEN_TYPE,
        "exp": expire,
        "iat": now,
    }
    token = jwt.encode(payload, settings.refresh_secret_key.get_secret_value(), algorithm=settings.algorithm)
    return token, expire


def decode_refresh_token(token: str) -> Dict[str, Any]:
    """
    Decode and verify a refresh token.

    Raises:
        jwt.PyJWTError: bad signature, expired, or not a refresh token
    """
    payload = jwt.decode(
        token,
        settings.refresh_secret_key.get_secret_value(),
        algorithms=[settings.algorithm],
    )
    if payload.get("type") != REFRESH_TOKEN_TYPE:
        raise jwt.InvalidTokenError("Not a refresh token")
    return cast(Dict[str, Any], payload)


def hash_token(token: str) -> str:
    """Stored form of an issued refresh token."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()
