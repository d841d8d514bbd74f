# backend/eventbook/api/dependencies/auth.py
"""
Authentication dependencies.

The bearer token is decoded, then the user is loaded in a worker thread so
the synchronous query does not block the event loop.
"""

import asyncio
import logging
from typing import Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
import jwt
from sqlalchemy.orm import Session

from ...auth import decode_access_token
from ...models.user import User
from ...repositories import RepositoryFactory
from .database import get_db

logger = logging.getLogger(__name__)

oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/v1/auth/login", auto_error=False)


def _credentials_error(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


async def get_current_user(
    token: Optional[str] = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Resolve the bearer token to an active user.

    Raises:
        HTTPException: 401 when the token is missing, invalid, expired or
            names a user that no longer exists or is disabled
    """
    if not token:
        raise _credentials_error("Not authenticated")

    try:
        payload = decode_access_token(token)
    except jwt.PyJWTError as e:
        logger.info(f"Rejected access token: {type(e).__name__}")
        raise _credentials_error("Could not validate credentials")

    user_id = payload.get("sub")
    if not isinstance(user_id, str):
        raise _credentials_error("Could not validate credentials")

    repository = RepositoryFactory.create_user_repository(db)
    user = await asyncio.to_thread(repository.get_by_id, user_id, False)
    if user is None:
        raise _credentials_error("User not found")
    if not user.is_active:
        raise _credentials_error("Account is disabled")
    return user
