# backend/eventbook/repositories/refresh_token_repository.py
"""Refresh token repository; rows are looked up by token hash."""

from datetime import datetime
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..core.timezone_utils import ensure_utc
from ..models.refresh_token import RefreshToken
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class RefreshTokenRepository(BaseRepository[RefreshToken]):
    def __init__(self, db: Session):
        super().__init__(db, RefreshToken)

    def revoke(self, token_hash: str, user_id: str) -> int:
        """Delete one token of ``user_id``; returns rows removed."""
        try:
            return int(
                self.db.query(RefreshToken)
                .filter(RefreshToken.token_hash == token_hash, RefreshToken.user_id == user_id)
                .delete(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error revoking refresh token: {str(e)}")
            raise RepositoryException(f"Failed to revoke refresh token: {str(e)}")

    def revoke_all(self, user_id: str) -> int:
        try:
            return int(
                self.db.query(RefreshToken)
                .filter(RefreshToken.user_id == user_id)
                .delete(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error revoking refresh tokens: {str(e)}")
            raise RepositoryException(f"Failed to revoke refresh tokens: {str(e)}")

    def delete_expired(self, user_id: str, now: datetime) -> int:
        try:
            return int(
                self.db.query(RefreshToken)
                .filter(RefreshToken.user_id == user_id, RefreshToken.expires_at <= ensure_utc(now))
                .delete(synchronize_session=False)
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error purging expired refresh tokens: {str(e)}")
            raise RepositoryException(f"Failed to purge refresh tokens: {str(e)}")
