# backend/eventbook/repositories/user_repository.py
"""User Repository for the EventBook platform."""

import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..core.exceptions import RepositoryException
from ..models.user import User
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class UserRepository(BaseRepository[User]):
    def __init__(self, db: Session):
        super().__init__(db, User)

    def get_by_email(self, email: str) -> Optional[User]:
        """Case-insensitive lookup; emails are stored lowercased."""
        try:
            return self.db.query(User).filter(User.email == email.strip().lower()).first()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting user by email: {str(e)}")
            raise RepositoryException(f"Failed to retrieve user: {str(e)}")

    def count_by_role(self) -> Dict[str, int]:
        try:
            rows = self.db.query(User.role, func.count(User.id)).group_by(User.role).all()
            return {role: int(count) for role, count in rows}
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting users by role: {str(e)}")
            raise RepositoryException(f"Failed to count users: {str(e)}")

    def search(
        self,
        *,
        page: int,
        limit: int,
        role: Optional[str] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[User], int]:
        """Newest-first page of users; ``search`` matches name or e-mail."""
        query = self.db.query(User)
        if role:
            query = query.filter(User.role == role)
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(User.name.ilike(pattern), User.email.ilike(pattern)))
        query = query.order_by(User.created_at.desc(), User.id.desc())
        return self._paginate(query, page, limit)

    def get_recent(self, limit: int) -> List[User]:
        try:
            return self.db.query(User).order_by(User.created_at.desc(), User.id.desc()).limit(limit).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting recent users: {str(e)}")
            raise RepositoryException(f"Failed to get recent users: {str(e)}")
