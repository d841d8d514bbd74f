# backend/eventbook/repositories/service_repository.py
"""
Service Repository for the EventBook platform.

Catalog search, ownership lookups, the per-service row lock used while
creating bookings, and the atomic booking counter.
"""

import logging
from typing import Dict, List, Optional, Tuple

from sqlalchemy import String, asc, cast, desc, func, or_
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from ..core.exceptions import RepositoryException
from ..models.service import Service
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)

SORTABLE_FIELDS = {
    "created_at": Service.created_at,
    "price_per_day": Service.price_per_day,
    "rating": Service.rating,
    "title": Service.title,
}


class ServiceRepository(BaseRepository[Service]):
    """Repository for bookable services."""

    def __init__(self, db: Session):
        super().__init__(db, Service)

    def get_active(self, service_id: str) -> Optional[Service]:
        try:
            return (
                self.db.query(Service)
                .filter(Service.id == service_id, Service.is_active.is_(True))
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting active service {service_id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve service: {str(e)}")

    def get_for_update(self, service_id: str) -> Optional[Service]:
        """
        Load a service holding a row lock until the transaction ends.

        Booking creation for one service is serialized on this lock.
        Dialects without row locks (SQLite) ignore FOR UPDATE.
        """
        try:
            return (
                self.db.query(Service)
                .filter(Service.id == service_id)
                .with_for_update()
                .populate_existing()
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error locking service {service_id}: {str(e)}")
            raise RepositoryException(f"Failed to lock service: {str(e)}")

    def get_owned_service_ids(self, provider_id: str) -> List[str]:
        try:
            rows = self.db.query(Service.id).filter(Service.provider_id == provider_id).all()
            return [row[0] for row in rows]
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing services of provider {provider_id}: {str(e)}")
            raise RepositoryException(f"Failed to list provider services: {str(e)}")

    def get_by_provider(self, provider_id: str) -> List[Service]:
        try:
            return (
                self.db.query(Service)
                .filter(Service.provider_id == provider_id)
                .order_by(Service.created_at.desc())
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error listing services of provider {provider_id}: {str(e)}")
            raise RepositoryException(f"Failed to list provider services: {str(e)}")

    def increment_total_bookings(self, service_id: str) -> None:
        """``UPDATE services SET total_bookings = total_bookings + 1`` in the database."""
        try:
            self.db.query(Service).filter(Service.id == service_id).update(
                {Service.total_bookings: Service.total_bookings + 1},
                synchronize_session=False,
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error incrementing booking counter for {service_id}: {str(e)}")
            raise RepositoryException(f"Failed to update booking counter: {str(e)}")

    def search(
        self,
        *,
        page: int,
        limit: int,
        category: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        location: Optional[str] = None,
        provider_id: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Tuple[List[Service], int]:
        """Page of active services matching the catalog filters."""
        query = self.db.query(Service).filter(Service.is_active.is_(True))
        if category:
            query = query.filter(Service.category == category)
        if min_price is not None:
            query = query.filter(Service.price_per_day >= min_price)
        if max_price is not None:
            query = query.filter(Service.price_per_day <= max_price)
        if location:
            query = query.filter(Service.location.ilike(f"%{location}%"))
        if provider_id:
            query = query.filter(Service.provider_id == provider_id)
        if search:
            pattern = f"%{search}%"
            query = query.filter(
                or_(
                    Service.title.ilike(pattern),
                    Service.description.ilike(pattern),
                    cast(Service.tags, String).ilike(pattern),
                )
            )

        column = SORTABLE_FIELDS.get(sort_by, Service.created_at)
        direction = asc if sort_order == "asc" else desc
        query = query.order_by(direction(column), Service.id.desc())
        return self._paginate(query, page, limit)

    def count_active(self) -> int:
        return self.count(is_active=True)

    def list_all(
        self,
        *,
        page: int,
        limit: int,
        category: Optional[str] = None,
        provider_id: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
    ) -> Tuple[List[Service], int]:
        """Administrative listing; inactive services included unless filtered out."""
        query = self.db.query(Service).options(joinedload(Service.provider))
        if category:
            query = query.filter(Service.category == category)
        if provider_id:
            query = query.filter(Service.provider_id == provider_id)
        if is_active is not None:
            query = query.filter(Service.is_active.is_(is_active))
        if search:
            pattern = f"%{search}%"
            query = query.filter(or_(Service.title.ilike(pattern), Service.description.ilike(pattern)))
        query = query.order_by(Service.created_at.desc(), Service.id.desc())
        return self._paginate(query, page, limit)

    def count_active_by_category(self) -> Dict[str, int]:
        try:
            rows = (
                self.db.query(Service.category, func.count(Service.id))
                .filter(Service.is_active.is_(True))
                .group_by(Service.category)
                .all()
            )
            return {category: int(count) for category, count in rows}
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting services by category: {str(e)}")
            raise RepositoryException(f"Failed to count services: {str(e)}")
