# backend/eventbook/repositories/booking_repository.py
"""
Booking Repository for the EventBook platform.

Implements all data access operations for bookings:
- Overlap queries backing the availability engine
- Role-scoped, filtered and paginated listing
- Per-user queries (own bookings, dashboard, upcoming)
- Aggregates for statistics
"""

from datetime import datetime
from decimal import Decimal
import logging
from typing import Any, Collection, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Query, Session, joinedload

from ..core.exceptions import RepositoryException
from ..core.timezone_utils import ensure_utc
from ..models.booking import ACTIVE_BOOKING_STATUSES, REVENUE_BOOKING_STATUSES, Booking
from .base_repository import BaseRepository

logger = logging.getLogger(__name__)


class BookingRepository(BaseRepository[Booking]):
    """Repository for booking data access."""

    def __init__(self, db: Session):
        super().__init__(db, Booking)
        self.logger = logging.getLogger(__name__)

    def _apply_eager_loading(self, query: Query) -> Query:
        return query.options(joinedload(Booking.service), joinedload(Booking.user))

    # Availability queries

    def find_overlapping(
        self,
        service_id: str,
        start_date: datetime,
        end_date: datetime,
    ) -> List[Booking]:
        """
        Active bookings of a service whose range intersects [start_date, end_date].

        Ranges are closed: a booking ending on the day another starts
        counts as overlapping. Cancelled and completed bookings never match.
        """
        try:
            return self.db.query(Booking).filter(
                Booking.service_id == service_id,
                Booking.status.in_(ACTIVE_BOOKING_STATUSES),
                Booking.start_date <= ensure_utc(end_date),
                Booking.end_date >= ensure_utc(start_date),
            ).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error checking booking overlap: {str(e)}")
            raise RepositoryException(f"Failed to check overlap: {str(e)}")

    def get_booked_ranges(
        self, service_id: str, window_start: datetime, window_end: datetime
    ) -> List[Tuple[datetime, datetime]]:
        """(start, end) of active bookings that touch the given window."""
        try:
            rows = (
                self.db.query(Booking.start_date, Booking.end_date)
                .filter(
                    Booking.service_id == service_id,
                    Booking.status.in_(ACTIVE_BOOKING_STATUSES),
                    Booking.end_date >= ensure_utc(window_start),
                    Booking.start_date <= ensure_utc(window_end),
                )
                .order_by(Booking.start_date.asc())
                .all()
            )
            return [(ensure_utc(start), ensure_utc(end)) for start, end in rows]
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading booked ranges: {str(e)}")
            raise RepositoryException(f"Failed to load booked ranges: {str(e)}")

    # Lookups

    def get_for_user(self, booking_id: str, user_id: str) -> Optional[Booking]:
        """A booking only if it belongs to ``user_id``."""
        try:
            return (
                self._apply_eager_loading(self.db.query(Booking))
                .filter(Booking.id == booking_id, Booking.user_id == user_id)
                .first()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting booking {booking_id} for user {user_id}: {str(e)}")
            raise RepositoryException(f"Failed to retrieve booking: {str(e)}")

    # Listing

    def list_bookings(
        self,
        *,
        page: int,
        limit: int,
        scope_service_ids: Optional[Collection[str]] = None,
        status: Optional[str] = None,
        start_from: Optional[datetime] = None,
        end_until: Optional[datetime] = None,
        service_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Tuple[List[Booking], int]:
        """
        Filtered, newest-first page of bookings.

        Args:
            scope_service_ids: When given, results are restricted to these
                services. An empty collection yields no rows.
            start_from: Only bookings starting at or after this instant
            end_until: Only bookings ending at or before this instant

        Returns:
            (bookings on the page, total matching)
        """
        query = self._apply_eager_loading(self.db.query(Booking))
        if scope_service_ids is not None:
            query = query.filter(Booking.service_id.in_(list(scope_service_ids)))
        if status:
            query = query.filter(Booking.status == status)
        if start_from is not None:
            query = query.filter(Booking.start_date >= ensure_utc(start_from))
        if end_until is not None:
            query = query.filter(Booking.end_date <= ensure_utc(end_until))
        if service_id:
            query = query.filter(Booking.service_id == service_id)
        if user_id:
            query = query.filter(Booking.user_id == user_id)
        query = query.order_by(Booking.created_at.desc(), Booking.id.desc())
        return self._paginate(query, page, limit)

    def get_upcoming(
        self,
        since: datetime,
        *,
        limit: int,
        user_id: Optional[str] = None,
        scope_service_ids: Optional[Collection[str]] = None,
    ) -> List[Booking]:
        """Confirmed bookings starting at or after ``since``, soonest first."""
        try:
            query = self._apply_eager_loading(self.db.query(Booking)).filter(
                Booking.status == "confirmed",
                Booking.start_date >= ensure_utc(since),
            )
            if user_id:
                query = query.filter(Booking.user_id == user_id)
            if scope_service_ids is not None:
                query = query.filter(Booking.service_id.in_(list(scope_service_ids)))
            return query.order_by(Booking.start_date.asc()).limit(limit).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting upcoming bookings: {str(e)}")
            raise RepositoryException(f"Failed to get upcoming bookings: {str(e)}")

    def count_upcoming(self, since: datetime, *, user_id: str) -> int:
        """Confirmed bookings of ``user_id`` starting after ``since``."""
        try:
            return (
                self.db.query(func.count(Booking.id))
                .filter(
                    Booking.user_id == user_id,
                    Booking.status == "confirmed",
                    Booking.start_date > ensure_utc(since),
                )
                .scalar()
                or 0
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting upcoming bookings: {str(e)}")
            raise RepositoryException(f"Failed to count upcoming bookings: {str(e)}")

    def get_recent_for_user(self, user_id: str, limit: int) -> List[Booking]:
        try:
            return (
                self._apply_eager_loading(self.db.query(Booking))
                .filter(Booking.user_id == user_id)
                .order_by(Booking.created_at.desc(), Booking.id.desc())
                .limit(limit)
                .all()
            )
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting recent bookings: {str(e)}")
            raise RepositoryException(f"Failed to get recent bookings: {str(e)}")

    def get_recent(
        self, limit: int, *, scope_service_ids: Optional[Collection[str]] = None
    ) -> List[Booking]:
        """Most recently created bookings, optionally restricted to some services."""
        try:
            query = self._apply_eager_loading(self.db.query(Booking))
            query = self._scoped(query, None, scope_service_ids)
            return query.order_by(Booking.created_at.desc(), Booking.id.desc()).limit(limit).all()
        except SQLAlchemyError as e:
            self.logger.error(f"Error getting recent bookings: {str(e)}")
            raise RepositoryException(f"Failed to get recent bookings: {str(e)}")

    # Aggregates

    def _scoped(
        self,
        query: Query,
        user_id: Optional[str],
        scope_service_ids: Optional[Collection[str]],
    ) -> Query:
        if user_id:
            query = query.filter(Booking.user_id == user_id)
        if scope_service_ids is not None:
            query = query.filter(Booking.service_id.in_(list(scope_service_ids)))
        return query

    def count_by_status(
        self,
        *,
        user_id: Optional[str] = None,
        scope_service_ids: Optional[Collection[str]] = None,
    ) -> Dict[str, int]:
        try:
            query = self.db.query(Booking.status, func.count(Booking.id))
            query = self._scoped(query, user_id, scope_service_ids)
            return {status: int(count) for status, count in query.group_by(Booking.status).all()}
        except SQLAlchemyError as e:
            self.logger.error(f"Error counting bookings by status: {str(e)}")
            raise RepositoryException(f"Failed to count bookings: {str(e)}")

    def total_revenue(
        self,
        *,
        user_id: Optional[str] = None,
        scope_service_ids: Optional[Collection[str]] = None,
    ) -> Decimal:
        """Sum of stored total_price over confirmed and completed bookings."""
        try:
            query = self.db.query(func.coalesce(func.sum(Booking.total_price), 0)).filter(
                Booking.status.in_(REVENUE_BOOKING_STATUSES)
            )
            query = self._scoped(query, user_id, scope_service_ids)
            return Decimal(str(query.scalar() or 0))
        except SQLAlchemyError as e:
            self.logger.error(f"Error summing revenue: {str(e)}")
            raise RepositoryException(f"Failed to sum revenue: {str(e)}")

    def get_created_between(
        self,
        since: Optional[datetime] = None,
        until: Optional[datetime] = None,
        *,
        scope_service_ids: Optional[Collection[str]] = None,
    ) -> List[Tuple[datetime, str, Any]]:
        """(created_at, status, total_price) rows for bookings created in [since, until]."""
        try:
            query = self.db.query(Booking.created_at, Booking.status, Booking.total_price)
            if since is not None:
                query = query.filter(Booking.created_at >= ensure_utc(since))
            if until is not None:
                query = query.filter(Booking.created_at <= ensure_utc(until))
            query = self._scoped(query, None, scope_service_ids)
            return [(ensure_utc(created), status, price) for created, status, price in query.all()]
        except SQLAlchemyError as e:
            self.logger.error(f"Error loading bookings since {since}: {str(e)}")
            raise RepositoryException(f"Failed to load bookings: {str(e)}")
