# backend/eventbook/services/booking_service.py
"""
Booking Service for the EventBook platform.

Owns the booking lifecycle:
- Creation (validation, capacity, availability, persistence, counter)
- Status transitions by providers and administrators
- Self-service cancellation
- Role-scoped listings, statistics and dashboards

Booking creation runs inside one transaction that starts by locking the
service row; the availability check is repeated under that lock, so two
concurrent requests for the same dates cannot both succeed.
"""

from collections import Counter
from datetime import datetime
from decimal import Decimal
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import (
    MIN_GUESTS,
    MONTHLY_STATS_MONTHS,
    RECENT_BOOKINGS_LIMIT,
    UPCOMING_BOOKINGS_LIMIT,
)
from ..core.enums import Action, ResourceKind
from ..core.exceptions import (
    BookingConflictException,
    ForbiddenException,
    NotFoundException,
    ValidationException,
)
from ..core.permissions import Actor, Resource, can_operate_on
from ..core.timezone_utils import start_of_day, utc_now
from ..models.booking import REVENUE_BOOKING_STATUSES, Booking, BookingStatus
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from ..repositories import RepositoryFactory
from .availability_service import (
    AvailabilityService,
    build_availability_result,
    check_capacity,
    validate_date_range,
)
from .base import BaseService
from .booking_state import validate_transition
from .notification_service import NotificationService

logger = logging.getLogger(__name__)

_BOOKINGS_RESOURCE = Resource(kind=ResourceKind.BOOKING)


class BookingService(BaseService):
    """Service layer for booking operations."""

    def __init__(
        self,
        db: Session,
        notification_service: Optional[NotificationService] = None,
        availability_service: Optional[AvailabilityService] = None,
    ):
        super().__init__(db)
        self.repository = RepositoryFactory.create_booking_repository(db)
        self.service_repository = RepositoryFactory.create_service_repository(db)
        if availability_service is None:
            availability_service = AvailabilityService(
                db,
                booking_repository=self.repository,
                service_repository=self.service_repository,
            )
        self.availability_service = availability_service
        self.notification_service = (
            notification_service if notification_service is not None else NotificationService(db)
        )

    # Helpers

    def _clamp_limit(self, limit: int) -> int:
        return max(1, min(limit, settings.max_page_size))

    def _provider_scope(self, actor: Actor) -> Optional[List[str]]:
        """Service ids a provider owns; None means unrestricted."""
        if actor.is_provider:
            return self.service_repository.get_owned_service_ids(actor.id)
        return None

    def _reload(self, booking_id: str) -> Booking:
        booking = self.repository.get_by_id(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found", code="BOOKING_NOT_FOUND")
        return booking

    # Creation

    @BaseService.measure_operation("create_booking")
    def create_booking(
        self,
        user: User,
        service_id: str,
        start_date: Optional[datetime],
        end_date: Optional[datetime],
        guests_count: int = 1,
        special_requirements: Optional[str] = None,
        contact_person: Optional[Dict[str, Optional[str]]] = None,
    ) -> Booking:
        """
        Create a pending booking for ``user``.

        Args:
            contact_person: Optional name/email/phone; missing keys fall
                back to the user's own details

        Returns:
            The booking with service and user loaded

        Raises:
            ValidationException: bad range, start in the past, too many guests
            NotFoundException: service missing or inactive
            BookingConflictException: the range overlaps an active booking
        """
        start_utc, end_utc = validate_date_range(start_date, end_date)
        if start_utc < utc_now():
            raise ValidationException("Start date cannot be in the past", code="START_IN_PAST")
        if guests_count < MIN_GUESTS:
            raise ValidationException(
                f"At least {MIN_GUESTS} guest is required", code="INVALID_GUEST_COUNT"
            )

        self.log_operation(
            "create_booking",
            user_id=user.id,
            service_id=service_id,
            start_date=start_utc.isoformat(),
            end_date=end_utc.isoformat(),
            guests_count=guests_count,
        )

        contact = contact_person or {}
        with self.transaction():
            service = self.service_repository.get_for_update(service_id)
            if service is None or not service.is_active:
                raise NotFoundException("Service not found or inactive", code="SERVICE_NOT_FOUND")

            check_capacity(service, guests_count)

            conflicts = self.availability_service.find_conflicts(service.id, start_utc, end_utc)
            if conflicts:
                raise BookingConflictException(conflicting_bookings=len(conflicts))

            totals = build_availability_result(service, start_utc, end_utc, conflicts)
            booking = self.repository.create(
                user_id=user.id,
                service_id=service.id,
                start_date=start_utc,
                end_date=end_utc,
                total_days=totals.total_days,
                total_price=totals.total_price,
                guests_count=guests_count,
                status=BookingStatus.PENDING.value,
                special_requirements=special_requirements or "",
                contact_name=contact.get("name") or user.name,
                contact_email=contact.get("email") or user.email,
                contact_phone=contact.get("phone") or user.phone or "",
            )
            self.service_repository.increment_total_bookings(service.id)
            category = service.category

        booking = self._reload(booking.id)
        prometheus_metrics.record_booking_created(category)
        self.logger.info(f"Booking {booking.id} created for service {service_id}")

        self.notification_service.notify_booking(booking, "created")
        return booking

    # Transitions

    @BaseService.measure_operation("update_booking_status")
    def update_booking_status(
        self,
        actor: User,
        booking_id: str,
        new_status: str,
        cancellation_reason: Optional[str] = None,
    ) -> Booking:
        """
        Move a booking through the state machine as a provider or admin.

        Raises:
            NotFoundException: unknown booking
            ForbiddenException: actor may not manage this booking
            InvalidTransitionException: transition not allowed
        """
        booking = self.repository.get_by_id(booking_id)
        if booking is None:
            raise NotFoundException("Booking not found", code="BOOKING_NOT_FOUND")

        if not can_operate_on(
            Actor.from_user(actor), Resource.for_booking(booking), Action.BOOKING_UPDATE_STATUS
        ):
            raise ForbiddenException("Not authorized to update this booking")

        try:
            target = BookingStatus(new_status)
        except ValueError:
            raise ValidationException(f"Invalid status: {new_status}", code="INVALID_STATUS")

        previous = booking.status
        validate_transition(previous, target)

        with self.transaction():
            booking.status = target.value
            if target == BookingStatus.CANCELLED and cancellation_reason:
                booking.cancellation_reason = cancellation_reason
            self.db.flush()

        prometheus_metrics.record_status_transition(previous, target.value)
        self.log_operation(
            "booking_status_changed",
            booking_id=booking.id,
            from_status=previous,
            to_status=target.value,
            actor_id=actor.id,
        )

        booking = self._reload(booking.id)
        self.notification_service.notify_booking(booking, "status_changed")
        return booking

    @BaseService.measure_operation("cancel_own_booking")
    def cancel_own_booking(
        self, user: User, booking_id: str, cancellation_reason: Optional[str] = None
    ) -> Booking:
        """
        Cancel one of the caller's own bookings.

        Bookings of other users are reported as not found.
        """
        booking = self.repository.get_for_user(booking_id, user.id)
        if booking is None:
            raise NotFoundException("Booking not found", code="BOOKING_NOT_FOUND")

        if not can_operate_on(
            Actor.from_user(user), Resource.for_booking(booking), Action.BOOKING_CANCEL_OWN
        ):
            raise NotFoundException("Booking not found", code="BOOKING_NOT_FOUND")

        if booking.status == BookingStatus.CANCELLED.value:
            raise ValidationException("Booking already cancelled", code="ALREADY_CANCELLED")
        if booking.status == BookingStatus.COMPLETED.value:
            raise ValidationException(
                "Completed bookings cannot be cancelled", code="BOOKING_COMPLETED"
            )

        previous = booking.status
        with self.transaction():
            booking.status = BookingStatus.CANCELLED.value
            booking.cancellation_reason = cancellation_reason or ""
            self.db.flush()

        prometheus_metrics.record_status_transition(previous, BookingStatus.CANCELLED.value)
        self.log_operation("booking_cancelled_by_owner", booking_id=booking.id, user_id=user.id)
        return self._reload(booking.id)

    # Queries

    @BaseService.measure_operation("list_bookings")
    def list_bookings(
        self,
        actor: User,
        *,
        page: int = 1,
        limit: int = 10,
        status: Optional[str] = None,
        start_date: Optional[datetime] = None,
        end_date: Optional[datetime] = None,
        service_id: Optional[str] = None,
        user_id: Optional[str] = None,
    ) -> Tuple[List[Booking], int]:
        """
        Filtered listing for administrators and providers.

        Providers only ever see bookings of services they own; a service_id
        filter is applied on top of that restriction.

        Returns:
            (bookings on the page, total matching)
        """
        principal = Actor.from_user(actor)
        if not can_operate_on(principal, _BOOKINGS_RESOURCE, Action.BOOKING_LIST):
            raise ForbiddenException("Not authorized to list bookings")

        return self.repository.list_bookings(
            page=max(page, 1),
            limit=self._clamp_limit(limit),
            scope_service_ids=self._provider_scope(principal),
            status=status,
            start_from=start_date,
            end_until=end_date,
            service_id=service_id,
            user_id=user_id,
        )

    @BaseService.measure_operation("get_user_bookings")
    def get_user_bookings(
        self,
        user: User,
        status: Optional[str] = None,
        page: int = 1,
        limit: int = 10,
    ) -> Tuple[List[Booking], int]:
        """The caller's own bookings, newest first."""
        return self.repository.list_bookings(
            page=max(page, 1),
            limit=self._clamp_limit(limit),
            status=status,
            user_id=user.id,
        )

    @BaseService.measure_operation("get_booking_for_user")
    def get_booking_for_user(self, user: User, booking_id: str) -> Booking:
        """A single booking if the caller may read it; NotFoundException otherwise."""
        booking = self.repository.get_by_id(booking_id)
        if booking is None or not can_operate_on(
            Actor.from_user(user), Resource.for_booking(booking), Action.BOOKING_READ
        ):
            raise NotFoundException("Booking not found", code="BOOKING_NOT_FOUND")
        return booking

    @BaseService.measure_operation("get_booking_stats")
    def get_booking_stats(
        self,
        actor: User,
        created_from: Optional[datetime] = None,
        created_to: Optional[datetime] = None,
    ) -> Dict[str, Any]:
        """
        Totals, per-status counts, revenue and a monthly series.

        Revenue counts confirmed and completed bookings. The monthly series
        holds the most recent months that have bookings, oldest first.
        """
        principal = Actor.from_user(actor)
        if not can_operate_on(principal, _BOOKINGS_RESOURCE, Action.BOOKING_STATS):
            raise ForbiddenException("Not authorized to view booking statistics")

        rows = self.repository.get_created_between(
            created_from,
            created_to,
            scope_service_ids=self._provider_scope(principal),
        )

        by_status: Counter = Counter()
        total_revenue = Decimal("0")
        monthly: Dict[Tuple[int, int], Dict[str, Any]] = {}
        for created_at, status, price in rows:
            by_status[status] += 1
            bucket = monthly.setdefault(
                (created_at.year, created_at.month),
                {"year": created_at.year, "month": created_at.month, "count": 0, "revenue": Decimal("0")},
            )
            bucket["count"] += 1
            if status in REVENUE_BOOKING_STATUSES:
                amount = Decimal(str(price or 0))
                total_revenue += amount
                bucket["revenue"] += amount

        monthly_stats = [monthly[key] for key in sorted(monthly)][-MONTHLY_STATS_MONTHS:]
        return {
            "total_bookings": len(rows),
            "total_revenue": total_revenue,
            "by_status": dict(by_status),
            "monthly_stats": monthly_stats,
        }

    @BaseService.measure_operation("get_upcoming_bookings")
    def get_upcoming_bookings(self, actor: User, limit: int = UPCOMING_BOOKINGS_LIMIT) -> List[Booking]:
        """Confirmed bookings from the start of today, soonest first, scoped by role."""
        principal = Actor.from_user(actor)
        user_id = None
        scope = None
        if principal.is_provider:
            scope = self._provider_scope(principal)
        elif not principal.is_admin:
            user_id = principal.id
        return self.repository.get_upcoming(
            start_of_day(utc_now()),
            limit=self._clamp_limit(limit),
            user_id=user_id,
            scope_service_ids=scope,
        )

    @BaseService.measure_operation("get_user_dashboard")
    def get_user_dashboard(self, user: User) -> Dict[str, Any]:
        """Summary of the caller's own bookings."""
        counts = self.repository.count_by_status(user_id=user.id)
        now = utc_now()
        return {
            "total_bookings": sum(counts.values()),
            "upcoming_bookings": self.repository.count_upcoming(now, user_id=user.id),
            "past_bookings": counts.get(BookingStatus.COMPLETED.value, 0),
            "bookings_by_status": counts,
            "total_spent": self.repository.total_revenue(user_id=user.id),
            "recent_bookings": self.repository.get_recent_for_user(user.id, RECENT_BOOKINGS_LIMIT),
        }
