# backend/eventbook/services/availability_service.py
"""
Availability Service for the EventBook platform.

Decides whether a service can be booked for a date range:
- Inclusive day count and price for the range
- Closed-interval overlap against pending/confirmed bookings
- Guest capacity

Bookings are whole-day reservations. Two ranges that share an endpoint
conflict: a booking ending on a day blocks another starting that day.
"""

from dataclasses import asdict, dataclass
from datetime import datetime
from decimal import Decimal
import logging
import math
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.constants import SECONDS_PER_DAY
from ..core.exceptions import CapacityExceededException, NotFoundException, ValidationException
from ..core.timezone_utils import ensure_utc
from ..repositories import RepositoryFactory
from .base import BaseService

if TYPE_CHECKING:
    from ..models.booking import Booking
    from ..models.service import Service
    from ..repositories.booking_repository import BookingRepository
    from ..repositories.service_repository import ServiceRepository

logger = logging.getLogger(__name__)


def ranges_overlap(
    start_a: datetime, end_a: datetime, start_b: datetime, end_b: datetime
) -> bool:
    """Closed-interval intersection: [a] and [b] overlap iff a.start <= b.end and a.end >= b.start."""
    return ensure_utc(start_a) <= ensure_utc(end_b) and ensure_utc(end_a) >= ensure_utc(start_b)


def calculate_total_days(start_date: datetime, end_date: datetime) -> int:
    """
    Inclusive day span: ceil((end - start) / 1 day) + 1.

    2025-06-01 -> 2025-06-03 is three days.
    """
    seconds = (ensure_utc(end_date) - ensure_utc(start_date)).total_seconds()
    return math.ceil(seconds / SECONDS_PER_DAY) + 1


def validate_date_range(
    start_date: Optional[datetime], end_date: Optional[datetime]
) -> Tuple[datetime, datetime]:
    """
    Check both dates are present and ordered; return them as aware UTC.

    Raises:
        ValidationException: a date is missing or start is not before end
    """
    if start_date is None or end_date is None:
        raise ValidationException("Please provide start and end dates", code="MISSING_DATES")
    start_utc, end_utc = ensure_utc(start_date), ensure_utc(end_date)
    if start_utc >= end_utc:
        raise ValidationException(
            "End date must be after start date",
            code="INVALID_DATE_RANGE",
            details={"start_date": start_utc.isoformat(), "end_date": end_utc.isoformat()},
        )
    return start_utc, end_utc


def check_capacity(service: "Service", guests_count: int) -> None:
    """
    Reject guest counts above the service's declared capacity.

    Services without a capacity accept any guest count.
    """
    if service.capacity is not None and guests_count > service.capacity:
        raise CapacityExceededException(capacity=service.capacity, guests_count=guests_count)


@dataclass(frozen=True)
class AvailabilityResult:
    is_available: bool
    total_days: int
    total_price: Decimal
    conflicting_bookings: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def build_availability_result(
    service: Optional["Service"],
    start_date: datetime,
    end_date: datetime,
    conflicts: List["Booking"],
) -> AvailabilityResult:
    """
    Assemble the availability answer for a range.

    total_days is always reported. total_price is zero when the range is
    taken or the service is unknown.
    """
    total_days = calculate_total_days(start_date, end_date)
    is_available = not conflicts
    if service is None or not is_available:
        total_price = Decimal("0")
    else:
        total_price = Decimal(str(service.price_per_day)) * total_days
    return AvailabilityResult(
        is_available=is_available,
        total_days=total_days,
        total_price=total_price,
        conflicting_bookings=len(conflicts),
    )


class AvailabilityService(BaseService):
    """Availability checks over stored bookings. Never writes."""

    def __init__(
        self,
        db: Session,
        booking_repository: Optional["BookingRepository"] = None,
        service_repository: Optional["ServiceRepository"] = None,
    ):
        super().__init__(db)
        if booking_repository is None:
            booking_repository = RepositoryFactory.create_booking_repository(db)
        if service_repository is None:
            service_repository = RepositoryFactory.create_service_repository(db)
        self.booking_repository = booking_repository
        self.service_repository = service_repository

    def find_conflicts(
        self,
        service_id: str,
        start_date: datetime,
        end_date: datetime,
    ) -> List["Booking"]:
        """Pending/confirmed bookings of ``service_id`` that overlap the range."""
        candidates = self.booking_repository.find_overlapping(service_id, start_date, end_date)
        conflicts = [
            booking
            for booking in candidates
            if ranges_overlap(booking.start_date, booking.end_date, start_date, end_date)
        ]
        if conflicts:
            self.logger.info(
                f"Found {len(conflicts)} conflicting bookings for service {service_id} "
                f"between {start_date.isoformat()} and {end_date.isoformat()}"
            )
        return conflicts

    def evaluate(
        self, service: "Service", start_date: datetime, end_date: datetime
    ) -> AvailabilityResult:
        """Availability for an already-loaded service; dates must be validated."""
        conflicts = self.find_conflicts(service.id, start_date, end_date)
        return build_availability_result(service, start_date, end_date, conflicts)

    @BaseService.measure_operation("check_availability")
    def check_availability(
        self,
        service_id: str,
        start_date: Optional[datetime],
        end_date: Optional[datetime],
    ) -> AvailabilityResult:
        """
        Answer whether ``service_id`` is free for the range.

        Raises:
            ValidationException: missing or unordered dates (before any query)
            NotFoundException: unknown service
        """
        start_utc, end_utc = validate_date_range(start_date, end_date)

        service = self.service_repository.get_by_id(service_id, load_relationships=False)
        if service is None:
            raise NotFoundException("Service not found", code="SERVICE_NOT_FOUND")

        return self.evaluate(service, start_utc, end_utc)
