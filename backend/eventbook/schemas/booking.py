"""Booking schemas."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import ConfigDict, EmailStr, Field, field_validator

from ..core.constants import MAX_REASON_LENGTH, MAX_SPECIAL_REQUIREMENTS_LENGTH, MIN_GUESTS
from ..models.booking import BookingStatus
from ._strict_base import StrictRequestModel
from .base import Money, StandardizedModel
from .service import ServiceSummary
from .user import UserSummary


class AvailabilityCheckRequest(StrictRequestModel):
    """
    Availability query.

    Dates are optional here so the service can answer with its own
    "Please provide start and end dates" error.
    """

    service_id: str = Field(..., min_length=1)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class DateRangeRequest(StrictRequestModel):
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None


class AvailabilityResponse(StandardizedModel):
    is_available: bool
    total_days: int
    total_price: Money
    conflicting_bookings: int


class ContactPerson(StrictRequestModel):
    name: Optional[str] = Field(None, max_length=100)
    email: Optional[EmailStr] = None
    phone: Optional[str] = Field(None, max_length=30)


class BookingCreate(StrictRequestModel):
    service_id: str = Field(..., min_length=1)
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    guests_count: int = Field(MIN_GUESTS, ge=MIN_GUESTS)
    special_requirements: Optional[str] = Field(None, max_length=MAX_SPECIAL_REQUIREMENTS_LENGTH)
    contact_person: Optional[ContactPerson] = None


class BookingStatusUpdate(StrictRequestModel):
    status: BookingStatus
    cancellation_reason: Optional[str] = Field(None, max_length=MAX_REASON_LENGTH)


class BookingCancel(StrictRequestModel):
    reason: Optional[str] = Field(None, max_length=MAX_REASON_LENGTH)

    @field_validator("reason")
    @classmethod
    def _blank_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None


class BookingResponse(StandardizedModel):
    id: str
    user_id: str
    service_id: str
    start_date: datetime
    end_date: datetime
    total_days: int
    total_price: Money
    guests_count: int
    status: str
    special_requirements: str = ""
    cancellation_reason: str = ""
    contact_name: str
    contact_email: str
    contact_phone: str = ""
    payment_status: str
    created_at: datetime
    updated_at: Optional[datetime] = None
    service: Optional[ServiceSummary] = None
    user: Optional[UserSummary] = None

    model_config = ConfigDict(from_attributes=True)


class MonthlyStat(StandardizedModel):
    year: int
    month: int
    count: int
    revenue: Money


class BookingStatsResponse(StandardizedModel):
    total_bookings: int
    total_revenue: Money
    by_status: Dict[str, int]
    monthly_stats: List[MonthlyStat]


class UserDashboardResponse(StandardizedModel):
    total_bookings: int
    upcoming_bookings: int
    past_bookings: int
    bookings_by_status: Dict[str, int]
    total_spent: Money
    recent_bookings: List[BookingResponse]
