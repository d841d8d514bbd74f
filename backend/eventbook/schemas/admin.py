"""Administration schemas."""

from typing import Dict, List

from pydantic import ConfigDict

from .base import Money, StandardizedModel
from .booking import BookingResponse
from .service import ServiceSummary
from .user import UserResponse


class PlatformStatsResponse(StandardizedModel):
    total_users: int
    users_by_role: Dict[str, int]
    active_services: int
    services_by_category: Dict[str, int]
    total_bookings: int
    confirmed_bookings: int
    bookings_by_status: Dict[str, int]
    total_revenue: Money
    recent_users: List[UserResponse]
    recent_bookings: List[BookingResponse]

    model_config = ConfigDict(from_attributes=True)


class ProviderServiceStats(ServiceSummary):
    total_bookings: int
    rating: float
    is_active: bool


class ProviderStats(StandardizedModel):
    total_services: int
    total_bookings: int
    total_revenue: Money
    confirmed_bookings: int


class ProviderDashboardResponse(StandardizedModel):
    provider: UserResponse
    stats: ProviderStats
    services: List[ProviderServiceStats]
    recent_bookings: List[BookingResponse]

    model_config = ConfigDict(from_attributes=True)
