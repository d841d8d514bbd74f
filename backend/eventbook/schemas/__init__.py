"""
Pydantic schemas for request validation and response serialization.
"""

from .base_responses import PaginatedResponse, SuccessResponse
from .booking import (
    AvailabilityCheckRequest,
    AvailabilityResponse,
    BookingCancel,
    BookingCreate,
    BookingResponse,
    BookingStatsResponse,
    BookingStatusUpdate,
    UserDashboardResponse,
)
from .service import ServiceCreate, ServiceDetailResponse, ServiceResponse, ServiceUpdate
from .user import UserResponse

__all__ = [
    "AvailabilityCheckRequest",
    "AvailabilityResponse",
    "BookingCancel",
    "BookingCreate",
    "BookingResponse",
    "BookingStatsResponse",
    "BookingStatusUpdate",
    "PaginatedResponse",
    "ServiceCreate",
    "ServiceDetailResponse",
    "ServiceResponse",
    "ServiceUpdate",
    "SuccessResponse",
    "UserDashboardResponse",
    "UserResponse",
]
