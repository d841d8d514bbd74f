# backend/eventbook/routes/v1/bookings.py
"""
Booking routes - API v1

Versioned booking endpoints under /api/v1/bookings.
All business logic delegated to BookingService.

Endpoints:
    POST /check-availability - Availability and price for a date range
    POST / - Create a booking
    GET / - Filtered listing (admin, provider)
    GET /mine - The caller's bookings
    GET /stats - Booking statistics (admin, provider)
    GET /upcoming - Upcoming confirmed bookings
    GET /{booking_id} - Booking details
    PATCH /{booking_id}/status - Status transition (admin, provider)
    POST /{booking_id}/cancel - Cancel one of the caller's bookings
"""

import asyncio
from datetime import datetime
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...api.dependencies import (
    get_availability_service,
    get_booking_service,
    get_current_user,
)
from ...core.config import settings
from ...core.exceptions import DomainException
from ...models.booking import BookingStatus
from ...models.user import User
from ...schemas.base_responses import PaginatedResponse
from ...schemas.booking import (
    AvailabilityCheckRequest,
    AvailabilityResponse,
    BookingCancel,
    BookingCreate,
    BookingResponse,
    BookingStatsResponse,
    BookingStatusUpdate,
)
from ...services.availability_service import AvailabilityService
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

# V1 router - no prefix here, will be added when mounting in main.py
router = APIRouter(tags=["bookings-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


def _page(items: list, total: int, page: int, limit: int) -> PaginatedResponse[BookingResponse]:
    return PaginatedResponse[BookingResponse].build(
        [BookingResponse.model_validate(booking) for booking in items], total, page, limit
    )


# ============================================================================
# Static routes (no path parameters)
# ============================================================================


@router.post("/check-availability", response_model=AvailabilityResponse)
async def check_availability(
    payload: AvailabilityCheckRequest,
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityResponse:
    """Whether a service is free for a date range, with day count and price."""
    try:
        result = await asyncio.to_thread(
            availability_service.check_availability,
            payload.service_id,
            payload.start_date,
            payload.end_date,
        )
        return AvailabilityResponse(**result.to_dict())
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/", response_model=BookingResponse, status_code=status.HTTP_201_CREATED)
async def create_booking(
    payload: BookingCreate,
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(
            booking_service.create_booking,
            current_user,
            payload.service_id,
            payload.start_date,
            payload.end_date,
            payload.guests_count,
            payload.special_requirements,
            payload.contact_person.model_dump() if payload.contact_person else None,
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/", response_model=PaginatedResponse[BookingResponse])
async def list_bookings(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    start_date: Optional[datetime] = Query(None),
    end_date: Optional[datetime] = Query(None),
    service_id: Optional[str] = Query(None),
    user_id: Optional[str] = Query(None),
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> PaginatedResponse[BookingResponse]:
    """All bookings (admin) or bookings of the caller's services (provider)."""
    try:
        items, total = await asyncio.to_thread(
            booking_service.list_bookings,
            current_user,
            page=page,
            limit=limit,
            status=status_filter.value if status_filter else None,
            start_date=start_date,
            end_date=end_date,
            service_id=service_id,
            user_id=user_id,
        )
        return _page(items, total, page, limit)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/mine", response_model=PaginatedResponse[BookingResponse])
async def get_my_bookings(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    status_filter: Optional[BookingStatus] = Query(None, alias="status"),
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> PaginatedResponse[BookingResponse]:
    try:
        items, total = await asyncio.to_thread(
            booking_service.get_user_bookings,
            current_user,
            status_filter.value if status_filter else None,
            page,
            limit,
        )
        return _page(items, total, page, limit)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/stats", response_model=BookingStatsResponse)
async def get_booking_stats(
    start_date: Optional[datetime] = Query(None, description="Created at or after"),
    end_date: Optional[datetime] = Query(None, description="Created at or before"),
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingStatsResponse:
    try:
        stats = await asyncio.to_thread(
            booking_service.get_booking_stats, current_user, start_date, end_date
        )
        return BookingStatsResponse.model_validate(stats)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/upcoming", response_model=List[BookingResponse])
async def get_upcoming_bookings(
    limit: int = Query(10, ge=1, le=50),
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> List[BookingResponse]:
    """Confirmed bookings from today on, soonest first."""
    try:
        bookings = await asyncio.to_thread(
            booking_service.get_upcoming_bookings, current_user, limit
        )
        return [BookingResponse.model_validate(booking) for booking in bookings]
    except DomainException as e:
        handle_domain_exception(e)


# ============================================================================
# Dynamic routes (with path parameters)
# ============================================================================


@router.get("/{booking_id}", response_model=BookingResponse)
async def get_booking(
    booking_id: str,
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(
            booking_service.get_booking_for_user, current_user, booking_id
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{booking_id}/status", response_model=BookingResponse)
async def update_booking_status(
    booking_id: str,
    payload: BookingStatusUpdate,
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(
            booking_service.update_booking_status,
            current_user,
            booking_id,
            payload.status,
            payload.cancellation_reason,
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{booking_id}/cancel", response_model=BookingResponse)
async def cancel_booking(
    booking_id: str,
    payload: Optional[BookingCancel] = None,
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> BookingResponse:
    try:
        booking = await asyncio.to_thread(
            booking_service.cancel_own_booking,
            current_user,
            booking_id,
            payload.reason if payload else None,
        )
        return BookingResponse.model_validate(booking)
    except DomainException as e:
        handle_domain_exception(e)
