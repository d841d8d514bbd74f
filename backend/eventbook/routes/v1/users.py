# backend/eventbook/routes/v1/users.py
"""
User routes - API v1

Endpoints:
    GET /dashboard - Summary of the caller's bookings
"""

import asyncio
import logging
from typing import NoReturn

from fastapi import APIRouter, Depends, HTTPException, status

from ...api.dependencies import get_booking_service, get_current_user
from ...core.exceptions import DomainException
from ...models.user import User
from ...schemas.booking import UserDashboardResponse
from ...services.booking_service import BookingService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["users-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get("/dashboard", response_model=UserDashboardResponse)
async def get_dashboard(
    current_user: User = Depends(get_current_user),
    booking_service: BookingService = Depends(get_booking_service),
) -> UserDashboardResponse:
    try:
        dashboard = await asyncio.to_thread(booking_service.get_user_dashboard, current_user)
        return UserDashboardResponse.model_validate(dashboard, from_attributes=True)
    except DomainException as e:
        handle_domain_exception(e)
