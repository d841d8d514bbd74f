# backend/eventbook/routes/v1/admin.py
"""
Administration routes - API v1

Endpoints:
    GET /stats - Platform statistics
    GET /users - List users
    PUT /users/{user_id}/role - Change a user's role
    GET /services - All services, inactive included
    GET /providers/{provider_id}/dashboard - One provider's overview
"""

import asyncio
import logging
from typing import NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...api.dependencies import get_admin_service, get_current_user
from ...core.enums import RoleName
from ...core.exceptions import DomainException
from ...models.service import ServiceCategory
from ...models.user import User
from ...schemas.admin import PlatformStatsResponse, ProviderDashboardResponse
from ...schemas.base_responses import PaginatedResponse
from ...schemas.service import ServiceResponse
from ...schemas.user import RoleUpdateRequest, UserResponse
from ...services.admin_service import AdminService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["admin-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get("/stats", response_model=PlatformStatsResponse)
async def get_platform_stats(
    current_user: User = Depends(get_current_user),
    admin_service: AdminService = Depends(get_admin_service),
) -> PlatformStatsResponse:
    try:
        stats = await asyncio.to_thread(admin_service.get_platform_stats, current_user)
        return PlatformStatsResponse.model_validate(stats, from_attributes=True)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/users", response_model=PaginatedResponse[UserResponse])
async def list_users(
    role: Optional[RoleName] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    admin_service: AdminService = Depends(get_admin_service),
) -> PaginatedResponse[UserResponse]:
    try:
        items, total = await asyncio.to_thread(
            admin_service.list_users,
            current_user,
            role.value if role else None,
            search,
            page,
            limit,
        )
        return PaginatedResponse[UserResponse].build(
            [UserResponse.model_validate(user) for user in items], total, page, limit
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.put("/users/{user_id}/role", response_model=UserResponse)
async def update_user_role(
    user_id: str,
    payload: RoleUpdateRequest,
    current_user: User = Depends(get_current_user),
    admin_service: AdminService = Depends(get_admin_service),
) -> UserResponse:
    try:
        user = await asyncio.to_thread(
            admin_service.update_user_role, current_user, user_id, payload.role.value
        )
        return UserResponse.model_validate(user)
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/services", response_model=PaginatedResponse[ServiceResponse])
async def list_all_services(
    category: Optional[ServiceCategory] = Query(None),
    provider_id: Optional[str] = Query(None),
    is_active: Optional[bool] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    current_user: User = Depends(get_current_user),
    admin_service: AdminService = Depends(get_admin_service),
) -> PaginatedResponse[ServiceResponse]:
    try:
        items, total = await asyncio.to_thread(
            admin_service.list_all_services,
            current_user,
            category.value if category else None,
            provider_id,
            is_active,
            search,
            page,
            limit,
        )
        return PaginatedResponse[ServiceResponse].build(
            [ServiceResponse.model_validate(service) for service in items], total, page, limit
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/providers/{provider_id}/dashboard", response_model=ProviderDashboardResponse)
async def get_provider_dashboard(
    provider_id: str,
    current_user: User = Depends(get_current_user),
    admin_service: AdminService = Depends(get_admin_service),
) -> ProviderDashboardResponse:
    try:
        dashboard = await asyncio.to_thread(
            admin_service.get_provider_dashboard, current_user, provider_id
        )
        return ProviderDashboardResponse.model_validate(dashboard, from_attributes=True)
    except DomainException as e:
        handle_domain_exception(e)
