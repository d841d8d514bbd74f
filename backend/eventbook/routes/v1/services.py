# backend/eventbook/routes/v1/services.py
"""
Service catalog routes - API v1

Endpoints:
    GET / - Browse active services
    GET /mine - Services owned by the caller (provider, admin)
    GET /{service_id} - Service details with booked ranges
    POST /{service_id}/check-availability - Availability for a date range
    POST / - Create a service (provider, admin)
    PUT /{service_id} - Update a service (owner, admin)
    DELETE /{service_id} - Deactivate a service (owner, admin)
    PATCH /{service_id}/toggle-status - Flip active flag (owner, admin)
"""

import asyncio
import logging
from typing import List, NoReturn, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ...api.dependencies import (
    get_availability_service,
    get_current_user,
    get_service_catalog_service,
)
from ...core.config import settings
from ...core.exceptions import DomainException
from ...models.service import ServiceCategory
from ...models.user import User
from ...schemas.base_responses import PaginatedResponse, SuccessResponse
from ...schemas.booking import AvailabilityResponse, DateRangeRequest
from ...schemas.service import (
    BookedRange,
    ServiceCreate,
    ServiceDetailResponse,
    ServiceResponse,
    ServiceSortField,
    ServiceUpdate,
    SortOrder,
)
from ...services.availability_service import AvailabilityService
from ...services.service_catalog_service import ServiceCatalogService

logger = logging.getLogger(__name__)

router = APIRouter(tags=["services-v1"])


def handle_domain_exception(exc: DomainException) -> NoReturn:
    """Convert domain exceptions to HTTP exceptions."""
    if hasattr(exc, "to_http_exception"):
        raise exc.to_http_exception()
    raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=str(exc))


@router.get("/", response_model=PaginatedResponse[ServiceResponse])
async def list_services(
    page: int = Query(1, ge=1),
    limit: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    category: Optional[ServiceCategory] = Query(None),
    min_price: Optional[float] = Query(None, ge=0),
    max_price: Optional[float] = Query(None, ge=0),
    location: Optional[str] = Query(None, max_length=255),
    provider_id: Optional[str] = Query(None),
    search: Optional[str] = Query(None, max_length=100),
    sort_by: ServiceSortField = Query("created_at"),
    sort_order: SortOrder = Query("desc"),
    catalog_service: ServiceCatalogService = Depends(get_service_catalog_service),
) -> PaginatedResponse[ServiceResponse]:
    try:
        items, total = await asyncio.to_thread(
            catalog_service.list_services,
            page=page,
            limit=limit,
            category=category.value if category else None,
            min_price=min_price,
            max_price=max_price,
            location=location,
            provider_id=provider_id,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
        )
        return PaginatedResponse[ServiceResponse].build(
            [ServiceResponse.model_validate(service) for service in items], total, page, limit
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/mine", response_model=List[ServiceResponse])
async def get_my_services(
    current_user: User = Depends(get_current_user),
    catalog_service: ServiceCatalogService = Depends(get_service_catalog_service),
) -> List[ServiceResponse]:
    try:
        services = await asyncio.to_thread(catalog_service.get_my_services, current_user)
        return [ServiceResponse.model_validate(service) for service in services]
    except DomainException as e:
        handle_domain_exception(e)


@router.get("/{service_id}", response_model=ServiceDetailResponse)
async def get_service(
    service_id: str,
    catalog_service: ServiceCatalogService = Depends(get_service_catalog_service),
) -> ServiceDetailResponse:
    try:
        service, booked = await asyncio.to_thread(catalog_service.get_service, service_id)
        return ServiceDetailResponse(
            service=ServiceResponse.model_validate(service),
            booked_ranges=[BookedRange(start_date=start, end_date=end) for start, end in booked],
        )
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/{service_id}/check-availability", response_model=AvailabilityResponse)
async def check_service_availability(
    service_id: str,
    payload: DateRangeRequest,
    availability_service: AvailabilityService = Depends(get_availability_service),
) -> AvailabilityResponse:
    try:
        result = await asyncio.to_thread(
            availability_service.check_availability,
            service_id,
            payload.start_date,
            payload.end_date,
        )
        return AvailabilityResponse(**result.to_dict())
    except DomainException as e:
        handle_domain_exception(e)


@router.post("/", response_model=ServiceResponse, status_code=status.HTTP_201_CREATED)
async def create_service(
    payload: ServiceCreate,
    current_user: User = Depends(get_current_user),
    catalog_service: ServiceCatalogService = Depends(get_service_catalog_service),
) -> ServiceResponse:
    try:
        service = await asyncio.to_thread(
            catalog_service.create_service, current_user, payload.model_dump()
        )
        return ServiceResponse.model_validate(service)
    except DomainException as e:
        handle_domain_exception(e)


@router.put("/{service_id}", response_model=ServiceResponse)
async def update_service(
    service_id: str,
    payload: ServiceUpdate,
    current_user: User = Depends(get_current_user),
    catalog_service: ServiceCatalogService = Depends(get_service_catalog_service),
) -> ServiceResponse:
    try:
        service = await asyncio.to_thread(
            catalog_service.update_service,
            current_user,
            service_id,
            payload.model_dump(exclude_unset=True),
        )
        return ServiceResponse.model_validate(service)
    except DomainException as e:
        handle_domain_exception(e)


@router.delete("/{service_id}", response_model=SuccessResponse)
async def delete_service(
    service_id: str,
    current_user: User = Depends(get_current_user),
    catalog_service: ServiceCatalogService = Depends(get_service_catalog_service),
) -> SuccessResponse:
    try:
        service = await asyncio.to_thread(catalog_service.delete_service, current_user, service_id)
        return SuccessResponse(message="Service deleted successfully", data={"id": service.id})
    except DomainException as e:
        handle_domain_exception(e)


@router.patch("/{service_id}/toggle-status", response_model=ServiceResponse)
async def toggle_service_status(
    service_id: str,
    current_user: User = Depends(get_current_user),
    catalog_service: ServiceCatalogService = Depends(get_service_catalog_service),
) -> ServiceResponse:
    try:
        service = await asyncio.to_thread(
            catalog_service.toggle_service_status, current_user, service_id
        )
        return ServiceResponse.model_validate(service)
    except DomainException as e:
        handle_domain_exception(e)
