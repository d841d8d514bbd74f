# backend/eventbook/services/service_catalog_service.py
"""
Service Catalog Service for the EventBook platform.

Public browsing of active services and provider/admin management of the
catalog. Services are deactivated rather than deleted.
"""

from datetime import datetime, timedelta
import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import BOOKED_RANGE_WINDOW_DAYS
from ..core.enums import Action, ResourceKind
from ..core.exceptions import ForbiddenException, NotFoundException
from ..core.permissions import Actor, Resource, can_operate_on
from ..core.timezone_utils import utc_now
from ..models.service import Service
from ..models.user import User
from ..repositories import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)

# Maintained by the system, never by clients
PROTECTED_FIELDS = frozenset({"id", "provider_id", "total_bookings", "rating", "created_at", "updated_at"})


class ServiceCatalogService(BaseService):
    """Browsing and management of bookable services."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.repository = RepositoryFactory.create_service_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)

    def _load_for_management(self, actor: User, service_id: str, action: Action) -> Service:
        service = self.repository.get_by_id(service_id)
        if service is None:
            raise NotFoundException("Service not found", code="SERVICE_NOT_FOUND")
        if not can_operate_on(Actor.from_user(actor), Resource.for_service(service), action):
            verb = action.value.split(".", 1)[1]
            raise ForbiddenException(f"Not authorized to {verb} this service")
        return service

    # Browsing

    @BaseService.measure_operation("list_services")
    def list_services(
        self,
        *,
        page: int = 1,
        limit: int = 10,
        category: Optional[str] = None,
        min_price: Optional[float] = None,
        max_price: Optional[float] = None,
        location: Optional[str] = None,
        provider_id: Optional[str] = None,
        search: Optional[str] = None,
        sort_by: str = "created_at",
        sort_order: str = "desc",
    ) -> Tuple[List[Service], int]:
        """Page of active services; returns (services, total)."""
        return self.repository.search(
            page=max(page, 1),
            limit=max(1, min(limit, settings.max_page_size)),
            category=category,
            min_price=min_price,
            max_price=max_price,
            location=location,
            provider_id=provider_id,
            search=search,
            sort_by=sort_by,
            sort_order=sort_order,
        )

    @BaseService.measure_operation("get_service")
    def get_service(self, service_id: str) -> Tuple[Service, List[Tuple[datetime, datetime]]]:
        """
        An active service and its booked ranges for the coming weeks.

        Returns:
            (service, [(start, end), ...]) for pending and confirmed bookings
            still running now or starting within the display window
        """
        service = self.repository.get_active(service_id)
        if service is None:
            raise NotFoundException("Service not found", code="SERVICE_NOT_FOUND")

        now = utc_now()
        booked = self.booking_repository.get_booked_ranges(
            service.id, now, now + timedelta(days=BOOKED_RANGE_WINDOW_DAYS)
        )
        return service, booked

    # Management

    @BaseService.measure_operation("create_service")
    def create_service(self, actor: User, data: Dict[str, Any]) -> Service:
        """Create a service owned by ``actor``."""
        if not can_operate_on(
            Actor.from_user(actor), Resource(kind=ResourceKind.SERVICE), Action.SERVICE_CREATE
        ):
            raise ForbiddenException("Only providers or admins can create services")

        values = {key: value for key, value in data.items() if key not in PROTECTED_FIELDS}
        with self.transaction():
            service = self.repository.create(provider_id=actor.id, **values)

        self.log_operation("service_created", service_id=service.id, provider_id=actor.id)
        return service

    @BaseService.measure_operation("update_service")
    def update_service(self, actor: User, service_id: str, data: Dict[str, Any]) -> Service:
        service = self._load_for_management(actor, service_id, Action.SERVICE_UPDATE)
        with self.transaction():
            for key, value in data.items():
                if key in PROTECTED_FIELDS or not hasattr(service, key):
                    continue
                setattr(service, key, value)
            self.db.flush()

        self.log_operation("service_updated", service_id=service.id, fields=sorted(data))
        return service

    @BaseService.measure_operation("delete_service")
    def delete_service(self, actor: User, service_id: str) -> Service:
        """Soft delete: the service is deactivated and its bookings are kept."""
        service = self._load_for_management(actor, service_id, Action.SERVICE_DELETE)
        with self.transaction():
            service.is_active = False
            self.db.flush()

        self.log_operation("service_deactivated", service_id=service.id)
        return service

    @BaseService.measure_operation("toggle_service_status")
    def toggle_service_status(self, actor: User, service_id: str) -> Service:
        service = self._load_for_management(actor, service_id, Action.SERVICE_TOGGLE)
        with self.transaction():
            service.is_active = not service.is_active
            self.db.flush()

        self.log_operation("service_toggled", service_id=service.id, is_active=service.is_active)
        return service

    @BaseService.measure_operation("get_my_services")
    def get_my_services(self, actor: User) -> List[Service]:
        """Every service the caller owns, inactive ones included."""
        if not can_operate_on(
            Actor.from_user(actor), Resource(kind=ResourceKind.SERVICE), Action.SERVICE_CREATE
        ):
            raise ForbiddenException("Only providers or admins can manage services")
        return self.repository.get_by_provider(actor.id)
