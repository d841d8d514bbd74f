# backend/eventbook/services/admin_service.py
"""
Administration Service for the EventBook platform.

Platform-wide statistics, user and role management, the full service
catalog (inactive services included) and per-provider dashboards.
Every operation requires the administrator role.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.constants import RECENT_BOOKINGS_LIMIT
from ..core.enums import Action, RoleName
from ..core.exceptions import ForbiddenException, NotFoundException, ValidationException
from ..core.permissions import Actor, Resource, can_operate_on
from ..models.booking import BookingStatus
from ..models.service import Service
from ..models.user import User
from ..repositories import RepositoryFactory
from .base import BaseService

logger = logging.getLogger(__name__)


class AdminService(BaseService):
    """Administrator-only reporting and management."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.service_repository = RepositoryFactory.create_service_repository(db)
        self.booking_repository = RepositoryFactory.create_booking_repository(db)

    def _require_admin(self, actor: User) -> None:
        if not can_operate_on(Actor.from_user(actor), Resource.platform(), Action.ADMIN_ACCESS):
            raise ForbiddenException("Admin access required")

    def _page_args(self, page: int, limit: int) -> Tuple[int, int]:
        return max(page, 1), max(1, min(limit, settings.max_page_size))

    @BaseService.measure_operation("get_platform_stats")
    def get_platform_stats(self, actor: User) -> Dict[str, Any]:
        self._require_admin(actor)

        users_by_role = self.user_repository.count_by_role()
        bookings_by_status = self.booking_repository.count_by_status()
        return {
            "total_users": sum(users_by_role.values()),
            "users_by_role": users_by_role,
            "active_services": self.service_repository.count_active(),
            "services_by_category": self.service_repository.count_active_by_category(),
            "total_bookings": sum(bookings_by_status.values()),
            "confirmed_bookings": bookings_by_status.get(BookingStatus.CONFIRMED.value, 0),
            "bookings_by_status": bookings_by_status,
            "total_revenue": self.booking_repository.total_revenue(),
            "recent_users": self.user_repository.get_recent(RECENT_BOOKINGS_LIMIT),
            "recent_bookings": self.booking_repository.get_recent(RECENT_BOOKINGS_LIMIT),
        }

    @BaseService.measure_operation("list_users")
    def list_users(
        self,
        actor: User,
        role: Optional[str] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[User], int]:
        self._require_admin(actor)
        page, limit = self._page_args(page, limit)
        return self.user_repository.search(page=page, limit=limit, role=role, search=search)

    @BaseService.measure_operation("update_user_role")
    def update_user_role(self, actor: User, user_id: str, role: str) -> User:
        """
        Change a user's role.

        Raises:
            ValidationException: role outside the closed set
            NotFoundException: unknown user
        """
        self._require_admin(actor)
        try:
            new_role = RoleName(role)
        except ValueError:
            raise ValidationException(f"Invalid role: {role}", code="INVALID_ROLE")

        user = self.user_repository.get_by_id(user_id, load_relationships=False)
        if user is None:
            raise NotFoundException("User not found", code="USER_NOT_FOUND")

        previous = user.role
        with self.transaction():
            user.role = new_role.value
            self.db.flush()

        self.log_operation(
            "user_role_updated",
            user_id=user.id,
            from_role=previous,
            to_role=new_role.value,
            admin_id=actor.id,
        )
        return user

    @BaseService.measure_operation("list_all_services")
    def list_all_services(
        self,
        actor: User,
        category: Optional[str] = None,
        provider_id: Optional[str] = None,
        is_active: Optional[bool] = None,
        search: Optional[str] = None,
        page: int = 1,
        limit: int = 20,
    ) -> Tuple[List[Service], int]:
        self._require_admin(actor)
        page, limit = self._page_args(page, limit)
        return self.service_repository.list_all(
            page=page,
            limit=limit,
            category=category,
            provider_id=provider_id,
            is_active=is_active,
            search=search,
        )

    @BaseService.measure_operation("get_provider_dashboard")
    def get_provider_dashboard(self, actor: User, provider_id: str) -> Dict[str, Any]:
        """Profile, services, booking totals and recent bookings of one provider."""
        self._require_admin(actor)

        provider = self.user_repository.get_by_id(provider_id, load_relationships=False)
        if provider is None or not provider.is_provider:
            raise NotFoundException("Provider not found", code="PROVIDER_NOT_FOUND")

        services = self.service_repository.get_by_provider(provider.id)
        service_ids = [service.id for service in services]
        by_status = self.booking_repository.count_by_status(scope_service_ids=service_ids)
        return {
            "provider": provider,
            "stats": {
                "total_services": len(services),
                "total_bookings": sum(by_status.values()),
                "total_revenue": self.booking_repository.total_revenue(scope_service_ids=service_ids),
                "confirmed_bookings": by_status.get(BookingStatus.CONFIRMED.value, 0),
            },
            "services": services,
            "recent_bookings": self.booking_repository.get_recent(
                RECENT_BOOKINGS_LIMIT, scope_service_ids=service_ids
            ),
        }
