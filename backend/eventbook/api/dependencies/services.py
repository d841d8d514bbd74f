# backend/eventbook/api/dependencies/services.py
"""
Service layer dependencies for dependency injection.

Each factory builds a service bound to the request's database session.
"""

import logging

from fastapi import Depends
from sqlalchemy.orm import Session

from ...infrastructure.cache.ttl_store import TTLStore, get_ttl_store
from ...services.admin_service import AdminService
from ...services.auth_service import AuthService
from ...services.availability_service import AvailabilityService
from ...services.booking_service import BookingService
from ...services.notification_service import NotificationService
from ...services.service_catalog_service import ServiceCatalogService
from ...services.template_service import TemplateService
from .database import get_db

logger = logging.getLogger(__name__)


def get_otp_store() -> TTLStore:
    return get_ttl_store()


def get_template_service(db: Session = Depends(get_db)) -> TemplateService:
    return TemplateService(db)


def get_notification_service(
    db: Session = Depends(get_db),
    template_service: TemplateService = Depends(get_template_service),
) -> NotificationService:
    """Get notification service instance; e-mail transport is built on first send."""
    return NotificationService(db, template_service=template_service)


def get_availability_service(db: Session = Depends(get_db)) -> AvailabilityService:
    return AvailabilityService(db)


def get_booking_service(
    db: Session = Depends(get_db),
    notification_service: NotificationService = Depends(get_notification_service),
) -> BookingService:
    """
    Get booking service instance.

    Args:
        db: Database session
        notification_service: Best-effort booking e-mails

    Returns:
        BookingService instance
    """
    return BookingService(db, notification_service=notification_service)


def get_service_catalog_service(db: Session = Depends(get_db)) -> ServiceCatalogService:
    return ServiceCatalogService(db)


def get_auth_service(
    db: Session = Depends(get_db),
    otp_store: TTLStore = Depends(get_otp_store),
    template_service: TemplateService = Depends(get_template_service),
    notification_service: NotificationService = Depends(get_notification_service),
) -> AuthService:
    return AuthService(
        db,
        otp_store=otp_store,
        notification_service=notification_service,
        template_service=template_service,
    )


def get_admin_service(db: Session = Depends(get_db)) -> AdminService:
    return AdminService(db)
