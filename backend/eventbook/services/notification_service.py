# backend/eventbook/services/notification_service.py
"""
Notification Service for the EventBook platform.

Booking and account e-mails rendered from Jinja2 templates and sent
through EmailService. Every public method is best-effort: failures are
logged and counted, and the caller's operation is never affected.
"""

import logging
from typing import Optional

from sqlalchemy.orm import Session

from ..core.config import settings
from ..models.booking import Booking
from ..models.user import User
from ..monitoring.prometheus_metrics import prometheus_metrics
from .base import BaseService
from .email import EmailService
from .template_service import TemplateService

logger = logging.getLogger(__name__)

BOOKING_TEMPLATES = {
    "created": "email/booking/confirmation.html",
    "status_changed": "email/booking/status_update.html",
}


class NotificationService(BaseService):
    """
    Sends booking and account notifications.

    Template and e-mail services may be injected; they are built from the
    session otherwise.
    """

    def __init__(
        self,
        db: Session,
        template_service: Optional[TemplateService] = None,
        email_service: Optional[EmailService] = None,
    ) -> None:
        super().__init__(db)
        self.template_service = (
            template_service if template_service is not None else TemplateService(db)
        )
        self._email_service = email_service

    @property
    def email_service(self) -> EmailService:
        # Built lazily: EmailService refuses to start without an API key
        if self._email_service is None:
            self._email_service = EmailService(self.db)
        return self._email_service

    def _subject_for(self, booking: Booking, kind: str) -> str:
        title = booking.service.title if booking.service else "your booking"
        if kind == "created":
            return f"Booking Confirmation - {title}"
        return f"Booking Status Update - {title}"

    @BaseService.measure_operation("notify_booking")
    def notify_booking(self, booking: Booking, kind: str) -> bool:
        """
        Tell the booking's contact about a new booking or a status change.

        Args:
            booking: Booking with service loaded
            kind: "created" or "status_changed"

        Returns:
            bool: True if the message was handed to the provider
        """
        if not settings.email_enabled:
            self.logger.info(f"Email disabled; skipping '{kind}' notification for booking {booking.id}")
            prometheus_metrics.record_notification(kind, "skipped")
            return False

        try:
            template = BOOKING_TEMPLATES[kind]
            html = self.template_service.render_template(
                template,
                booking=booking,
                service=booking.service,
                contact_name=booking.contact_name,
            )
            self.email_service.send_email(
                to_email=booking.contact_email,
                subject=self._subject_for(booking, kind),
                html_content=html,
            )
        except Exception as e:
            self.logger.error(
                f"Failed to send '{kind}' notification for booking {booking.id}: "
                f"{type(e).__name__}: {e}"
            )
            prometheus_metrics.record_notification(kind, "failed")
            return False

        prometheus_metrics.record_notification(kind, "sent")
        self.log_operation("booking_notification_sent", booking_id=booking.id, kind=kind)
        return True

    @BaseService.measure_operation("send_welcome")
    def send_welcome(self, user: User) -> bool:
        """Welcome e-mail after a verified registration."""
        if not settings.email_enabled:
            self.logger.info(f"Email disabled; skipping welcome e-mail for user {user.id}")
            prometheus_metrics.record_notification("welcome", "skipped")
            return False

        try:
            html = self.template_service.render_template("email/auth/welcome.html", user=user)
            self.email_service.send_email(
                to_email=user.email,
                subject="Welcome to Event Booking Platform!",
                html_content=html,
            )
        except Exception as e:
            self.logger.error(f"Failed to send welcome e-mail to user {user.id}: {e}")
            prometheus_metrics.record_notification("welcome", "failed")
            return False

        prometheus_metrics.record_notification("welcome", "sent")
        return True
