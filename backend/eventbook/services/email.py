# backend/eventbook/services/email.py
"""
Email Service for the EventBook platform.

Sends e-mail through the Resend API. When e-mail is disabled in settings,
messages are logged and dropped.
"""

import logging
import re
from typing import Any, Dict, Optional

import resend
from sqlalchemy.orm import Session

from ..core.config import settings
from ..core.exceptions import ServiceException
from .base import BaseService

logger = logging.getLogger(__name__)


class EmailService(BaseService):
    """Service for sending emails using Resend API."""

    def __init__(self, db: Session):
        super().__init__(db)
        self.enabled = settings.email_enabled
        self.from_email = settings.from_email

        if self.enabled:
            if not settings.resend_api_key:
                raise ServiceException("Resend API key not configured")
            resend.api_key = settings.resend_api_key

    @staticmethod
    def _html_to_text(html_content: str) -> str:
        """Plain-text alternative for the HTML body."""
        text = re.sub(r"<[^>]+>", "", html_content)
        return re.sub(r"\s+", " ", text).strip()

    @BaseService.measure_operation("send_email")
    def send_email(
        self,
        to_email: str,
        subject: str,
        html_content: str,
        text_content: Optional[str] = None,
    ) -> Optional[Dict[str, Any]]:
        """
        Send an email using Resend.

        Returns:
            The Resend API response, or None when sending is disabled

        Raises:
            ServiceException: If the provider rejects or fails the request
        """
        if not self.enabled:
            self.logger.info(f"Email disabled; not sending '{subject}' to {to_email}")
            return None

        email_data = {
            "from": self.from_email,
            "to": to_email,
            "subject": subject,
            "html": html_content,
            "text": text_content or self._html_to_text(html_content),
        }
        try:
            response = resend.Emails.send(email_data)
        except Exception as e:
            self.logger.error(f"Failed to send email to {to_email}: {type(e).__name__}: {e}")
            raise ServiceException(f"Email sending failed: {e}") from e

        self.log_operation("email_sent", to_email=to_email, subject=subject)
        return response
