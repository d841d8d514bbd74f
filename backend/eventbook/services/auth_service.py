# backend/eventbook/services/auth_service.py
"""
Authentication Service for the EventBook platform.

Registration is a two-step flow:
1. register() keeps the pending registration (with a bcrypt hash of the
   password) and a one-time code in the TTL store, and e-mails the code.
2. verify_email() checks the code and only then writes the user row.

No user row exists for an address until its code has been confirmed.

Verification and login issue an access token plus a refresh token. Refresh
tokens are persisted (hashed) per user; refresh_tokens() rotates one, and
logout() / logout_all() delete them.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta
import json
import logging
import math
import secrets
from typing import Any, Dict, Optional, Tuple

import jwt
from sqlalchemy.orm import Session

from ..auth import (
    create_refresh_token,
    create_token_for_user,
    decode_refresh_token,
    get_password_hash,
    hash_token,
    verify_password,
)
from ..core.config import settings
from ..core.enums import RoleName
from ..core.exceptions import (
    ConflictException,
    ForbiddenException,
    NotFoundException,
    ServiceException,
    UnauthorizedException,
    ValidationException,
)
from ..core.timezone_utils import utc_now
from ..infrastructure.cache.ttl_store import TTLStore, get_ttl_store
from ..models.user import User
from ..repositories import RepositoryFactory
from .base import BaseService
from .email import EmailService
from .notification_service import NotificationService
from .template_service import TemplateService

logger = logging.getLogger(__name__)


def generate_otp(length: int) -> str:
    """Numeric one-time code of ``length`` digits, without a leading zero."""
    first = str(secrets.randbelow(9) + 1)
    rest = "".join(str(secrets.randbelow(10)) for _ in range(length - 1))
    return first + rest


def otp_key(email: str) -> str:
    return f"otp:{email.strip().lower()}"


@dataclass(frozen=True)
class AuthTokens:
    access_token: str
    refresh_token: str


class AuthService(BaseService):
    """Service for handling registration, verification and login."""

    def __init__(
        self,
        db: Session,
        otp_store: Optional[TTLStore] = None,
        notification_service: Optional[NotificationService] = None,
        template_service: Optional[TemplateService] = None,
        email_service: Optional[EmailService] = None,
    ) -> None:
        super().__init__(db)
        self.user_repository = RepositoryFactory.create_user_repository(db)
        self.refresh_token_repository = RepositoryFactory.create_refresh_token_repository(db)
        self.otp_store = otp_store if otp_store is not None else get_ttl_store()
        self.template_service = (
            template_service if template_service is not None else TemplateService(db)
        )
        self._email_service = email_service
        if notification_service is None:
            notification_service = NotificationService(
                db, template_service=self.template_service, email_service=email_service
            )
        self.notification_service = notification_service

    @property
    def email_service(self) -> EmailService:
        if self._email_service is None:
            self._email_service = EmailService(self.db)
        return self._email_service

    # Pending registration records

    def _store_pending(self, email: str, record: Dict[str, Any], ttl_seconds: int) -> None:
        self.otp_store.put(otp_key(email), json.dumps(record), ttl_seconds)

    def _load_pending(self, email: str) -> Optional[Dict[str, Any]]:
        raw = self.otp_store.get(otp_key(email))
        if raw is None:
            return None
        return json.loads(raw)

    def _new_code(self, record: Dict[str, Any]) -> Tuple[Dict[str, Any], str]:
        otp = generate_otp(settings.otp_length)
        expires_at = utc_now() + timedelta(seconds=settings.otp_ttl_seconds)
        record.update({"otp": otp, "attempts": 0, "expires_at": expires_at.isoformat()})
        return record, otp

    def _send_otp(self, email: str, name: str, otp: str) -> None:
        """E-mail the code; the caller cannot continue without it, so failures surface."""
        try:
            html = self.template_service.render_template(
                "email/auth/otp.html",
                name=name,
                otp=otp,
                expires_minutes=settings.otp_ttl_seconds // 60,
            )
            self.email_service.send_email(
                to_email=email,
                subject="Email Verification OTP - EventBook",
                html_content=html,
            )
        except Exception as e:
            self.logger.error(f"Failed to send verification e-mail to {email}: {e}")
            raise ServiceException("Failed to send verification email", code="EMAIL_SEND_FAILED") from e

    def _issue_tokens(self, user: User) -> AuthTokens:
        """Access + refresh token pair; the refresh token is persisted. Caller owns the transaction."""
        self.refresh_token_repository.delete_expired(user.id, utc_now())
        refresh_token, expires_at = create_refresh_token(user.id)
        self.refresh_token_repository.create(
            user_id=user.id, token_hash=hash_token(refresh_token), expires_at=expires_at
        )
        return AuthTokens(access_token=create_token_for_user(user), refresh_token=refresh_token)

    # Registration

    @BaseService.measure_operation("register")
    def register(self, name: str, email: str, password: str, phone: Optional[str] = None) -> str:
        """
        Start a registration and e-mail a verification code.

        Returns:
            The normalized e-mail address the code was sent to

        Raises:
            ConflictException: a verified account already uses the address
            ServiceException: the code could not be e-mailed
        """
        email = email.strip().lower()
        existing = self.user_repository.get_by_email(email)
        if existing is not None:
            if existing.is_email_verified:
                raise ConflictException("User already exists for this email", code="USER_EXISTS")
            # Stale unverified row from an earlier flow; the address is free again
            with self.transaction():
                self.db.delete(existing)

        record, otp = self._new_code(
            {
                "name": name.strip(),
                "email": email,
                "phone": phone or "",
                "hashed_password": get_password_hash(password),
                "role": RoleName.USER.value,
            }
        )
        self._store_pending(email, record, settings.otp_ttl_seconds)
        self._send_otp(email, record["name"], otp)

        self.log_operation("registration_started", email=email)
        return email

    @BaseService.measure_operation("verify_email")
    def verify_email(self, email: str, otp: str) -> Tuple[User, AuthTokens]:
        """
        Confirm a code and create the verified user.

        Returns:
            (user, access and refresh tokens)
        """
        email = email.strip().lower()
        key = otp_key(email)
        record = self._load_pending(email)
        if record is None:
            raise ValidationException("OTP expired or not found", code="OTP_NOT_FOUND")

        remaining = math.ceil(
            (datetime.fromisoformat(record["expires_at"]) - utc_now()).total_seconds()
        )
        if remaining <= 0:
            self.otp_store.delete(key)
            raise ValidationException("OTP expired or not found", code="OTP_NOT_FOUND")

        if record.get("attempts", 0) >= settings.otp_max_attempts:
            self.otp_store.delete(key)
            raise ValidationException("Too many attempts. OTP expired", code="OTP_TOO_MANY_ATTEMPTS")

        if not secrets.compare_digest(str(record["otp"]), str(otp).strip()):
            record["attempts"] = record.get("attempts", 0) + 1
            if record["attempts"] >= settings.otp_max_attempts:
                self.otp_store.delete(key)
                raise ValidationException(
                    "Too many attempts. OTP expired", code="OTP_TOO_MANY_ATTEMPTS"
                )
            self._store_pending(email, record, remaining)
            raise ValidationException("Invalid OTP", code="OTP_INVALID")

        self.otp_store.delete(key)
        if self.user_repository.exists(email=email):
            raise ConflictException("User already exists", code="USER_EXISTS")

        with self.transaction():
            user = self.user_repository.create(
                name=record["name"],
                email=email,
                phone=record.get("phone") or "",
                hashed_password=record["hashed_password"],
                role=record.get("role", RoleName.USER.value),
                is_email_verified=True,
                is_active=True,
            )
            tokens = self._issue_tokens(user)

        self.log_operation("email_verified", user_id=user.id)
        self.notification_service.send_welcome(user)
        return user, tokens

    @BaseService.measure_operation("resend_otp")
    def resend_otp(self, email: str) -> str:
        """Issue a fresh code for a pending registration, resetting attempts and TTL."""
        email = email.strip().lower()
        record = self._load_pending(email)
        if record is None:
            raise ValidationException("Registration session expired", code="REGISTRATION_EXPIRED")

        record, otp = self._new_code(record)
        self._store_pending(email, record, settings.otp_ttl_seconds)
        self._send_otp(email, record.get("name", ""), otp)
        return email

    # Login and profile

    @BaseService.measure_operation("login")
    def login(self, email: str, password: str) -> Tuple[User, AuthTokens]:
        """
        Authenticate with e-mail and password.

        Raises:
            UnauthorizedException: unknown address, wrong password,
                unverified or disabled account
        """
        user = self.user_repository.get_by_email(email)
        if user is None:
            raise UnauthorizedException("Invalid credentials", code="INVALID_CREDENTIALS")
        if not user.is_email_verified:
            raise UnauthorizedException("Please verify your email first", code="EMAIL_NOT_VERIFIED")
        if not verify_password(password, user.hashed_password):
            raise UnauthorizedException("Invalid credentials", code="INVALID_CREDENTIALS")
        if not user.is_active:
            raise UnauthorizedException("Account is disabled", code="ACCOUNT_DISABLED")

        with self.transaction():
            tokens = self._issue_tokens(user)

        self.log_operation("login", user_id=user.id)
        return user, tokens

    @BaseService.measure_operation("refresh_tokens")
    def refresh_tokens(self, refresh_token: str) -> AuthTokens:
        """
        Exchange a refresh token for a new pair; the old token is revoked.

        Raises:
            ForbiddenException: bad signature, expired, or no longer issued
            NotFoundException: the token's user no longer exists
            UnauthorizedException: the account is disabled
        """
        try:
            payload = decode_refresh_token(refresh_token)
        except jwt.PyJWTError as e:
            self.logger.info(f"Rejected refresh token: {type(e).__name__}")
            raise ForbiddenException("Invalid or expired refresh token", code="REFRESH_TOKEN_INVALID")

        user = self.user_repository.get_by_id(str(payload.get("sub")), load_relationships=False)
        if user is None:
            raise NotFoundException("User not found", code="USER_NOT_FOUND")
        if not user.is_active:
            raise UnauthorizedException("Account is disabled", code="ACCOUNT_DISABLED")

        token_hash = hash_token(refresh_token)
        with self.transaction():
            if self.refresh_token_repository.revoke(token_hash, user.id) == 0:
                raise ForbiddenException("Refresh token is not valid", code="REFRESH_TOKEN_REVOKED")
            tokens = self._issue_tokens(user)

        self.log_operation("tokens_refreshed", user_id=user.id)
        return tokens

    @BaseService.measure_operation("logout")
    def logout(self, user: User, refresh_token: Optional[str] = None) -> None:
        """Revoke one refresh token of ``user``; without one this is a no-op."""
        if refresh_token:
            with self.transaction():
                self.refresh_token_repository.revoke(hash_token(refresh_token), user.id)
        self.log_operation("logout", user_id=user.id)

    @BaseService.measure_operation("logout_all")
    def logout_all(self, user: User) -> int:
        """Revoke every refresh token of ``user``; returns how many were removed."""
        with self.transaction():
            revoked = self.refresh_token_repository.revoke_all(user.id)
        self.log_operation("logout_all", user_id=user.id, revoked=revoked)
        return revoked

    @BaseService.measure_operation("update_profile")
    def update_profile(
        self,
        user: User,
        name: Optional[str] = None,
        phone: Optional[str] = None,
        current_password: Optional[str] = None,
        new_password: Optional[str] = None,
    ) -> User:
        """Update name/phone and optionally change the password."""
        with self.transaction():
            if name is not None:
                user.name = name.strip()
            if phone is not None:
                user.phone = phone
            if new_password:
                if not current_password or not verify_password(current_password, user.hashed_password):
                    raise ValidationException(
                        "Current password is incorrect", code="INVALID_CURRENT_PASSWORD"
                    )
                user.hashed_password = get_password_hash(new_password)
            self.db.flush()

        self.log_operation("profile_updated", user_id=user.id)
        return user
