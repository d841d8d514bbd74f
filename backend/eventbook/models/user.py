# backend/eventbook/models/user.py
"""
User model for the EventBook platform.

A single table holds end users, service providers and administrators,
differentiated by the role column.
"""

from datetime import datetime, timezone
import logging

from sqlalchemy import Boolean, CheckConstraint, Column, DateTime, String
from sqlalchemy.orm import relationship
import ulid

from ..core.enums import RoleName
from ..database import Base

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class User(Base):
    """
    Account used for authentication and as the owner of bookings and services.

    Attributes:
        id: ULID primary key
        name: Display name, also the default booking contact name
        email: Unique, lowercased login address
        phone: Optional phone number (empty string when unknown)
        hashed_password: Bcrypt hash
        role: One of RoleName
        is_email_verified: Set once the e-mailed one-time code is confirmed
        is_active: Inactive accounts cannot authenticate
    """

    __tablename__ = "users"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    name = Column(String(100), nullable=False)
    email = Column(String(255), unique=True, index=True, nullable=False)
    phone = Column(String(30), nullable=False, default="")
    hashed_password = Column(String(255), nullable=False)
    role = Column(String(20), nullable=False, default=RoleName.USER.value, index=True)
    is_email_verified = Column(Boolean, nullable=False, default=False)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=_utcnow)

    bookings = relationship("Booking", back_populates="user", foreign_keys="Booking.user_id")
    services = relationship("Service", back_populates="provider")
    refresh_tokens = relationship("RefreshToken", back_populates="user", cascade="all, delete-orphan")

    __table_args__ = (
        CheckConstraint("role IN ('user', 'provider', 'admin')", name="ck_users_role"),
    )

    @property
    def is_admin(self) -> bool:
        return self.role == RoleName.ADMIN.value

    @property
    def is_provider(self) -> bool:
        return self.role == RoleName.PROVIDER.value

    def __repr__(self) -> str:
        return f"<User {self.email} ({self.role})>"
