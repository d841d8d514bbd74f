# backend/eventbook/models/booking.py
"""
Booking model for the EventBook platform.

A booking reserves a service for an inclusive range of days. The day count
and price are computed when the booking is created and stored; they are
historical facts and are not recomputed if the service price changes later.
The contact fields are likewise a snapshot taken at booking time.
"""

from datetime import datetime, timezone
from enum import Enum
import logging

from sqlalchemy import (
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
)
from sqlalchemy.orm import relationship
import ulid

from ..database import Base

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class BookingStatus(str, Enum):
    """Booking lifecycle statuses."""

    PENDING = "pending"  # initial
    CONFIRMED = "confirmed"
    CANCELLED = "cancelled"  # terminal
    COMPLETED = "completed"  # terminal


# Statuses that hold the calendar
ACTIVE_BOOKING_STATUSES = (BookingStatus.PENDING.value, BookingStatus.CONFIRMED.value)

# Statuses counted as revenue
REVENUE_BOOKING_STATUSES = (BookingStatus.CONFIRMED.value, BookingStatus.COMPLETED.value)


class PaymentStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    REFUNDED = "refunded"
    FAILED = "failed"


class Booking(Base):
    """Reservation of a service for an inclusive date range."""

    __tablename__ = "bookings"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))

    user_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)
    service_id = Column(String(26), ForeignKey("services.id"), nullable=False)

    start_date = Column(DateTime(timezone=True), nullable=False)
    end_date = Column(DateTime(timezone=True), nullable=False)

    # Derived once at creation
    total_days = Column(Integer, nullable=False)
    total_price = Column(Numeric(12, 2), nullable=False)

    guests_count = Column(Integer, nullable=False, default=1)
    status = Column(String(20), nullable=False, default=BookingStatus.PENDING.value, index=True)
    special_requirements = Column(Text, nullable=False, default="")
    cancellation_reason = Column(Text, nullable=False, default="")

    # Contact snapshot
    contact_name = Column(String(100), nullable=False)
    contact_email = Column(String(255), nullable=False)
    contact_phone = Column(String(30), nullable=False, default="")

    # Tracked only; no gateway integration
    payment_status = Column(String(20), nullable=False, default=PaymentStatus.PENDING.value)
    payment_id = Column(String(255), nullable=True)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow, index=True)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=_utcnow)

    user = relationship("User", back_populates="bookings", foreign_keys=[user_id])
    service = relationship("Service", back_populates="bookings")

    __table_args__ = (
        Index("ix_bookings_service_range", "service_id", "status", "start_date", "end_date"),
        CheckConstraint("start_date < end_date", name="ck_bookings_range_order"),
        CheckConstraint("total_days >= 1", name="ck_bookings_total_days_positive"),
        CheckConstraint("guests_count >= 1", name="ck_bookings_guests_positive"),
        CheckConstraint(
            "status IN ('pending', 'confirmed', 'cancelled', 'completed')",
            name="ck_bookings_status",
        ),
    )

    def __repr__(self) -> str:
        return f"<Booking {self.id} {self.status} {self.start_date}..{self.end_date}>"
