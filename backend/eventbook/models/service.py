# backend/eventbook/models/service.py
"""
Bookable service model for the EventBook platform.

A service is an offering (venue, caterer, photographer, ...) owned by a
provider. Services are never physically deleted: deactivation keeps every
historical booking resolvable.
"""

from datetime import datetime, timezone
from enum import Enum
import logging

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
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


class ServiceCategory(str, Enum):
    VENUE = "venue"
    CATERER = "caterer"
    PHOTOGRAPHER = "photographer"
    VIDEOGRAPHER = "videographer"
    DJ = "dj"
    DECORATOR = "decorator"
    MAKEUP = "makeup"
    TRANSPORT = "transport"


class Service(Base):
    """
    Bookable offering with a per-day price.

    Attributes:
        price_per_day: Non-negative price charged per booked day
        capacity: Optional maximum guest count; NULL means unlimited
        is_active: Only active services accept bookings or appear in listings
        total_bookings: Running counter, incremented atomically on booking creation
    """

    __tablename__ = "services"

    id = Column(String(26), primary_key=True, index=True, default=lambda: str(ulid.ULID()))
    title = Column(String(100), nullable=False)
    description = Column(Text, nullable=False)
    category = Column(String(20), nullable=False, index=True)
    price_per_day = Column(Numeric(10, 2), nullable=False)
    location = Column(String(255), nullable=False)
    capacity = Column(Integer, nullable=True)
    provider_id = Column(String(26), ForeignKey("users.id"), nullable=False, index=True)

    contact_email = Column(String(255), nullable=True)
    contact_phone = Column(String(30), nullable=True)
    contact_address = Column(String(255), nullable=True)

    images = Column(JSON, nullable=False, default=list)
    features = Column(JSON, nullable=False, default=list)
    tags = Column(JSON, nullable=False, default=list)

    is_active = Column(Boolean, nullable=False, default=True, index=True)
    rating = Column(Float, nullable=False, default=0)
    total_bookings = Column(Integer, nullable=False, default=0)

    created_at = Column(DateTime(timezone=True), nullable=False, default=_utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=True, onupdate=_utcnow)

    provider = relationship("User", back_populates="services")
    bookings = relationship("Booking", back_populates="service")

    __table_args__ = (
        CheckConstraint("price_per_day >= 0", name="ck_services_price_non_negative"),
        CheckConstraint("capacity IS NULL OR capacity > 0", name="ck_services_capacity_positive"),
        CheckConstraint("rating >= 0 AND rating <= 5", name="ck_services_rating_range"),
        CheckConstraint(
            "category IN ('venue', 'caterer', 'photographer', 'videographer', "
            "'dj', 'decorator', 'makeup', 'transport')",
            name="ck_services_category",
        ),
    )

    def __repr__(self) -> str:
        return f"<Service {self.title} ({self.category})>"
