"""
Database models for the EventBook platform.

Importing this package registers every mapper on Base.metadata.
"""

from .booking import Booking, BookingStatus, PaymentStatus
from .refresh_token import RefreshToken
from .service import Service, ServiceCategory
from .user import User

__all__ = [
    "Booking",
    "BookingStatus",
    "PaymentStatus",
    "RefreshToken",
    "Service",
    "ServiceCategory",
    "User",
]
