# backend/eventbook/repositories/__init__.py
"""
Repository layer for the EventBook platform.

Usage:
    from eventbook.repositories import RepositoryFactory

    # In a service:
    booking_repository = RepositoryFactory.create_booking_repository(db)
    overlapping = booking_repository.find_overlapping(service_id, start, end)
"""

from .base_repository import BaseRepository
from .booking_repository import BookingRepository
from .factory import RepositoryFactory
from .refresh_token_repository import RefreshTokenRepository
from .service_repository import ServiceRepository
from .user_repository import UserRepository

__all__ = [
    "BaseRepository",
    "BookingRepository",
    "RefreshTokenRepository",
    "RepositoryFactory",
    "ServiceRepository",
    "UserRepository",
]
