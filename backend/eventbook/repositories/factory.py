# backend/eventbook/repositories/factory.py
"""
Repository Factory for the EventBook platform.

Provides centralized creation of repository instances so services never
construct repositories with ad-hoc arguments.
"""

from typing import TYPE_CHECKING

from sqlalchemy.orm import Session

if TYPE_CHECKING:
    from .booking_repository import BookingRepository
    from .refresh_token_repository import RefreshTokenRepository
    from .service_repository import ServiceRepository
    from .user_repository import UserRepository


class RepositoryFactory:
    """Factory class for creating repository instances."""

    @staticmethod
    def create_booking_repository(db: Session) -> "BookingRepository":
        from .booking_repository import BookingRepository

        return BookingRepository(db)

    @staticmethod
    def create_service_repository(db: Session) -> "ServiceRepository":
        from .service_repository import ServiceRepository

        return ServiceRepository(db)

    @staticmethod
    def create_user_repository(db: Session) -> "UserRepository":
        from .user_repository import UserRepository

        return UserRepository(db)

    @staticmethod
    def create_refresh_token_repository(db: Session) -> "RefreshTokenRepository":
        from .refresh_token_repository import RefreshTokenRepository

        return RefreshTokenRepository(db)
