# backend/eventbook/core/exceptions.py
"""
Domain-specific exceptions for the EventBook platform.

These exceptions provide clear, business-focused error messages
that can be caught and handled appropriately at the API layer.
"""

from typing import Any, Dict, Optional

from fastapi import HTTPException, status

HTTP_422_UNPROCESSABLE: int = getattr(status, "HTTP_422_UNPROCESSABLE_CONTENT", 422)


class DomainException(Exception):
    """Base exception for all domain-specific errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR

    def __init__(
        self,
        message: str,
        code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.code = code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message,
                "code": self.code,
                "details": self.details,
            },
        )


class ValidationException(DomainException):
    """Raised when input or business validation fails."""

    status_code = status.HTTP_400_BAD_REQUEST


class NotFoundException(DomainException):
    """Raised when a requested resource is not found or not visible to the caller."""

    status_code = status.HTTP_404_NOT_FOUND


class ConflictException(DomainException):
    """Raised when there's a conflict with existing data."""

    status_code = status.HTTP_409_CONFLICT


class BusinessRuleException(DomainException):
    """Raised when a business rule is violated."""

    status_code = HTTP_422_UNPROCESSABLE


class UnauthorizedException(DomainException):
    """Raised when user is not authenticated."""

    status_code = status.HTTP_401_UNAUTHORIZED

    def to_http_exception(self) -> HTTPException:
        exc = super().to_http_exception()
        exc.headers = {"WWW-Authenticate": "Bearer"}
        return exc


class ForbiddenException(DomainException):
    """Raised when user lacks permission for an action."""

    status_code = status.HTTP_403_FORBIDDEN

    def __init__(self, message: str = "Access denied", code: Optional[str] = None) -> None:
        super().__init__(message, code=code)


class ServiceException(DomainException):
    """Raised when a service operation fails."""

    def to_http_exception(self) -> HTTPException:
        return HTTPException(
            status_code=self.status_code,
            detail={
                "message": self.message or "An error occurred processing your request",
                "code": self.code,
                "details": self.details if self.details else {},
            },
        )


# Specific business exceptions


class BookingConflictException(ConflictException):
    """Raised when a date range conflicts with existing bookings."""

    def __init__(
        self,
        message: Optional[str] = None,
        *,
        conflicting_bookings: int = 0,
    ) -> None:
        super().__init__(
            message or "Service not available for selected dates",
            code="BOOKING_CONFLICT",
            details={"conflicting_bookings": conflicting_bookings},
        )


class InvalidTransitionException(BusinessRuleException):
    """Raised when a booking status change is not allowed by the state machine."""

    def __init__(self, current_status: str, requested_status: str) -> None:
        super().__init__(
            f"Cannot change status from {current_status} to {requested_status}",
            code="INVALID_STATUS_TRANSITION",
            details={
                "current_status": current_status,
                "requested_status": requested_status,
            },
        )
        self.current_status = current_status
        self.requested_status = requested_status


class CapacityExceededException(ValidationException):
    """Raised when the guest count is above a service's declared capacity."""

    def __init__(self, capacity: int, guests_count: int) -> None:
        super().__init__(
            f"Maximum capacity is {capacity} guests",
            code="CAPACITY_EXCEEDED",
            details={"capacity": capacity, "guests_count": guests_count},
        )


class RepositoryException(Exception):
    """
    Exception raised for repository layer errors.

    Used when data access operations fail, such as database connection
    issues, query failures, or constraint violations.
    """
