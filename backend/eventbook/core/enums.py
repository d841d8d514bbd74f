# backend/eventbook/core/enums.py
"""
Core enums for the EventBook platform.

Role and action names are a closed set: capability checks in
core/permissions.py switch on these values and nothing else.
"""

from enum import Enum


class RoleName(str, Enum):
    """Roles an authenticated principal can hold."""

    ADMIN = "admin"
    PROVIDER = "provider"  # owns and manages services
    USER = "user"


class ResourceKind(str, Enum):
    BOOKING = "booking"
    SERVICE = "service"
    PLATFORM = "platform"


class Action(str, Enum):
    """
    Actions checked by can_operate_on().

    Each operation that mutates or reveals scoped data names exactly one
    of these.
    """

    # Bookings
    BOOKING_READ = "booking.read"
    BOOKING_UPDATE_STATUS = "booking.update_status"
    BOOKING_CANCEL_OWN = "booking.cancel_own"
    BOOKING_LIST = "booking.list"
    BOOKING_STATS = "booking.stats"

    # Services
    SERVICE_CREATE = "service.create"
    SERVICE_UPDATE = "service.update"
    SERVICE_DELETE = "service.delete"
    SERVICE_TOGGLE = "service.toggle"

    # Admin
    ADMIN_ACCESS = "admin.access"
