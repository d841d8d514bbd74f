# backend/eventbook/core/permissions.py
"""
Capability checks for bookings and services.

can_operate_on() is the single place that decides whether an actor may
perform an action on a resource. It does no I/O: callers load the records
first and describe them with Resource.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Optional, Union

from .enums import Action, ResourceKind, RoleName

if TYPE_CHECKING:
    from ..models.booking import Booking
    from ..models.service import Service
    from ..models.user import User


@dataclass(frozen=True)
class Actor:
    """The authenticated principal performing an operation."""

    id: str
    role: RoleName

    @classmethod
    def from_user(cls, user: "User") -> "Actor":
        return cls(id=user.id, role=RoleName(user.role))

    @property
    def is_admin(self) -> bool:
        return self.role == RoleName.ADMIN

    @property
    def is_provider(self) -> bool:
        return self.role == RoleName.PROVIDER


@dataclass(frozen=True)
class Resource:
    """
    Ownership facts about the record an action targets.

    owner_id is the booking's user or the service's provider.
    service_owner_id is only meaningful for bookings: the provider that
    owns the booked service.
    """

    kind: ResourceKind
    owner_id: Optional[str] = None
    service_owner_id: Optional[str] = None

    @classmethod
    def for_booking(cls, booking: "Booking", service_owner_id: Optional[str] = None) -> "Resource":
        if service_owner_id is None and booking.service is not None:
            service_owner_id = booking.service.provider_id
        return cls(
            kind=ResourceKind.BOOKING,
            owner_id=booking.user_id,
            service_owner_id=service_owner_id,
        )

    @classmethod
    def for_service(cls, service: Optional["Service"] = None) -> "Resource":
        return cls(kind=ResourceKind.SERVICE, owner_id=service.provider_id if service else None)

    @classmethod
    def platform(cls) -> "Resource":
        return cls(kind=ResourceKind.PLATFORM)


_STAFF_ROLES = frozenset({RoleName.ADMIN, RoleName.PROVIDER})


def can_operate_on(actor: Actor, resource: Resource, action: Union[Action, str]) -> bool:
    """
    Return True when ``actor`` may perform ``action`` on ``resource``.

    Administrators may do anything except cancel someone else's booking
    through the owner-only cancellation path. Providers are limited to the
    services they own and the bookings made against those services. Plain
    users only reach their own bookings.
    """
    action = Action(action)
    is_owner = resource.owner_id is not None and resource.owner_id == actor.id
    owns_service = (
        resource.service_owner_id is not None and resource.service_owner_id == actor.id
    )

    if action == Action.BOOKING_CANCEL_OWN:
        return resource.kind == ResourceKind.BOOKING and is_owner

    if action == Action.BOOKING_READ:
        if resource.kind != ResourceKind.BOOKING:
            return False
        return actor.is_admin or is_owner or (actor.is_provider and owns_service)

    if action == Action.BOOKING_UPDATE_STATUS:
        if resource.kind != ResourceKind.BOOKING:
            return False
        return actor.is_admin or (actor.is_provider and owns_service)

    if action in (Action.BOOKING_LIST, Action.BOOKING_STATS, Action.SERVICE_CREATE):
        return actor.role in _STAFF_ROLES

    if action in (Action.SERVICE_UPDATE, Action.SERVICE_DELETE, Action.SERVICE_TOGGLE):
        if resource.kind != ResourceKind.SERVICE:
            return False
        return actor.is_admin or (actor.is_provider and is_owner)

    if action == Action.ADMIN_ACCESS:
        return actor.is_admin

    return False
