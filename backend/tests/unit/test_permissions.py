# backend/tests/unit/test_permissions.py
"""Tests for can_operate_on()."""

import pytest

from eventbook.core.enums import Action, ResourceKind, RoleName
from eventbook.core.permissions import Actor, Resource, can_operate_on

ADMIN = Actor(id="admin-1", role=RoleName.ADMIN)
PROVIDER = Actor(id="provider-1", role=RoleName.PROVIDER)
OTHER_PROVIDER = Actor(id="provider-2", role=RoleName.PROVIDER)
USER = Actor(id="user-1", role=RoleName.USER)
OTHER_USER = Actor(id="user-2", role=RoleName.USER)

# Booking made by USER on a service owned by PROVIDER
BOOKING = Resource(kind=ResourceKind.BOOKING, owner_id=USER.id, service_owner_id=PROVIDER.id)
SERVICE = Resource(kind=ResourceKind.SERVICE, owner_id=PROVIDER.id)


class TestBookingActions:
    @pytest.mark.parametrize(
        "actor,expected",
        [(ADMIN, True), (PROVIDER, True), (OTHER_PROVIDER, False), (USER, True), (OTHER_USER, False)],
    )
    def test_read(self, actor, expected):
        assert can_operate_on(actor, BOOKING, Action.BOOKING_READ) is expected

    @pytest.mark.parametrize(
        "actor,expected",
        [(ADMIN, True), (PROVIDER, True), (OTHER_PROVIDER, False), (USER, False), (OTHER_USER, False)],
    )
    def test_update_status(self, actor, expected):
        assert can_operate_on(actor, BOOKING, Action.BOOKING_UPDATE_STATUS) is expected

    @pytest.mark.parametrize(
        "actor,expected",
        [(ADMIN, False), (PROVIDER, False), (USER, True), (OTHER_USER, False)],
    )
    def test_cancel_own_is_owner_only(self, actor, expected):
        assert can_operate_on(actor, BOOKING, Action.BOOKING_CANCEL_OWN) is expected

    @pytest.mark.parametrize("action", [Action.BOOKING_LIST, Action.BOOKING_STATS])
    def test_listing_and_stats_are_staff_only(self, action):
        listing = Resource(kind=ResourceKind.BOOKING)
        assert can_operate_on(ADMIN, listing, action)
        assert can_operate_on(PROVIDER, listing, action)
        assert not can_operate_on(USER, listing, action)

    def test_provider_that_is_also_the_customer(self):
        own_booking = Resource(kind=ResourceKind.BOOKING, owner_id=PROVIDER.id, service_owner_id=OTHER_PROVIDER.id)
        assert can_operate_on(PROVIDER, own_booking, Action.BOOKING_READ)
        assert can_operate_on(PROVIDER, own_booking, Action.BOOKING_CANCEL_OWN)
        assert not can_operate_on(PROVIDER, own_booking, Action.BOOKING_UPDATE_STATUS)


class TestServiceActions:
    @pytest.mark.parametrize("action", [Action.SERVICE_UPDATE, Action.SERVICE_DELETE, Action.SERVICE_TOGGLE])
    def test_owner_and_admin_manage(self, action):
        assert can_operate_on(ADMIN, SERVICE, action)
        assert can_operate_on(PROVIDER, SERVICE, action)
        assert not can_operate_on(OTHER_PROVIDER, SERVICE, action)
        assert not can_operate_on(USER, SERVICE, action)

    def test_create(self):
        assert can_operate_on(PROVIDER, Resource.for_service(), Action.SERVICE_CREATE)
        assert can_operate_on(ADMIN, Resource.for_service(), Action.SERVICE_CREATE)
        assert not can_operate_on(USER, Resource.for_service(), Action.SERVICE_CREATE)

    def test_user_owning_a_service_still_cannot_manage_it(self):
        orphan = Resource(kind=ResourceKind.SERVICE, owner_id=USER.id)
        assert not can_operate_on(USER, orphan, Action.SERVICE_UPDATE)


class TestMisc:
    def test_admin_access(self):
        assert can_operate_on(ADMIN, Resource.platform(), Action.ADMIN_ACCESS)
        assert not can_operate_on(PROVIDER, Resource.platform(), Action.ADMIN_ACCESS)
        assert not can_operate_on(USER, Resource.platform(), Action.ADMIN_ACCESS)

    def test_wrong_resource_kind_is_denied(self):
        assert not can_operate_on(ADMIN, SERVICE, Action.BOOKING_UPDATE_STATUS)
        assert not can_operate_on(ADMIN, BOOKING, Action.SERVICE_UPDATE)

    def test_action_may_be_a_string(self):
        assert can_operate_on(USER, BOOKING, "booking.read")

    def test_unknown_action_raises(self):
        with pytest.raises(ValueError):
            can_operate_on(ADMIN, BOOKING, "booking.teleport")

    def test_actor_from_user(self, test_provider):
        actor = Actor.from_user(test_provider)
        assert actor.id == test_provider.id
        assert actor.is_provider and not actor.is_admin
