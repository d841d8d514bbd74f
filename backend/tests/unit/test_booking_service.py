# backend/tests/unit/test_booking_service.py
"""
Tests for BookingService.

Runs against a real SQLite session; notifications are replaced with
mocks unless a test is about notification behaviour.
"""

from datetime import timedelta
from decimal import Decimal
from unittest.mock import Mock

import pytest

from eventbook.core.config import settings
from eventbook.core.enums import RoleName
from eventbook.core.exceptions import (
    BookingConflictException,
    CapacityExceededException,
    ForbiddenException,
    InvalidTransitionException,
    NotFoundException,
    ValidationException,
)
from eventbook.core.timezone_utils import ensure_utc, utc_now
from eventbook.models.booking import Booking, BookingStatus
from eventbook.models.service import Service
from eventbook.services.booking_service import BookingService
from eventbook.services.notification_service import NotificationService
from eventbook.services.template_service import TemplateService


@pytest.fixture
def notifier() -> Mock:
    mock = Mock(spec=NotificationService)
    mock.notify_booking.return_value = True
    return mock


@pytest.fixture
def booking_service(db, notifier) -> BookingService:
    return BookingService(db, notification_service=notifier)


def _total_bookings(db, service: Service) -> int:
    return db.query(Service.total_bookings).filter(Service.id == service.id).scalar()


class TestCreateBooking:
    def test_creates_pending_booking_with_stored_totals(
        self, db, booking_service, notifier, test_user, test_service, day
    ):
        booking = booking_service.create_booking(
            test_user, test_service.id, day(10), day(12), guests_count=40
        )

        assert booking.status == BookingStatus.PENDING.value
        assert booking.total_days == 3
        assert Decimal(str(booking.total_price)) == Decimal("1500.00")
        assert booking.guests_count == 40
        assert booking.user_id == test_user.id
        assert booking.service.id == test_service.id
        assert booking.user.id == test_user.id
        notifier.notify_booking.assert_called_once_with(booking, "created")

    def test_contact_defaults_to_the_user(self, booking_service, test_user, test_service, day):
        booking = booking_service.create_booking(test_user, test_service.id, day(5), day(6))
        assert booking.contact_name == test_user.name
        assert booking.contact_email == test_user.email
        assert booking.contact_phone == test_user.phone
        assert booking.special_requirements == ""

    def test_contact_person_overrides(self, booking_service, test_user, test_service, day):
        booking = booking_service.create_booking(
            test_user,
            test_service.id,
            day(5),
            day(6),
            special_requirements="Vegetarian menu",
            contact_person={"name": "Event Planner", "email": "planner@example.com", "phone": None},
        )
        assert booking.contact_name == "Event Planner"
        assert booking.contact_email == "planner@example.com"
        assert booking.contact_phone == test_user.phone
        assert booking.special_requirements == "Vegetarian menu"

    def test_increments_service_counter(self, db, booking_service, test_user, test_service, day):
        booking_service.create_booking(test_user, test_service.id, day(5), day(6))
        booking_service.create_booking(test_user, test_service.id, day(8), day(9))
        assert _total_bookings(db, test_service) == 2

    def test_price_is_not_recomputed_after_price_change(
        self, db, booking_service, test_user, test_service, day
    ):
        booking = booking_service.create_booking(test_user, test_service.id, day(5), day(6))
        test_service.price_per_day = Decimal("999.00")
        db.commit()

        db.expire_all()
        stored = db.get(Booking, booking.id)
        assert Decimal(str(stored.total_price)) == Decimal("1000.00")
        assert stored.total_days == 2

    def test_missing_dates(self, booking_service, test_user, test_service):
        with pytest.raises(ValidationException) as exc_info:
            booking_service.create_booking(test_user, test_service.id, None, None)
        assert exc_info.value.message == "Please provide start and end dates"

    def test_end_before_start(self, booking_service, test_user, test_service, day):
        with pytest.raises(ValidationException) as exc_info:
            booking_service.create_booking(test_user, test_service.id, day(6), day(5))
        assert exc_info.value.code == "INVALID_DATE_RANGE"

    def test_start_in_the_past(self, booking_service, test_user, test_service, day):
        with pytest.raises(ValidationException) as exc_info:
            booking_service.create_booking(
                test_user, test_service.id, utc_now() - timedelta(days=1), day(3)
            )
        assert exc_info.value.message == "Start date cannot be in the past"

    def test_unknown_service(self, booking_service, test_user, day):
        with pytest.raises(NotFoundException):
            booking_service.create_booking(test_user, "01HZZZZZZZZZZZZZZZZZZZZZZZ", day(5), day(6))

    def test_inactive_service(self, db, booking_service, test_user, test_service, day):
        test_service.is_active = False
        db.commit()
        with pytest.raises(NotFoundException) as exc_info:
            booking_service.create_booking(test_user, test_service.id, day(5), day(6))
        assert exc_info.value.message == "Service not found or inactive"

    def test_capacity_exceeded(self, booking_service, test_user, test_service, day):
        with pytest.raises(CapacityExceededException) as exc_info:
            booking_service.create_booking(
                test_user, test_service.id, day(5), day(6), guests_count=101
            )
        assert exc_info.value.message == "Maximum capacity is 100 guests"

    def test_capacity_is_checked_before_availability(
        self, booking_service, booking_factory, test_user, test_user_2, test_service, day
    ):
        booking_factory(test_user_2, test_service, day(5), day(6))
        with pytest.raises(CapacityExceededException):
            booking_service.create_booking(
                test_user, test_service.id, day(5), day(6), guests_count=500
            )

    def test_overlapping_booking_conflicts(
        self, db, booking_service, notifier, test_user, test_user_2, test_service, day
    ):
        booking_service.create_booking(test_user, test_service.id, day(10), day(12))
        notifier.reset_mock()

        with pytest.raises(BookingConflictException) as exc_info:
            booking_service.create_booking(test_user_2, test_service.id, day(12), day(14))

        assert exc_info.value.status_code == 409
        assert exc_info.value.message == "Service not available for selected dates"
        assert exc_info.value.details == {"conflicting_bookings": 1}
        assert db.query(Booking).count() == 1
        assert _total_bookings(db, test_service) == 1
        notifier.notify_booking.assert_not_called()

    def test_adjacent_but_not_touching_range_succeeds(
        self, booking_service, test_user, test_user_2, test_service, day
    ):
        booking_service.create_booking(test_user, test_service.id, day(10), day(12))
        booking = booking_service.create_booking(test_user_2, test_service.id, day(13), day(14))
        assert booking.status == BookingStatus.PENDING.value

    def test_cancelled_booking_frees_the_range(
        self, booking_service, booking_factory, test_user, test_user_2, test_service, day
    ):
        booking_factory(test_user_2, test_service, day(10), day(12), status=BookingStatus.CANCELLED)
        booking = booking_service.create_booking(test_user, test_service.id, day(10), day(12))
        assert booking.status == BookingStatus.PENDING.value

    def test_notification_failure_does_not_fail_the_booking(
        self, db, monkeypatch, test_user, test_service, day
    ):
        monkeypatch.setattr(settings, "email_enabled", True)
        email_service = Mock()
        email_service.send_email.side_effect = RuntimeError("provider down")
        notifier = NotificationService(db, template_service=TemplateService(db), email_service=email_service)
        service = BookingService(db, notification_service=notifier)

        booking = service.create_booking(test_user, test_service.id, day(5), day(6))

        assert booking.id is not None
        email_service.send_email.assert_called_once()
        assert db.query(Booking).count() == 1

    def test_notification_is_sent_to_the_contact(self, db, monkeypatch, test_user, test_service, day):
        monkeypatch.setattr(settings, "email_enabled", True)
        email_service = Mock()
        notifier = NotificationService(db, template_service=TemplateService(db), email_service=email_service)

        BookingService(db, notification_service=notifier).create_booking(
            test_user,
            test_service.id,
            day(5),
            day(6),
            contact_person={"email": "planner@example.com"},
        )

        kwargs = email_service.send_email.call_args.kwargs
        assert kwargs["to_email"] == "planner@example.com"
        assert kwargs["subject"] == f"Booking Confirmation - {test_service.title}"
        assert test_service.title in kwargs["html_content"]


class TestUpdateBookingStatus:
    def test_owning_provider_confirms(
        self, booking_service, notifier, booking_factory, test_user, test_provider, test_service, day
    ):
        booking = booking_factory(test_user, test_service, day(5), day(6))

        updated = booking_service.update_booking_status(test_provider, booking.id, "confirmed")

        assert updated.status == BookingStatus.CONFIRMED.value
        notifier.notify_booking.assert_called_once_with(updated, "status_changed")

    def test_admin_completes_confirmed_booking(
        self, booking_service, booking_factory, test_user, test_admin, test_service, day
    ):
        booking = booking_factory(test_user, test_service, day(5), day(6), status=BookingStatus.CONFIRMED)
        updated = booking_service.update_booking_status(test_admin, booking.id, BookingStatus.COMPLETED)
        assert updated.status == BookingStatus.COMPLETED.value

    def test_cancellation_stores_reason(
        self, booking_service, booking_factory, test_user, test_provider, test_service, day
    ):
        booking = booking_factory(test_user, test_service, day(5), day(6))
        updated = booking_service.update_booking_status(
            test_provider, booking.id, "cancelled", cancellation_reason="Venue closed for repairs"
        )
        assert updated.status == BookingStatus.CANCELLED.value
        assert updated.cancellation_reason == "Venue closed for repairs"

    def test_other_provider_is_forbidden(
        self, booking_service, notifier, booking_factory, test_user, test_provider_2, test_service, day
    ):
        booking = booking_factory(test_user, test_service, day(5), day(6))
        with pytest.raises(ForbiddenException) as exc_info:
            booking_service.update_booking_status(test_provider_2, booking.id, "confirmed")
        assert exc_info.value.message == "Not authorized to update this booking"
        notifier.notify_booking.assert_not_called()

    def test_booking_owner_cannot_change_status(
        self, booking_service, booking_factory, test_user, test_service, day
    ):
        booking = booking_factory(test_user, test_service, day(5), day(6))
        with pytest.raises(ForbiddenException):
            booking_service.update_booking_status(test_user, booking.id, "confirmed")

    def test_invalid_transition(
        self, db, booking_service, booking_factory, test_user, test_provider, test_service, day
    ):
        booking = booking_factory(test_user, test_service, day(5), day(6))
        with pytest.raises(InvalidTransitionException):
            booking_service.update_booking_status(test_provider, booking.id, "completed")

        db.expire_all()
        assert db.get(Booking, booking.id).status == BookingStatus.PENDING.value

    def test_terminal_status_cannot_move(
        self, booking_service, booking_factory, test_user, test_admin, test_service, day
    ):
        booking = booking_factory(test_user, test_service, day(5), day(6), status=BookingStatus.CANCELLED)
        with pytest.raises(InvalidTransitionException):
            booking_service.update_booking_status(test_admin, booking.id, "confirmed")

    def test_unknown_status_value(
        self, booking_service, booking_factory, test_user, test_admin, test_service, day
    ):
        booking = booking_factory(test_user, test_service, day(5), day(6))
        with pytest.raises(ValidationException):
            booking_service.update_booking_status(test_admin, booking.id, "archived")

    def test_unknown_booking(self, booking_service, test_admin):
        with pytest.raises(NotFoundException):
            booking_service.update_booking_status(test_admin, "missing", "confirmed")


class TestCancelOwnBooking:
    def test_owner_cancels_pending_booking(
        self, booking_service, notifier, booking_factory, test_user, test_service, day
    ):
        booking = booking_factory(test_user, test_service, day(5), day(6))

        cancelled = booking_service.cancel_own_booking(test_user, booking.id, "Plans changed")

        assert cancelled.status == BookingStatus.CANCELLED.value
        assert cancelled.cancellation_reason == "Plans changed"
        notifier.notify_booking.assert_not_called()

    def test_owner_cancels_confirmed_booking_without_reason(
        self, booking_service, booking_factory, test_user, test_service, day
    ):
        booking = booking_factory(test_user, test_service, day(5), day(6), status=BookingStatus.CONFIRMED)
        cancelled = booking_service.cancel_own_booking(test_user, booking.id)
        assert cancelled.status == BookingStatus.CANCELLED.value
        assert cancelled.cancellation_reason == ""

    def test_other_users_booking_is_not_found(
        self, booking_service, booking_factory, test_user, test_user_2, test_service, day
    ):
        booking = booking_factory(test_user, test_service, day(5), day(6))
        with pytest.raises(NotFoundException):
            booking_service.cancel_own_booking(test_user_2, booking.id)

    def test_admin_cannot_use_owner_cancellation(
        self, booking_service, booking_factory, test_user, test_admin, test_service, day
    ):
        booking = booking_factory(test_user, test_service, day(5), day(6))
        with pytest.raises(NotFoundException):
            booking_service.cancel_own_booking(test_admin, booking.id)

    def test_already_cancelled(self, booking_service, booking_factory, test_user, test_service, day):
        booking = booking_factory(test_user, test_service, day(5), day(6), status=BookingStatus.CANCELLED)
        with pytest.raises(ValidationException) as exc_info:
            booking_service.cancel_own_booking(test_user, booking.id)
        assert exc_info.value.message == "Booking already cancelled"

    def test_completed_cannot_be_cancelled(
        self, booking_service, booking_factory, test_user, test_service, day
    ):
        booking = booking_factory(test_user, test_service, day(5), day(6), status=BookingStatus.COMPLETED)
        with pytest.raises(ValidationException) as exc_info:
            booking_service.cancel_own_booking(test_user, booking.id)
        assert exc_info.value.message == "Completed bookings cannot be cancelled"


class TestListBookings:
    @pytest.fixture
    def bookings(self, booking_factory, test_user, test_user_2, test_service, other_service, day):
        return [
            booking_factory(test_user, test_service, day(5), day(6)),
            booking_factory(test_user_2, test_service, day(8), day(9), status=BookingStatus.CONFIRMED),
            booking_factory(test_user, other_service, day(5), day(6)),
        ]

    def test_plain_user_is_forbidden(self, booking_service, test_user):
        with pytest.raises(ForbiddenException) as exc_info:
            booking_service.list_bookings(test_user)
        assert exc_info.value.message == "Not authorized to list bookings"

    def test_admin_sees_everything(self, booking_service, bookings, test_admin):
        items, total = booking_service.list_bookings(test_admin)
        assert total == 3
        assert {b.id for b in items} == {b.id for b in bookings}

    def test_provider_sees_only_own_services(self, booking_service, bookings, test_provider, test_service):
        items, total = booking_service.list_bookings(test_provider)
        assert total == 2
        assert all(b.service_id == test_service.id for b in items)

    def test_provider_service_filter_cannot_widen_scope(
        self, booking_service, bookings, test_provider, other_service
    ):
        items, total = booking_service.list_bookings(test_provider, service_id=other_service.id)
        assert total == 0
        assert items == []

    def test_provider_without_services_sees_nothing(self, booking_service, bookings, user_factory):
        newcomer = user_factory("New Provider", "new.provider@example.com", RoleName.PROVIDER)
        assert booking_service.list_bookings(newcomer) == ([], 0)

    def test_filters(self, booking_service, bookings, test_admin, test_user, day):
        _, total = booking_service.list_bookings(test_admin, status="confirmed")
        assert total == 1

        _, total = booking_service.list_bookings(test_admin, user_id=test_user.id)
        assert total == 2

        _, total = booking_service.list_bookings(test_admin, start_date=day(7))
        assert total == 1

        _, total = booking_service.list_bookings(test_admin, end_date=day(6))
        assert total == 2

    def test_pagination_newest_first(self, booking_service, bookings, test_admin):
        page_one, total = booking_service.list_bookings(test_admin, page=1, limit=2)
        page_two, _ = booking_service.list_bookings(test_admin, page=2, limit=2)
        assert total == 3
        assert len(page_one) == 2 and len(page_two) == 1
        assert page_one[0].id == bookings[-1].id

    def test_user_bookings_are_their_own(self, booking_service, bookings, test_user):
        items, total = booking_service.get_user_bookings(test_user)
        assert total == 2
        assert all(b.user_id == test_user.id for b in items)

        _, confirmed_total = booking_service.get_user_bookings(test_user, status="confirmed")
        assert confirmed_total == 0


class TestGetBookingForUser:
    def test_visibility(
        self,
        booking_service,
        booking_factory,
        test_user,
        test_user_2,
        test_provider,
        test_provider_2,
        test_admin,
        test_service,
        day,
    ):
        booking = booking_factory(test_user, test_service, day(5), day(6))

        for allowed in (test_user, test_provider, test_admin):
            assert booking_service.get_booking_for_user(allowed, booking.id).id == booking.id

        for denied in (test_user_2, test_provider_2):
            with pytest.raises(NotFoundException):
                booking_service.get_booking_for_user(denied, booking.id)


class TestStatsAndDashboards:
    def test_booking_stats_for_admin(
        self, booking_service, booking_factory, test_user, test_service, other_service, test_admin, day
    ):
        booking_factory(test_user, test_service, day(1), day(2))  # 1000, pending
        booking_factory(test_user, test_service, day(3), day(4), status=BookingStatus.CONFIRMED)  # 1000
        booking_factory(test_user, test_service, day(5), day(6), status=BookingStatus.COMPLETED)  # 1000
        booking_factory(test_user, other_service, day(7), day(8), status=BookingStatus.CANCELLED)  # 600

        stats = booking_service.get_booking_stats(test_admin)

        assert stats["total_bookings"] == 4
        assert stats["total_revenue"] == Decimal("2000.00")
        assert stats["by_status"] == {"pending": 1, "confirmed": 1, "completed": 1, "cancelled": 1}
        assert len(stats["monthly_stats"]) == 1
        month = stats["monthly_stats"][0]
        assert month["count"] == 4
        assert month["revenue"] == Decimal("2000.00")

    def test_booking_stats_scoped_for_provider(
        self, booking_service, booking_factory, test_user, test_service, other_service, test_provider_2, day
    ):
        booking_factory(test_user, test_service, day(1), day(2), status=BookingStatus.CONFIRMED)
        booking_factory(test_user, other_service, day(7), day(8), status=BookingStatus.CONFIRMED)

        stats = booking_service.get_booking_stats(test_provider_2)

        assert stats["total_bookings"] == 1
        assert stats["total_revenue"] == Decimal("600.00")

    def test_booking_stats_monthly_series_is_ascending(
        self, booking_service, booking_factory, test_user, test_service, test_admin, day
    ):
        now = utc_now()
        booking_factory(test_user, test_service, day(1), day(2), created_at=now - timedelta(days=70))
        booking_factory(test_user, test_service, day(3), day(4), created_at=now)

        months = booking_service.get_booking_stats(test_admin)["monthly_stats"]
        keys = [(m["year"], m["month"]) for m in months]
        assert keys == sorted(keys)
        assert len(keys) == 2

    def test_booking_stats_created_window(
        self, booking_service, booking_factory, test_user, test_service, test_admin, day
    ):
        now = utc_now()
        booking_factory(test_user, test_service, day(1), day(2), created_at=now - timedelta(days=40))
        booking_factory(test_user, test_service, day(3), day(4), created_at=now)

        stats = booking_service.get_booking_stats(test_admin, created_from=now - timedelta(days=7))
        assert stats["total_bookings"] == 1

    def test_booking_stats_forbidden_for_users(self, booking_service, test_user):
        with pytest.raises(ForbiddenException):
            booking_service.get_booking_stats(test_user)

    def test_upcoming_bookings(
        self,
        booking_service,
        booking_factory,
        test_user,
        test_user_2,
        test_service,
        other_service,
        test_provider,
        test_admin,
        day,
    ):
        later = booking_factory(test_user, test_service, day(9), day(10), status=BookingStatus.CONFIRMED)
        sooner = booking_factory(test_user, other_service, day(3), day(4), status=BookingStatus.CONFIRMED)
        booking_factory(test_user_2, test_service, day(5), day(6), status=BookingStatus.CONFIRMED)
        booking_factory(test_user, test_service, day(1), day(2))  # pending, ignored
        booking_factory(
            test_user, test_service, day(-10), day(-9), status=BookingStatus.CONFIRMED
        )  # past, ignored

        as_user = booking_service.get_upcoming_bookings(test_user)
        assert [b.id for b in as_user] == [sooner.id, later.id]

        as_provider = booking_service.get_upcoming_bookings(test_provider)
        assert all(b.service_id == test_service.id for b in as_provider)
        assert len(as_provider) == 2

        assert len(booking_service.get_upcoming_bookings(test_admin)) == 3
        assert len(booking_service.get_upcoming_bookings(test_admin, limit=1)) == 1

    def test_user_dashboard(
        self, booking_service, booking_factory, test_user, test_user_2, test_service, day
    ):
        booking_factory(test_user, test_service, day(3), day(4), status=BookingStatus.CONFIRMED)
        booking_factory(test_user, test_service, day(-20), day(-19), status=BookingStatus.COMPLETED)
        booking_factory(test_user, test_service, day(6), day(7))
        booking_factory(test_user_2, test_service, day(9), day(10), status=BookingStatus.CONFIRMED)

        dashboard = booking_service.get_user_dashboard(test_user)

        assert dashboard["total_bookings"] == 3
        assert dashboard["upcoming_bookings"] == 1
        assert dashboard["past_bookings"] == 1
        assert dashboard["bookings_by_status"] == {"confirmed": 1, "completed": 1, "pending": 1}
        assert dashboard["total_spent"] == Decimal("2000.00")
        assert len(dashboard["recent_bookings"]) == 3
        assert all(ensure_utc(b.created_at) <= utc_now() for b in dashboard["recent_bookings"])
