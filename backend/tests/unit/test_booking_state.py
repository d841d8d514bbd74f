# backend/tests/unit/test_booking_state.py
"""Tests for the booking status state machine."""

import pytest

from eventbook.core.exceptions import InvalidTransitionException
from eventbook.models.booking import BookingStatus
from eventbook.services.booking_state import (
    ALLOWED_TRANSITIONS,
    TERMINAL_STATUSES,
    can_transition,
    validate_transition,
)

ALLOWED = [
    (BookingStatus.PENDING, BookingStatus.CONFIRMED),
    (BookingStatus.PENDING, BookingStatus.CANCELLED),
    (BookingStatus.CONFIRMED, BookingStatus.COMPLETED),
    (BookingStatus.CONFIRMED, BookingStatus.CANCELLED),
]


@pytest.mark.parametrize("current,target", ALLOWED)
def test_allowed_transitions(current, target):
    assert can_transition(current, target)
    validate_transition(current, target)


@pytest.mark.parametrize(
    "current,target",
    [
        (current, target)
        for current in BookingStatus
        for target in BookingStatus
        if (current, target) not in ALLOWED
    ],
)
def test_everything_else_is_rejected(current, target):
    assert not can_transition(current, target)
    with pytest.raises(InvalidTransitionException):
        validate_transition(current, target)


def test_terminal_statuses():
    assert TERMINAL_STATUSES == {BookingStatus.CANCELLED, BookingStatus.COMPLETED}
    assert set(ALLOWED_TRANSITIONS) == set(BookingStatus)


def test_accepts_plain_strings():
    assert can_transition("pending", "confirmed")
    assert not can_transition("completed", "pending")


def test_error_carries_both_statuses():
    with pytest.raises(InvalidTransitionException) as exc_info:
        validate_transition("cancelled", "confirmed")

    exc = exc_info.value
    assert exc.message == "Cannot change status from cancelled to confirmed"
    assert exc.code == "INVALID_STATUS_TRANSITION"
    assert exc.details == {"current_status": "cancelled", "requested_status": "confirmed"}
    assert exc.status_code == 422


def test_unknown_status_is_a_value_error():
    with pytest.raises(ValueError):
        can_transition("pending", "archived")
