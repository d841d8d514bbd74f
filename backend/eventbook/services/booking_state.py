# backend/eventbook/services/booking_state.py
"""
Booking status state machine.

    pending   -> confirmed | cancelled
    confirmed -> completed | cancelled
    cancelled -> (terminal)
    completed -> (terminal)
"""

from typing import Dict, FrozenSet, Union

from ..core.exceptions import InvalidTransitionException
from ..models.booking import BookingStatus

ALLOWED_TRANSITIONS: Dict[BookingStatus, FrozenSet[BookingStatus]] = {
    BookingStatus.PENDING: frozenset({BookingStatus.CONFIRMED, BookingStatus.CANCELLED}),
    BookingStatus.CONFIRMED: frozenset({BookingStatus.COMPLETED, BookingStatus.CANCELLED}),
    BookingStatus.CANCELLED: frozenset(),
    BookingStatus.COMPLETED: frozenset(),
}

TERMINAL_STATUSES = frozenset(
    status for status, targets in ALLOWED_TRANSITIONS.items() if not targets
)


def _coerce(status: Union[BookingStatus, str]) -> BookingStatus:
    return status if isinstance(status, BookingStatus) else BookingStatus(status)


def can_transition(current: Union[BookingStatus, str], target: Union[BookingStatus, str]) -> bool:
    return _coerce(target) in ALLOWED_TRANSITIONS[_coerce(current)]


def validate_transition(current: Union[BookingStatus, str], target: Union[BookingStatus, str]) -> None:
    """
    Raise InvalidTransitionException unless ``current -> target`` is in the table.

    A status moving to itself is not a transition and is rejected too.
    """
    current_status, target_status = _coerce(current), _coerce(target)
    if target_status not in ALLOWED_TRANSITIONS[current_status]:
        raise InvalidTransitionException(current_status.value, target_status.value)
