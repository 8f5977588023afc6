# backend/modules/reservations/tests/test_state_machine.py

"""
Tests for the reservation state table and the deadline rule.
"""

import pytest
from datetime import datetime, timedelta

from core.exceptions import InvalidTransitionError
from ..models.reservation_models import (
    Reservation,
    ReservationState,
    ALLOWED_TRANSITIONS,
    can_transition,
)
from ..services.deadline import (
    check_in_deadline_for,
    deadline_window,
    is_within_deadline,
)

NOW = datetime(2030, 5, 1, 12, 0)


class TestTransitionTable:
    """The allowed moves between reservation states"""

    @pytest.mark.parametrize(
        "target",
        [ReservationState.WAITLISTED, ReservationState.JOINED, ReservationState.PAID],
    )
    def test_new_reservation_initial_states(self, target):
        assert can_transition(None, target)

    def test_new_reservation_cannot_start_checked_in(self):
        assert not can_transition(None, ReservationState.CHECKED_IN)

    def test_checked_in_is_terminal(self):
        assert ALLOWED_TRANSITIONS[ReservationState.CHECKED_IN] == frozenset()
        for target in ReservationState:
            assert not can_transition(ReservationState.CHECKED_IN, target)

    def test_payment_cannot_be_undone(self):
        assert not can_transition(ReservationState.PAID, ReservationState.JOINED)
        assert not can_transition(ReservationState.PAID, ReservationState.WAITLISTED)

    def test_waitlisted_cannot_check_in_directly(self):
        assert not can_transition(ReservationState.WAITLISTED, ReservationState.CHECKED_IN)

    def test_joined_must_pay_before_check_in(self):
        assert can_transition(ReservationState.JOINED, ReservationState.PAID)
        assert not can_transition(ReservationState.JOINED, ReservationState.CHECKED_IN)


class TestReservationTransitions:
    """Reservation.transition_to and the derived flags"""

    def test_flags_follow_state(self):
        reservation = Reservation()
        reservation.transition_to(ReservationState.WAITLISTED, NOW)
        assert reservation.is_waitlisted
        assert not reservation.is_paid
        assert not reservation.is_checked_in

        reservation.transition_to(ReservationState.JOINED, NOW)
        assert not reservation.is_waitlisted
        assert not reservation.is_paid

        reservation.transition_to(ReservationState.PAID, NOW)
        assert reservation.is_paid
        assert not reservation.is_checked_in

        reservation.transition_to(ReservationState.CHECKED_IN, NOW)
        assert reservation.is_paid
        assert reservation.is_checked_in
        assert reservation.is_joined

    def test_checked_in_implies_paid_and_not_waitlisted(self):
        reservation = Reservation()
        reservation.transition_to(ReservationState.PAID, NOW)
        reservation.transition_to(ReservationState.CHECKED_IN, NOW)
        assert reservation.is_paid and not reservation.is_waitlisted

    def test_timestamps_recorded(self):
        reservation = Reservation()
        reservation.transition_to(ReservationState.WAITLISTED, NOW)
        promoted_at = NOW + timedelta(hours=1)
        paid_at = NOW + timedelta(hours=2)

        reservation.transition_to(ReservationState.JOINED, promoted_at)
        reservation.transition_to(ReservationState.PAID, paid_at)
        reservation.transition_to(ReservationState.CHECKED_IN, paid_at)

        assert reservation.promoted_at == promoted_at
        assert reservation.paid_at == paid_at
        assert reservation.checked_in_at == paid_at

    def test_returns_previous_state(self):
        reservation = Reservation()
        assert reservation.transition_to(ReservationState.JOINED, NOW) is None
        assert reservation.transition_to(ReservationState.PAID, NOW) == ReservationState.JOINED

    def test_invalid_transition_raises(self):
        reservation = Reservation()
        reservation.transition_to(ReservationState.JOINED, NOW)

        with pytest.raises(InvalidTransitionError) as exc_info:
            reservation.transition_to(ReservationState.CHECKED_IN, NOW)

        assert exc_info.value.status_code == 409
        assert exc_info.value.error_code == "INVALID_TRANSITION"
        assert exc_info.value.current == "joined"
        assert exc_info.value.target == "checked_in"
        assert reservation.state == ReservationState.JOINED


class TestDeadlineRule:
    """Events starting within 48 hours are inside the deadline window"""

    def test_default_window_is_two_days(self):
        assert deadline_window() == timedelta(hours=48)

    def test_check_in_deadline_is_two_days_before_start(self):
        start = NOW + timedelta(days=5)
        assert check_in_deadline_for(start) == start - timedelta(days=2)

    @pytest.mark.parametrize(
        "starts_in, expected",
        [
            (timedelta(hours=1), True),
            (timedelta(hours=47, minutes=59), True),
            (timedelta(hours=48), False),
            (timedelta(days=7), False),
            (timedelta(0), False),
            (timedelta(hours=-1), False),
        ],
    )
    def test_is_within_deadline(self, starts_in, expected):
        assert is_within_deadline(NOW + starts_in, NOW) is expected

    def test_custom_window(self):
        assert is_within_deadline(NOW + timedelta(hours=5), NOW, hours=6)
        assert not is_within_deadline(NOW + timedelta(hours=7), NOW, hours=6)
