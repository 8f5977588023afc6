# backend/modules/reservations/tests/test_reservation_service.py

"""
Tests for reservation service.
"""

import pytest
from datetime import timedelta
from sqlalchemy.orm import Session

from core.auth import CurrentUser
from core.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from tests.factories import (
    CoachProfileFactory,
    EventFactory,
    EventInviteFactory,
    ParticipantProfileFactory,
    ReservationFactory,
    create_event_scenario,
)
from ..events import register_event_handler, unregister_event_handler
from ..models import Reservation, ReservationState, ReservationAuditLog, AuditAction
from ..schemas.reservation_schemas import ReservationListFilters
from ..services import ReservationService


def as_current_user(user, roles=None) -> CurrentUser:
    return CurrentUser(
        id=user.id,
        username=user.username,
        email=user.email,
        roles=roles or [user.role.value],
    )


@pytest.fixture
def service(db_session: Session, fixed_clock):
    """Create service instance"""
    return ReservationService(db_session, fixed_clock)


@pytest.fixture
def participant(db_session: Session):
    return ParticipantProfileFactory()


@pytest.fixture
def emitted():
    """Collect lifecycle events emitted during a test"""
    received = []

    async def record(event):
        received.append(event)

    event_types = [
        "reservation.joined",
        "reservation.waitlisted",
        "reservation.paid",
        "reservation.checked_in",
        "reservation.approved",
        "reservation.promoted",
    ]
    for event_type in event_types:
        register_event_handler(event_type, record)
    yield received
    for event_type in event_types:
        unregister_event_handler(event_type, record)


class TestJoinEvent:
    """Joining an event"""

    @pytest.mark.asyncio
    async def test_join_paid_event_outside_deadline(self, service, participant, fixed_clock):
        event = EventFactory(start_time=fixed_clock.now() + timedelta(days=7))

        result = await service.join_event(participant, event.id)

        assert result.reservation.state == ReservationState.JOINED
        assert result.within_deadline is False
        assert result.payment_required is False
        assert result.waitlist_position is None
        assert result.reservation.check_in_deadline == event.start_time - timedelta(days=2)

    @pytest.mark.asyncio
    async def test_join_paid_event_within_deadline_requires_payment(
        self, service, participant, fixed_clock
    ):
        event = EventFactory(start_time=fixed_clock.now() + timedelta(hours=24))

        result = await service.join_event(participant, event.id)

        assert result.reservation.state == ReservationState.JOINED
        assert result.within_deadline is True
        assert result.payment_required is True
        assert not result.reservation.is_checked_in

    @pytest.mark.asyncio
    async def test_join_free_event_outside_deadline_is_paid(
        self, service, participant, fixed_clock
    ):
        event = EventFactory(free=True, start_time=fixed_clock.now() + timedelta(days=7))

        result = await service.join_event(participant, event.id)

        assert result.reservation.state == ReservationState.PAID
        assert result.reservation.paid_at == fixed_clock.now()
        assert result.payment_required is False

    @pytest.mark.asyncio
    async def test_join_free_event_within_deadline_checks_in(
        self, service, participant, fixed_clock
    ):
        event = EventFactory(free=True, start_time=fixed_clock.now() + timedelta(hours=12))

        result = await service.join_event(participant, event.id)

        assert result.reservation.state == ReservationState.CHECKED_IN
        assert result.reservation.is_paid
        assert result.payment_required is False

    @pytest.mark.asyncio
    async def test_join_full_event_waitlists(self, service, participant):
        scenario = create_event_scenario(capacity=2, confirmed=2)

        result = await service.join_event(participant, scenario["event"].id)

        assert result.reservation.state == ReservationState.WAITLISTED
        assert result.waitlist_position == 1
        assert result.payment_required is False
        assert service.count_confirmed(scenario["event"].id) == 2

    @pytest.mark.asyncio
    async def test_join_full_event_within_deadline_still_waitlists(
        self, service, participant, fixed_clock
    ):
        scenario = create_event_scenario(
            capacity=1,
            confirmed=1,
            free=True,
            start_time=fixed_clock.now() + timedelta(hours=6),
        )

        result = await service.join_event(participant, scenario["event"].id)

        assert result.reservation.state == ReservationState.WAITLISTED
        assert result.within_deadline is True

    @pytest.mark.asyncio
    async def test_waitlist_positions_are_ordered(self, service):
        scenario = create_event_scenario(capacity=1, confirmed=1, waitlisted=2)

        result = await service.join_event(ParticipantProfileFactory(), scenario["event"].id)

        assert result.waitlist_position == 3

    @pytest.mark.asyncio
    async def test_last_slot_is_taken_then_waitlist(self, service):
        scenario = create_event_scenario(capacity=2, confirmed=1)
        event_id = scenario["event"].id

        first = await service.join_event(ParticipantProfileFactory(), event_id)
        second = await service.join_event(ParticipantProfileFactory(), event_id)

        assert first.reservation.state == ReservationState.JOINED
        assert second.reservation.state == ReservationState.WAITLISTED
        assert service.count_confirmed(event_id) == 2

    @pytest.mark.asyncio
    async def test_duplicate_join_conflicts(self, service, participant):
        event = EventFactory()
        await service.join_event(participant, event.id)

        with pytest.raises(ConflictError):
            await service.join_event(participant, event.id)

        assert service.db.query(Reservation).filter_by(event_id=event.id).count() == 1

    @pytest.mark.asyncio
    async def test_join_missing_event(self, service, participant):
        with pytest.raises(NotFoundError):
            await service.join_event(participant, 9999)

    @pytest.mark.asyncio
    async def test_join_started_event_rejected(self, service, participant, fixed_clock):
        event = EventFactory(start_time=fixed_clock.now() - timedelta(minutes=5))

        with pytest.raises(ValidationError):
            await service.join_event(participant, event.id)

    @pytest.mark.asyncio
    async def test_private_event_requires_access(self, service, participant):
        event = EventFactory(private=True)

        with pytest.raises(PermissionDeniedError):
            await service.join_event(participant, event.id)

    @pytest.mark.asyncio
    async def test_private_event_wrong_secret_rejected(self, service, participant):
        event = EventFactory(private=True)

        with pytest.raises(PermissionDeniedError):
            await service.join_event(participant, event.id, secret_id="000-000-000")

    @pytest.mark.asyncio
    async def test_private_event_with_secret(self, service, participant):
        event = EventFactory(private=True)

        result = await service.join_event(participant, event.id, secret_id=event.secret_id)

        assert result.reservation.state == ReservationState.JOINED

    @pytest.mark.asyncio
    async def test_private_event_with_invite(self, service, participant):
        event = EventFactory(private=True)
        EventInviteFactory(event=event, invitee=participant.user)

        result = await service.join_event(participant, event.id)

        assert result.reservation.event_id == event.id

    @pytest.mark.asyncio
    async def test_join_writes_audit_log(self, service, participant, db_session):
        event = EventFactory()

        result = await service.join_event(participant, event.id)

        log = db_session.query(ReservationAuditLog).filter_by(
            reservation_id=result.reservation.id
        ).one()
        assert log.action == AuditAction.JOINED.value
        assert log.from_state is None
        assert log.to_state == "joined"
        assert log.user_id == participant.user_id

    @pytest.mark.asyncio
    async def test_join_emits_events(self, service, participant, emitted):
        scenario = create_event_scenario(capacity=1)
        event_id = scenario["event"].id

        await service.join_event(participant, event_id)
        await service.join_event(ParticipantProfileFactory(), event_id)

        assert [e.event_type for e in emitted] == [
            "reservation.joined",
            "reservation.waitlisted",
        ]
        assert emitted[1].position == 1


class TestConfirmPayment:
    """Confirming payment for a reservation"""

    @pytest.mark.asyncio
    async def test_confirm_outside_deadline_marks_paid(self, service, fixed_clock):
        reservation = ReservationFactory(
            event=EventFactory(start_time=fixed_clock.now() + timedelta(days=7))
        )

        result = await service.confirm_payment(reservation.participant, reservation.event_id)

        assert result.state == ReservationState.PAID
        assert not result.is_checked_in

    @pytest.mark.asyncio
    async def test_confirm_within_deadline_checks_in(self, service, fixed_clock):
        reservation = ReservationFactory(
            event=EventFactory(start_time=fixed_clock.now() + timedelta(hours=30))
        )

        result = await service.confirm_payment(reservation.participant, reservation.event_id)

        assert result.state == ReservationState.CHECKED_IN
        assert result.is_paid

    @pytest.mark.asyncio
    async def test_confirm_with_auto_check_in(self, service, fixed_clock):
        reservation = ReservationFactory(
            event=EventFactory(start_time=fixed_clock.now() + timedelta(days=7))
        )

        result = await service.confirm_payment(
            reservation.participant, reservation.event_id, auto_check_in=True
        )

        assert result.state == ReservationState.CHECKED_IN

    @pytest.mark.asyncio
    async def test_confirm_twice_conflicts(self, service):
        reservation = ReservationFactory()
        await service.confirm_payment(reservation.participant, reservation.event_id)

        with pytest.raises(ConflictError) as exc_info:
            await service.confirm_payment(reservation.participant, reservation.event_id)

        assert exc_info.value.error_code == "ALREADY_PAID"

    @pytest.mark.asyncio
    async def test_confirm_waitlisted_rejected(self, service):
        reservation = ReservationFactory(state=ReservationState.WAITLISTED)

        with pytest.raises(InvalidTransitionError):
            await service.confirm_payment(reservation.participant, reservation.event_id)

        assert reservation.state == ReservationState.WAITLISTED

    @pytest.mark.asyncio
    async def test_confirm_without_reservation(self, service, participant):
        event = EventFactory()

        with pytest.raises(NotFoundError):
            await service.confirm_payment(participant, event.id)

    @pytest.mark.asyncio
    async def test_confirm_within_deadline_audits_both_steps(
        self, service, fixed_clock, db_session
    ):
        reservation = ReservationFactory(
            event=EventFactory(start_time=fixed_clock.now() + timedelta(hours=5))
        )

        await service.confirm_payment(reservation.participant, reservation.event_id)

        actions = [
            log.action
            for log in db_session.query(ReservationAuditLog)
            .filter_by(reservation_id=reservation.id)
            .order_by(ReservationAuditLog.id)
        ]
        assert actions == [
            AuditAction.PAYMENT_CONFIRMED.value,
            AuditAction.CHECKED_IN.value,
        ]


class TestCheckIn:
    """Checking in to an event"""

    @pytest.mark.asyncio
    async def test_check_in_after_payment(self, service, fixed_clock):
        reservation = ReservationFactory(state=ReservationState.PAID)

        result = await service.check_in(reservation.participant, reservation.event_id)

        assert result.state == ReservationState.CHECKED_IN
        assert result.checked_in_at == fixed_clock.now()

    @pytest.mark.asyncio
    async def test_check_in_requires_payment(self, service):
        reservation = ReservationFactory(state=ReservationState.JOINED)

        with pytest.raises(InvalidTransitionError) as exc_info:
            await service.check_in(reservation.participant, reservation.event_id)

        assert "Payment required" in exc_info.value.detail

    @pytest.mark.asyncio
    async def test_check_in_waitlisted_rejected(self, service):
        reservation = ReservationFactory(state=ReservationState.WAITLISTED)

        with pytest.raises(InvalidTransitionError):
            await service.check_in(reservation.participant, reservation.event_id)

    @pytest.mark.asyncio
    async def test_check_in_twice_conflicts(self, service):
        reservation = ReservationFactory(state=ReservationState.CHECKED_IN)

        with pytest.raises(ConflictError) as exc_info:
            await service.check_in(reservation.participant, reservation.event_id)

        assert exc_info.value.error_code == "ALREADY_CHECKED_IN"

    @pytest.mark.asyncio
    async def test_paid_reservation_checks_in_once_clock_enters_window(
        self, service, fixed_clock
    ):
        event = EventFactory(start_time=fixed_clock.now() + timedelta(days=4))
        participant = ParticipantProfileFactory()

        await service.join_event(participant, event.id)
        paid = await service.confirm_payment(participant, event.id)
        assert paid.state == ReservationState.PAID

        fixed_clock.advance(timedelta(days=3))
        checked_in = await service.check_in(participant, event.id)

        assert checked_in.state == ReservationState.CHECKED_IN


class TestWaitlistPromotion:
    """Promoting waitlisted reservations when capacity frees up"""

    @pytest.mark.asyncio
    async def test_promotes_oldest_first(self, service, emitted):
        scenario = create_event_scenario(capacity=1, confirmed=1, waitlisted=3)
        event = scenario["event"]
        event.capacity = 3
        service.db.commit()

        promoted = await service.promote_waitlisted(event)

        assert [r.id for r in promoted] == [r.id for r in scenario["waitlisted"][:2]]
        assert all(r.state == ReservationState.JOINED for r in promoted)
        assert scenario["waitlisted"][2].state == ReservationState.WAITLISTED
        assert all(r.promoted_at is not None for r in promoted)
        assert [e.event_type for e in emitted] == ["reservation.promoted"] * 2

    @pytest.mark.asyncio
    async def test_free_event_promotion_within_deadline_checks_in(
        self, service, fixed_clock
    ):
        scenario = create_event_scenario(
            capacity=1,
            confirmed=1,
            waitlisted=1,
            free=True,
            start_time=fixed_clock.now() + timedelta(hours=10),
        )
        event = scenario["event"]
        event.capacity = 2
        service.db.commit()

        promoted = await service.promote_waitlisted(event)

        assert promoted[0].state == ReservationState.CHECKED_IN

    @pytest.mark.asyncio
    async def test_position_matches_promotion_order(self, service, fixed_clock):
        scenario = create_event_scenario(capacity=1, confirmed=1)
        event = scenario["event"]
        later = ReservationFactory(
            event=event,
            state=ReservationState.WAITLISTED,
            created_at=fixed_clock.now() - timedelta(hours=1),
        )
        earlier = ReservationFactory(
            event=event,
            state=ReservationState.WAITLISTED,
            created_at=fixed_clock.now() - timedelta(hours=2),
        )

        assert service.waitlist_position(earlier) == 1
        assert service.waitlist_position(later) == 2

        event.capacity = 2
        service.db.commit()
        promoted = await service.promote_waitlisted(event)

        assert [r.id for r in promoted] == [earlier.id]

    @pytest.mark.asyncio
    async def test_no_free_slots_promotes_nothing(self, service):
        scenario = create_event_scenario(capacity=1, confirmed=1, waitlisted=1)

        assert await service.promote_waitlisted(scenario["event"]) == []


class TestCoachOperations:
    """Participant lists and approvals"""

    def test_get_event_participants_for_owner(self, service):
        scenario = create_event_scenario(capacity=2, confirmed=2, waitlisted=1)
        owner = as_current_user(scenario["coach"].user)

        reservations, total = service.get_event_participants(
            scenario["event"].id, owner, ReservationListFilters()
        )

        assert total == 3
        assert len(reservations) == 3

    def test_get_event_participants_filters_waitlisted(self, service):
        scenario = create_event_scenario(capacity=2, confirmed=2, waitlisted=1)
        owner = as_current_user(scenario["coach"].user)

        reservations, total = service.get_event_participants(
            scenario["event"].id, owner, ReservationListFilters(isWaitListed=True)
        )

        assert total == 1
        assert reservations[0].is_waitlisted

    def test_get_event_participants_denied_for_other_coach(self, service):
        scenario = create_event_scenario(confirmed=1)
        other = as_current_user(CoachProfileFactory().user)

        with pytest.raises(PermissionDeniedError):
            service.get_event_participants(
                scenario["event"].id, other, ReservationListFilters()
            )

    @pytest.mark.asyncio
    async def test_backup_coach_can_approve(self, service, fixed_clock):
        scenario = create_event_scenario(confirmed=1)
        backup = CoachProfileFactory()
        scenario["event"].backup_coach_id = backup.user_id
        service.db.commit()

        reservation = await service.approve_reservation(
            scenario["confirmed"][0].id, as_current_user(backup.user)
        )

        assert reservation.is_approved
        assert reservation.approved_at == fixed_clock.now()

    @pytest.mark.asyncio
    async def test_approve_twice_conflicts(self, service):
        scenario = create_event_scenario(confirmed=1)
        owner = as_current_user(scenario["coach"].user)
        reservation_id = scenario["confirmed"][0].id

        await service.approve_reservation(reservation_id, owner)
        with pytest.raises(ConflictError):
            await service.approve_reservation(reservation_id, owner)

    @pytest.mark.asyncio
    async def test_waitlisted_cannot_be_approved(self, service):
        scenario = create_event_scenario(capacity=1, confirmed=1, waitlisted=1)
        owner = as_current_user(scenario["coach"].user)

        with pytest.raises(ConflictError):
            await service.approve_reservation(scenario["waitlisted"][0].id, owner)

    @pytest.mark.asyncio
    async def test_participant_cannot_approve(self, service, participant):
        scenario = create_event_scenario(confirmed=1)

        with pytest.raises(PermissionDeniedError):
            await service.approve_reservation(
                scenario["confirmed"][0].id, as_current_user(participant.user)
            )


class TestParticipantReservations:
    def test_lists_soonest_first(self, service, participant, fixed_clock):
        later = EventFactory(start_time=fixed_clock.now() + timedelta(days=10))
        sooner = EventFactory(start_time=fixed_clock.now() + timedelta(days=3))
        ReservationFactory(participant=participant, event=later)
        ReservationFactory(participant=participant, event=sooner)
        ReservationFactory()

        reservations, total = service.get_participant_reservations(
            participant.id, ReservationListFilters()
        )

        assert total == 2
        assert [r.event_id for r in reservations] == [sooner.id, later.id]

    def test_filters_paid(self, service, participant):
        ReservationFactory(participant=participant, state=ReservationState.PAID)
        ReservationFactory(participant=participant, state=ReservationState.CHECKED_IN)
        ReservationFactory(participant=participant, state=ReservationState.JOINED)

        _, paid_total = service.get_participant_reservations(
            participant.id, ReservationListFilters(isPaid=True)
        )
        _, unpaid_total = service.get_participant_reservations(
            participant.id, ReservationListFilters(isPaid=False)
        )

        assert paid_total == 2
        assert unpaid_total == 1

    def test_pagination(self, service, participant):
        for _ in range(3):
            ReservationFactory(participant=participant)

        reservations, total = service.get_participant_reservations(
            participant.id, ReservationListFilters(perPage=2, pageNumber=2)
        )

        assert total == 3
        assert len(reservations) == 1
