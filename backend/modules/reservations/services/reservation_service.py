# backend/modules/reservations/services/reservation_service.py

"""
Reservation flow: join, confirm payment, check in.

Capacity counts reservations that hold a slot (joined, paid or checked
in). Joining a full event always lands on the waitlist. The event row is
locked while the slot count is taken so two simultaneous joins cannot both
claim the last slot; the unique (participant, event) constraint turns a
lost duplicate race into a conflict.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional, Dict, Any, Tuple
import logging

from sqlalchemy import and_, func, or_
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from core.auth import CurrentUser
from core.clock import SystemClock, get_clock
from core.exceptions import (
    ConflictError,
    InvalidTransitionError,
    NotFoundError,
    PermissionDeniedError,
    ValidationError,
)
from modules.events.models import Event, EventInvite
from modules.profiles.models import ParticipantProfile
from ..models import (
    Reservation,
    ReservationState,
    CONFIRMED_STATES,
    ReservationAuditLog,
    AuditAction,
)
from ..schemas.reservation_schemas import ReservationListFilters
from ..events import (
    emit_reservation_event,
    ReservationJoinedEvent,
    ReservationWaitlistedEvent,
    PaymentConfirmedEvent,
    CheckedInEvent,
    ReservationApprovedEvent,
    ReservationPromotedEvent,
)
from .deadline import check_in_deadline_for, is_within_deadline

logger = logging.getLogger(__name__)


@dataclass
class JoinResult:
    reservation: Reservation
    within_deadline: bool
    payment_required: bool
    waitlist_position: Optional[int] = None


class ReservationService:
    """Service for managing event reservations"""

    def __init__(self, db: Session, clock: Optional[SystemClock] = None):
        self.db = db
        self.clock = clock or get_clock()

    # Lookups

    def get_event(self, event_id: int, lock: bool = False) -> Event:
        query = self.db.query(Event).filter(Event.id == event_id)
        if lock:
            query = query.with_for_update()
        event = query.first()
        if event is None:
            raise NotFoundError("Event not found")
        return event

    def get_reservation(
        self, participant_id: int, event_id: int, lock: bool = False
    ) -> Optional[Reservation]:
        query = self.db.query(Reservation).filter_by(
            participant_id=participant_id, event_id=event_id
        )
        if lock:
            query = query.with_for_update()
        return query.first()

    def count_confirmed(self, event_id: int) -> int:
        return (
            self.db.query(func.count(Reservation.id))
            .filter(
                Reservation.event_id == event_id,
                Reservation.state.in_(CONFIRMED_STATES),
            )
            .scalar()
        )

    def waitlist_position(self, reservation: Reservation) -> Optional[int]:
        if not reservation.is_waitlisted:
            return None
        return (
            self.db.query(func.count(Reservation.id))
            .filter(
                Reservation.event_id == reservation.event_id,
                Reservation.state == ReservationState.WAITLISTED,
                or_(
                    Reservation.created_at < reservation.created_at,
                    and_(
                        Reservation.created_at == reservation.created_at,
                        Reservation.id <= reservation.id,
                    ),
                ),
            )
            .scalar()
        )

    # Participant operations

    async def join_event(
        self,
        participant: ParticipantProfile,
        event_id: int,
        secret_id: Optional[str] = None,
    ) -> JoinResult:
        """Reserve a slot, or a waitlist place when the event is full."""
        event = self.get_event(event_id, lock=True)

        if self.get_reservation(participant.id, event.id):
            raise ConflictError("You already have a reservation for this event")

        now = self.clock.now()
        if event.start_time <= now:
            raise ValidationError("Event has already started")

        if event.is_private and not self._may_join_private(event, participant, secret_id):
            raise PermissionDeniedError("Access denied to this private event")

        confirmed = self.count_confirmed(event.id)
        within_deadline = is_within_deadline(event.start_time, now)

        if confirmed >= event.capacity:
            initial_state = ReservationState.WAITLISTED
        elif event.is_free:
            initial_state = ReservationState.PAID
        else:
            initial_state = ReservationState.JOINED

        reservation = Reservation(
            participant_id=participant.id,
            event_id=event.id,
            check_in_deadline=check_in_deadline_for(event.start_time),
            is_approved=False,
        )
        reservation.transition_to(initial_state, now)
        if initial_state == ReservationState.PAID and within_deadline:
            reservation.transition_to(ReservationState.CHECKED_IN, now)

        self.db.add(reservation)
        try:
            self.db.flush()
        except IntegrityError:
            self.db.rollback()
            raise ConflictError("You already have a reservation for this event")

        action = (
            AuditAction.WAITLISTED
            if reservation.is_waitlisted
            else AuditAction.JOINED
        )
        self._create_audit_log(
            reservation,
            action,
            from_state=None,
            user_id=participant.user_id,
            metadata={"within_deadline": within_deadline, "confirmed_before": confirmed},
        )
        self.db.commit()
        self.db.refresh(reservation)

        result = JoinResult(
            reservation=reservation,
            within_deadline=within_deadline,
            payment_required=(
                within_deadline and reservation.state == ReservationState.JOINED
            ),
            waitlist_position=self.waitlist_position(reservation),
        )

        if reservation.is_waitlisted:
            logger.info(
                f"Participant {participant.id} waitlisted for event {event.id} "
                f"at position {result.waitlist_position}"
            )
            await emit_reservation_event(
                ReservationWaitlistedEvent(
                    **self._event_fields(reservation, participant.user_id),
                    position=result.waitlist_position,
                )
            )
        else:
            logger.info(
                f"Participant {participant.id} joined event {event.id} "
                f"as {reservation.state.value}"
            )
            await emit_reservation_event(
                ReservationJoinedEvent(
                    **self._event_fields(reservation, participant.user_id),
                    state=reservation.state.value,
                    within_deadline=within_deadline,
                )
            )

        return result

    async def confirm_payment(
        self,
        participant: ParticipantProfile,
        event_id: int,
        auto_check_in: bool = False,
    ) -> Reservation:
        """Mark a reservation paid, checking in when inside the deadline window."""
        reservation = self.get_reservation(participant.id, event_id, lock=True)
        if reservation is None:
            raise NotFoundError("Reservation not found")

        if reservation.is_waitlisted:
            raise InvalidTransitionError(
                reservation.state.value,
                ReservationState.PAID.value,
                "Waitlisted reservations cannot be paid",
            )
        if reservation.is_paid:
            raise ConflictError("Payment already confirmed", error_code="ALREADY_PAID")

        now = self.clock.now()
        within_deadline = is_within_deadline(reservation.event.start_time, now)

        previous = reservation.transition_to(ReservationState.PAID, now)
        self._create_audit_log(
            reservation,
            AuditAction.PAYMENT_CONFIRMED,
            from_state=previous,
            user_id=participant.user_id,
        )

        auto_checked_in = within_deadline or auto_check_in
        if auto_checked_in:
            previous = reservation.transition_to(ReservationState.CHECKED_IN, now)
            self._create_audit_log(
                reservation,
                AuditAction.CHECKED_IN,
                from_state=previous,
                user_id=participant.user_id,
                metadata={"automatic": True, "within_deadline": within_deadline},
            )

        self.db.commit()
        self.db.refresh(reservation)

        logger.info(
            f"Payment confirmed for reservation {reservation.id}"
            + (" with automatic check-in" if auto_checked_in else "")
        )
        await emit_reservation_event(
            PaymentConfirmedEvent(
                **self._event_fields(reservation, participant.user_id),
                auto_checked_in=auto_checked_in,
            )
        )
        return reservation

    async def check_in(self, participant: ParticipantProfile, event_id: int) -> Reservation:
        reservation = self.get_reservation(participant.id, event_id, lock=True)
        if reservation is None:
            raise NotFoundError("Reservation not found")

        if reservation.is_waitlisted:
            raise InvalidTransitionError(
                reservation.state.value,
                ReservationState.CHECKED_IN.value,
                "Waitlisted reservations cannot check in",
            )
        if reservation.is_checked_in:
            raise ConflictError("Already checked in", error_code="ALREADY_CHECKED_IN")
        if not reservation.is_paid:
            raise InvalidTransitionError(
                reservation.state.value,
                ReservationState.CHECKED_IN.value,
                "Payment required before check-in",
            )

        previous = reservation.transition_to(ReservationState.CHECKED_IN, self.clock.now())
        self._create_audit_log(
            reservation,
            AuditAction.CHECKED_IN,
            from_state=previous,
            user_id=participant.user_id,
        )
        self.db.commit()
        self.db.refresh(reservation)

        logger.info(f"Reservation {reservation.id} checked in")
        await emit_reservation_event(
            CheckedInEvent(**self._event_fields(reservation, participant.user_id))
        )
        return reservation

    def get_participant_reservations(
        self, participant_id: int, filters: ReservationListFilters
    ) -> Tuple[List[Reservation], int]:
        query = (
            self.db.query(Reservation)
            .join(Event, Reservation.event_id == Event.id)
            .filter(Reservation.participant_id == participant_id)
        )
        query = self._apply_flag_filters(query, filters)
        if filters.upcoming_only:
            query = query.filter(Event.start_time > self.clock.now())

        total = query.count()
        reservations = (
            query.order_by(Event.start_time.asc(), Reservation.id.asc())
            .offset(filters.skip)
            .limit(filters.per_page)
            .all()
        )
        return reservations, total

    # Coach operations

    def get_event_participants(
        self, event_id: int, user: CurrentUser, filters: ReservationListFilters
    ) -> Tuple[List[Reservation], int]:
        event = self.get_event(event_id)
        self._ensure_manager(event, user)

        query = self.db.query(Reservation).filter(Reservation.event_id == event.id)
        query = self._apply_flag_filters(query, filters)

        total = query.count()
        reservations = (
            query.order_by(Reservation.created_at.asc(), Reservation.id.asc())
            .offset(filters.skip)
            .limit(filters.per_page)
            .all()
        )
        return reservations, total

    async def approve_reservation(self, reservation_id: int, user: CurrentUser) -> Reservation:
        reservation = self.db.query(Reservation).filter_by(id=reservation_id).first()
        if reservation is None:
            raise NotFoundError("Reservation not found")

        self._ensure_manager(reservation.event, user)

        if reservation.is_waitlisted:
            raise ConflictError("Waitlisted reservations cannot be approved")
        if reservation.is_approved:
            raise ConflictError("Reservation already approved")

        reservation.is_approved = True
        reservation.approved_at = self.clock.now()
        self._create_audit_log(
            reservation,
            AuditAction.APPROVED,
            from_state=reservation.state,
            user_id=user.id,
        )
        self.db.commit()
        self.db.refresh(reservation)

        logger.info(f"Reservation {reservation.id} approved by user {user.id}")
        await emit_reservation_event(
            ReservationApprovedEvent(**self._event_fields(reservation, user.id))
        )
        return reservation

    async def promote_waitlisted(
        self, event: Event, user_id: Optional[int] = None
    ) -> List[Reservation]:
        """Give freed slots to the oldest waitlisted reservations."""
        free_slots = event.capacity - self.count_confirmed(event.id)
        if free_slots <= 0:
            return []

        waitlisted = (
            self.db.query(Reservation)
            .filter(
                Reservation.event_id == event.id,
                Reservation.state == ReservationState.WAITLISTED,
            )
            .order_by(Reservation.created_at.asc(), Reservation.id.asc())
            .limit(free_slots)
            .all()
        )
        if not waitlisted:
            return []

        now = self.clock.now()
        within_deadline = is_within_deadline(event.start_time, now)
        target = ReservationState.PAID if event.is_free else ReservationState.JOINED

        for reservation in waitlisted:
            previous = reservation.transition_to(target, now)
            if target == ReservationState.PAID and within_deadline:
                reservation.transition_to(ReservationState.CHECKED_IN, now)
            self._create_audit_log(
                reservation,
                AuditAction.PROMOTED_FROM_WAITLIST,
                from_state=previous,
                user_id=user_id,
            )

        self.db.commit()

        logger.info(
            f"Promoted {len(waitlisted)} waitlisted reservation(s) for event {event.id}"
        )
        for reservation in waitlisted:
            await emit_reservation_event(
                ReservationPromotedEvent(
                    **self._event_fields(reservation, user_id),
                    new_state=reservation.state.value,
                )
            )
        return waitlisted

    async def settle_free_event(
        self, event: Event, user_id: Optional[int] = None
    ) -> List[Reservation]:
        """Mark unpaid reservations paid once their event has become free."""
        unpaid = (
            self.db.query(Reservation)
            .filter(
                Reservation.event_id == event.id,
                Reservation.state == ReservationState.JOINED,
            )
            .order_by(Reservation.id.asc())
            .all()
        )
        if not unpaid:
            return []

        now = self.clock.now()
        within_deadline = is_within_deadline(event.start_time, now)

        for reservation in unpaid:
            previous = reservation.transition_to(ReservationState.PAID, now)
            self._create_audit_log(
                reservation,
                AuditAction.PAYMENT_CONFIRMED,
                from_state=previous,
                user_id=user_id,
                metadata={"reason": "event_became_free"},
            )
            if within_deadline:
                previous = reservation.transition_to(ReservationState.CHECKED_IN, now)
                self._create_audit_log(
                    reservation,
                    AuditAction.CHECKED_IN,
                    from_state=previous,
                    user_id=user_id,
                    metadata={"automatic": True, "within_deadline": True},
                )

        self.db.commit()

        logger.info(
            f"Settled {len(unpaid)} unpaid reservation(s) for free event {event.id}"
        )
        for reservation in unpaid:
            await emit_reservation_event(
                PaymentConfirmedEvent(
                    **self._event_fields(reservation, user_id),
                    auto_checked_in=within_deadline,
                )
            )
        return unpaid

    def reschedule_deadlines(self, event_id: int, start_time: datetime) -> int:
        """Stage new check-in deadlines for every reservation of a moved event."""
        return (
            self.db.query(Reservation)
            .filter(Reservation.event_id == event_id)
            .update(
                {Reservation.check_in_deadline: check_in_deadline_for(start_time)},
                synchronize_session="fetch",
            )
        )

    # Helpers

    def _may_join_private(
        self, event: Event, participant: ParticipantProfile, secret_id: Optional[str]
    ) -> bool:
        if event.is_managed_by(participant.user_id):
            return True
        if secret_id and event.secret_id and secret_id == event.secret_id:
            return True
        return (
            self.db.query(EventInvite)
            .filter_by(event_id=event.id, invitee_id=participant.user_id)
            .first()
            is not None
        )

    def _ensure_manager(self, event: Event, user: CurrentUser):
        if not (user.is_admin or event.is_managed_by(user.id)):
            raise PermissionDeniedError("You are not the owner or backup coach")

    def _apply_flag_filters(self, query, filters: ReservationListFilters):
        if filters.is_waitlisted is not None:
            condition = Reservation.state == ReservationState.WAITLISTED
            query = query.filter(condition if filters.is_waitlisted else ~condition)
        if filters.is_paid is not None:
            condition = Reservation.state.in_(
                (ReservationState.PAID, ReservationState.CHECKED_IN)
            )
            query = query.filter(condition if filters.is_paid else ~condition)
        if filters.is_checked_in is not None:
            condition = Reservation.state == ReservationState.CHECKED_IN
            query = query.filter(condition if filters.is_checked_in else ~condition)
        if filters.is_approved is not None:
            query = query.filter(Reservation.is_approved == filters.is_approved)
        return query

    def _event_fields(self, reservation: Reservation, user_id: Optional[int]) -> Dict[str, Any]:
        return {
            "reservation_id": reservation.id,
            "participant_id": reservation.participant_id,
            "event_id": reservation.event_id,
            "timestamp": self.clock.now(),
            "user_id": user_id,
        }

    def _create_audit_log(
        self,
        reservation: Reservation,
        action: AuditAction,
        from_state: Optional[ReservationState] = None,
        user_id: Optional[int] = None,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        """Stage an audit log entry; committed with the state change"""
        self.db.add(
            ReservationAuditLog(
                reservation_id=reservation.id,
                action=action.value,
                user_id=user_id,
                from_state=from_state.value if from_state else None,
                to_state=reservation.state.value,
                extra_data=metadata,
            )
        )
