# backend/modules/reservations/models/audit_models.py

"""
Audit models for reservation system.
"""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, JSON, Index
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from core.database import Base
import enum


class AuditAction(enum.Enum):
    """Audit action types"""

    JOINED = "joined"
    WAITLISTED = "waitlisted"
    PAYMENT_CONFIRMED = "payment_confirmed"
    CHECKED_IN = "checked_in"
    APPROVED = "approved"
    PROMOTED_FROM_WAITLIST = "promoted_from_waitlist"


class ReservationAuditLog(Base):
    """Audit trail for reservation state changes"""

    __tablename__ = "reservation_audit_logs"

    id = Column(Integer, primary_key=True, index=True)
    reservation_id = Column(
        Integer, ForeignKey("reservations.id", ondelete="CASCADE"), nullable=False
    )
    action = Column(String(50), nullable=False)

    # Who made the change (null for system-triggered transitions)
    user_id = Column(Integer, ForeignKey("users.id"))
    from_state = Column(String(20))
    to_state = Column(String(20))

    timestamp = Column(DateTime, server_default=func.now())
    extra_data = Column("metadata", JSON)

    reservation = relationship("Reservation")

    __table_args__ = (
        Index("idx_reservation_audit_reservation_id", "reservation_id"),
        Index("idx_reservation_audit_action", "action"),
    )

    def __repr__(self):
        return (
            f"<ReservationAuditLog {self.id} - {self.action} on {self.reservation_id}>"
        )
