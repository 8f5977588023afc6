# backend/modules/reference/models/reference_models.py

"""
Lookup tables referenced by profiles and events.
"""

from sqlalchemy import Column, Integer, String, ForeignKey, Text, Boolean
from sqlalchemy.orm import relationship
from core.database import Base
from core.mixins import TimestampMixin


class Sport(Base, TimestampMixin):
    __tablename__ = "sports"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)
    group_name = Column(String(100), nullable=False)

    def __repr__(self):
        return f"<Sport {self.id} - {self.name}>"


class SportGoal(Base, TimestampMixin):
    __tablename__ = "sport_goals"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)


class EventStyle(Base, TimestampMixin):
    __tablename__ = "event_styles"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(100), nullable=False, unique=True)
    color = Column(String(7), nullable=False)  # #RGB or #RRGGBB


class Facility(Base, TimestampMixin):
    __tablename__ = "facilities"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(200), nullable=False)
    address = Column(String(500), nullable=False)
    phone = Column(String(30), nullable=False)
    email = Column(String(255))
    is_private = Column(Boolean, default=True, nullable=False)

    salons = relationship("Salon", back_populates="facility", cascade="all, delete-orphan")


class Salon(Base, TimestampMixin):
    __tablename__ = "salons"

    id = Column(Integer, primary_key=True, index=True)
    facility_id = Column(Integer, ForeignKey("facilities.id", ondelete="CASCADE"), nullable=False, index=True)
    sport_id = Column(Integer, ForeignKey("sports.id"), nullable=False)
    name = Column(String(200), nullable=False)
    price_info = Column(String(200), nullable=False)
    description = Column(Text)

    facility = relationship("Facility", back_populates="salons")
    sport = relationship("Sport")
