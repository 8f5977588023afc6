"""Read access to lookup tables."""

from typing import List, Type, TypeVar

from sqlalchemy.orm import Session

from core.exceptions import NotFoundError
from ..models import Sport, SportGoal, EventStyle, Facility, Salon

ModelT = TypeVar("ModelT")


class ReferenceDataService:
    def __init__(self, db: Session):
        self.db = db

    def get_or_404(self, model: Type[ModelT], item_id: int, label: str = None) -> ModelT:
        item = self.db.query(model).filter_by(id=item_id).first()
        if item is None:
            raise NotFoundError(f"{label or model.__name__} not found")
        return item

    def list_sports(self) -> List[Sport]:
        return self.db.query(Sport).order_by(Sport.group_name, Sport.name).all()

    def list_sport_goals(self) -> List[SportGoal]:
        return self.db.query(SportGoal).order_by(SportGoal.name).all()

    def list_event_styles(self) -> List[EventStyle]:
        return self.db.query(EventStyle).order_by(EventStyle.name).all()

    def list_facilities(self) -> List[Facility]:
        return self.db.query(Facility).order_by(Facility.name).all()

    def list_salons(self, facility_id: int) -> List[Salon]:
        self.get_or_404(Facility, facility_id, "Facility")
        return (
            self.db.query(Salon)
            .filter_by(facility_id=facility_id)
            .order_by(Salon.name)
            .all()
        )
