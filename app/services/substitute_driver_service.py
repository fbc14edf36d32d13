from datetime import date
from typing import List, Optional
from sqlmodel import Session, select
from app.core.exceptions import NotFoundError
from app.models.substitute_driver import SubstituteDriver, SubstituteDriverCreate
from app.services.change_notifier import ChangeEvent, ChangeNotifier, change_notifier
from app.services.fleet_service import FleetService
from app.services.rental_slab_service import get_substitute_charge
from app.services.settlement_processor_service import SettlementProcessor


class SubstituteDriverService:
    def __init__(self, session: Session, notifier: ChangeNotifier = change_notifier):
        self.session = session
        self.notifier = notifier
        self.fleet = FleetService(session)

    def create_substitute(self, data: SubstituteDriverCreate) -> SubstituteDriver:
        """Registra un suplente; el cargo sale de la duración del turno."""
        self.fleet.get_vehicle(data.vehicle_id)
        substitute_dict = data.model_dump()
        if substitute_dict.get("trip_count") is None:
            substitute_dict["trip_count"] = 1

        substitute = SubstituteDriver(
            **substitute_dict,
            charge=get_substitute_charge(data.shift_hours)
        )
        self.session.add(substitute)
        self.session.commit()
        self.session.refresh(substitute)

        self.notifier.publish(ChangeEvent.TRIPS_CHANGED)
        SettlementProcessor(self.session, self.notifier).refresh_week(
            substitute.vehicle_id, substitute.work_date)
        return substitute

    def get_substitutes(
        self,
        vehicle_id: Optional[int] = None,
        start_date: Optional[date] = None,
        end_date: Optional[date] = None
    ) -> List[SubstituteDriver]:
        query = select(SubstituteDriver)
        if vehicle_id is not None:
            query = query.where(SubstituteDriver.vehicle_id == vehicle_id)
        if start_date is not None:
            query = query.where(SubstituteDriver.work_date >= start_date)
        if end_date is not None:
            query = query.where(SubstituteDriver.work_date <= end_date)
        query = query.order_by(SubstituteDriver.work_date.desc(), SubstituteDriver.id)
        return list(self.session.exec(query))

    def delete_substitute(self, substitute_id: int) -> None:
        substitute = self.session.get(SubstituteDriver, substitute_id)
        if not substitute:
            raise NotFoundError(f"Substitute driver {substitute_id} not found")
        vehicle_id, work_date = substitute.vehicle_id, substitute.work_date

        self.session.delete(substitute)
        self.session.commit()

        self.notifier.publish(ChangeEvent.TRIPS_CHANGED)
        SettlementProcessor(self.session, self.notifier).refresh_week(vehicle_id, work_date)
