import logging
from datetime import date
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.exceptions import NotFoundError, ValidationError
from app.models.driver import Driver
from app.models.driver_rent_log import DriverRentLog, DriverRentLogRead
from app.models.trip import ShiftEnum
from app.models.vehicle import Vehicle
from app.services.change_notifier import ChangeEvent, ChangeNotifier, change_notifier
from app.utils.week_utils import get_week_boundaries

logger = logging.getLogger(__name__)


class RentLedgerService:
    """
    Ledger de rentas diarias de los conductores.

    La clave (driver_id, rent_date, shift) es única en la tabla; crear dos
    veces la misma clave devuelve el registro existente en lugar de fallar.
    """

    def __init__(self, session: Session, notifier: ChangeNotifier = change_notifier):
        self.session = session
        self.notifier = notifier

    def get_entry(self, entry_id: int) -> DriverRentLog:
        entry = self.session.get(DriverRentLog, entry_id)
        if not entry:
            raise NotFoundError(f"Rent log {entry_id} not found")
        return entry

    def get_by_key(self, driver_id: int, rent_date: date, shift: ShiftEnum) -> Optional[DriverRentLog]:
        return self.session.exec(
            select(DriverRentLog).where(
                DriverRentLog.driver_id == driver_id,
                DriverRentLog.rent_date == rent_date,
                DriverRentLog.shift == shift,
            )
        ).first()

    def get_or_create(
        self,
        driver_id: int,
        rent_date: date,
        shift: ShiftEnum,
        vehicle_id: int,
        amount: int,
        notify: bool = True
    ) -> Tuple[DriverRentLog, bool]:
        """Devuelve (registro, creado). El primer escritor gana."""
        if amount < 0:
            raise ValidationError("Rent amount cannot be negative")

        existing = self.get_by_key(driver_id, rent_date, shift)
        if existing:
            return existing, False

        week_start, week_end = get_week_boundaries(rent_date)
        entry = DriverRentLog(
            driver_id=driver_id,
            vehicle_id=vehicle_id,
            rent_date=rent_date,
            shift=shift,
            rent=amount,
            paid=False,
            week_start=week_start,
            week_end=week_end,
        )
        self.session.add(entry)
        try:
            self.session.commit()
        except IntegrityError:
            # Otra petición creó la misma clave entre la lectura y el insert
            self.session.rollback()
            existing = self.get_by_key(driver_id, rent_date, shift)
            if existing is None:
                raise
            return existing, False

        self.session.refresh(entry)
        if notify:
            self.notifier.publish(ChangeEvent.LEDGER_CHANGED)
        return entry, True

    def upsert_if_absent(
        self,
        driver_id: int,
        rent_date: date,
        shift: ShiftEnum,
        vehicle_id: int,
        amount: int
    ) -> DriverRentLog:
        entry, _ = self.get_or_create(
            driver_id, rent_date, shift, vehicle_id, amount)
        return entry

    def set_paid(self, entry_id: int, paid: bool) -> DriverRentLog:
        """Marca pagado/no pagado. Repetir el mismo estado no cambia nada."""
        entry = self.get_entry(entry_id)
        if entry.paid == paid:
            return entry

        entry.paid = paid
        self.session.add(entry)
        self.session.commit()
        self.session.refresh(entry)
        self.notifier.publish(ChangeEvent.LEDGER_CHANGED)
        return entry

    def delete_for_driver_date(
        self,
        driver_id: int,
        rent_date: date,
        shift: Optional[ShiftEnum] = None,
        notify: bool = True
    ) -> int:
        """
        Elimina los registros del conductor en la fecha (opcionalmente solo
        un turno). Los registros ya pagados también se eliminan.
        """
        conditions = [
            DriverRentLog.driver_id == driver_id,
            DriverRentLog.rent_date == rent_date,
        ]
        if shift is not None:
            conditions.append(DriverRentLog.shift == shift)

        entries = self.session.exec(select(DriverRentLog).where(*conditions)).all()
        for entry in entries:
            if entry.paid:
                logger.warning(
                    f"Discarding paid rent log {entry.id} (driver {driver_id}, {rent_date})")
            self.session.delete(entry)
        self.session.commit()
        removed = len(entries)
        if removed and notify:
            self.notifier.publish(ChangeEvent.LEDGER_CHANGED)
        return removed

    def list_for_window(
        self,
        vehicle_id: int,
        week_start: date,
        week_end: date,
        driver_ids: Optional[List[int]] = None
    ) -> List[DriverRentLog]:
        query = select(DriverRentLog).where(
            DriverRentLog.vehicle_id == vehicle_id,
            DriverRentLog.rent_date >= week_start,
            DriverRentLog.rent_date <= week_end,
        )
        if driver_ids:
            query = query.where(DriverRentLog.driver_id.in_(driver_ids))
        return list(self.session.exec(query.order_by(DriverRentLog.id)))

    def list_unpaid(self) -> List[DriverRentLogRead]:
        return self._list(only_unpaid=True)

    def list_all(self) -> List[DriverRentLogRead]:
        return self._list(only_unpaid=False)

    def _list(self, only_unpaid: bool) -> List[DriverRentLogRead]:
        query = (
            select(DriverRentLog, Driver.name, Vehicle.vehicle_number)
            .join(Driver, Driver.id == DriverRentLog.driver_id, isouter=True)
            .join(Vehicle, Vehicle.id == DriverRentLog.vehicle_id, isouter=True)
        )
        if only_unpaid:
            query = query.where(DriverRentLog.paid == False)
        query = query.order_by(DriverRentLog.rent_date.desc(), DriverRentLog.id)

        rows = self.session.exec(query).all()
        return [
            DriverRentLogRead(
                **entry.model_dump(),
                driver_name=driver_name,
                vehicle_number=vehicle_number,
            )
            for entry, driver_name, vehicle_number in rows
        ]
