"""
Mantiene el ledger de rentas sincronizado con el registro de viajes.

- Crear un viaje crea (si no existe) el registro de renta del conductor para
  ese día y turno, con el monto según su alojamiento.
- Eliminar un viaje elimina su registro de renta, aunque ya estuviera pagado:
  se prioriza la consistencia sobre el historial de pago.
- `repair_all` crea los registros que falten; se puede repetir sin efecto.
"""
import logging
from datetime import date
from typing import List, Tuple

from sqlmodel import Session, select

from app.core.exceptions import NotFoundError, ValidationError
from app.models.driver import Driver
from app.models.driver_rent_log import (
    DriverRentLog, RentStatus, RepairFailure, RepairReport, TripRentStatus
)
from app.models.trip import ShiftEnum, Trip, TripCreate, TripRead, TripUpdate
from app.models.vehicle import Vehicle
from app.services.change_notifier import ChangeEvent, ChangeNotifier, change_notifier
from app.services.fleet_service import FleetService
from app.services.rent_ledger_service import RentLedgerService
from app.services.rental_slab_service import get_driver_rent
from app.services.settlement_processor_service import SettlementProcessor
from app.utils.week_utils import get_week_boundaries, is_same_week

logger = logging.getLogger(__name__)


class TripLedgerService:
    def __init__(self, session: Session, notifier: ChangeNotifier = change_notifier):
        self.session = session
        self.notifier = notifier
        self.fleet = FleetService(session)
        self.ledger = RentLedgerService(session, notifier)

    def get_trip(self, trip_id: int) -> Trip:
        trip = self.session.get(Trip, trip_id)
        if not trip:
            raise NotFoundError(f"Trip {trip_id} not found")
        return trip

    def get_recent_trips(self, limit: int = 10) -> List[TripRead]:
        rows = self.session.exec(
            select(Trip, Driver.name, Vehicle.vehicle_number)
            .join(Driver, Driver.id == Trip.driver_id, isouter=True)
            .join(Vehicle, Vehicle.id == Trip.vehicle_id, isouter=True)
            .order_by(Trip.trip_date.desc(), Trip.id.desc())
            .limit(limit)
        ).all()
        return [
            TripRead(**trip.model_dump(), driver_name=driver_name,
                     vehicle_number=vehicle_number)
            for trip, driver_name, vehicle_number in rows
        ]

    def ensure_rent_log(self, trip: Trip, notify: bool = True) -> Tuple[DriverRentLog, bool]:
        """Garantiza el registro de renta del viaje. Devuelve (registro, creado)."""
        existing = self.ledger.get_by_key(trip.driver_id, trip.trip_date, trip.shift)
        if existing:
            return existing, False

        driver = self.fleet.get_driver(trip.driver_id)
        return self.ledger.get_or_create(
            driver_id=trip.driver_id,
            rent_date=trip.trip_date,
            shift=trip.shift,
            vehicle_id=trip.vehicle_id,
            amount=get_driver_rent(driver.has_accommodation),
            notify=notify,
        )

    def create_trip(self, data: TripCreate) -> Trip:
        if data.trip_count < 0:
            raise ValidationError("Trip count cannot be negative")
        self.fleet.get_driver(data.driver_id)
        self.fleet.get_vehicle(data.vehicle_id)

        week_start, week_end = get_week_boundaries(data.trip_date)
        trip = Trip(**data.model_dump(), week_start=week_start, week_end=week_end)
        self.session.add(trip)
        self.session.commit()
        self.session.refresh(trip)

        self.ensure_rent_log(trip)
        self.notifier.publish(ChangeEvent.TRIPS_CHANGED)
        self._refresh_settlement(trip.vehicle_id, trip.trip_date)
        return trip

    def update_trip(self, trip_id: int, data: TripUpdate) -> Trip:
        trip = self.get_trip(trip_id)
        update_data = data.model_dump(exclude_unset=True)
        if update_data.get("trip_count") is not None and update_data["trip_count"] < 0:
            raise ValidationError("Trip count cannot be negative")
        if "driver_id" in update_data:
            self.fleet.get_driver(update_data["driver_id"])
        if "vehicle_id" in update_data:
            self.fleet.get_vehicle(update_data["vehicle_id"])

        old_key = (trip.driver_id, trip.trip_date, trip.shift)
        old_vehicle_id = trip.vehicle_id

        for key, value in update_data.items():
            setattr(trip, key, value)
        trip.week_start, trip.week_end = get_week_boundaries(trip.trip_date)
        self.session.add(trip)
        self.session.flush()

        moved = False
        if old_key != (trip.driver_id, trip.trip_date, trip.shift):
            self._release_rent_log(*old_key)
        elif trip.vehicle_id != old_vehicle_id:
            moved = self._move_rent_log(old_key, trip.vehicle_id)
        self.session.commit()
        self.session.refresh(trip)

        if moved:
            self.notifier.publish(ChangeEvent.LEDGER_CHANGED)
        self.ensure_rent_log(trip)
        self.notifier.publish(ChangeEvent.TRIPS_CHANGED)
        self._refresh_settlement(old_vehicle_id, old_key[1])
        if trip.vehicle_id != old_vehicle_id or not is_same_week(trip.trip_date, old_key[1]):
            self._refresh_settlement(trip.vehicle_id, trip.trip_date)
        return trip

    def delete_trip(self, trip_id: int) -> int:
        """Elimina el viaje y su registro de renta. Devuelve cuántos registros se eliminaron."""
        trip = self.get_trip(trip_id)
        vehicle_id, trip_date = trip.vehicle_id, trip.trip_date
        key = (trip.driver_id, trip.trip_date, trip.shift)

        self.session.delete(trip)
        self.session.flush()
        removed = self._release_rent_log(*key)
        self.session.commit()

        self.notifier.publish(ChangeEvent.TRIPS_CHANGED)
        self._refresh_settlement(vehicle_id, trip_date)
        return removed

    def _release_rent_log(self, driver_id: int, trip_date: date, shift: ShiftEnum) -> int:
        # Otro viaje duplicado del mismo día y turno sigue necesitando el registro
        remaining = self.session.exec(
            select(Trip).where(
                Trip.driver_id == driver_id,
                Trip.trip_date == trip_date,
                Trip.shift == shift,
            )
        ).first()
        if remaining:
            return 0
        return self.ledger.delete_for_driver_date(driver_id, trip_date, shift)

    def _move_rent_log(self, key: Tuple[int, date, ShiftEnum], vehicle_id: int) -> bool:
        # mismo conductor, día y turno en otro vehículo: la renta sigue al viaje
        entry = self.ledger.get_by_key(*key)
        if entry is None or entry.vehicle_id == vehicle_id:
            return False
        entry.vehicle_id = vehicle_id
        self.session.add(entry)
        return True

    def _refresh_settlement(self, vehicle_id: int, day: date) -> None:
        SettlementProcessor(self.session, self.notifier).refresh_week(vehicle_id, day)

    def get_rent_status(self, trip_id: int) -> TripRentStatus:
        trip = self.get_trip(trip_id)
        entry = self.ledger.get_by_key(trip.driver_id, trip.trip_date, trip.shift)
        if entry is None:
            logger.warning(
                f"Reconciliation drift: trip {trip.id} has no rent log, creating it")
            entry, _ = self.ensure_rent_log(trip)
            status = RentStatus.AUTO_CREATED
        elif entry.paid:
            status = RentStatus.PAID
        else:
            status = RentStatus.UNPAID
        return TripRentStatus(
            trip_id=trip.id, status=status, rent_log_id=entry.id, rent=entry.rent)

    def repair_all(self) -> RepairReport:
        """Crea los registros de renta que falten. Un fallo no detiene el barrido."""
        report = RepairReport()
        existing_keys = {
            tuple(row) for row in self.session.exec(
                select(DriverRentLog.driver_id, DriverRentLog.rent_date, DriverRentLog.shift)
            ).all()
        }
        trips = self.session.exec(select(Trip).order_by(Trip.id)).all()
        # los objetos expiran tras cada commit; se guardan las claves antes
        snapshot = [(trip.id, (trip.driver_id, trip.trip_date, trip.shift)) for trip in trips]

        for trip, (trip_id, key) in zip(trips, snapshot):
            report.trips_checked += 1
            if key in existing_keys:
                continue
            try:
                entry, created = self.ensure_rent_log(trip, notify=False)
            except Exception as e:
                logger.exception(f"Failed to repair rent log for trip {trip_id}")
                self.session.rollback()
                report.failures.append(RepairFailure(trip_id=trip_id, error=str(e)))
                continue
            existing_keys.add(key)
            if created:
                logger.warning(
                    f"Reconciliation drift: created rent log {entry.id} for trip {trip_id}")
                report.repaired += 1

        if report.repaired:
            self.notifier.publish(ChangeEvent.LEDGER_CHANGED)
        return report
