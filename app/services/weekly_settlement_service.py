"""
Cálculo de la liquidación semanal de un vehículo.

Para la semana que contiene la fecha pedida:
1. Total de viajes = viajes regulares + viajes de suplentes (1 si no se indicó).
2. Tarifa diaria según el tramo del proveedor.
3. Renta a la empresa = tarifa x 7, sin importar los días con actividad.
4. Ingreso = renta del ledger de los conductores asignados (pagada o no)
   + cargos de suplentes.
5. Ganancia = ingreso - renta a la empresa.

Solo lee la base de datos; con los mismos datos devuelve el mismo resultado.
"""
from collections import defaultdict
from datetime import date
from typing import Dict, List, Optional

from sqlmodel import Session, select

from app.core.config import settings
from app.models.driver_rent_log import DriverRentLog
from app.models.substitute_driver import SubstituteDriver
from app.models.trip import Trip
from app.models.weekly_summary import (
    DriverWeekBreakdown, SubstituteWeekBreakdown, WeekOption,
    WeeklySettlementData, WeeklySummary
)
from app.services.fleet_service import FleetService
from app.services.rent_ledger_service import RentLedgerService
from app.services.rental_slab_service import get_rental_info, resolve_rate
from app.utils.week_utils import get_current_week_boundaries, get_week_boundaries, week_label


class WeeklySettlementCalculator:
    def __init__(self, session: Session):
        self.session = session
        self.fleet = FleetService(session)
        self.ledger = RentLedgerService(session)

    def get_trips(self, vehicle_id: int, week_start: date, week_end: date) -> List[Trip]:
        return list(self.session.exec(
            select(Trip).where(
                Trip.vehicle_id == vehicle_id,
                Trip.trip_date >= week_start,
                Trip.trip_date <= week_end,
            ).order_by(Trip.id)
        ))

    def get_substitutes(self, vehicle_id: int, week_start: date, week_end: date) -> List[SubstituteDriver]:
        return list(self.session.exec(
            select(SubstituteDriver).where(
                SubstituteDriver.vehicle_id == vehicle_id,
                SubstituteDriver.work_date >= week_start,
                SubstituteDriver.work_date <= week_end,
            ).order_by(SubstituteDriver.id)
        ))

    def get_ledger_rows(self, vehicle_id: int, week_start: date, week_end: date) -> List[DriverRentLog]:
        """Registros del ledger de la semana, limitados a los conductores asignados si los hay."""
        assignment = self.fleet.get_assignment(vehicle_id)
        driver_ids = assignment.driver_ids() if assignment else None
        return self.ledger.list_for_window(vehicle_id, week_start, week_end, driver_ids)

    def calculate(self, vehicle_id: int, week_date: date) -> WeeklySettlementData:
        vehicle = self.fleet.get_vehicle(vehicle_id)
        week_start, week_end = get_week_boundaries(week_date)

        trips = self.get_trips(vehicle_id, week_start, week_end)
        substitutes = self.get_substitutes(vehicle_id, week_start, week_end)
        rent_logs = self.get_ledger_rows(vehicle_id, week_start, week_end)

        regular_trips = sum(trip.trip_count for trip in trips)
        substitute_trips = sum(_substitute_trips(sub) for sub in substitutes)
        total_trips = regular_trips + substitute_trips

        rental_rate = resolve_rate(vehicle.provider, total_trips)
        company_rent = rental_rate * settings.DAYS_PER_WEEK

        driver_rent = sum(log.rent for log in rent_logs)
        substitute_rent = sum(sub.charge for sub in substitutes)
        total_rent = driver_rent + substitute_rent

        return WeeklySettlementData(
            vehicle_id=vehicle_id,
            week_start=week_start,
            week_end=week_end,
            total_trips=total_trips,
            rental_rate=rental_rate,
            company_rent=company_rent,
            driver_rent=driver_rent,
            substitute_rent=substitute_rent,
            total_rent=total_rent,
            profit=total_rent - company_rent,
            ledger_entries=len(rent_logs),
            drivers=self._driver_breakdown(rent_logs),
            substitutes=[
                SubstituteWeekBreakdown(
                    id=sub.id,
                    name=sub.name,
                    shift_hours=sub.shift_hours,
                    charge=sub.charge,
                    trip_count=_substitute_trips(sub),
                )
                for sub in substitutes
            ],
        )

    def _driver_breakdown(self, rent_logs: List[DriverRentLog]) -> List[DriverWeekBreakdown]:
        by_driver: Dict[int, List[DriverRentLog]] = defaultdict(list)
        for log in rent_logs:
            by_driver[log.driver_id].append(log)

        breakdown = []
        for driver_id in sorted(by_driver):
            logs = by_driver[driver_id]
            driver = self.fleet.get_driver(driver_id)
            breakdown.append(DriverWeekBreakdown(
                id=driver.id,
                name=driver.name,
                days_worked=len({log.rent_date for log in logs}),
                daily_rent=logs[0].rent,
                total_rent=sum(log.rent for log in logs),
                paid=all(log.paid for log in logs),
            ))
        return breakdown

    def get_available_weeks(self, vehicle_id: int) -> List[WeekOption]:
        """Semanas con viajes o suplentes para el vehículo, la más reciente primero."""
        self.fleet.get_vehicle(vehicle_id)
        trip_dates = self.session.exec(
            select(Trip.trip_date).where(Trip.vehicle_id == vehicle_id).distinct()
        ).all()
        substitute_dates = self.session.exec(
            select(SubstituteDriver.work_date).where(
                SubstituteDriver.vehicle_id == vehicle_id).distinct()
        ).all()

        weeks = {get_week_boundaries(day) for day in [*trip_dates, *substitute_dates]}
        return [
            WeekOption(week_start=start, week_end=end, label=week_label(start, end))
            for start, end in sorted(weeks, reverse=True)
        ]

    def get_weekly_summary(self, vehicle_id: int, week_date: Optional[date] = None) -> WeeklySummary:
        vehicle = self.fleet.get_vehicle(vehicle_id)
        if week_date is None:
            week_date = get_current_week_boundaries()[0]
        current_week = self.calculate(vehicle_id, week_date)
        return WeeklySummary(
            current_week=current_week,
            rental_info=get_rental_info(vehicle.provider, current_week.total_trips),
            available_weeks=self.get_available_weeks(vehicle_id),
        )


def _substitute_trips(substitute: SubstituteDriver) -> int:
    return 1 if substitute.trip_count is None else substitute.trip_count
