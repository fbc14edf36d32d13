import logging
from datetime import date, datetime
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError
from sqlmodel import Session, select

from app.core.config import settings
from app.core.exceptions import (
    AlreadySettledError, NoActivityError, NotFoundError, SettlementStateError
)
from app.models.vehicle import Vehicle
from app.models.weekly_settlement import (
    ProfitBreakdown, ProfitCalculation, ProfitExpenses, ProfitGraphPoint, ProfitRevenue,
    SettlementBatchItem, SettlementBatchReport, WeekState, WeekStatus, WeeklySettlement
)
from app.models.weekly_summary import WeeklySettlementData
from app.services.change_notifier import ChangeEvent, ChangeNotifier, change_notifier
from app.services.fleet_service import FleetService
from app.services.weekly_settlement_service import WeeklySettlementCalculator
from app.utils.week_utils import get_current_week_boundaries, get_week_boundaries

logger = logging.getLogger(__name__)


class SettlementProcessor:
    """
    Liquidación semanal por (vehículo, semana): NO_ACTIVITY -> OPEN -> SETTLED.

    Una liquidación es un registro de auditoría: no se sobrescribe con un
    segundo `process`; la restricción única (vehicle_id, week_start, week_end)
    garantiza un solo registro aunque dos peticiones lleguen a la vez.
    """

    def __init__(self, session: Session, notifier: ChangeNotifier = change_notifier):
        self.session = session
        self.notifier = notifier
        self.fleet = FleetService(session)
        self.calculator = WeeklySettlementCalculator(session)

    def _week(self, week: Optional[date]) -> Tuple[date, date]:
        if week is None:
            return get_current_week_boundaries()
        return get_week_boundaries(week)

    def find_settlement(self, vehicle_id: int, week_start: date, week_end: date) -> Optional[WeeklySettlement]:
        return self.session.exec(
            select(WeeklySettlement).where(
                WeeklySettlement.vehicle_id == vehicle_id,
                WeeklySettlement.week_start == week_start,
                WeeklySettlement.week_end == week_end,
            )
        ).first()

    def get_status(self, vehicle_id: int, week: Optional[date] = None) -> WeekStatus:
        self.fleet.get_vehicle(vehicle_id)
        week_start, week_end = self._week(week)

        settlement = self.find_settlement(vehicle_id, week_start, week_end)
        if settlement:
            state = WeekState.SETTLED
        elif self.calculator.calculate(vehicle_id, week_start).has_activity():
            state = WeekState.OPEN
        else:
            state = WeekState.NO_ACTIVITY

        return WeekStatus(
            vehicle_id=vehicle_id,
            state=state,
            is_settled=state == WeekState.SETTLED,
            can_settle=state == WeekState.OPEN,
            week_start=week_start,
            week_end=week_end,
            settlement=settlement,
        )

    def process(
        self,
        vehicle_id: int,
        week: Optional[date] = None,
        notes: Optional[str] = None,
        processed_by: Optional[str] = None
    ) -> WeeklySettlement:
        week_start, week_end = self._week(week)

        # Bloquea el vehículo (FOR UPDATE) para serializar liquidaciones concurrentes
        vehicle = self.session.exec(
            select(Vehicle).where(Vehicle.id == vehicle_id).with_for_update()
        ).first()
        if not vehicle:
            self.session.rollback()
            raise NotFoundError(f"Vehicle {vehicle_id} not found")

        if self.find_settlement(vehicle_id, week_start, week_end):
            self.session.rollback()
            raise AlreadySettledError(
                f"Settlement already exists for vehicle {vehicle_id} for week {week_start}")

        data = self.calculator.calculate(vehicle_id, week_start)
        if not data.has_activity():
            self.session.rollback()
            raise NoActivityError(
                f"No activity for vehicle {vehicle_id} in week {week_start}")

        settlement = WeeklySettlement(
            vehicle_id=vehicle_id,
            week_start=week_start,
            week_end=week_end,
            processed_by=processed_by or "System",
            notes=notes,
            **_settlement_figures(data),
        )
        self.session.add(settlement)
        try:
            self.session.commit()
        except IntegrityError:
            self.session.rollback()
            raise AlreadySettledError(
                f"Settlement already exists for vehicle {vehicle_id} for week {week_start}")

        self.session.refresh(settlement)
        logger.info(
            f"Settlement {settlement.id} processed for vehicle {vehicle.vehicle_number} "
            f"week {week_start}: profit {settlement.profit}")
        self.notifier.publish(ChangeEvent.SETTLEMENTS_CHANGED)
        return settlement

    def process_all(self, week: Optional[date] = None, processed_by: Optional[str] = None) -> SettlementBatchReport:
        """Liquida todos los vehículos; un fallo no detiene el lote."""
        week_start, week_end = self._week(week)
        report = SettlementBatchReport(week_start=week_start, week_end=week_end)

        for vehicle in self.fleet.list_vehicles():
            vehicle_id, vehicle_number = vehicle.id, vehicle.vehicle_number
            try:
                settlement = self.process(
                    vehicle_id, week_start, processed_by=processed_by)
            except SettlementStateError as e:
                report.skipped += 1
                report.results.append(SettlementBatchItem(
                    vehicle_id=vehicle_id,
                    vehicle_number=vehicle_number,
                    outcome=e.outcome,
                    error=e.detail,
                ))
            except Exception as e:
                logger.exception(
                    f"Failed to process settlement for vehicle {vehicle_number}")
                self.session.rollback()
                report.failed += 1
                report.results.append(SettlementBatchItem(
                    vehicle_id=vehicle_id,
                    vehicle_number=vehicle_number,
                    outcome="failed",
                    error=str(e),
                ))
            else:
                report.processed += 1
                report.results.append(SettlementBatchItem(
                    vehicle_id=vehicle_id,
                    vehicle_number=vehicle_number,
                    outcome="settled",
                    settlement_id=settlement.id,
                    profit=settlement.profit,
                ))
        return report

    def refresh_week(self, vehicle_id: int, week: date) -> Optional[WeeklySettlement]:
        """
        Recalcula en su sitio la liquidación existente de la semana, si la hay,
        tras un cambio en viajes o suplentes.
        """
        week_start, week_end = get_week_boundaries(week)
        settlement = self.find_settlement(vehicle_id, week_start, week_end)
        if not settlement:
            return None

        data = self.calculator.calculate(vehicle_id, week_start)
        for key, value in _settlement_figures(data).items():
            setattr(settlement, key, value)
        settlement.recalculated_at = datetime.utcnow()

        self.session.add(settlement)
        self.session.commit()
        self.session.refresh(settlement)
        self.notifier.publish(ChangeEvent.SETTLEMENTS_CHANGED)
        return settlement

    def list_settlements(self, vehicle_id: Optional[int] = None) -> List[WeeklySettlement]:
        query = select(WeeklySettlement)
        if vehicle_id is not None:
            query = query.where(WeeklySettlement.vehicle_id == vehicle_id)
        query = query.order_by(WeeklySettlement.week_start.desc(), WeeklySettlement.id)
        return list(self.session.exec(query))

    def get_settlement(self, settlement_id: int) -> WeeklySettlement:
        settlement = self.session.get(WeeklySettlement, settlement_id)
        if not settlement:
            raise NotFoundError(f"Settlement {settlement_id} not found")
        return settlement

    def set_paid(self, settlement_id: int, paid: bool) -> WeeklySettlement:
        """Marca la liquidación como pagada al proveedor. Idempotente."""
        settlement = self.get_settlement(settlement_id)
        if settlement.paid == paid:
            return settlement

        settlement.paid = paid
        self.session.add(settlement)
        self.session.commit()
        self.session.refresh(settlement)
        logger.info(f"Settlement {settlement_id} marked as {'paid' if paid else 'unpaid'}")
        self.notifier.publish(ChangeEvent.SETTLEMENTS_CHANGED)
        return settlement

    def profit_history(self, vehicle_id: Optional[int] = None) -> List[ProfitGraphPoint]:
        """
        Ganancia por liquidación, de la semana más antigua a la más reciente,
        con el desglose de ingresos (rentas de conductores y suplentes) y
        gastos (renta al proveedor).
        """
        query = select(WeeklySettlement, Vehicle).join(
            Vehicle, Vehicle.id == WeeklySettlement.vehicle_id)
        if vehicle_id is not None:
            query = query.where(WeeklySettlement.vehicle_id == vehicle_id)
        query = query.order_by(WeeklySettlement.week_start, WeeklySettlement.vehicle_id)

        points = []
        for settlement, vehicle in self.session.exec(query).all():
            points.append(ProfitGraphPoint(
                settlement_id=settlement.id,
                vehicle_id=vehicle.id,
                vehicle_number=vehicle.vehicle_number,
                week_start=settlement.week_start,
                week_end=settlement.week_end,
                total_trips=settlement.total_trips,
                profit=settlement.profit,
                paid=settlement.paid,
                breakdown=ProfitBreakdown(
                    revenue=ProfitRevenue(
                        drivers=settlement.driver_details or [],
                        substitutes=settlement.substitute_details or [],
                        driver_rent=settlement.driver_rent,
                        substitute_rent=settlement.substitute_rent,
                    ),
                    expenses=ProfitExpenses(
                        provider=vehicle.provider,
                        rental_rate=settlement.rental_rate,
                        days=settings.DAYS_PER_WEEK,
                        company_rent=settlement.company_rent,
                    ),
                    calculation=ProfitCalculation(
                        total_revenue=settlement.total_rent,
                        total_expenses=settlement.company_rent,
                        net_profit=settlement.profit,
                    ),
                ),
            ))
        return points


def _settlement_figures(data: WeeklySettlementData) -> dict:
    return {
        "total_trips": data.total_trips,
        "rental_rate": data.rental_rate,
        "company_rent": data.company_rent,
        "driver_rent": data.driver_rent,
        "substitute_rent": data.substitute_rent,
        "total_rent": data.total_rent,
        "profit": data.profit,
        "driver_details": [driver.model_dump() for driver in data.drivers],
        "substitute_details": [sub.model_dump() for sub in data.substitutes],
    }
