from datetime import date
from fastapi import APIRouter, Query
from typing import List, Optional

from app.core.db import SessionDep
from app.models.vehicle_driver_assignment import VehicleDriverAssignment
from app.models.weekly_summary import WeekOption, WeeklySettlementData, WeeklySummary
from app.services.fleet_service import FleetService
from app.services.weekly_settlement_service import WeeklySettlementCalculator

router = APIRouter(prefix="/vehicles", tags=["vehicles"])


@router.get("/{vehicle_id}/weekly-summary", response_model=WeeklySummary)
def get_weekly_summary(
    vehicle_id: int,
    session: SessionDep,
    week_start: Optional[date] = Query(None)
):
    """Resumen de la semana (por defecto la actual) con información del tramo."""
    return WeeklySettlementCalculator(session).get_weekly_summary(vehicle_id, week_start)


@router.get("/{vehicle_id}/weekly-settlement", response_model=WeeklySettlementData)
def calculate_weekly_settlement(
    vehicle_id: int,
    session: SessionDep,
    week_start: date = Query(...)
):
    return WeeklySettlementCalculator(session).calculate(vehicle_id, week_start)


@router.get("/{vehicle_id}/weeks", response_model=List[WeekOption])
def get_available_weeks(vehicle_id: int, session: SessionDep):
    return WeeklySettlementCalculator(session).get_available_weeks(vehicle_id)


@router.get("/{vehicle_id}/assignment", response_model=VehicleDriverAssignment)
def get_vehicle_assignment(vehicle_id: int, session: SessionDep):
    return FleetService(session).get_vehicle_assignment(vehicle_id)
