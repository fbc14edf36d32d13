from datetime import date
from fastapi import APIRouter, Query, status
from typing import List, Optional

from app.core.db import SessionDep
from app.models.weekly_settlement import (
    ProcessAllRequest, ProfitGraphPoint, SettlementBatchReport, SettlementRequest,
    SettlementStatusUpdate, WeekStatus, WeeklySettlement
)
from app.services.settlement_processor_service import SettlementProcessor

router = APIRouter(prefix="/settlements", tags=["settlements"])


@router.post("/", response_model=WeeklySettlement, status_code=status.HTTP_201_CREATED, description="""
Liquida la semana de un vehículo.

- `week_start`: cualquier fecha de la semana (por defecto la semana actual).
- Responde 409 si la semana ya está liquidada o no tuvo actividad.
""")
def process_settlement(data: SettlementRequest, session: SessionDep):
    service = SettlementProcessor(session)
    return service.process(
        data.vehicle_id,
        data.week_start,
        notes=data.notes,
        processed_by=data.processed_by
    )


@router.post("/process-all", response_model=SettlementBatchReport)
def process_all_settlements(
    session: SessionDep,
    data: Optional[ProcessAllRequest] = None
):
    """Liquida todos los vehículos y devuelve el resultado de cada uno."""
    data = data or ProcessAllRequest()
    service = SettlementProcessor(session)
    return service.process_all(data.week_start, processed_by=data.processed_by)


@router.get("/", response_model=List[WeeklySettlement])
def list_settlements(session: SessionDep, vehicle_id: Optional[int] = None):
    return SettlementProcessor(session).list_settlements(vehicle_id)


@router.get("/profit-graph", response_model=List[ProfitGraphPoint])
def get_profit_graph(session: SessionDep, vehicle_id: Optional[int] = None):
    """Ganancia y desglose de cada liquidación, de la semana más antigua a la más reciente."""
    return SettlementProcessor(session).profit_history(vehicle_id)


@router.get("/status/{vehicle_id}", response_model=WeekStatus)
def get_week_status(
    vehicle_id: int,
    session: SessionDep,
    week_start: Optional[date] = Query(None)
):
    return SettlementProcessor(session).get_status(vehicle_id, week_start)


@router.get("/{settlement_id}", response_model=WeeklySettlement)
def get_settlement(settlement_id: int, session: SessionDep):
    return SettlementProcessor(session).get_settlement(settlement_id)


@router.patch("/{settlement_id}/status", response_model=WeeklySettlement)
def update_settlement_status(
    settlement_id: int,
    session: SessionDep,
    data: Optional[SettlementStatusUpdate] = None
):
    """Marca la renta de la semana como pagada (o no) al proveedor."""
    paid = data.paid if data else True
    return SettlementProcessor(session).set_paid(settlement_id, paid)
