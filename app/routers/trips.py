from fastapi import APIRouter, Query, status
from typing import List

from app.core.db import SessionDep
from app.models.driver_rent_log import TripRentStatus
from app.models.trip import Trip, TripCreate, TripRead, TripUpdate
from app.services.trip_ledger_service import TripLedgerService

router = APIRouter(prefix="/trips", tags=["trips"])


@router.post("/", response_model=Trip, status_code=status.HTTP_201_CREATED, description="""
Registra los viajes de un conductor para un día y turno.

Crea automáticamente el registro de renta (no pagado) del conductor para ese
día y turno si todavía no existe.
""")
def create_trip(data: TripCreate, session: SessionDep):
    service = TripLedgerService(session)
    return service.create_trip(data)


@router.get("/recent", response_model=List[TripRead])
def get_recent_trips(session: SessionDep, limit: int = Query(10, ge=1, le=200)):
    service = TripLedgerService(session)
    return service.get_recent_trips(limit)


@router.put("/{trip_id}", response_model=Trip)
def update_trip(trip_id: int, data: TripUpdate, session: SessionDep):
    service = TripLedgerService(session)
    return service.update_trip(trip_id, data)


@router.delete("/{trip_id}")
def delete_trip(trip_id: int, session: SessionDep):
    """
    Elimina el viaje y su registro de renta (aunque ya estuviera pagado) y
    recalcula la liquidación de la semana si existía.
    """
    service = TripLedgerService(session)
    removed = service.delete_trip(trip_id)
    return {"message": "Trip deleted successfully", "removed_rent_logs": removed}


@router.get("/{trip_id}/rent-status", response_model=TripRentStatus)
def get_rent_status(trip_id: int, session: SessionDep):
    """
    Estado de la renta del viaje: paid, unpaid o auto_created (el registro
    faltaba y se creó en esta consulta).
    """
    service = TripLedgerService(session)
    return service.get_rent_status(trip_id)
