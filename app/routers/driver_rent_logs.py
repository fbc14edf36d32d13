from fastapi import APIRouter
from typing import List, Optional

from app.core.db import SessionDep
from app.models.driver_rent_log import DriverRentLog, DriverRentLogRead, RentLogStatusUpdate, RepairReport
from app.services.rent_ledger_service import RentLedgerService
from app.services.trip_ledger_service import TripLedgerService

router = APIRouter(prefix="/driver-rent-logs", tags=["driver-rent-logs"])


@router.get("/", response_model=List[DriverRentLogRead])
def get_all_rent_logs(session: SessionDep):
    return RentLedgerService(session).list_all()


@router.get("/unpaid", response_model=List[DriverRentLogRead])
def get_unpaid_rent_logs(session: SessionDep):
    return RentLedgerService(session).list_unpaid()


@router.patch("/{rent_log_id}/status", response_model=DriverRentLog)
def update_rent_log_status(
    rent_log_id: int,
    session: SessionDep,
    data: Optional[RentLogStatusUpdate] = None
):
    """
    Marca la renta como pagada o no pagada. Repetir la misma petición no
    tiene efecto adicional.
    """
    paid = data.paid if data else True
    return RentLedgerService(session).set_paid(rent_log_id, paid)


@router.post("/repair", response_model=RepairReport)
def repair_rent_logs(session: SessionDep):
    """Crea los registros de renta que falten para viajes existentes."""
    return TripLedgerService(session).repair_all()
