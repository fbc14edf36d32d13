from fastapi import APIRouter, status

from app.core.db import SessionDep
from app.models.vehicle_driver_assignment import VehicleDriverAssignment, VehicleDriverAssignmentCreate
from app.services.fleet_service import FleetService

router = APIRouter(prefix="/vehicle-assignments", tags=["vehicle-assignments"])


@router.post("/", response_model=VehicleDriverAssignment, status_code=status.HTTP_201_CREATED, description="""
Asigna el conductor de mañana y el de tarde a un vehículo (reemplaza la
asignación anterior). Solo el ledger de estos conductores cuenta como ingreso
del vehículo.
""")
def assign_drivers(data: VehicleDriverAssignmentCreate, session: SessionDep):
    return FleetService(session).assign_drivers(data)
