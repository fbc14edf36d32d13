from datetime import date
from fastapi import APIRouter, status
from typing import List, Optional

from app.core.db import SessionDep
from app.models.substitute_driver import SubstituteDriver, SubstituteDriverCreate
from app.services.substitute_driver_service import SubstituteDriverService

router = APIRouter(prefix="/substitute-drivers", tags=["substitute-drivers"])


@router.post("/", response_model=SubstituteDriver, status_code=status.HTTP_201_CREATED, description="""
Registra un conductor suplente. El cargo depende de `shift_hours`:
6h = 250, 8h = 350, 12h = 500.
""")
def create_substitute_driver(data: SubstituteDriverCreate, session: SessionDep):
    return SubstituteDriverService(session).create_substitute(data)


@router.get("/", response_model=List[SubstituteDriver])
def list_substitute_drivers(
    session: SessionDep,
    vehicle_id: Optional[int] = None,
    week_start: Optional[date] = None,
    week_end: Optional[date] = None
):
    return SubstituteDriverService(session).get_substitutes(vehicle_id, week_start, week_end)


@router.delete("/{substitute_id}", status_code=status.HTTP_204_NO_CONTENT)
def delete_substitute_driver(substitute_id: int, session: SessionDep):
    SubstituteDriverService(session).delete_substitute(substitute_id)
