from fastapi import APIRouter, Query
from typing import List

from app.models.vehicle import ProviderEnum
from app.models.weekly_summary import RentalInfo, RentalSlab
from app.services.rental_slab_service import get_all_slabs, get_rental_info

router = APIRouter(prefix="/rental-slabs", tags=["rental-slabs"])


@router.get("/{provider}", response_model=List[RentalSlab])
def get_slabs(provider: ProviderEnum):
    return get_all_slabs(provider)


@router.get("/{provider}/info", response_model=RentalInfo)
def get_slab_info(provider: ProviderEnum, trip_count: int = Query(..., ge=0)):
    """Tarifa actual y viajes que faltan para el siguiente tramo más barato."""
    return get_rental_info(provider, trip_count)
