"""
Tabla de tarifas por tramos (slabs) de cada proveedor.

El proveedor cobra una tarifa diaria que depende del total de viajes de la
semana: más viajes, tarifa más barata. Funciones puras, sin acceso a BD.
"""
from typing import Dict, List, Optional, Tuple, Union

from app.core.config import settings
from app.core.exceptions import ValidationError
from app.models.substitute_driver import SUBSTITUTE_CHARGES
from app.models.vehicle import ProviderEnum
from app.models.weekly_summary import NextSlab, RentalInfo, RentalSlab

# (mínimo de viajes inclusivo, tarifa diaria), del tramo más alto al más bajo
SLAB_TABLES: Dict[ProviderEnum, List[Tuple[int, int]]] = {
    ProviderEnum.LETZRYD: [
        (140, 260),
        (125, 380),
        (110, 470),
        (80, 600),
        (65, 710),
        (0, 950),
    ],
    ProviderEnum.PMV: [
        (140, 150),
        (135, 249),
        (120, 444),
        (80, 640),
        (65, 750),
        (0, 949),
    ],
}


def _get_table(provider: Union[ProviderEnum, str]) -> List[Tuple[int, int]]:
    try:
        return SLAB_TABLES[ProviderEnum(provider)]
    except ValueError:
        raise ValidationError(f"Unknown provider: {provider}")


def _check_trip_count(trip_count: int) -> None:
    if isinstance(trip_count, bool) or not isinstance(trip_count, int):
        raise ValidationError("Trip count must be an integer")
    if trip_count < 0:
        raise ValidationError("Trip count cannot be negative")


def resolve_rate(provider: Union[ProviderEnum, str], trip_count: int) -> int:
    """Tarifa diaria del primer tramo cuyo mínimo alcanza `trip_count`."""
    _check_trip_count(trip_count)
    table = _get_table(provider)
    for min_trips, rate in table:
        if trip_count >= min_trips:
            return rate
    return table[-1][1]


def next_target(provider: Union[ProviderEnum, str], trip_count: int) -> NextSlab:
    """
    Siguiente tramo más barato por encima del conteo actual.

    Si ya está en el tramo más barato devuelve la tarifa actual con
    trips_needed = 0.
    """
    current_rate = resolve_rate(provider, trip_count)
    next_slab = None
    for min_trips, rate in _get_table(provider):
        if min_trips > trip_count and rate < current_rate:
            # la tabla va de mayor a menor: el último que cumple es el más cercano
            next_slab = NextSlab(rate=rate, trips_needed=min_trips - trip_count)
    if next_slab is None:
        return NextSlab(rate=current_rate, trips_needed=0)
    return next_slab


def get_all_slabs(provider: Union[ProviderEnum, str]) -> List[RentalSlab]:
    slabs = []
    upper: Optional[int] = None
    for min_trips, rate in _get_table(provider):
        slabs.append(RentalSlab(min_trips=min_trips, max_trips=upper, rate=rate))
        upper = min_trips - 1
    return slabs


def get_rental_info(provider: Union[ProviderEnum, str], trip_count: int) -> RentalInfo:
    current_rate = resolve_rate(provider, trip_count)
    target = next_target(provider, trip_count)
    next_better_slab = target if target.trips_needed > 0 else None

    if next_better_slab:
        optimization_tip = (
            f"{next_better_slab.trips_needed} more trips needed to reach "
            f"₹{next_better_slab.rate}/day slab. Current: {trip_count} trips, "
            f"Target: {trip_count + next_better_slab.trips_needed} trips."
        )
    else:
        optimization_tip = "You've reached the best slab!"

    return RentalInfo(
        provider=ProviderEnum(provider),
        trip_count=trip_count,
        current_rate=current_rate,
        weekly_cost=current_rate * settings.DAYS_PER_WEEK,
        next_better_slab=next_better_slab,
        optimization_tip=optimization_tip,
    )


def get_driver_rent(has_accommodation: bool) -> int:
    """Renta diaria que paga el conductor según tenga alojamiento o no."""
    if has_accommodation:
        return settings.RENT_WITH_ACCOMMODATION
    return settings.RENT_WITHOUT_ACCOMMODATION


def get_substitute_charge(shift_hours: int) -> int:
    try:
        return SUBSTITUTE_CHARGES[shift_hours]
    except KeyError:
        raise ValidationError(
            f"shift_hours must be one of {sorted(SUBSTITUTE_CHARGES)}")
