# Módulo models: define las clases y estructuras de datos principales de la aplicación (SQLModel/Pydantic)
# Las tablas con claves foráneas deben importarse después de las tablas que referencian

from .vehicle import Vehicle, ProviderEnum
from .driver import Driver
from .vehicle_driver_assignment import VehicleDriverAssignment, VehicleDriverAssignmentCreate
from .trip import Trip, TripCreate, TripUpdate, TripRead, ShiftEnum
from .substitute_driver import SubstituteDriver, SubstituteDriverCreate, SUBSTITUTE_CHARGES
from .driver_rent_log import DriverRentLog, DriverRentLogRead, RentStatus
from .weekly_settlement import WeeklySettlement, WeekState
