from sqlmodel import SQLModel, Field
from sqlalchemy import UniqueConstraint
from typing import List, Optional
from datetime import date, datetime
from enum import Enum
from .trip import ShiftEnum


class DriverRentLog(SQLModel, table=True):
    """
    Registro de renta diaria de un conductor (ledger).

    Invariantes:
    - Un único registro por (driver_id, rent_date, shift).
    - El monto se fija al crear el registro; cambios posteriores en el
      conductor no lo modifican.
    - Después de creado solo cambian `paid` y, si el viaje pasa a otro
      vehículo, `vehicle_id`.
    """
    __tablename__ = "driver_rent_logs"
    __table_args__ = (
        UniqueConstraint("driver_id", "rent_date", "shift",
                         name="uq_rent_log_driver_date_shift"),
    )
    id: Optional[int] = Field(default=None, primary_key=True)
    driver_id: int = Field(foreign_key="drivers.id", index=True)
    vehicle_id: int = Field(foreign_key="vehicles.id", index=True)
    rent_date: date = Field(index=True)
    shift: ShiftEnum
    rent: int = Field(nullable=False)
    paid: bool = Field(default=False)
    week_start: date = Field(nullable=False)
    week_end: date = Field(nullable=False)
    created_at: datetime = Field(
        default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        nullable=False,
        sa_column_kwargs={"onupdate": datetime.utcnow}
    )


class DriverRentLogRead(SQLModel):
    id: int
    driver_id: int
    vehicle_id: int
    rent_date: date
    shift: ShiftEnum
    rent: int
    paid: bool
    week_start: date
    week_end: date
    driver_name: Optional[str] = None
    vehicle_number: Optional[str] = None


class RentLogStatusUpdate(SQLModel):
    paid: bool = True


class RentStatus(str, Enum):
    PAID = "paid"
    UNPAID = "unpaid"
    AUTO_CREATED = "auto_created"


class TripRentStatus(SQLModel):
    trip_id: int
    status: RentStatus
    rent_log_id: int
    rent: int


class RepairFailure(SQLModel):
    trip_id: int
    error: str


class RepairReport(SQLModel):
    trips_checked: int = 0
    repaired: int = 0
    failures: List[RepairFailure] = []
