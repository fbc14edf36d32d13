from sqlmodel import SQLModel, Field
from pydantic import field_validator
from typing import Optional
from datetime import date, datetime
from enum import Enum


class ShiftEnum(str, Enum):
    MORNING = "morning"
    EVENING = "evening"


class TripBase(SQLModel):
    driver_id: int = Field(foreign_key="drivers.id", index=True)
    vehicle_id: int = Field(foreign_key="vehicles.id", index=True)
    trip_date: date = Field(index=True)
    shift: ShiftEnum
    trip_count: int = Field(default=0, ge=0)


class Trip(TripBase, table=True):
    __tablename__ = "trips"
    id: Optional[int] = Field(default=None, primary_key=True)
    week_start: date = Field(nullable=False)
    week_end: date = Field(nullable=False)
    created_at: datetime = Field(
        default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        nullable=False,
        sa_column_kwargs={"onupdate": datetime.utcnow}
    )


class TripCreate(TripBase):
    pass


class TripUpdate(SQLModel):
    driver_id: Optional[int] = None
    vehicle_id: Optional[int] = None
    trip_date: Optional[date] = None
    shift: Optional[ShiftEnum] = None
    trip_count: Optional[int] = Field(default=None, ge=0)

    @field_validator("driver_id", "vehicle_id", "trip_date", "shift", "trip_count")
    @classmethod
    def reject_null(cls, v, info):
        # omitir el campo lo deja igual; enviar null no es válido
        if v is None:
            raise ValueError(f"{info.field_name} cannot be null")
        return v


class TripRead(TripBase):
    id: int
    week_start: date
    week_end: date
    driver_name: Optional[str] = None
    vehicle_number: Optional[str] = None
