from sqlmodel import SQLModel, Field
from pydantic import field_validator
from typing import Optional
from datetime import date, datetime
from .trip import ShiftEnum

# Cargo fijo según la duración del turno (horas -> rupias)
SUBSTITUTE_CHARGES = {
    6: 250,
    8: 350,
    12: 500,
}


class SubstituteDriverBase(SQLModel):
    name: str = Field(nullable=False)
    vehicle_id: int = Field(foreign_key="vehicles.id", index=True)
    work_date: date = Field(index=True)
    shift: ShiftEnum
    shift_hours: int
    trip_count: int = Field(default=1, ge=0)


class SubstituteDriver(SubstituteDriverBase, table=True):
    __tablename__ = "substitute_drivers"
    id: Optional[int] = Field(default=None, primary_key=True)
    charge: int = Field(nullable=False)
    created_at: datetime = Field(
        default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        nullable=False,
        sa_column_kwargs={"onupdate": datetime.utcnow}
    )


class SubstituteDriverCreate(SubstituteDriverBase):
    trip_count: Optional[int] = Field(default=None, ge=0)

    @field_validator("shift_hours")
    @classmethod
    def validate_shift_hours(cls, v):
        if v not in SUBSTITUTE_CHARGES:
            raise ValueError(
                f"shift_hours must be one of {sorted(SUBSTITUTE_CHARGES)}")
        return v
