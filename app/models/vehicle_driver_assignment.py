from sqlmodel import SQLModel, Field
from typing import List, Optional
from datetime import datetime


class VehicleDriverAssignmentBase(SQLModel):
    vehicle_id: int = Field(foreign_key="vehicles.id", unique=True, index=True)
    morning_driver_id: Optional[int] = Field(
        default=None, foreign_key="drivers.id")
    evening_driver_id: Optional[int] = Field(
        default=None, foreign_key="drivers.id")


class VehicleDriverAssignment(VehicleDriverAssignmentBase, table=True):
    """Conductor de turno mañana y de turno tarde asignados a un vehículo."""
    __tablename__ = "vehicle_driver_assignments"
    id: Optional[int] = Field(default=None, primary_key=True)
    created_at: datetime = Field(
        default_factory=datetime.utcnow, nullable=False)
    updated_at: datetime = Field(
        default_factory=datetime.utcnow,
        nullable=False,
        sa_column_kwargs={"onupdate": datetime.utcnow}
    )

    def driver_ids(self) -> List[int]:
        return [driver_id for driver_id in (self.morning_driver_id, self.evening_driver_id)
                if driver_id is not None]


class VehicleDriverAssignmentCreate(VehicleDriverAssignmentBase):
    pass
