from sqlmodel import Session, select
from typing import List, Optional
from app.core.exceptions import NotFoundError, ValidationError
from app.models.vehicle import Vehicle
from app.models.driver import Driver
from app.models.vehicle_driver_assignment import (
    VehicleDriverAssignment, VehicleDriverAssignmentCreate
)


class FleetService:
    """Vehículos, conductores y la asignación de conductores por turno."""

    def __init__(self, session: Session):
        self.session = session

    def get_vehicle(self, vehicle_id: int) -> Vehicle:
        vehicle = self.session.get(Vehicle, vehicle_id)
        if not vehicle:
            raise NotFoundError(f"Vehicle {vehicle_id} not found")
        return vehicle

    def get_driver(self, driver_id: int) -> Driver:
        driver = self.session.get(Driver, driver_id)
        if not driver:
            raise NotFoundError(f"Driver {driver_id} not found")
        return driver

    def list_vehicles(self) -> List[Vehicle]:
        return list(self.session.exec(select(Vehicle).order_by(Vehicle.id)))

    def get_assignment(self, vehicle_id: int) -> Optional[VehicleDriverAssignment]:
        return self.session.exec(
            select(VehicleDriverAssignment).where(
                VehicleDriverAssignment.vehicle_id == vehicle_id)
        ).first()

    def get_vehicle_assignment(self, vehicle_id: int) -> VehicleDriverAssignment:
        self.get_vehicle(vehicle_id)
        assignment = self.get_assignment(vehicle_id)
        if not assignment:
            raise NotFoundError(f"Vehicle {vehicle_id} has no driver assignment")
        return assignment

    def assign_drivers(self, data: VehicleDriverAssignmentCreate) -> VehicleDriverAssignment:
        """
        Asigna los conductores de mañana y tarde del vehículo. Si ya tenía
        asignación se reemplaza; hay una sola por vehículo.

        Las liquidaciones ya guardadas no se recalculan.
        """
        self.get_vehicle(data.vehicle_id)
        for driver_id in (data.morning_driver_id, data.evening_driver_id):
            if driver_id is not None:
                self.get_driver(driver_id)
        if data.morning_driver_id is not None and data.morning_driver_id == data.evening_driver_id:
            raise ValidationError("Morning and evening drivers must be different")

        assignment = self.get_assignment(data.vehicle_id)
        if assignment:
            assignment.morning_driver_id = data.morning_driver_id
            assignment.evening_driver_id = data.evening_driver_id
        else:
            assignment = VehicleDriverAssignment(**data.model_dump())
        self.session.add(assignment)
        self.session.commit()
        self.session.refresh(assignment)
        return assignment
