from sqlmodel import Session, select
from app.core.db import engine
from app.core.config import settings
from app.models.driver import Driver
from app.models.vehicle import Vehicle, ProviderEnum
from app.models.vehicle_driver_assignment import VehicleDriverAssignment


def init_vehicles(session: Session):
    vehicles = [
        Vehicle(vehicle_number="KA01AB1234", provider=ProviderEnum.LETZRYD),
        Vehicle(vehicle_number="KA02CD5678", provider=ProviderEnum.PMV),
    ]
    for vehicle in vehicles:
        exists = session.exec(
            select(Vehicle).where(Vehicle.vehicle_number == vehicle.vehicle_number)).first()
        if not exists:
            session.add(vehicle)
    session.commit()


def init_drivers(session: Session):
    drivers = [
        Driver(name="Ravi Kumar", phone="9000000001", has_accommodation=True),
        Driver(name="Suresh Babu", phone="9000000002", has_accommodation=False),
        Driver(name="Manjunath R", phone="9000000003", has_accommodation=True),
        Driver(name="Prakash N", phone="9000000004", has_accommodation=False),
    ]
    for driver in drivers:
        exists = session.exec(
            select(Driver).where(Driver.phone == driver.phone)).first()
        if not exists:
            session.add(driver)
    session.commit()


def init_assignments(session: Session):
    # (vehículo, teléfono conductor mañana, teléfono conductor tarde)
    pairs = [
        ("KA01AB1234", "9000000001", "9000000002"),
        ("KA02CD5678", "9000000003", "9000000004"),
    ]
    for vehicle_number, morning_phone, evening_phone in pairs:
        vehicle = session.exec(
            select(Vehicle).where(Vehicle.vehicle_number == vehicle_number)).first()
        morning = session.exec(select(Driver).where(Driver.phone == morning_phone)).first()
        evening = session.exec(select(Driver).where(Driver.phone == evening_phone)).first()
        if not vehicle or not morning or not evening:
            continue
        exists = session.exec(
            select(VehicleDriverAssignment).where(
                VehicleDriverAssignment.vehicle_id == vehicle.id)).first()
        if not exists:
            session.add(VehicleDriverAssignment(
                vehicle_id=vehicle.id,
                morning_driver_id=morning.id,
                evening_driver_id=evening.id
            ))
    session.commit()


def init_data():
    if not settings.SEED_DEMO_DATA:
        return
    with Session(engine) as session:
        init_vehicles(session)
        init_drivers(session)
        init_assignments(session)
