import pytest
from types import SimpleNamespace
from sqlalchemy.pool import StaticPool
from fastapi.testclient import TestClient
from sqlmodel import SQLModel, Session, create_engine
from app.main import fastapi_app as app
from app.core.db import get_session
from app.models.driver import Driver
from app.models.vehicle import Vehicle, ProviderEnum
from app.models.vehicle_driver_assignment import VehicleDriverAssignment
from app.services.change_notifier import change_notifier


@pytest.fixture(name="engine")
def engine_fixture():
    # Base de datos en memoria compartida entre hilos (TestClient usa otro hilo)
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool
    )
    SQLModel.metadata.create_all(engine)
    yield engine
    SQLModel.metadata.drop_all(engine)


@pytest.fixture(name="session")
def session_fixture(engine):
    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session):
    def get_session_override():
        return session
    app.dependency_overrides[get_session] = get_session_override
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture(name="events")
def events_fixture():
    """Eventos publicados por el notificador global durante el test."""
    received = []
    unsubscribe = change_notifier.subscribe(received.append)
    yield received
    unsubscribe()


@pytest.fixture(name="make_vehicle")
def make_vehicle_fixture(session: Session):
    def _make(vehicle_number: str = "KA01AB1234", provider: ProviderEnum = ProviderEnum.LETZRYD) -> Vehicle:
        vehicle = Vehicle(vehicle_number=vehicle_number, provider=provider)
        session.add(vehicle)
        session.commit()
        session.refresh(vehicle)
        return vehicle
    return _make


@pytest.fixture(name="make_driver")
def make_driver_fixture(session: Session):
    def _make(name: str = "Ravi Kumar", has_accommodation: bool = False) -> Driver:
        driver = Driver(name=name, has_accommodation=has_accommodation)
        session.add(driver)
        session.commit()
        session.refresh(driver)
        return driver
    return _make


@pytest.fixture(name="make_fleet")
def make_fleet_fixture(session: Session, make_vehicle, make_driver):
    """Vehículo con conductor de mañana (con alojamiento) y de tarde (sin alojamiento)."""
    def _make(vehicle_number: str = "KA01AB1234", provider: ProviderEnum = ProviderEnum.LETZRYD):
        vehicle = make_vehicle(vehicle_number, provider)
        morning = make_driver(f"Morning {vehicle_number}", has_accommodation=True)
        evening = make_driver(f"Evening {vehicle_number}", has_accommodation=False)
        session.add(VehicleDriverAssignment(
            vehicle_id=vehicle.id,
            morning_driver_id=morning.id,
            evening_driver_id=evening.id
        ))
        session.commit()
        return SimpleNamespace(vehicle=vehicle, morning=morning, evening=evening)
    return _make
