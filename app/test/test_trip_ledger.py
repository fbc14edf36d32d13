import pytest
from datetime import date
from sqlmodel import select
from app.core.exceptions import NotFoundError
from app.models.driver_rent_log import DriverRentLog, RentStatus
from app.models.trip import ShiftEnum, Trip, TripCreate, TripUpdate
from app.models.vehicle_driver_assignment import VehicleDriverAssignmentCreate
from app.services.change_notifier import ChangeEvent
from app.services.fleet_service import FleetService
from app.services.rent_ledger_service import RentLedgerService
from app.services.trip_ledger_service import TripLedgerService
from app.services.weekly_settlement_service import WeeklySettlementCalculator

DAY = date(2025, 7, 2)


def _trip(fleet, driver, shift=ShiftEnum.MORNING, day=DAY, trip_count=10):
    return TripCreate(
        driver_id=driver.id,
        vehicle_id=fleet.vehicle.id,
        trip_date=day,
        shift=shift,
        trip_count=trip_count
    )


def test_create_trip_creates_rent_log_with_accommodation_rate(session, make_fleet, events):
    fleet = make_fleet()
    service = TripLedgerService(session)

    trip = service.create_trip(_trip(fleet, fleet.morning))
    service.create_trip(_trip(fleet, fleet.evening, ShiftEnum.EVENING))

    assert trip.week_start == date(2025, 6, 30)
    logs = session.exec(select(DriverRentLog).order_by(DriverRentLog.id)).all()
    assert [(log.driver_id, log.rent) for log in logs] == [
        (fleet.morning.id, 600), (fleet.evening.id, 500)]
    assert ChangeEvent.TRIPS_CHANGED in events
    assert ChangeEvent.LEDGER_CHANGED in events


def test_duplicate_trip_does_not_duplicate_rent(session, make_fleet):
    fleet = make_fleet()
    service = TripLedgerService(session)

    service.create_trip(_trip(fleet, fleet.morning, trip_count=4))
    service.create_trip(_trip(fleet, fleet.morning, trip_count=6))

    assert len(session.exec(select(DriverRentLog)).all()) == 1


def test_create_trip_unknown_driver(session, make_fleet):
    fleet = make_fleet()
    data = TripCreate(driver_id=999, vehicle_id=fleet.vehicle.id,
                      trip_date=DAY, shift=ShiftEnum.MORNING, trip_count=1)
    with pytest.raises(NotFoundError):
        TripLedgerService(session).create_trip(data)


def test_delete_trip_removes_rent_log_even_if_paid(session, make_fleet):
    fleet = make_fleet()
    service = TripLedgerService(session)
    trip_id = service.create_trip(_trip(fleet, fleet.morning)).id
    log = session.exec(select(DriverRentLog)).one()
    RentLedgerService(session).set_paid(log.id, True)

    assert service.delete_trip(trip_id) == 1
    assert session.exec(select(DriverRentLog)).all() == []
    assert session.get(Trip, trip_id) is None


def test_delete_duplicate_trip_keeps_rent_log_for_remaining_trip(session, make_fleet):
    fleet = make_fleet()
    service = TripLedgerService(session)
    first = service.create_trip(_trip(fleet, fleet.morning, trip_count=4))
    service.create_trip(_trip(fleet, fleet.morning, trip_count=6))

    assert service.delete_trip(first.id) == 0
    assert len(session.exec(select(DriverRentLog)).all()) == 1


def test_delete_unknown_trip(session):
    with pytest.raises(NotFoundError):
        TripLedgerService(session).delete_trip(42)


def test_update_trip_moves_rent_log(session, make_fleet):
    fleet = make_fleet()
    service = TripLedgerService(session)
    trip = service.create_trip(_trip(fleet, fleet.morning))

    service.update_trip(trip.id, TripUpdate(trip_date=date(2025, 7, 3)))

    logs = session.exec(select(DriverRentLog)).all()
    assert [log.rent_date for log in logs] == [date(2025, 7, 3)]


def test_update_trip_count_keeps_rent_log(session, make_fleet):
    fleet = make_fleet()
    service = TripLedgerService(session)
    trip = service.create_trip(_trip(fleet, fleet.morning))
    log_id = session.exec(select(DriverRentLog)).one().id

    updated = service.update_trip(trip.id, TripUpdate(trip_count=15))

    assert updated.trip_count == 15
    assert session.exec(select(DriverRentLog)).one().id == log_id


def test_update_trip_vehicle_moves_rent_to_new_vehicle(session, make_fleet, events):
    first = make_fleet("KA01AA0001")
    second = make_fleet("KA01AA0002")
    FleetService(session).assign_drivers(VehicleDriverAssignmentCreate(
        vehicle_id=second.vehicle.id, morning_driver_id=first.morning.id))
    service = TripLedgerService(session)
    trip = service.create_trip(_trip(first, first.morning))
    log = session.exec(select(DriverRentLog)).one()
    log_id = log.id
    RentLedgerService(session).set_paid(log_id, True)
    events.clear()

    service.update_trip(trip.id, TripUpdate(vehicle_id=second.vehicle.id))

    log = session.exec(select(DriverRentLog)).one()
    assert log.id == log_id
    assert log.vehicle_id == second.vehicle.id
    assert log.paid is True
    assert ChangeEvent.LEDGER_CHANGED in events

    calculator = WeeklySettlementCalculator(session)
    old_week = calculator.calculate(first.vehicle.id, DAY)
    new_week = calculator.calculate(second.vehicle.id, DAY)
    assert (old_week.total_trips, old_week.driver_rent) == (0, 0)
    assert (new_week.total_trips, new_week.driver_rent) == (10, 600)


def _drift(session, fleet, driver, shift=ShiftEnum.MORNING, trip_count=8):
    """Viaje insertado sin pasar por el servicio, sin registro de renta."""
    trip = Trip(
        driver_id=driver.id,
        vehicle_id=fleet.vehicle.id,
        trip_date=DAY,
        shift=shift,
        trip_count=trip_count,
        week_start=date(2025, 6, 30),
        week_end=date(2025, 7, 6)
    )
    session.add(trip)
    session.commit()
    session.refresh(trip)
    return trip


def test_repair_all_creates_missing_rows_once(session, make_fleet):
    fleet = make_fleet()
    service = TripLedgerService(session)
    service.create_trip(_trip(fleet, fleet.morning))
    _drift(session, fleet, fleet.evening, ShiftEnum.EVENING)

    report = service.repair_all()
    assert report.trips_checked == 2
    assert report.repaired == 1
    assert report.failures == []

    logs = session.exec(select(DriverRentLog).where(
        DriverRentLog.driver_id == fleet.evening.id)).all()
    assert len(logs) == 1
    assert logs[0].rent == 500

    again = service.repair_all()
    assert again.repaired == 0
    assert len(session.exec(select(DriverRentLog)).all()) == 2


def test_rent_status_classification(session, make_fleet):
    fleet = make_fleet()
    service = TripLedgerService(session)
    trip = service.create_trip(_trip(fleet, fleet.morning))

    status = service.get_rent_status(trip.id)
    assert status.status == RentStatus.UNPAID
    assert status.rent == 600

    RentLedgerService(session).set_paid(status.rent_log_id, True)
    assert service.get_rent_status(trip.id).status == RentStatus.PAID


def test_rent_status_auto_creates_missing_row(session, make_fleet):
    fleet = make_fleet()
    trip = _drift(session, fleet, fleet.evening, ShiftEnum.EVENING)
    service = TripLedgerService(session)

    status = service.get_rent_status(trip.id)
    assert status.status == RentStatus.AUTO_CREATED
    assert status.rent == 500

    assert service.get_rent_status(trip.id).status == RentStatus.UNPAID
    assert len(session.exec(select(DriverRentLog)).all()) == 1
