from fastapi import status
from app.models.vehicle import ProviderEnum


def _create_trip(client, fleet, driver, shift="morning", trip_date="2025-07-02", trip_count=10):
    return client.post("/trips/", json={
        "driver_id": driver.id,
        "vehicle_id": fleet.vehicle.id,
        "trip_date": trip_date,
        "shift": shift,
        "trip_count": trip_count
    })


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json() == {"status": "healthy"}


def test_trip_and_rent_log_flow(client, make_fleet):
    fleet = make_fleet()

    response = _create_trip(client, fleet, fleet.morning)
    assert response.status_code == status.HTTP_201_CREATED
    trip = response.json()
    assert trip["week_start"] == "2025-06-30"
    assert trip["week_end"] == "2025-07-06"

    rent_status = client.get(f"/trips/{trip['id']}/rent-status").json()
    assert rent_status["status"] == "unpaid"
    assert rent_status["rent"] == 600

    unpaid = client.get("/driver-rent-logs/unpaid").json()
    assert len(unpaid) == 1
    assert unpaid[0]["driver_name"] == fleet.morning.name

    log_id = rent_status["rent_log_id"]
    for _ in range(2):
        response = client.patch(f"/driver-rent-logs/{log_id}/status", json={"paid": True})
        assert response.status_code == 200
        assert response.json()["paid"] is True
    assert client.get("/driver-rent-logs/unpaid").json() == []
    assert len(client.get("/driver-rent-logs/").json()) == 1

    recent = client.get("/trips/recent").json()
    assert recent[0]["vehicle_number"] == fleet.vehicle.vehicle_number

    response = client.delete(f"/trips/{trip['id']}")
    assert response.status_code == 200
    assert response.json()["removed_rent_logs"] == 1
    assert client.get("/driver-rent-logs/").json() == []


def test_patch_status_without_body_marks_paid(client, make_fleet):
    fleet = make_fleet()
    trip = _create_trip(client, fleet, fleet.evening, shift="evening").json()
    log_id = client.get(f"/trips/{trip['id']}/rent-status").json()["rent_log_id"]

    response = client.patch(f"/driver-rent-logs/{log_id}/status")
    assert response.status_code == 200
    assert response.json()["paid"] is True


def test_trip_validation_errors(client, make_fleet):
    fleet = make_fleet()

    response = _create_trip(client, fleet, fleet.morning, trip_count=-1)
    assert response.status_code == 422

    response = client.post("/trips/", json={
        "driver_id": 999, "vehicle_id": fleet.vehicle.id,
        "trip_date": "2025-07-02", "shift": "morning", "trip_count": 1})
    assert response.status_code == 404

    assert client.delete("/trips/999").status_code == 404
    assert client.patch("/driver-rent-logs/999/status", json={"paid": True}).status_code == 404


def test_repair_endpoint(client, make_fleet):
    fleet = make_fleet()
    _create_trip(client, fleet, fleet.morning)

    report = client.post("/driver-rent-logs/repair").json()
    assert report == {"trips_checked": 1, "repaired": 0, "failures": []}


def test_settlement_endpoints(client, make_fleet):
    fleet = make_fleet()
    _create_trip(client, fleet, fleet.morning)
    _create_trip(client, fleet, fleet.evening, shift="evening")
    vehicle_id = fleet.vehicle.id

    status_response = client.get(
        f"/settlements/status/{vehicle_id}", params={"week_start": "2025-07-01"}).json()
    assert status_response["state"] == "open"
    assert status_response["week_start"] == "2025-06-30"

    response = client.post("/settlements/", json={
        "vehicle_id": vehicle_id, "week_start": "2025-07-02", "processed_by": "admin"})
    assert response.status_code == status.HTTP_201_CREATED
    settlement = response.json()
    assert settlement["total_trips"] == 20
    assert settlement["profit"] == 1100 - 6650

    response = client.post("/settlements/", json={
        "vehicle_id": vehicle_id, "week_start": "2025-07-02"})
    assert response.status_code == status.HTTP_409_CONFLICT

    listed = client.get("/settlements/", params={"vehicle_id": vehicle_id}).json()
    assert [item["id"] for item in listed] == [settlement["id"]]
    assert client.get(f"/settlements/{settlement['id']}").status_code == 200
    assert client.get("/settlements/999").status_code == 404

    report = client.post("/settlements/process-all", json={"week_start": "2025-07-02"}).json()
    assert report["processed"] == 0
    assert report["results"][0]["outcome"] == "already_settled"


def test_settlement_without_activity_conflicts(client, make_fleet):
    fleet = make_fleet()
    response = client.post("/settlements/", json={
        "vehicle_id": fleet.vehicle.id, "week_start": "2025-07-02"})
    assert response.status_code == status.HTTP_409_CONFLICT


def test_vehicle_weekly_endpoints(client, make_fleet):
    fleet = make_fleet()
    _create_trip(client, fleet, fleet.morning)
    vehicle_id = fleet.vehicle.id

    data = client.get(
        f"/vehicles/{vehicle_id}/weekly-settlement", params={"week_start": "2025-07-04"}).json()
    assert data["total_trips"] == 10
    assert data["company_rent"] == 6650

    summary = client.get(
        f"/vehicles/{vehicle_id}/weekly-summary", params={"week_start": "2025-07-04"}).json()
    assert summary["rental_info"]["current_rate"] == 950

    weeks = client.get(f"/vehicles/{vehicle_id}/weeks").json()
    assert weeks[0]["week_start"] == "2025-06-30"

    assert client.get("/vehicles/999/weeks").status_code == 404


def test_rental_slab_endpoints(client):
    slabs = client.get(f"/rental-slabs/{ProviderEnum.PMV.value}").json()
    assert slabs[0] == {"min_trips": 140, "max_trips": None, "rate": 150}

    info = client.get("/rental-slabs/Letzryd/info", params={"trip_count": 139}).json()
    assert info["current_rate"] == 380
    assert info["next_better_slab"] == {"rate": 260, "trips_needed": 1}

    assert client.get("/rental-slabs/Unknown").status_code == 422
    assert client.get("/rental-slabs/PMV/info", params={"trip_count": -1}).status_code == 422


def test_substitute_driver_endpoints(client, make_fleet):
    fleet = make_fleet()
    payload = {
        "name": "Suresh",
        "vehicle_id": fleet.vehicle.id,
        "work_date": "2025-07-03",
        "shift": "evening",
        "shift_hours": 6
    }

    response = client.post("/substitute-drivers/", json=payload)
    assert response.status_code == status.HTTP_201_CREATED
    substitute = response.json()
    assert substitute["charge"] == 250
    assert substitute["trip_count"] == 1

    bad = client.post("/substitute-drivers/", json={**payload, "shift_hours": 7})
    assert bad.status_code == 422

    listed = client.get("/substitute-drivers/", params={
        "vehicle_id": fleet.vehicle.id, "week_start": "2025-06-30", "week_end": "2025-07-06"}).json()
    assert [item["id"] for item in listed] == [substitute["id"]]

    response = client.delete(f"/substitute-drivers/{substitute['id']}")
    assert response.status_code == status.HTTP_204_NO_CONTENT
    assert client.delete(f"/substitute-drivers/{substitute['id']}").status_code == 404


def test_update_trip_rejects_null_fields(client, make_fleet):
    fleet = make_fleet()
    trip = _create_trip(client, fleet, fleet.morning).json()

    for field in ("trip_count", "shift", "trip_date", "driver_id", "vehicle_id"):
        response = client.put(f"/trips/{trip['id']}", json={field: None})
        assert response.status_code == 422, field

    recent = client.get("/trips/recent").json()
    assert recent[0]["trip_count"] == 10
    assert recent[0]["shift"] == "morning"

    response = client.put(f"/trips/{trip['id']}", json={"trip_count": 12})
    assert response.status_code == 200
    assert response.json()["trip_count"] == 12


def test_vehicle_assignment_endpoints(client, make_vehicle, make_driver):
    vehicle = make_vehicle()
    first = make_driver("Ravi Kumar", has_accommodation=True)
    second = make_driver("Suresh Babu")
    third = make_driver("Prakash N")

    assert client.get(f"/vehicles/{vehicle.id}/assignment").status_code == 404

    response = client.post("/vehicle-assignments/", json={
        "vehicle_id": vehicle.id,
        "morning_driver_id": first.id,
        "evening_driver_id": second.id
    })
    assert response.status_code == status.HTTP_201_CREATED
    assignment_id = response.json()["id"]

    response = client.post("/vehicle-assignments/", json={
        "vehicle_id": vehicle.id,
        "morning_driver_id": first.id,
        "evening_driver_id": third.id
    })
    assert response.status_code == status.HTTP_201_CREATED

    assignment = client.get(f"/vehicles/{vehicle.id}/assignment").json()
    assert assignment["id"] == assignment_id
    assert assignment["evening_driver_id"] == third.id

    response = client.post("/vehicle-assignments/", json={
        "vehicle_id": vehicle.id, "morning_driver_id": 999})
    assert response.status_code == 404
    assert client.get("/vehicles/999/assignment").status_code == 404


def test_profit_graph_and_settlement_payment(client, make_fleet):
    fleet = make_fleet()
    _create_trip(client, fleet, fleet.morning)
    _create_trip(client, fleet, fleet.evening, shift="evening")
    settlement = client.post("/settlements/", json={
        "vehicle_id": fleet.vehicle.id, "week_start": "2025-07-02"}).json()

    points = client.get("/settlements/profit-graph").json()
    assert len(points) == 1
    point = points[0]
    assert point["settlement_id"] == settlement["id"]
    assert point["vehicle_number"] == fleet.vehicle.vehicle_number
    assert point["profit"] == 1100 - 6650
    assert point["paid"] is False
    assert point["breakdown"]["expenses"] == {
        "provider": "Letzryd", "rental_rate": 950, "days": 7, "company_rent": 6650}
    assert point["breakdown"]["calculation"] == {
        "total_revenue": 1100, "total_expenses": 6650, "net_profit": -5550}
    assert len(point["breakdown"]["revenue"]["drivers"]) == 2

    for _ in range(2):
        response = client.patch(f"/settlements/{settlement['id']}/status")
        assert response.status_code == 200
        assert response.json()["paid"] is True
    assert client.get("/settlements/profit-graph").json()[0]["paid"] is True

    response = client.patch(f"/settlements/{settlement['id']}/status", json={"paid": False})
    assert response.json()["paid"] is False
    assert client.patch("/settlements/999/status").status_code == 404
