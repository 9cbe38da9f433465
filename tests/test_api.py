from unittest.mock import patch

from sqlalchemy.exc import OperationalError

from app.metrics import RecordStoreUnavailable

EXPECTED_KEYS = {
    "earnings", "rides", "hours", "avgPerHour", "expenses", "fuelExpenses",
    "maintenanceExpenses", "insuranceExpenses", "profit", "tipsPercentage",
    "ridesPerShift", "distanceTraveled", "fuelEfficiency", "earningsPerKm",
    "costPerKm", "profitPerKm", "dateRange",
}


def test_health(client):
    assert client.get("/health").json() == {"ok": True}
    assert client.get("/__ping").json() == {"pong": True}


def test_missing_driver_id_is_400(client):
    response = client.get("/api/metrics", params={"period": "week"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Driver ID is required"


def test_blank_driver_id_is_400(client):
    response = client.get("/api/metrics", params={"driverId": "  "})
    assert response.status_code == 400


def test_non_numeric_driver_id_is_400(client):
    response = client.get("/api/metrics", params={"driverId": "abc"})
    assert response.status_code == 400
    assert response.json()["detail"] == "Invalid driver ID"


def test_invalid_as_of_is_400(client, driver):
    response = client.get("/api/metrics", params={"driverId": driver.id, "asOf": "yesterday"})
    assert response.status_code == 400


def test_week_metrics_payload(client, week_of_records):
    response = client.get(
        "/api/metrics", params={"driverId": week_of_records.id, "period": "week", "asOf": "2025-04-16"}
    )

    assert response.status_code == 200
    data = response.json()
    assert set(data) == EXPECTED_KEYS
    assert data["earnings"] == 85
    assert data["avgPerHour"] == 21.25
    assert data["profit"] == 45
    assert data["tipsPercentage"] == 6.25
    assert data["earningsPerKm"] == 2.83
    assert data["costPerKm"] == 1.33
    assert data["profitPerKm"] == 1.5
    assert data["ridesPerShift"] == 2
    assert data["dateRange"]["startDate"].startswith("2025-04-13T00:00:00")
    assert data["dateRange"]["endDate"].startswith("2025-04-19T23:59:59.999")


def test_period_defaults_to_week(client, week_of_records):
    response = client.get("/api/metrics", params={"driverId": week_of_records.id, "asOf": "2025-04-16T18:30"})
    assert response.status_code == 200
    assert response.json()["dateRange"]["startDate"].startswith("2025-04-13")


def test_unknown_period_falls_back_to_all_time(client, week_of_records):
    response = client.get(
        "/api/metrics", params={"driverId": week_of_records.id, "period": "FORTNIGHT", "asOf": "2025-04-16"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data["dateRange"]["startDate"].startswith("2000-01-01")
    assert data["dateRange"]["endDate"].startswith("2050-12-31")
    assert data["rides"] == 2


def test_empty_period_returns_zeros(client, week_of_records):
    response = client.get(
        "/api/metrics", params={"driverId": week_of_records.id, "period": "day", "asOf": "2025-05-01"}
    )
    assert response.status_code == 200
    data = response.json()
    assert data.pop("dateRange")["startDate"].startswith("2025-05-01")
    assert all(v == 0 for v in data.values())


def test_partial_failure_still_200(client, week_of_records):
    def _boom(*args, **kwargs):
        raise OperationalError("SELECT ...", {}, Exception("shifts table missing"))

    with patch("app.crud.get_shifts_in_range", side_effect=_boom):
        response = client.get(
            "/api/metrics", params={"driverId": week_of_records.id, "asOf": "2025-04-16"}
        )
    assert response.status_code == 200
    data = response.json()
    assert data["hours"] == 0
    assert data["avgPerHour"] == 0
    assert data["earnings"] == 85


def test_total_failure_is_500_with_cause(client, driver):
    err = RecordStoreUnavailable(driver.id, [RuntimeError("database unreachable")])
    with patch("main.compute_metrics", side_effect=err):
        response = client.get("/api/metrics", params={"driverId": driver.id})

    assert response.status_code == 500
    detail = response.json()["detail"]
    assert detail["error"] == "Failed to fetch metrics"
    assert "database unreachable" in detail["details"]


def test_post_not_allowed(client):
    assert client.post("/api/metrics", params={"driverId": 1}).status_code == 405
