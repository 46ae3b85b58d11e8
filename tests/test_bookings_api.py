import pytest
from sqlalchemy.exc import OperationalError

import app.api.routes.bookings as bookings_routes_module
import app.services.booking_service as booking_service_module

from app.services.booking_service import normalize_booking_slot, normalize_booking_type


def booking(**overrides):
    body = {
        "customer_name": "Bob Client",
        "customer_email": "bob@example.com",
        "booking_date": "2024-01-01",
        "booking_type": "Full Day",
    }
    body.update(overrides)
    return body


@pytest.mark.parametrize(
    "label,token",
    [("Full Day", "FULL_DAY"), ("Half Day", "HALF_DAY"), ("Custom", "CUSTOM"), ("CUSTOM", "CUSTOM"), ("Weekend", "Weekend"), (None, None)],
)
def test_normalize_booking_type(label, token):
    assert normalize_booking_type(label) == token


@pytest.mark.parametrize(
    "label,token",
    [("First Half", "FIRST_HALF"), ("Second Half", "SECOND_HALF"), ("SECOND_HALF", "SECOND_HALF"), ("Evening", "Evening")],
)
def test_normalize_booking_slot(label, token):
    assert normalize_booking_slot(label) == token


def test_requires_auth(client):
    assert client.post("/api/bookings", json=booking()).status_code == 401
    assert client.get("/api/bookings").status_code == 401


def test_create_full_day(client, auth_headers):
    r = client.post("/api/bookings", json=booking(booking_slot="First Half", booking_from_time="09:00", booking_to_time="10:00"), headers=auth_headers)
    assert r.status_code == 201, r.text
    data = r.json()
    assert data["message"] == "Booking created successfully"
    stored = data["booking"]
    assert stored["booking_type"] == "FULL_DAY"
    # fields that do not belong to the type are dropped
    assert stored["booking_slot"] is None
    assert stored["from_time"] is None and stored["to_time"] is None


def test_full_day_blocks_the_date(client, auth_headers):
    assert client.post("/api/bookings", json=booking(), headers=auth_headers).status_code == 201

    r = client.post("/api/bookings", json=booking(booking_type="Half Day", booking_slot="First Half"), headers=auth_headers)
    assert r.status_code == 409
    assert r.json()["detail"] == "A full-day booking already exists for this date"

    other_day = booking(booking_date="2024-01-02", booking_type="Half Day", booking_slot="First Half")
    assert client.post("/api/bookings", json=other_day, headers=auth_headers).status_code == 201


def test_half_day_slots(client, auth_headers):
    first = booking(booking_type="Half Day", booking_slot="First Half")
    r = client.post("/api/bookings", json=first, headers=auth_headers)
    assert r.status_code == 201
    assert r.json()["booking"]["booking_slot"] == "FIRST_HALF"

    assert client.post("/api/bookings", json=first, headers=auth_headers).status_code == 409
    second = booking(booking_type="HALF_DAY", booking_slot="SECOND_HALF")
    assert client.post("/api/bookings", json=second, headers=auth_headers).status_code == 201

    r = client.post("/api/bookings", json=booking(), headers=auth_headers)
    assert r.status_code == 409
    assert "other bookings exist" in r.json()["detail"]


def test_custom_overlap_rules(client, auth_headers):
    morning = booking(booking_type="Custom", booking_from_time="09:00", booking_to_time="10:00")
    r = client.post("/api/bookings", json=morning, headers=auth_headers)
    assert r.status_code == 201
    assert r.json()["booking"]["from_time"] == "09:00:00"

    overlap = booking(booking_type="Custom", booking_from_time="09:30", booking_to_time="11:00")
    r = client.post("/api/bookings", json=overlap, headers=auth_headers)
    assert r.status_code == 409
    assert r.json()["detail"] == "Time overlap with an existing custom booking"

    touching = booking(booking_type="CUSTOM", booking_from_time="10:00", booking_to_time="11:00")
    assert client.post("/api/bookings", json=touching, headers=auth_headers).status_code == 201

    r = client.post("/api/bookings", json=booking(booking_type="Half Day", booking_slot="First Half"), headers=auth_headers)
    assert r.status_code == 409
    assert "custom booking exists in this slot" in r.json()["detail"]


def test_custom_in_booked_half(client, auth_headers):
    afternoon = booking(booking_type="Half Day", booking_slot="Second Half")
    assert client.post("/api/bookings", json=afternoon, headers=auth_headers).status_code == 201

    r = client.post("/api/bookings", json=booking(booking_type="Custom", booking_from_time="13:00", booking_to_time="14:00"), headers=auth_headers)
    assert r.status_code == 409
    assert "slot already booked" in r.json()["detail"]


def test_conflicts_span_users(client, register, auth_headers):
    assert client.post("/api/bookings", json=booking(), headers=auth_headers).status_code == 201
    other = register(email="carol@example.com")
    assert client.post("/api/bookings", json=booking(), headers=other).status_code == 409


@pytest.mark.parametrize(
    "body,detail",
    [
        ({"customer_name": None}, "Customer name, email, booking date, and type are required"),
        ({"booking_type": None}, "Customer name, email, booking date, and type are required"),
        ({"booking_type": "Half Day"}, "Booking slot is required for half-day bookings"),
        ({"booking_type": "Custom", "booking_from_time": "09:00"}, "Booking from and to times are required for custom bookings"),
        ({"booking_type": "CUSTOM", "booking_from_time": "11:00", "booking_to_time": "10:00"}, "Booking from time must be before booking to time"),
        ({"booking_type": "Weekend"}, "Unsupported booking type: Weekend"),
    ],
)
def test_validation_errors(client, auth_headers, body, detail):
    r = client.post("/api/bookings", json=booking(**body), headers=auth_headers)
    assert r.status_code == 400
    assert r.json()["detail"] == detail


def test_malformed_time_is_schema_error(client, auth_headers):
    r = client.post("/api/bookings", json=booking(booking_type="Custom", booking_from_time="9:00", booking_to_time="10:00"), headers=auth_headers)
    assert r.status_code == 422


def test_list_bookings_paginates_own_bookings(client, register, auth_headers):
    for day in ("2024-01-01", "2024-01-03", "2024-01-02"):
        assert client.post("/api/bookings", json=booking(booking_date=day), headers=auth_headers).status_code == 201
    other = register(email="dave@example.com")
    assert client.post("/api/bookings", json=booking(booking_date="2024-02-01"), headers=other).status_code == 201

    r = client.get("/api/bookings", params={"limit": 2}, headers=auth_headers)
    assert r.status_code == 200
    data = r.json()
    assert data["total"] == 3
    assert data["page"] == 1
    assert data["total_pages"] == 2
    assert [b["booking_date"] for b in data["bookings"]] == ["2024-01-03", "2024-01-02"]

    r = client.get("/api/bookings", params={"limit": 2, "page": 2}, headers=auth_headers)
    assert [b["booking_date"] for b in r.json()["bookings"]] == ["2024-01-01"]

    r = client.get("/api/bookings", params={"booking_date": "2024-01-02"}, headers=auth_headers)
    assert r.json()["total"] == 1


def _db_down(*args, **kwargs):
    raise OperationalError("SELECT bookings", {}, Exception("database is unavailable"))


def test_storage_failure_on_create_returns_500(client, auth_headers, monkeypatch):
    with monkeypatch.context() as m:
        m.setattr(booking_service_module, "_booked_on", _db_down)
        r = client.post("/api/bookings", json=booking(), headers=auth_headers)
    assert r.status_code == 500
    assert r.json() == {"detail": "Server error during booking creation"}

    # the session was rolled back and stays usable
    r = client.post("/api/bookings", json=booking(booking_date="2024-03-05"), headers=auth_headers)
    assert r.status_code == 201, r.text


def test_storage_failure_on_list_returns_500(client, auth_headers, monkeypatch):
    with monkeypatch.context() as m:
        m.setattr(bookings_routes_module, "list_bookings", _db_down)
        r = client.get("/api/bookings", headers=auth_headers)
    assert r.status_code == 500
    assert r.json() == {"detail": "Error fetching bookings data"}

    assert client.get("/api/bookings", headers=auth_headers).status_code == 200
