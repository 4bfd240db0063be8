import pytest


@pytest.fixture
def booked_week(monday_coach, make_coach, make_session_type, make_booking):
    other = make_coach(name="Coach Two")
    st = make_session_type()
    make_booking(monday_coach.id, st.id, booking_date="2024-01-01", start_time="09:00", end_time="10:00")
    make_booking(monday_coach.id, st.id, booking_date="2024-01-03", start_time="09:00", end_time="10:00",
                 status="cancelled")
    make_booking(other.id, st.id, booking_date="2024-01-03", start_time="11:00", end_time="12:00")
    make_booking(other.id, st.id, booking_date="2024-01-10", start_time="09:00", end_time="10:00",
                 status="completed")
    return monday_coach, other


def refs(response):
    return [(b["coach_name"], b["booking_date"], b["status"]) for b in response.json()["bookings"]]


def test_lists_everything_newest_first(client, booked_week):
    r = client.get("/api/admin/bookings")
    assert r.status_code == 200
    assert [b["booking_date"] for b in r.json()["bookings"]] == [
        "2024-01-10", "2024-01-03", "2024-01-03", "2024-01-01",
    ]


def test_date_range(client, booked_week):
    r = client.get("/api/admin/bookings", params={"date_from": "2024-01-02", "date_to": "2024-01-09"})
    assert [b["booking_date"] for b in r.json()["bookings"]] == ["2024-01-03", "2024-01-03"]


def test_filters_compose(client, booked_week):
    coach, other = booked_week
    r = client.get("/api/admin/bookings", params={
        "date_from": "2024-01-01", "date_to": "2024-01-05", "coach_id": coach.id, "status": "confirmed",
    })
    assert refs(r) == [(coach.name, "2024-01-01", "confirmed")]

    r = client.get("/api/admin/bookings", params={"coach_id": other.id, "status": "completed"})
    assert refs(r) == [("Coach Two", "2024-01-10", "completed")]


def test_invalid_filters_are_rejected(client, booked_week):
    r = client.get("/api/admin/bookings", params={"status": "pending"})
    assert r.status_code == 400
    assert "pending" in r.json()["error"]

    assert client.get("/api/admin/bookings", params={"date_from": "last week"}).status_code == 400
    assert client.get("/api/admin/bookings", params={"coach_id": "abc"}).status_code == 400


@pytest.mark.parametrize("param", ["date_from", "date_to"])
def test_compact_dates_are_rejected(client, booked_week, param):
    r = client.get("/api/admin/bookings", params={param: "20240101"})
    assert r.status_code == 400
    assert "error" in r.json()
