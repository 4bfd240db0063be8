from studio_booking.config import Settings


def test_landing_page(client):
    r = client.get("/")
    assert r.status_code == 200
    assert r.headers["content-type"].startswith("text/html")
    assert "/static/app.js" in r.text
    assert 'id="booking-section"' in r.text


def test_wizard_script_is_served(client):
    r = client.get("/static/app.js")
    assert r.status_code == 200
    assert "class BookingWizard" in r.text


def test_health(client):
    r = client.get("/health")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"


def test_unknown_route_uses_error_shape(client):
    r = client.get("/api/nothing-here")
    assert r.status_code == 404
    assert "error" in r.json()


def test_cors_origins_parsing():
    assert Settings(cors_origins="*").cors_origins_list == ["*"]
    assert Settings(cors_origins="http://a.test, http://b.test,").cors_origins_list == [
        "http://a.test", "http://b.test",
    ]


def test_seeding_is_idempotent(test_db_session):
    from studio_booking.db import seed_demo_data
    from studio_booking.models import Coach, CoachAvailability

    seed_demo_data(test_db_session)
    seed_demo_data(test_db_session)

    assert test_db_session.query(Coach).count() == 3
    assert test_db_session.query(CoachAvailability).count() == 18


def test_cors_headers_only_on_api_routes(client):
    origin = {"Origin": "http://x.test"}

    r = client.get("/api/session-types", headers=origin)
    assert r.status_code == 200
    assert "access-control-allow-origin" in r.headers

    for path in ("/health", "/", "/static/app.js"):
        r = client.get(path, headers=origin)
        assert r.status_code == 200
        assert "access-control-allow-origin" not in r.headers


def test_cors_preflight_on_pages_is_not_answered(client):
    r = client.options("/", headers={
        "Origin": "http://x.test",
        "Access-Control-Request-Method": "GET",
    })
    assert "access-control-allow-origin" not in r.headers
