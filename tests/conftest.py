# tests/conftest.py
import os
import tempfile

os.environ["SKIP_DB_INIT"] = "1"
os.environ.setdefault("DATABASE_URL", "sqlite://")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from studio_booking.db import Base, get_db
from studio_booking.main import app
from studio_booking.models import (
    AvailabilityException,
    Booking,
    Coach,
    CoachAvailability,
    Location,
    SessionType,
)

# 2024-01-01 is a Monday
MONDAY = "2024-01-01"
TUESDAY = "2024-01-02"


@pytest.fixture(scope="function")
def test_engine():
    # temp DB
    tmp = tempfile.NamedTemporaryFile(suffix=".db", delete=False)
    tmp.close()
    db_url = f"sqlite:///{tmp.name}"

    engine = create_engine(db_url, connect_args={"check_same_thread": False})
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        engine.dispose()
        os.unlink(tmp.name)


@pytest.fixture(scope="function")
def test_db_session(test_engine):
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=test_engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture(scope="function")
def client(test_db_session):
    def override_get_db():
        try:
            yield test_db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as c:
        yield c

    app.dependency_overrides.clear()


# —— Factories ——
@pytest.fixture
def make_location(test_db_session):
    def _make_location(name="Main Floor", capacity=10, equipment=None, is_active=True):
        loc = Location(name=name, capacity=capacity, equipment=equipment or [], is_active=is_active)
        test_db_session.add(loc)
        test_db_session.commit()
        return loc
    return _make_location


@pytest.fixture
def make_coach(test_db_session):
    def _make_coach(name="Coach One", styles=None, languages=None, experience_years=5,
                    certifications=None, is_active=True):
        coach = Coach(
            name=name,
            email=f"{name.lower().replace(' ', '.')}@example.com",
            martial_arts_styles=styles if styles is not None else ["Karate"],
            languages=languages if languages is not None else ["English"],
            experience_years=experience_years,
            certifications=certifications or [],
            is_active=is_active,
        )
        test_db_session.add(coach)
        test_db_session.commit()
        return coach
    return _make_coach


@pytest.fixture
def make_session_type(test_db_session):
    def _make_session_type(name="Private Lesson", duration_minutes=60, is_active=True):
        st = SessionType(name=name, duration_minutes=duration_minutes, is_active=is_active)
        test_db_session.add(st)
        test_db_session.commit()
        return st
    return _make_session_type


@pytest.fixture
def make_availability(test_db_session):
    def _make_availability(coach_id, day_of_week=1, start_time="09:00", end_time="12:00",
                           location_id=None, is_active=True):
        rule = CoachAvailability(
            coach_id=coach_id,
            day_of_week=day_of_week,
            start_time=start_time,
            end_time=end_time,
            location_id=location_id,
            is_active=is_active,
        )
        test_db_session.add(rule)
        test_db_session.commit()
        return rule
    return _make_availability


@pytest.fixture
def make_exception(test_db_session):
    def _make_exception(coach_id, exception_date=MONDAY, exception_type="unavailable",
                        start_time=None, end_time=None):
        exc = AvailabilityException(
            coach_id=coach_id,
            exception_date=exception_date,
            exception_type=exception_type,
            start_time=start_time,
            end_time=end_time,
        )
        test_db_session.add(exc)
        test_db_session.commit()
        return exc
    return _make_exception


@pytest.fixture
def make_booking(test_db_session):
    counter = {"n": 0}

    def _make_booking(coach_id, session_type_id, booking_date=MONDAY, start_time="10:00",
                      end_time="11:00", status="confirmed", student_email="student@example.com",
                      reference=None):
        counter["n"] += 1
        booking = Booking(
            coach_id=coach_id,
            session_type_id=session_type_id,
            student_name="Student",
            student_email=student_email,
            booking_date=booking_date,
            start_time=start_time,
            end_time=end_time,
            duration_minutes=60,
            status=status,
            booking_reference=reference or f"BKTEST{counter['n']:02d}",
        )
        test_db_session.add(booking)
        test_db_session.commit()
        return booking
    return _make_booking


@pytest.fixture
def monday_coach(make_coach, make_availability, make_location):
    """A coach available Mondays 09:00-12:00 on the main floor."""
    location = make_location()
    coach = make_coach()
    make_availability(coach.id, day_of_week=1, start_time="09:00", end_time="12:00", location_id=location.id)
    return coach
