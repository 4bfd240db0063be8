from collections import defaultdict

from fastapi import APIRouter, Depends, Query
from sqlalchemy import select
from sqlalchemy.orm import Session

from studio_booking.availability import compute_slots
from studio_booking.db import get_db
from studio_booking.errors import NotFound
from studio_booking.filters import CoachFilter
from studio_booking.models import Coach, CoachAvailability, Location
from studio_booking.timeutil import parse_date

router = APIRouter()


def location_names_by_coach(db: Session, coach_ids: list[int]) -> dict[int, list[str]]:
    if not coach_ids:
        return {}
    stmt = (
        select(CoachAvailability.coach_id, Location.name)
        .join(Location, CoachAvailability.location_id == Location.id)
        .where(CoachAvailability.coach_id.in_(coach_ids), CoachAvailability.is_active.is_(True))
        .distinct()
        .order_by(CoachAvailability.coach_id, Location.name)
    )
    names = defaultdict(list)
    for coach_id, name in db.execute(stmt):
        names[coach_id].append(name)
    return names


@router.get("")
def list_coaches(
    styles: str | None = Query(default=None),
    languages: str | None = Query(default=None),
    experience_min: int | None = Query(default=None),
    available_date: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    """
    Active coaches, most experienced first.

    styles / languages take comma-separated values and match whole elements
    of the coach's lists (any listed value is enough). available_date keeps
    coaches with a weekly rule on that weekday and no "unavailable" exception.
    """
    coach_filter = CoachFilter.from_params(
        styles=styles,
        languages=languages,
        experience_min=experience_min,
        available_date=available_date,
    )
    coaches = db.execute(coach_filter.statement()).scalars().all()
    locations = location_names_by_coach(db, [c.id for c in coaches])

    results = []
    for coach in coaches:
        data = coach.to_dict()
        data["location_names"] = locations.get(coach.id, [])
        results.append(data)
    return {"coaches": results}


@router.get("/{coach_id}")
def get_coach(coach_id: int, db: Session = Depends(get_db)):
    coach = db.get(Coach, coach_id)
    if coach is None or not coach.is_active:
        raise NotFound("Coach not found")

    stmt = (
        select(CoachAvailability, Location.name.label("location_name"))
        .outerjoin(Location, CoachAvailability.location_id == Location.id)
        .where(CoachAvailability.coach_id == coach_id, CoachAvailability.is_active.is_(True))
        .order_by(CoachAvailability.day_of_week, CoachAvailability.start_time)
    )
    availability = [
        {
            "id": row.CoachAvailability.id,
            "coach_id": row.CoachAvailability.coach_id,
            "day_of_week": row.CoachAvailability.day_of_week,
            "start_time": row.CoachAvailability.start_time,
            "end_time": row.CoachAvailability.end_time,
            "location_id": row.CoachAvailability.location_id,
            "location_name": row.location_name,
            "is_active": row.CoachAvailability.is_active,
        }
        for row in db.execute(stmt)
    ]
    return {"coach": coach.to_dict(), "availability": availability}


@router.get("/{coach_id}/availability/{on_date}")
def get_coach_availability(coach_id: int, on_date: str, db: Session = Depends(get_db)):
    """Free hourly slots for the coach on a YYYY-MM-DD date, ascending."""
    slots = compute_slots(db, coach_id, on_date)
    return {"date": parse_date(on_date).isoformat(), "slots": [slot.to_dict() for slot in slots]}
