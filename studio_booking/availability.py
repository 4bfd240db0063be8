"""
Free-slot computation for a coach on a given date.

Slots are whole hours cut from the coach's weekly availability rule, minus
anything overlapping a confirmed or rescheduled booking.
"""

import logging
from dataclasses import asdict, dataclass
from typing import Optional

from sqlalchemy import select
from sqlalchemy.orm import Session

from studio_booking.errors import NotFound
from studio_booking.models import (
    ACTIVE_BOOKING_STATUSES,
    AvailabilityException,
    Booking,
    Coach,
    CoachAvailability,
)
from studio_booking.timeutil import day_of_week, format_minutes, overlaps, parse_date, to_minutes

logger = logging.getLogger(__name__)

SLOT_MINUTES = 60


@dataclass(frozen=True)
class Slot:
    start_time: str
    end_time: str
    duration_minutes: int = SLOT_MINUTES
    location_id: Optional[int] = None

    def to_dict(self):
        return asdict(self)


def hourly_slots(window_start: str, window_end: str, busy: list[tuple[str, str]],
                 location_id: Optional[int] = None) -> list[Slot]:
    """
    Cut [window_start, window_end) into whole-hour slots and drop the busy ones.

    Only the hour part of the window is used: 09:30-12:45 yields 09:00-12:00.
    """
    start_hour = to_minutes(window_start) // 60
    end_hour = to_minutes(window_end) // 60
    busy_minutes = [(to_minutes(s), to_minutes(e)) for s, e in busy]

    slots = []
    for hour in range(start_hour, end_hour):
        slot_start, slot_end = hour * 60, (hour + 1) * 60
        if any(overlaps(slot_start, slot_end, b_start, b_end) for b_start, b_end in busy_minutes):
            continue
        slots.append(Slot(
            start_time=format_minutes(slot_start),
            end_time=format_minutes(slot_end),
            location_id=location_id,
        ))
    return slots


def weekly_rule(db: Session, coach_id: int, weekday: int) -> Optional[CoachAvailability]:
    # One rule per coach/day: the earliest active one wins
    stmt = (
        select(CoachAvailability)
        .where(
            CoachAvailability.coach_id == coach_id,
            CoachAvailability.day_of_week == weekday,
            CoachAvailability.is_active.is_(True),
        )
        .order_by(CoachAvailability.start_time, CoachAvailability.id)
        .limit(1)
    )
    return db.execute(stmt).scalars().first()


def date_exception(db: Session, coach_id: int, on_date: str) -> Optional[AvailabilityException]:
    stmt = (
        select(AvailabilityException)
        .where(
            AvailabilityException.coach_id == coach_id,
            AvailabilityException.exception_date == on_date,
        )
        .order_by(AvailabilityException.id)
        .limit(1)
    )
    return db.execute(stmt).scalars().first()


def busy_intervals(db: Session, coach_id: int, on_date: str) -> list[tuple[str, str]]:
    stmt = (
        select(Booking.start_time, Booking.end_time)
        .where(
            Booking.coach_id == coach_id,
            Booking.booking_date == on_date,
            Booking.status.in_(ACTIVE_BOOKING_STATUSES),
        )
        .order_by(Booking.start_time)
    )
    return [(row.start_time, row.end_time) for row in db.execute(stmt)]


def compute_slots(db: Session, coach_id: int, on_date: str) -> list[Slot]:
    day = parse_date(on_date)
    on_date = day.isoformat()

    coach = db.get(Coach, coach_id)
    if coach is None or not coach.is_active:
        raise NotFound("Coach not found")

    rule = weekly_rule(db, coach_id, day_of_week(day))
    if rule is None:
        return []

    exception = date_exception(db, coach_id, on_date)
    if exception is not None:
        if exception.exception_type == "unavailable":
            return []
        # custom_hours overrides are stored but not used for slot generation yet
        logger.debug(
            "Ignoring custom-hours exception",
            extra={"coach_id": coach_id, "date": on_date, "exception_id": exception.id},
        )

    return hourly_slots(
        rule.start_time,
        rule.end_time,
        busy_intervals(db, coach_id, on_date),
        location_id=rule.location_id,
    )
