"""
Booking writes: creation with an atomic overlap check, and cancellation.
"""

import logging
import secrets
import string
from typing import Optional

from sqlalchemy import DateTime, bindparam, select, text
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from studio_booking.availability import weekly_rule
from studio_booking.config import Settings, get_settings
from studio_booking.errors import (
    InternalError,
    InvalidSessionType,
    NotFound,
    SlotUnavailable,
    ValidationError,
)
from studio_booking.filters import BookingFilter
from studio_booking.models import ACTIVE_BOOKING_STATUSES, Booking, Coach, Location, SessionType, utcnow
from studio_booking.schemas import CreateBookingBody
from studio_booking.timeutil import add_minutes, day_of_week, format_minutes, parse_date, to_minutes

logger = logging.getLogger(__name__)

REFERENCE_ALPHABET = string.ascii_uppercase + string.digits
DEFAULT_CANCELLATION_REASON = "Cancelled by student"

REQUIRED_FIELDS = (
    "coach_id",
    "session_type_id",
    "student_name",
    "student_email",
    "booking_date",
    "start_time",
)

# Insert only if no confirmed/rescheduled booking for the coach overlaps
# [start_time, end_time). Check and write are one statement so concurrent
# requests cannot both pass the check.
INSERT_IF_FREE = text("""
    INSERT INTO bookings (
        coach_id, session_type_id, location_id, student_name, student_email,
        student_phone, booking_date, start_time, end_time, duration_minutes,
        status, special_requests, booking_reference, created_at, updated_at
    )
    SELECT
        :coach_id, :session_type_id, :location_id, :student_name, :student_email,
        :student_phone, :booking_date, :start_time, :end_time, :duration_minutes,
        'confirmed', :special_requests, :booking_reference, :created_at, :created_at
    WHERE NOT EXISTS (
        SELECT 1 FROM bookings b
        WHERE b.coach_id = :coach_id
          AND b.booking_date = :booking_date
          AND b.status IN ('confirmed', 'rescheduled')
          AND b.start_time < :end_time
          AND b.end_time > :start_time
    )
""").bindparams(bindparam("created_at", type_=DateTime))

CANCEL_IF_CONFIRMED = text("""
    UPDATE bookings
    SET status = 'cancelled',
        cancellation_reason = :reason,
        cancelled_at = :cancelled_at,
        updated_at = :cancelled_at
    WHERE booking_reference = :reference
      AND status = 'confirmed'
""").bindparams(bindparam("cancelled_at", type_=DateTime))


def generate_reference(prefix: str = "BK", length: int = 6) -> str:
    return prefix + "".join(secrets.choice(REFERENCE_ALPHABET) for _ in range(length))


def _active_slot_taken(db: Session, coach_id: int, booking_date: str, start_time: str) -> bool:
    stmt = select(Booking.id).where(
        Booking.coach_id == coach_id,
        Booking.booking_date == booking_date,
        Booking.start_time == start_time,
        Booking.status.in_(ACTIVE_BOOKING_STATUSES),
    )
    return db.execute(stmt).first() is not None


def _missing(value) -> bool:
    if isinstance(value, str):
        return not value.strip()
    return not value


def _reference_exists(db: Session, reference: str) -> bool:
    stmt = select(Booking.id).where(Booking.booking_reference == reference)
    return db.execute(stmt).first() is not None


def create_booking(db: Session, body: CreateBookingBody, settings: Optional[Settings] = None) -> dict:
    settings = settings or get_settings()

    if any(_missing(getattr(body, name)) for name in REQUIRED_FIELDS):
        raise ValidationError("Missing required fields")

    booking_date = parse_date(body.booking_date).isoformat()
    start_time = format_minutes(to_minutes(body.start_time))

    session_type = db.get(SessionType, body.session_type_id)
    if session_type is None or not session_type.is_active:
        raise InvalidSessionType()

    coach = db.get(Coach, body.coach_id)
    if coach is None or not coach.is_active:
        raise NotFound("Coach not found")

    end_time = add_minutes(start_time, session_type.duration_minutes)

    location_id = body.location_id
    if location_id is None:
        rule = weekly_rule(db, coach.id, day_of_week(parse_date(booking_date)))
        location_id = rule.location_id if rule else None

    params = {
        "coach_id": coach.id,
        "session_type_id": session_type.id,
        "location_id": location_id,
        "student_name": body.student_name.strip(),
        "student_email": body.student_email.strip(),
        "student_phone": body.student_phone or None,
        "booking_date": booking_date,
        "start_time": start_time,
        "end_time": end_time,
        "duration_minutes": session_type.duration_minutes,
        "special_requests": body.special_requests or None,
    }

    for attempt in range(1, settings.booking_reference_attempts + 1):
        reference = generate_reference(settings.booking_reference_prefix, settings.booking_reference_length)
        if _reference_exists(db, reference):
            logger.info("Booking reference collision, retrying", extra={"attempt": attempt})
            continue

        try:
            res = db.execute(INSERT_IF_FREE, {**params, "booking_reference": reference, "created_at": utcnow()})
            db.commit()
        except IntegrityError:
            db.rollback()
            if _reference_exists(db, reference):
                logger.info("Booking reference taken concurrently, retrying", extra={"attempt": attempt})
                continue
            if _active_slot_taken(db, coach.id, booking_date, start_time):
                # Lost the race on the active-slot unique index
                logger.info("Booking conflict", extra={"coach_id": coach.id, "date": booking_date, "start": start_time})
                raise SlotUnavailable()
            logger.exception("Booking insert violated a constraint", extra={"coach_id": coach.id, "date": booking_date})
            raise InternalError("Could not save booking")

        if res.rowcount != 1:
            logger.info("Booking conflict", extra={"coach_id": coach.id, "date": booking_date, "start": start_time})
            raise SlotUnavailable()

        booking_id = db.execute(
            select(Booking.id).where(Booking.booking_reference == reference)
        ).scalar_one()
        logger.info(
            "Booking created",
            extra={"booking_id": booking_id, "reference": reference, "coach_id": coach.id, "date": booking_date},
        )
        return {"booking_id": booking_id, "booking_reference": reference, "status": "confirmed"}

    logger.error("Could not generate a unique booking reference", extra={"attempts": settings.booking_reference_attempts})
    raise InternalError("Could not generate a booking reference")


def cancel_booking(db: Session, reference: str, reason: Optional[str] = None) -> dict:
    res = db.execute(CANCEL_IF_CONFIRMED, {
        "reference": reference,
        "reason": reason or DEFAULT_CANCELLATION_REASON,
        "cancelled_at": utcnow(),
    })
    db.commit()

    if res.rowcount != 1:
        raise NotFound("Booking not found or already cancelled")

    logger.info("Booking cancelled", extra={"reference": reference})
    return {"success": True, "message": "Booking cancelled successfully"}


def _detailed_bookings():
    return (
        select(
            Booking,
            Coach.name.label("coach_name"),
            SessionType.name.label("session_type_name"),
            Location.name.label("location_name"),
        )
        .join(Coach, Booking.coach_id == Coach.id)
        .join(SessionType, Booking.session_type_id == SessionType.id)
        .outerjoin(Location, Booking.location_id == Location.id)
    )


def _detail_dict(row) -> dict:
    data = row.Booking.to_dict()
    data["coach_name"] = row.coach_name
    data["session_type_name"] = row.session_type_name
    data["location_name"] = row.location_name
    return data


def list_bookings(db: Session, booking_filter: BookingFilter) -> list[dict]:
    stmt = booking_filter.apply(_detailed_bookings()).order_by(
        Booking.booking_date.desc(), Booking.start_time.desc(), Booking.id.desc()
    )
    return [_detail_dict(row) for row in db.execute(stmt)]


def get_booking(db: Session, reference: str) -> dict:
    row = db.execute(_detailed_bookings().where(Booking.booking_reference == reference)).first()
    if row is None:
        raise NotFound("Booking not found")
    return _detail_dict(row)
