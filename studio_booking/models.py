import json
import logging
from datetime import datetime, timezone

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Column,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    TypeDecorator,
    text,
)

from studio_booking.db import Base

logger = logging.getLogger(__name__)

BOOKING_STATUSES = ("confirmed", "cancelled", "rescheduled", "completed", "no_show")
# Statuses that occupy a coach's time
ACTIVE_BOOKING_STATUSES = ("confirmed", "rescheduled")
EXCEPTION_TYPES = ("unavailable", "custom_hours")


def utcnow():
    return datetime.now(timezone.utc)


def parse_json_list(value) -> list:
    """Decode a serialized array column; anything malformed reads as an empty list."""
    if not value:
        return []
    try:
        parsed = json.loads(value)
    except (TypeError, ValueError):
        logger.warning("Malformed array column value", extra={"value": value})
        return []
    if not isinstance(parsed, list):
        return []
    return parsed


class JSONList(TypeDecorator):
    """A list of strings stored as a JSON array in a text column."""

    impl = Text
    cache_ok = True

    def process_bind_param(self, value, dialect):
        if value is None:
            return json.dumps([])
        if isinstance(value, (str, bytes)):
            raise TypeError(f"JSONList expects a list of strings, got {type(value).__name__}")
        return json.dumps(list(value))

    def process_result_value(self, value, dialect):
        return parse_json_list(value)


class Coach(Base):
    __tablename__ = "coaches"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    email = Column(String)
    phone = Column(String)
    bio = Column(Text)
    profile_image_url = Column(String)
    martial_arts_styles = Column(JSONList, nullable=False, default=list)
    languages = Column(JSONList, nullable=False, default=list)
    experience_years = Column(Integer, nullable=False, default=0)
    certifications = Column(JSONList, nullable=False, default=list)
    hourly_rate = Column(Float)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "email": self.email,
            "phone": self.phone,
            "bio": self.bio,
            "profile_image_url": self.profile_image_url,
            "martial_arts_styles": self.martial_arts_styles,
            "languages": self.languages,
            "experience_years": self.experience_years,
            "certifications": self.certifications,
            "hourly_rate": self.hourly_rate,
            "is_active": self.is_active,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }


class SessionType(Base):
    __tablename__ = "session_types"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    description = Column(Text)
    duration_minutes = Column(Integer, nullable=False)
    buffer_minutes = Column(Integer, nullable=False, default=0)
    max_participants = Column(Integer, nullable=False, default=1)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        CheckConstraint("duration_minutes > 0", name="session_duration_positive"),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "duration_minutes": self.duration_minutes,
            "buffer_minutes": self.buffer_minutes,
            "max_participants": self.max_participants,
            "is_active": self.is_active,
            "created_at": self.created_at,
        }


class Location(Base):
    __tablename__ = "locations"
    id = Column(Integer, primary_key=True, autoincrement=True)
    name = Column(String, nullable=False)
    description = Column(Text)
    capacity = Column(Integer, nullable=False, default=1)
    equipment = Column(JSONList, nullable=False, default=list)
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)

    def to_dict(self):
        return {
            "id": self.id,
            "name": self.name,
            "description": self.description,
            "capacity": self.capacity,
            "equipment": self.equipment,
            "is_active": self.is_active,
            "created_at": self.created_at,
        }


class CoachAvailability(Base):
    __tablename__ = "coach_availability"
    id = Column(Integer, primary_key=True, autoincrement=True)
    coach_id = Column(Integer, ForeignKey("coaches.id", ondelete="CASCADE"), nullable=False)
    day_of_week = Column(Integer, nullable=False)  # 0 = Sunday
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    location_id = Column(Integer, ForeignKey("locations.id", ondelete="SET NULL"))
    is_active = Column(Boolean, nullable=False, default=True)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        CheckConstraint("day_of_week BETWEEN 0 AND 6", name="availability_day_valid"),
        CheckConstraint("end_time > start_time", name="availability_time_valid"),
    )


class AvailabilityException(Base):
    __tablename__ = "availability_exceptions"
    id = Column(Integer, primary_key=True, autoincrement=True)
    coach_id = Column(Integer, ForeignKey("coaches.id", ondelete="CASCADE"), nullable=False)
    exception_date = Column(String(10), nullable=False)
    exception_type = Column(String, nullable=False)  # unavailable|custom_hours
    start_time = Column(String(5))
    end_time = Column(String(5))
    reason = Column(Text)
    created_at = Column(DateTime, default=utcnow)

    __table_args__ = (
        CheckConstraint(
            "exception_type in ('unavailable','custom_hours')", name="exception_type_valid"
        ),
    )


class Booking(Base):
    __tablename__ = "bookings"
    id = Column(Integer, primary_key=True, autoincrement=True)
    coach_id = Column(Integer, ForeignKey("coaches.id"), nullable=False)
    session_type_id = Column(Integer, ForeignKey("session_types.id"), nullable=False)
    location_id = Column(Integer, ForeignKey("locations.id", ondelete="SET NULL"))
    student_name = Column(String, nullable=False)
    student_email = Column(String, nullable=False)
    student_phone = Column(String)
    booking_date = Column(String(10), nullable=False)
    start_time = Column(String(5), nullable=False)
    end_time = Column(String(5), nullable=False)
    duration_minutes = Column(Integer, nullable=False)
    status = Column(String, nullable=False, default="confirmed")
    cancellation_reason = Column(Text)
    special_requests = Column(Text)
    booking_reference = Column(String, nullable=False, unique=True)
    created_at = Column(DateTime, default=utcnow)
    updated_at = Column(DateTime, default=utcnow, onupdate=utcnow)
    cancelled_at = Column(DateTime)

    __table_args__ = (
        CheckConstraint(
            "status in ('confirmed','cancelled','rescheduled','completed','no_show')",
            name="booking_status_valid",
        ),
        CheckConstraint("end_time > start_time", name="booking_time_valid"),
        Index("ix_bookings_coach_date", "coach_id", "booking_date"),
        Index("ix_bookings_student_email", "student_email"),
        # Two active bookings can never share a start on the same coach/date
        Index(
            "uq_bookings_active_slot",
            "coach_id",
            "booking_date",
            "start_time",
            unique=True,
            sqlite_where=text("status IN ('confirmed','rescheduled')"),
            postgresql_where=text("status IN ('confirmed','rescheduled')"),
        ),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "coach_id": self.coach_id,
            "session_type_id": self.session_type_id,
            "location_id": self.location_id,
            "student_name": self.student_name,
            "student_email": self.student_email,
            "student_phone": self.student_phone,
            "booking_date": self.booking_date,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "duration_minutes": self.duration_minutes,
            "status": self.status,
            "cancellation_reason": self.cancellation_reason,
            "special_requests": self.special_requests,
            "booking_reference": self.booking_reference,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
            "cancelled_at": self.cancelled_at,
        }
