"""
Typed query-string filters.

Each filter turns optional request parameters into SQLAlchemy conditions and
applies them to a select(); values are always bound, never spliced into SQL.
"""

import json
from dataclasses import dataclass, field
from typing import Optional

from sqlalchemy import Text, and_, exists, or_, select, type_coerce

from studio_booking.errors import ValidationError
from studio_booking.models import (
    BOOKING_STATUSES,
    AvailabilityException,
    Booking,
    Coach,
    CoachAvailability,
)
from studio_booking.timeutil import day_of_week, parse_date


def split_csv(value: Optional[str]) -> list[str]:
    if not value:
        return []
    return [part.strip() for part in value.split(",") if part.strip()]


def _escape_like(value: str) -> str:
    return value.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


def array_contains_any(column, values: list[str]):
    """Match rows whose JSON array column holds any of values as a whole element."""
    text_column = type_coerce(column, Text)
    return or_(*[
        text_column.like(f"%{_escape_like(json.dumps(v))}%", escape="\\")
        for v in values
    ])


@dataclass
class CoachFilter:
    styles: list[str] = field(default_factory=list)
    languages: list[str] = field(default_factory=list)
    experience_min: Optional[int] = None
    available_date: Optional[str] = None

    @classmethod
    def from_params(cls, styles=None, languages=None, experience_min=None, available_date=None):
        if available_date:
            available_date = parse_date(available_date).isoformat()
        if experience_min is not None and experience_min < 0:
            raise ValidationError("experience_min must not be negative")
        return cls(
            styles=split_csv(styles),
            languages=split_csv(languages),
            experience_min=experience_min,
            available_date=available_date or None,
        )

    def conditions(self) -> list:
        conds = [Coach.is_active.is_(True)]
        if self.styles:
            conds.append(array_contains_any(Coach.martial_arts_styles, self.styles))
        if self.languages:
            conds.append(array_contains_any(Coach.languages, self.languages))
        if self.experience_min is not None:
            conds.append(Coach.experience_years >= self.experience_min)
        if self.available_date:
            weekday = day_of_week(parse_date(self.available_date))
            conds.append(exists().where(
                CoachAvailability.coach_id == Coach.id,
                CoachAvailability.day_of_week == weekday,
                CoachAvailability.is_active.is_(True),
            ))
            conds.append(~exists().where(
                AvailabilityException.coach_id == Coach.id,
                AvailabilityException.exception_date == self.available_date,
                AvailabilityException.exception_type == "unavailable",
            ))
        return conds

    def apply(self, stmt):
        return stmt.where(and_(*self.conditions()))

    def statement(self):
        return self.apply(select(Coach)).order_by(Coach.experience_years.desc(), Coach.id)


@dataclass
class BookingFilter:
    date_from: Optional[str] = None
    date_to: Optional[str] = None
    coach_id: Optional[int] = None
    status: Optional[str] = None
    student_email: Optional[str] = None

    @classmethod
    def from_params(cls, date_from=None, date_to=None, coach_id=None, status=None, student_email=None):
        if date_from:
            date_from = parse_date(date_from).isoformat()
        if date_to:
            date_to = parse_date(date_to).isoformat()
        if status and status not in BOOKING_STATUSES:
            raise ValidationError(f"Unknown booking status: {status}")
        return cls(
            date_from=date_from or None,
            date_to=date_to or None,
            coach_id=coach_id,
            status=status or None,
            student_email=student_email or None,
        )

    def conditions(self) -> list:
        conds = []
        if self.date_from:
            conds.append(Booking.booking_date >= self.date_from)
        if self.date_to:
            conds.append(Booking.booking_date <= self.date_to)
        if self.coach_id is not None:
            conds.append(Booking.coach_id == self.coach_id)
        if self.status:
            conds.append(Booking.status == self.status)
        if self.student_email:
            conds.append(Booking.student_email == self.student_email)
        return conds

    def apply(self, stmt):
        conds = self.conditions()
        if not conds:
            return stmt
        return stmt.where(and_(*conds))
