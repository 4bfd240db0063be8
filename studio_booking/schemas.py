from typing import Optional

from pydantic import BaseModel


class CreateBookingBody(BaseModel):
    # Everything is optional here so that missing fields surface as a
    # single "Missing required fields" error from the booking writer.
    coach_id: Optional[int] = None
    session_type_id: Optional[int] = None
    location_id: Optional[int] = None
    student_name: Optional[str] = None
    student_email: Optional[str] = None
    student_phone: Optional[str] = None
    booking_date: Optional[str] = None
    start_time: Optional[str] = None
    special_requests: Optional[str] = None


class CancelBookingBody(BaseModel):
    cancellation_reason: Optional[str] = None
