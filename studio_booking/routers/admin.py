from fastapi import APIRouter, Depends, Query
from sqlalchemy.orm import Session

from studio_booking.bookings import list_bookings
from studio_booking.db import get_db
from studio_booking.filters import BookingFilter

router = APIRouter()


@router.get("/bookings")
def admin_bookings(
    date_from: str | None = Query(default=None),
    date_to: str | None = Query(default=None),
    coach_id: int | None = Query(default=None),
    status: str | None = Query(default=None),
    student_email: str | None = Query(default=None),
    db: Session = Depends(get_db),
):
    """All bookings matching every given filter, newest first."""
    booking_filter = BookingFilter.from_params(
        date_from=date_from,
        date_to=date_to,
        coach_id=coach_id,
        status=status,
        student_email=student_email,
    )
    return {"bookings": list_bookings(db, booking_filter)}
