from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from studio_booking.bookings import cancel_booking, create_booking, get_booking, list_bookings
from studio_booking.db import get_db
from studio_booking.filters import BookingFilter
from studio_booking.schemas import CancelBookingBody, CreateBookingBody

router = APIRouter()


@router.post("")
def create(body: CreateBookingBody, db: Session = Depends(get_db)):
    """
    Book a session. The overlap check and the insert happen in one statement,
    so of two requests for the same slot exactly one is confirmed and the
    other gets 409.
    """
    return create_booking(db, body)


@router.get("/student/{email}")
def student_bookings(email: str, db: Session = Depends(get_db)):
    return {"bookings": list_bookings(db, BookingFilter(student_email=email))}


@router.get("/{reference}")
def booking_detail(reference: str, db: Session = Depends(get_db)):
    return {"booking": get_booking(db, reference)}


@router.patch("/{reference}/cancel")
def cancel(reference: str, body: CancelBookingBody | None = None, db: Session = Depends(get_db)):
    # Only confirmed bookings can be cancelled; anything else is reported as 404
    reason = body.cancellation_reason if body else None
    return cancel_booking(db, reference, reason)
