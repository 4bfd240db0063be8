from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.orm import Session

from studio_booking.db import get_db
from studio_booking.models import Location, SessionType

router = APIRouter()


@router.get("/session-types")
def list_session_types(db: Session = Depends(get_db)):
    stmt = select(SessionType).where(SessionType.is_active.is_(True)).order_by(SessionType.name)
    return {"session_types": [st.to_dict() for st in db.execute(stmt).scalars()]}


@router.get("/locations")
def list_locations(db: Session = Depends(get_db)):
    stmt = select(Location).where(Location.is_active.is_(True)).order_by(Location.name)
    return {"locations": [loc.to_dict() for loc in db.execute(stmt).scalars()]}
