import logging

from sqlalchemy import create_engine
from sqlalchemy.orm import Session, declarative_base, sessionmaker

from studio_booking.config import get_settings

logger = logging.getLogger(__name__)


def make_engine(url: str):
    connect_args = {}
    if url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    return create_engine(url, connect_args=connect_args)


engine = make_engine(get_settings().database_url)
SessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

Base = declarative_base()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def init_db(bind=None, seed: bool | None = None):
    # Import models here to register tables on Base.metadata
    from studio_booking import models  # noqa: F401

    bind = bind or engine
    Base.metadata.create_all(bind=bind)

    if seed is None:
        seed = get_settings().seed_demo_data
    if not seed:
        return

    db = Session(bind=bind)
    try:
        seed_demo_data(db)
    finally:
        db.close()


def seed_demo_data(db: Session) -> None:
    """Insert a small studio roster if the database has no coaches yet."""
    from studio_booking.models import Coach, CoachAvailability, Location, SessionType

    if db.query(Coach).first():
        return

    main_floor = Location(
        name="Main Floor",
        description="Matted training floor with heavy bags",
        capacity=20,
        equipment=["mats", "heavy bags", "speed bags"],
    )
    ring = Location(name="Ring", description="Full-size boxing ring", capacity=4, equipment=["ring", "gloves"])
    db.add_all([main_floor, ring])

    db.add_all([
        SessionType(name="Private Lesson", description="One-on-one technique session", duration_minutes=60),
        SessionType(name="Sparring Session", description="Controlled sparring with a coach", duration_minutes=60),
        SessionType(name="Intro Class", description="First session for new students", duration_minutes=30),
        SessionType(name="Extended Training", description="Two-hour conditioning block", duration_minutes=120),
    ])

    coaches = [
        Coach(
            name="Li Wei",
            email="li.wei@fightclub.example",
            bio="Shaolin-trained instructor focused on fundamentals.",
            martial_arts_styles=["Kung Fu", "Tai Chi"],
            languages=["English", "Mandarin"],
            experience_years=18,
            certifications=["Shaolin Temple Instructor"],
            hourly_rate=90,
        ),
        Coach(
            name="Maria Santos",
            email="maria.santos@fightclub.example",
            bio="Former pro fighter coaching striking and grappling.",
            martial_arts_styles=["MMA", "Brazilian Jiu-Jitsu", "Muay Thai"],
            languages=["English", "Spanish"],
            experience_years=12,
            certifications=["IBJJF Black Belt"],
            hourly_rate=80,
        ),
        Coach(
            name="Kenji Sato",
            email="kenji.sato@fightclub.example",
            bio="Traditional karate with a competition edge.",
            martial_arts_styles=["Karate", "Boxing"],
            languages=["English", "Japanese"],
            experience_years=9,
            certifications=["JKA 4th Dan"],
            hourly_rate=70,
        ),
    ]
    db.add_all(coaches)
    db.flush()

    # Mon-Fri mornings on the main floor, Saturday afternoons in the ring
    for coach in coaches:
        for day in range(1, 6):
            db.add(CoachAvailability(
                coach_id=coach.id, day_of_week=day, start_time="09:00", end_time="12:00",
                location_id=main_floor.id,
            ))
        db.add(CoachAvailability(
            coach_id=coach.id, day_of_week=6, start_time="13:00", end_time="17:00", location_id=ring.id,
        ))

    db.commit()
    logger.info("Seeded demo data", extra={"coaches": len(coaches)})
