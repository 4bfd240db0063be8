from studio_booking.main import app

__all__ = ["app"]
