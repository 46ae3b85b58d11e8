# Import all models so that SQLAlchemy registers them for metadata.create_all
from app.models.user import User
from app.models.booking import Booking
from app.models.auth_event import AuthEvent

__all__ = [
    "User",
    "Booking",
    "AuthEvent",
]
