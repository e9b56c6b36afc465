# Re-export all models
from app.models.booking import Booking, BookingCreate, BookingWithPlace
from app.models.place import Pagination, Place, PlaceFields, PlacePage, PlaceUpdate
from app.models.user import Identity, UserLogin, UserPublic, UserSignup

__all__ = [
    # Place models
    "Place",
    "PlaceFields",
    "PlaceUpdate",
    "PlacePage",
    "Pagination",
    # Booking models
    "Booking",
    "BookingCreate",
    "BookingWithPlace",
    # User models
    "UserSignup",
    "UserLogin",
    "UserPublic",
    "Identity",
]
