from datetime import datetime
from typing import Annotated

from pydantic import AliasChoices, BaseModel, Field

from app.models.place import Place
from app.models.utils import camel_config


class BookingCreate(BaseModel):
    model_config = camel_config

    # Clients send the listing id as "place"; "listingId" is accepted too
    place: str = Field(validation_alias=AliasChoices("place", "listingId", "listing_id"))
    checkin: datetime
    checkout: datetime
    guests: int
    phone: Annotated[str, Field(max_length=50)]
    name: Annotated[str, Field(max_length=200)]
    price: float


class Booking(BaseModel):
    model_config = camel_config

    id: str
    place: str
    user: str
    checkin: datetime
    checkout: datetime
    guests: int
    phone: str
    name: str
    price: float


class BookingWithPlace(Booking):
    """Booking with its listing expanded, as returned by GET /bookings"""

    place: Place | None = None
