import logging
from typing import List

from app.models.booking import Booking, BookingCreate, BookingWithPlace
from app.models.place import Place
from app.models.user import Identity
from app.services.errors import NotFound

logger = logging.getLogger(__name__)


async def create_booking(ctx, identity: Identity, payload: BookingCreate) -> Booking:
    # No availability check: overlapping bookings for the same place are accepted
    booking = await ctx.db.insert_booking(identity.id, payload.model_dump())
    logger.info(f"User {identity.id} booked place {booking['place']}: booking {booking['id']}")
    return Booking(**booking)


async def list_bookings_for_user(ctx, identity: Identity) -> List[BookingWithPlace]:
    """Caller's bookings, each with its place expanded from one batched lookup"""
    bookings = await ctx.db.find_bookings_by_user(identity.id)
    if not bookings:
        return []

    place_ids = list(dict.fromkeys(b["place"] for b in bookings))
    places = {p["id"]: Place(**p) for p in await ctx.db.find_places_by_ids(place_ids)}

    return [
        BookingWithPlace(**{**booking, "place": places.get(booking["place"])})
        for booking in bookings
    ]


async def delete_booking(ctx, booking_id: str) -> str:
    deleted = await ctx.db.delete_booking(booking_id)
    if not deleted:
        logger.info(f"Booking {booking_id} did not exist")
    return f"Booking with id {booking_id} deleted successfully"


async def list_bookings_for_place(ctx, place_id: str) -> List[Booking]:
    place = await ctx.db.find_place(place_id)
    if not place:
        raise NotFound("Place not found")
    return [Booking(**b) for b in await ctx.db.find_bookings_by_place(place_id)]
