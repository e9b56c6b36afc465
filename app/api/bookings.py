import logging

from fastapi import APIRouter, Request

from app.context import get_context
from app.middleware.auth import require_identity
from app.middleware.rate_limit import limiter
from app.models.booking import BookingCreate
from app.services import booking_service
from app.services.errors import UpstreamError

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

router = APIRouter(prefix="/bookings", tags=["bookings"])


@router.post("")
@limiter.limit("20/hour")
async def create_booking(request: Request, payload: BookingCreate):
    identity = require_identity(request)
    return await booking_service.create_booking(get_context(request), identity, payload)


@router.get("")
@limiter.limit("60/minute")
async def get_my_bookings(request: Request):
    """Caller's bookings, each with its place embedded"""
    identity = require_identity(request)
    return await booking_service.list_bookings_for_user(get_context(request), identity)


@router.delete("/{booking_id}")
@limiter.limit("20/hour")
async def delete_booking(request: Request, booking_id: str):
    try:
        message = await booking_service.delete_booking(get_context(request), booking_id)
    except Exception as e:
        logger.error(f"Error deleting booking {booking_id}: {e}", exc_info=True)
        raise UpstreamError(f"Failed to delete booking: {e}")
    return {"message": message}
