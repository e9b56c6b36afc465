import logging

from fastapi import APIRouter, Query, Request

from app.context import get_context
from app.middleware.auth import require_identity
from app.middleware.rate_limit import limiter
from app.models.place import PlaceFields, PlaceUpdate
from app.services import booking_service, place_service
from app.services.errors import AppError, NotFound, UpstreamError

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

router = APIRouter(tags=["places"])


@router.post("/places")
@limiter.limit("15/hour")
async def create_place(request: Request, payload: PlaceFields):
    """Create a place owned by the caller. Photos must already be uploaded."""
    identity = require_identity(request)
    return await place_service.create_place(get_context(request), identity, payload)


@router.get("/user-places")
@limiter.limit("60/minute")
async def get_my_places(request: Request):
    """All places owned by the authenticated user"""
    identity = require_identity(request)
    return await place_service.list_places_for_owner(get_context(request), identity.id)


@router.get("/places/{place_id}")
@limiter.limit("100/minute")
async def get_place(request: Request, place_id: str):
    """Single place, or null when it doesn't exist"""
    try:
        return await place_service.get_place(get_context(request), place_id)
    except NotFound:
        return None


@router.put("/places")
@limiter.limit("10/minute")
async def update_place(request: Request, payload: PlaceUpdate):
    """
    Update a place owned by the caller.

    Photos dropped from the place are removed from storage afterwards;
    a photo that fails to delete is queued for the cleanup job.
    """
    identity = require_identity(request)
    return await place_service.update_place(get_context(request), identity, payload)


@router.get("/places")
@limiter.limit("60/minute")
async def browse_places(
    request: Request,
    page: int = Query(1, ge=1, description="Page number (starts at 1)"),
    page_size: int = Query(20, ge=1, le=100, description="Items per page (max 100)"),
):
    """Browse all places, newest first, one bounded page at a time."""
    return await place_service.list_places(get_context(request), page, page_size)


@router.delete("/places/{place_id}")
@limiter.limit("5/hour")
async def delete_place(request: Request, place_id: str):
    """Delete a place together with its bookings and photos."""
    try:
        message = await place_service.delete_place(get_context(request), place_id)
    except AppError:
        raise
    except Exception as e:
        logger.error(f"Error deleting place {place_id}: {e}", exc_info=True)
        raise UpstreamError(f"Failed to delete place: {e}")
    return {"message": message}


@router.get("/places/{place_id}/bookings")
@limiter.limit("60/minute")
async def get_place_bookings(request: Request, place_id: str):
    return await booking_service.list_bookings_for_place(get_context(request), place_id)
