"""
Listing (place) service.

Owner-scoped create/update/delete of places and reconciliation of each
place's photo keys against blob storage.
"""
import logging
import math
from typing import Iterable, List

from app.models.place import Pagination, Place, PlaceFields, PlacePage, PlaceUpdate
from app.models.user import Identity
from app.services.cleanup_service import delete_blobs_best_effort
from app.services.errors import Forbidden, NotFound, ValidationError

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


async def ensure_photos_materialized(ctx, photo_keys: Iterable[str]) -> None:
    """Every photo key must point at a blob that already exists in storage"""
    missing = [key for key in dict.fromkeys(photo_keys) if not await ctx.storage.exists(key)]
    if missing:
        raise ValidationError(f"Photos not found in storage: {', '.join(missing)}")


async def create_place(ctx, identity: Identity, fields: PlaceFields) -> Place:
    data = fields.model_dump()
    await ensure_photos_materialized(ctx, data["photos"])

    place = await ctx.db.insert_place(identity.id, data)
    logger.info(f"Created place {place['id']} for user {identity.id}")
    return Place(**place)


async def get_place(ctx, place_id: str) -> Place:
    place = await ctx.db.find_place(place_id)
    if not place:
        raise NotFound(f"Place with id {place_id} not found")
    return Place(**place)


async def list_places_for_owner(ctx, owner_id: str) -> List[Place]:
    return [Place(**place) for place in await ctx.db.find_places_by_owner(owner_id)]


async def list_places(ctx, page: int, page_size: int) -> PlacePage:
    page_size = min(page_size, ctx.settings.max_page_size)
    offset = (page - 1) * page_size

    rows, total_count = await ctx.db.find_places_page(page_size, offset)
    total_pages = math.ceil(total_count / page_size) if total_count > 0 else 0

    logger.info(f"Browse places: page={page}, page_size={page_size}, returned={len(rows)}")
    return PlacePage(
        places=[Place(**row) for row in rows],
        pagination=Pagination(
            page=page,
            page_size=page_size,
            total_items=total_count,
            total_pages=total_pages,
            has_next=page < total_pages,
            has_previous=page > 1,
        ),
    )


async def update_place(ctx, identity: Identity, payload: PlaceUpdate) -> str:
    place = await ctx.db.find_place(payload.id)
    if not place:
        raise NotFound(f"Place with id {payload.id} not found")

    if identity.id != place["owner"]:
        logger.warning(f"User {identity.id} tried to update place {payload.id} owned by {place['owner']}")
        raise Forbidden("You don't own this place")

    old_photos = list(place["photos"])
    data = payload.model_dump(exclude={"id"})

    # Only keys new to this place need checking; existing ones were checked when added
    await ensure_photos_materialized(ctx, [key for key in data["photos"] if key not in old_photos])

    updated = await ctx.db.update_place(payload.id, data)
    if not updated:
        # Deleted between the read and the write
        raise NotFound(f"Place with id {payload.id} not found")

    used_photos = set(updated["photos"])
    stale_photos = [key for key in old_photos if key not in used_photos]
    if stale_photos:
        logger.info(f"Removing {len(stale_photos)} unused photos of place {payload.id}")
        await delete_blobs_best_effort(ctx, stale_photos)

    logger.info(f"Successfully updated place {payload.id}")
    return "ok"


async def delete_place(ctx, place_id: str) -> str:
    """
    Delete a place with its bookings and photos.

    Dependents go first (bookings, then blobs) and the place row last, so a
    failure part-way never leaves a place whose bookings or photos are gone.
    """
    place = await ctx.db.find_place(place_id)
    if not place:
        raise NotFound(f"Place with id {place_id} not found")

    removed_bookings = await ctx.db.delete_bookings_by_place(place_id)
    logger.info(f"Deleted {removed_bookings} bookings of place {place_id}")

    failed = await delete_blobs_best_effort(ctx, place["photos"])
    if failed:
        logger.warning(f"{len(failed)} photos of place {place_id} queued for cleanup")

    await ctx.db.delete_place(place_id)
    logger.info(f"Successfully deleted place {place_id}")
    return f"Place with id {place_id} deleted successfully"
