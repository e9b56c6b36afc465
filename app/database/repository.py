"""
Persistence service for users, places, bookings and the blob cleanup queue.

Thin asyncpg wrapper: every method acquires a pooled connection, runs one
statement and hands back plain dicts keyed the way the API models expect
(ids as strings, place_id -> place, user_id -> user).
"""

import logging
import uuid
from typing import Iterable, List, Optional

import asyncpg  # type: ignore

from app.database.query_builder import QueryBuilder
from app.services.errors import ValidationError

logger = logging.getLogger(__name__)

PLACE_COLUMNS = (
    "title",
    "address",
    "photos",
    "description",
    "bedroom",
    "bed",
    "bath",
    "max_guests",
    "perks",
    "extra_info",
    "checkin",
    "checkout",
    "price",
)


def _as_uuid(value) -> Optional[uuid.UUID]:
    """Ids arrive from URLs and cookies; anything that is not a UUID cannot match a row"""
    if isinstance(value, uuid.UUID):
        return value
    try:
        return uuid.UUID(str(value))
    except (TypeError, ValueError):
        return None


def _user_from_row(row) -> dict:
    return {
        "id": str(row["id"]),
        "firstname": row["firstname"],
        "lastname": row["lastname"],
        "email": row["email"],
        "password_hash": row["password_hash"],
    }


def _place_from_row(row) -> dict:
    place = {column: row[column] for column in PLACE_COLUMNS}
    place["id"] = str(row["id"])
    place["owner"] = str(row["owner"])
    place["photos"] = list(row["photos"] or [])
    place["perks"] = list(row["perks"] or [])
    return place


def _booking_from_row(row) -> dict:
    return {
        "id": str(row["id"]),
        "place": str(row["place_id"]),
        "user": str(row["user_id"]),
        "checkin": row["checkin"],
        "checkout": row["checkout"],
        "guests": row["guests"],
        "phone": row["phone"],
        "name": row["name"],
        "price": row["price"],
    }


class Database:
    def __init__(self, pool: asyncpg.Pool):
        self.pool = pool

    async def close(self) -> None:
        await self.pool.close()

    # Users

    async def insert_user(self, data: dict) -> dict:
        record = {"id": uuid.uuid4(), **data}
        query, values = QueryBuilder.build_insert_query(record, "users")
        try:
            async with self.pool.acquire() as conn:
                row = await conn.fetchrow(query, *values)
        except asyncpg.UniqueViolationError:
            raise ValidationError("Email already registered")
        return _user_from_row(row)

    async def find_user_by_email(self, email: str) -> Optional[dict]:
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow("SELECT * FROM users WHERE email = $1", email)
        return _user_from_row(row) if row else None

    async def find_user_by_id(self, user_id: str) -> Optional[dict]:
        key = _as_uuid(user_id)
        if key is None:
            return None
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow("SELECT * FROM users WHERE id = $1", key)
        return _user_from_row(row) if row else None

    # Places

    async def insert_place(self, owner: str, fields: dict) -> dict:
        owner_key = _as_uuid(owner)
        if owner_key is None:
            raise ValidationError("Invalid owner id")
        record = {"id": uuid.uuid4(), "owner": owner_key}
        record.update({column: fields.get(column) for column in PLACE_COLUMNS})
        query, values = QueryBuilder.build_insert_query(record, "places")
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, *values)
        return _place_from_row(row)

    async def find_place(self, place_id: str) -> Optional[dict]:
        key = _as_uuid(place_id)
        if key is None:
            return None
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow("SELECT * FROM places WHERE id = $1", key)
        return _place_from_row(row) if row else None

    async def find_places_by_owner(self, owner: str) -> List[dict]:
        key = _as_uuid(owner)
        if key is None:
            return []
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT * FROM places WHERE owner = $1 ORDER BY created_at DESC", key
            )
        return [_place_from_row(row) for row in rows]

    async def find_places_by_ids(self, place_ids: Iterable[str]) -> List[dict]:
        keys = [key for key in (_as_uuid(pid) for pid in place_ids) if key is not None]
        if not keys:
            return []
        async with self.pool.acquire() as conn:
            rows = await conn.fetch("SELECT * FROM places WHERE id = ANY($1::uuid[])", keys)
        return [_place_from_row(row) for row in rows]

    async def find_places_page(self, limit: int, offset: int) -> tuple[List[dict], int]:
        query_page = """
            SELECT * FROM places
            ORDER BY created_at DESC, id
            LIMIT $1 OFFSET $2
        """
        async with self.pool.acquire() as conn:
            total = await conn.fetchval("SELECT COUNT(*) FROM places")
            rows = await conn.fetch(query_page, limit, offset)
        return [_place_from_row(row) for row in rows], total

    async def update_place(self, place_id: str, fields: dict) -> Optional[dict]:
        key = _as_uuid(place_id)
        if key is None:
            return None
        data = {column: fields.get(column) for column in PLACE_COLUMNS}
        query, values = QueryBuilder.build_update_query(data, "places", "id", key)
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, *values)
        return _place_from_row(row) if row else None

    async def delete_place(self, place_id: str) -> bool:
        key = _as_uuid(place_id)
        if key is None:
            return False
        async with self.pool.acquire() as conn:
            result = await conn.execute("DELETE FROM places WHERE id = $1", key)
        return result != "DELETE 0"

    async def is_photo_referenced(self, photo_key: str) -> bool:
        async with self.pool.acquire() as conn:
            found = await conn.fetchval(
                "SELECT 1 FROM places WHERE $1 = ANY(photos) LIMIT 1", photo_key
            )
        return found is not None

    # Bookings

    async def insert_booking(self, user_id: str, data: dict) -> dict:
        place_key = _as_uuid(data["place"])
        user_key = _as_uuid(user_id)
        if place_key is None or user_key is None:
            raise ValidationError("Invalid place or user id")
        record = {
            "id": uuid.uuid4(),
            "place_id": place_key,
            "user_id": user_key,
            "checkin": data["checkin"],
            "checkout": data["checkout"],
            "guests": data["guests"],
            "phone": data["phone"],
            "name": data["name"],
            "price": data["price"],
        }
        query, values = QueryBuilder.build_insert_query(record, "bookings")
        async with self.pool.acquire() as conn:
            row = await conn.fetchrow(query, *values)
        return _booking_from_row(row)

    async def find_bookings_by_user(self, user_id: str) -> List[dict]:
        key = _as_uuid(user_id)
        if key is None:
            return []
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT * FROM bookings WHERE user_id = $1 ORDER BY checkin", key
            )
        return [_booking_from_row(row) for row in rows]

    async def find_bookings_by_place(self, place_id: str) -> List[dict]:
        key = _as_uuid(place_id)
        if key is None:
            return []
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(
                "SELECT * FROM bookings WHERE place_id = $1 ORDER BY checkin", key
            )
        return [_booking_from_row(row) for row in rows]

    async def delete_bookings_by_place(self, place_id: str) -> int:
        key = _as_uuid(place_id)
        if key is None:
            return 0
        async with self.pool.acquire() as conn:
            result = await conn.execute("DELETE FROM bookings WHERE place_id = $1", key)
        # asyncpg status string looks like "DELETE 3"
        return int(result.split()[-1])

    async def delete_booking(self, booking_id: str) -> bool:
        key = _as_uuid(booking_id)
        if key is None:
            return False
        async with self.pool.acquire() as conn:
            result = await conn.execute("DELETE FROM bookings WHERE id = $1", key)
        return result != "DELETE 0"

    # Blob cleanup queue

    async def enqueue_blob_cleanup(self, blob_key: str, error: str) -> None:
        query = """
            INSERT INTO blob_cleanup_queue (blob_key, attempts, last_error)
            VALUES ($1, 1, $2)
            ON CONFLICT (blob_key) DO UPDATE SET
                attempts = blob_cleanup_queue.attempts + 1,
                last_error = EXCLUDED.last_error,
                updated_at = NOW()
        """
        async with self.pool.acquire() as conn:
            await conn.execute(query, blob_key, error)

    async def pending_blob_cleanups(self, limit: int) -> List[dict]:
        query = """
            SELECT blob_key, attempts, last_error
            FROM blob_cleanup_queue
            ORDER BY updated_at
            LIMIT $1
        """
        async with self.pool.acquire() as conn:
            rows = await conn.fetch(query, limit)
        return [dict(row) for row in rows]

    async def remove_blob_cleanup(self, blob_key: str) -> None:
        async with self.pool.acquire() as conn:
            await conn.execute("DELETE FROM blob_cleanup_queue WHERE blob_key = $1", blob_key)
