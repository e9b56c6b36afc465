import uuid
from datetime import datetime, timezone
from unittest.mock import AsyncMock, MagicMock

import asyncpg  # type: ignore
import pytest

from app.database.repository import Database
from app.services.errors import ValidationError


@pytest.fixture
def conn():
    conn = MagicMock()
    conn.fetchrow = AsyncMock()
    conn.fetch = AsyncMock(return_value=[])
    conn.fetchval = AsyncMock()
    conn.execute = AsyncMock()
    return conn


@pytest.fixture
def pool(conn):
    pool = MagicMock()
    pool.acquire.return_value.__aenter__ = AsyncMock(return_value=conn)
    pool.acquire.return_value.__aexit__ = AsyncMock(return_value=False)
    pool.close = AsyncMock()
    return pool


@pytest.fixture
def db(pool):
    return Database(pool)


def place_row(**overrides):
    row = {
        "id": uuid.uuid4(),
        "owner": uuid.uuid4(),
        "title": "Loft",
        "address": "1 Main St",
        "photos": ["p1", "p2"],
        "description": "Bright",
        "bedroom": 1,
        "bed": 2,
        "bath": 1,
        "max_guests": 3,
        "perks": None,
        "extra_info": "",
        "checkin": "14:00",
        "checkout": "11:00",
        "price": 90.0,
        "created_at": datetime.now(timezone.utc),
        "updated_at": datetime.now(timezone.utc),
    }
    row.update(overrides)
    return row


def booking_row(**overrides):
    row = {
        "id": uuid.uuid4(),
        "place_id": uuid.uuid4(),
        "user_id": uuid.uuid4(),
        "checkin": datetime(2026, 5, 1, tzinfo=timezone.utc),
        "checkout": datetime(2026, 5, 4, tzinfo=timezone.utc),
        "guests": 2,
        "phone": "555-0100",
        "name": "Ann",
        "price": 270.0,
    }
    row.update(overrides)
    return row


async def test_insert_user_returns_string_id(db, conn):
    user_id = uuid.uuid4()
    conn.fetchrow.return_value = {
        "id": user_id,
        "firstname": "Ann",
        "lastname": "Lee",
        "email": "ann@example.com",
        "password_hash": "hash",
    }

    user = await db.insert_user(
        {"firstname": "Ann", "lastname": "Lee", "email": "ann@example.com", "password_hash": "hash"}
    )

    assert user["id"] == str(user_id)
    query, *values = conn.fetchrow.await_args.args
    assert query.startswith("INSERT INTO users (id, firstname, lastname, email, password_hash)")
    assert isinstance(values[0], uuid.UUID)
    assert values[1:] == ["Ann", "Lee", "ann@example.com", "hash"]


async def test_insert_user_duplicate_email_is_validation_error(db, conn):
    conn.fetchrow.side_effect = asyncpg.UniqueViolationError("duplicate key")

    with pytest.raises(ValidationError, match="Email already registered"):
        await db.insert_user({"email": "ann@example.com", "password_hash": "hash"})


async def test_find_user_by_id_with_malformed_id_skips_the_query(db, pool):
    assert await db.find_user_by_id("not-a-uuid") is None
    pool.acquire.assert_not_called()


async def test_find_place_maps_row(db, conn):
    row = place_row()
    conn.fetchrow.return_value = row

    place = await db.find_place(str(row["id"]))

    assert place["id"] == str(row["id"])
    assert place["owner"] == str(row["owner"])
    assert place["photos"] == ["p1", "p2"]
    assert place["perks"] == []
    assert "created_at" not in place
    assert conn.fetchrow.await_args.args == ("SELECT * FROM places WHERE id = $1", row["id"])


async def test_find_place_missing_row_is_none(db, conn):
    conn.fetchrow.return_value = None

    assert await db.find_place(str(uuid.uuid4())) is None


async def test_insert_place_writes_owner_and_every_column(db, conn):
    owner = uuid.uuid4()
    conn.fetchrow.return_value = place_row(owner=owner)

    place = await db.insert_place(str(owner), {"title": "Loft", "photos": ["p1"]})

    assert place["owner"] == str(owner)
    query, *values = conn.fetchrow.await_args.args
    assert query.startswith("INSERT INTO places (id, owner, title, address, photos,")
    assert values[1] == owner
    assert values[2] == "Loft"
    assert values[4] == ["p1"]


async def test_insert_place_rejects_malformed_owner(db, pool):
    with pytest.raises(ValidationError):
        await db.insert_place("nope", {"title": "Loft"})
    pool.acquire.assert_not_called()


async def test_find_places_by_ids_drops_malformed_ids(db, conn):
    good = uuid.uuid4()
    conn.fetch.return_value = [place_row(id=good)]

    places = await db.find_places_by_ids([str(good), "bogus"])

    assert [p["id"] for p in places] == [str(good)]
    assert conn.fetch.await_args.args == (
        "SELECT * FROM places WHERE id = ANY($1::uuid[])",
        [good],
    )


async def test_find_places_by_ids_without_valid_ids_skips_the_query(db, pool):
    assert await db.find_places_by_ids(["bogus"]) == []
    pool.acquire.assert_not_called()


async def test_find_places_page_returns_rows_and_total(db, conn):
    conn.fetchval.return_value = 7
    conn.fetch.return_value = [place_row(), place_row()]

    places, total = await db.find_places_page(limit=2, offset=4)

    assert total == 7
    assert len(places) == 2
    assert conn.fetch.await_args.args[1:] == (2, 4)


async def test_update_place_binds_id_last(db, conn):
    place_id = uuid.uuid4()
    conn.fetchrow.return_value = place_row(id=place_id, title="Cabin")

    place = await db.update_place(str(place_id), {"title": "Cabin", "photos": ["p9"]})

    assert place["title"] == "Cabin"
    query, *values = conn.fetchrow.await_args.args
    assert query.startswith("UPDATE places SET title = $1")
    assert query.endswith(f"WHERE id = ${len(values)} RETURNING *")
    assert values[-1] == place_id
    assert ["p9"] in values


async def test_delete_place_reports_whether_a_row_went(db, conn):
    conn.execute.return_value = "DELETE 1"
    assert await db.delete_place(str(uuid.uuid4())) is True

    conn.execute.return_value = "DELETE 0"
    assert await db.delete_place(str(uuid.uuid4())) is False


async def test_is_photo_referenced(db, conn):
    conn.fetchval.return_value = 1
    assert await db.is_photo_referenced("p1") is True

    conn.fetchval.return_value = None
    assert await db.is_photo_referenced("p1") is False


async def test_insert_booking_maps_place_and_user(db, conn):
    place_id, user_id = uuid.uuid4(), uuid.uuid4()
    conn.fetchrow.return_value = booking_row(place_id=place_id, user_id=user_id)

    booking = await db.insert_booking(
        str(user_id),
        {
            "place": str(place_id),
            "checkin": datetime(2026, 5, 1, tzinfo=timezone.utc),
            "checkout": datetime(2026, 5, 4, tzinfo=timezone.utc),
            "guests": 2,
            "phone": "555-0100",
            "name": "Ann",
            "price": 270.0,
        },
    )

    assert booking["place"] == str(place_id)
    assert booking["user"] == str(user_id)
    query, *values = conn.fetchrow.await_args.args
    assert query.startswith("INSERT INTO bookings (id, place_id, user_id,")
    assert values[1:3] == [place_id, user_id]


async def test_insert_booking_rejects_malformed_place(db):
    with pytest.raises(ValidationError):
        await db.insert_booking(str(uuid.uuid4()), {"place": "bogus"})


async def test_find_bookings_by_user_maps_rows(db, conn):
    user_id = uuid.uuid4()
    conn.fetch.return_value = [booking_row(user_id=user_id), booking_row(user_id=user_id)]

    bookings = await db.find_bookings_by_user(str(user_id))

    assert [b["user"] for b in bookings] == [str(user_id), str(user_id)]
    assert conn.fetch.await_args.args[1] == user_id


async def test_delete_bookings_by_place_parses_row_count(db, conn):
    conn.execute.return_value = "DELETE 3"

    assert await db.delete_bookings_by_place(str(uuid.uuid4())) == 3


async def test_delete_booking_with_malformed_id_is_false(db, pool):
    assert await db.delete_booking("bogus") is False
    pool.acquire.assert_not_called()


async def test_enqueue_blob_cleanup_upserts(db, conn):
    await db.enqueue_blob_cleanup("k1", "storage down")

    query, *values = conn.execute.await_args.args
    assert "ON CONFLICT (blob_key) DO UPDATE" in query
    assert values == ["k1", "storage down"]


async def test_pending_blob_cleanups_returns_dicts(db, conn):
    conn.fetch.return_value = [{"blob_key": "k1", "attempts": 2, "last_error": "boom"}]

    assert await db.pending_blob_cleanups(limit=10) == [
        {"blob_key": "k1", "attempts": 2, "last_error": "boom"}
    ]
    assert conn.fetch.await_args.args[1] == 10


async def test_close_closes_the_pool(db, pool):
    await db.close()

    pool.close.assert_awaited_once()
