"""
Create every table in dependency order.

    python -m migration.run_migrations
"""
import asyncio

from app.database.connection import get_db_connection
from migration._001_create_users import create_users_table_sql
from migration._002_create_places import create_places_table_sql
from migration._003_create_bookings import create_bookings_table_sql
from migration._004_create_blob_cleanup_queue import create_blob_cleanup_queue_table_sql

MIGRATIONS = [
    ("users", create_users_table_sql),
    ("places", create_places_table_sql),
    ("bookings", create_bookings_table_sql),
    ("blob_cleanup_queue", create_blob_cleanup_queue_table_sql),
]


async def apply_migrations(conn):
    async with conn.transaction():
        for name, build_sql in MIGRATIONS:
            await conn.execute(build_sql())
            print(f"✅ '{name}' table ready.")


def main():
    async def run():
        conn = await get_db_connection()
        try:
            await apply_migrations(conn)
        finally:
            await conn.close()

    asyncio.run(run())


if __name__ == "__main__":
    main()
