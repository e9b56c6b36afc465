import asyncio

from app.database.connection import get_db_connection


def create_bookings_table_sql():
    """Return SQL statement to create the 'bookings' table."""

    # No FK on place_id: bookings are accepted for any place id and
    # removed explicitly when their place is deleted
    return """
    CREATE TABLE IF NOT EXISTS bookings (
      id UUID PRIMARY KEY,
      place_id UUID NOT NULL,
      user_id UUID NOT NULL,
      created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),

      checkin TIMESTAMPTZ NOT NULL,
      checkout TIMESTAMPTZ NOT NULL,
      guests INTEGER NOT NULL,
      phone VARCHAR(50) NOT NULL,
      name VARCHAR(200) NOT NULL,
      price DOUBLE PRECISION NOT NULL
    );

    CREATE INDEX IF NOT EXISTS idx_bookings_place ON bookings(place_id);
    CREATE INDEX IF NOT EXISTS idx_bookings_user ON bookings(user_id);
    """


def main():
    """Main function to create the 'bookings' table."""

    async def run():
        conn = await get_db_connection()
        try:
            await conn.execute(create_bookings_table_sql())
            print("✅ 'bookings' table created successfully.")
        except Exception as e:
            print(f"❌ Failed to create 'bookings' table: {e}")
        finally:
            await conn.close()

    asyncio.run(run())


if __name__ == "__main__":
    main()
