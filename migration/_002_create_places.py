import asyncio

from app.database.connection import get_db_connection


def create_places_table_sql():
    """Return SQL statement to create the 'places' table."""

    return """
    CREATE TABLE IF NOT EXISTS places (
      id UUID PRIMARY KEY,
      owner UUID NOT NULL REFERENCES users(id),
      created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),

      title VARCHAR(200),
      address VARCHAR(500),
      photos TEXT[] NOT NULL DEFAULT '{}',    -- ordered blob keys
      description TEXT,
      bedroom INTEGER,
      bed INTEGER,
      bath INTEGER,
      max_guests INTEGER,
      perks TEXT[] NOT NULL DEFAULT '{}',
      extra_info TEXT,
      checkin VARCHAR(50),
      checkout VARCHAR(50),
      price DOUBLE PRECISION
    );

    CREATE INDEX IF NOT EXISTS idx_places_owner ON places(owner);
    CREATE INDEX IF NOT EXISTS idx_places_created_at ON places(created_at DESC);
    CREATE INDEX IF NOT EXISTS idx_places_photos ON places USING GIN (photos);
    """


def main():
    """Main function to create the 'places' table."""

    async def run():
        conn = await get_db_connection()
        try:
            await conn.execute(create_places_table_sql())
            print("✅ 'places' table created successfully.")
        except Exception as e:
            print(f"❌ Failed to create 'places' table: {e}")
        finally:
            await conn.close()

    asyncio.run(run())


if __name__ == "__main__":
    main()
