import asyncio

from app.database.connection import get_db_connection


def create_blob_cleanup_queue_table_sql():
    """Return SQL statement to create the 'blob_cleanup_queue' table."""

    return """
    CREATE TABLE IF NOT EXISTS blob_cleanup_queue (
      blob_key VARCHAR(200) PRIMARY KEY,
      attempts INTEGER NOT NULL DEFAULT 0,
      last_error TEXT,
      created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW()
    );

    CREATE INDEX IF NOT EXISTS idx_blob_cleanup_updated ON blob_cleanup_queue(updated_at);
    """


def main():
    """Main function to create the 'blob_cleanup_queue' table."""

    async def run():
        conn = await get_db_connection()
        try:
            await conn.execute(create_blob_cleanup_queue_table_sql())
            print("✅ 'blob_cleanup_queue' table created successfully.")
        except Exception as e:
            print(f"❌ Failed to create 'blob_cleanup_queue' table: {e}")
        finally:
            await conn.close()

    asyncio.run(run())


if __name__ == "__main__":
    main()
