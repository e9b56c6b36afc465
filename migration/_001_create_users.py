import asyncio

from app.database.connection import get_db_connection


def create_users_table_sql():
    """Return SQL statement to create the 'users' table."""

    return """
    CREATE TABLE IF NOT EXISTS users (
      id UUID PRIMARY KEY,
      created_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),
      updated_at TIMESTAMPTZ NOT NULL DEFAULT NOW(),

      firstname VARCHAR(100),
      lastname VARCHAR(100),
      email VARCHAR(255) NOT NULL UNIQUE,
      password_hash VARCHAR(100) NOT NULL
    );
    """


def main():
    """Main function to create the 'users' table."""

    async def run():
        conn = await get_db_connection()
        try:
            await conn.execute(create_users_table_sql())
            print("✅ 'users' table created successfully.")
        except Exception as e:
            print(f"❌ Failed to create 'users' table: {e}")
        finally:
            await conn.close()

    asyncio.run(run())


if __name__ == "__main__":
    main()
