"""
Stayhub Database Connection

Pure asyncpg: one connection pool per process, created in the FastAPI
lifespan and handed to the Database repository on the application context.
"""

import logging
import os
import urllib.parse

import asyncpg  # type: ignore

logger = logging.getLogger(__name__)

# Check if running on Cloud Run (K_SERVICE env var is set by Cloud Run)
IS_CLOUD_RUN = os.getenv("K_SERVICE") is not None


def build_database_url() -> str:
    """Build the asyncpg DSN from STAYHUB_* environment variables"""
    db_user = os.getenv("STAYHUB_DB_USER")
    db_password = os.getenv("STAYHUB_DB_PASSWORD")
    db_name = os.getenv("STAYHUB_DATABASE_NAME")
    db_port = os.getenv("STAYHUB_DB_PORT", "5432")

    if not db_user or not db_password or not db_name:
        raise ValueError("Missing required STAYHUB database environment variables")

    # URL encode password to handle special characters
    encoded_password = urllib.parse.quote_plus(db_password)

    if IS_CLOUD_RUN:
        # Cloud Run: Unix socket exposed by the Cloud SQL Proxy
        connection_name = os.getenv("STAYHUB_CLOUD_SQL_CONNECTION")
        if not connection_name:
            raise ValueError("Missing STAYHUB_CLOUD_SQL_CONNECTION on Cloud Run")
        logger.info("Cloud Run mode: connecting via Cloud SQL Proxy")
        return f"postgresql://{db_user}:{encoded_password}@/{db_name}?host=/cloudsql/{connection_name}"

    db_host = os.getenv("STAYHUB_DB_HOST")
    if not db_host:
        raise ValueError("Missing STAYHUB_DB_HOST for local development")
    logger.info(f"Local development mode: connecting to {db_host}")
    return f"postgresql://{db_user}:{encoded_password}@{db_host}:{db_port}/{db_name}"


async def create_asyncpg_pool(dsn: str | None = None) -> asyncpg.Pool:
    """Create the process-wide asyncpg pool"""
    return await asyncpg.create_pool(
        dsn or build_database_url(),
        min_size=0,
        max_size=20,
        command_timeout=30,
    )


async def get_db_connection() -> asyncpg.Connection:
    """Single connection for scripts (migrations, cleanup job)"""
    return await asyncpg.connect(build_database_url(), command_timeout=30)
