"""
Best-effort blob deletion with a retry queue.

Listing updates and deletes never fail because a photo could not be removed
from storage. Failures are logged and parked in blob_cleanup_queue; the purge
job below retries them and can be run on a schedule:

    python -m app.services.cleanup_service
"""

import asyncio
import logging
from typing import Iterable, List

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)


async def delete_blobs_best_effort(ctx, keys: Iterable[str]) -> List[str]:
    """Delete each blob, returning the keys that failed (and were queued for retry)"""
    failed = []
    for key in keys:
        try:
            await ctx.storage.delete(key)
        except Exception as e:
            logger.error(f"Failed to delete blob {key} from storage: {e}")
            failed.append(key)
            try:
                await ctx.db.enqueue_blob_cleanup(key, str(e))
            except Exception as queue_error:
                logger.error(f"Failed to queue blob {key} for cleanup: {queue_error}")
    return failed


async def purge_pending_blobs(ctx, limit: int = 100) -> dict:
    """
    Retry queued blob deletions.

    Keys referenced again by some place are dropped from the queue without
    touching storage. Running it twice is harmless.
    """
    summary = {"deleted": 0, "skipped": 0, "failed": 0}

    for entry in await ctx.db.pending_blob_cleanups(limit):
        key = entry["blob_key"]

        if await ctx.db.is_photo_referenced(key):
            logger.info(f"Blob {key} is referenced again, dropping it from the cleanup queue")
            await ctx.db.remove_blob_cleanup(key)
            summary["skipped"] += 1
            continue

        try:
            await ctx.storage.delete(key)
        except Exception as e:
            logger.error(f"Retry {entry['attempts']} failed for blob {key}: {e}")
            await ctx.db.enqueue_blob_cleanup(key, str(e))
            summary["failed"] += 1
            continue

        await ctx.db.remove_blob_cleanup(key)
        summary["deleted"] += 1

    logger.info(f"Blob cleanup finished: {summary}")
    return summary


def main():
    """Run one purge pass against the configured database and bucket."""
    from app.config import Settings
    from app.context import AppContext
    from app.database.connection import create_asyncpg_pool
    from app.database.repository import Database
    from app.services.storage_service import BlobStorage

    logging.basicConfig(level=logging.INFO)

    async def run():
        settings = Settings.from_env()
        db = Database(await create_asyncpg_pool())
        try:
            ctx = AppContext(
                settings=settings,
                db=db,
                storage=BlobStorage(settings.bucket_name),
            )
            await purge_pending_blobs(ctx)
        finally:
            await db.close()

    asyncio.run(run())


if __name__ == "__main__":
    main()
