from dataclasses import dataclass

from fastapi import Request

from app.config import Settings
from app.database.repository import Database
from app.services.storage_service import BlobStorage


@dataclass
class AppContext:
    """Process-wide handles built once in the lifespan and shared by every request."""

    settings: Settings
    db: Database
    storage: BlobStorage


def get_context(request: Request) -> AppContext:
    context = getattr(request.app.state, "context", None)
    if context is None:
        raise RuntimeError("Application context not initialized")
    return context
