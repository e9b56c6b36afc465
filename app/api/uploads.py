import logging
from typing import List

from fastapi import APIRouter, File, Request, UploadFile
from pydantic import BaseModel

from app.context import get_context
from app.middleware.rate_limit import limiter
from app.services.errors import ValidationError
from app.services.storage_service import download_image, store_image

logger = logging.getLogger(__name__)
logger.setLevel(logging.INFO)

router = APIRouter(tags=["uploads"])


class UploadByLink(BaseModel):
    link: str


@router.post("/upload-by-link")
@limiter.limit("30/minute")
async def upload_by_link(request: Request, payload: UploadByLink):
    """Download an image from a URL, store it as a blob and return its key."""
    ctx = get_context(request)
    if not payload.link.startswith(("http://", "https://")):
        raise ValidationError("Link must be an http(s) URL")

    data, content_type = await download_image(
        payload.link,
        timeout_seconds=ctx.settings.download_timeout_seconds,
        max_bytes=ctx.settings.max_upload_bytes,
    )
    key = await store_image(ctx.storage, data, content_type, ctx.settings.max_upload_bytes)
    logger.info(f"Stored photo {key} downloaded from {payload.link}")
    return key


@router.post("/upload")
@limiter.limit("30/minute")
async def upload_photos(request: Request, photos: List[UploadFile] = File(...)):
    """Store uploaded photos as blobs; returns their keys in upload order."""
    ctx = get_context(request)
    if len(photos) > ctx.settings.max_upload_files:
        raise ValidationError(f"Maximum {ctx.settings.max_upload_files} photos per upload")

    keys = []
    for photo in photos:
        await photo.seek(0)
        data = await photo.read()
        keys.append(
            await store_image(ctx.storage, data, photo.content_type, ctx.settings.max_upload_bytes)
        )

    logger.info(f"Stored {len(keys)} uploaded photos")
    return keys
