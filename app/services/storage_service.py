import asyncio
import io
import logging
import secrets
from typing import Optional

import aiohttp
from google.cloud import storage  # type: ignore
from google.cloud.exceptions import GoogleCloudError, NotFound
from PIL import Image, UnidentifiedImageError

from app.services.errors import UpstreamError, ValidationError

logger = logging.getLogger(__name__)

DOWNLOAD_CHUNK_BYTES = 64 * 1024


"""
Google Cloud client libraries use Application Default Credentials (ADC).
Locally point GOOGLE_APPLICATION_CREDENTIALS at a service account JSON key:

export GOOGLE_APPLICATION_CREDENTIALS="/home/me/service-account.json"
"""


def generate_blob_key(num_bytes: int = 32) -> str:
    """Random hex key for a new blob (num_bytes of entropy)"""
    return secrets.token_hex(num_bytes)


def detect_image_content_type(data: bytes, declared: Optional[str] = None) -> str:
    """
    Check that data decodes as an image and pick its content type.

    The declared type (upload part header or download response header) wins
    when it is an image/* type; otherwise the type Pillow detects is used.
    """
    try:
        with Image.open(io.BytesIO(data)) as img:
            image_format = img.format
            img.verify()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError) as e:
        raise ValidationError(f"File is not a valid image: {e}")

    if declared:
        declared = declared.split(";")[0].strip().lower()
        if declared.startswith("image/"):
            return declared

    return Image.MIME.get(image_format or "", "application/octet-stream")


class BlobStorage:
    """
    Key-addressed blob store on a Google Cloud Storage bucket.

    One client per process; blocking GCS calls run in the default thread pool
    so they don't stall the event loop.
    """

    def __init__(self, bucket_name: str, client=None, timeout: int = 30):
        self.bucket_name = bucket_name
        self.timeout = timeout
        self._client = client or storage.Client()
        self._bucket = self._client.bucket(bucket_name)

    async def put(self, key: str, data: bytes, content_type: str) -> str:
        def _blocking_upload():
            blob = self._bucket.blob(key)
            blob.upload_from_string(
                data,
                content_type=content_type,
                predefined_acl="publicRead",
                timeout=self.timeout,
            )

        loop = asyncio.get_running_loop()
        try:
            await loop.run_in_executor(None, _blocking_upload)
        except GoogleCloudError as e:
            logger.error(f"Google Cloud Storage error uploading {key}: {e}", exc_info=True)
            raise UpstreamError(f"Failed to store photo: {e}")

        logger.info(f"Successfully uploaded blob: {key} ({content_type})")
        return key

    async def delete(self, key: str) -> None:
        """Delete a blob; a blob that is already gone counts as deleted"""

        def _blocking_delete():
            try:
                self._bucket.blob(key).delete(timeout=self.timeout)
            except NotFound:
                logger.info(f"Blob {key} already absent")

        loop = asyncio.get_running_loop()
        await loop.run_in_executor(None, _blocking_delete)
        logger.info(f"Successfully deleted blob: {key}")

    async def exists(self, key: str) -> bool:
        def _blocking_exists():
            return self._bucket.blob(key).exists(timeout=self.timeout)

        loop = asyncio.get_running_loop()
        try:
            return await loop.run_in_executor(None, _blocking_exists)
        except GoogleCloudError as e:
            logger.error(f"Google Cloud Storage error checking {key}: {e}", exc_info=True)
            raise UpstreamError(f"Failed to check photo: {e}")


async def download_image(link: str, timeout_seconds: int, max_bytes: int) -> tuple[bytes, Optional[str]]:
    """Fetch a remote image; returns its bytes and the Content-Type header"""
    timeout = aiohttp.ClientTimeout(total=timeout_seconds)
    chunks = []
    received = 0
    try:
        async with aiohttp.ClientSession(timeout=timeout) as session:
            async with session.get(link) as response:
                if response.status != 200:
                    raise UpstreamError(f"Download failed with status {response.status}")
                content_type = response.headers.get("Content-Type")
                async for chunk in response.content.iter_chunked(DOWNLOAD_CHUNK_BYTES):
                    received += len(chunk)
                    if received > max_bytes:
                        raise ValidationError(f"File size too large (max {max_bytes} bytes)")
                    chunks.append(chunk)
    except aiohttp.ClientError as e:
        logger.error(f"HTTP error downloading {link}: {e}")
        raise UpstreamError(f"Failed to download image: {e}")
    except asyncio.TimeoutError:
        logger.error(f"Timed out downloading {link}")
        raise UpstreamError("Failed to download image: timed out")

    return b"".join(chunks), content_type


async def store_image(
    blob_storage: BlobStorage,
    data: bytes,
    declared_content_type: Optional[str],
    max_bytes: int,
) -> str:
    """Validate an image payload and store it under a fresh random key"""
    if not data:
        raise ValidationError("Empty file")
    if len(data) > max_bytes:
        raise ValidationError(f"File size too large (max {max_bytes} bytes)")

    content_type = detect_image_content_type(data, declared_content_type)
    key = generate_blob_key()
    return await blob_storage.put(key, data, content_type)
