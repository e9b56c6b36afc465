import os
from unittest.mock import MagicMock, patch

import pytest
import pytest_asyncio
from aiohttp import test_utils, web
from google.cloud.exceptions import NotFound
from PIL import Image

from app.services.errors import UpstreamError, ValidationError
from app.services.storage_service import (
    BlobStorage,
    detect_image_content_type,
    download_image,
    generate_blob_key,
    store_image,
)
from test.factories import png_bytes


@pytest.fixture
def gcs_client():
    client = MagicMock()
    client.bucket.return_value.blob.return_value = MagicMock()
    return client


@pytest.fixture
def blob_storage(gcs_client):
    return BlobStorage("test-bucket", client=gcs_client)


def test_generate_blob_key_is_64_hex_chars():
    key = generate_blob_key()

    assert len(key) == 64
    int(key, 16)
    assert generate_blob_key() != key


def test_declared_image_type_is_preserved():
    assert detect_image_content_type(png_bytes(), "image/x-custom; charset=binary") == "image/x-custom"


def test_content_type_falls_back_to_detected_format():
    assert detect_image_content_type(png_bytes(), None) == "image/png"
    assert detect_image_content_type(png_bytes(), "binary/octet-stream") == "image/png"


def test_non_image_payload_is_rejected():
    with pytest.raises(ValidationError):
        detect_image_content_type(b"<html></html>", "image/png")


async def test_put_uploads_public_blob(blob_storage, gcs_client):
    key = await blob_storage.put("abc", b"data", "image/png")

    assert key == "abc"
    gcs_client.bucket.assert_called_with("test-bucket")
    blob = gcs_client.bucket.return_value.blob.return_value
    blob.upload_from_string.assert_called_once_with(
        b"data", content_type="image/png", predefined_acl="publicRead", timeout=30
    )


async def test_delete_treats_missing_blob_as_deleted(blob_storage, gcs_client):
    blob = gcs_client.bucket.return_value.blob.return_value
    blob.delete.side_effect = NotFound("gone")

    await blob_storage.delete("abc")

    blob.delete.assert_called_once()


async def test_delete_propagates_other_errors(blob_storage, gcs_client):
    gcs_client.bucket.return_value.blob.return_value.delete.side_effect = RuntimeError("boom")

    with pytest.raises(RuntimeError):
        await blob_storage.delete("abc")


async def test_exists_asks_the_bucket(blob_storage, gcs_client):
    gcs_client.bucket.return_value.blob.return_value.exists.return_value = True

    assert await blob_storage.exists("abc") is True


async def test_store_image_rejects_oversized_payload(fake_storage):
    with pytest.raises(ValidationError):
        await store_image(fake_storage, png_bytes(size=(64, 64)), "image/png", max_bytes=10)
    assert fake_storage.blobs == {}


def test_oversized_pixel_count_is_rejected():
    with patch.object(Image, "MAX_IMAGE_PIXELS", 100):
        with pytest.raises(ValidationError):
            detect_image_content_type(png_bytes(size=(64, 64)), "image/png")


async def test_upload_of_oversized_pixel_count_is_422(client, fake_storage):
    files = [("photos", ("huge.png", png_bytes(size=(64, 64)), "image/png"))]

    with patch.object(Image, "MAX_IMAGE_PIXELS", 100):
        response = await client.post("/upload", files=files)

    assert response.status_code == 422
    assert "not a valid image" in response.json()["error"]
    assert fake_storage.blobs == {}


REMOTE_IMAGE = os.urandom(1_000_000)


async def stream_remote_image(request):
    response = web.StreamResponse(headers={"Content-Type": "image/jpeg"})
    await response.prepare(request)
    for start in range(0, len(REMOTE_IMAGE), 16 * 1024):
        await response.write(REMOTE_IMAGE[start:start + 16 * 1024])
    await response.write_eof()
    return response


@pytest_asyncio.fixture
async def image_server():
    remote = web.Application()
    remote.router.add_get("/photo.jpg", stream_remote_image)
    server = test_utils.TestServer(remote)
    await server.start_server()
    yield server
    await server.close()


async def test_download_image_reads_the_whole_body(image_server):
    data, content_type = await download_image(
        str(image_server.make_url("/photo.jpg")), timeout_seconds=10, max_bytes=5_000_000
    )

    assert len(data) == len(REMOTE_IMAGE)
    assert data == REMOTE_IMAGE
    assert content_type == "image/jpeg"


async def test_download_image_stops_past_max_bytes(image_server):
    with pytest.raises(ValidationError):
        await download_image(
            str(image_server.make_url("/photo.jpg")), timeout_seconds=10, max_bytes=100_000
        )


async def test_download_image_non_200_is_upstream_error(image_server):
    with pytest.raises(UpstreamError):
        await download_image(
            str(image_server.make_url("/missing.jpg")), timeout_seconds=10, max_bytes=5_000_000
        )
