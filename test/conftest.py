import os

# Rate limiter storage is read at import time
os.environ.setdefault("RATE_LIMIT_STORAGE_URI", "memory://")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient

from app.config import Settings
from app.context import AppContext
from app.main import app
from test.fakes import FakeBlobStorage, FakeDatabase


@pytest.fixture
def settings():
    return Settings(jwt_secret="test-secret", bcrypt_rounds=4, cookie_secure=False)


@pytest.fixture
def fake_db():
    return FakeDatabase()


@pytest.fixture
def fake_storage():
    return FakeBlobStorage()


@pytest.fixture
def ctx(settings, fake_db, fake_storage):
    return AppContext(settings=settings, db=fake_db, storage=fake_storage)


@pytest.fixture
def test_app(ctx):
    """App wired to the in-memory context; the lifespan (real pool + GCS client) never runs"""
    app.state.context = ctx
    # Disable rate limiting for tests
    app.state.limiter.enabled = False
    yield app
    app.state.context = None


@pytest_asyncio.fixture
async def client(test_app):
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as client:
        yield client


@pytest_asyncio.fixture
async def other_client(test_app):
    """Second browser session, for cross-user checks"""
    async with AsyncClient(transport=ASGITransport(app=test_app), base_url="http://test") as client:
        yield client
