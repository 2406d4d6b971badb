"""
Shared fixtures: an in-memory SQLite database per test, a recording image
host, and an HTTP client wired to both through dependency overrides.
"""
from typing import AsyncGenerator, Optional

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from hostel_api.database import Base, enable_sqlite_foreign_keys, get_db
from hostel_api.main import app as fastapi_app
from hostel_api.services.image_host import (
    DELETED,
    NOT_FOUND,
    ImageHost,
    ImageHostError,
    UploadedImage,
    get_image_host,
)
import hostel_api.models  # noqa: F401


class FakeImageHost(ImageHost):
    """
    Records uploads instead of calling a provider.
    Set `fail_with` to an ImageHostError to make the next uploads fail.
    """

    name = "fake"

    def __init__(self):
        self.uploads = []
        self.deleted = []
        self.fail_with: Optional[ImageHostError] = None
        self.configured = True

    def is_configured(self) -> bool:
        return self.configured

    async def upload(self, content, filename, content_type, folder, name_hint=None):
        if self.fail_with is not None:
            raise self.fail_with
        url = f"https://images.test/{folder}/{len(self.uploads) + 1}-{filename}"
        self.uploads.append({
            "url": url,
            "content": content,
            "filename": filename,
            "content_type": content_type,
            "folder": folder,
            "name_hint": name_hint,
        })
        return UploadedImage(url=url, deletion_handle=url)

    async def delete(self, handle_or_url):
        known = {upload["url"] for upload in self.uploads}
        if handle_or_url in known and handle_or_url not in self.deleted:
            self.deleted.append(handle_or_url)
            return DELETED
        return NOT_FOUND


@pytest_asyncio.fixture
async def engine():
    """One shared in-memory connection so every session sees the same tables."""
    test_engine = create_async_engine(
        "sqlite+aiosqlite://",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    enable_sqlite_foreign_keys(test_engine)

    async with test_engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield test_engine

    await test_engine.dispose()


@pytest.fixture
def session_factory(engine):
    return async_sessionmaker(
        engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest.fixture
def image_host():
    return FakeImageHost()


@pytest_asyncio.fixture
async def client(session_factory, image_host) -> AsyncGenerator[AsyncClient, None]:
    """
    HTTP client for the app. Each request gets its own session from the
    test factory, the same way get_db hands them out in production.
    """
    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    fastapi_app.dependency_overrides[get_db] = override_get_db
    fastapi_app.dependency_overrides[get_image_host] = lambda: image_host

    transport = ASGITransport(app=fastapi_app)
    try:
        async with AsyncClient(transport=transport, base_url="http://test") as test_client:
            yield test_client
    finally:
        del fastapi_app.dependency_overrides[get_db]
        del fastapi_app.dependency_overrides[get_image_host]


@pytest_asyncio.fixture
async def branch(client):
    """A stored branch to hang gallery images and enquiries on."""
    response = await client.post("/api/branches", json={"name": "Nyxta Downtown Branch", "display_order": 1})
    assert response.status_code == 201
    return response.json()["data"]
