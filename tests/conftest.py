"""
Pytest configuration and fixtures
"""

import os

# Settings and the engine are created at import time
os.environ["DATABASE_URL"] = "sqlite+aiosqlite://"
os.environ["IMPORT_CRON_ENABLED"] = "false"

import json
import pytest
import pytest_asyncio
import httpx
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool
from models import Base
from models.catalog import CatalogProduct, CatalogCategory, CmsPage
from core.config import RequestDeskConfig
from sync.client import RequestDeskClient
from typing import AsyncGenerator

TEST_DATABASE_URL = "sqlite+aiosqlite://"


@pytest_asyncio.fixture(scope="function")
async def test_engine():
    """Create test database engine"""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        echo=False,
        poolclass=StaticPool,  # one shared in-memory database
        connect_args={"check_same_thread": False},
    )

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)

    await engine.dispose()


@pytest_asyncio.fixture(scope="function")
async def session_factory(test_engine):
    return async_sessionmaker(
        test_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autocommit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture(scope="function")
async def db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create database session for tests"""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest.fixture
def config():
    return RequestDeskConfig(
        api_key="test-api-key",
        endpoint_url="https://requestdesk.test/",
        store_url="https://shop.example.com/",
        store_id=1,
        store_name="Main Store",
        store_code="default",
    )


class FakeRequestDesk:
    """
    In-memory stand-in for the RequestDesk API behind httpx.MockTransport.

    Every request is recorded; `responses` overrides the reply per
    (method, path).
    """

    def __init__(self):
        self.requests = []
        self.posts = []
        self.has_more = False
        self.responses = {}

    def handler(self, request: httpx.Request) -> httpx.Response:
        body = json.loads(request.content) if request.content else None
        self.requests.append({
            "method": request.method,
            "path": request.url.path,
            "params": dict(request.url.params),
            "body": body,
            "headers": request.headers,
        })

        override = self.responses.get((request.method, request.url.path))
        if override is not None:
            if isinstance(override, Exception):
                raise override
            status_code, payload = override
            return httpx.Response(status_code, json=payload)

        path = request.url.path
        if request.method == "GET" and path == "/api/public/posts":
            return httpx.Response(200, json={
                "posts": self.posts,
                "total": len(self.posts),
                "has_more": self.has_more,
            })
        if path.endswith("/sync-status"):
            return httpx.Response(200, json={"success": True})
        if path == "/api/public/magento/sync":
            return httpx.Response(200, json={
                "message": "Documents synced",
                "total_chunks_created": len(body["documents"]) * 2,
                "collection_id": "col_123",
            })
        if path == "/api/public/magento/test":
            return httpx.Response(200, json={"success": True, "message": "Connection successful", "agent_name": "Store Agent"})
        if path == "/api/public/posts/test":
            return httpx.Response(200, json={"message": "Posts API ready", "agent_name": "Blog Agent", "posts_available": 12})
        if path == "/api/public/posts/related":
            return httpx.Response(200, json={
                "posts": [{"id": "rd-9", "title": "Caring for leather boots"}],
                "total": 1,
                "confidence": 0.82,
            })

        return httpx.Response(404, json={"detail": "Not found"})

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handler)

    def calls(self, path_suffix: str):
        return [r for r in self.requests if r["path"].endswith(path_suffix)]

    @property
    def reports(self):
        return self.calls("/sync-status")


@pytest.fixture
def remote():
    return FakeRequestDesk()


@pytest.fixture
def remote_client(config, remote):
    return RequestDeskClient(config, transport=remote.transport)


@pytest.fixture
def remote_post():
    """Factory for RequestDesk post payloads"""
    def make(post_id, title="Spring Hiking Guide", status="publish", **extra):
        payload = {
            "id": post_id,
            "title": title,
            "content": f"<p>{title} content</p>",
            "status": status,
        }
        payload.update(extra)
        return payload
    return make


@pytest_asyncio.fixture
async def catalog(db_session):
    """A small catalog: two categories, four products, two CMS pages"""
    db_session.add_all([
        CatalogCategory(id=1, name="Root Catalog", path="1", level=0),
        CatalogCategory(id=3, name="Footwear", path="1/2/3", level=2, url_key="footwear", description="<p>All shoes</p>"),
        CatalogCategory(id=4, name="Trail Gear", path="1/2/4", level=2),
        CatalogCategory(id=5, name="Archive", path="1/2/5", level=2, is_active=0),
        CatalogProduct(
            id=10, sku="BOOT-1", name="Trail Boot", price=1234.5, special_price=999,
            weight=1.5, short_description="<b>Tough</b> boot", description="<p>Waterproof leather</p>",
            meta_keyword="boots, hiking", url_key="trail-boot", image="/t/b/boot.jpg",
            gallery=["/t/b/boot.jpg", "/t/b/boot-side.jpg"], category_ids=[3, 4, 99],
        ),
        CatalogProduct(id=11, sku="SOCK-1", name="Wool Sock", price=12),
        CatalogProduct(id=12, sku="HIDDEN-1", name="Hidden Part", price=5, visibility=1),
        CatalogProduct(id=13, sku="OLD-1", name="Retired Boot", price=80, status=2),
        CmsPage(id=1, identifier="about-us", title="About Us", content="<h1>About</h1>"),
        CmsPage(id=2, identifier="old-page", title="Old", content="gone", is_active=0),
    ])
    await db_session.commit()
    return db_session
