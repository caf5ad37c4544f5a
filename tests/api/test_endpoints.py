"""
API endpoint tests
"""

import pytest
import pytest_asyncio
import httpx
from api.main import app
from api.dependencies import get_db, get_config, get_remote_client
from models.base import RunStatus, SyncDirection
from sync.run_log import SyncRunLog
from datetime import datetime

AUTH = {"X-RequestDesk-Key": "test-api-key"}
BLOG = "/api/external/blog"
EXPORT = "/api/requestdesk/export"


@pytest_asyncio.fixture
async def client(db_session, config, remote_client):
    """Create test client with database, config and remote overrides"""

    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_config] = lambda: config
    app.dependency_overrides[get_remote_client] = lambda: remote_client

    # no lifespan: the scheduler is not started
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client

    app.dependency_overrides.clear()


async def create_post(client, **overrides):
    payload = {
        "title": "Spring Hiking Guide",
        "content": "<p>Where to hike this spring.</p>",
        "published": True,
    }
    payload.update(overrides)
    response = await client.post(f"{BLOG}/posts", json=payload, headers=AUTH)
    assert response.status_code == 200, response.text
    return response.json()["post"]


# ============================================================================
# Health
# ============================================================================

@pytest.mark.asyncio
async def test_health_endpoint_database_connected(client, db_session):
    """Test health endpoint returns database status"""
    response = await client.get("/health")

    assert response.status_code == 200
    data = response.json()

    assert data["status"] == "healthy"
    assert data["database_connected"] is True
    assert data["requestdesk_configured"] is True
    assert data["latest_runs"] == []
    assert "X-Request-ID" in response.headers


@pytest.mark.asyncio
async def test_health_degraded_after_failed_run(client, db_session):
    await SyncRunLog(db_session).record(
        SyncDirection.IMPORT, RunStatus.FAILED, datetime.utcnow(), error_message="Invalid API key"
    )

    data = (await client.get("/health")).json()

    assert data["status"] == "degraded"
    assert data["latest_runs"][0]["status"] == "failed"


@pytest.mark.asyncio
async def test_request_id_is_echoed(client):
    response = await client.get("/health", headers={"X-Request-ID": "req-42"})

    assert response.headers["X-Request-ID"] == "req-42"


# ============================================================================
# Authentication
# ============================================================================

@pytest.mark.asyncio
async def test_missing_api_key_rejected(client):
    response = await client.get(f"{BLOG}/test")

    assert response.status_code == 401
    assert response.json() == {"success": False, "error": "Invalid RequestDesk API key"}


@pytest.mark.asyncio
async def test_wrong_api_key_rejected(client):
    response = await client.get(f"{EXPORT}/products", headers={"X-RequestDesk-Key": "wrong"})

    assert response.status_code == 401


@pytest.mark.asyncio
async def test_alternate_header_accepted(client):
    response = await client.get(f"{BLOG}/test", headers={"x-requestdesk-api-key": "test-api-key"})

    assert response.status_code == 200
    assert response.json()["store"]["name"] == "Main Store"


@pytest.mark.asyncio
async def test_admin_requires_api_key(client, remote):
    response = await client.post("/admin/sync/products")
    links = await client.get("/admin/products/10/posts", headers={"X-RequestDesk-Key": "wrong"})

    assert response.status_code == 401
    assert links.status_code == 401
    assert remote.requests == []


@pytest.mark.asyncio
async def test_unconfigured_key_rejected(client, config):
    app.dependency_overrides[get_config] = lambda: config.model_copy(update={"api_key": None})

    response = await client.get(f"{BLOG}/test", headers=AUTH)

    assert response.status_code == 401
    assert response.json()["error"] == "RequestDesk API key not configured"


# ============================================================================
# External blog API
# ============================================================================

@pytest.mark.asyncio
async def test_create_post(client):
    post = await create_post(client, seo_title="Hiking in Spring", summary="Trails worth the drive")

    assert post["slug"] == "spring-hiking-guide"
    assert post["status"] == "published"
    assert post["seo_title"] == "Hiking in Spring"
    assert post["seo_description"] == "Trails worth the drive"
    assert post["author"] == "RequestDesk"
    assert post["sync_status"] == "synced"
    assert post["url"] == "https://shop.example.com/blog/post/spring-hiking-guide"


@pytest.mark.asyncio
async def test_create_with_remote_id_upserts(client):
    first = await client.post(f"{BLOG}/posts", headers=AUTH, json={
        "title": "Guide", "content": "v1", "requestdesk_post_id": 77
    })
    second = await client.post(f"{BLOG}/posts", headers=AUTH, json={
        "title": "Guide v2", "content": "v2", "requestdesk_post_id": "77"
    })

    assert first.json()["message"] == "Post created successfully"
    assert second.json()["message"] == "Post updated successfully"
    assert second.json()["post"]["id"] == first.json()["post"]["id"]
    assert second.json()["post"]["requestdesk_post_id"] == "77"


@pytest.mark.asyncio
async def test_create_ignores_tags(client):
    post = await create_post(client, title="Tagged Post", tags=["hiking", "spring"])

    assert post["title"] == "Tagged Post"
    assert "tags" not in post


@pytest.mark.asyncio
async def test_create_duplicate_slug_conflicts(client):
    await create_post(client)

    response = await client.post(f"{BLOG}/posts", headers=AUTH, json={
        "title": "Spring Hiking Guide", "content": "again"
    })

    assert response.status_code == 409
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_create_requires_content(client):
    response = await client.post(f"{BLOG}/posts", headers=AUTH, json={"title": "No body"})

    assert response.status_code == 422


@pytest.mark.asyncio
async def test_blank_title_rejected(client):
    response = await client.post(f"{BLOG}/posts", headers=AUTH, json={"title": "   ", "content": "x"})

    assert response.status_code == 422
    assert response.json()["success"] is False


@pytest.mark.asyncio
async def test_get_post_by_local_or_remote_id(client):
    post = await create_post(client, requestdesk_post_id="rd-abc")

    by_local = await client.get(f"{BLOG}/posts/{post['id']}", headers=AUTH)
    by_remote = await client.get(f"{BLOG}/posts/rd-abc", headers=AUTH)

    assert by_local.json()["post"]["id"] == post["id"]
    assert by_remote.json()["post"]["id"] == post["id"]


@pytest.mark.asyncio
async def test_get_unknown_post(client):
    response = await client.get(f"{BLOG}/posts/999", headers=AUTH)

    assert response.status_code == 404
    assert response.json() == {"success": False, "error": "Post not found: 999"}


@pytest.mark.asyncio
async def test_partial_update(client):
    post = await create_post(client)

    response = await client.put(f"{BLOG}/posts/{post['id']}", headers=AUTH, json={"published": False})

    updated = response.json()["post"]
    assert response.status_code == 200
    assert updated["status"] == "draft"
    assert updated["title"] == post["title"]
    assert updated["content"] == post["content"]


@pytest.mark.asyncio
async def test_delete_post(client):
    post = await create_post(client)

    response = await client.delete(f"{BLOG}/posts/{post['id']}", headers=AUTH)
    again = await client.delete(f"{BLOG}/posts/{post['id']}", headers=AUTH)

    assert response.json() == {"success": True, "message": "Post deleted successfully"}
    assert again.status_code == 404


@pytest.mark.asyncio
async def test_list_posts_with_status_filter(client):
    await create_post(client, title="Published One")
    await create_post(client, title="Draft One", published=False)

    everything = (await client.get(f"{BLOG}/posts", headers=AUTH)).json()
    drafts = (await client.get(f"{BLOG}/posts", params={"status": "draft"}, headers=AUTH)).json()
    unknown = (await client.get(f"{BLOG}/posts", params={"status": "archived"}, headers=AUTH)).json()

    assert everything["total"] == 2
    assert [p["title"] for p in drafts["posts"]] == ["Draft One"]
    assert unknown["total"] == 2


# ============================================================================
# Data export API
# ============================================================================

@pytest.mark.asyncio
async def test_export_products_page(client, catalog):
    response = await client.get(f"{EXPORT}/products", params={"pageSize": 2, "currentPage": 1}, headers=AUTH)

    data = response.json()
    assert response.status_code == 200
    assert data["total_count"] == 3
    assert data["page_size"] == 2
    assert len(data["products"]) == 2


@pytest.mark.asyncio
async def test_export_categories_and_pages(client, catalog):
    categories = (await client.get(f"{EXPORT}/categories", headers=AUTH)).json()
    pages = (await client.get(f"{EXPORT}/cms-pages", headers=AUTH)).json()

    assert categories["total_count"] == 2
    assert pages["pages"][0]["title"] == "About Us"


@pytest.mark.asyncio
async def test_export_connection(client):
    data = (await client.get(f"{EXPORT}/test", headers=AUTH)).json()

    assert data["success"] is True
    assert data["store_code"] == "default"


# ============================================================================
# Admin
# ============================================================================

@pytest.mark.asyncio
async def test_admin_product_sync(client, catalog, remote):
    data = (await client.post("/admin/sync/products", headers=AUTH)).json()

    assert data["success"] is True
    assert data["total_products"] == 2
    assert len(remote.calls("/api/public/magento/sync")) == 1


@pytest.mark.asyncio
async def test_admin_import(client, remote, remote_post):
    remote.posts = [remote_post("rd-1"), remote_post("rd-2", title="Second Post")]

    data = (await client.post("/admin/import/posts", headers=AUTH, params={"per_page": 2})).json()

    assert data["created_count"] == 2
    assert data["failed_count"] == 0


@pytest.mark.asyncio
async def test_admin_import_unauthorized(client, remote):
    remote.responses[("GET", "/api/public/posts")] = (401, {"detail": "bad key"})

    response = await client.post("/admin/import/posts", headers=AUTH)

    assert response.status_code == 401
    assert response.json()["error"] == "Invalid API key. Please check your credentials."


@pytest.mark.asyncio
async def test_admin_connection_test(client, remote):
    data = (await client.post("/admin/sync/test", headers=AUTH)).json()

    assert data == {"success": True, "message": "Connected successfully! Agent: Store Agent", "agent_name": "Store Agent"}


@pytest.mark.asyncio
async def test_admin_connection_test_invalid_key(client, remote):
    remote.responses[("POST", "/api/public/magento/test")] = (401, {"detail": "bad key"})

    data = (await client.post("/admin/sync/test", headers=AUTH, json={"api_key": "other-key"})).json()

    assert data["success"] is False
    assert data["message"] == "Invalid API key. Please check your credentials."
    assert remote.requests[0]["headers"]["x-requestdesk-api-key"] == "other-key"


@pytest.mark.asyncio
async def test_admin_product_links(client):
    post = await create_post(client)

    linked = await client.put(f"/admin/posts/{post['id']}/products", headers=AUTH, json={"product_ids": [10, 11, 10]})
    posts = (await client.get("/admin/products/11/posts", headers=AUTH)).json()

    assert linked.json()["product_ids"] == [10, 11]
    assert (await client.get(f"/admin/posts/{post['id']}/products", headers=AUTH)).json()["product_ids"] == [10, 11]
    assert [p["id"] for p in posts["posts"]] == [post["id"]]


@pytest.mark.asyncio
async def test_admin_related_posts(client, catalog):
    data = (await client.get("/admin/products/10/related-posts", headers=AUTH, params={"max_results": 3})).json()

    assert data["query"] == "Trail Boot"
    assert data["total"] == 1


@pytest.mark.asyncio
async def test_admin_related_posts_unknown_product(client):
    response = await client.get("/admin/products/404/related-posts", headers=AUTH)

    assert response.status_code == 404


@pytest.mark.asyncio
async def test_admin_sync_status(client):
    post = await create_post(client)

    ok = await client.post(f"/admin/posts/{post['id']}/sync-status", headers=AUTH, json={"status": "pending"})
    bad = await client.post(f"/admin/posts/{post['id']}/sync-status", headers=AUTH, json={"status": "done"})

    assert ok.json()["post"]["sync_status"] == "pending"
    assert bad.status_code == 422
    assert bad.json()["error"] == "Invalid sync status: done. Valid values are: pending, synced, failed"
