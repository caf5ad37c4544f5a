"""
Admin actions: product export, post import, connection tests, product
links and sync status.
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from typing import Optional
import logging

from api.dependencies import get_db, get_config, get_remote_client, verify_api_key
from core.config import RequestDeskConfig
from core.exceptions import AuthenticationError, SyncException, NotFoundError
from schemas.api import (
    ConnectionTestRequest,
    LinkedProductsResponse,
    LinkProductsRequest,
    PostPayload,
    PostResponse,
    RelatedPostsResponse,
    SyncStatusRequest,
)
from schemas.results import ExportResult, ImportResult
from sync.catalog_source import CatalogSource
from sync.client import RequestDeskClient
from sync.exporter import ExportOrchestrator
from sync.importer import ImportOrchestrator
from sync.post_management import PostManagement

logger = logging.getLogger(__name__)
router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(verify_api_key)]
)


# ============================================================================
# Product export
# ============================================================================

@router.post("/sync/products", response_model=ExportResult)
async def sync_products(
    request: Request,
    limit: Optional[int] = Query(None, ge=1, description="Only export the first N products"),
    product_id: Optional[int] = Query(None, description="Export a single product"),
    db: AsyncSession = Depends(get_db),
    config: RequestDeskConfig = Depends(get_config),
    client: RequestDeskClient = Depends(get_remote_client)
):
    request_id = getattr(request.state, "request_id", "-")
    logger.info(f"[{request_id}] Product export requested (limit={limit}, product_id={product_id})")

    exporter = ExportOrchestrator(db, config, client=client)
    if product_id is not None:
        return await exporter.export_one(product_id)
    return await exporter.export_all(limit=limit)


@router.post("/sync/test")
async def test_sync_connection(
    payload: Optional[ConnectionTestRequest] = None,
    config: RequestDeskConfig = Depends(get_config),
    client: RequestDeskClient = Depends(get_remote_client)
):
    """
    Test the catalog sync API, optionally with credentials that are not
    saved yet. Invalid keys get a distinct message from other failures.
    """
    overrides = payload.model_dump(exclude_none=True) if payload else {}
    test_config = config.model_copy(update=overrides) if overrides else config

    if not test_config.api_key or not test_config.endpoint_url:
        return {"success": False, "message": "API Key and Endpoint URL are required."}

    try:
        result = await RequestDeskClient(test_config, transport=client.transport).test_connection()
    except AuthenticationError as e:
        return {"success": False, "message": e.message}
    except SyncException as e:
        return {"success": False, "message": f"Connection failed: {e.message}"}

    agent = result.get("agent_name")
    message = f"Connected successfully! Agent: {agent}" if agent else result["message"]
    return {"success": True, "message": message, "agent_name": agent}


# ============================================================================
# Post import
# ============================================================================

@router.post("/import/posts", response_model=ImportResult)
async def import_posts(
    request: Request,
    status: Optional[str] = Query("publish", description="Remote status filter"),
    sync_status: Optional[str] = Query(None, description="Remote sync status filter"),
    page: int = Query(1, ge=1),
    per_page: int = Query(20, ge=1, le=100),
    db: AsyncSession = Depends(get_db),
    config: RequestDeskConfig = Depends(get_config),
    client: RequestDeskClient = Depends(get_remote_client)
):
    """Import one page; call again with the next page while has_more is true"""
    request_id = getattr(request.state, "request_id", "-")
    logger.info(f"[{request_id}] Post import requested (page={page}, per_page={per_page})")

    return await ImportOrchestrator(db, config, client=client).import_page(
        status_filter=status or None,
        sync_status_filter=sync_status or None,
        page=page,
        per_page=per_page
    )


@router.post("/import/test")
async def test_import_connection(client: RequestDeskClient = Depends(get_remote_client)):
    try:
        return await client.test_posts_connection()
    except AuthenticationError as e:
        return {"success": False, "error": e.message}
    except SyncException as e:
        return {"success": False, "error": f"Connection failed: {e.message}"}


# ============================================================================
# Product links
# ============================================================================

@router.get("/posts/{post_id}/products", response_model=LinkedProductsResponse)
async def get_linked_products(
    post_id: int,
    db: AsyncSession = Depends(get_db),
    config: RequestDeskConfig = Depends(get_config)
):
    management = PostManagement(db, config)
    await management.repository.get_by_id(post_id)
    return LinkedProductsResponse(post_id=post_id, product_ids=await management.get_linked_products(post_id))


@router.put("/posts/{post_id}/products", response_model=LinkedProductsResponse)
async def link_products(
    post_id: int,
    payload: LinkProductsRequest,
    db: AsyncSession = Depends(get_db),
    config: RequestDeskConfig = Depends(get_config)
):
    """Replace the linked products; list order becomes display order"""
    product_ids = await PostManagement(db, config).link_products(post_id, payload.product_ids)
    return LinkedProductsResponse(post_id=post_id, product_ids=product_ids)


@router.get("/products/{product_id}/posts")
async def get_posts_by_product(
    product_id: int,
    db: AsyncSession = Depends(get_db),
    config: RequestDeskConfig = Depends(get_config)
):
    posts = await PostManagement(db, config).get_posts_by_product(product_id)
    return {
        "success": True,
        "product_id": product_id,
        "posts": [PostPayload.from_record(post, config) for post in posts],
    }


@router.get("/products/{product_id}/related-posts", response_model=RelatedPostsResponse)
async def get_related_posts(
    product_id: int,
    max_results: int = Query(5, ge=1, le=20),
    db: AsyncSession = Depends(get_db),
    client: RequestDeskClient = Depends(get_remote_client)
):
    """Ask RequestDesk for posts related to the product's name"""
    product = await CatalogSource(db).product(product_id)
    if product is None:
        raise NotFoundError(f"Product with id {product_id} does not exist", context={"product_id": product_id})

    related = await client.related_posts(product.name, max_results)
    return RelatedPostsResponse(product_id=product_id, **related)


# ============================================================================
# Sync status
# ============================================================================

@router.post("/posts/{post_id}/sync-status", response_model=PostResponse)
async def update_sync_status(
    post_id: int,
    payload: SyncStatusRequest,
    db: AsyncSession = Depends(get_db),
    config: RequestDeskConfig = Depends(get_config)
):
    post = await PostManagement(db, config).update_sync_status(post_id, payload.status)
    return PostResponse(message="Sync status updated", post=PostPayload.from_record(post, config))
